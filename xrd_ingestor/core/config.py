"""
Transformer configuration.

One immutable `TransformerConfig` is handed to the orchestrator at
construction and shared read-only by every component it builds.

File format (YAML or JSON, camelCase or snake_case keys):

    annotationPrefix: openportal.dev
    defaultOwner: platform-team
    additionalTags: [databases]
    includePublishing: true
    publishPhase:
      git:
        repoUrl: github.com?owner=acme&repo=catalog-orders
        targetBranch: main
      flux:
        kustomization: catalog-orders

Environment variables:
    XRD_INGESTOR_CONFIG_FILE        path to the file (optional)
    XRD_INGESTOR_DEFAULT_OWNER      overrides defaultOwner
    XRD_INGESTOR_ANNOTATION_PREFIX  overrides annotationPrefix
    XRD_INGESTOR_INCLUDE_PUBLISHING overrides includePublishing (1/true/yes)
    XRD_INGESTOR_ADDITIONAL_TAGS    comma-separated, overrides additionalTags
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from xrd_ingestor.core.errors import ConfigError

_log = logging.getLogger("xrd_ingestor.config")

DEFAULT_REPO_URL = "github.com?owner=open-service-portal&repo=catalog-orders"


class _ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class GitPublishConfig(_ConfigModel):
    repo_url: Optional[str] = None
    target_branch: Optional[str] = None
    target_path: Optional[str] = None
    create_pr: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("create_pr", "createPr", "createPR"),
    )


class FluxConfig(_ConfigModel):
    kustomization: Optional[str] = None
    namespace: str = "flux-system"


class ArgoCDConfig(_ConfigModel):
    application: Optional[str] = None
    namespace: str = "argocd"


class PublishPhaseConfig(_ConfigModel):
    git: Optional[GitPublishConfig] = None
    flux: Optional[FluxConfig] = None
    argocd: Optional[ArgoCDConfig] = None


class LinkConfig(_ConfigModel):
    url: str
    title: str
    icon: Optional[str] = None


class TransformerConfig(_ConfigModel):
    annotation_prefix: str = "openportal.dev"
    default_owner: str = "platform-team"
    additional_tags: List[str] = Field(default_factory=list)

    include_fetch: bool = False
    include_register: bool = False
    include_publishing: bool = False
    publish_phase: Optional[PublishPhaseConfig] = None

    convert_default_values_to_placeholders: bool = False

    # template shaping
    template_type: str = "crossplane-resource"
    template_owner: Optional[str] = None
    lifecycle: str = "production"
    kubernetes_ui_enabled: bool = True
    name_prefix: Optional[str] = None
    name_suffix: Optional[str] = None
    additional_annotations: Dict[str, str] = Field(default_factory=dict)
    additional_links: List[LinkConfig] = Field(default_factory=list)
    additional_output_text: List[str] = Field(default_factory=list)

    # step shaping
    custom_create_action: Optional[str] = None
    connection_secret_name: Optional[str] = None
    resource_config: Optional[Dict[str, Any]] = None

    api_system: str = "crossplane"

    @property
    def git(self) -> Optional[GitPublishConfig]:
        return self.publish_phase.git if self.publish_phase else None

    @property
    def publishes_to_git(self) -> bool:
        return self.include_publishing and self.git is not None


def _env_flag(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in ("1", "true", "yes")


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}

    owner = (os.getenv("XRD_INGESTOR_DEFAULT_OWNER") or "").strip()
    if owner:
        out["default_owner"] = owner

    prefix = (os.getenv("XRD_INGESTOR_ANNOTATION_PREFIX") or "").strip()
    if prefix:
        out["annotation_prefix"] = prefix

    publishing = _env_flag("XRD_INGESTOR_INCLUDE_PUBLISHING")
    if publishing is not None:
        out["include_publishing"] = publishing

    tags_raw = (os.getenv("XRD_INGESTOR_ADDITIONAL_TAGS") or "").strip()
    if tags_raw:
        out["additional_tags"] = [t.strip() for t in tags_raw.split(",") if t.strip()]

    return out


def _resolve_path(path: Optional[Path]) -> Optional[Path]:
    if path is not None:
        return Path(path)
    env_path = (os.getenv("XRD_INGESTOR_CONFIG_FILE") or "").strip()
    if env_path:
        return Path(env_path)
    return None


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} is not valid YAML/JSON: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Optional[Path] = None) -> TransformerConfig:
    """
    Build the transformer config from file + environment.

    Environment overrides win over the file. No file configured means
    defaults; a configured file that is missing is reported as a warning.
    """
    data: Dict[str, Any] = {}
    resolved = _resolve_path(path)
    if resolved is not None:
        if resolved.exists():
            data = _read_file(resolved)
            _log.info("Loaded transformer config from %s", resolved)
        else:
            _log.warning("Config file %s does not exist, using defaults", resolved)

    try:
        base = TransformerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid transformer config: {exc}") from exc

    overrides = _env_overrides()
    if overrides:
        _log.debug("Applying config overrides from environment: %s", sorted(overrides))
        base = base.model_copy(update=overrides)
    return base
