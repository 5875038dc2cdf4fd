"""
Loading resource definitions from fetcher payloads.

Accepts already-decoded mappings (the shape the Kubernetes API returns) or
YAML text with one or more documents. Plain CustomResourceDefinitions are
converted into the composite-definition shape so the same pipeline can
describe them.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from xrd_ingestor.core.errors import DefinitionError

from .models import ResourceDefinition

_log = logging.getLogger("xrd_ingestor.loader")

XRD_KIND = "CompositeResourceDefinition"
CRD_KIND = "CustomResourceDefinition"


def _format_validation_errors(exc: ValidationError) -> List[str]:
    out: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        out.append(f"{loc}: {err.get('msg')}")
    return out


def load_definition(raw: Dict[str, Any]) -> ResourceDefinition:
    if not isinstance(raw, dict):
        raise DefinitionError(f"Definition must be a mapping, got {type(raw).__name__}")

    metadata = raw.get("metadata")
    name = metadata.get("name") if isinstance(metadata, dict) else None
    try:
        return ResourceDefinition.model_validate(raw)
    except ValidationError as exc:
        errors = _format_validation_errors(exc)
        raise DefinitionError(
            f"Invalid resource definition {name or '<unnamed>'}: {'; '.join(errors)}",
            name=name,
            errors=errors,
        ) from exc


def crd_to_definition(
    crd: Dict[str, Any],
    *,
    cluster_name: Optional[str] = None,
) -> ResourceDefinition:
    """Re-shape a plain CRD so it can go through the composite pipeline."""
    spec = crd.get("spec") or {}
    metadata = crd.get("metadata") or {}

    origin = cluster_name or crd.get("clusterName")
    clusters = crd.get("clusters") or ([origin] if origin else [])

    shaped = {
        "apiVersion": crd.get("apiVersion") or "apiextensions.k8s.io/v1",
        "kind": XRD_KIND,
        "metadata": metadata,
        "spec": {
            "group": spec.get("group", ""),
            "names": spec.get("names") or {},
            # CRDs have no claims; an explicit scope keeps them on the direct path.
            "scope": spec.get("scope") or "Namespaced",
            "versions": spec.get("versions") or [],
        },
        "clusterName": origin,
        "clusters": clusters,
    }
    return load_definition(shaped)


def load_document(doc: Dict[str, Any], *, cluster_name: Optional[str] = None) -> Optional[ResourceDefinition]:
    """
    Load one decoded document by kind.

    CompositeResourceDefinitions load as-is, CustomResourceDefinitions go
    through `crd_to_definition`; other kinds are skipped with a warning and
    yield None.
    """
    if not isinstance(doc, dict):
        raise DefinitionError(f"Definition document must be a mapping, got {type(doc).__name__}")

    kind = doc.get("kind")
    if kind == CRD_KIND:
        return crd_to_definition(doc, cluster_name=cluster_name)
    if kind not in (XRD_KIND, None):
        _log.warning("Skipping document of kind %s (%s)", kind, (doc.get("metadata") or {}).get("name"))
        return None

    if cluster_name and not doc.get("clusterName"):
        doc = {**doc, "clusterName": cluster_name}
    return load_definition(doc)


def load_definitions_yaml(text: str, *, cluster_name: Optional[str] = None) -> List[ResourceDefinition]:
    """Parse every YAML document in `text` and load it with `load_document`."""
    try:
        docs = [d for d in yaml.safe_load_all(text or "") if d]
    except yaml.YAMLError as exc:
        raise DefinitionError(f"Definition YAML is not parseable: {exc}") from exc

    out: List[ResourceDefinition] = []
    for doc in docs:
        definition = load_document(doc, cluster_name=cluster_name)
        if definition is not None:
            out.append(definition)

    _log.debug("Loaded %d definitions from YAML", len(out))
    return out
