from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from xrd_ingestor.core.config import TransformerConfig
from xrd_ingestor.core.definitions.models import ResourceDefinition, Version

from ..detector import Detection, VersionDetector
from ..models import ParameterSection, ProvisioningStep
from ..references import (
    TEMPLATE_NAME,
    USER_EMAIL,
    USER_NAME,
    ParamRef,
    StepOutputRef,
    YamlDocument,
    interp,
)
from ..schema_fields import SchemaField, fold_fields

FETCH_STEP_ID = "fetch"
GENERATE_MANIFEST_STEP_ID = "generate-manifest"
PUBLISH_STEP_ID = "publish-git"
FLUX_STEP_ID = "reconcile-flux"
ARGOCD_STEP_ID = "sync-argocd"
REGISTER_STEP_ID = "register"

DEFAULT_CREATE_ACTION = "kubernetes:apply"
DEFAULT_FLUX_KUSTOMIZATION = "catalog-orders"

NAME = ParamRef("xrName")
OWNER = ParamRef("owner")
NAMESPACE = ParamRef("namespace")
CLUSTER = ParamRef("cluster")


def _assoc_in(tree: Dict[str, Any], path: Tuple[str, ...], value: Any) -> Dict[str, Any]:
    head, rest = path[0], path[1:]
    if not rest:
        return {**tree, head: value}
    child = tree.get(head)
    return {**tree, head: _assoc_in(child if isinstance(child, dict) else {}, rest, value)}


def _map_field(spec: Dict[str, Any], field: SchemaField) -> Dict[str, Any]:
    return _assoc_in(spec, field.path, ParamRef(field.param_name))


class StepGenerator(ABC):
    """
    Builds the ordered step pipeline of a template.

    Subclasses decide what the created resource looks like (claim vs direct
    composite) and which definitions they accept; the optional fetch,
    publishing and registration steps are shared.
    """

    create_step_id = "create-resource"
    resource_label = "resource"

    def __init__(self, detector: VersionDetector, config: Optional[TransformerConfig] = None):
        self.detector = detector
        self.config = config or TransformerConfig()

    # ------------------------------------------------------------------
    # contract
    # ------------------------------------------------------------------
    def generate(
        self,
        definition: ResourceDefinition,
        version: Version,
        parameter_sections: List[ParameterSection],
        detection: Optional[Detection] = None,
    ) -> List[ProvisioningStep]:
        detection = detection or self.detector.detect(definition)
        steps: List[ProvisioningStep] = []

        if self.config.include_fetch:
            steps.append(self.fetch_step(detection))

        create = self.create_step(definition, version, detection)
        steps.append(create)

        if self.config.include_publishing and self.config.publish_phase is not None:
            steps.extend(self.publishing_steps(definition, detection, create))

        if self.config.include_register:
            steps.append(self.register_step())

        return steps

    @abstractmethod
    def is_compatible(self, definition: ResourceDefinition) -> bool:
        """Whether this generator can build the create step of `definition`."""

    def validate_config(self) -> List[str]:
        errors: List[str] = []
        cfg = self.config
        phase = cfg.publish_phase

        if cfg.include_publishing and phase is None:
            errors.append("Publishing is enabled but publishPhase config is missing")

        if phase is not None:
            if phase.git is not None and not phase.git.repo_url:
                errors.append("Git publishing is configured but repoUrl is missing")
            if phase.flux is not None and not phase.flux.kustomization:
                errors.append("Flux reconciliation is configured but kustomization is missing")
            if phase.argocd is not None and not phase.argocd.application:
                errors.append("ArgoCD sync is configured but application name is missing")

        if cfg.include_register and not cfg.publishes_to_git:
            errors.append("Catalog registration is enabled but no git publish step is configured")

        return errors

    # ------------------------------------------------------------------
    # variant hooks
    # ------------------------------------------------------------------
    def identity_labels(self, definition: ResourceDefinition) -> Dict[str, Any]:
        return {}

    def composition_fields(self, definition: ResourceDefinition, detection: Detection) -> Dict[str, Any]:
        return {}

    def create_step_name(self, kind: str) -> str:
        return f"Create {kind}"

    # ------------------------------------------------------------------
    # steps
    # ------------------------------------------------------------------
    def fetch_step(self, detection: Detection) -> ProvisioningStep:
        values: Dict[str, Any] = {"name": NAME, "owner": OWNER}
        if detection.needs_namespace:
            values["namespace"] = NAMESPACE
        return ProvisioningStep(
            id=FETCH_STEP_ID,
            name="Fetch Content",
            action="fetch:template",
            input={"url": "./content", "values": values},
        )

    def create_step(
        self,
        definition: ResourceDefinition,
        version: Version,
        detection: Detection,
    ) -> ProvisioningStep:
        kind = self.detector.resource_kind(definition, detection)

        step_input: Dict[str, Any] = {"manifest": self.build_manifest(definition, version, detection)}
        if definition.is_multi_cluster:
            step_input["cluster"] = CLUSTER
        if detection.needs_namespace:
            step_input["namespace"] = NAMESPACE

        return ProvisioningStep(
            id=self.create_step_id,
            name=self.create_step_name(kind),
            action=self.config.custom_create_action or DEFAULT_CREATE_ACTION,
            input=step_input,
        )

    def build_manifest(
        self,
        definition: ResourceDefinition,
        version: Version,
        detection: Detection,
    ) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"name": NAME}
        if detection.needs_namespace:
            metadata["namespace"] = NAMESPACE
        metadata["labels"] = {
            "app.kubernetes.io/managed-by": "backstage",
            "backstage.io/owner": OWNER,
            **self.identity_labels(definition),
        }
        metadata["annotations"] = {
            "backstage.io/created-by": USER_NAME,
            "backstage.io/template": TEMPLATE_NAME,
        }

        spec = self.map_spec_fields(version)
        spec.update(self.composition_fields(definition, detection))

        return {
            "apiVersion": f"{definition.spec.group}/{version.name}",
            "kind": self.detector.resource_kind(definition, detection),
            "metadata": metadata,
            "spec": spec,
        }

    def map_spec_fields(self, version: Version) -> Dict[str, Any]:
        spec_schema = version.spec_schema
        if spec_schema is None:
            return {}
        return fold_fields(spec_schema, _map_field, {})

    def publishing_steps(
        self,
        definition: ResourceDefinition,
        detection: Detection,
        create: ProvisioningStep,
    ) -> List[ProvisioningStep]:
        phase = self.config.publish_phase
        kind = self.detector.resource_kind(definition, detection)
        label = self.resource_label
        slug = label.lower()

        steps = [
            ProvisioningStep(
                id=GENERATE_MANIFEST_STEP_ID,
                name=f"Generate {label} Manifest",
                action="fetch:plain",
                input={
                    "targetPath": interp(f"./{slug}-", NAME, ".yaml"),
                    "content": YamlDocument(create.input["manifest"]),
                },
            )
        ]

        if phase.git is not None:
            git = phase.git
            if detection.needs_namespace:
                default_path = interp("namespaced/", NAMESPACE)
            else:
                default_path = "cluster"

            steps.append(
                ProvisioningStep(
                    id=PUBLISH_STEP_ID,
                    name=f"Publish {label} to Git",
                    action="publish:github:pull-request",
                    input={
                        "repoUrl": ParamRef("repoUrl"),
                        "title": interp(f"Create {kind} {label}: ", NAME),
                        "description": f"This PR creates a new {kind} {label} instance via GitOps",
                        "branchName": interp(f"create-{slug}-", NAME),
                        "gitCommitMessage": interp(f"feat: add {label} ", NAME),
                        "gitAuthorName": USER_NAME,
                        "gitAuthorEmail": USER_EMAIL,
                        "targetBranch": git.target_branch or ParamRef("gitBranch"),
                        "targetPath": git.target_path or default_path,
                        "createPr": git.create_pr if git.create_pr is not None else ParamRef("createPr"),
                    },
                )
            )

        if phase.flux is not None:
            steps.append(
                ProvisioningStep(
                    id=FLUX_STEP_ID,
                    name="Trigger Flux Reconciliation",
                    action="flux:reconcile",
                    input={
                        "kustomization": phase.flux.kustomization or DEFAULT_FLUX_KUSTOMIZATION,
                        "namespace": phase.flux.namespace,
                        "wait": True,
                    },
                )
            )

        if phase.argocd is not None:
            steps.append(
                ProvisioningStep(
                    id=ARGOCD_STEP_ID,
                    name="Sync ArgoCD Application",
                    action="argocd:sync",
                    input={
                        "application": phase.argocd.application,
                        "namespace": phase.argocd.namespace,
                        "revision": ParamRef("gitBranch"),
                        "prune": False,
                    },
                )
            )

        return steps

    def register_step(self) -> ProvisioningStep:
        return ProvisioningStep(
            id=REGISTER_STEP_ID,
            name="Register in Software Catalog",
            action="catalog:register",
            input={
                "repoContentsUrl": StepOutputRef(PUBLISH_STEP_ID, "repoContentsUrl"),
                "catalogInfoPath": "/catalog-info.yaml",
            },
        )
