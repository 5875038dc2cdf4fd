from __future__ import annotations

import copy
from typing import Any, Dict

from xrd_ingestor.core.definitions.models import ResourceDefinition, Scope

from ..detector import Detection, Dialect
from .base import StepGenerator

XRD_LABEL = "crossplane.io/xrd"
COMPOSITION_LABEL = "crossplane.io/composition"


class DirectStepGenerator(StepGenerator):
    """Creates the composite resource itself; compositions are picked by label."""

    create_step_id = "create-xr"
    resource_label = "XR"

    def is_compatible(self, definition: ResourceDefinition) -> bool:
        detection = self.detector.detect(definition)
        if detection.dialect != Dialect.MODERN or definition.spec.scope is None:
            return False
        return detection.scope in (Scope.CLUSTER, Scope.NAMESPACED)

    def create_step_name(self, kind: str) -> str:
        return f"Create {kind} XR"

    def identity_labels(self, definition: ResourceDefinition) -> Dict[str, Any]:
        return {XRD_LABEL: definition.name}

    def composition_fields(self, definition: ResourceDefinition, detection: Detection) -> Dict[str, Any]:
        match_labels = {XRD_LABEL: definition.name}
        ref = definition.spec.default_composition_ref
        if ref is not None and ref.name:
            match_labels[COMPOSITION_LABEL] = ref.name

        fields: Dict[str, Any] = {"compositionSelector": {"matchLabels": match_labels}}
        if self.config.resource_config:
            fields["resourceConfig"] = copy.deepcopy(self.config.resource_config)
        return fields
