from __future__ import annotations

from typing import Any, Dict

from xrd_ingestor.core.definitions.models import ResourceDefinition, Scope

from ..detector import Detection, Dialect
from .base import NAME, NAMESPACE, StepGenerator


class ClaimStepGenerator(StepGenerator):
    """Creates a claim (or a legacy-compatible composite) bound to a named composition."""

    create_step_id = "create-claim"
    resource_label = "Claim"

    def is_compatible(self, definition: ResourceDefinition) -> bool:
        detection = self.detector.detect(definition)
        if detection.dialect == Dialect.LEGACY:
            return True
        return detection.scope == Scope.LEGACY_COMPAT

    def identity_labels(self, definition: ResourceDefinition) -> Dict[str, Any]:
        return {"crossplane.io/claim-name": NAME}

    def composition_fields(self, definition: ResourceDefinition, detection: Detection) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}

        ref = definition.spec.default_composition_ref
        if ref is not None and ref.name:
            fields["compositionRef"] = {"name": ref.name}

        secret_name = self.config.connection_secret_name
        if secret_name:
            secret_ref: Dict[str, Any] = {"name": secret_name}
            if detection.needs_namespace:
                secret_ref["namespace"] = NAMESPACE
            fields["writeConnectionSecretToRef"] = secret_ref

        return fields
