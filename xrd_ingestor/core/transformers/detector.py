from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from xrd_ingestor.core.definitions.models import ResourceDefinition, Scope
from xrd_ingestor.core.errors import UnsupportedVariantError


class Dialect(str, Enum):
    LEGACY = "v1"
    MODERN = "v2"


class Variant(str, Enum):
    """Every supported (dialect, scope, uses_claims) combination."""

    LEGACY_CLAIM = "legacy-claim"
    MODERN_CLUSTER = "modern-cluster"
    MODERN_NAMESPACED = "modern-namespaced"
    LEGACY_COMPAT_CLAIM = "legacy-compat-claim"
    LEGACY_COMPAT_COMPOSITE = "legacy-compat-composite"


_VARIANTS: Dict[Tuple[Dialect, Scope, bool], Variant] = {
    (Dialect.LEGACY, Scope.CLUSTER, True): Variant.LEGACY_CLAIM,
    (Dialect.MODERN, Scope.CLUSTER, False): Variant.MODERN_CLUSTER,
    (Dialect.MODERN, Scope.NAMESPACED, False): Variant.MODERN_NAMESPACED,
    (Dialect.MODERN, Scope.LEGACY_COMPAT, True): Variant.LEGACY_COMPAT_CLAIM,
    (Dialect.MODERN, Scope.LEGACY_COMPAT, False): Variant.LEGACY_COMPAT_COMPOSITE,
}


@dataclass(frozen=True)
class Detection:
    dialect: Dialect
    scope: Scope
    uses_claims: bool

    @property
    def variant(self) -> Variant:
        key = (self.dialect, self.scope, self.uses_claims)
        if key not in _VARIANTS:
            raise UnsupportedVariantError(
                dialect=self.dialect.value,
                scope=self.scope.value,
                uses_claims=self.uses_claims,
            )
        return _VARIANTS[key]

    @property
    def needs_namespace(self) -> bool:
        return self.uses_claims or self.scope == Scope.NAMESPACED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.dialect.value,
            "scope": self.scope.value,
            "uses_claims": self.uses_claims,
        }


def _api_version_suffix(api_version: str) -> str:
    return (api_version or "").rsplit("/", 1)[-1]


class VersionDetector:
    """Classifies a definition's dialect, scope and claim usage."""

    def detect(self, definition: ResourceDefinition) -> Detection:
        explicit_scope = definition.spec.scope
        is_modern = _api_version_suffix(definition.api_version) == Dialect.MODERN.value or explicit_scope is not None
        dialect = Dialect.MODERN if is_modern else Dialect.LEGACY

        if explicit_scope is not None:
            scope = explicit_scope
        elif is_modern:
            scope = Scope.NAMESPACED
        else:
            scope = Scope.CLUSTER

        if dialect == Dialect.LEGACY:
            uses_claims = True
        elif scope == Scope.LEGACY_COMPAT:
            claim_names = definition.spec.claim_names
            uses_claims = bool(claim_names and claim_names.kind)
        else:
            uses_claims = False

        return Detection(dialect=dialect, scope=scope, uses_claims=uses_claims)

    def resource_kind(self, definition: ResourceDefinition, detection: Optional[Detection] = None) -> str:
        """Kind users create: the claim kind when claims are in use."""
        detection = detection or self.detect(definition)
        claim_names = definition.spec.claim_names
        if detection.uses_claims and claim_names and claim_names.kind:
            return claim_names.kind
        return definition.spec.names.kind

    def resource_plural(self, definition: ResourceDefinition, detection: Optional[Detection] = None) -> str:
        detection = detection or self.detect(definition)
        claim_names = definition.spec.claim_names
        if detection.uses_claims and claim_names and claim_names.plural:
            return claim_names.plural
        return definition.spec.names.plural

    def needs_namespace_parameter(self, definition: ResourceDefinition, detection: Optional[Detection] = None) -> bool:
        return (detection or self.detect(definition)).needs_namespace
