import pytest

from xrd_ingestor.core.definitions import Scope, load_definition
from xrd_ingestor.core.errors import UnsupportedVariantError
from xrd_ingestor.core.transformers.detector import Detection, Dialect, Variant, VersionDetector


def test_legacy_definition_always_uses_claims(legacy):
    d = VersionDetector().detect(legacy)
    assert d.dialect == Dialect.LEGACY
    assert d.scope == Scope.CLUSTER
    assert d.uses_claims is True
    assert d.variant == Variant.LEGACY_CLAIM


def test_legacy_without_claim_names_still_needs_namespace(docs):
    doc = docs.legacy()
    doc["spec"].pop("claimNames")
    d = VersionDetector().detect(load_definition(doc))
    assert d.uses_claims is True
    assert d.needs_namespace is True


def test_modern_namespaced(modern_namespaced):
    d = VersionDetector().detect(modern_namespaced)
    assert d.dialect == Dialect.MODERN
    assert d.variant == Variant.MODERN_NAMESPACED
    assert d.uses_claims is False
    assert d.needs_namespace is True


def test_modern_cluster_has_no_namespace(modern_cluster):
    d = VersionDetector().detect(modern_cluster)
    assert d.variant == Variant.MODERN_CLUSTER
    assert d.needs_namespace is False


def test_modern_api_version_without_scope_defaults_to_namespaced(docs):
    doc = docs.modern_namespaced()
    doc["spec"].pop("scope")
    d = VersionDetector().detect(load_definition(doc))
    assert d.dialect == Dialect.MODERN
    assert d.scope == Scope.NAMESPACED


def test_explicit_scope_marks_modern_dialect(docs):
    doc = docs.modern_cluster()
    doc["apiVersion"] = "apiextensions.crossplane.io/v1"
    d = VersionDetector().detect(load_definition(doc))
    assert d.dialect == Dialect.MODERN
    assert d.scope == Scope.CLUSTER


def test_legacy_compat_with_claim_names_uses_claims(legacy_compat):
    d = VersionDetector().detect(legacy_compat)
    assert d.dialect == Dialect.MODERN
    assert d.uses_claims is True
    assert d.variant == Variant.LEGACY_COMPAT_CLAIM


def test_legacy_compat_without_claim_names(docs):
    doc = docs.legacy_compat(with_claims=False)
    d = VersionDetector().detect(load_definition(doc))
    assert d.uses_claims is False
    assert d.variant == Variant.LEGACY_COMPAT_COMPOSITE
    assert d.needs_namespace is False


def test_resource_kind_prefers_claim(legacy, modern_namespaced):
    det = VersionDetector()
    assert det.resource_kind(legacy) == "FooClaim"
    assert det.resource_plural(legacy) == "fooclaims"
    assert det.resource_kind(modern_namespaced) == "Database"


def test_unknown_combination_is_rejected():
    d = Detection(dialect=Dialect.LEGACY, scope=Scope.NAMESPACED, uses_claims=False)
    with pytest.raises(UnsupportedVariantError):
        d.variant


def test_detection_to_dict(modern_cluster):
    assert VersionDetector().detect(modern_cluster).to_dict() == {
        "version": "v2",
        "scope": "Cluster",
        "uses_claims": False,
    }
