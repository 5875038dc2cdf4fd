import copy
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from xrd_ingestor.api.deps import reset_transformer
from xrd_ingestor.api.main import app
from xrd_ingestor.core.definitions import load_definition
from xrd_ingestor.core.observability.metrics import reset_metrics

_ENV_KEYS = (
    "XRD_INGESTOR_CONFIG_FILE",
    "XRD_INGESTOR_DEFAULT_OWNER",
    "XRD_INGESTOR_ANNOTATION_PREFIX",
    "XRD_INGESTOR_INCLUDE_PUBLISHING",
    "XRD_INGESTOR_ADDITIONAL_TAGS",
)


def _schema(spec_properties, required=None):
    spec = {"type": "object", "properties": spec_properties}
    if required:
        spec["required"] = required
    return {"openAPIV3Schema": {"type": "object", "properties": {"spec": spec}}}


DATABASE_SPEC = {
    "engine": {
        "type": "string",
        "description": "Database engine",
        "enum": ["postgres", "mysql"],
        "default": "postgres",
    },
    "storage": {
        "type": "integer",
        "description": "Storage in GB",
        "minimum": 10,
        "maximum": 1000,
        "default": 20,
    },
}


def modern_namespaced_doc():
    return {
        "apiVersion": "apiextensions.crossplane.io/v2",
        "kind": "CompositeResourceDefinition",
        "metadata": {"name": "databases.platform.example.org"},
        "spec": {
            "group": "platform.example.org",
            "names": {"kind": "Database", "plural": "databases"},
            "scope": "Namespaced",
            "defaultCompositionRef": {"name": "database-aws"},
            "versions": [
                {
                    "name": "v1alpha1",
                    "served": True,
                    "referenceable": True,
                    "schema": _schema(copy.deepcopy(DATABASE_SPEC), required=["engine"]),
                }
            ],
        },
    }


def modern_cluster_doc():
    doc = modern_namespaced_doc()
    doc["metadata"]["name"] = "networks.platform.example.org"
    doc["spec"]["names"] = {"kind": "Network", "plural": "networks"}
    doc["spec"]["scope"] = "Cluster"
    doc["spec"].pop("defaultCompositionRef")
    doc["spec"]["versions"][0]["schema"] = _schema({"cidr": {"type": "string", "pattern": "^[0-9./]+$"}})
    return doc


def legacy_doc():
    return {
        "apiVersion": "apiextensions.crossplane.io/v1",
        "kind": "CompositeResourceDefinition",
        "metadata": {"name": "xfoos.example.org"},
        "spec": {
            "group": "example.org",
            "names": {"kind": "XFoo", "plural": "xfoos"},
            "claimNames": {"kind": "FooClaim", "plural": "fooclaims"},
            "defaultCompositionRef": {"name": "foo-default"},
            "versions": [
                {
                    "name": "v1",
                    "served": True,
                    "referenceable": True,
                    "schema": _schema(
                        {
                            "size": {"type": "string", "enum": ["small", "large"]},
                            "network": {
                                "type": "object",
                                "required": ["cidr"],
                                "properties": {
                                    "cidr": {"type": "string"},
                                    "subnets": {
                                        "type": "object",
                                        "properties": {"count": {"type": "integer"}},
                                    },
                                },
                            },
                            "rules": {
                                "type": "array",
                                "items": {"type": "object", "properties": {"port": {"type": "integer"}}},
                            },
                            "tags": {"type": "array", "items": {"type": "string"}},
                        },
                        required=["size", "network"],
                    ),
                }
            ],
        },
    }


def legacy_compat_doc(with_claims=True):
    doc = legacy_doc()
    doc["apiVersion"] = "apiextensions.crossplane.io/v2"
    doc["spec"]["scope"] = "LegacyCluster"
    if not with_claims:
        doc["spec"].pop("claimNames")
    return doc


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_transformer()
    reset_metrics()
    yield
    reset_transformer()


@pytest.fixture()
def modern_namespaced():
    return load_definition(modern_namespaced_doc())


@pytest.fixture()
def modern_cluster():
    return load_definition(modern_cluster_doc())


@pytest.fixture()
def legacy():
    return load_definition(legacy_doc())


@pytest.fixture()
def legacy_compat():
    return load_definition(legacy_compat_doc())


@pytest.fixture()
def multi_cluster():
    doc = modern_namespaced_doc()
    doc["clusterName"] = "dev"
    doc["clusters"] = ["dev", "staging", "prod"]
    return load_definition(doc)


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def docs():
    """Raw definition documents, fresh on every call."""
    return SimpleNamespace(
        modern_namespaced=modern_namespaced_doc,
        modern_cluster=modern_cluster_doc,
        legacy=legacy_doc,
        legacy_compat=legacy_compat_doc,
    )
