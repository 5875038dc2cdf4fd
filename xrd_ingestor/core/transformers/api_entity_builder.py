from __future__ import annotations

from typing import Any, Dict, List, Optional

from xrd_ingestor.core.config import TransformerConfig
from xrd_ingestor.core.definitions.models import ResourceDefinition, Scope, Version

from .detector import Detection, VersionDetector
from .models import ApiEntity, ApiEntityMetadata
from .naming import K8S_NAME_MAX_LENGTH, K8S_NAME_PATTERN, kubernetes_to_catalog_name, with_version_suffix
from .template_builder import split_tags, unique

OPENAPI_VERSION = "3.0.0"

_RESOURCE_REF = {"$ref": "#/components/schemas/Resource"}


def _namespace_param() -> Dict[str, Any]:
    return {"name": "namespace", "in": "path", "required": True, "schema": {"type": "string"}}


def _list_response(plural: str) -> Dict[str, Any]:
    return {
        "200": {
            "description": f"List of {plural}",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {"items": {"type": "array", "items": dict(_RESOURCE_REF)}},
                    }
                }
            },
        }
    }


def _create_body() -> Dict[str, Any]:
    return {"required": True, "content": {"application/json": {"schema": dict(_RESOURCE_REF)}}}


class ApiEntityBuilder:
    """Describes one served version of a definition as an OpenAPI-backed catalog API."""

    def __init__(self, detector: VersionDetector, config: Optional[TransformerConfig] = None):
        self.detector = detector
        self.config = config or TransformerConfig()

    def build(self, definition: ResourceDefinition, version: Version, detection: Optional[Detection] = None) -> ApiEntity:
        detection = detection or self.detector.detect(definition)
        return ApiEntity(
            metadata=self.build_metadata(definition, version, detection),
            definition=self.openapi_document(definition, version, detection),
            owner=self.config.default_owner,
            lifecycle=self.config.lifecycle,
            system=self.config.api_system,
        )

    def entity_name(self, definition: ResourceDefinition, version: Version) -> str:
        name = kubernetes_to_catalog_name(definition.name)
        if len(definition.spec.versions) > 1:
            name = with_version_suffix(name, version.name)
        return name

    def build_metadata(self, definition: ResourceDefinition, version: Version, detection: Detection) -> ApiEntityMetadata:
        kind = self.detector.resource_kind(definition, detection)
        prefix = self.config.annotation_prefix
        source = definition.metadata.annotations

        description = (
            source.get("backstage.io/description")
            or source.get(f"{prefix}/description")
            or f"Crossplane API for {kind} resources"
        )

        annotations = {
            "crossplane.io/xrd": definition.name,
            "crossplane.io/version": version.name,
            "crossplane.io/api-version": detection.dialect.value,
            "crossplane.io/scope": detection.scope.value,
            "crossplane.io/uses-claims": str(detection.uses_claims).lower(),
        }
        if source.get("backstage.io/source-location"):
            annotations["backstage.io/source-location"] = source["backstage.io/source-location"]

        return ApiEntityMetadata(
            name=self.entity_name(definition, version),
            title=f"{kind} API",
            description=description,
            tags=self.build_tags(definition, detection),
            annotations=annotations,
        )

    def build_tags(self, definition: ResourceDefinition, detection: Detection) -> List[str]:
        tags = ["crossplane", "kubernetes", "api", f"crossplane-{detection.dialect.value}", detection.scope.value.lower()]
        tags += split_tags(definition.metadata.labels.get(f"{self.config.annotation_prefix}/tags"))
        tags += self.config.additional_tags
        return unique(tags)

    # ------------------------------------------------------------------
    # OpenAPI
    # ------------------------------------------------------------------
    def openapi_document(self, definition: ResourceDefinition, version: Version, detection: Detection) -> Dict[str, Any]:
        kind = definition.spec.names.kind
        return {
            "openapi": OPENAPI_VERSION,
            "info": {
                "title": f"{kind} API",
                "version": version.name,
                "description": f"API for managing {kind} resources through Crossplane",
            },
            "paths": self.paths(definition, version, namespaced=detection.scope == Scope.NAMESPACED),
            "components": {"schemas": {"Resource": self.resource_schema(definition, version)}},
        }

    def paths(self, definition: ResourceDefinition, version: Version, *, namespaced: bool) -> Dict[str, Any]:
        plural = definition.spec.names.plural
        base = f"/apis/{definition.spec.group}/{version.name}"

        if namespaced:
            return {
                f"{base}/namespaces/{{namespace}}/{plural}": {
                    "get": {
                        "summary": f"List {plural} in a namespace",
                        "parameters": [_namespace_param()],
                        "responses": _list_response(plural),
                    },
                    "post": {
                        "summary": "Create a resource in a namespace",
                        "parameters": [_namespace_param()],
                        "requestBody": _create_body(),
                        "responses": {"201": {"description": "Resource created successfully"}},
                    },
                }
            }

        return {
            f"{base}/{plural}": {
                "get": {
                    "summary": f"List all {plural}",
                    "description": f"Returns a list of all {plural} resources in the cluster",
                    "responses": _list_response(plural),
                },
                "post": {
                    "summary": "Create a resource",
                    "description": "Creates a new resource",
                    "requestBody": _create_body(),
                    "responses": {"201": {"description": "Resource created successfully"}},
                },
            }
        }

    def resource_schema(self, definition: ResourceDefinition, version: Version) -> Dict[str, Any]:
        spec_schema = version.spec_schema
        spec = spec_schema.to_openapi() if spec_schema is not None else {
            "type": "object",
            "description": "Resource specification",
        }

        return {
            "type": "object",
            "required": ["apiVersion", "kind", "metadata", "spec"],
            "properties": {
                "apiVersion": {
                    "type": "string",
                    "enum": [f"{definition.spec.group}/{version.name}"],
                    "description": "API version of the resource",
                },
                "kind": {
                    "type": "string",
                    "enum": [definition.spec.names.kind],
                    "description": "Kind of the resource",
                },
                "metadata": {
                    "type": "object",
                    "required": ["name"],
                    "properties": {
                        "name": {
                            "type": "string",
                            "pattern": K8S_NAME_PATTERN,
                            "maxLength": K8S_NAME_MAX_LENGTH,
                            "description": "Name of the resource",
                        }
                    },
                },
                "spec": spec,
                "status": {
                    "type": "object",
                    "description": "Resource status",
                    "properties": {
                        "conditions": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "type": {"type": "string"},
                                    "status": {"type": "string", "enum": ["True", "False", "Unknown"]},
                                    "reason": {"type": "string"},
                                    "message": {"type": "string"},
                                },
                            },
                        }
                    },
                },
            },
        }
