from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


MODERN_API_VERSION = "apiextensions.crossplane.io/v2"
LEGACY_API_VERSION = "apiextensions.crossplane.io/v1"


class Scope(str, Enum):
    CLUSTER = "Cluster"
    NAMESPACED = "Namespaced"
    # Crossplane v2 compatibility mode for v1-style, claim-backed definitions.
    LEGACY_COMPAT = "LegacyCluster"


class SchemaNode(BaseModel):
    """
    One node of an OpenAPI v3 schema tree.

    Keys the pipeline does not interpret (x-kubernetes-*, additionalProperties,
    format, ...) are kept as extras so the tree can be re-emitted verbatim.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    type: Optional[str] = None
    description: Optional[str] = None
    properties: Dict[str, "SchemaNode"] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)
    items: Optional["SchemaNode"] = None
    enum: Optional[List[Any]] = None
    default: Any = None
    pattern: Optional[str] = None
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set

    @property
    def is_object_with_properties(self) -> bool:
        return self.type == "object" and bool(self.properties)

    @property
    def is_array_of_objects(self) -> bool:
        return self.type == "array" and self.items is not None and self.items.type == "object"

    def to_openapi(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class VersionSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    open_api_v3_schema: Optional[SchemaNode] = Field(default=None, alias="openAPIV3Schema")


class Version(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    served: bool = False
    referenceable: bool = False
    deprecated: bool = False
    version_schema: Optional[VersionSchema] = Field(default=None, alias="schema")

    @property
    def root_schema(self) -> Optional[SchemaNode]:
        if self.version_schema is None:
            return None
        return self.version_schema.open_api_v3_schema

    @property
    def spec_schema(self) -> Optional[SchemaNode]:
        """The `spec` subtree of the version schema, if declared."""
        root = self.root_schema
        if root is None:
            return None
        return root.properties.get("spec")

    @property
    def has_schema(self) -> bool:
        return self.root_schema is not None


class ResourceNames(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: str = ""
    plural: str = ""
    singular: Optional[str] = None
    list_kind: Optional[str] = Field(default=None, alias="listKind")


class CompositionReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str


class DefinitionMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = ""
    namespace: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    uid: Optional[str] = None


class DefinitionSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    group: str = ""
    names: ResourceNames = Field(default_factory=ResourceNames)
    claim_names: Optional[ResourceNames] = Field(default=None, alias="claimNames")
    scope: Optional[Scope] = None
    versions: List[Version] = Field(default_factory=list)
    default_composition_ref: Optional[CompositionReference] = Field(default=None, alias="defaultCompositionRef")
    connection_secret_keys: List[str] = Field(default_factory=list, alias="connectionSecretKeys")


class ResourceDefinition(BaseModel):
    """
    A composite resource definition as handed over by the cluster fetcher.

    `cluster_name` is the origin cluster; `clusters` lists every cluster the
    definition is installed on and drives multi-cluster parameterization.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    api_version: str = Field(default=LEGACY_API_VERSION, alias="apiVersion")
    kind: str = "CompositeResourceDefinition"
    metadata: DefinitionMetadata = Field(default_factory=DefinitionMetadata)
    spec: DefinitionSpec = Field(default_factory=DefinitionSpec)
    cluster_name: Optional[str] = Field(default=None, alias="clusterName")
    clusters: List[str] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def is_multi_cluster(self) -> bool:
        return len(self.clusters) > 1

    @property
    def served_versions(self) -> List[Version]:
        return [v for v in self.spec.versions if v.served]
