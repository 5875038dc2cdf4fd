from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from xrd_ingestor.core.config import DEFAULT_REPO_URL, TransformerConfig
from xrd_ingestor.core.definitions.models import ResourceDefinition, SchemaNode, Version

from .detector import Detection, VersionDetector
from .models import ParameterProperty, ParameterSection
from .naming import K8S_NAME_MAX_LENGTH, K8S_NAME_PATTERN, humanize_field_name
from .references import UNSET, ParamRef
from .schema_fields import SchemaField, fold_fields

METADATA_SECTION_TITLE = "Resource Metadata"
CONFIGURATION_SECTION_TITLE = "Resource Configuration"
PUBLISHING_SECTION_TITLE = "Publishing Configuration"

_TYPE_MAP = {
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "array": "array",
    "object": "object",
}


def map_schema_type(schema_type: Optional[str]) -> str:
    return _TYPE_MAP.get(schema_type or "string", "string")


@dataclass(frozen=True)
class _Collected:
    properties: Tuple[Tuple[str, ParameterProperty], ...] = ()
    required: Tuple[str, ...] = ()


class ParameterExtractor:
    def __init__(self, detector: VersionDetector, config: Optional[TransformerConfig] = None):
        self.detector = detector
        self.config = config or TransformerConfig()

    def extract(
        self,
        definition: ResourceDefinition,
        version: Version,
        detection: Optional[Detection] = None,
    ) -> List[ParameterSection]:
        detection = detection or self.detector.detect(definition)

        sections = [self.metadata_section(definition, detection)]

        configuration = self.configuration_section(version)
        if configuration is not None:
            sections.append(configuration)

        if self.config.include_publishing:
            sections.append(self.publishing_section())

        return sections

    def metadata_section(self, definition: ResourceDefinition, detection: Detection) -> ParameterSection:
        kind = self.detector.resource_kind(definition, detection)
        properties: Dict[str, ParameterProperty] = {
            "xrName": ParameterProperty(
                title="Name",
                type="string",
                description=f"Name for the {kind} resource",
                pattern=K8S_NAME_PATTERN,
                max_length=K8S_NAME_MAX_LENGTH,
            ),
            "owner": ParameterProperty(
                title="Owner",
                type="string",
                description="Owner of the resource (user or team)",
                default=self.config.default_owner,
            ),
        }

        if detection.needs_namespace:
            properties["namespace"] = ParameterProperty(
                title="Namespace",
                type="string",
                description="Kubernetes namespace for the resource",
                default="default",
                pattern=K8S_NAME_PATTERN,
            )

        if definition.is_multi_cluster:
            properties["cluster"] = ParameterProperty(
                title="Cluster",
                type="string",
                description="Target cluster for deployment",
                enum=list(definition.clusters),
                enum_names=list(definition.clusters),
            )

        return ParameterSection(
            title=METADATA_SECTION_TITLE,
            required=["xrName", "owner"],
            properties=properties,
        )

    def configuration_section(self, version: Version) -> Optional[ParameterSection]:
        spec_schema = version.spec_schema
        if spec_schema is None or not spec_schema.properties:
            return None

        collected = fold_fields(spec_schema, self._collect, _Collected())
        if not collected.properties:
            return None

        return ParameterSection(
            title=CONFIGURATION_SECTION_TITLE,
            description="Configure the resource specifications",
            required=list(collected.required),
            properties=dict(collected.properties),
        )

    def _collect(self, acc: _Collected, field: SchemaField) -> _Collected:
        prop = self.parameter_for(field)
        required = acc.required + ((field.param_name,) if field.required else ())
        return _Collected(
            properties=acc.properties + ((field.param_name, prop),),
            required=required,
        )

    def parameter_for(self, field: SchemaField) -> ParameterProperty:
        node: SchemaNode = field.node

        default = UNSET
        if node.has_default:
            if self.config.convert_default_values_to_placeholders:
                default = ParamRef(field.param_name, fallback=node.default)
            else:
                default = node.default

        enum = list(node.enum) if node.enum else None

        is_string = node.type in (None, "string")
        is_numeric = node.type in ("integer", "number")

        return ParameterProperty(
            title=" ".join(humanize_field_name(p) for p in field.path),
            type=map_schema_type(node.type),
            description=node.description or "",
            default=default,
            enum=enum,
            enum_names=[str(v) for v in enum] if enum else None,
            pattern=node.pattern,
            min_length=node.min_length if is_string else None,
            max_length=node.max_length if is_string else None,
            minimum=node.minimum if is_numeric else None,
            maximum=node.maximum if is_numeric else None,
        )

    def publishing_section(self) -> ParameterSection:
        git = self.config.git
        return ParameterSection(
            title=PUBLISHING_SECTION_TITLE,
            properties={
                "pushToGit": ParameterProperty(
                    title="Push to Git",
                    type="boolean",
                    description="Push the generated manifest to a Git repository",
                    default=True,
                ),
                "repoUrl": ParameterProperty(
                    title="Repository Location",
                    type="string",
                    description="Repository for the resource instance",
                    default=(git.repo_url if git and git.repo_url else DEFAULT_REPO_URL),
                ),
                "gitBranch": ParameterProperty(
                    title="Git Branch",
                    type="string",
                    description="Branch to commit to",
                    default=(git.target_branch if git and git.target_branch else "main"),
                ),
                "createPr": ParameterProperty(
                    title="Create Pull Request",
                    type="boolean",
                    description="Create a PR instead of direct commit",
                    default=True,
                ),
            },
        )
