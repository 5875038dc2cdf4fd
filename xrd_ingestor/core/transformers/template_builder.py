from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Union

from xrd_ingestor.core.config import TransformerConfig
from xrd_ingestor.core.definitions.models import ResourceDefinition, Version

from .detector import Detection, VersionDetector
from .models import Link, ParameterSection, ProvisioningStep, Template, TemplateMetadata, TemplateOutput
from .naming import TEMPLATE_NAME_RE, sanitize_entity_name, with_version_suffix
from .references import Conditional, Interpolation, ParamRef, Reference, StepOutputRef
from .steps import CREATE_STEP_IDS, PUBLISH_STEP_ID, REGISTER_STEP_ID

DEFAULT_TAGS = ("crossplane", "infrastructure")

PR_CREATED_TEXT = "A pull request has been created for review."
DIRECT_COMMIT_TEXT = "Changes have been committed directly to the repository."

_Line = Union[str, Reference, Interpolation]


def split_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


def unique(items: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out


def _join_lines(lines: List[_Line]) -> Interpolation:
    parts: List[Union[str, Reference]] = []
    for i, line in enumerate(lines):
        if i:
            parts.append("\n")
        if isinstance(line, Interpolation):
            parts.extend(line.parts)
        else:
            parts.append(line)
    return Interpolation(tuple(parts))


class TemplateBuilder:
    """
    Assembles a scaffolder Template from upstream parameter sections and steps.

    Metadata (name, title, tags, annotations, links) is derived from the
    definition and its annotations; the output block links to the outputs of
    whichever steps were generated.
    """

    def __init__(self, detector: VersionDetector, config: Optional[TransformerConfig] = None):
        self.detector = detector
        self.config = config or TransformerConfig()

    def build(
        self,
        definition: ResourceDefinition,
        version: Version,
        parameter_sections: List[ParameterSection],
        steps: List[ProvisioningStep],
        detection: Optional[Detection] = None,
    ) -> Template:
        detection = detection or self.detector.detect(definition)
        return Template(
            metadata=self.build_metadata(definition, version, detection),
            type=self.config.template_type,
            parameters=list(parameter_sections),
            steps=list(steps),
            output=self.build_output(definition, steps, detection),
            owner=self.config.template_owner,
        )

    # ------------------------------------------------------------------
    # metadata
    # ------------------------------------------------------------------
    def _annotation(self, definition: ResourceDefinition, key: str) -> Optional[str]:
        annotations = definition.metadata.annotations
        return annotations.get(f"backstage.io/{key}") or annotations.get(f"{self.config.annotation_prefix}/{key}")

    def template_name(self, definition: ResourceDefinition, version: Version) -> str:
        cfg = self.config
        plural = definition.spec.names.plural

        if cfg.name_prefix or cfg.name_suffix:
            base = f"{cfg.name_prefix or ''}{plural}{cfg.name_suffix or '-template'}"
        else:
            base = self._annotation(definition, "template-name") or f"{plural}-template"

        name = sanitize_entity_name(base)
        if len(definition.spec.versions) > 1:
            name = with_version_suffix(name, version.name)
        return name

    def build_metadata(self, definition: ResourceDefinition, version: Version, detection: Detection) -> TemplateMetadata:
        kind = self.detector.resource_kind(definition, detection)

        title = self._annotation(definition, "title") or f"{kind} Template"
        if len(definition.spec.versions) > 1:
            title = f"{title} ({version.name})"

        description = self._annotation(definition, "description") or f"Create a {kind} resource via Crossplane"

        return TemplateMetadata(
            name=self.template_name(definition, version),
            title=title,
            description=description,
            tags=self.build_tags(definition, version, detection),
            annotations=self.build_annotations(definition, version, detection),
            links=self.build_links(definition),
        )

    def build_tags(self, definition: ResourceDefinition, version: Version, detection: Detection) -> List[str]:
        prefix = self.config.annotation_prefix
        labels = definition.metadata.labels
        annotations = definition.metadata.annotations

        tags: List[str] = list(DEFAULT_TAGS)
        tags += split_tags(labels.get(f"{prefix}/tags"))
        tags += split_tags(labels.get("backstage.io/tags"))
        tags += split_tags(annotations.get("backstage.io/tags"))
        tags += split_tags(annotations.get(f"{prefix}/tags"))
        tags.append(f"crossplane-{detection.dialect.value}")
        tags.append(detection.scope.value.lower())
        tags += self.config.additional_tags
        if version.deprecated:
            tags.append("deprecated")
        return unique(tags)

    def build_annotations(self, definition: ResourceDefinition, version: Version, detection: Detection) -> Dict[str, str]:
        source = definition.metadata.annotations
        out: Dict[str, str] = {
            "crossplane.io/xrd": definition.name,
            "crossplane.io/version": version.name,
            "crossplane.io/api-version": detection.dialect.value,
            "crossplane.io/scope": detection.scope.value,
            "crossplane.io/uses-claims": str(detection.uses_claims).lower(),
            "backstage.io/lifecycle": source.get("backstage.io/lifecycle") or self.config.lifecycle,
        }

        if version.deprecated:
            out["backstage.io/deprecated"] = "true"
        if not version.referenceable:
            out["crossplane.io/non-referenceable"] = "true"
        if version.has_schema:
            out["crossplane.io/has-schema"] = "true"

        for key in ("backstage.io/icon", "backstage.io/docs-url", "backstage.io/source-location"):
            if source.get(key):
                out[key] = source[key]

        out.update(self.config.additional_annotations)

        if definition.cluster_name:
            location = f"cluster: {definition.cluster_name}"
            out["backstage.io/managed-by-location"] = location
            out["backstage.io/managed-by-origin-location"] = location

        return out

    def build_links(self, definition: ResourceDefinition) -> List[Link]:
        prefix = self.config.annotation_prefix
        annotations = definition.metadata.annotations
        links: List[Link] = []

        for key, title, icon in (
            ("docs-url", "Documentation", "docs"),
            ("source-url", "Source Code", "github"),
            ("support-url", "Support", "help"),
        ):
            url = annotations.get(f"{prefix}/{key}")
            if url:
                links.append(Link(title=title, url=url, icon=icon))

        links += [Link(title=link.title, url=link.url, icon=link.icon) for link in self.config.additional_links]
        return links

    # ------------------------------------------------------------------
    # output
    # ------------------------------------------------------------------
    def build_output(
        self,
        definition: ResourceDefinition,
        steps: List[ProvisioningStep],
        detection: Detection,
    ) -> TemplateOutput:
        step_ids = {s.id for s in steps}
        links: List[Link] = []

        create_id = next((s.id for s in steps if s.id in CREATE_STEP_IDS), None)
        if self.config.kubernetes_ui_enabled and create_id:
            links.append(Link(title="View in Kubernetes", url=StepOutputRef(create_id, "resourceUrl")))

        publish = next((s for s in steps if s.id == PUBLISH_STEP_ID), None)
        create_pr = publish.input.get("createPr", ParamRef("createPr")) if publish is not None else None
        if publish is not None and create_pr is not False:
            links.append(Link(title="View Pull Request", url=StepOutputRef(PUBLISH_STEP_ID, "pullRequestUrl")))

        if REGISTER_STEP_ID in step_ids:
            links.append(Link(title="View in Catalog", url=StepOutputRef(REGISTER_STEP_ID, "entityRef")))

        return TemplateOutput(links=links, text=self.build_output_text(definition, detection, create_pr))

    def build_output_text(
        self,
        definition: ResourceDefinition,
        detection: Detection,
        create_pr: Union[None, bool, Reference] = None,
    ) -> Interpolation:
        """
        `create_pr` is the publish step's createPr input: None when nothing is
        published, a bool fixed by config, or the form parameter reference.
        """
        kind = self.detector.resource_kind(definition, detection)
        lines: List[_Line] = [
            f"## {kind} Created Successfully",
            "",
            "Your resource has been created with the following details:",
            Interpolation(("- **Name**: ", ParamRef("xrName"))),
        ]
        if detection.needs_namespace:
            lines.append(Interpolation(("- **Namespace**: ", ParamRef("namespace"))))
        lines.append(Interpolation(("- **Owner**: ", ParamRef("owner"))))
        if definition.is_multi_cluster:
            lines.append(Interpolation(("- **Cluster**: ", ParamRef("cluster"))))

        if create_pr is not None:
            if isinstance(create_pr, Reference):
                status: _Line = Conditional(create_pr, PR_CREATED_TEXT, DIRECT_COMMIT_TEXT)
            else:
                status = PR_CREATED_TEXT if create_pr else DIRECT_COMMIT_TEXT
            lines += ["", "### GitOps Status", status]

        if self.config.additional_output_text:
            lines.append("")
            lines += self.config.additional_output_text

        return _join_lines(lines)

    # ------------------------------------------------------------------
    # checks
    # ------------------------------------------------------------------
    def validate(self, template: Template) -> List[str]:
        errors: List[str] = []
        meta = template.metadata

        if not meta.name:
            errors.append("Template name is required")
        if not meta.title:
            errors.append("Template title is required")
        if not template.type:
            errors.append("Template type is required")
        if not template.parameters:
            errors.append("Template must have at least one parameter section")
        if not template.steps:
            errors.append("Template must have at least one step")

        for index, section in enumerate(template.parameters, start=1):
            if not section.title:
                errors.append(f"Parameter section {index} is missing a title")
            if not section.properties:
                errors.append(f'Parameter section "{section.title}" has no properties')

        for index, step in enumerate(template.steps, start=1):
            if not step.id:
                errors.append(f"Step {index} is missing an ID")
            if not step.action:
                errors.append(f'Step "{step.id or index}" is missing an action')

        if meta.name and not TEMPLATE_NAME_RE.match(meta.name):
            errors.append("Template name must contain only lowercase letters, numbers, and hyphens")

        return errors

    def merge_parameter_sections(self, sections: List[ParameterSection]) -> List[ParameterSection]:
        """Merge sections sharing a title, first occurrence wins the position."""
        merged: Dict[str, ParameterSection] = {}
        for section in sections:
            existing = merged.get(section.title)
            if existing is None:
                merged[section.title] = replace(
                    section,
                    properties=dict(section.properties),
                    required=list(section.required),
                )
                continue
            merged[section.title] = replace(
                existing,
                properties={**existing.properties, **section.properties},
                required=unique(list(existing.required) + list(section.required)),
                description=existing.description or section.description,
            )
        return list(merged.values())
