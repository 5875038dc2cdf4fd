"""
Definition -> catalog entities.

`XRDTransformer` wires the detector, parameter extraction, step generation
and the two builders together. Every served version is attempted on its
own: a version that raises or fails template validation is logged and
skipped, its siblings still produce output. Nothing raised inside a
transformation escapes `transform` or `transform_many`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from xrd_ingestor.core.config import TransformerConfig
from xrd_ingestor.core.definitions.models import ResourceDefinition, Version
from xrd_ingestor.core.errors import UnsupportedVariantError

from .api_entity_builder import ApiEntityBuilder
from .detector import Detection, Variant, VersionDetector
from .models import ApiEntity, Entity, Template
from .parameter_extractor import ParameterExtractor
from .steps import ClaimStepGenerator, DirectStepGenerator, StepGenerator
from .template_builder import TemplateBuilder

_log = logging.getLogger("xrd_ingestor.transformer")


class OutputMode(str, Enum):
    ALL = "all"
    TEMPLATES = "templates"
    API_ENTITIES = "api_entities"


@dataclass(frozen=True)
class CanTransformResult:
    valid: bool
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "reasons": list(self.reasons)}


class XRDTransformer:
    def __init__(self, config: Optional[TransformerConfig] = None):
        self.config = config or TransformerConfig()
        self.detector = VersionDetector()
        self.parameter_extractor = ParameterExtractor(self.detector, self.config)
        self.template_builder = TemplateBuilder(self.detector, self.config)
        self.api_entity_builder = ApiEntityBuilder(self.detector, self.config)

        claims = ClaimStepGenerator(self.detector, self.config)
        direct = DirectStepGenerator(self.detector, self.config)
        self.step_generators: Dict[Variant, StepGenerator] = {
            Variant.LEGACY_CLAIM: claims,
            Variant.MODERN_CLUSTER: direct,
            Variant.MODERN_NAMESPACED: direct,
            Variant.LEGACY_COMPAT_CLAIM: claims,
            Variant.LEGACY_COMPAT_COMPOSITE: claims,
        }

    def step_generator_for(self, detection: Detection) -> StepGenerator:
        variant = detection.variant
        try:
            return self.step_generators[variant]
        except KeyError:
            raise UnsupportedVariantError(
                dialect=detection.dialect.value,
                scope=detection.scope.value,
                uses_claims=detection.uses_claims,
            ) from None

    # ------------------------------------------------------------------
    # transformation
    # ------------------------------------------------------------------
    def transform(self, definition: ResourceDefinition, mode: OutputMode = OutputMode.ALL) -> List[Entity]:
        mode = OutputMode(mode)

        check = self.can_transform(definition)
        if not check.valid:
            _log.warning("Refusing to transform %s: %s", definition.name or "<unnamed>", "; ".join(check.reasons))
            return []

        try:
            detection = self.detector.detect(definition)
            self.step_generator_for(detection)
        except UnsupportedVariantError as exc:
            _log.warning("Refusing to transform %s: %s", definition.name, exc)
            return []

        entities: List[Entity] = []
        for version in definition.served_versions:
            if mode in (OutputMode.ALL, OutputMode.TEMPLATES):
                try:
                    template = self.transform_version(definition, version, detection)
                except Exception:
                    _log.exception("Template generation failed for %s version %s", definition.name, version.name)
                    template = None
                if template is not None:
                    entities.append(template)

            if mode in (OutputMode.ALL, OutputMode.API_ENTITIES):
                try:
                    entities.append(self.api_entity_builder.build(definition, version, detection))
                except Exception:
                    _log.exception("API entity generation failed for %s version %s", definition.name, version.name)

        _log.debug("Transformed %s into %d entities (mode=%s)", definition.name, len(entities), mode.value)
        return entities

    def transform_to_templates(self, definition: ResourceDefinition) -> List[Template]:
        return [e for e in self.transform(definition, OutputMode.TEMPLATES) if isinstance(e, Template)]

    def transform_to_api_entities(self, definition: ResourceDefinition) -> List[ApiEntity]:
        return [e for e in self.transform(definition, OutputMode.API_ENTITIES) if isinstance(e, ApiEntity)]

    def transform_version(
        self,
        definition: ResourceDefinition,
        version: Version,
        detection: Optional[Detection] = None,
    ) -> Optional[Template]:
        """
        Build and validate the template of one version.

        Returns None when the result breaks a template rule; exceptions from
        the components are left to the caller.
        """
        detection = detection or self.detector.detect(definition)
        generator = self.step_generator_for(detection)

        sections = self.parameter_extractor.extract(definition, version, detection)
        steps = generator.generate(definition, version, sections, detection)
        template = self.template_builder.build(definition, version, sections, steps, detection)

        errors = self.template_builder.validate(template)
        if errors:
            _log.warning(
                "Discarding template for %s version %s: %s",
                definition.name,
                version.name,
                "; ".join(errors),
            )
            return None
        return template

    def transform_many(
        self,
        definitions: Iterable[ResourceDefinition],
        mode: OutputMode = OutputMode.ALL,
    ) -> List[Entity]:
        out: List[Entity] = []
        for definition in definitions:
            try:
                out.extend(self.transform(definition, mode))
            except Exception:
                _log.exception("Transformation failed for %s", definition.name or "<unnamed>")
        _log.info("Transformed batch into %d entities", len(out))
        return out

    # ------------------------------------------------------------------
    # inspection
    # ------------------------------------------------------------------
    def preview(self, definition: ResourceDefinition) -> Dict[str, Any]:
        detection = self.detector.detect(definition)
        return {
            "name": definition.name,
            "version_info": detection.to_dict(),
            "template_count": len(definition.served_versions),
            "versions": [
                {
                    "name": v.name,
                    "served": v.served,
                    "deprecated": v.deprecated,
                    "has_schema": v.has_schema,
                }
                for v in definition.spec.versions
            ],
            "resource_kind": self.detector.resource_kind(definition, detection),
            "requires_namespace": detection.needs_namespace,
            "multi_cluster": definition.is_multi_cluster,
        }

    def can_transform(self, definition: ResourceDefinition) -> CanTransformResult:
        reasons: List[str] = []

        if not definition.metadata.name:
            reasons.append("XRD metadata.name is required")
        if not definition.spec.group:
            reasons.append("XRD spec.group is required")
        if not definition.spec.names.kind:
            reasons.append("XRD spec.names.kind is required")

        if not definition.spec.versions:
            reasons.append("XRD must have at least one version")
        else:
            served = definition.served_versions
            if not served:
                reasons.append("XRD must have at least one served version")
            for version in served:
                if not version.has_schema:
                    reasons.append(f"Served version {version.name} has no schema")

        return CanTransformResult(valid=not reasons, reasons=reasons)

    def validate_config(self) -> List[str]:
        errors: List[str] = []
        for generator in {id(g): g for g in self.step_generators.values()}.values():
            for error in generator.validate_config():
                if error not in errors:
                    errors.append(error)
        return errors
