from .api_entity_builder import ApiEntityBuilder
from .detector import Detection, Dialect, Variant, VersionDetector
from .models import ApiEntity, Entity, ParameterProperty, ParameterSection, ProvisioningStep, Template
from .parameter_extractor import ParameterExtractor
from .serialization import to_yaml, to_yaml_documents
from .steps import ClaimStepGenerator, DirectStepGenerator, StepGenerator
from .template_builder import TemplateBuilder
from .transformer import CanTransformResult, OutputMode, XRDTransformer

__all__ = [
    "ApiEntity",
    "ApiEntityBuilder",
    "CanTransformResult",
    "ClaimStepGenerator",
    "Detection",
    "Dialect",
    "DirectStepGenerator",
    "Entity",
    "OutputMode",
    "ParameterExtractor",
    "ParameterProperty",
    "ParameterSection",
    "ProvisioningStep",
    "StepGenerator",
    "Template",
    "TemplateBuilder",
    "Variant",
    "VersionDetector",
    "XRDTransformer",
    "to_yaml",
    "to_yaml_documents",
]
