from .models import (
    ResourceDefinition,
    SchemaNode,
    Scope,
    Version,
)
from .loader import crd_to_definition, load_definition, load_definitions_yaml, load_document

__all__ = [
    "ResourceDefinition",
    "SchemaNode",
    "Scope",
    "Version",
    "crd_to_definition",
    "load_definition",
    "load_definitions_yaml",
    "load_document",
]
