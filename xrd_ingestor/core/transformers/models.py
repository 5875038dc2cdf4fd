from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .references import UNSET, Interpolation, Reference, render


TEMPLATE_API_VERSION = "scaffolder.backstage.io/v1beta3"
TEMPLATE_KIND = "Template"
API_ENTITY_API_VERSION = "backstage.io/v1alpha1"
API_ENTITY_KIND = "API"


@dataclass(frozen=True)
class ParameterProperty:
    title: str
    type: str
    description: Optional[str] = None
    default: Any = UNSET
    enum: Optional[List[Any]] = None
    enum_names: Optional[List[str]] = None
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None

    @property
    def has_default(self) -> bool:
        return self.default is not UNSET

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"title": self.title, "type": self.type}
        if self.description is not None:
            out["description"] = self.description
        if self.has_default:
            out["default"] = render(self.default)
        optional = (
            ("enum", None if self.enum is None else list(self.enum)),
            ("enumNames", None if self.enum_names is None else list(self.enum_names)),
            ("pattern", self.pattern),
            ("minLength", self.min_length),
            ("maxLength", self.max_length),
            ("minimum", self.minimum),
            ("maximum", self.maximum),
        )
        for key, value in optional:
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class ParameterSection:
    title: str
    properties: Dict[str, ParameterProperty] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"title": self.title}
        if self.description:
            out["description"] = self.description
        if self.required:
            out["required"] = list(self.required)
        out["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        return out


@dataclass(frozen=True)
class ProvisioningStep:
    id: str
    name: str
    action: str
    input: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "action": self.action,
            "input": render(self.input),
        }


@dataclass(frozen=True)
class Link:
    title: str
    url: Union[str, Reference, Interpolation]
    icon: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"title": self.title, "url": render(self.url)}
        if self.icon:
            out["icon"] = self.icon
        return out


@dataclass(frozen=True)
class TemplateOutput:
    links: List[Link] = field(default_factory=list)
    text: Union[str, Interpolation] = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "links": [link.to_dict() for link in self.links],
            "text": render(self.text),
        }


@dataclass(frozen=True)
class TemplateMetadata:
    name: str
    title: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    annotations: Dict[str, str] = field(default_factory=dict)
    links: List[Link] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "annotations": dict(self.annotations),
            "links": [link.to_dict() for link in self.links],
        }


@dataclass(frozen=True)
class Template:
    metadata: TemplateMetadata
    type: str
    parameters: List[ParameterSection]
    steps: List[ProvisioningStep]
    output: TemplateOutput
    owner: Optional[str] = None

    @property
    def name(self) -> str:
        return self.metadata.name

    def to_dict(self) -> Dict[str, Any]:
        spec: Dict[str, Any] = {"type": self.type}
        if self.owner:
            spec["owner"] = self.owner
        spec["parameters"] = [s.to_dict() for s in self.parameters]
        spec["steps"] = [s.to_dict() for s in self.steps]
        spec["output"] = self.output.to_dict()
        return {
            "apiVersion": TEMPLATE_API_VERSION,
            "kind": TEMPLATE_KIND,
            "metadata": self.metadata.to_dict(),
            "spec": spec,
        }


@dataclass(frozen=True)
class ApiEntityMetadata:
    name: str
    title: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    annotations: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "annotations": dict(self.annotations),
        }


@dataclass(frozen=True)
class ApiEntity:
    metadata: ApiEntityMetadata
    definition: Dict[str, Any]
    owner: str
    lifecycle: str = "production"
    system: Optional[str] = None
    type: str = "openapi"

    @property
    def name(self) -> str:
        return self.metadata.name

    def to_dict(self) -> Dict[str, Any]:
        spec: Dict[str, Any] = {
            "type": self.type,
            "lifecycle": self.lifecycle,
            "owner": self.owner,
        }
        if self.system:
            spec["system"] = self.system
        # The catalog stores API definitions as text.
        spec["definition"] = json.dumps(self.definition, indent=2)
        return {
            "apiVersion": API_ENTITY_API_VERSION,
            "kind": API_ENTITY_KIND,
            "metadata": self.metadata.to_dict(),
            "spec": spec,
        }


Entity = Union[Template, ApiEntity]
