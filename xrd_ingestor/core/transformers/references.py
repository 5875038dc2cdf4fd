"""
Symbolic references embedded in generated templates.

Generators never write `${{ ... }}` strings themselves. They place reference
objects into step inputs, manifests and output text; `render` turns them
into the scaffolder's expression syntax when an artifact is serialized.
Tests compare the structured references directly.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Set, Tuple, Union

import yaml


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class Reference(ABC):
    @abstractmethod
    def expression(self) -> str:
        """Scaffolder expression without the surrounding braces."""

    def render(self) -> str:
        return "${{ " + self.expression() + " }}"


@dataclass(frozen=True)
class ParamRef(Reference):
    """Value the user entered for form parameter `name`."""

    name: str
    fallback: Any = UNSET

    def expression(self) -> str:
        if self.fallback is UNSET:
            return f"parameters.{self.name}"
        return f"parameters.{self.name} | default({json.dumps(self.fallback)})"


@dataclass(frozen=True)
class StepOutputRef(Reference):
    """Output `output` of an earlier step in the same template run."""

    step_id: str
    output: str

    def expression(self) -> str:
        return f'steps["{self.step_id}"].output.{self.output}'


@dataclass(frozen=True)
class ContextRef(Reference):
    """Scaffolder context value such as `user.entity.metadata.name`."""

    path: str

    def expression(self) -> str:
        return self.path


@dataclass(frozen=True)
class Conditional(Reference):
    condition: Reference
    when_true: str
    when_false: str

    def expression(self) -> str:
        return (
            f"{json.dumps(self.when_true)} if {self.condition.expression()} "
            f"else {json.dumps(self.when_false)}"
        )


@dataclass(frozen=True)
class Interpolation:
    """Literal text with references spliced in, e.g. `create-<xrName>`."""

    parts: Tuple[Union[str, Reference], ...]

    def render(self) -> str:
        return "".join(p if isinstance(p, str) else p.render() for p in self.parts)


@dataclass(frozen=True)
class YamlDocument:
    """A structure emitted as YAML text (references resolved first)."""

    payload: Any

    def render(self) -> str:
        body = yaml.safe_dump(render(self.payload), sort_keys=False, default_flow_style=False)
        return "---\n" + body


def interp(*parts: Union[str, Reference]) -> Interpolation:
    return Interpolation(tuple(parts))


USER_NAME = ContextRef("user.entity.metadata.name")
USER_EMAIL = ContextRef("user.entity.spec.profile.email")
TEMPLATE_NAME = ContextRef("template.metadata.name")


def render(value: Any) -> Any:
    if isinstance(value, (Reference, Interpolation, YamlDocument)):
        return value.render()
    if isinstance(value, dict):
        return {k: render(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [render(v) for v in value]
    return value


def iter_references(value: Any) -> Iterator[Reference]:
    if isinstance(value, Conditional):
        yield value
        yield from iter_references(value.condition)
    elif isinstance(value, Reference):
        yield value
    elif isinstance(value, Interpolation):
        for part in value.parts:
            yield from iter_references(part)
    elif isinstance(value, YamlDocument):
        yield from iter_references(value.payload)
    elif isinstance(value, dict):
        for v in value.values():
            yield from iter_references(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from iter_references(v)


def parameter_names(value: Any) -> Set[str]:
    return {r.name for r in iter_references(value) if isinstance(r, ParamRef)}
