"""
Walk over the form-relevant fields of a version's `spec` schema.

Parameter extraction and manifest mapping both fold over this walk, so they
agree on which fields exist and how they are named:

  - scalar and array-of-scalar fields at the top level are fields;
  - an object with declared properties is flattened one level, its children
    named `<parent>_<child>`;
  - arrays of objects, and objects nested below that level, are skipped.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple, TypeVar

from xrd_ingestor.core.definitions.models import SchemaNode

MAX_NESTED_DEPTH = 1

A = TypeVar("A")


@dataclass(frozen=True)
class SchemaField:
    path: Tuple[str, ...]
    node: SchemaNode
    required: bool

    @property
    def key(self) -> str:
        return self.path[-1]

    @property
    def param_name(self) -> str:
        return "_".join(self.path)


def fold_fields(
    node: SchemaNode,
    fn: Callable[[A, SchemaField], A],
    acc: A,
    *,
    _path: Tuple[str, ...] = (),
    _required: bool = True,
) -> A:
    for key, child in node.properties.items():
        path = _path + (key,)
        required = _required and key in node.required

        if child.is_array_of_objects:
            continue

        if child.is_object_with_properties:
            if len(path) <= MAX_NESTED_DEPTH:
                acc = fold_fields(child, fn, acc, _path=path, _required=required)
            continue

        acc = fn(acc, SchemaField(path=path, node=child, required=required))
    return acc
