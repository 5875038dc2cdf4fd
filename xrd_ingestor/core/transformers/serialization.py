from __future__ import annotations

from typing import Any, Dict, Iterable, List

import yaml

from .models import Entity
from .references import render

__all__ = ["render", "to_dict", "to_yaml", "to_yaml_documents"]


class _BlockDumper(yaml.SafeDumper):
    """Emit multi-line strings (output text, embedded manifests) as literal blocks."""


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.Node:
    if "\n" in value:
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


_BlockDumper.add_representer(str, _represent_str)


def to_dict(entity: Entity) -> Dict[str, Any]:
    return entity.to_dict()


def to_yaml(entity: Entity) -> str:
    return yaml.dump(entity.to_dict(), Dumper=_BlockDumper, sort_keys=False, default_flow_style=False)


def to_yaml_documents(entities: Iterable[Entity]) -> str:
    docs: List[Dict[str, Any]] = [e.to_dict() for e in entities]
    return yaml.dump_all(docs, Dumper=_BlockDumper, sort_keys=False, default_flow_style=False, explicit_start=True)
