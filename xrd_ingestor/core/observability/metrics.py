from __future__ import annotations

from collections import Counter
from typing import Dict, Optional

from prometheus_client import Counter as PromCounter

# HTTP-level counters
_REQUESTS = Counter()

# Named counters (health probes, transformation outcomes)
_NAMED = Counter()

_PROM_ENTITIES = PromCounter(
    "xrd_ingestor_entities_generated_total",
    "Catalog entities generated from resource definitions",
    ["kind"],
)

_PROM_DEFINITIONS = PromCounter(
    "xrd_ingestor_definitions_total",
    "Resource definitions submitted for transformation",
    ["result"],
)


def reset_metrics() -> None:
    """
    Test helper: clears the in-process counters.
    Prometheus series are process-global and are left alone.
    """
    _REQUESTS.clear()
    _NAMED.clear()


def inc_http(method: str, path: str, status: Optional[int] = None) -> None:
    m = (method or "UNKNOWN").upper()
    p = path or "/"
    s = status if status is not None else "unknown"

    _REQUESTS["requests_total"] += 1
    _REQUESTS[f"requests_{m}"] += 1
    _REQUESTS[f"path_{p}"] += 1
    _REQUESTS[f"path_{p}|{s}"] += 1


def inc_named(name: str, value: int = 1) -> None:
    if not name:
        return
    _NAMED[name] += int(value)


def record_transformation(result: str, templates: int = 0, api_entities: int = 0) -> None:
    """Count one definition and the entities produced for it."""
    _PROM_DEFINITIONS.labels(result=result).inc()
    inc_named(f"definitions_{result}")
    if templates:
        _PROM_ENTITIES.labels(kind="Template").inc(templates)
        inc_named("templates_generated", templates)
    if api_entities:
        _PROM_ENTITIES.labels(kind="API").inc(api_entities)
        inc_named("api_entities_generated", api_entities)


def snapshot_requests() -> Dict[str, int]:
    return dict(_REQUESTS)


def snapshot_named() -> Dict[str, int]:
    return dict(_NAMED)
