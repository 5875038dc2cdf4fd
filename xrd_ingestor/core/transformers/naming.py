from __future__ import annotations

import re
from typing import Optional

TEMPLATE_NAME_RE = re.compile(r"^[a-z0-9-]+$")

# Kubernetes object names (RFC 1123 label).
K8S_NAME_PATTERN = "^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"
K8S_NAME_MAX_LENGTH = 63


def sanitize_entity_name(name: str) -> str:
    out = (name or "").lower()
    out = re.sub(r"[^a-z0-9-]", "-", out)
    out = re.sub(r"-+", "-", out)
    return out.strip("-")


def kubernetes_to_catalog_name(k8s_name: str) -> str:
    """`xpostgres.db.example.org` -> `xpostgres-db-example-org`."""
    return sanitize_entity_name((k8s_name or "").replace(".", "-"))


def with_version_suffix(name: str, version: Optional[str]) -> str:
    if not version:
        return name
    return f"{name}-{sanitize_entity_name(version)}"


def humanize_field_name(field_name: str) -> str:
    """`storageGB` -> `Storage G B`, `backup_retention-days` -> `Backup Retention Days`."""
    spaced = re.sub(r"([A-Z])", r" \1", field_name or "")
    spaced = re.sub(r"[_-]", " ", spaced)
    words = [w for w in spaced.split(" ") if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)
