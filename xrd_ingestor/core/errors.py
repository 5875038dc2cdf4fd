from __future__ import annotations

from typing import List, Optional


class XRDIngestorError(Exception):
    """Base class for errors raised by the ingestor."""


class DefinitionError(XRDIngestorError):
    def __init__(self, message: str, *, name: Optional[str] = None, errors: Optional[List[str]] = None):
        self.name = name
        self.errors = list(errors or [])
        super().__init__(message)


class UnsupportedVariantError(XRDIngestorError):
    def __init__(self, *, dialect: str, scope: str, uses_claims: bool):
        self.dialect = dialect
        self.scope = scope
        self.uses_claims = uses_claims
        super().__init__(
            f"No generation variant for dialect={dialect} scope={scope} uses_claims={uses_claims}"
        )


class ConfigError(XRDIngestorError):
    pass
