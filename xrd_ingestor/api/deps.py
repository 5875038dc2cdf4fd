from __future__ import annotations

import logging
from typing import Optional

from xrd_ingestor.core.config import load_config
from xrd_ingestor.core.transformers import XRDTransformer

_log = logging.getLogger("xrd_ingestor.api")

_TRANSFORMER: Optional[XRDTransformer] = None


def get_transformer() -> XRDTransformer:
    """
    Process-wide transformer, built from file + environment config on first use.
    Raises ConfigError while the config is broken; the next call retries.
    """
    global _TRANSFORMER
    if _TRANSFORMER is None:
        _TRANSFORMER = XRDTransformer(load_config())
        _log.info("Transformer ready (owner=%s)", _TRANSFORMER.config.default_owner)
    return _TRANSFORMER


def reset_transformer() -> None:
    """Test helper: forget the cached transformer so config is re-read."""
    global _TRANSFORMER
    _TRANSFORMER = None
