from __future__ import annotations

from fastapi import APIRouter
from starlette.responses import JSONResponse

from xrd_ingestor.api.deps import get_transformer
from xrd_ingestor.core.errors import ConfigError
from xrd_ingestor.core.observability.metrics import inc_named

router = APIRouter()


def _readiness():
    """
    Ready once the transformer config loads and passes its self-check.
    """
    inc_named("health_ready")
    problems: list[str] = []

    try:
        problems += get_transformer().validate_config()
    except ConfigError as e:
        problems.append(f"config_error:{e}")

    if problems:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "problems": problems},
        )
    return {"status": "ready"}


@router.get("/health/live")
async def live():
    inc_named("health_live")
    return {"status": "ok"}


@router.get("/health/ready")
def ready():
    return _readiness()
