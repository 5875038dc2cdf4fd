from __future__ import annotations

import logging
import traceback
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from xrd_ingestor.core.errors import ConfigError, DefinitionError

log = logging.getLogger("xrd_ingestor.errors")


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


def _shaped(status_code: int, payload: dict, rid: Optional[str]) -> JSONResponse:
    if rid:
        payload["request_id"] = rid
    return JSONResponse(status_code=status_code, content=payload)


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    Turns ingestor errors into JSON responses.

    - DefinitionError (bad input document) -> 422 with the validation messages
    - ConfigError (bad server-side transformer config) -> 500 with a short reason
    - anything else -> 500, traceback logged server-side only
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except DefinitionError as e:
            rid = _request_id(request)
            log.warning("Rejected definition %s rid=%s: %s", e.name, rid, e)
            return _shaped(422, {"detail": str(e), "errors": list(e.errors)}, rid)
        except ConfigError as e:
            rid = _request_id(request)
            log.error("Transformer config error rid=%s: %s", rid, e)
            return _shaped(500, {"detail": "Invalid transformer configuration"}, rid)
        except Exception as e:
            rid = _request_id(request)
            log.error(
                "Unhandled error: %s rid=%s path=%s\n%s",
                str(e),
                rid,
                request.url.path,
                traceback.format_exc(),
            )
            return _shaped(500, {"detail": "Internal Server Error"}, rid)
