from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from xrd_ingestor.api.observability.metrics import (
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_TOTAL,
    normalize_path,
)
from xrd_ingestor.core.observability.metrics import inc_http

log = logging.getLogger("xrd_ingestor.request")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Request id propagation plus request metrics.

    Adds:
      request.state.request_id
      response header: X-Request-Id
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = rid

        start = time.time()
        resp = await call_next(request)
        dur_ms = int((time.time() - start) * 1000)

        resp.headers["X-Request-Id"] = rid

        p = normalize_path(request.url.path)
        m = request.method.upper()
        s = resp.status_code
        HTTP_REQUESTS_TOTAL.labels(method=m, path=p, status=str(s)).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=m, path=p).observe(dur_ms / 1000.0)
        inc_http(m, p, s)

        if request.url.path.startswith("/api/"):
            log.info(
                "request rid=%s method=%s path=%s status=%s duration_ms=%d",
                rid,
                m,
                request.url.path,
                s,
                dur_ms,
            )
        return resp
