from __future__ import annotations

from fastapi import FastAPI

from xrd_ingestor.api.endpoints import config as config_ep
from xrd_ingestor.api.endpoints import definitions, health
from xrd_ingestor.api.endpoints import metrics as metrics_ep
from xrd_ingestor.api.middleware.error_shaping import SafeErrorMiddleware
from xrd_ingestor.api.middleware.request_context import RequestContextMiddleware

app = FastAPI(
    title="XRD Ingestor API",
    version="0.1.0",
)

# ------------------------------------------------------------
# Middleware stack
# Starlette reverses add_middleware order: the LAST call is the OUTERMOST wrapper.
# Runtime order: SafeErrorMiddleware -> RequestContext -> handler
# ------------------------------------------------------------
app.add_middleware(RequestContextMiddleware)
app.add_middleware(SafeErrorMiddleware)

app.include_router(health.router)
app.include_router(metrics_ep.router)
app.include_router(config_ep.router)
app.include_router(definitions.router)
