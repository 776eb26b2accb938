"""
HTTP middleware: request ids, access logging and body size limits.
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("api.access")

# Stripe event payloads are small; anything larger is not a webhook
MAX_BODY_SIZE = 1024 * 1024

QUIET_PATH_PREFIX = "/api/v1/health"


def _request_id(request: Request) -> str:
    """Caller-supplied X-Request-ID when it is a UUID, otherwise a fresh one."""
    incoming = request.headers.get("X-Request-ID")
    if incoming:
        try:
            return str(uuid.UUID(incoming))
        except ValueError:
            pass
    return str(uuid.uuid4())


def install_request_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def reject_oversized_bodies(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > MAX_BODY_SIZE:
            return JSONResponse(status_code=413, content={"detail": "Request body too large"})
        return await call_next(request)

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        request_id = _request_id(request)
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 1)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        if not request.url.path.startswith(QUIET_PATH_PREFIX):
            logger.info(
                "%s %s %s %.1fms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
        return response
