"""HTTP middleware for the Knowledge Import service."""

import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from knowledge_import.config import get_settings
from knowledge_import.utils.logging import get_logger, log_request, request_id_var

logger = get_logger("middleware")

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"


def _declared_size(request: Request) -> Optional[int]:
    value = request.headers.get("content-length")
    return int(value) if value and value.isdigit() else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Bind a request id for the duration of the request and log the outcome.

    The id comes from ``X-Request-ID`` when the client sends one. It is echoed
    back, along with the processing time, on every response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - started) * 1000

            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers[PROCESS_TIME_HEADER] = f"{duration_ms:.2f}ms"
            log_request(
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
                upload_bytes=_declared_size(request),
            )
            return response
        finally:
            request_id_var.reset(token)


def setup_middleware(app: FastAPI) -> None:
    """Register CORS and the request context middleware.

    The last middleware added runs first, so request ids are bound before
    CORS handles preflight requests.
    """
    origins = get_settings().cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, PROCESS_TIME_HEADER],
    )
    app.add_middleware(RequestContextMiddleware)

    logger.info(f"Middleware configured: CORS origins={', '.join(origins)}")
