"""
Prefect Portal - HTTP Middleware
Correlation ids, access logging, security headers and upload size limits
"""

import time
from typing import Callable, FrozenSet

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from prefect_portal.core.exceptions import ValidationError, error_response
from prefect_portal.core.logging_config import (
    generate_request_id,
    logger,
    set_request_id,
    set_user_id,
)

REQUEST_ID_HEADER = "X-Request-ID"

# Not worth an access log line
QUIET_PATHS: FrozenSet[str] = frozenset({"/", "/health", "/favicon.ico", "/docs", "/redoc", "/openapi.json"})
QUIET_PREFIXES = ("/media/",)

SLOW_REQUEST_MS = 1000


def should_skip_logging(path: str) -> bool:
    return path in QUIET_PATHS or path.startswith(QUIET_PREFIXES)


def client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One access log line per API request.

    The request id (incoming ``X-Request-ID`` or a fresh one) is bound to the
    logging context for the lifetime of the request and echoed back.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        set_request_id(request_id)
        path = request.url.path
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"{request.method} {path} raised {type(exc).__name__}",
                exc_info=True,
                extra={"event_type": "http_request_error", "http_method": request.method, "http_path": path},
            )
            raise
        else:
            duration_ms = (time.perf_counter() - start) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
            if not should_skip_logging(path):
                self._log(request, response.status_code, duration_ms)
            return response
        finally:
            set_request_id("")
            set_user_id("")

    @staticmethod
    def _log(request: Request, status_code: int, duration_ms: float) -> None:
        path = request.url.path
        logger.log_request(
            request.method,
            path,
            status_code,
            duration_ms,
            client_ip=client_host(request),
        )
        if duration_ms > SLOW_REQUEST_MS:
            logger.warning(
                f"Slow request: {request.method} {path} took {duration_ms:.0f}ms",
                extra={"event_type": "slow_request", "http_path": path, "duration_ms": duration_ms},
            )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """413 for bodies over ``max_size`` (avatars are the only large uploads)"""

    def __init__(self, app: ASGIApp, max_size: int = 10 * 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning(
                f"Rejected {declared} byte body on {request.url.path} (limit {self.max_size})",
                extra={"event_type": "request_too_large", "http_path": request.url.path},
            )
            error = ValidationError(f"Request body too large. Maximum size is {self.max_size // (1024 * 1024)}MB")
            error.code = "REQUEST_TOO_LARGE"
            return JSONResponse(status_code=413, content=error_response(error))
        return await call_next(request)
