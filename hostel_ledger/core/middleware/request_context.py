"""
HTTP middleware: request correlation, access logging and response headers.

Every request gets an id (reused from ``X-Request-ID`` when a proxy set
one) that is stored on ``request.state``, bound to the logging context,
echoed in the response headers and included in error envelopes.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable, Dict, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from hostel_ledger.core.logging import get_logger
from hostel_ledger.core.logging import request_id as request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Assign the request id, time the request and write one access log line.

    The staff user id is put on ``request.state`` by the auth dependency.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        req_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        request.state.request_id = req_id

        rid_token = request_id_var.set(req_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error("Request failed", exc_info=True, extra={
                'method': request.method,
                'path': request.url.path,
            })
            raise
        else:
            elapsed = time.perf_counter() - started
            response.headers[self.header_name] = req_id
            response.headers[PROCESS_TIME_HEADER] = f"{elapsed:.4f}"
            log = logger.warning if response.status_code >= 500 else logger.info
            log("Request completed", extra={
                'method': request.method,
                'path': request.url.path,
                'status_code': response.status_code,
                'duration_ms': round(elapsed * 1000, 2),
                'staff_user_id': getattr(request.state, "staff_user_id", None),
            })
            return response
        finally:
            request_id_var.reset(rid_token)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add fixed security headers to every response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


def register_middlewares(app: FastAPI) -> None:
    """
    Install the middleware stack.

    Starlette runs middleware in reverse order of registration, so the
    request context is added last to wrap everything else.
    """
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)


def get_request_id(request: Request) -> Optional[str]:
    """Request id assigned by :class:`RequestContextMiddleware`, if any."""
    return getattr(request.state, "request_id", None)
