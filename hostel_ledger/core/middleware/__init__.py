from hostel_ledger.core.middleware.error_handling import (
    GlobalExceptionHandler,
    register_exception_handlers,
)
from hostel_ledger.core.middleware.request_context import (
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
    get_request_id,
    register_middlewares,
)

__all__ = [
    "RequestContextMiddleware",
    "SecurityHeadersMiddleware",
    "register_middlewares",
    "get_request_id",
    "GlobalExceptionHandler",
    "register_exception_handlers",
]
