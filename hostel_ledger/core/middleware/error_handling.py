"""
Exception handlers translating application, validation and database
errors into the JSON error envelope.
"""
import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from hostel_ledger.core.exceptions import BaseAppException
from hostel_ledger.core.logging import get_logger

logger = get_logger(__name__)


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    error_response: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "timestamp": int(time.time()),
        }
    }

    request_id = getattr(request.state, "request_id", None)
    if request_id:
        error_response["request_id"] = request_id

    return JSONResponse(status_code=status_code, content=error_response)


class GlobalExceptionHandler:
    """Exception handlers registered on the application"""

    @staticmethod
    async def handle_application_exception(
        request: Request, exception: BaseAppException
    ) -> JSONResponse:
        """Handle custom application exceptions"""
        logger.warning(
            f"Application exception: {exception.error_code.value} - {exception.message}",
            extra={
                "error_code": exception.error_code.value,
                "status_code": exception.status_code,
                "path": request.url.path,
                "method": request.method,
            }
        )
        return _error_response(
            request,
            exception.status_code,
            exception.error_code.value,
            exception.message,
            exception.details,
        )

    @staticmethod
    async def handle_validation_error(
        request: Request, exception: RequestValidationError
    ) -> JSONResponse:
        """Handle request body/query validation errors"""
        field_errors = {}
        for error in exception.errors():
            field_path = '.'.join(str(x) for x in error['loc'])
            field_errors[field_path] = {
                "message": error['msg'],
                "type": error['type'],
            }

        logger.warning(
            f"Validation error: {len(field_errors)} field(s) failed validation",
            extra={
                "validation_errors": field_errors,
                "path": request.url.path,
                "method": request.method,
            }
        )

        first_message = next(iter(field_errors.values()))["message"] if field_errors else None
        return _error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            "VALIDATION_ERROR",
            first_message or "Request validation failed",
            {"field_errors": field_errors, "error_count": len(field_errors)},
        )

    @staticmethod
    async def handle_database_error(
        request: Request, exception: SQLAlchemyError
    ) -> JSONResponse:
        """Handle database exceptions without leaking internals"""
        if isinstance(exception, IntegrityError):
            error_code = "INTEGRITY_CONSTRAINT_VIOLATION"
            message = "Database integrity constraint violation"
            status_code = status.HTTP_409_CONFLICT
        else:
            error_code = "DATABASE_ERROR"
            message = "Database operation failed"
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

        logger.error(
            f"Database exception: {error_code}",
            extra={
                "exception_type": type(exception).__name__,
                "path": request.url.path,
                "method": request.method,
            },
            exc_info=True
        )
        return _error_response(request, status_code, error_code, message)

    @staticmethod
    async def handle_unexpected_exception(
        request: Request, exception: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions"""
        logger.critical(
            f"Unexpected exception: {type(exception).__name__}",
            extra={
                "path": request.url.path,
                "method": request.method,
            },
            exc_info=True
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
        )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the global exception handlers to the application"""
    app.add_exception_handler(BaseAppException, GlobalExceptionHandler.handle_application_exception)
    app.add_exception_handler(RequestValidationError, GlobalExceptionHandler.handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, GlobalExceptionHandler.handle_database_error)
    app.add_exception_handler(Exception, GlobalExceptionHandler.handle_unexpected_exception)
