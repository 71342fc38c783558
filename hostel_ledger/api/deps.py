"""
FastAPI dependencies: database session, current principal, audit context
and service factories.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.config.settings import settings
from hostel_ledger.core.database import get_db_session
from hostel_ledger.core.exceptions import AuthenticationError
from hostel_ledger.core.logging import user_id as user_id_var
from hostel_ledger.core.middleware import get_request_id
from hostel_ledger.core.security import jwt_manager
from hostel_ledger.repositories.base import AuditContext
from hostel_ledger.services import (
    AllocationService,
    CheckInService,
    ExpenseService,
    NotificationDispatcher,
    PaymentLedgerService,
    ReceiptService,
    ReportingService,
    SemesterService,
)
from hostel_ledger.services.common import Principal
from hostel_ledger.services.notification import (
    EmailChannel,
    GatewaySmsChannel,
    SmsChannel,
    SmtpEmailChannel,
)

# Bearer tokens; the access cookie is the fallback
bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------------ #
# DB
# ------------------------------------------------------------------ #
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


# ------------------------------------------------------------------ #
# Current principal
# ------------------------------------------------------------------ #
def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.ACCESS_COOKIE_NAME)


async def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """
    Resolve the authenticated staff member from the access token.

    Raises:
        AuthenticationError: no token presented (401)
        InvalidTokenError: token invalid, expired or carrying an unknown role (403)
    """
    token = _extract_token(request, credentials)
    if not token:
        raise AuthenticationError()

    claims = jwt_manager.decode_claims(token)
    user_id_var.set(str(claims.user_id))
    request.state.staff_user_id = claims.user_id
    return Principal(
        user_id=claims.user_id,
        role=claims.role,
        hostel_id=claims.hostel_id,
        metadata={"request_id": get_request_id(request)},
    )


def get_audit_context(request: Request) -> AuditContext:
    return AuditContext.from_headers(
        request.headers,
        client_host=request.client.host if request.client else None,
        request_id=get_request_id(request),
    )


# ------------------------------------------------------------------ #
# Notification channels
# ------------------------------------------------------------------ #
def get_email_channel() -> EmailChannel:
    return SmtpEmailChannel()


def get_sms_channel() -> SmsChannel:
    return GatewaySmsChannel()


def get_dispatcher(
    db: AsyncSession = Depends(get_db),
    email_channel: EmailChannel = Depends(get_email_channel),
    sms_channel: SmsChannel = Depends(get_sms_channel),
) -> NotificationDispatcher:
    return NotificationDispatcher(db, email_channel=email_channel, sms_channel=sms_channel)


# ------------------------------------------------------------------ #
# Service factories
# ------------------------------------------------------------------ #
def get_allocation_service(
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> AllocationService:
    return AllocationService(db, notifier=dispatcher)


def get_payment_service(
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> PaymentLedgerService:
    return PaymentLedgerService(db, notifier=dispatcher)


def get_receipt_service(db: AsyncSession = Depends(get_db)) -> ReceiptService:
    return ReceiptService(db)


def get_check_in_service(
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> CheckInService:
    return CheckInService(db, notifier=dispatcher)


def get_semester_service(db: AsyncSession = Depends(get_db)) -> SemesterService:
    return SemesterService(db)


def get_expense_service(db: AsyncSession = Depends(get_db)) -> ExpenseService:
    return ExpenseService(db)


def get_reporting_service(db: AsyncSession = Depends(get_db)) -> ReportingService:
    return ReportingService(db)


__all__ = [
    "get_db",
    "get_current_principal",
    "get_audit_context",
    "get_email_channel",
    "get_sms_channel",
    "get_dispatcher",
    "get_allocation_service",
    "get_payment_service",
    "get_receipt_service",
    "get_check_in_service",
    "get_semester_service",
    "get_expense_service",
    "get_reporting_service",
]
