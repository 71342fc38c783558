import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-ledger-suite")
os.environ.setdefault("ENABLE_STRUCTURED_LOGGING", "false")

from datetime import date
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hostel_ledger.api import deps
from hostel_ledger.core.security import jwt_manager
from hostel_ledger.main import create_app
from hostel_ledger.models import (
    Base,
    CheckIn,
    Hostel,
    HostelFeatureSetting,
    Room,
    Semester,
    Student,
    User,
)
from hostel_ledger.models.base.base_model import utcnow
from hostel_ledger.models.base.enums import HostelFeature, UserRole
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
from hostel_ledger.services.notification import EmailChannel, SmsChannel
from hostel_ledger.utils.email import EmailError
from hostel_ledger.utils.sms import SMSDeliveryError, SMSResult


class FakeEmailChannel(EmailChannel):
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send(self, to, subject, html):
        if self.fail:
            raise EmailError("SMTP server unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})


class FakeSmsChannel(SmsChannel):
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send(self, phone, message):
        if self.fail:
            raise SMSDeliveryError("Gateway rejected the message")
        self.sent.append({"phone": phone, "message": message})
        return SMSResult(success=True, message_id=str(len(self.sent)))


class Seeder:
    """Inserts fixture rows and commits them."""

    def __init__(self, session):
        self.session = session

    async def _add(self, entity):
        self.session.add(entity)
        await self.session.commit()
        return entity

    async def hostel(self, name="Sunrise Hostel", contact_phone="0700000001", markup=False):
        hostel = await self._add(Hostel(name=name, location="Kampala", contact_phone=contact_phone))
        if markup:
            await self._add(HostelFeatureSetting(
                hostel_id=hostel.id,
                feature_name=HostelFeature.CUSTODIAN_PRICE_MARKUP.value,
                enabled_for_owner=False,
                enabled_for_custodian=True,
            ))
        return hostel

    async def user(self, hostel, role=UserRole.HOSTEL_OWNER, username=None):
        return await self._add(User(
            username=username or f"{role.value.lower()}-{hostel.id if hostel else 'all'}",
            phone="0700000002",
            role=role.value,
            hostel_id=hostel.id if hostel else None,
        ))

    async def semester(self, hostel, name="Semester 1", active=True, start=date(2026, 1, 15)):
        return await self._add(Semester(
            hostel_id=hostel.id,
            name=name,
            start_date=start,
            is_active=active,
        ))

    async def room(self, hostel, name="A1", price="600000", capacity=2, active=True):
        return await self._add(Room(
            hostel_id=hostel.id,
            name=name,
            price=Decimal(price),
            capacity=capacity,
            is_active=active,
        ))

    async def student(self, hostel, semester, name="Jane Doe", reg=None, phone="0772123456", email=None):
        return await self._add(Student(
            hostel_id=hostel.id,
            semester_id=semester.id if semester else None,
            full_name=name,
            registration_number=reg or f"REG-{name.replace(' ', '').upper()}",
            phone=phone,
            email=email,
        ))

    async def closed_check_in(self, student):
        return await self._add(CheckIn(
            student_id=student.id,
            hostel_id=student.hostel_id,
            semester_id=student.semester_id,
            checked_out_at=utcnow(),
        ))


def principal_for(user):
    return Principal(user_id=user.id, role=user.user_role, hostel_id=user.hostel_id)


def token_for(user):
    return jwt_manager.create_access_token(user.id, user.user_role, user.hostel_id)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed(session):
    return Seeder(session)


@pytest.fixture
def email_channel():
    return FakeEmailChannel()


@pytest.fixture
def sms_channel():
    return FakeSmsChannel()


@pytest.fixture
def dispatcher(session, email_channel, sms_channel):
    return NotificationDispatcher(session, email_channel=email_channel, sms_channel=sms_channel)


@pytest.fixture
def allocation_service(session, dispatcher):
    return AllocationService(session, notifier=dispatcher)


@pytest.fixture
def payment_service(session, dispatcher):
    return PaymentLedgerService(session, notifier=dispatcher)


@pytest.fixture
def receipt_service(session):
    return ReceiptService(session)


@pytest.fixture
def check_in_service(session, dispatcher):
    return CheckInService(session, notifier=dispatcher)


@pytest.fixture
def semester_service(session):
    return SemesterService(session)


@pytest.fixture
def expense_service(session):
    return ExpenseService(session)


@pytest.fixture
def reporting_service(session):
    return ReportingService(session)


@pytest.fixture
async def hostel(seed):
    return await seed.hostel()


@pytest.fixture
async def semester(seed, hostel):
    return await seed.semester(hostel)


@pytest.fixture
async def owner(seed, hostel):
    return principal_for(await seed.user(hostel, UserRole.HOSTEL_OWNER))


@pytest.fixture
async def custodian(seed, hostel):
    return principal_for(await seed.user(hostel, UserRole.CUSTODIAN))


@pytest.fixture
async def super_admin(seed):
    return principal_for(await seed.user(None, UserRole.SUPER_ADMIN, username="root"))


@pytest.fixture
async def client(session_factory, email_channel, sms_channel):
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_email_channel] = lambda: email_channel
    app.dependency_overrides[deps.get_sms_channel] = lambda: sms_channel

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
