from decimal import Decimal

import pytest
from sqlalchemy import func, select

from hostel_ledger.config.settings import settings
from hostel_ledger.core.exceptions import (
    AuthorizationError,
    DuplicatePaymentError,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_ledger.models import AuditLog, Payment
from hostel_ledger.models.base.enums import UserRole

from conftest import principal_for


async def allocate(seed, hostel, semester, owner, allocation_service, price="600000", capacity=2, **student_kwargs):
    room = await seed.room(hostel, name=f"R{capacity}-{price}", price=price, capacity=capacity)
    student = await seed.student(hostel, semester, **student_kwargs)
    result = await allocation_service.allocate(owner, student.id, room.id)
    return result.allocation_id


async def total_paid(session, allocation_id):
    result = await session.execute(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.allocation_id == allocation_id)
    )
    return Decimal(result.scalar_one())


async def test_partial_payment_updates_balance(session, seed, hostel, semester, owner, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)

    result = await payment_service.record_payment(owner, allocation_id, Decimal("100000"))

    assert result.total_required == Decimal("300000.00")
    assert result.total_paid == Decimal("100000.00")
    assert result.balance == Decimal("200000.00")
    payment = await session.get(Payment, result.payment_id)
    assert payment.recorded_by_user_id == owner.user_id
    assert payment.semester_id == semester.id
    assert payment.hostel_id == hostel.id


async def test_payment_equal_to_balance_settles_allocation(seed, hostel, semester, owner, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    await payment_service.record_payment(owner, allocation_id, Decimal("100000"))

    result = await payment_service.record_payment(owner, allocation_id, Decimal("200000"))

    assert result.balance == Decimal("0.00")


async def test_payment_above_balance_is_rejected(session, seed, hostel, semester, owner, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    await payment_service.record_payment(owner, allocation_id, Decimal("100000"))

    with pytest.raises(ValidationError) as exc:
        await payment_service.record_payment(owner, allocation_id, Decimal("200000.01"))

    assert exc.value.message == (
        "Payment amount (200,000.01) exceeds the outstanding balance (200,000). "
        "Maximum allowed: 200,000"
    )
    assert await total_paid(session, allocation_id) == Decimal("100000.00")


async def test_payment_after_settlement_is_rejected(seed, hostel, semester, owner, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    await payment_service.record_payment(owner, allocation_id, Decimal("300000"))

    with pytest.raises(ValidationError) as exc:
        await payment_service.record_payment(owner, allocation_id, Decimal("1000"))
    assert exc.value.message.startswith("This student has already completed their payment.")


async def test_shared_room_students_pay_independently(seed, hostel, semester, owner, allocation_service, payment_service):
    room = await seed.room(hostel, price="600000", capacity=2)
    alice = await seed.student(hostel, semester, name="Alice")
    bob = await seed.student(hostel, semester, name="Bob")
    alice_alloc = await allocation_service.allocate(owner, alice.id, room.id)
    bob_alloc = await allocation_service.allocate(owner, bob.id, room.id)

    assert alice_alloc.price_per_student == bob_alloc.price_per_student == Decimal("300000.00")

    alice_paid = await payment_service.record_payment(owner, alice_alloc.allocation_id, Decimal("300000"))
    bob_paid = await payment_service.record_payment(owner, bob_alloc.allocation_id, Decimal("150000"))

    assert alice_paid.balance == Decimal("0.00")
    assert bob_paid.balance == Decimal("150000.00")

    alice_summary = await payment_service.get_summary(owner, alice_alloc.allocation_id)
    assert alice_summary.balance == Decimal("0.00")
    assert alice_summary.student.full_name == "Alice"


async def test_identical_payment_within_window_is_duplicate(session, seed, hostel, semester, owner, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    first = await payment_service.record_payment(owner, allocation_id, Decimal("50000"))

    with pytest.raises(DuplicatePaymentError) as exc:
        await payment_service.record_payment(owner, allocation_id, Decimal("50000"))

    assert exc.value.payment_id == first.payment_id
    assert exc.value.status_code == 409
    assert exc.value.details == {"paymentId": first.payment_id}
    assert await total_paid(session, allocation_id) == Decimal("50000.00")


async def test_different_amount_within_window_is_accepted(seed, hostel, semester, owner, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    await payment_service.record_payment(owner, allocation_id, Decimal("50000"))

    result = await payment_service.record_payment(owner, allocation_id, Decimal("60000"))
    assert result.total_paid == Decimal("110000.00")


async def test_identical_payment_by_other_staff_is_accepted(seed, hostel, semester, owner, custodian, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    await payment_service.record_payment(owner, allocation_id, Decimal("50000"))

    result = await payment_service.record_payment(custodian, allocation_id, Decimal("50000"))
    assert result.total_paid == Decimal("100000.00")


async def test_identical_payment_after_window_is_accepted(monkeypatch, seed, hostel, semester, owner, allocation_service, payment_service):
    monkeypatch.setattr(settings, "PAYMENT_DEDUP_WINDOW_SECONDS", 0)
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    await payment_service.record_payment(owner, allocation_id, Decimal("50000"))

    result = await payment_service.record_payment(owner, allocation_id, Decimal("50000"))
    assert result.total_paid == Decimal("100000.00")


async def test_replayed_idempotency_key_is_duplicate(session, seed, hostel, semester, owner, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    first = await payment_service.record_payment(owner, allocation_id, Decimal("50000"), idempotency_key="pay-001")

    with pytest.raises(DuplicatePaymentError) as exc:
        await payment_service.record_payment(owner, allocation_id, Decimal("70000"), idempotency_key="pay-001")

    assert exc.value.payment_id == first.payment_id
    assert await total_paid(session, allocation_id) == Decimal("50000.00")


async def test_idempotency_key_is_scoped_to_the_allocation(session, seed, hostel, semester, owner, allocation_service, payment_service):
    first_allocation = await allocate(seed, hostel, semester, owner, allocation_service)
    other = await seed.hostel(name="Other Hostel")
    other_semester = await seed.semester(other)
    other_owner = principal_for(await seed.user(other, UserRole.HOSTEL_OWNER))
    second_allocation = await allocate(seed, other, other_semester, other_owner, allocation_service, name="John Roe")

    first = await payment_service.record_payment(owner, first_allocation, Decimal("1000"), idempotency_key="k-1")
    second = await payment_service.record_payment(other_owner, second_allocation, Decimal("2000"), idempotency_key="k-1")

    assert second.payment_id != first.payment_id
    assert await total_paid(session, first_allocation) == Decimal("1000.00")
    assert await total_paid(session, second_allocation) == Decimal("2000.00")

    with pytest.raises(DuplicatePaymentError) as exc:
        await payment_service.record_payment(other_owner, second_allocation, Decimal("3000"), idempotency_key="k-1")
    assert exc.value.details == {"paymentId": second.payment_id}


async def test_payment_writes_audit_row(session, seed, hostel, semester, owner, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    result = await payment_service.record_payment(owner, allocation_id, Decimal("50000"))

    audit = (await session.execute(
        select(AuditLog).where(AuditLog.action == "PAYMENT_RECORDED")
    )).scalar_one()
    assert audit.entity_type == "payment"
    assert audit.entity_id == result.payment_id
    assert audit.details["allocationId"] == allocation_id


async def test_payment_on_missing_allocation(owner, payment_service):
    with pytest.raises(ResourceNotFoundError) as exc:
        await payment_service.record_payment(owner, 404, Decimal("1000"))
    assert exc.value.message == "Allocation not found"


async def test_payment_on_other_hostel_allocation_is_forbidden(seed, hostel, semester, owner, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    other = await seed.hostel(name="Other Hostel")
    stranger = principal_for(await seed.user(other, UserRole.HOSTEL_OWNER))

    with pytest.raises(AuthorizationError):
        await payment_service.record_payment(stranger, allocation_id, Decimal("1000"))


async def test_super_admin_may_pay_any_hostel(seed, hostel, semester, owner, super_admin, allocation_service, payment_service):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)

    result = await payment_service.record_payment(super_admin, allocation_id, Decimal("1000"))
    assert result.total_paid == Decimal("1000.00")


async def test_receipt_sms_sent_after_payment(seed, hostel, semester, owner, allocation_service, payment_service, sms_channel):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)

    result = await payment_service.record_payment(owner, allocation_id, Decimal("100000"))

    assert result.receipt_sent is True
    assert result.sms_sent is True
    receipt_sms = sms_channel.sent[-1]["message"]
    assert receipt_sms.startswith(f"RECEIPT #RCP-{result.payment_id:06d}")
    assert "Paid: UGX 100,000" in receipt_sms
    assert "Balance: UGX 200,000" in receipt_sms


async def test_receipt_email_sent_when_student_has_email(seed, hostel, semester, owner, allocation_service, payment_service, email_channel):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service, email="jane@example.com")

    result = await payment_service.record_payment(owner, allocation_id, Decimal("100000"))

    assert result.email_sent is True
    receipt_mail = email_channel.sent[-1]
    assert receipt_mail["subject"] == f"Payment Receipt - RCP-{result.payment_id:06d} - Sunrise Hostel"
    assert "PAYMENT RECEIPT" in receipt_mail["html"]


async def test_failed_receipt_does_not_undo_payment(session, seed, hostel, semester, owner, allocation_service, payment_service, sms_channel):
    allocation_id = await allocate(seed, hostel, semester, owner, allocation_service)
    sms_channel.fail = True

    result = await payment_service.record_payment(owner, allocation_id, Decimal("100000"))

    assert result.receipt_sent is False
    assert await total_paid(session, allocation_id) == Decimal("100000.00")
