from decimal import Decimal

import pytest
from sqlalchemy import func, select

from hostel_ledger.core.exceptions import (
    AuthorizationError,
    ConflictError,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_ledger.models import Allocation, AuditLog, MessageHistory, Payment
from hostel_ledger.models.base.enums import UserRole

from conftest import principal_for


async def count(session, model, *criteria):
    result = await session.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar_one()


async def test_allocate_freezes_per_student_price(session, seed, hostel, semester, owner, allocation_service):
    room = await seed.room(hostel, price="600000", capacity=2)
    student = await seed.student(hostel, semester)

    result = await allocation_service.allocate(owner, student.id, room.id)

    assert result.total_required == Decimal("300000.00")
    assert result.price_per_student == Decimal("300000.00")
    assert result.room_capacity == 2
    assert result.display_price_per_student is None

    allocation = await session.get(Allocation, result.allocation_id)
    assert allocation.room_price_at_allocation == Decimal("300000.00")
    assert allocation.semester_id == semester.id
    assert allocation.hostel_id == hostel.id


async def test_allocate_writes_audit_row(session, seed, hostel, semester, owner, allocation_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)

    result = await allocation_service.allocate(owner, student.id, room.id)

    audit = (await session.execute(
        select(AuditLog).where(AuditLog.entity_type == "allocation")
    )).scalar_one()
    assert audit.action == "ROOM_ALLOCATED"
    assert audit.entity_id == result.allocation_id
    assert audit.details == {"hostelId": hostel.id, "studentId": student.id, "roomId": room.id}
    assert audit.actor_user_id == owner.user_id


async def test_repeat_allocation_to_same_room_is_conflict(session, seed, hostel, semester, owner, allocation_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)
    await allocation_service.allocate(owner, student.id, room.id)

    with pytest.raises(ConflictError) as exc:
        await allocation_service.allocate(owner, student.id, room.id)

    assert "This operation is idempotent" in exc.value.message
    assert exc.value.status_code == 409
    assert await count(session, Allocation) == 1


async def test_allocation_to_different_room_names_existing_room(session, seed, hostel, semester, owner, allocation_service):
    first = await seed.room(hostel, name="A1")
    second = await seed.room(hostel, name="A2")
    student = await seed.student(hostel, semester)
    await allocation_service.allocate(owner, student.id, first.id)

    with pytest.raises(ConflictError) as exc:
        await allocation_service.allocate(owner, student.id, second.id)

    assert f"(room ID: {first.id})" in exc.value.message
    assert "remove the existing allocation first" in exc.value.message
    assert await count(session, Allocation) == 1


async def test_room_accepts_exactly_capacity(seed, hostel, semester, owner, allocation_service):
    room = await seed.room(hostel, capacity=2)
    students = [await seed.student(hostel, semester, name=f"Student {i}") for i in range(3)]

    await allocation_service.allocate(owner, students[0].id, room.id)
    await allocation_service.allocate(owner, students[1].id, room.id)

    with pytest.raises(ValidationError) as exc:
        await allocation_service.allocate(owner, students[2].id, room.id)
    assert exc.value.message == "Room is at full capacity (2/2). Cannot allocate more students."


async def test_checked_out_student_frees_seat(seed, hostel, semester, owner, allocation_service):
    room = await seed.room(hostel, capacity=1)
    leaver = await seed.student(hostel, semester, name="Leaver")
    newcomer = await seed.student(hostel, semester, name="Newcomer")

    await allocation_service.allocate(owner, leaver.id, room.id)
    await seed.closed_check_in(leaver)

    result = await allocation_service.allocate(owner, newcomer.id, room.id)
    assert result.allocation_id


async def test_capacity_is_per_semester(seed, hostel, semester, owner, allocation_service):
    other_semester = await seed.semester(hostel, name="Semester 2", active=False)
    room = await seed.room(hostel, capacity=1)
    first = await seed.student(hostel, semester, name="First")
    second = await seed.student(hostel, other_semester, name="Second")

    await allocation_service.allocate(owner, first.id, room.id)
    result = await allocation_service.allocate(owner, second.id, room.id)
    assert result.allocation_id


async def test_missing_or_inactive_room_is_not_found(seed, hostel, semester, owner, allocation_service):
    room = await seed.room(hostel, active=False)
    student = await seed.student(hostel, semester)

    with pytest.raises(ResourceNotFoundError) as exc:
        await allocation_service.allocate(owner, student.id, room.id)
    assert exc.value.message == "Room not found or inactive"


async def test_room_of_other_hostel_is_forbidden(seed, hostel, semester, owner, allocation_service):
    other = await seed.hostel(name="Other Hostel")
    room = await seed.room(other)
    student = await seed.student(hostel, semester)

    with pytest.raises(AuthorizationError) as exc:
        await allocation_service.allocate(owner, student.id, room.id)
    assert exc.value.message == "Room does not belong to your hostel"


async def test_student_of_other_hostel_is_forbidden(seed, hostel, semester, owner, allocation_service):
    other = await seed.hostel(name="Other Hostel")
    other_semester = await seed.semester(other)
    room = await seed.room(hostel)
    student = await seed.student(other, other_semester)

    with pytest.raises(AuthorizationError) as exc:
        await allocation_service.allocate(owner, student.id, room.id)
    assert exc.value.message == "Student does not belong to your hostel"


async def test_student_without_semester_is_rejected(seed, hostel, owner, allocation_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, None)

    with pytest.raises(ValidationError) as exc:
        await allocation_service.allocate(owner, student.id, room.id)
    assert exc.value.message == "Student is not registered for a semester"


async def test_super_admin_must_name_hostel(seed, hostel, semester, super_admin, allocation_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)

    with pytest.raises(ValidationError) as exc:
        await allocation_service.allocate(super_admin, student.id, room.id)
    assert exc.value.message == "hostelId is required"

    result = await allocation_service.allocate(super_admin, student.id, room.id, hostel_id=hostel.id)
    assert result.allocation_id


async def test_staff_without_hostel_is_rejected(seed, hostel, semester, allocation_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)
    orphan = principal_for(await seed.user(None, UserRole.HOSTEL_OWNER, username="orphan"))

    with pytest.raises(ValidationError) as exc:
        await allocation_service.allocate(orphan, student.id, room.id)
    assert exc.value.message == "User is not linked to a hostel"


async def test_display_price_requires_markup_feature(seed, hostel, semester, custodian, allocation_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)

    with pytest.raises(ValidationError) as exc:
        await allocation_service.allocate(custodian, student.id, room.id, display_price=Decimal("700000"))
    assert "custodian price markup feature is enabled" in exc.value.message


async def test_display_price_requires_custodian(seed, allocation_service):
    hostel = await seed.hostel(name="Markup Hostel", markup=True)
    semester = await seed.semester(hostel)
    owner = principal_for(await seed.user(hostel, UserRole.HOSTEL_OWNER))
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)

    with pytest.raises(AuthorizationError) as exc:
        await allocation_service.allocate(owner, student.id, room.id, display_price=Decimal("700000"))
    assert exc.value.message == "Only custodians can set display prices when the feature is enabled"


async def test_custodian_display_price_is_stored_per_student(session, seed, allocation_service):
    hostel = await seed.hostel(name="Markup Hostel", markup=True)
    semester = await seed.semester(hostel)
    custodian = principal_for(await seed.user(hostel, UserRole.CUSTODIAN))
    room = await seed.room(hostel, price="600000", capacity=2)
    student = await seed.student(hostel, semester)

    result = await allocation_service.allocate(custodian, student.id, room.id, display_price=Decimal("700000"))

    assert result.total_required == Decimal("300000.00")
    assert result.display_price_per_student == Decimal("350000.00")
    allocation = await session.get(Allocation, result.allocation_id)
    assert allocation.display_price_at_allocation == Decimal("350000.00")


async def test_display_price_below_cost_is_rejected(seed, allocation_service):
    hostel = await seed.hostel(name="Markup Hostel", markup=True)
    semester = await seed.semester(hostel)
    custodian = principal_for(await seed.user(hostel, UserRole.CUSTODIAN))
    room = await seed.room(hostel, price="600000", capacity=2)
    student = await seed.student(hostel, semester)

    with pytest.raises(ValidationError):
        await allocation_service.allocate(custodian, student.id, room.id, display_price=Decimal("500000"))


async def test_display_price_one_cent_below_cost_is_rejected_for_three_bed_room(session, seed, allocation_service):
    hostel = await seed.hostel(name="Markup Hostel", markup=True)
    semester = await seed.semester(hostel)
    custodian = principal_for(await seed.user(hostel, UserRole.CUSTODIAN))
    room = await seed.room(hostel, price="100", capacity=3)
    student = await seed.student(hostel, semester)

    with pytest.raises(ValidationError) as exc:
        await allocation_service.allocate(custodian, student.id, room.id, display_price=Decimal("99.99"))

    assert exc.value.message == "Display price cannot be less than the actual room price"
    assert await count(session, Allocation, Allocation.student_id == student.id) == 0


async def test_registration_sms_sent_when_student_has_no_email(session, seed, hostel, semester, owner, allocation_service, sms_channel):
    room = await seed.room(hostel, name="B12")
    student = await seed.student(hostel, semester, phone="772123456")

    result = await allocation_service.allocate(owner, student.id, room.id)

    assert result.sms_sent is True
    assert result.email_sent is False
    assert sms_channel.sent[0]["phone"] == "0772123456"
    assert "Room: B12" in sms_channel.sent[0]["message"]
    assert "Balance: 300,000 UGX" in sms_channel.sent[0]["message"]
    history = await session.get(MessageHistory, result.sms_history_id)
    assert history.status == "sent"
    assert history.message_type == "REGISTRATION"


async def test_registration_email_preferred(seed, hostel, semester, owner, allocation_service, email_channel, sms_channel):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester, email="jane@example.com")

    result = await allocation_service.allocate(owner, student.id, room.id)

    assert result.email_sent is True
    assert result.sms_sent is False
    assert email_channel.sent[0]["subject"] == "Welcome to Sunrise Hostel - Room Allocation"
    assert sms_channel.sent == []


async def test_notification_failure_does_not_fail_allocation(session, seed, hostel, semester, owner, allocation_service, email_channel, sms_channel):
    email_channel.fail = True
    sms_channel.fail = True
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester, email="jane@example.com")

    result = await allocation_service.allocate(owner, student.id, room.id)

    assert result.email_sent is False
    assert result.sms_sent is False
    assert await count(session, Allocation) == 1
    statuses = (await session.execute(select(MessageHistory.status))).scalars().all()
    assert sorted(statuses) == ["failed", "failed"]


async def test_checkout_keeps_payments(session, seed, hostel, semester, owner, allocation_service, payment_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)
    allocated = await allocation_service.allocate(owner, student.id, room.id)
    await payment_service.record_payment(owner, allocated.allocation_id, Decimal("100000"))

    result = await allocation_service.checkout(owner, allocated.allocation_id)

    assert result.allocation_id == allocated.allocation_id
    assert await count(session, Allocation) == 0
    assert await count(session, Payment, Payment.allocation_id == allocated.allocation_id) == 1
    audit = (await session.execute(
        select(AuditLog).where(AuditLog.action == "STUDENT_CHECKED_OUT")
    )).scalar_one()
    assert audit.details == {"hostelId": hostel.id, "studentId": student.id, "roomId": room.id}


async def test_checkout_of_missing_allocation(owner, allocation_service):
    with pytest.raises(ResourceNotFoundError) as exc:
        await allocation_service.checkout(owner, 999)
    assert exc.value.message == "Allocation not found"


async def test_checkout_of_other_hostel_allocation_is_forbidden(seed, hostel, semester, owner, allocation_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)
    allocated = await allocation_service.allocate(owner, student.id, room.id)
    other = await seed.hostel(name="Other Hostel")
    stranger = principal_for(await seed.user(other, UserRole.CUSTODIAN))

    with pytest.raises(AuthorizationError) as exc:
        await allocation_service.checkout(stranger, allocated.allocation_id)
    assert exc.value.message == "Allocation does not belong to your hostel"
