import pytest
from sqlalchemy import select

from hostel_ledger.core.exceptions import ConflictError, ErrorCode, ResourceNotFoundError
from hostel_ledger.models import AuditLog, CheckIn


async def test_check_in_sends_welcome_sms(session, seed, hostel, semester, owner, check_in_service, sms_channel):
    student = await seed.student(hostel, semester, name="Jane Doe")

    result = await check_in_service.check_in(owner, student.id)

    row = await session.get(CheckIn, result.check_in_id)
    assert row.is_open
    assert row.checked_in_by_user_id == owner.user_id
    assert result.sms_sent is True
    assert sms_channel.sent[0]["message"] == (
        "Welcome to Sunrise Hostel! Jane Doe, you're checked in. Have a great stay!"
    )


async def test_second_check_in_conflicts(seed, hostel, semester, owner, check_in_service):
    student = await seed.student(hostel, semester)
    await check_in_service.check_in(owner, student.id)

    with pytest.raises(ConflictError) as exc:
        await check_in_service.check_in(owner, student.id)
    assert exc.value.message == "Student is already checked in"
    assert exc.value.error_code == ErrorCode.ALREADY_CHECKED_IN


async def test_check_out_closes_open_check_in(session, seed, hostel, semester, owner, check_in_service, sms_channel):
    student = await seed.student(hostel, semester)
    checked_in = await check_in_service.check_in(owner, student.id)

    result = await check_in_service.check_out(owner, student.id)

    row = await session.get(CheckIn, checked_in.check_in_id)
    assert not row.is_open
    assert row.checked_out_by_user_id == owner.user_id
    assert result.sms_sent is True
    assert sms_channel.sent[-1]["message"].startswith("Thank you Jane Doe!")
    actions = (await session.execute(select(AuditLog.action))).scalars().all()
    assert actions == ["STUDENT_CHECKED_IN", "STUDENT_CHECKED_OUT"]


async def test_check_out_without_check_in(seed, hostel, semester, owner, check_in_service):
    student = await seed.student(hostel, semester)

    with pytest.raises(ResourceNotFoundError) as exc:
        await check_in_service.check_out(owner, student.id)
    assert exc.value.message == "Student is not currently checked in"


async def test_student_can_check_in_again_after_check_out(seed, hostel, semester, owner, check_in_service):
    student = await seed.student(hostel, semester)
    first = await check_in_service.check_in(owner, student.id)
    await check_in_service.check_out(owner, student.id)

    second = await check_in_service.check_in(owner, student.id)

    assert second.check_in_id != first.check_in_id


async def test_missing_phone_skips_sms(seed, hostel, semester, owner, check_in_service, sms_channel):
    student = await seed.student(hostel, semester, phone=None)

    result = await check_in_service.check_in(owner, student.id)

    assert result.sms_sent is False
    assert sms_channel.sent == []
