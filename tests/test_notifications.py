from decimal import Decimal

from sqlalchemy import select

from hostel_ledger.models import MessageHistory
from hostel_ledger.models.base.enums import MessageType
from hostel_ledger.repositories.notification import MessageHistoryRepository
from hostel_ledger.services.notification import NotificationDispatcher
from hostel_ledger.services.notification import message_templates
from hostel_ledger.utils.sms import MAX_SMS_LENGTH_GSM, format_phone_number


def test_phone_numbers_are_normalised():
    assert format_phone_number("772123456") == "0772123456"
    assert format_phone_number("0772 123 456") == "0772123456"
    assert format_phone_number("256772123456") == "+256772123456"
    assert format_phone_number("+256-772-123-456") == "+256772123456"
    assert format_phone_number("7721234567") == "07721234567"
    assert format_phone_number("") is None
    assert format_phone_number("n/a") is None


def test_registration_sms_fits_one_segment():
    message = message_templates.create_registration_message(
        "Sunrise", "Jane Doe", "A1", Decimal("0"), Decimal("300000")
    )
    assert message == (
        "Dear Jane Doe, Welcome to Sunrise! Room: A1, Amount Paid: 0 UGX, "
        "Balance: 300,000 UGX. Thank you!"
    )


def test_long_registration_sms_is_shortened():
    message = message_templates.create_registration_message(
        "The Very Long Named Hostel Of Excellence",
        "Bartholomew Maximilian Ssebuggwawo Nakanjako",
        "Block-C Room 1024",
        Decimal("1500000"),
        Decimal("2500000"),
    )
    assert len(message) <= MAX_SMS_LENGTH_GSM
    assert "Balance: 2,500,000 UGX" in message


def test_check_in_and_out_messages():
    assert message_templates.create_check_in_message("Sunrise", "Jane") == (
        "Welcome to Sunrise! Jane, you're checked in. Have a great stay!"
    )
    checkout = message_templates.create_check_out_message("Sunrise", "Jane")
    assert checkout.startswith("Thank you Jane!")
    assert len(checkout) <= MAX_SMS_LENGTH_GSM


def test_registration_email_escapes_names():
    html = message_templates.create_registration_email(
        "Sunrise", "<b>Jane</b>", "A1", Decimal("0"), Decimal("300000")
    )
    assert "&lt;b&gt;Jane&lt;/b&gt;" in html
    assert "<b>Jane</b>" not in html


async def test_email_failure_falls_back_to_sms(session, email_channel, sms_channel):
    email_channel.fail = True
    dispatcher = NotificationDispatcher(session, email_channel=email_channel, sms_channel=sms_channel)

    result = await dispatcher.dispatch(
        student_id=None,
        email="jane@example.com",
        phone="0772123456",
        message_type=MessageType.RECEIPT,
        email_subject="Receipt",
        email_html="<p>Receipt</p>",
        sms_text="Receipt text",
        sent_by_user_id=1,
    )

    assert result.email_sent is False
    assert result.sms_sent is True
    assert result.delivered is True
    email_row = await session.get(MessageHistory, result.email_history_id)
    assert email_row.status == "failed"
    assert email_row.error_message == "SMTP server unavailable"
    assert sms_channel.sent == [{"phone": "0772123456", "message": "Receipt text"}]


async def test_invalid_email_is_recorded_as_failed(session, email_channel, sms_channel):
    dispatcher = NotificationDispatcher(session, email_channel=email_channel, sms_channel=sms_channel)

    result = await dispatcher.dispatch(
        student_id=None,
        email="not-an-address",
        phone=None,
        message_type=MessageType.REGISTRATION,
        email_subject="Welcome",
        email_html="<p>Hi</p>",
        sms_text="Hi",
    )

    assert result.delivered is False
    assert email_channel.sent == []
    row = await session.get(MessageHistory, result.email_history_id)
    assert row.error_message == "Invalid email address"


async def test_no_contact_details_sends_nothing(session, email_channel, sms_channel):
    dispatcher = NotificationDispatcher(session, email_channel=email_channel, sms_channel=sms_channel)

    result = await dispatcher.dispatch(
        student_id=None,
        email=None,
        phone=None,
        message_type=MessageType.REGISTRATION,
        email_subject="Welcome",
        email_html=None,
        sms_text="Hi",
    )

    assert result.delivered is False
    rows = (await session.execute(select(MessageHistory))).scalars().all()
    assert rows == []


async def test_sms_only_dispatch_records_history(session, email_channel, sms_channel):
    dispatcher = NotificationDispatcher(session, email_channel=email_channel, sms_channel=sms_channel)

    result = await dispatcher.send_sms(None, "772123456", MessageType.CHECK_IN, "Welcome!")

    assert result.sms_sent is True
    row = await session.get(MessageHistory, result.sms_history_id)
    assert row.channel == "sms"
    assert row.recipient == "0772123456"
    assert row.message_type == "CHECK_IN"


async def test_history_is_kept_per_student(session, seed, hostel, semester, email_channel, sms_channel):
    student = await seed.student(hostel, semester, email="jane@example.com")
    dispatcher = NotificationDispatcher(session, email_channel=email_channel, sms_channel=sms_channel)

    await dispatcher.dispatch(
        student_id=student.id,
        email=student.email,
        phone=student.phone,
        message_type=MessageType.REGISTRATION,
        email_subject="Welcome",
        email_html="<p>Welcome</p>",
        sms_text="Welcome",
    )
    await dispatcher.send_sms(student.id, student.phone, MessageType.CHECK_IN, "Checked in")

    history = await MessageHistoryRepository(session).list_for_student(student.id)
    check_ins = await MessageHistoryRepository(session).list_for_student(student.id, "CHECK_IN")

    assert [(row.channel, row.message_type) for row in history] == [
        ("email", "REGISTRATION"),
        ("sms", "CHECK_IN"),
    ]
    assert [row.content for row in check_ins] == ["Checked in"]
