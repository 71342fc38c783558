"""
Student-facing message texts.

SMS texts must fit a single GSM segment; longer variants are shortened
step by step until they do.
"""

from decimal import Decimal

from hostel_ledger.config.settings import settings
from hostel_ledger.utils.formatters import format_amount, format_short_date, truncate
from hostel_ledger.utils.sms import MAX_SMS_LENGTH_GSM

from hostel_ledger.services.notification.templates import template_engine


def registration_subject(hostel_name: str) -> str:
    return f"Welcome to {hostel_name} - Room Allocation"


def receipt_subject(receipt_number: str, hostel_name: str) -> str:
    return f"Payment Receipt - {receipt_number} - {hostel_name}"


def create_registration_email(
    hostel_name: str,
    student_name: str,
    room_number: str,
    amount_paid: Decimal,
    balance: Decimal,
) -> str:
    return template_engine.render("registration_email.html", {
        "hostel_name": hostel_name,
        "student_name": student_name,
        "room_number": room_number,
        "amount_paid": amount_paid,
        "balance": balance,
    })


def create_registration_message(
    hostel_name: str,
    student_name: str,
    room_number: str,
    amount_paid: Decimal,
    balance: Decimal,
) -> str:
    """
    Welcome SMS sent when a room is allocated.

    >>> create_registration_message("Sunrise", "Jane Doe", "A1", Decimal(0), Decimal(300000))
    'Dear Jane Doe, Welcome to Sunrise! Room: A1, Amount Paid: 0 UGX, Balance: 300,000 UGX. Thank you!'
    """
    currency = settings.CURRENCY
    hostel = truncate(hostel_name, 20, 17)
    name = truncate(student_name, 30, 27)
    paid = format_amount(amount_paid)
    left = format_amount(balance)

    message = (
        f"Dear {name}, Welcome to {hostel}! Room: {room_number}, "
        f"Amount Paid: {paid} {currency}, Balance: {left} {currency}. Thank you!"
    )
    if len(message) <= MAX_SMS_LENGTH_GSM:
        return message

    def short(n: str, h: str) -> str:
        return (
            f"Dear {n}, Welcome to {h}! Room: {room_number}, "
            f"Paid: {paid} {currency}, Balance: {left} {currency}. Thank you!"
        )

    message = short(name, hostel)
    if len(message) > MAX_SMS_LENGTH_GSM:
        room_for_name = MAX_SMS_LENGTH_GSM - (len(message) - len(name))
        name = name[:max(15, room_for_name - 3)] + "..."
        message = short(name, hostel)
    if len(message) > MAX_SMS_LENGTH_GSM:
        message = short(name, truncate(hostel, 15, 12))
    return message[:MAX_SMS_LENGTH_GSM]


def create_check_in_message(hostel_name: str, student_name: str) -> str:
    hostel = truncate(hostel_name, 20, 17)
    name = truncate(student_name, 25, 22)

    message = f"Welcome to {hostel}! {name}, you're checked in. Have a great stay!"
    if len(message) > MAX_SMS_LENGTH_GSM:
        message = f"Welcome {truncate(name, 20, 17)}! Checked in at {truncate(hostel, 15, 12)}."
    return message[:MAX_SMS_LENGTH_GSM]


def create_check_out_message(hostel_name: str, student_name: str) -> str:
    hostel = truncate(hostel_name, 20, 17)
    name = truncate(student_name, 25, 22)

    message = f"Thank you {name}! You've checked out of {hostel}. We hope you enjoyed your stay!"
    if len(message) > MAX_SMS_LENGTH_GSM:
        message = f"Thank you {truncate(name, 20, 17)}! Checked out of {truncate(hostel, 15, 12)}. Safe travels!"
    return message[:MAX_SMS_LENGTH_GSM]


def create_receipt_message(
    receipt_number: str,
    hostel_name: str,
    student_name: str,
    room_number: str,
    amount_paid: Decimal,
    balance: Decimal,
    payment_date=None,
) -> str:
    """Compact multi-line receipt for SMS."""
    currency = settings.CURRENCY
    return (
        f"RECEIPT #{receipt_number}\n"
        f"{hostel_name}\n"
        f"{student_name} - {room_number or 'N/A'}\n"
        f"Paid: {currency} {format_amount(amount_paid)}\n"
        f"Balance: {currency} {format_amount(balance)}\n"
        f"Date: {format_short_date(payment_date)}\n"
        f"Thank you!"
    )
