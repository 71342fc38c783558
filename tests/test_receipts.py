from decimal import Decimal

import pytest

from hostel_ledger.core.exceptions import AuthorizationError, ResourceNotFoundError
from hostel_ledger.models.base.enums import UserRole
from hostel_ledger.services.payment import receipt_number

from conftest import principal_for


def test_receipt_number_is_zero_padded():
    assert receipt_number(42) == "RCP-000042"
    assert receipt_number(1234567) == "RCP-1234567"


async def test_receipt_shows_cumulative_paid_and_balance(seed, hostel, semester, owner, allocation_service, payment_service, receipt_service):
    room = await seed.room(hostel, name="C3", price="600000", capacity=2)
    student = await seed.student(hostel, semester, name="Jane Doe", reg="REG-001", phone="0772123456")
    allocated = await allocation_service.allocate(owner, student.id, room.id)
    await payment_service.record_payment(owner, allocated.allocation_id, Decimal("100000"))
    second = await payment_service.record_payment(owner, allocated.allocation_id, Decimal("50000"))

    receipt = await receipt_service.get_receipt(owner, second.payment_id)

    assert receipt.receipt_number == f"RCP-{second.payment_id:06d}"
    assert receipt.hostel_name == "Sunrise Hostel"
    assert receipt.hostel_contact_phone == "0700000001"
    assert receipt.student_name == "Jane Doe"
    assert receipt.registration_number == "REG-001"
    assert receipt.room_number == "C3"
    assert receipt.amount_paid == Decimal("150000.00")
    assert receipt.total_required == Decimal("300000.00")
    assert receipt.balance == Decimal("150000.00")
    assert receipt.payment_id == second.payment_id


async def test_receipt_uses_display_amounts_with_markup(seed, allocation_service, payment_service, receipt_service):
    hostel = await seed.hostel(name="Markup Hostel", markup=True)
    semester = await seed.semester(hostel)
    custodian = principal_for(await seed.user(hostel, UserRole.CUSTODIAN))
    room = await seed.room(hostel, price="600000", capacity=2)
    student = await seed.student(hostel, semester)
    allocated = await allocation_service.allocate(custodian, student.id, room.id, display_price=Decimal("700000"))
    paid = await payment_service.record_payment(custodian, allocated.allocation_id, Decimal("150000"))

    receipt = await receipt_service.get_receipt(custodian, paid.payment_id)

    assert paid.balance == Decimal("150000.00")
    assert receipt.total_required == Decimal("350000.00")
    assert receipt.amount_paid == Decimal("175000.00")
    assert receipt.balance == Decimal("175000.00")


async def test_receipt_of_other_hostel_is_forbidden(seed, hostel, semester, owner, allocation_service, payment_service, receipt_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)
    allocated = await allocation_service.allocate(owner, student.id, room.id)
    paid = await payment_service.record_payment(owner, allocated.allocation_id, Decimal("1000"))
    other = await seed.hostel(name="Other Hostel")
    stranger = principal_for(await seed.user(other, UserRole.CUSTODIAN))

    with pytest.raises(AuthorizationError) as exc:
        await receipt_service.get_receipt(stranger, paid.payment_id)
    assert exc.value.message == "Payment does not belong to your hostel"


async def test_receipt_after_checkout_is_not_found(seed, hostel, semester, owner, allocation_service, payment_service, receipt_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)
    allocated = await allocation_service.allocate(owner, student.id, room.id)
    paid = await payment_service.record_payment(owner, allocated.allocation_id, Decimal("1000"))
    await allocation_service.checkout(owner, allocated.allocation_id)

    with pytest.raises(ResourceNotFoundError) as exc:
        await receipt_service.get_receipt(owner, paid.payment_id)
    assert exc.value.message == "Payment not found"


async def test_receipt_html_and_sms_rendering(seed, hostel, semester, owner, allocation_service, payment_service, receipt_service):
    room = await seed.room(hostel, name="D4")
    student = await seed.student(hostel, semester, name="Jane Doe")
    allocated = await allocation_service.allocate(owner, student.id, room.id)
    paid = await payment_service.record_payment(owner, allocated.allocation_id, Decimal("1234.5"))
    receipt = await receipt_service.get_receipt(owner, paid.payment_id)

    html = receipt_service.render_html(receipt)
    sms = receipt_service.render_sms(receipt)

    assert f"#RCP-{paid.payment_id:06d}" in html
    assert "UGX 1,234.50" in html
    assert "Jane Doe" in html
    assert "Jane Doe - D4" in sms
    assert sms.endswith("Thank you!")


async def test_receipt_serialises_with_camel_case_keys(seed, hostel, semester, owner, allocation_service, payment_service, receipt_service):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)
    allocated = await allocation_service.allocate(owner, student.id, room.id)
    paid = await payment_service.record_payment(owner, allocated.allocation_id, Decimal("1000"))

    data = (await receipt_service.get_receipt(owner, paid.payment_id)).dump()

    assert data["receiptNumber"] == f"RCP-{paid.payment_id:06d}"
    assert data["amountPaid"] == 1000.0
    assert data["totalRequired"] == 300000.0
    assert "hostelContactPhone" in data
