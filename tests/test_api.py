from hostel_ledger.config.settings import settings
from hostel_ledger.models.base.enums import UserRole

from conftest import token_for

API = settings.API_V1_STR


def auth(user):
    return {"Authorization": f"Bearer {token_for(user)}"}


async def test_missing_token_is_401(client):
    response = await client.get(f"{API}/payments")

    assert response.status_code == 401
    body = response.json()
    assert body["error"]["code"] == "AUTHENTICATION_FAILED"
    assert body["error"]["message"] == "Authentication token missing"
    assert "timestamp" in body["error"]
    assert body["request_id"] == response.headers["X-Request-ID"]


async def test_invalid_token_is_403(client):
    response = await client.get(f"{API}/payments", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Invalid or expired token"


async def test_access_cookie_is_accepted(client, seed, hostel, semester):
    user = await seed.user(hostel)
    client.cookies.set(settings.ACCESS_COOKIE_NAME, token_for(user))

    response = await client.get(f"{API}/payments")

    assert response.status_code == 200
    assert response.json() == []


async def test_allocate_pay_and_fetch_receipt(client, seed, hostel, semester, sms_channel):
    user = await seed.user(hostel)
    room = await seed.room(hostel, name="B2", price="600000", capacity=2)
    student = await seed.student(hostel, semester, name="Jane Doe")

    allocated = await client.post(
        f"{API}/payments/allocate",
        json={"studentId": student.id, "roomId": room.id},
        headers=auth(user),
    )
    assert allocated.status_code == 201
    allocation = allocated.json()
    assert allocation["totalRequired"] == 300000.0
    assert allocation["roomCapacity"] == 2
    assert allocation["smsSent"] is True

    paid = await client.post(
        f"{API}/payments",
        json={"allocationId": allocation["allocationId"], "amount": "100000"},
        headers=auth(user),
    )
    assert paid.status_code == 201
    payment = paid.json()
    assert payment["balance"] == 200000.0

    summary = await client.get(
        f"{API}/payments/summary/{allocation['allocationId']}", headers=auth(user)
    )
    assert summary.status_code == 200
    assert summary.json()["totalPaid"] == 100000.0

    receipt = await client.get(f"{API}/receipts/{payment['paymentId']}", headers=auth(user))
    assert receipt.status_code == 200
    assert receipt.json()["receiptNumber"] == f"RCP-{payment['paymentId']:06d}"
    assert receipt.json()["studentName"] == "Jane Doe"

    preview = await client.get(
        f"{API}/receipts/{payment['paymentId']}/preview", headers=auth(user)
    )
    assert preview.status_code == 200
    assert preview.headers["content-type"].startswith("text/html")
    assert "PAYMENT RECEIPT" in preview.text

    listed = await client.get(f"{API}/payments/allocations", headers=auth(user))
    assert [a["id"] for a in listed.json()] == [allocation["allocationId"]]
    assert listed.json()[0]["roomPriceAtAllocation"] == 300000.0


async def test_invalid_amount_is_400(client, seed, hostel, semester):
    user = await seed.user(hostel)

    response = await client.post(
        f"{API}/payments",
        json={"allocationId": 1, "amount": 0},
        headers=auth(user),
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"]["error_count"] == 1


async def test_amount_wider_than_ledger_columns_is_400(client, seed, hostel, semester):
    user = await seed.user(hostel)
    room = await seed.room(hostel, price="1000", capacity=1)
    student = await seed.student(hostel, semester)

    allocated = await client.post(
        f"{API}/payments/allocate",
        json={"studentId": student.id, "roomId": room.id, "displayPrice": "10000000000.00"},
        headers=auth(user),
    )
    paid = await client.post(
        f"{API}/payments",
        json={"allocationId": 1, "amount": "100000000.00"},
        headers=auth(user),
    )

    for response in (allocated, paid):
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_overpayment_is_400(client, seed, hostel, semester):
    user = await seed.user(hostel)
    room = await seed.room(hostel, price="1000", capacity=1)
    student = await seed.student(hostel, semester)
    allocated = await client.post(
        f"{API}/payments/allocate",
        json={"studentId": student.id, "roomId": room.id},
        headers=auth(user),
    )

    response = await client.post(
        f"{API}/payments",
        json={"allocationId": allocated.json()["allocationId"], "amount": 1500},
        headers=auth(user),
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == (
        "Payment amount (1,500) exceeds the outstanding balance (1,000). Maximum allowed: 1,000"
    )


async def test_unknown_allocation_is_404(client, seed, hostel, semester):
    user = await seed.user(hostel)

    response = await client.get(f"{API}/payments/summary/999", headers=auth(user))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_double_allocation_is_409(client, seed, hostel, semester):
    user = await seed.user(hostel)
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)
    body = {"studentId": student.id, "roomId": room.id}

    first = await client.post(f"{API}/payments/allocate", json=body, headers=auth(user))
    second = await client.post(f"{API}/payments/allocate", json=body, headers=auth(user))

    assert first.status_code == 201
    assert second.status_code == 409


async def test_other_hostel_is_403(client, seed, hostel, semester):
    room = await seed.room(hostel)
    student = await seed.student(hostel, semester)
    other = await seed.hostel(name="Other Hostel")
    stranger = await seed.user(other, UserRole.CUSTODIAN)

    response = await client.post(
        f"{API}/payments/allocate",
        json={"studentId": student.id, "roomId": room.id},
        headers=auth(stranger),
    )

    assert response.status_code == 403


async def test_semester_and_expense_endpoints(client, seed, hostel):
    user = await seed.user(hostel)

    created = await client.post(
        f"{API}/semesters",
        json={"name": "Semester 1", "startDate": "2026-01-15", "endDate": "2026-05-30"},
        headers=auth(user),
    )
    assert created.status_code == 201
    semester_id = created.json()["semesterId"]

    no_semester = await client.post(
        f"{API}/expenses",
        json={"amount": 5000, "description": "Soap", "expenseDate": "2026-02-01"},
        headers=auth(user),
    )
    assert no_semester.status_code == 400

    activated = await client.post(f"{API}/semesters/{semester_id}/activate", headers=auth(user))
    assert activated.json() == {"message": "Semester activated successfully"}

    recorded = await client.post(
        f"{API}/expenses",
        json={"amount": 5000, "description": "Soap", "category": "Cleaning", "expenseDate": "2026-02-01"},
        headers=auth(user),
    )
    assert recorded.status_code == 201

    listing = await client.get(f"{API}/expenses", params={"limit": 10}, headers=auth(user))
    assert listing.json()["total"] == 1
    assert listing.json()["expenses"][0]["amount"] == 5000.0

    stats = await client.get(f"{API}/expenses/stats", headers=auth(user))
    assert stats.json()["byCategory"] == [{"category": "Cleaning", "total": 5000.0}]


async def test_semester_end_before_start_is_400(client, seed, hostel):
    user = await seed.user(hostel)

    response = await client.post(
        f"{API}/semesters",
        json={"name": "Backwards", "startDate": "2026-05-01", "endDate": "2026-01-01"},
        headers=auth(user),
    )

    assert response.status_code == 400


async def test_check_in_endpoints(client, seed, hostel, semester):
    user = await seed.user(hostel)
    student = await seed.student(hostel, semester)

    checked_in = await client.post(f"{API}/check-ins", json={"studentId": student.id}, headers=auth(user))
    again = await client.post(f"{API}/check-ins", json={"studentId": student.id}, headers=auth(user))
    listing = await client.get(f"{API}/check-ins", headers=auth(user))
    checked_out = await client.post(
        f"{API}/check-ins/checkout", json={"studentId": student.id}, headers=auth(user)
    )

    assert checked_in.status_code == 201
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "ALREADY_CHECKED_IN"
    assert listing.json()[0]["studentId"] == student.id
    assert checked_out.status_code == 200
