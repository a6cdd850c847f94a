"""
Integration tests for resident finance endpoints.

Covers access control, balance summaries, payments, financial records,
checkout settlement and the fee quote endpoints.
"""

import pytest
from sqlalchemy import select
from decimal import Decimal

from hostel_backend.app.models.enums import UserRole
from hostel_backend.app.core.dependencies import get_ledger_capabilities
from hostel_backend.app.domain.finance.capabilities import LedgerCapabilities
from hostel_backend.app.main import app
from hostel_backend.app.models.audit_log import AuditLog
from hostel_backend.app.models.checkout_financial import CheckoutFinancial
from hostel_backend.app.models.income import Income
from hostel_backend.app.services.audit import get_audit_trail, AuditAction

# Note: Client and DB setup are in conftest.py


async def create_due_record(client, headers, resident_type, resident_id, amount, monthly_fee=None):
    payload = {"amount": amount, "balance_type": "due", "payment_date": "2024-01-01"}
    if monthly_fee is not None:
        payload["monthly_fee"] = monthly_fee
    response = await client.post(
        f"/v1/residents/{resident_type}/{resident_id}/financial-records",
        json=payload,
        headers=headers
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_summary_requires_authentication(client, student):
    response = await client.get(f"/v1/residents/student/{student.id}/financial-summary")
    assert response.status_code in (401, 403)

    response = await client.get(
        f"/v1/residents/student/{student.id}/financial-summary",
        headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_UNAUTHORIZED"


@pytest.mark.asyncio
async def test_summary_for_unknown_resident_is_404(client, admin_headers):
    response = await client.get("/v1/residents/staff/999/financial-summary", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_unknown_resident_type_is_rejected(client, admin_headers):
    response = await client.get("/v1/residents/tenant/1/financial-summary", headers=admin_headers)

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_student_reads_own_summary_only(client, make_headers, student, staff_member):
    own = make_headers(UserRole.STUDENT, user_id=50, resident_type="student", resident_id=student.id)

    response = await client.get(f"/v1/residents/student/{student.id}/financial-summary", headers=own)
    assert response.status_code == 200
    assert response.json()["resident_name"] == "Asha Rai"

    # Same numeric id, different resident type
    response = await client.get(f"/v1/residents/staff/{staff_member.id}/financial-summary", headers=own)
    assert response.status_code == 403

    other = make_headers(UserRole.STUDENT, user_id=51, resident_type="student", resident_id=student.id + 1)
    response = await client.get(f"/v1/residents/student/{student.id}/financial-summary", headers=other)
    assert response.status_code == 403
    assert response.json()["error_code"] == "ERR_FORBIDDEN"


@pytest.mark.asyncio
async def test_payment_flow_updates_summary(client, admin_headers, student, db_session):
    await create_due_record(client, admin_headers, "student", student.id, "50000", monthly_fee="15000")

    response = await client.post(
        f"/v1/residents/student/{student.id}/payments",
        json={"amount": "20000", "payment_type": "bank_transfer", "remark": "January"},
        headers=admin_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["paid_amount"]) == Decimal("20000")
    assert Decimal(data["remaining_balance"]) == Decimal("30000")
    assert data["status"] == "pending"
    assert data["last_updated"]

    response = await client.post(
        f"/v1/residents/student/{student.id}/payments",
        json={"amount": "30000"},
        headers=admin_headers
    )
    data = response.json()
    assert Decimal(data["remaining_balance"]) == Decimal("0")
    assert data["status"] == "paid"

    response = await client.get(f"/v1/residents/student/{student.id}/financial-summary", headers=admin_headers)
    summary = response.json()
    assert Decimal(summary["total_amount"]) == Decimal("50000")
    assert Decimal(summary["monthly_fee"]) == Decimal("15000")
    assert summary["status"] == "paid"

    trail = await get_audit_trail(db_session, target_type="student", action=AuditAction.PAYMENT_APPLIED)
    assert len(trail) == 2
    assert trail[0].actor_id == 1


@pytest.mark.asyncio
async def test_payment_requires_admin(client, make_headers, student):
    own = make_headers(UserRole.STUDENT, user_id=50, resident_type="student", resident_id=student.id)

    response = await client.post(
        f"/v1/residents/student/{student.id}/payments", json={"amount": "100"}, headers=own
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_payment_amount_must_be_positive(client, admin_headers, student):
    response = await client.post(
        f"/v1/residents/student/{student.id}/payments", json={"amount": "0"}, headers=admin_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_payment_without_income_ledger_returns_balance(client, admin_headers, student, db_session):
    app.dependency_overrides[get_ledger_capabilities] = lambda: LedgerCapabilities(income_ledger_enabled=False)

    response = await client.post(
        f"/v1/residents/student/{student.id}/payments", json={"amount": "100"}, headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["error"] is None
    assert data["status"] == "paid"
    assert Decimal(data["paid_amount"]) == Decimal("0")

    trail = await get_audit_trail(db_session, action=AuditAction.PAYMENT_APPLIED)
    assert trail == []


@pytest.mark.asyncio
async def test_payment_for_unknown_resident_is_404(client, admin_headers):
    response = await client.post("/v1/residents/student/999/payments", json={"amount": "100"}, headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_financial_records_listing(client, admin_headers, make_headers, staff_member, db_session):
    await create_due_record(client, admin_headers, "staff", staff_member.id, "1000")
    await create_due_record(client, admin_headers, "staff", staff_member.id, "2000", monthly_fee="3500")

    own = make_headers(UserRole.STAFF, user_id=70, resident_type="staff", resident_id=staff_member.id)
    response = await client.get(f"/v1/residents/staff/{staff_member.id}/financial-records", headers=own)

    assert response.status_code == 200
    records = response.json()
    assert len(records) == 2
    assert records[0]["balance_type"] == "due"

    trail = await get_audit_trail(
        db_session, target_type="staff", target_id=staff_member.id, action=AuditAction.FINANCIAL_RECORD_CREATED
    )
    assert len(trail) == 2


@pytest.mark.asyncio
async def test_staff_checkout_settlement(client, admin_headers, staff_member):
    response = await client.post(
        "/v1/checkout-rules",
        json={"resident_type": "staff", "active_after_days": 30, "percentage": "50"},
        headers=admin_headers
    )
    assert response.status_code == 201
    rule_id = response.json()["id"]

    response = await client.post(
        f"/v1/residents/staff/{staff_member.id}/checkouts",
        json={"checkout_id": 501, "checkout_duration": 15, "checkout_date": "2024-03-01"},
        headers=admin_headers
    )
    assert response.status_code == 201
    data = response.json()
    assert data["checkout"]["checkout_rule_id"] == rule_id
    assert Decimal(data["checkout"]["deducted_amount"]) == Decimal("750")
    assert data["tenure_days"] == 60
    assert Decimal(data["summary"]["deducted_amount"]) == Decimal("750")

    # Already settled
    response = await client.post(
        f"/v1/residents/staff/{staff_member.id}/checkouts",
        json={"checkout_id": 501, "checkout_duration": 15, "checkout_date": "2024-03-01"},
        headers=admin_headers
    )
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CHECKOUT_SETTLED"

    response = await client.get(f"/v1/residents/staff/{staff_member.id}/checkouts", headers=admin_headers)
    history = response.json()
    assert history["total_checkouts"] == 1
    assert Decimal(history["total_deducted"]) == Decimal("750")


@pytest.mark.asyncio
async def test_student_checkout_with_percentage(client, admin_headers, student):
    response = await client.post(
        f"/v1/residents/student/{student.id}/checkouts",
        json={"checkout_id": 601, "checkout_duration": 2, "percentage": "50"},
        headers=admin_headers
    )

    assert response.status_code == 201
    data = response.json()
    # 15000 / 30 * 2 * 50%
    assert Decimal(data["checkout"]["deducted_amount"]) == Decimal("500")
    assert data["checkout"]["checkout_rule_id"] is None
    assert data["tenure_days"] is None


@pytest.mark.asyncio
async def test_checkout_for_unknown_resident_is_404(client, admin_headers):
    response = await client.post(
        "/v1/residents/student/999/checkouts",
        json={"checkout_id": 1, "checkout_duration": 1, "percentage": "50"},
        headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_prorate_quote(client, admin_headers):
    response = await client.get(
        "/v1/finance/prorate",
        params={"monthly_fee": "3000", "period_start": "2024-02-01", "period_end": "2024-02-29"},
        headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["amount"]) == Decimal("3000")
    assert data["days_in_month"] == 29
    assert data["days_stayed"] == 29


@pytest.mark.asyncio
async def test_prorate_quote_rejects_inverted_period(client, admin_headers):
    response = await client.get(
        "/v1/finance/prorate",
        params={"monthly_fee": "3000", "period_start": "2024-02-10", "period_end": "2024-02-01"},
        headers=admin_headers
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_FIN_VALIDATION"


@pytest.mark.asyncio
async def test_checkout_deduction_quote(client, admin_headers):
    response = await client.get(
        "/v1/finance/checkout-deduction",
        params={"monthly_fee": "3000", "percentage": "50", "checkout_duration": 15},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["deducted_amount"]) == Decimal("750")

    response = await client.get(
        "/v1/finance/checkout-deduction",
        params={"monthly_fee": "3000", "percentage": "50", "checkout_duration": -1},
        headers=admin_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_payment_history(client, admin_headers, make_headers, student):
    for amount in ("1000", "2500"):
        await client.post(
            f"/v1/residents/student/{student.id}/payments", json={"amount": amount}, headers=admin_headers
        )

    own = make_headers(UserRole.STUDENT, user_id=50, resident_type="student", resident_id=student.id)
    response = await client.get(f"/v1/residents/student/{student.id}/payments", headers=own)

    assert response.status_code == 200
    payments = response.json()
    assert [Decimal(p["received_amount"]) for p in payments] == [Decimal("2500"), Decimal("1000")]
    assert payments[0]["payment_type"] == "cash"
    assert payments[0]["payment_status"] == "paid"

    other = make_headers(UserRole.STUDENT, user_id=51, resident_type="student", resident_id=student.id + 1)
    response = await client.get(f"/v1/residents/student/{student.id}/payments", headers=other)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_ledger_writes_survive_audit_failure(client, admin_headers, student, db_session, mocker):
    # An audit row without an action violates NOT NULL on insert
    mocker.patch(
        "hostel_backend.app.services.audit.AuditLog",
        side_effect=lambda **fields: AuditLog(**{**fields, "action": None})
    )

    response = await client.post(
        f"/v1/residents/student/{student.id}/payments", json={"amount": "700"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["paid_amount"]) == Decimal("700")

    response = await client.post(
        f"/v1/residents/student/{student.id}/checkouts",
        json={"checkout_id": 77, "checkout_duration": 1, "percentage": "10"},
        headers=admin_headers
    )
    assert response.status_code == 201
    assert response.json()["checkout"]["checkout_id"] == 77

    response = await client.post(
        f"/v1/residents/student/{student.id}/financial-records",
        json={"amount": "300", "balance_type": "due", "payment_date": "2024-01-01"},
        headers=admin_headers
    )
    assert response.status_code == 201

    assert len((await db_session.execute(select(Income))).scalars().all()) == 1
    assert len((await db_session.execute(select(CheckoutFinancial))).scalars().all()) == 1
    assert await get_audit_trail(db_session) == []


@pytest.mark.asyncio
async def test_audit_log_endpoint(client, admin_headers, make_headers, student):
    await client.post(
        f"/v1/residents/student/{student.id}/payments", json={"amount": "500"}, headers=admin_headers
    )
    await client.post(
        "/v1/checkout-rules",
        json={"resident_type": "staff", "active_after_days": 0, "percentage": "50"},
        headers=admin_headers
    )

    response = await client.get("/v1/admin/audit-logs", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 2

    response = await client.get(
        "/v1/admin/audit-logs",
        params={"target_type": "student", "target_id": student.id},
        headers=admin_headers
    )
    body = response.json()
    assert body["total"] == 1
    assert body["logs"][0]["action"] == AuditAction.PAYMENT_APPLIED
    assert body["logs"][0]["meta_data"]["amount"] == "500"

    own = make_headers(UserRole.STUDENT, user_id=50, resident_type="student", resident_id=student.id)
    response = await client.get("/v1/admin/audit-logs", headers=own)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_checkout_statistics_endpoint(client, admin_headers, student):
    for checkout_id, checkout_date in ((1, "2024-01-20"), (2, "2024-02-03")):
        response = await client.post(
            f"/v1/residents/student/{student.id}/checkouts",
            json={"checkout_id": checkout_id, "checkout_duration": 2, "percentage": "50", "checkout_date": checkout_date},
            headers=admin_headers
        )
        assert response.status_code == 201

    response = await client.get(
        "/v1/admin/checkout-statistics",
        params={"resident_type": "student", "start_date": "2024-01-01", "end_date": "2024-02-29"},
        headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()
    # 15000 / 30 * 2 * 50% = 500 each
    assert data["total_checkouts"] == 2
    assert Decimal(data["total_deducted"]) == Decimal("1000")
    assert Decimal(data["average_deduction"]) == Decimal("500")
    assert data["unique_residents"] == 1
    assert [m["month"] for m in data["by_month"]] == ["2024-01", "2024-02"]
    assert data["top_residents"][0]["resident_name"] == "Asha Rai"
    assert data["deduction_ranges"]["101-500"] == 2

    response = await client.get(
        "/v1/admin/checkout-statistics",
        params={"start_date": "2024-03-01", "end_date": "2024-02-01"},
        headers=admin_headers
    )
    assert response.status_code == 422
