"""
Audit log tests.
"""

import pytest
from sqlalchemy.exc import OperationalError

from hostel_backend.app.services.audit import log_event, get_audit_trail, AuditAction


@pytest.mark.asyncio
async def test_log_event_stores_entry(db_session):
    entry = await log_event(
        db=db_session,
        action=AuditAction.PAYMENT_APPLIED,
        actor_id=1,
        actor_username="admin_1",
        target_type="student",
        target_id=4,
        metadata={"amount": "250.00"}
    )

    assert entry is not None
    assert entry.id is not None
    trail = await get_audit_trail(db_session, target_type="student", target_id=4)
    assert [log.meta_data for log in trail] == [{"amount": "250.00"}]


@pytest.mark.asyncio
async def test_log_event_failure_is_logged_not_raised(db_session, mocker):
    mocker.patch.object(
        db_session, "commit", side_effect=OperationalError("INSERT INTO audit_logs", {}, Exception("disk I/O error"))
    )
    error_log = mocker.patch("hostel_backend.app.services.audit.logger.error")

    entry = await log_event(
        db=db_session,
        action=AuditAction.CHECKOUT_SETTLED,
        actor_id=1,
        target_type="staff",
        target_id=2
    )

    assert entry is None
    error_log.assert_called_once()
    assert error_log.call_args.kwargs["extra"]["action"] == AuditAction.CHECKOUT_SETTLED

    mocker.stopall()
    assert await get_audit_trail(db_session) == []
