"""
Payment Application Service (Domain Logic).

Records a payment as an income entry and returns the freshly rebuilt
balance summary. The summary is never updated incrementally.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_backend.app.domain.finance.money import MoneyLike, ZERO, round_money
from hostel_backend.app.domain.finance.results import PaymentError, PaymentResult
from hostel_backend.app.domain.finance.summary_builder import BalanceSummaryBuilder
from hostel_backend.app.models.enums import ResidentType
from hostel_backend.app.models.income import Income
from hostel_backend.app.models.ledger_enums import PaymentStatus

logger = logging.getLogger("hostel.finance")

PAYMENT_FAILED = "Failed to apply payment"


class PaymentService:

    def __init__(self, builder: BalanceSummaryBuilder, default_payment_type: str = "cash"):
        self.builder = builder
        self.default_payment_type = default_payment_type

    async def apply_payment(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int,
        amount: MoneyLike,
        payment_type: Optional[str] = None,
        remark: str = ""
    ) -> PaymentResult:
        """
        Apply a payment and rebuild the balance summary.

        Flow:
        1. Check the resident exists
        2. Append an Income entry (received in full, nothing due);
           skipped when this deployment has no income ledger
        3. Flush so the entry is visible to the summary read
        4. Rebuild the summary on the same session
        5. Commit

        Returns:
            The rebuilt BalanceSummary, or PaymentError if the resident is
            unknown or the entry could not be written.
        """
        log_context = {"resident_type": resident_type.value, "resident_id": resident_id}

        try:
            if not await self.builder.directory.resident_exists(db, resident_type, resident_id):
                logger.warning("Payment rejected: unknown resident", extra=log_context)
                return PaymentError(
                    error=PAYMENT_FAILED,
                    message=f"{resident_type.value.capitalize()} {resident_id} not found"
                )

            if not self.builder.capabilities.income_ledger_enabled:
                # Nothing to append to; other sources still count
                logger.warning("Payment not recorded: income ledger disabled", extra=log_context)
                return await self.builder.build_summary(db, resident_type, resident_id)

            received = round_money(amount)
            income = Income(
                resident_type=resident_type,
                resident_id=resident_id,
                amount=received,
                received_amount=received,
                due_amount=ZERO,
                income_date=date.today(),
                payment_type=payment_type or self.default_payment_type,
                payment_status=PaymentStatus.PAID,
                remark=remark or None,
            )
            db.add(income)
            await db.flush()

            summary = await self.builder.build_summary(db, resident_type, resident_id)
            await db.commit()

        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Payment application error: %s", exc, extra={**log_context, "amount": str(amount)})
            return PaymentError(error=PAYMENT_FAILED, message=str(exc))

        logger.info(
            "Payment applied",
            extra={**log_context, "income_id": income.id, "amount": str(received), "status": summary.status.value}
        )
        return summary

    async def payment_history(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> List[Income]:
        """Income entries for a resident, newest first; empty without an income ledger."""
        if not self.builder.capabilities.income_ledger_enabled:
            return []

        result = await db.execute(
            select(Income).where(
                Income.resident_type == resident_type,
                Income.resident_id == resident_id
            ).order_by(desc(Income.income_date), desc(Income.id))
        )
        return list(result.scalars().all())
