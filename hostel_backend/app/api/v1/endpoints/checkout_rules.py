"""
Checkout Rule API Endpoints.

Handles checkout rule management and rule previews.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc
from datetime import date
from typing import List, Optional

from hostel_backend.app.db.session import get_db
from hostel_backend.app.models.checkout_rule import CheckoutRule
from hostel_backend.app.models.checkout_financial import CheckoutFinancial
from hostel_backend.app.models.enums import UserRole, ResidentType
from hostel_backend.app.schemas.checkout import (
    CheckoutRuleCreate, CheckoutRuleUpdate, CheckoutRuleResponse,
    RulePreviewEnvelope, RulePreviewResponse, DeductionExampleResponse
)
from hostel_backend.app.core.exceptions import ResourceNotFoundError, RuleConflictError
from hostel_backend.app.core.guards import require_role
from hostel_backend.app.core.dependencies import get_summary_builder
from hostel_backend.app.domain.finance.summary_builder import BalanceSummaryBuilder
from hostel_backend.app.domain.finance.checkout_rule_resolver import (
    CheckoutRuleResolver, select_rule, preview_rule, tenure_days
)
from hostel_backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/checkout-rules", tags=["Admin - Checkout Rules"])


async def find_conflicting_rule(
    db: AsyncSession,
    resident_type: ResidentType,
    resident_id: Optional[int],
    active_after_days: int,
    exclude_rule_id: Optional[int] = None
) -> Optional[CheckoutRule]:
    """Another active rule in the same scope with the same threshold."""
    query = select(CheckoutRule).where(
        CheckoutRule.resident_type == resident_type,
        CheckoutRule.is_active == True,
        CheckoutRule.active_after_days == active_after_days
    )
    if resident_id is None:
        query = query.where(CheckoutRule.resident_id.is_(None))
    else:
        query = query.where(CheckoutRule.resident_id == resident_id)
    if exclude_rule_id is not None:
        query = query.where(CheckoutRule.id != exclude_rule_id)

    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def get_rule_or_404(db: AsyncSession, rule_id: int) -> CheckoutRule:
    result = await db.execute(select(CheckoutRule).where(CheckoutRule.id == rule_id))
    rule = result.scalar_one_or_none()
    if not rule:
        raise HTTPException(status_code=404, detail="Checkout rule not found")
    return rule


@router.post("", response_model=CheckoutRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_checkout_rule(
    rule: CheckoutRuleCreate,
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    builder: BalanceSummaryBuilder = Depends(get_summary_builder),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a checkout rule for one resident, or a default for a resident type.
    """
    if rule.resident_id is not None:
        if not await builder.directory.resident_exists(db, rule.resident_type, rule.resident_id):
            raise ResourceNotFoundError(rule.resident_type.value.capitalize(), rule.resident_id)

    if rule.is_active:
        conflict = await find_conflicting_rule(db, rule.resident_type, rule.resident_id, rule.active_after_days)
        if conflict:
            raise RuleConflictError(
                "An active checkout rule with this threshold already exists. Please deactivate it first.",
                details={"conflicting_rule_id": conflict.id}
            )

    new_rule = CheckoutRule(**rule.model_dump())

    db.add(new_rule)
    await db.commit()
    await db.refresh(new_rule)
    response = CheckoutRuleResponse.model_validate(new_rule)

    await log_event(
        db=db,
        action=AuditAction.CHECKOUT_RULE_CREATED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        target_type="checkout_rule",
        target_id=new_rule.id,
        metadata={
            "resident_type": new_rule.resident_type.value,
            "resident_id": new_rule.resident_id,
            "active_after_days": new_rule.active_after_days,
            "percentage": str(new_rule.percentage)
        }
    )

    return response


@router.get("", response_model=List[CheckoutRuleResponse])
async def list_checkout_rules(
    resident_type: Optional[ResidentType] = Query(None),
    resident_id: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """
    List checkout rules, newest first.
    """
    query = select(CheckoutRule).order_by(desc(CheckoutRule.id))

    if resident_type is not None:
        query = query.where(CheckoutRule.resident_type == resident_type)
    if resident_id is not None:
        query = query.where(CheckoutRule.resident_id == resident_id)
    if is_active is not None:
        query = query.where(CheckoutRule.is_active == is_active)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/preview/{resident_type}/{resident_id}", response_model=RulePreviewEnvelope)
async def preview_checkout_rule(
    resident_type: ResidentType = Path(..., description="student or staff"),
    resident_id: int = Path(..., description="Resident ID"),
    on_date: Optional[date] = Query(None, description="Date to measure tenure at (defaults to today)"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    builder: BalanceSummaryBuilder = Depends(get_summary_builder),
    db: AsyncSession = Depends(get_db)
):
    """
    Preview what the rule applying to a resident would deduct.
    """
    profile = await builder.directory.get_profile(db, resident_type, resident_id)
    if profile is None:
        raise ResourceNotFoundError(resident_type.value.capitalize(), resident_id)

    elapsed = tenure_days(profile.joining_date, on_date or date.today())
    rules = await CheckoutRuleResolver.load_rules(db, resident_type, resident_id)
    rule = select_rule(rules, elapsed)

    if rule is None:
        return RulePreviewEnvelope(
            status="info",
            message=f"No active checkout rule applies to this {resident_type.value}"
        )

    monthly_fee = await builder.resolve_monthly_fee(db, profile)
    preview = preview_rule(rule, monthly_fee)

    return RulePreviewEnvelope(
        status="success",
        data=RulePreviewResponse(
            rule=CheckoutRuleResponse.model_validate(preview.rule),
            tenure_days=elapsed,
            monthly_fee=preview.monthly_fee,
            daily_rate=preview.daily_rate,
            hourly_rate=preview.hourly_rate,
            examples=[DeductionExampleResponse.model_validate(e) for e in preview.examples]
        )
    )


@router.get("/{rule_id}", response_model=CheckoutRuleResponse)
async def get_checkout_rule(
    rule_id: int = Path(..., description="Checkout Rule ID"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """Get a single checkout rule."""
    return await get_rule_or_404(db, rule_id)


@router.patch("/{rule_id}", response_model=CheckoutRuleResponse)
async def update_checkout_rule(
    update: CheckoutRuleUpdate,
    rule_id: int = Path(..., description="Checkout Rule ID"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a checkout rule's status, threshold or percentage.
    """
    rule = await get_rule_or_404(db, rule_id)
    changes = update.model_dump(exclude_unset=True, exclude_none=True)

    will_be_active = changes.get("is_active", rule.is_active)
    threshold = changes.get("active_after_days", rule.active_after_days)
    if will_be_active:
        conflict = await find_conflicting_rule(
            db, rule.resident_type, rule.resident_id, threshold, exclude_rule_id=rule.id
        )
        if conflict:
            raise RuleConflictError(
                "Another active checkout rule with this threshold exists. Please deactivate it first.",
                details={"conflicting_rule_id": conflict.id}
            )

    for field, value in changes.items():
        setattr(rule, field, value)

    await db.commit()
    await db.refresh(rule)
    response = CheckoutRuleResponse.model_validate(rule)

    await log_event(
        db=db,
        action=AuditAction.CHECKOUT_RULE_UPDATED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        target_type="checkout_rule",
        target_id=rule.id,
        metadata={key: str(value) for key, value in changes.items()}
    )

    return response


@router.post("/{rule_id}/toggle-status", response_model=CheckoutRuleResponse)
async def toggle_checkout_rule(
    rule_id: int = Path(..., description="Checkout Rule ID"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """
    Flip a checkout rule between active and inactive.
    """
    rule = await get_rule_or_404(db, rule_id)

    if not rule.is_active:
        conflict = await find_conflicting_rule(
            db, rule.resident_type, rule.resident_id, rule.active_after_days, exclude_rule_id=rule.id
        )
        if conflict:
            raise RuleConflictError(
                "Another active checkout rule with this threshold exists. Please deactivate it first.",
                details={"conflicting_rule_id": conflict.id}
            )

    rule.is_active = not rule.is_active
    await db.commit()
    await db.refresh(rule)
    response = CheckoutRuleResponse.model_validate(rule)

    await log_event(
        db=db,
        action=AuditAction.CHECKOUT_RULE_TOGGLED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        target_type="checkout_rule",
        target_id=rule.id,
        metadata={"is_active": rule.is_active}
    )

    return response


@router.delete("/{rule_id}")
async def delete_checkout_rule(
    rule_id: int = Path(..., description="Checkout Rule ID"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a checkout rule that no settled checkout refers to.
    """
    rule = await get_rule_or_404(db, rule_id)

    used_by = (await db.execute(
        select(func.count(CheckoutFinancial.id)).where(CheckoutFinancial.checkout_rule_id == rule.id)
    )).scalar() or 0

    if used_by > 0:
        raise RuleConflictError(
            "Cannot delete rule that has associated financial records. Consider deactivating instead.",
            details={"checkout_count": used_by}
        )

    await db.delete(rule)
    await db.commit()

    await log_event(
        db=db,
        action=AuditAction.CHECKOUT_RULE_DELETED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        target_type="checkout_rule",
        target_id=rule_id
    )

    return {"message": "Checkout rule deleted successfully"}
