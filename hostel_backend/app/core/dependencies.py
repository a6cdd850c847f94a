"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT authentication
and for handing the ledger capabilities to the finance services.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from hostel_backend.app.core.config import settings
from hostel_backend.app.core.jwt import decode_access_token
from hostel_backend.app.domain.finance.capabilities import LedgerCapabilities, ledger_capabilities
from hostel_backend.app.domain.finance.checkout_settlement import CheckoutSettlementService
from hostel_backend.app.domain.finance.payment_service import PaymentService
from hostel_backend.app.domain.finance.summary_builder import BalanceSummaryBuilder

# HTTP Bearer security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Checks:
    1. Validates JWT token signature and expiry
    2. Requires a user_id and role claim

    Users live in the auth service, so there is no local user lookup.

    Args:
        credentials: HTTP Bearer token from request header

    Returns:
        Decoded token payload containing user information

    Raises:
        HTTPException: 401 if authentication fails for any reason
    """
    token = credentials.credentials

    payload = decode_access_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not payload.get("user_id") or not payload.get("role"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def get_ledger_capabilities() -> LedgerCapabilities:
    """Ledger sources resolved once at startup."""
    return ledger_capabilities


def get_summary_builder(
    capabilities: LedgerCapabilities = Depends(get_ledger_capabilities)
) -> BalanceSummaryBuilder:
    return BalanceSummaryBuilder(capabilities)


def get_payment_service(
    builder: BalanceSummaryBuilder = Depends(get_summary_builder)
) -> PaymentService:
    return PaymentService(builder, default_payment_type=settings.default_payment_type)


def get_settlement_service(
    builder: BalanceSummaryBuilder = Depends(get_summary_builder)
) -> CheckoutSettlementService:
    return CheckoutSettlementService(builder, student_rules_enabled=settings.student_checkout_rules_enabled)
