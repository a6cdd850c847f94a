"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from hostel_backend.app.api.v1.endpoints import resident_finance, checkout_rules, finance_tools, admin

router = APIRouter()

# Resident balances, payments and checkout settlement
router.include_router(resident_finance.router)

# Checkout rule management
router.include_router(checkout_rules.router)

# Fee calculators
router.include_router(finance_tools.router)

# Reports and audit trail
router.include_router(admin.router)
