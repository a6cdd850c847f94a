"""
Security guards for role-based and resident-scoped access control.

Provides dependencies for protecting endpoints.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from hostel_backend.app.models.enums import UserRole, ResidentType
from hostel_backend.app.core.dependencies import get_current_user


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/checkout-rules")
        async def create_rule(current_user: dict = Depends(require_role([UserRole.ADMIN]))):
            ...

    Args:
        allowed_roles: List of UserRole enums that are allowed to access the endpoint

    Returns:
        FastAPI dependency function that validates user role

    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        user_role_str = current_user.get("role")

        # Convert string role to UserRole enum
        try:
            user_role = UserRole(user_role_str)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )

        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


def can_access_resident(
    resident_type: ResidentType,
    resident_id: int,
    current_user: dict
) -> bool:
    """
    Check whether the caller may read a resident's financial data.

    Admins may read any resident. Students and staff may only read their
    own record, identified by the resident_type/resident_id token claims.
    """
    user_role = current_user.get("role")

    if user_role == UserRole.ADMIN.value:
        return True

    if user_role in (UserRole.STUDENT.value, UserRole.STAFF.value):
        return (
            current_user.get("resident_type") == resident_type.value
            and current_user.get("resident_id") == resident_id
        )

    return False


class ResidentAccessGuard:
    """
    Class-based guard for resident-scoped reads.

    Usage:
        resident_guard = ResidentAccessGuard()

        @router.get("/residents/{resident_type}/{resident_id}/financial-summary")
        async def get_summary(..., current_user: dict = Depends(get_current_user)):
            resident_guard.enforce(resident_type, resident_id, current_user)
            ...
    """

    def enforce(
        self,
        resident_type: ResidentType,
        resident_id: int,
        current_user: dict
    ):
        """
        Raise 403 unless the caller may read this resident.

        Raises:
            HTTPException 403 if the check fails
        """
        if not can_access_resident(resident_type, resident_id, current_user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. You do not have permission to view this {resident_type.value}'s finances."
            )
