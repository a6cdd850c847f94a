"""
Role and resident type enumerations.

Defines the actor and resident kinds for the hostel management system.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Hostel administrator with access to every resident's ledger
        STAFF: Staff member, may read their own balance
        STUDENT: Student resident, may read their own balance
    """
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    STUDENT = "STUDENT"


class ResidentType(str, enum.Enum):
    """Kinds of resident that carry a ledger."""
    STUDENT = "student"
    STAFF = "staff"
