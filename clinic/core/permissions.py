"""
Role-based permission matrix for the clinic.
Any authenticated staff member may read and write patients, appointments and
records; the actions below are restricted further.
"""
from ..models.user import UserRole

# Permission constants
PERM_MANAGE_DOCTORS = "manage_doctors"
PERM_DELETE_RECORDS = "delete_records"

# Role permission matrix
ROLE_PERMISSIONS: dict = {
    UserRole.RECEPTIONIST: set(),
    UserRole.NURSE: set(),
    UserRole.DOCTOR: {
        PERM_DELETE_RECORDS,
    },
    UserRole.ADMIN: {
        PERM_MANAGE_DOCTORS,
        PERM_DELETE_RECORDS,
    },
}


def has_permission(role: str, permission: str) -> bool:
    """Check if a role has a specific permission."""
    return permission in ROLE_PERMISSIONS.get(role, set())
