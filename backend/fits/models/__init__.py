from fits.models.identity import ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER, ROLES, Identity
from fits.models.invitation import INVITABLE_ROLES, Invitation
from fits.models.session import RefreshSession

__all__ = [
    "INVITABLE_ROLES",
    "Identity",
    "Invitation",
    "RefreshSession",
    "ROLES",
    "ROLE_ADMIN",
    "ROLE_STUDENT",
    "ROLE_TEACHER",
]
