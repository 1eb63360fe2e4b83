from typing import Optional, Sequence
from fastapi import HTTPException, status
from enum import Enum

class UserRole(str, Enum):
    ADMIN = "admin"
    CLINICIAN = "clinician"
    PATIENT = "patient"

# Security exceptions
class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )

def describe_roles(roles: Sequence[UserRole]) -> str:
    """Human readable role list, e.g. 'Patient or Admin'."""
    return " or ".join(role.value.capitalize() for role in roles)

class RoleHeaderPolicy:
    """Trusts the caller-supplied role header as its identity.

    There is no cryptographic verification here; swapping in a token based
    policy only requires a class with the same ``resolve``/``authorize``
    methods.
    """

    def resolve(self, header_value: Optional[str]) -> Optional[UserRole]:
        """Map a raw header value to a role, or None when missing/unknown."""
        if not header_value:
            return None
        try:
            return UserRole(header_value.strip().lower())
        except ValueError:
            return None

    def authorize(self, header_value: Optional[str], allowed_roles: Sequence[UserRole]) -> UserRole:
        role = self.resolve(header_value)
        if role is None or role not in allowed_roles:
            raise AuthorizationError(
                f"Forbidden: {describe_roles(allowed_roles)} role required"
            )
        return role
