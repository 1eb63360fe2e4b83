from fastapi import Depends, Request
from sqlalchemy.orm import Session
from typing import List

from ..core.config import settings
from ..core.database import get_db
from ..core.security import RoleHeaderPolicy, UserRole
from ..services.booking_service import BookingService
from ..services.query_service import AppointmentQueryService

_role_policy = RoleHeaderPolicy()

def get_access_policy() -> RoleHeaderPolicy:
    """Access policy dependency; override to plug in real authentication."""
    return _role_policy

# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires specific caller roles."""
    async def role_checker(
        request: Request,
        policy: RoleHeaderPolicy = Depends(get_access_policy)
    ) -> UserRole:
        return policy.authorize(request.headers.get(settings.ROLE_HEADER), allowed_roles)
    
    return role_checker

# Specific role dependencies
async def get_booking_role(
    role: UserRole = Depends(require_role([UserRole.PATIENT, UserRole.ADMIN]))
) -> UserRole:
    """Require patient or admin role."""
    return role

async def get_clinician_role(
    role: UserRole = Depends(require_role([UserRole.CLINICIAN, UserRole.ADMIN]))
) -> UserRole:
    """Require clinician or admin role."""
    return role

async def get_admin_role(
    role: UserRole = Depends(require_role([UserRole.ADMIN]))
) -> UserRole:
    """Require admin role."""
    return role

# Engine dependencies
def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)

def get_query_service(db: Session = Depends(get_db)) -> AppointmentQueryService:
    return AppointmentQueryService(db)
