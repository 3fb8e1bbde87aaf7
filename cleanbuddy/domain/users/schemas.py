"""User domain schemas"""

from datetime import datetime
from typing import Optional

from ...enums import UserRole
from ...shared.schemas import CamelModel


class UserResponse(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    email_verified: bool
    created_at: Optional[datetime] = None


class UpdateCurrentUserInput(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


class UpdateUserRoleInput(CamelModel):
    role: UserRole
