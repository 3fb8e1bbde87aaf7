"""Invite domain schemas - Pydantic models for company cleaner invites"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from ...enums import CleanerInviteStatus
from ...shared.schemas import CamelModel
from ...shared.validators import validate_email
from ..cleaners.schemas import CleanerProfileResponse
from ..companies.schemas import CompanyResponse
from ..users.schemas import UserResponse


class CreateCleanerInviteInput(CamelModel):
    email: Optional[str] = None  # None for an open, shareable invite
    message: Optional[str] = None
    expires_in_days: Optional[int] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)


class CleanerInviteResponse(CamelModel):
    id: str
    company_id: str
    invited_by: str
    email: Optional[str] = None
    message: Optional[str] = None
    status: CleanerInviteStatus
    expires_at: datetime
    accepted_by: Optional[str] = None
    accepted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CleanerInviteResult(CamelModel):
    invite: CleanerInviteResponse
    token: str
    invite_url: str


class ValidateCleanerInviteResult(CamelModel):
    valid: bool
    invite: Optional[CleanerInviteResponse] = None
    company: Optional[CompanyResponse] = None
    error_message: Optional[str] = None


class AcceptCleanerInviteResult(CamelModel):
    success: bool = True
    user: UserResponse
    company: CompanyResponse
    cleaner_profile: CleanerProfileResponse
