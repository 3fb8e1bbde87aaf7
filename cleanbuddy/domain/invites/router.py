"""Invite router - Company cleaner invite endpoints"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import create_rate_limiter
from ..cleaners.schemas import CleanerProfileResponse, to_profile_response
from .schemas import (
    AcceptCleanerInviteResult,
    CleanerInviteResponse,
    CleanerInviteResult,
    CreateCleanerInviteInput,
    ValidateCleanerInviteResult,
)
from .service import InviteService

router = APIRouter(prefix="/invites", tags=["Cleaner Invites"])

# Token checks are unauthenticated
validate_token_limit = create_rate_limiter(limit=30, window_seconds=60, key_prefix="invite_validate")


def get_invite_service(request: Request, db: Session = Depends(get_db)) -> InviteService:
    """Dependency injection for InviteService"""
    return InviteService(db, request.app.state.mail_service, request.app.state.frontend_url)


# ============================================================================
# PUBLIC / INVITEE ENDPOINTS
# ============================================================================


@router.get("/validate/{token}", response_model=ValidateCleanerInviteResult)
async def validate_cleaner_invite_token(
    token: str,
    _: None = Depends(validate_token_limit),
    service: InviteService = Depends(get_invite_service),
):
    """Check an invite link; always 200, with valid=false and a reason when unusable"""
    result = service.validate_token(token)
    return ValidateCleanerInviteResult(
        valid=result.valid,
        invite=result.invite,
        company=result.company,
        error_message=result.error_message,
    )


@router.post("/accept/{token}", response_model=AcceptCleanerInviteResult)
async def accept_cleaner_invite(
    token: str,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    user, company, profile = service.accept_invite(token, current_user)
    return AcceptCleanerInviteResult(user=user, company=company, cleaner_profile=to_profile_response(profile))


# ============================================================================
# COMPANY ADMIN ENDPOINTS
# ============================================================================


@router.post("", response_model=CleanerInviteResult, status_code=201)
async def create_cleaner_invite(
    data: CreateCleanerInviteInput,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    invite = service.create_invite(data, current_user)
    return CleanerInviteResult(invite=invite, token=invite.token, invite_url=service.invite_url(invite.token))


@router.get("/mine", response_model=list[CleanerInviteResponse])
async def my_company_invites(
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    return service.list_my_company_invites(current_user)


@router.get("/cleaners", response_model=list[CleanerProfileResponse])
async def my_company_cleaners(
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    return [to_profile_response(p) for p in service.list_my_company_cleaners(current_user)]


@router.get("/{invite_id}", response_model=CleanerInviteResponse)
async def get_cleaner_invite(
    invite_id: str,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    return service.get_invite(invite_id, current_user)


@router.post("/{invite_id}/revoke", response_model=CleanerInviteResponse)
async def revoke_cleaner_invite(
    invite_id: str,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    return service.revoke_invite(invite_id, current_user)
