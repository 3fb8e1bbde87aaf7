"""Invite service - Company-issued cleaner invites"""

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import DEFAULT_INVITE_EXPIRY_DAYS, INVITE_TOKEN_BYTES, MAX_INVITE_EXPIRY_DAYS
from ...database import transaction
from ...email_service import MailService
from ...enums import CleanerInviteStatus, CleanerTier, CompanyType, UserRole, min_rate
from ...errors import ConflictError, Forbidden, InvariantViolation, NotFound
from ...models import CleanerInvite, CleanerProfile, Company, User, utcnow
from ...services.notification_service import notify_safely
from ..cleaners.repository import CleanerProfileRepository
from ..companies.repository import CompanyRepository
from ..users.repository import UserRepository
from .repository import CleanerInviteRepository
from .schemas import CreateCleanerInviteInput

logger = logging.getLogger(__name__)


def generate_invite_token() -> str:
    """64 hex characters from a CSPRNG"""
    return secrets.token_hex(INVITE_TOKEN_BYTES)


def resolve_expiry_days(requested: Optional[int]) -> int:
    """Missing or non-positive values use the default; long expiries are capped"""
    if requested is None or requested <= 0:
        return DEFAULT_INVITE_EXPIRY_DAYS
    return min(requested, MAX_INVITE_EXPIRY_DAYS)


@dataclass
class InviteValidation:
    """Outcome of checking an invite token; never raised"""

    valid: bool
    invite: Optional[CleanerInvite] = None
    company: Optional[Company] = None
    error_message: Optional[str] = None


class InviteService:
    """Service layer for cleaner invite business logic"""

    def __init__(self, db: Session, mail_service: MailService, frontend_url: str):
        self.db = db
        self.mail_service = mail_service
        self.frontend_url = frontend_url.rstrip("/")
        self.repo = CleanerInviteRepository()
        self.company_repo = CompanyRepository()
        self.profile_repo = CleanerProfileRepository()
        self.user_repo = UserRepository()

    def invite_url(self, token: str) -> str:
        return f"{self.frontend_url}/invite/{token}"

    # ============================================
    # Company admin side
    # ============================================

    def _get_admin_company(self, user: User) -> Company:
        if not user.is_company_admin():
            raise Forbidden("access forbidden, company admin access required")
        company = self.company_repo.get_by_admin_user_id(self.db, user.id)
        if not company:
            raise NotFound("company not found")
        return company

    def create_invite(self, data: CreateCleanerInviteInput, user: User) -> CleanerInvite:
        if not user.is_company_admin():
            raise Forbidden("access forbidden, only company admins can create invites")
        company = self._get_admin_company(user)
        if company.company_type != CompanyType.BUSINESS.value:
            raise InvariantViolation("only business companies can invite cleaners")

        expiry_days = resolve_expiry_days(data.expires_in_days)
        with transaction(self.db):
            invite = self.repo.create(
                self.db,
                company_id=company.id,
                invited_by=user.id,
                email=data.email,
                message=data.message,
                token=generate_invite_token(),
                status=CleanerInviteStatus.PENDING.value,
                expires_at=utcnow() + timedelta(days=expiry_days),
            )
        logger.info(f"✉️ Invite {invite.id} created for company {company.id} (expires in {expiry_days} days)")

        if invite.email:
            notify_safely(
                "cleaner invite email",
                self.mail_service.send_cleaner_invite,
                to=invite.email,
                company_name=company.company_name,
                invite_url=self.invite_url(invite.token),
                expires_on=invite.expires_at.date().isoformat(),
                message=invite.message,
            )
        return invite

    def get_invite(self, invite_id: str, user: User) -> CleanerInvite:
        """Visible to the owning company's admin and global admins"""
        if not (user.is_company_admin() or user.is_global_admin()):
            raise Forbidden("access forbidden, company admin access required")
        invite = self.repo.get_by_id(self.db, invite_id)
        if not invite:
            raise NotFound("invite not found")
        self._require_company_access(invite, user)
        return invite

    def list_my_company_invites(self, user: User) -> list[CleanerInvite]:
        company = self._get_admin_company(user)
        return self.repo.list_by_company(self.db, company.id)

    def list_my_company_cleaners(self, user: User) -> list[CleanerProfile]:
        company = self._get_admin_company(user)
        return self.company_repo.list_cleaners(self.db, company.id)

    def revoke_invite(self, invite_id: str, user: User) -> CleanerInvite:
        if not (user.is_company_admin() or user.is_global_admin()):
            raise Forbidden("access forbidden, company admin access required")
        invite = self.repo.get_by_id(self.db, invite_id)
        if not invite:
            raise NotFound("invite not found")
        self._require_company_access(invite, user)
        if invite.status != CleanerInviteStatus.PENDING.value:
            raise InvariantViolation("can only revoke pending invites")

        with transaction(self.db):
            if self.repo.close_pending(self.db, invite.id, status=CleanerInviteStatus.REVOKED.value) == 0:
                raise ConflictError("invite was accepted or revoked by another request")
            self.db.expire(invite)

        logger.info(f"🚫 Invite {invite_id} revoked by {user.id}")
        return invite

    def _require_company_access(self, invite: CleanerInvite, user: User) -> None:
        if user.is_global_admin():
            return
        company = self.company_repo.get_by_admin_user_id(self.db, user.id)
        if not company or company.id != invite.company_id:
            raise Forbidden()

    # ============================================
    # Invitee side
    # ============================================

    def validate_token(self, token: str) -> InviteValidation:
        """Check a token for the public invite page"""
        invite = self.repo.get_by_token(self.db, token)
        if not invite:
            return InviteValidation(False, error_message="Invalid invite token")
        if invite.is_expired():
            return InviteValidation(False, invite=invite, error_message="Invite has expired")
        if invite.status != CleanerInviteStatus.PENDING.value:
            return InviteValidation(False, invite=invite, error_message=f"Invite has already been {invite.status}")

        company = self.company_repo.get_by_id(self.db, invite.company_id)
        if not company:
            return InviteValidation(False, error_message="Company not found")
        return InviteValidation(True, invite=invite, company=company)

    def accept_invite(self, token: str, user: User) -> tuple[User, Company, CleanerProfile]:
        """
        Join a company as a cleaner.

        The role change, the new profile, the accepted invite and the company
        counters are written in one transaction; a second acceptance of the
        same invite fails without touching the counters.
        """
        invite = self.repo.get_by_token(self.db, token)
        if not invite:
            raise NotFound("invalid invite token")
        if invite.status != CleanerInviteStatus.PENDING.value:
            raise InvariantViolation(f"invite has already been {invite.status}")
        if invite.is_expired():
            raise InvariantViolation("invite has expired")
        if self.profile_repo.get_by_user_id(self.db, user.id):
            raise InvariantViolation("you already have a cleaner profile")
        if user.is_cleaner() or user.is_company_admin():
            raise InvariantViolation("you are already a cleaner or company admin")

        company = self.company_repo.get_by_id(self.db, invite.company_id)
        if not company:
            raise NotFound("company not found")

        with transaction(self.db):
            accepted = self.repo.close_pending(
                self.db,
                invite.id,
                status=CleanerInviteStatus.ACCEPTED.value,
                accepted_by=user.id,
                accepted_at=utcnow(),
            )
            if accepted == 0:
                logger.warning(f"⚠️ Invite {invite.id} was closed before {user.id} could accept it")
                raise ConflictError("invite has already been used")

            self.user_repo.set_role(self.db, user, UserRole.CLEANER.value)
            profile = self.profile_repo.create(
                self.db,
                user_id=user.id,
                company_id=company.id,
                tier=CleanerTier.NEW.value,
                hourly_rate=min_rate(CleanerTier.NEW),
                is_active=True,
            )
            self.company_repo.increment_cleaner_counts(self.db, company.id)
            self.db.expire(invite)
            self.db.expire(company)

        logger.info(f"🤝 User {user.id} joined company {company.id} via invite {invite.id}")

        admin = self.user_repo.get_by_id(self.db, company.admin_user_id)
        if admin:
            notify_safely(
                "invite accepted email",
                self.mail_service.send_invite_accepted,
                to=admin.email,
                admin_name=admin.full_name or admin.email,
                cleaner_name=user.full_name or user.email,
                cleaner_email=user.email,
            )
        return user, company, profile
