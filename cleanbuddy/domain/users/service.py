"""User service - Current user, self-service role changes and account deletion"""

import logging

from sqlalchemy.orm import Session

from ...database import transaction
from ...enums import UserRole
from ...errors import InvariantViolation
from ...models import User
from ..cleaners.repository import CleanerProfileRepository
from ..companies.repository import CompanyRepository
from .repository import UserRepository
from .schemas import UpdateCurrentUserInput

logger = logging.getLogger(__name__)

# The only roles a user may move themselves into; everything else goes
# through applications, invites or an admin
SELF_SERVICE_ROLE_TRANSITIONS = {
    UserRole.CLIENT.value: {UserRole.PENDING_APPLICATION.value},
    UserRole.REJECTED_CLEANER.value: {UserRole.PENDING_APPLICATION.value},
}


def can_self_transition(current_role: str, new_role: str) -> bool:
    return new_role in SELF_SERVICE_ROLE_TRANSITIONS.get(current_role, set())


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()
        self.profile_repo = CleanerProfileRepository()
        self.company_repo = CompanyRepository()

    def update_current_user(self, data: UpdateCurrentUserInput, user: User) -> User:
        with transaction(self.db):
            self.repo.apply_updates(self.db, user, **data.model_dump(exclude_unset=True))
        return user

    def update_role(self, role: UserRole, user: User) -> User:
        """Apply a self-initiated role change if the allow-list permits it"""
        if user.role not in SELF_SERVICE_ROLE_TRANSITIONS:
            logger.warning(f"⚠️ Role transition not allowed from {user.role} for user {user.id}")
            raise InvariantViolation("role transition not allowed from your current role")
        if not can_self_transition(user.role, role.value):
            logger.warning(f"⚠️ User {user.id} cannot transition from {user.role} to {role.value}")
            raise InvariantViolation("cannot transition to the requested role")

        previous = user.role
        with transaction(self.db):
            self.repo.set_role(self.db, user, role.value)
        logger.info(f"🔄 User {user.id} role {previous} -> {role.value}")
        return user

    def delete_current_user(self, user: User) -> None:
        """
        Delete the caller's account together with their addresses, applications
        and cleaner profile.

        Accounts that bookings, a company or sent invites still point at are kept,
        since those records must stay attributable.
        """
        if self.repo.has_bookings(self.db, user.id):
            raise InvariantViolation("accounts with bookings cannot be deleted")
        if self.repo.administers_company(self.db, user.id):
            raise InvariantViolation("company admins cannot delete their account")
        if self.repo.has_sent_invites(self.db, user.id):
            raise InvariantViolation("accounts that sent cleaner invites cannot be deleted")

        profile = self.profile_repo.get_by_user_id(self.db, user.id)
        with transaction(self.db):
            if profile and profile.company_id:
                self.company_repo.increment_cleaner_counts(
                    self.db, profile.company_id, total=-1, active=-1 if profile.is_active else 0
                )
            self.repo.detach_references(self.db, user.id)
            self.repo.delete(self.db, user)
        logger.info(f"🗑️ User {user.id} deleted their account")
