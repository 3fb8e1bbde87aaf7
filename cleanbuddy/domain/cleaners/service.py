"""Cleaner service - Business logic for cleaner profiles and tiers"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import require_global_admin
from ...database import transaction
from ...enums import CleanerTier, clamp_rate_to_tier, is_rate_valid_for_tier, max_rate, min_rate
from ...errors import Forbidden, InvariantViolation, NotFound
from ...models import CleanerProfile, User
from ..companies.repository import CompanyRepository
from .repository import CleanerProfileRepository
from .schemas import CleanerProfileCreate, CleanerProfileUpdate

logger = logging.getLogger(__name__)


def ensure_rate_for_tier(rate: int, tier: str) -> None:
    if not is_rate_valid_for_tier(rate, tier):
        raise InvariantViolation(
            f"hourly rate must be between {min_rate(tier)} and {max_rate(tier)} bani for tier {tier}"
        )


class CleanerService:
    """Service layer for cleaner profile business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CleanerProfileRepository()
        self.company_repo = CompanyRepository()

    def get_profile(self, profile_id: str) -> CleanerProfile:
        """Get a specific cleaner profile"""
        profile = self.repo.get_by_id(self.db, profile_id)
        if not profile:
            raise NotFound("cleaner profile not found")
        return profile

    def get_profile_by_user(self, user_id: str) -> CleanerProfile:
        profile = self.repo.get_by_user_id(self.db, user_id)
        if not profile:
            raise NotFound("cleaner profile not found")
        return profile

    def search_profiles(
        self,
        min_rating: Optional[float] = None,
        max_rating: Optional[float] = None,
        limit: int = 20,
        offset: int = 0,
        **filters,
    ) -> tuple[list[CleanerProfile], int]:
        if min_rating is not None and max_rating is not None and min_rating > max_rating:
            raise InvariantViolation("minimum rating must not exceed maximum rating")
        return self.repo.search(
            self.db, min_rating=min_rating, max_rating=max_rating, limit=limit, offset=offset, **filters
        )

    def get_my_profile(self, user: User) -> CleanerProfile:
        if not (user.is_cleaner() or user.is_company_admin()):
            raise Forbidden("user is not a cleaner")
        profile = self.repo.get_by_user_id(self.db, user.id)
        if not profile:
            raise NotFound("cleaner profile not found")
        return profile

    def create_profile(self, data: CleanerProfileCreate, user: User) -> CleanerProfile:
        """Create a profile for an approved cleaner or company admin"""
        if not (user.is_cleaner() or user.is_company_admin()):
            raise Forbidden("user must have cleaner or company admin role to create a profile")
        if self.repo.get_by_user_id(self.db, user.id):
            raise InvariantViolation("cleaner profile already exists for this user")

        tier = CleanerTier.NEW.value
        hourly_rate = data.hourly_rate if data.hourly_rate is not None else min_rate(tier)
        ensure_rate_for_tier(hourly_rate, tier)

        company = self.company_repo.get_by_admin_user_id(self.db, user.id)
        with transaction(self.db):
            profile = self.repo.create(
                self.db,
                user_id=user.id,
                company_id=company.id if company else None,
                bio=data.bio,
                tier=tier,
                hourly_rate=hourly_rate,
                is_active=True,
            )
            if company:
                self.company_repo.increment_cleaner_counts(self.db, company.id)

        logger.info(f"✅ Cleaner profile {profile.id} created for user {user.id}")
        return profile

    def update_profile(self, data: CleanerProfileUpdate, user: User) -> CleanerProfile:
        profile = self.repo.get_by_user_id(self.db, user.id)
        if not profile:
            raise NotFound("cleaner profile not found")
        if data.hourly_rate is not None:
            ensure_rate_for_tier(data.hourly_rate, profile.tier)

        with transaction(self.db):
            self.repo.apply_updates(
                self.db,
                profile,
                bio=data.bio,
                hourly_rate=data.hourly_rate,
                is_available_for_booking=data.is_available_for_booking,
            )
            if data.is_active is not None and self.repo.set_active(self.db, profile.id, data.is_active):
                if profile.company_id:
                    delta = 1 if data.is_active else -1
                    self.company_repo.increment_cleaner_counts(self.db, profile.company_id, total=0, active=delta)
                logger.info(f"🔁 Cleaner profile {profile.id} active={data.is_active}")
            self.db.expire(profile)
        return profile

    def update_tier(self, profile_id: str, tier: CleanerTier, user: User) -> CleanerProfile:
        """Admin-only tier change; the hourly rate is clamped into the new tier's range"""
        require_global_admin(user)
        profile = self.get_profile(profile_id)

        new_rate = clamp_rate_to_tier(profile.hourly_rate, tier)
        with transaction(self.db):
            if new_rate != profile.hourly_rate:
                logger.info(f"🔧 Clamping rate {profile.hourly_rate} -> {new_rate} for tier {tier.value}")
            self.repo.apply_updates(self.db, profile, tier=tier.value, hourly_rate=new_rate)

        logger.info(f"✅ Cleaner profile {profile_id} moved to tier {tier.value}")
        return profile
