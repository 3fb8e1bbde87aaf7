"""Cleaner profile repository - Database operations for cleaner profiles"""

from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ...enums import CleanerSearchOrder
from ...models import CleanerProfile, ServiceArea

SEARCH_ORDERINGS = {
    CleanerSearchOrder.RATING.value: (CleanerProfile.average_rating.desc(), CleanerProfile.total_reviews.desc()),
    CleanerSearchOrder.RATE.value: (CleanerProfile.hourly_rate.asc(),),
    CleanerSearchOrder.EXPERIENCE.value: (CleanerProfile.completed_bookings.desc(),),
    CleanerSearchOrder.NEWEST.value: (CleanerProfile.created_at.desc(),),
}


class CleanerProfileRepository:
    """Repository for cleaner profile database operations"""

    @staticmethod
    def get_by_id(db: Session, profile_id: str) -> Optional[CleanerProfile]:
        """Get a specific cleaner profile by ID"""
        return db.query(CleanerProfile).filter(CleanerProfile.id == profile_id).first()

    @staticmethod
    def get_by_user_id(db: Session, user_id: str) -> Optional[CleanerProfile]:
        return db.query(CleanerProfile).filter(CleanerProfile.user_id == user_id).first()

    @staticmethod
    def create(db: Session, **profile_data) -> CleanerProfile:
        """Stage a new profile; the caller commits"""
        profile = CleanerProfile(**profile_data)
        db.add(profile)
        db.flush()
        return profile

    @staticmethod
    def apply_updates(db: Session, profile: CleanerProfile, **updates) -> CleanerProfile:
        for key, value in updates.items():
            if value is not None and hasattr(profile, key):
                setattr(profile, key, value)
        db.flush()
        return profile

    @staticmethod
    def set_active(db: Session, profile_id: str, is_active: bool) -> int:
        """Flip is_active only if it differs; returns affected rows so counters move once per change"""
        result = db.execute(
            update(CleanerProfile)
            .where(CleanerProfile.id == profile_id, CleanerProfile.is_active.is_(not is_active))
            .values(is_active=is_active)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @staticmethod
    def increment_stats(db: Session, profile_id: str, **deltas: int) -> None:
        """Atomically add to stat columns, e.g. increment_stats(db, id, completed_bookings=1)"""
        values = {getattr(CleanerProfile, col): getattr(CleanerProfile, col) + n for col, n in deltas.items()}
        db.execute(
            update(CleanerProfile)
            .where(CleanerProfile.id == profile_id)
            .values(values)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def list_active(db: Session, service_area_ids: Optional[list[str]] = None) -> list[CleanerProfile]:
        """Active profiles, optionally limited to owners of the given service areas, best rated first"""
        query = db.query(CleanerProfile).filter(CleanerProfile.is_active.is_(True))
        if service_area_ids:
            query = query.filter(
                CleanerProfile.id.in_(
                    select(ServiceArea.cleaner_profile_id).where(ServiceArea.id.in_(service_area_ids))
                )
            )
        return query.order_by(CleanerProfile.average_rating.desc(), CleanerProfile.created_at.desc()).all()

    @staticmethod
    def find_in_area(db: Session, city: str, neighborhood: Optional[str] = None) -> list[CleanerProfile]:
        """Active cleaners with a service area in the city (and neighborhood, when given)"""
        areas = select(ServiceArea.cleaner_profile_id).where(ServiceArea.city == city)
        if neighborhood:
            areas = areas.where(ServiceArea.neighborhood == neighborhood)
        return (
            db.query(CleanerProfile)
            .filter(CleanerProfile.is_active.is_(True), CleanerProfile.id.in_(areas))
            .order_by(CleanerProfile.average_rating.desc())
            .all()
        )

    @staticmethod
    def find_by_postal_code(db: Session, postal_code: str) -> list[CleanerProfile]:
        areas = select(ServiceArea.cleaner_profile_id).where(ServiceArea.postal_code == postal_code)
        return (
            db.query(CleanerProfile)
            .filter(CleanerProfile.is_active.is_(True), CleanerProfile.id.in_(areas))
            .order_by(CleanerProfile.average_rating.desc())
            .all()
        )

    @staticmethod
    def search(
        db: Session,
        tier: Optional[str] = None,
        min_rating: Optional[float] = None,
        max_rating: Optional[float] = None,
        is_active: Optional[bool] = None,
        is_verified: Optional[bool] = None,
        is_available_for_booking: Optional[bool] = None,
        service_area_ids: Optional[list[str]] = None,
        city: Optional[str] = None,
        neighborhood: Optional[str] = None,
        postal_code: Optional[str] = None,
        order_by: str = CleanerSearchOrder.RATING.value,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[CleanerProfile], int]:
        """
        Filtered, paginated profile search

        Location filters match against the cleaner's service areas; every
        given filter must hold.

        Returns:
            Tuple of (page of profiles, total matching count)
        """
        query = db.query(CleanerProfile)
        if tier:
            query = query.filter(CleanerProfile.tier == tier)
        if min_rating is not None:
            query = query.filter(CleanerProfile.average_rating >= min_rating)
        if max_rating is not None:
            query = query.filter(CleanerProfile.average_rating <= max_rating)
        if is_active is not None:
            query = query.filter(CleanerProfile.is_active.is_(is_active))
        if is_verified is not None:
            query = query.filter(CleanerProfile.is_verified.is_(is_verified))
        if is_available_for_booking is not None:
            query = query.filter(CleanerProfile.is_available_for_booking.is_(is_available_for_booking))
        if service_area_ids:
            query = query.filter(
                CleanerProfile.id.in_(
                    select(ServiceArea.cleaner_profile_id).where(ServiceArea.id.in_(service_area_ids))
                )
            )
        if city or neighborhood or postal_code:
            areas = select(ServiceArea.cleaner_profile_id)
            if city:
                areas = areas.where(func.lower(ServiceArea.city) == city.lower())
            if neighborhood:
                areas = areas.where(func.lower(ServiceArea.neighborhood) == neighborhood.lower())
            if postal_code:
                areas = areas.where(ServiceArea.postal_code == postal_code)
            query = query.filter(CleanerProfile.id.in_(areas))

        total = query.with_entities(func.count(CleanerProfile.id)).scalar() or 0
        items = query.order_by(*SEARCH_ORDERINGS[order_by], CleanerProfile.id.asc()).offset(offset).limit(limit).all()
        return items, total
