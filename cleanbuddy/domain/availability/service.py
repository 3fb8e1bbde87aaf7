"""Availability service - Service areas, availability windows and cleaner matching"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...database import transaction
from ...errors import Forbidden, InvariantViolation, NotFound
from ...models import Availability, CleanerProfile, ServiceArea, User
from ...shared.validators import intervals_overlap, time_to_minutes, window_end_minutes
from ..cleaners.repository import CleanerProfileRepository
from .repository import AvailabilityRepository, ServiceAreaRepository
from .schemas import (
    AvailabilityBulkCreate,
    AvailabilityCreate,
    AvailabilityUpdate,
    ServiceAreaCreate,
    ServiceAreaUpdate,
)

logger = logging.getLogger(__name__)


def window_overlaps_availability(entry: Availability, start: int, end: int) -> bool:
    return intervals_overlap(time_to_minutes(entry.start_time), time_to_minutes(entry.end_time), start, end)


def window_overlaps_booking(booking, start: int, end: int) -> bool:
    booking_start = time_to_minutes(booking.scheduled_time)
    return intervals_overlap(booking_start, window_end_minutes(booking.scheduled_time, booking.duration), start, end)


class AvailabilityService:
    """Service layer for availability and matching"""

    def __init__(self, db: Session):
        self.db = db
        self.area_repo = ServiceAreaRepository()
        self.availability_repo = AvailabilityRepository()
        self.profile_repo = CleanerProfileRepository()

    def get_own_profile(self, user: User) -> CleanerProfile:
        profile = self.profile_repo.get_by_user_id(self.db, user.id)
        if not profile:
            raise NotFound("cleaner profile not found")
        return profile

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def is_cleaner_available(self, cleaner_profile_id: str, on_date: date, start_time: str, end_time: str) -> bool:
        """
        A cleaner is available unless one of their unavailable windows on that
        exact date overlaps [start_time, end_time)
        """
        start, end = time_to_minutes(start_time), time_to_minutes(end_time)
        blocked = self.availability_repo.unavailable_on(self.db, [cleaner_profile_id], on_date)
        return not any(window_overlaps_availability(entry, start, end) for entry in blocked)

    def is_slot_free(
        self,
        cleaner_profile_id: str,
        on_date: date,
        start: int,
        end: int,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """Free of both unavailable windows and confirmed/in-progress bookings; times in minutes"""
        return cleaner_profile_id in self._free_profile_ids([cleaner_profile_id], on_date, start, end, exclude_booking_id)

    def _free_profile_ids(
        self,
        profile_ids: list[str],
        on_date: date,
        start: int,
        end: int,
        exclude_booking_id: Optional[str] = None,
    ) -> set[str]:
        busy = set()
        for entry in self.availability_repo.unavailable_on(self.db, profile_ids, on_date):
            if window_overlaps_availability(entry, start, end):
                busy.add(entry.cleaner_profile_id)
        for booking in self.availability_repo.blocking_bookings_on(self.db, profile_ids, on_date, exclude_booking_id):
            if window_overlaps_booking(booking, start, end):
                busy.add(booking.cleaner_profile_id)
        return set(profile_ids) - busy

    def find_available_cleaners(
        self,
        on_date: date,
        start_time: str,
        end_time: str,
        service_area_ids: Optional[list[str]] = None,
    ) -> list[CleanerProfile]:
        """Active cleaners free for the whole window, best rated first"""
        candidates = self.profile_repo.list_active(self.db, service_area_ids)
        free = self._free_profile_ids(
            [p.id for p in candidates], on_date, time_to_minutes(start_time), time_to_minutes(end_time)
        )
        available = [p for p in candidates if p.id in free]
        logger.info(
            f"🔍 {len(available)}/{len(candidates)} cleaners available on {on_date} {start_time}-{end_time}"
        )
        return available

    def find_cleaners_in_area(self, city: str, neighborhood: Optional[str] = None) -> list[CleanerProfile]:
        return self.profile_repo.find_in_area(self.db, city, neighborhood)

    def find_cleaners_by_postal_code(self, postal_code: str) -> list[CleanerProfile]:
        return self.profile_repo.find_by_postal_code(self.db, postal_code)

    # ------------------------------------------------------------------
    # Service areas
    # ------------------------------------------------------------------

    def get_service_area(self, area_id: str) -> ServiceArea:
        area = self.area_repo.get_by_id(self.db, area_id)
        if not area:
            raise NotFound("service area not found")
        return area

    def list_service_areas(self, cleaner_profile_id: str) -> list[ServiceArea]:
        return self.area_repo.list_by_cleaner_profile(self.db, cleaner_profile_id)

    def list_my_service_areas(self, user: User) -> list[ServiceArea]:
        return self.list_service_areas(self.get_own_profile(user).id)

    def _get_owned_area(self, area_id: str, user: User) -> ServiceArea:
        area = self.get_service_area(area_id)
        profile = self.profile_repo.get_by_user_id(self.db, user.id)
        if not profile or area.cleaner_profile_id != profile.id:
            logger.warning(f"⚠️ User {user.id} tried to modify service area {area_id} they do not own")
            raise Forbidden("you can only manage your own service areas")
        return area

    def add_service_area(self, data: ServiceAreaCreate, user: User) -> ServiceArea:
        profile = self.get_own_profile(user)
        with transaction(self.db):
            area = self.area_repo.create(
                self.db,
                cleaner_profile_id=profile.id,
                city=data.city,
                neighborhood=data.neighborhood,
                postal_code=data.postal_code,
                travel_fee=data.travel_fee,
                is_preferred=data.is_preferred,
            )
        logger.info(f"✅ Service area {area.id} added for cleaner profile {profile.id}")
        return area

    def update_service_area(self, area_id: str, data: ServiceAreaUpdate, user: User) -> ServiceArea:
        area = self._get_owned_area(area_id, user)
        with transaction(self.db):
            self.area_repo.apply_updates(self.db, area, **data.model_dump(exclude_unset=True))
        return area

    def delete_service_area(self, area_id: str, user: User) -> None:
        area = self._get_owned_area(area_id, user)
        with transaction(self.db):
            self.area_repo.delete(self.db, area)
        logger.info(f"🗑️ Service area {area_id} deleted")

    # ------------------------------------------------------------------
    # Availability windows
    # ------------------------------------------------------------------

    def list_my_availability(
        self, user: User, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Availability]:
        profile = self.get_own_profile(user)
        return self.availability_repo.list_by_cleaner_profile(self.db, profile.id, start_date, end_date)

    def _stage_availability(self, profile: CleanerProfile, data: AvailabilityCreate) -> Availability:
        if data.recurrence_end_date and data.recurrence_end_date < data.date:
            raise InvariantViolation("recurrence end date must not be before the start date")
        return self.availability_repo.create(
            self.db,
            cleaner_profile_id=profile.id,
            type=data.type.value,
            date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            recurrence=data.recurrence.value,
            recurrence_end_date=data.recurrence_end_date,
            notes=data.notes,
        )

    def create_availability(self, data: AvailabilityCreate, user: User) -> Availability:
        profile = self.get_own_profile(user)
        with transaction(self.db):
            entry = self._stage_availability(profile, data)
        logger.info(f"✅ {entry.type} window {entry.date} {entry.start_time}-{entry.end_time} for {profile.id}")
        return entry

    def bulk_create_availability(self, data: AvailabilityBulkCreate, user: User) -> list[Availability]:
        """All entries are saved together or none are"""
        profile = self.get_own_profile(user)
        with transaction(self.db):
            entries = [self._stage_availability(profile, item) for item in data.entries]
        logger.info(f"✅ {len(entries)} availability windows created for {profile.id}")
        return entries

    def _get_owned_availability(self, availability_id: str, user: User) -> Availability:
        entry = self.availability_repo.get_by_id(self.db, availability_id)
        if not entry:
            raise NotFound("availability not found")
        profile = self.profile_repo.get_by_user_id(self.db, user.id)
        if not profile or entry.cleaner_profile_id != profile.id:
            raise Forbidden("you can only manage your own availability")
        return entry

    def update_availability(self, availability_id: str, data: AvailabilityUpdate, user: User) -> Availability:
        entry = self._get_owned_availability(availability_id, user)
        updates = data.model_dump(exclude_unset=True, mode="json")
        merged_date = data.date or entry.date
        start_time = data.start_time or entry.start_time
        end_time = data.end_time or entry.end_time
        if time_to_minutes(start_time) >= time_to_minutes(end_time):
            raise InvariantViolation("start time must be before end time")
        recurrence_end = data.recurrence_end_date or entry.recurrence_end_date
        if recurrence_end and recurrence_end < merged_date:
            raise InvariantViolation("recurrence end date must not be before the start date")

        updates.update(date=merged_date, recurrence_end_date=recurrence_end)
        with transaction(self.db):
            self.availability_repo.apply_updates(self.db, entry, **updates)
        return entry

    def delete_availability(self, availability_id: str, user: User) -> None:
        entry = self._get_owned_availability(availability_id, user)
        with transaction(self.db):
            self.availability_repo.delete(self.db, entry)
