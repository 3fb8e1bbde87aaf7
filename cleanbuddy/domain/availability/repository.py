"""Availability repository - Database operations for service areas and availability windows"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...enums import BLOCKING_BOOKING_STATUSES, AvailabilityType
from ...models import Availability, Booking, ServiceArea


class ServiceAreaRepository:
    """Repository for service area database operations"""

    @staticmethod
    def get_by_id(db: Session, area_id: str) -> Optional[ServiceArea]:
        return db.query(ServiceArea).filter(ServiceArea.id == area_id).first()

    @staticmethod
    def list_by_cleaner_profile(db: Session, cleaner_profile_id: str) -> list[ServiceArea]:
        """Areas in declaration order"""
        return (
            db.query(ServiceArea)
            .filter(ServiceArea.cleaner_profile_id == cleaner_profile_id)
            .order_by(ServiceArea.created_at.asc())
            .all()
        )

    @staticmethod
    def create(db: Session, **area_data) -> ServiceArea:
        area = ServiceArea(**area_data)
        db.add(area)
        db.flush()
        return area

    @staticmethod
    def apply_updates(db: Session, area: ServiceArea, **updates) -> ServiceArea:
        for key, value in updates.items():
            if value is not None and hasattr(area, key):
                setattr(area, key, value)
        db.flush()
        return area

    @staticmethod
    def delete(db: Session, area: ServiceArea) -> None:
        db.delete(area)
        db.flush()


class AvailabilityRepository:
    """Repository for availability window database operations"""

    @staticmethod
    def get_by_id(db: Session, availability_id: str) -> Optional[Availability]:
        return db.query(Availability).filter(Availability.id == availability_id).first()

    @staticmethod
    def list_by_cleaner_profile(
        db: Session,
        cleaner_profile_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        availability_type: Optional[str] = None,
    ) -> list[Availability]:
        query = db.query(Availability).filter(Availability.cleaner_profile_id == cleaner_profile_id)
        if start_date:
            query = query.filter(Availability.date >= start_date)
        if end_date:
            query = query.filter(Availability.date <= end_date)
        if availability_type:
            query = query.filter(Availability.type == availability_type)
        return query.order_by(Availability.date.asc(), Availability.start_time.asc()).all()

    @staticmethod
    def create(db: Session, **availability_data) -> Availability:
        availability = Availability(**availability_data)
        db.add(availability)
        db.flush()
        return availability

    @staticmethod
    def apply_updates(db: Session, availability: Availability, **updates) -> Availability:
        for key, value in updates.items():
            if value is not None and hasattr(availability, key):
                setattr(availability, key, value)
        db.flush()
        return availability

    @staticmethod
    def delete(db: Session, availability: Availability) -> None:
        db.delete(availability)
        db.flush()

    @staticmethod
    def unavailable_on(db: Session, cleaner_profile_ids: list[str], on_date: date) -> list[Availability]:
        """Unavailable windows on an exact date for a set of cleaners"""
        if not cleaner_profile_ids:
            return []
        return (
            db.query(Availability)
            .filter(
                Availability.cleaner_profile_id.in_(cleaner_profile_ids),
                Availability.type == AvailabilityType.UNAVAILABLE.value,
                Availability.date == on_date,
            )
            .all()
        )

    @staticmethod
    def blocking_bookings_on(
        db: Session, cleaner_profile_ids: list[str], on_date: date, exclude_booking_id: Optional[str] = None
    ) -> list[Booking]:
        """Confirmed and in-progress bookings on an exact date for a set of cleaners"""
        if not cleaner_profile_ids:
            return []
        query = db.query(Booking).filter(
            Booking.cleaner_profile_id.in_(cleaner_profile_ids),
            Booking.scheduled_date == on_date,
            Booking.status.in_(BLOCKING_BOOKING_STATUSES),
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.all()
