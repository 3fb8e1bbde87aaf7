"""Booking repository - Database operations for bookings"""

from datetime import date
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Query, Session

from ...enums import UPCOMING_BOOKING_STATUSES
from ...models import Booking, User


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_by_id(db: Session, booking_id: str) -> Optional[Booking]:
        """Get a specific booking by ID"""
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def create(db: Session, **booking_data) -> Booking:
        """Stage a new booking; the caller commits"""
        booking = Booking(**booking_data)
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def transition(db: Session, booking_id: str, expected_status: str, **values) -> int:
        """
        Conditionally update a booking that is still in expected_status

        Returns:
            Number of rows changed (0 when another request moved the booking first)
        """
        result = db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    @staticmethod
    def _apply_filters(
        query: Query,
        status: Optional[str] = None,
        service_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_recurring: Optional[bool] = None,
    ) -> Query:
        if status:
            query = query.filter(Booking.status == status)
        if service_type:
            query = query.filter(Booking.service_type == service_type)
        if start_date:
            query = query.filter(Booking.scheduled_date >= start_date)
        if end_date:
            query = query.filter(Booking.scheduled_date <= end_date)
        if is_recurring is not None:
            query = query.filter(Booking.is_recurring.is_(is_recurring))
        return query

    @staticmethod
    def list_for_party(
        db: Session,
        customer_id: Optional[str] = None,
        cleaner_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
        **filters,
    ) -> tuple[list[Booking], int]:
        """
        Bookings for a customer or a cleaner, newest scheduled first

        Returns:
            Tuple of (page of bookings, total matching count)
        """
        query = db.query(Booking)
        if customer_id:
            query = query.filter(Booking.customer_id == customer_id)
        if cleaner_id:
            query = query.filter(Booking.cleaner_id == cleaner_id)
        query = BookingRepository._apply_filters(query, **filters)

        total = query.with_entities(func.count(Booking.id)).scalar() or 0
        items = (
            query.order_by(Booking.scheduled_date.desc(), Booking.scheduled_time.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def upcoming(
        db: Session,
        customer_id: Optional[str] = None,
        cleaner_id: Optional[str] = None,
        limit: int = 10,
    ) -> list[Booking]:
        """Open bookings soonest first"""
        query = db.query(Booking).filter(Booking.status.in_(UPCOMING_BOOKING_STATUSES))
        if customer_id:
            query = query.filter(Booking.customer_id == customer_id)
        if cleaner_id:
            query = query.filter(Booking.cleaner_id == cleaner_id)
        return query.order_by(Booking.scheduled_date.asc(), Booking.scheduled_time.asc()).limit(limit).all()


class UserLookupRepository:
    """User reads and inserts needed by booking creation"""

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        """Case-insensitive lookup"""
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    @staticmethod
    def create(db: Session, **user_data) -> User:
        user = User(**user_data)
        db.add(user)
        db.flush()
        return user
