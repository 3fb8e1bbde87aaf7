"""Booking service - Business logic for the booking lifecycle"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import require_global_admin
from ...database import transaction
from ...email_service import MailService
from ...enums import BookingStatus, ServiceFrequency, UserRole
from ...errors import (
    AuthenticationRequired,
    ConflictError,
    Forbidden,
    InvariantViolation,
    NotFound,
)
from ...models import Address, Booking, User, utcnow
from ...services.notification_service import notify_safely
from ...shared.validators import minutes_to_time, time_to_minutes, window_end_minutes
from ..addresses.repository import AddressRepository
from ..availability.service import AvailabilityService
from ..cleaners.repository import CleanerProfileRepository
from ..pricing.service import PricingService
from .repository import BookingRepository, UserLookupRepository
from .schemas import CancelBookingInput, CreateBookingInput, UpdateBookingInput

logger = logging.getLogger(__name__)


def display_name(user: User) -> str:
    return user.full_name or user.email


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session, mail_service: MailService, platform_fee_percentage: float):
        self.db = db
        self.mail_service = mail_service
        self.repo = BookingRepository()
        self.address_repo = AddressRepository()
        self.user_repo = UserLookupRepository()
        self.profile_repo = CleanerProfileRepository()
        self.pricing = PricingService(db, platform_fee_percentage)
        self.availability = AvailabilityService(db)

    # ============================================
    # Queries
    # ============================================

    def get_booking(self, booking_id: str, user: User) -> Booking:
        """Visible to the customer, the assigned cleaner and global admins"""
        return self._get(booking_id, user)

    def list_my_bookings(self, user: User, limit: int = 50, offset: int = 0, **filters) -> tuple[list[Booking], int]:
        return self.repo.list_for_party(self.db, customer_id=user.id, limit=limit, offset=offset, **filters)

    def list_my_jobs(self, user: User, limit: int = 50, offset: int = 0, **filters) -> tuple[list[Booking], int]:
        if not (user.is_cleaner() or user.is_global_admin()):
            raise Forbidden("only cleaners can view jobs")
        return self.repo.list_for_party(self.db, cleaner_id=user.id, limit=limit, offset=offset, **filters)

    def list_all_bookings(
        self,
        user: User,
        customer_id: Optional[str] = None,
        cleaner_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
        **filters,
    ) -> tuple[list[Booking], int]:
        """Every booking on the platform, for global admins"""
        require_global_admin(user)
        return self.repo.list_for_party(
            self.db, customer_id=customer_id, cleaner_id=cleaner_id, limit=limit, offset=offset, **filters
        )

    def upcoming_bookings(self, user: User, limit: int = 10) -> list[Booking]:
        """Open jobs for cleaners, open bookings for everyone else"""
        if user.is_cleaner():
            return self.repo.upcoming(self.db, cleaner_id=user.id, limit=limit)
        return self.repo.upcoming(self.db, customer_id=user.id, limit=limit)

    # ============================================
    # Creation
    # ============================================

    def create_booking(self, data: CreateBookingInput, user: Optional[User]) -> Booking:
        """
        Create a pending booking with a frozen price snapshot.

        Anonymous callers must supply guest details; a client account is
        created for them in the same transaction as the booking.
        """
        if user is None and data.guest is None:
            raise AuthenticationRequired("authentication required or user details must be provided")
        if user is None and data.address_id:
            raise InvariantViolation("guests must provide a full address")

        profile = self.profile_repo.get_by_id(self.db, data.cleaner_profile_id)
        if not profile:
            raise NotFound("cleaner profile not found")
        if not profile.is_available_for_booking:
            raise InvariantViolation("cleaner is not currently accepting bookings")

        saved_address: Optional[Address] = None
        if data.address_id:
            saved_address = self.address_repo.get_by_id(self.db, data.address_id)
            if not saved_address:
                raise NotFound("address not found")
            if saved_address.user_id != user.id:
                raise Forbidden("address does not belong to user")
            location = saved_address
        elif data.address:
            location = data.address
        else:
            raise InvariantViolation("address is required")

        if user is None and self.user_repo.get_by_email(self.db, data.guest.email):
            logger.warning(f"⚠️ Guest checkout attempted with existing account email {data.guest.email}")
            raise ConflictError("an account with this email already exists, please sign in to book")

        breakdown = self.pricing.build_quote(
            profile,
            data.service_type,
            data.add_ons,
            location.city,
            location.neighborhood,
            location.postal_code,
        )

        start = time_to_minutes(data.scheduled_time)
        end = window_end_minutes(data.scheduled_time, breakdown.estimated_hours)
        if not self.availability.is_slot_free(profile.id, data.scheduled_date, start, end):
            logger.warning(
                f"⚠️ Cleaner {profile.id} unavailable on {data.scheduled_date} "
                f"{data.scheduled_time}-{minutes_to_time(end)}"
            )
            raise InvariantViolation("cleaner is not available at the requested time")

        with transaction(self.db):
            customer = user
            if customer is None:
                customer = self.user_repo.create(
                    self.db,
                    email=data.guest.email,
                    first_name=data.guest.first_name,
                    last_name=data.guest.last_name,
                    phone=data.guest.phone,
                    role=UserRole.CLIENT.value,
                )
                logger.info(f"👤 Guest customer {customer.id} created for {customer.email}")

            if saved_address is None:
                saved_address = self.address_repo.create(
                    self.db,
                    user_id=customer.id,
                    is_default=not self.address_repo.has_addresses(self.db, customer.id),
                    **data.address.model_dump(),
                )

            booking = self.repo.create(
                self.db,
                customer_id=customer.id,
                cleaner_id=profile.user_id,
                cleaner_profile_id=profile.id,
                address_id=saved_address.id,
                service_type=data.service_type.value,
                frequency=data.frequency.value,
                add_ons=[a.value for a in data.add_ons],
                scheduled_date=data.scheduled_date,
                scheduled_time=data.scheduled_time,
                duration=breakdown.estimated_hours,
                area_sqm=data.area_sqm,
                estimated_hours=breakdown.estimated_hours,
                cleaner_hourly_rate=breakdown.cleaner_hourly_rate,
                service_price=breakdown.service_price,
                add_ons_price=breakdown.add_ons_price,
                travel_fee=breakdown.travel_fee,
                platform_fee=breakdown.platform_fee,
                total_price=breakdown.total_price,
                cleaner_payout=breakdown.cleaner_payout,
                status=BookingStatus.PENDING.value,
                special_instructions=data.special_instructions,
                access_instructions=data.access_instructions,
                customer_notes=data.customer_notes,
                is_recurring=data.frequency != ServiceFrequency.ONE_TIME,
            )
            self.profile_repo.increment_stats(self.db, profile.id, total_bookings=1)

        logger.info(
            f"✅ Booking {booking.id} created for customer {booking.customer_id} "
            f"with cleaner {profile.id} (total={booking.total_price})"
        )
        return booking

    # ============================================
    # Transitions
    # ============================================

    def update_booking(self, booking_id: str, data: UpdateBookingInput, user: User) -> Booking:
        """Reschedule or annotate a pending booking (customer only)"""
        booking = self._get(booking_id, user)
        if booking.customer_id != user.id:
            raise Forbidden("only the customer can update booking details")
        if booking.status != BookingStatus.PENDING.value:
            raise InvariantViolation("can only update pending bookings")

        values = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if not values:
            return booking

        new_date = values.get("scheduled_date", booking.scheduled_date)
        new_time = values.get("scheduled_time", booking.scheduled_time)
        if new_date != booking.scheduled_date or new_time != booking.scheduled_time:
            start = time_to_minutes(new_time)
            end = window_end_minutes(new_time, booking.duration)
            if not self.availability.is_slot_free(booking.cleaner_profile_id, new_date, start, end, booking.id):
                logger.warning(f"⚠️ Booking {booking_id} cannot move to {new_date} {new_time}-{minutes_to_time(end)}")
                raise InvariantViolation("cleaner is not available at the requested time")

        with transaction(self.db):
            self._transition(booking, BookingStatus.PENDING, BookingStatus.PENDING, **values)

        logger.info(f"✏️ Booking {booking_id} updated: {sorted(values)}")
        return booking

    def confirm_booking(self, booking_id: str, user: User) -> Booking:
        booking = self._get(booking_id, user)
        self._require_assigned_cleaner(booking, user, "only the assigned cleaner can confirm this booking")
        if booking.status != BookingStatus.PENDING.value:
            raise InvariantViolation("can only confirm pending bookings")

        with transaction(self.db):
            self._transition(booking, BookingStatus.PENDING, BookingStatus.CONFIRMED, confirmed_at=utcnow())

        logger.info(f"✅ Booking {booking_id} confirmed by cleaner {user.id}")
        customer = booking.customer
        notify_safely(
            "booking confirmation email",
            self.mail_service.send_booking_confirmed,
            to=customer.email,
            customer_name=display_name(customer),
            cleaner_name=display_name(booking.cleaner),
            scheduled_date=booking.scheduled_date.isoformat(),
            scheduled_time=booking.scheduled_time,
            total_price=booking.total_price,
        )
        return booking

    def start_booking(self, booking_id: str, user: User) -> Booking:
        booking = self._get(booking_id, user)
        self._require_assigned_cleaner(booking, user, "only the assigned cleaner can start this booking")
        if booking.status != BookingStatus.CONFIRMED.value:
            raise InvariantViolation("can only start confirmed bookings")

        with transaction(self.db):
            self._transition(booking, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS, started_at=utcnow())

        logger.info(f"🧹 Booking {booking_id} started")
        return booking

    def complete_booking(self, booking_id: str, user: User, notes: Optional[str] = None) -> Booking:
        """Finish a job; the frozen payout is added to the cleaner's earnings"""
        booking = self._get(booking_id, user)
        self._require_assigned_cleaner(booking, user, "only the assigned cleaner can complete this booking")
        if booking.status != BookingStatus.IN_PROGRESS.value:
            raise InvariantViolation("can only complete bookings that are in progress")

        values = {"completed_at": utcnow()}
        if notes:
            values["cleaner_notes"] = notes

        payout = booking.cleaner_payout
        with transaction(self.db):
            self._transition(booking, BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED, **values)
            self.profile_repo.increment_stats(
                self.db, booking.cleaner_profile_id, completed_bookings=1, total_earnings=payout
            )

        logger.info(f"🎉 Booking {booking_id} completed, payout {payout} bani")
        customer = booking.customer
        notify_safely(
            "booking completed email",
            self.mail_service.send_booking_completed,
            to=customer.email,
            customer_name=display_name(customer),
            cleaner_name=display_name(booking.cleaner),
            scheduled_date=booking.scheduled_date.isoformat(),
        )
        return booking

    def cancel_booking(self, booking_id: str, data: CancelBookingInput, user: User) -> Booking:
        booking = self._get(booking_id, user)
        if booking.is_terminal():
            raise InvariantViolation("cannot cancel completed or already cancelled bookings")

        current = BookingStatus(booking.status)
        with transaction(self.db):
            self._transition(
                booking,
                current,
                BookingStatus.CANCELLED,
                cancellation_reason=data.reason.value,
                cancellation_note=data.note,
                cancelled_by=user.id,
                cancelled_at=utcnow(),
            )
            self.profile_repo.increment_stats(self.db, booking.cleaner_profile_id, cancelled_bookings=1)

        logger.info(f"🚫 Booking {booking_id} cancelled by {user.id} ({data.reason.value})")

        recipients = []
        if user.id != booking.customer_id:
            recipients.append(booking.customer)
        if user.id != booking.cleaner_id:
            recipients.append(booking.cleaner)
        for recipient in recipients:
            notify_safely(
                "booking cancellation email",
                self.mail_service.send_booking_cancelled,
                to=recipient.email,
                recipient_name=display_name(recipient),
                scheduled_date=booking.scheduled_date.isoformat(),
                scheduled_time=booking.scheduled_time,
                reason=data.note or data.reason.value,
            )
        return booking

    def mark_no_show(self, booking_id: str, user: User) -> Booking:
        booking = self._get(booking_id, user)
        self._require_assigned_cleaner(booking, user, "only the assigned cleaner can mark customer as no-show")
        if booking.status != BookingStatus.CONFIRMED.value:
            raise InvariantViolation("can only mark no-show for confirmed bookings")

        with transaction(self.db):
            self._transition(booking, BookingStatus.CONFIRMED, BookingStatus.NO_SHOW)

        logger.info(f"👻 Booking {booking_id} marked as no-show")
        return booking

    # ============================================
    # Helpers
    # ============================================

    def _get(self, booking_id: str, user: User) -> Booking:
        """Load a booking for one of its parties; anyone else sees it as missing"""
        booking = self.repo.get_by_id(self.db, booking_id)
        if not booking or not self._is_party(booking, user):
            raise NotFound("booking not found")
        return booking

    @staticmethod
    def _is_party(booking: Booking, user: User) -> bool:
        return user.id in (booking.customer_id, booking.cleaner_id) or user.is_global_admin()

    @staticmethod
    def _require_assigned_cleaner(booking: Booking, user: User, message: str) -> None:
        if booking.cleaner_id != user.id:
            logger.warning(f"⚠️ User {user.id} is not the assigned cleaner of booking {booking.id}")
            raise Forbidden(message)

    def _transition(self, booking: Booking, expected: BookingStatus, new_status: BookingStatus, **values) -> None:
        """Move the booking only if no other request changed its status first"""
        rows = self.repo.transition(self.db, booking.id, expected.value, status=new_status.value, **values)
        if rows == 0:
            logger.warning(f"⚠️ Booking {booking.id} left {expected.value} before {new_status.value} was applied")
            raise ConflictError("booking was modified by another request, please retry")
        # Reload the row written behind the session's back
        self.db.expire(booking)
