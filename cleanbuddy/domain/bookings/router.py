"""Booking router - FastAPI endpoints for the booking lifecycle"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user
from ...database import get_db
from ...enums import BookingStatus, ServiceType
from ...models import User
from ...rate_limiter import enforce_rate_limit
from .schemas import (
    BookingConnection,
    BookingResponse,
    CancelBookingInput,
    CompleteBookingInput,
    CreateBookingInput,
    UpdateBookingInput,
)
from .service import BookingService

router = APIRouter(prefix="/bookings", tags=["Bookings"])

GUEST_BOOKING_LIMIT = 5
GUEST_BOOKING_WINDOW_SECONDS = 3600


def get_booking_service(request: Request, db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db, request.app.state.mail_service, request.app.state.platform_fee_percentage)


def booking_filters(
    status: Optional[BookingStatus] = Query(None),
    service_type: Optional[ServiceType] = Query(None, alias="serviceType"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    is_recurring: Optional[bool] = Query(None, alias="isRecurring"),
) -> dict:
    return {
        "status": status.value if status else None,
        "service_type": service_type.value if service_type else None,
        "start_date": start_date,
        "end_date": end_date,
        "is_recurring": is_recurring,
    }


# ============================================================================
# QUERIES
# ============================================================================


@router.get("/mine", response_model=BookingConnection)
async def my_bookings(
    filters: dict = Depends(booking_filters),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    items, total = service.list_my_bookings(current_user, limit=limit, offset=offset, **filters)
    return BookingConnection(items=items, total_count=total)


@router.get("/jobs", response_model=BookingConnection)
async def my_jobs(
    filters: dict = Depends(booking_filters),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings assigned to the calling cleaner"""
    items, total = service.list_my_jobs(current_user, limit=limit, offset=offset, **filters)
    return BookingConnection(items=items, total_count=total)


@router.get("/all", response_model=BookingConnection)
async def all_bookings(
    filters: dict = Depends(booking_filters),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    cleaner_id: Optional[str] = Query(None, alias="cleanerId"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Admin listing across all customers and cleaners"""
    items, total = service.list_all_bookings(
        current_user, customer_id=customer_id, cleaner_id=cleaner_id, limit=limit, offset=offset, **filters
    )
    return BookingConnection(items=items, total_count=total)


@router.get("/upcoming", response_model=list[BookingResponse])
async def upcoming_bookings(
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.upcoming_bookings(current_user, limit)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.get_booking(booking_id, current_user)


# ============================================================================
# MUTATIONS
# ============================================================================


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: CreateBookingInput,
    request: Request,
    current_user: Optional[User] = Depends(get_optional_user),
    service: BookingService = Depends(get_booking_service),
):
    """
    Create a booking

    Signed-in customers book as themselves; anonymous callers pass guest
    details and are rate limited per IP.
    """
    if current_user is None:
        enforce_rate_limit(request, GUEST_BOOKING_LIMIT, GUEST_BOOKING_WINDOW_SECONDS, key_prefix="guest_booking")
    return service.create_booking(data, current_user)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: str,
    data: UpdateBookingInput,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.update_booking(booking_id, data, current_user)


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.confirm_booking(booking_id, current_user)


@router.post("/{booking_id}/start", response_model=BookingResponse)
async def start_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.start_booking(booking_id, current_user)


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(
    booking_id: str,
    data: Optional[CompleteBookingInput] = None,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.complete_booking(booking_id, current_user, data.notes if data else None)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    data: CancelBookingInput,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.cancel_booking(booking_id, data, current_user)


@router.post("/{booking_id}/no-show", response_model=BookingResponse)
async def mark_no_show(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.mark_no_show(booking_id, current_user)
