"""Cleaner domain schemas - Pydantic models for cleaner profiles"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ...enums import CleanerTier, max_rate, min_rate
from ...shared.schemas import CamelModel


class CleanerProfileCreate(CamelModel):
    bio: Optional[str] = None
    hourly_rate: Optional[int] = Field(default=None, gt=0)  # bani, defaults to the new-tier minimum


class CleanerProfileUpdate(CamelModel):
    bio: Optional[str] = None
    hourly_rate: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None
    is_available_for_booking: Optional[bool] = None


class CleanerTierUpdate(CamelModel):
    tier: CleanerTier


class CleanerProfileResponse(CamelModel):
    id: str
    user_id: str
    company_id: Optional[str] = None
    bio: Optional[str] = None
    tier: CleanerTier
    hourly_rate: int
    min_rate: int
    max_rate: int
    is_active: bool
    is_verified: bool
    is_available_for_booking: bool
    total_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    total_reviews: int
    average_rating: float
    total_earnings: int
    created_at: Optional[datetime] = None


def to_profile_response(profile) -> CleanerProfileResponse:
    """Build the wire shape, including the tier's rate bounds"""
    return CleanerProfileResponse(
        id=profile.id,
        user_id=profile.user_id,
        company_id=profile.company_id,
        bio=profile.bio,
        tier=profile.tier,
        hourly_rate=profile.hourly_rate,
        min_rate=min_rate(profile.tier),
        max_rate=max_rate(profile.tier),
        is_active=profile.is_active,
        is_verified=profile.is_verified,
        is_available_for_booking=profile.is_available_for_booking,
        total_bookings=profile.total_bookings,
        completed_bookings=profile.completed_bookings,
        cancelled_bookings=profile.cancelled_bookings,
        total_reviews=profile.total_reviews,
        average_rating=profile.average_rating,
        total_earnings=profile.total_earnings,
        created_at=profile.created_at,
    )


class CleanerProfileConnection(CamelModel):
    items: list[CleanerProfileResponse]
    total_count: int
