"""Cleaner router - FastAPI endpoints for cleaner profiles"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...enums import CleanerSearchOrder, CleanerTier
from ...models import User
from .schemas import (
    CleanerProfileConnection,
    CleanerProfileCreate,
    CleanerProfileResponse,
    CleanerProfileUpdate,
    CleanerTierUpdate,
    to_profile_response,
)
from .service import CleanerService

router = APIRouter(prefix="/cleaner-profiles", tags=["Cleaner Profiles"])


def get_cleaner_service(db: Session = Depends(get_db)) -> CleanerService:
    """Dependency injection for CleanerService"""
    return CleanerService(db)


@router.get("/mine", response_model=CleanerProfileResponse)
async def my_cleaner_profile(
    current_user: User = Depends(get_current_user),
    service: CleanerService = Depends(get_cleaner_service),
):
    return to_profile_response(service.get_my_profile(current_user))


@router.get("/search", response_model=CleanerProfileConnection)
async def search_cleaner_profiles(
    tier: Optional[CleanerTier] = Query(None),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    max_rating: Optional[float] = Query(None, alias="maxRating", ge=0, le=5),
    is_active: Optional[bool] = Query(True, alias="isActive"),
    is_verified: Optional[bool] = Query(None, alias="isVerified"),
    is_available_for_booking: Optional[bool] = Query(None, alias="isAvailableForBooking"),
    service_area_ids: Optional[list[str]] = Query(None, alias="serviceAreaIds"),
    city: Optional[str] = Query(None),
    neighborhood: Optional[str] = Query(None),
    postal_code: Optional[str] = Query(None, alias="postalCode"),
    order_by: CleanerSearchOrder = Query(CleanerSearchOrder.RATING, alias="orderBy"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: CleanerService = Depends(get_cleaner_service),
):
    """Public search; only active profiles unless isActive=false is passed"""
    items, total = service.search_profiles(
        tier=tier.value if tier else None,
        min_rating=min_rating,
        max_rating=max_rating,
        is_active=is_active,
        is_verified=is_verified,
        is_available_for_booking=is_available_for_booking,
        service_area_ids=service_area_ids,
        city=city,
        neighborhood=neighborhood,
        postal_code=postal_code,
        order_by=order_by.value,
        limit=limit,
        offset=offset,
    )
    return CleanerProfileConnection(items=[to_profile_response(p) for p in items], total_count=total)


@router.get("/by-user/{user_id}", response_model=CleanerProfileResponse)
async def cleaner_profile_by_user(
    user_id: str,
    service: CleanerService = Depends(get_cleaner_service),
):
    return to_profile_response(service.get_profile_by_user(user_id))


@router.get("/{profile_id}", response_model=CleanerProfileResponse)
async def get_cleaner_profile(
    profile_id: str,
    service: CleanerService = Depends(get_cleaner_service),
):
    return to_profile_response(service.get_profile(profile_id))


@router.post("", response_model=CleanerProfileResponse, status_code=201)
async def create_cleaner_profile(
    data: CleanerProfileCreate,
    current_user: User = Depends(get_current_user),
    service: CleanerService = Depends(get_cleaner_service),
):
    """Create the caller's cleaner profile (tier new)"""
    return to_profile_response(service.create_profile(data, current_user))


@router.patch("/mine", response_model=CleanerProfileResponse)
async def update_cleaner_profile(
    data: CleanerProfileUpdate,
    current_user: User = Depends(get_current_user),
    service: CleanerService = Depends(get_cleaner_service),
):
    return to_profile_response(service.update_profile(data, current_user))


@router.put("/{profile_id}/tier", response_model=CleanerProfileResponse)
async def update_cleaner_tier(
    profile_id: str,
    data: CleanerTierUpdate,
    current_user: User = Depends(get_current_user),
    service: CleanerService = Depends(get_cleaner_service),
):
    """Change a cleaner's tier (global admin only)"""
    return to_profile_response(service.update_tier(profile_id, data.tier, current_user))
