"""Availability router - Service areas, availability windows and cleaner search"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.schemas import MessageResponse
from ..cleaners.schemas import CleanerProfileResponse, to_profile_response
from .schemas import (
    AvailabilityBulkCreate,
    AvailabilityCreate,
    AvailabilityResponse,
    AvailabilityUpdate,
    AvailableCleanersInput,
    IsCleanerAvailableInput,
    IsCleanerAvailableResponse,
    ServiceAreaCreate,
    ServiceAreaResponse,
    ServiceAreaUpdate,
)
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


# ============================================================================
# SERVICE AREAS
# ============================================================================


@router.get("/service-areas/mine", response_model=list[ServiceAreaResponse])
async def my_service_areas(
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.list_my_service_areas(current_user)


@router.get("/service-areas/by-cleaner/{cleaner_profile_id}", response_model=list[ServiceAreaResponse])
async def service_areas_by_cleaner_profile(
    cleaner_profile_id: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.list_service_areas(cleaner_profile_id)


@router.get("/service-areas/{area_id}", response_model=ServiceAreaResponse)
async def get_service_area(
    area_id: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.get_service_area(area_id)


@router.post("/service-areas", response_model=ServiceAreaResponse, status_code=201)
async def add_service_area(
    data: ServiceAreaCreate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.add_service_area(data, current_user)


@router.patch("/service-areas/{area_id}", response_model=ServiceAreaResponse)
async def update_service_area(
    area_id: str,
    data: ServiceAreaUpdate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.update_service_area(area_id, data, current_user)


@router.delete("/service-areas/{area_id}", response_model=MessageResponse)
async def delete_service_area(
    area_id: str,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    service.delete_service_area(area_id, current_user)
    return MessageResponse(message="Service area deleted")


# ============================================================================
# CLEANER SEARCH
# ============================================================================


@router.get("/cleaners/in-area", response_model=list[CleanerProfileResponse])
async def cleaners_in_area(
    city: str = Query(..., min_length=1),
    neighborhood: Optional[str] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
):
    return [to_profile_response(p) for p in service.find_cleaners_in_area(city, neighborhood)]


@router.get("/cleaners/by-postal-code/{postal_code}", response_model=list[CleanerProfileResponse])
async def cleaners_by_postal_code(
    postal_code: str,
    service: AvailabilityService = Depends(get_availability_service),
):
    return [to_profile_response(p) for p in service.find_cleaners_by_postal_code(postal_code)]


@router.post("/availability/check", response_model=IsCleanerAvailableResponse)
async def is_cleaner_available(
    data: IsCleanerAvailableInput,
    service: AvailabilityService = Depends(get_availability_service),
):
    available = service.is_cleaner_available(data.cleaner_profile_id, data.date, data.start_time, data.end_time)
    return IsCleanerAvailableResponse(available=available)


@router.post("/availability/cleaners", response_model=list[CleanerProfileResponse])
async def available_cleaners(
    data: AvailableCleanersInput,
    service: AvailabilityService = Depends(get_availability_service),
):
    profiles = service.find_available_cleaners(data.date, data.start_time, data.end_time, data.service_area_ids)
    return [to_profile_response(p) for p in profiles]


# ============================================================================
# AVAILABILITY WINDOWS
# ============================================================================


@router.get("/availability/mine", response_model=list[AvailabilityResponse])
async def my_availability(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.list_my_availability(current_user, start_date, end_date)


@router.post("/availability", response_model=AvailabilityResponse, status_code=201)
async def create_availability(
    data: AvailabilityCreate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.create_availability(data, current_user)


@router.post("/availability/bulk", response_model=list[AvailabilityResponse], status_code=201)
async def bulk_create_availability(
    data: AvailabilityBulkCreate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.bulk_create_availability(data, current_user)


@router.patch("/availability/{availability_id}", response_model=AvailabilityResponse)
async def update_availability(
    availability_id: str,
    data: AvailabilityUpdate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.update_availability(availability_id, data, current_user)


@router.delete("/availability/{availability_id}", response_model=MessageResponse)
async def delete_availability(
    availability_id: str,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    service.delete_availability(availability_id, current_user)
    return MessageResponse(message="Availability deleted")
