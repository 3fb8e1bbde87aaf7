"""Pricing router - Price quotes and service catalog endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user
from ...database import get_db
from ...enums import ServiceAddOn, ServiceType
from ...models import User
from .schemas import (
    AddOnDefinitionCreate,
    AddOnDefinitionResponse,
    AddOnDefinitionUpdate,
    CalculateServicePriceInput,
    ServiceDefinitionCreate,
    ServiceDefinitionResponse,
    ServiceDefinitionUpdate,
    ServicePriceCalculation,
    to_price_calculation,
)
from .service import PricingService

router = APIRouter(prefix="/pricing", tags=["Pricing"])


def get_pricing_service(request: Request, db: Session = Depends(get_db)) -> PricingService:
    """Dependency injection for PricingService"""
    return PricingService(db, request.app.state.platform_fee_percentage)


# ============================================================================
# QUOTES
# ============================================================================


@router.post("/quote", response_model=ServicePriceCalculation)
async def calculate_service_price(
    data: CalculateServicePriceInput,
    current_user: Optional[User] = Depends(get_optional_user),
    service: PricingService = Depends(get_pricing_service),
):
    """Estimate the price of a cleaning; amounts in bani"""
    return to_price_calculation(service.quote(data, current_user))


# ============================================================================
# SERVICE CATALOG
# ============================================================================


@router.get("/services", response_model=list[ServiceDefinitionResponse])
async def service_definitions(
    active_only: bool = Query(True, alias="activeOnly"),
    service: PricingService = Depends(get_pricing_service),
):
    return service.list_service_definitions(active_only)


@router.get("/services/{service_type}", response_model=ServiceDefinitionResponse)
async def service_definition(
    service_type: ServiceType,
    service: PricingService = Depends(get_pricing_service),
):
    return service.get_service_definition(service_type)


@router.post("/services", response_model=ServiceDefinitionResponse, status_code=201)
async def create_service_definition(
    data: ServiceDefinitionCreate,
    current_user: User = Depends(get_current_user),
    service: PricingService = Depends(get_pricing_service),
):
    return service.create_service_definition(data, current_user)


@router.patch("/services/{service_type}", response_model=ServiceDefinitionResponse)
async def update_service_definition(
    service_type: ServiceType,
    data: ServiceDefinitionUpdate,
    current_user: User = Depends(get_current_user),
    service: PricingService = Depends(get_pricing_service),
):
    return service.update_service_definition(service_type, data, current_user)


@router.get("/add-ons", response_model=list[AddOnDefinitionResponse])
async def add_on_definitions(
    active_only: bool = Query(True, alias="activeOnly"),
    service: PricingService = Depends(get_pricing_service),
):
    return service.list_add_on_definitions(active_only)


@router.post("/add-ons", response_model=AddOnDefinitionResponse, status_code=201)
async def create_add_on_definition(
    data: AddOnDefinitionCreate,
    current_user: User = Depends(get_current_user),
    service: PricingService = Depends(get_pricing_service),
):
    return service.create_add_on_definition(data, current_user)


@router.patch("/add-ons/{add_on}", response_model=AddOnDefinitionResponse)
async def update_add_on_definition(
    add_on: ServiceAddOn,
    data: AddOnDefinitionUpdate,
    current_user: User = Depends(get_current_user),
    service: PricingService = Depends(get_pricing_service),
):
    return service.update_add_on_definition(add_on, data, current_user)
