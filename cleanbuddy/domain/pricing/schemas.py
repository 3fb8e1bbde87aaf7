"""Pricing domain schemas - Pydantic models for quotes and the service catalog"""

from typing import Optional

from pydantic import Field, field_validator, model_validator

from ...enums import ServiceAddOn, ServiceType
from ...shared.schemas import CamelModel
from ...shared.validators import normalize_text


class LocationInput(CamelModel):
    """Where the cleaning happens, for callers without a saved address"""

    city: str
    neighborhood: Optional[str] = None
    postal_code: Optional[str] = None

    @field_validator("city")
    @classmethod
    def validate_city(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("City is required")
        return v


class CalculateServicePriceInput(CamelModel):
    cleaner_profile_id: str
    service_type: ServiceType
    add_ons: list[ServiceAddOn] = Field(default_factory=list)
    address_id: Optional[str] = None
    location: Optional[LocationInput] = None

    @model_validator(mode="after")
    def require_location(self):
        if not self.address_id and not self.location:
            raise ValueError("Either addressId or location is required")
        return self


class ServicePriceCalculation(CamelModel):
    """All amounts in bani"""

    cleaner_hourly_rate: int
    service_price: int
    add_ons_price: int
    travel_fee: int
    subtotal: int
    platform_fee: int
    total_price: int
    cleaner_payout: int
    estimated_duration: float


class ServiceDefinitionResponse(CamelModel):
    id: str
    service_type: ServiceType
    name: str
    description: Optional[str] = None
    base_hours: float
    price_multiplier: float
    is_active: bool


class ServiceDefinitionCreate(CamelModel):
    service_type: ServiceType
    name: str
    description: Optional[str] = None
    base_hours: float = Field(gt=0)
    price_multiplier: float = Field(default=1.0, gt=0)
    is_active: bool = True


class ServiceDefinitionUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    base_hours: Optional[float] = Field(default=None, gt=0)
    price_multiplier: Optional[float] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class AddOnDefinitionResponse(CamelModel):
    id: str
    add_on: ServiceAddOn
    name: str
    description: Optional[str] = None
    price: int
    estimated_hours: float
    is_active: bool


class AddOnDefinitionCreate(CamelModel):
    add_on: ServiceAddOn
    name: str
    description: Optional[str] = None
    price: int = Field(ge=0)
    estimated_hours: float = Field(default=0.0, ge=0)
    is_active: bool = True


class AddOnDefinitionUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


def to_price_calculation(breakdown) -> ServicePriceCalculation:
    return ServicePriceCalculation(
        cleaner_hourly_rate=breakdown.cleaner_hourly_rate,
        service_price=breakdown.service_price,
        add_ons_price=breakdown.add_ons_price,
        travel_fee=breakdown.travel_fee,
        subtotal=breakdown.subtotal,
        platform_fee=breakdown.platform_fee,
        total_price=breakdown.total_price,
        cleaner_payout=breakdown.cleaner_payout,
        estimated_duration=breakdown.estimated_hours,
    )
