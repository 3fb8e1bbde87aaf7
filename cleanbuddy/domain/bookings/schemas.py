"""Booking domain schemas - Pydantic models for booking requests and responses"""

import datetime as dt
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ...enums import (
    BookingStatus,
    CancellationReason,
    ServiceAddOn,
    ServiceFrequency,
    ServiceType,
)
from ...shared.schemas import CamelModel
from ...shared.validators import normalize_text, validate_email, validate_hhmm
from ..addresses.schemas import AddressInput


class GuestUserInput(CamelModel):
    """Inline customer details for checkout without an account"""

    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Name is required")
        return v


class CreateBookingInput(CamelModel):
    cleaner_profile_id: str
    service_type: ServiceType
    frequency: ServiceFrequency = ServiceFrequency.ONE_TIME
    add_ons: list[ServiceAddOn] = Field(default_factory=list)
    scheduled_date: dt.date
    scheduled_time: str
    area_sqm: Optional[int] = Field(default=None, gt=0)
    address_id: Optional[str] = None
    address: Optional[AddressInput] = None
    special_instructions: Optional[str] = None
    access_instructions: Optional[str] = None
    customer_notes: Optional[str] = None
    guest: Optional[GuestUserInput] = None

    @field_validator("scheduled_time")
    @classmethod
    def validate_time(cls, v):
        return validate_hhmm(v)

    @model_validator(mode="after")
    def require_address(self):
        if not self.address_id and not self.address:
            raise ValueError("address is required")
        return self


class UpdateBookingInput(CamelModel):
    scheduled_date: Optional[dt.date] = None
    scheduled_time: Optional[str] = None
    customer_notes: Optional[str] = None
    cleaner_notes: Optional[str] = None

    @field_validator("scheduled_time")
    @classmethod
    def validate_time(cls, v):
        return validate_hhmm(v)


class CompleteBookingInput(CamelModel):
    notes: Optional[str] = None


class CancelBookingInput(CamelModel):
    reason: CancellationReason
    note: Optional[str] = None


class BookingResponse(CamelModel):
    id: str
    customer_id: str
    cleaner_id: str
    cleaner_profile_id: str
    address_id: str
    service_type: ServiceType
    frequency: ServiceFrequency
    add_ons: list[ServiceAddOn]
    scheduled_date: dt.date
    scheduled_time: str
    duration: float
    area_sqm: Optional[int] = None
    estimated_hours: Optional[float] = None

    cleaner_hourly_rate: int
    service_price: int
    add_ons_price: int
    travel_fee: int
    platform_fee: int
    total_price: int
    cleaner_payout: int

    status: BookingStatus
    special_instructions: Optional[str] = None
    access_instructions: Optional[str] = None
    customer_notes: Optional[str] = None
    cleaner_notes: Optional[str] = None
    cancellation_reason: Optional[CancellationReason] = None
    cancellation_note: Optional[str] = None
    cancelled_by: Optional[str] = None
    is_recurring: bool

    confirmed_at: Optional[dt.datetime] = None
    started_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None
    cancelled_at: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class BookingConnection(CamelModel):
    items: list[BookingResponse]
    total_count: int
