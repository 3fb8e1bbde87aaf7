"""Availability domain schemas - Pydantic models for service areas and availability"""

import datetime as dt
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ...enums import AvailabilityType, RecurrencePattern
from ...shared.schemas import CamelModel
from ...shared.validators import normalize_text, time_to_minutes, validate_hhmm


class ServiceAreaCreate(CamelModel):
    city: str
    neighborhood: Optional[str] = None
    postal_code: Optional[str] = None
    travel_fee: int = Field(default=0, ge=0)  # bani
    is_preferred: bool = False

    @field_validator("city")
    @classmethod
    def validate_city(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("City is required")
        return v

    @field_validator("neighborhood", "postal_code")
    @classmethod
    def blank_to_none(cls, v):
        return normalize_text(v)


class ServiceAreaUpdate(CamelModel):
    city: Optional[str] = None
    neighborhood: Optional[str] = None
    postal_code: Optional[str] = None
    travel_fee: Optional[int] = Field(default=None, ge=0)
    is_preferred: Optional[bool] = None

    @field_validator("city", "neighborhood", "postal_code")
    @classmethod
    def blank_to_none(cls, v):
        return normalize_text(v)


class ServiceAreaResponse(CamelModel):
    id: str
    cleaner_profile_id: str
    city: str
    neighborhood: Optional[str] = None
    postal_code: Optional[str] = None
    travel_fee: int
    is_preferred: bool
    created_at: Optional[dt.datetime] = None


class TimeWindow(CamelModel):
    """A same-day [startTime, endTime) window in platform-local HH:MM"""

    date: dt.date
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        return validate_hhmm(v)

    @model_validator(mode="after")
    def validate_order(self):
        if time_to_minutes(self.start_time) >= time_to_minutes(self.end_time):
            raise ValueError("start time must be before end time")
        return self


class AvailabilityCreate(TimeWindow):
    type: AvailabilityType = AvailabilityType.UNAVAILABLE
    recurrence: RecurrencePattern = RecurrencePattern.NONE
    recurrence_end_date: Optional[dt.date] = None
    notes: Optional[str] = None


class AvailabilityUpdate(CamelModel):
    """Partial change; the merged window is re-checked by the service"""

    type: Optional[AvailabilityType] = None
    date: Optional[dt.date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    recurrence: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[dt.date] = None
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        return validate_hhmm(v)


class AvailabilityBulkCreate(CamelModel):
    entries: list[AvailabilityCreate] = Field(min_length=1, max_length=100)


class AvailabilityResponse(CamelModel):
    id: str
    cleaner_profile_id: str
    type: AvailabilityType
    date: dt.date
    start_time: str
    end_time: str
    recurrence: RecurrencePattern
    recurrence_end_date: Optional[dt.date] = None
    notes: Optional[str] = None


class IsCleanerAvailableInput(TimeWindow):
    cleaner_profile_id: str


class IsCleanerAvailableResponse(CamelModel):
    available: bool


class AvailableCleanersInput(TimeWindow):
    service_area_ids: Optional[list[str]] = None
