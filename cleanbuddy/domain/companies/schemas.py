"""Company domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from ...enums import CompanyType
from ...shared.schemas import CamelModel
from ...shared.validators import normalize_text


class CompanyCreate(CamelModel):
    company_name: str
    company_type: CompanyType = CompanyType.BUSINESS
    registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    county: Optional[str] = None
    country: Optional[str] = None

    @field_validator("company_name")
    @classmethod
    def validate_name(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Company name is required")
        return v


class CompanyResponse(CamelModel):
    id: str
    admin_user_id: str
    company_name: str
    company_type: CompanyType
    registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    is_verified: bool
    is_active: bool
    total_cleaners: int
    active_cleaners: int
    created_at: Optional[datetime] = None
