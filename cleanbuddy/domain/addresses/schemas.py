"""Address domain schemas"""

from typing import Optional

from pydantic import field_validator

from ...shared.schemas import CamelModel
from ...shared.validators import normalize_text


class AddressInput(CamelModel):
    label: Optional[str] = None
    street_address: str
    apartment: Optional[str] = None
    city: str
    county: Optional[str] = None
    neighborhood: Optional[str] = None
    postal_code: Optional[str] = None
    country: str = "Romania"
    additional_info: Optional[str] = None

    @field_validator("street_address", "city")
    @classmethod
    def validate_required(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Field is required")
        return v


class CreateAddressInput(AddressInput):
    is_default: bool = False


class UpdateAddressInput(CamelModel):
    label: Optional[str] = None
    street_address: Optional[str] = None
    apartment: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    neighborhood: Optional[str] = None
    postal_code: Optional[str] = None
    additional_info: Optional[str] = None

    @field_validator("street_address", "city")
    @classmethod
    def validate_not_blank(cls, v):
        if v is None:
            return v
        v = normalize_text(v)
        if not v:
            raise ValueError("Field cannot be blank")
        return v


class AddressResponse(CamelModel):
    id: str
    label: Optional[str] = None
    street_address: str
    apartment: Optional[str] = None
    city: str
    county: Optional[str] = None
    neighborhood: Optional[str] = None
    postal_code: Optional[str] = None
    country: str
    additional_info: Optional[str] = None
    is_default: bool
