"""Application domain schemas - Pydantic models for onboarding applications"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ...enums import ApplicationStatus, ApplicationType
from ...shared.schemas import CamelModel
from ...shared.validators import normalize_text


class CompanyInfo(CamelModel):
    company_name: str
    registration_number: Optional[str] = None
    tax_id: Optional[str] = None
    company_street: Optional[str] = None
    company_city: Optional[str] = None
    company_postal_code: Optional[str] = None
    company_county: Optional[str] = None
    company_country: Optional[str] = None
    business_type: Optional[str] = None

    @field_validator("company_name")
    @classmethod
    def validate_name(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Company name is required")
        return v


class ApplicationDocuments(CamelModel):
    """Stored document URLs as returned by the document upload endpoint"""

    identity_document_url: str
    business_registration_url: Optional[str] = None
    insurance_certificate_url: Optional[str] = None
    additional_documents: list[str] = Field(default_factory=list)

    @field_validator("identity_document_url")
    @classmethod
    def validate_identity_document(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Identity document is required")
        return v


class SubmitApplicationInput(CamelModel):
    application_type: ApplicationType
    message: Optional[str] = None
    company_info: Optional[CompanyInfo] = None
    documents: Optional[ApplicationDocuments] = None


class RejectApplicationInput(CamelModel):
    reason: Optional[str] = None


class ApplicationResponse(CamelModel):
    id: str
    user_id: str
    application_type: ApplicationType
    status: ApplicationStatus
    message: Optional[str] = None
    company_info: Optional[CompanyInfo] = None
    documents: Optional[ApplicationDocuments] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentUploadResponse(CamelModel):
    document_type: str
    url: str


class SignedUrlResponse(CamelModel):
    url: str
    expires_in: int
