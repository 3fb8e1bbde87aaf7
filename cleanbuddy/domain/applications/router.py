"""Application router - FastAPI endpoints for onboarding applications"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...services.document_storage import PRESIGNED_URL_EXPIRATION
from .schemas import (
    ApplicationResponse,
    DocumentUploadResponse,
    RejectApplicationInput,
    SignedUrlResponse,
    SubmitApplicationInput,
)
from .service import ApplicationService

router = APIRouter(prefix="/applications", tags=["Applications"])


def get_application_service(request: Request, db: Session = Depends(get_db)) -> ApplicationService:
    """Dependency injection for ApplicationService"""
    state = request.app.state
    return ApplicationService(db, state.mail_service, state.notification_service, state.storage_service)


# ============================================================================
# APPLICANT ENDPOINTS
# ============================================================================


@router.post("", response_model=ApplicationResponse, status_code=201)
async def submit_application(
    data: SubmitApplicationInput,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    return service.submit_application(data, current_user)


@router.get("/mine", response_model=list[ApplicationResponse])
async def my_applications(
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    return service.list_my_applications(current_user)


@router.post("/documents", response_model=DocumentUploadResponse, status_code=201)
async def upload_application_document(
    file: UploadFile = File(...),
    document_type: str = Form(..., alias="documentType"),
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    """Upload an identity/registration/insurance document (PDF, JPG or PNG, max 10MB)"""
    content = await file.read()
    url = service.upload_document(current_user, document_type, file.filename, content, file.content_type)
    return DocumentUploadResponse(document_type=document_type, url=url)


# ============================================================================
# ADMIN ENDPOINTS
# ============================================================================


@router.get("/pending", response_model=list[ApplicationResponse])
async def pending_applications(
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    return service.list_pending_applications(current_user)


@router.get("/documents/signed-url", response_model=SignedUrlResponse)
async def generate_document_signed_url(
    document_url: str = Query(..., alias="documentUrl"),
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    url = service.generate_document_signed_url(document_url, current_user)
    return SignedUrlResponse(url=url, expires_in=PRESIGNED_URL_EXPIRATION)


@router.post("/{application_id}/approve", response_model=ApplicationResponse)
async def approve_application(
    application_id: str,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    return service.approve_application(application_id, current_user)


@router.post("/{application_id}/reject", response_model=ApplicationResponse)
async def reject_application(
    application_id: str,
    data: Optional[RejectApplicationInput] = None,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    return service.reject_application(application_id, current_user, data.reason if data else None)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: str,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    return service.get_application(application_id, current_user)
