"""Application service - Onboarding applications and the role changes they drive"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import require_global_admin
from ...database import transaction
from ...email_service import MailService
from ...enums import ApplicationStatus, ApplicationType, UserRole
from ...errors import ConflictError, InvariantViolation, NotFound, UpstreamError
from ...models import Application, User, utcnow
from ...services.document_storage import (
    PRESIGNED_URL_EXPIRATION,
    DocumentStorage,
    build_document_key,
    validate_document,
)
from ...services.notification_service import NotificationService, notify_safely
from ..users.repository import UserRepository
from .repository import ApplicationRepository
from .schemas import SubmitApplicationInput

logger = logging.getLogger(__name__)

# Role granted when an application of each type is approved
APPROVED_ROLES = {
    ApplicationType.CLEANER.value: UserRole.CLEANER.value,
    ApplicationType.COMPANY_ADMIN.value: UserRole.COMPANY_ADMIN.value,
}


class ApplicationService:
    """Service layer for application business logic"""

    def __init__(
        self,
        db: Session,
        mail_service: MailService,
        notification_service: NotificationService,
        storage: DocumentStorage,
    ):
        self.db = db
        self.mail_service = mail_service
        self.notification_service = notification_service
        self.storage = storage
        self.repo = ApplicationRepository()
        self.user_repo = UserRepository()

    # ============================================
    # Queries
    # ============================================

    def get_application(self, application_id: str, user: User) -> Application:
        """Visible to the applicant and global admins"""
        application = self.repo.get_by_id(self.db, application_id)
        if not application or not (application.user_id == user.id or user.is_global_admin()):
            raise NotFound("application not found")
        return application

    def list_my_applications(self, user: User) -> list[Application]:
        return self.repo.list_by_user(self.db, user.id)

    def list_pending_applications(self, user: User) -> list[Application]:
        require_global_admin(user)
        return self.repo.list_pending(self.db)

    # ============================================
    # Submission
    # ============================================

    def submit_application(self, data: SubmitApplicationInput, user: User) -> Application:
        """
        Submit an application for review.

        Cleaner applications need company info and an identity document, and
        move the applicant to pending_cleaner once stored.
        """
        application_type = data.application_type.value
        is_cleaner_application = data.application_type == ApplicationType.CLEANER

        if is_cleaner_application and not (user.is_client() or user.is_pending_application()):
            raise InvariantViolation("you cannot submit a cleaner application in your current state")
        if self.repo.has_pending_of_type(self.db, user.id, application_type):
            raise InvariantViolation("you already have a pending application of this type")
        if is_cleaner_application:
            if data.company_info is None:
                raise InvariantViolation("company information is required for cleaner applications")
            if data.documents is None:
                raise InvariantViolation("documents are required for cleaner applications")

        with transaction(self.db):
            application = self.repo.create(
                self.db,
                user_id=user.id,
                application_type=application_type,
                status=ApplicationStatus.PENDING.value,
                message=data.message,
                company_info=data.company_info.model_dump(by_alias=True) if data.company_info else None,
                documents=data.documents.model_dump(by_alias=True) if data.documents else None,
            )
        logger.info(f"📝 Application {application.id} ({application_type}) submitted by {user.id}")

        if is_cleaner_application:
            self._set_role_best_effort(user, UserRole.PENDING_CLEANER.value)

        notify_safely(
            "new application notification",
            self.notification_service.notify_new_application,
            application_type,
            user.full_name or user.email,
            user.email,
            user.id,
        )
        return application

    # ============================================
    # Review
    # ============================================

    def approve_application(self, application_id: str, reviewer: User) -> Application:
        """Approve a pending application and grant the matching role"""
        require_global_admin(reviewer)
        application = self._get_pending(application_id)

        new_role = APPROVED_ROLES.get(application.application_type)
        if new_role is None:
            raise InvariantViolation(f"invalid application type: {application.application_type}")

        applicant = self.user_repo.get_by_id(self.db, application.user_id)
        if not applicant:
            raise NotFound("applicant not found")

        with transaction(self.db):
            self._decide(
                application,
                status=ApplicationStatus.APPROVED.value,
                reviewed_by=reviewer.id,
                reviewed_at=utcnow(),
            )
            self.user_repo.set_role(self.db, applicant, new_role)

        logger.info(f"✅ Application {application_id} approved by {reviewer.id}, {applicant.id} is now {new_role}")
        notify_safely(
            "application approval email",
            self.mail_service.send_application_decision,
            to=applicant.email,
            user_name=applicant.full_name or applicant.email,
            approved=True,
            application_type=application.application_type,
        )
        return application

    def reject_application(self, application_id: str, reviewer: User, reason: Optional[str] = None) -> Application:
        require_global_admin(reviewer)
        application = self._get_pending(application_id)

        with transaction(self.db):
            self._decide(
                application,
                status=ApplicationStatus.REJECTED.value,
                reviewed_by=reviewer.id,
                reviewed_at=utcnow(),
                rejection_reason=reason,
            )
        logger.info(f"❌ Application {application_id} rejected by {reviewer.id}")

        applicant = self.user_repo.get_by_id(self.db, application.user_id)
        if applicant is None:
            return application
        if applicant.is_pending_cleaner():
            self._set_role_best_effort(applicant, UserRole.REJECTED_CLEANER.value)

        notify_safely(
            "application rejection email",
            self.mail_service.send_application_decision,
            to=applicant.email,
            user_name=applicant.full_name or applicant.email,
            approved=False,
            application_type=application.application_type,
            reason=reason,
        )
        return application

    # ============================================
    # Documents
    # ============================================

    def upload_document(
        self, user: User, document_type: str, filename: str, content: bytes, content_type: Optional[str]
    ) -> str:
        """Store an application document and return its r2:// URL"""
        try:
            validate_document(filename, len(content))
        except ValueError as e:
            raise InvariantViolation(str(e)) from e

        key = build_document_key(user.id, document_type, filename)
        try:
            return self.storage.upload(key, content, content_type)
        except RuntimeError as e:
            logger.error(f"❌ Document storage unavailable: {e}")
            raise UpstreamError("storage service not available", status_code=503) from e
        except Exception as e:
            logger.error(f"❌ Failed to upload {document_type} for {user.id}: {e}")
            raise UpstreamError(f"failed to upload {document_type}") from e

    def generate_document_signed_url(self, document_url: str, user: User) -> str:
        """Short-lived read URL for a stored document (global admin only)"""
        require_global_admin(user)
        try:
            return self.storage.generate_presigned_url(document_url, PRESIGNED_URL_EXPIRATION)
        except RuntimeError as e:
            logger.error(f"❌ Document storage unavailable: {e}")
            raise UpstreamError("storage service not available", status_code=503) from e
        except Exception as e:
            logger.error(f"❌ Error generating signed URL for {document_url}: {e}")
            raise UpstreamError("failed to generate signed URL") from e

    # ============================================
    # Helpers
    # ============================================

    def _get_pending(self, application_id: str) -> Application:
        application = self.repo.get_by_id(self.db, application_id)
        if not application:
            raise NotFound("application not found")
        if application.status != ApplicationStatus.PENDING.value:
            raise InvariantViolation(f"application already {application.status}")
        return application

    def _decide(self, application: Application, **values) -> None:
        if self.repo.decide(self.db, application.id, **values) == 0:
            raise ConflictError("application was reviewed by another request")
        self.db.expire(application)

    def _set_role_best_effort(self, user: User, role: str) -> None:
        """Role follow-ups after a stored application; a failure here is logged, not raised"""
        previous = user.role
        try:
            with transaction(self.db):
                self.user_repo.set_role(self.db, user, role)
            logger.info(f"🔄 User {user.id} role {previous} -> {role}")
        except Exception as e:
            logger.error(f"❌ Failed to update role of {user.id} to {role}: {e}")
