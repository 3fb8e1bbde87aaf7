"""Application repository - Database operations for onboarding applications"""

from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ...enums import ApplicationStatus
from ...models import Application


class ApplicationRepository:
    """Repository for application database operations"""

    @staticmethod
    def get_by_id(db: Session, application_id: str) -> Optional[Application]:
        return db.query(Application).filter(Application.id == application_id).first()

    @staticmethod
    def list_by_user(db: Session, user_id: str) -> list[Application]:
        """A user's applications, newest first"""
        return (
            db.query(Application)
            .filter(Application.user_id == user_id)
            .order_by(Application.created_at.desc())
            .all()
        )

    @staticmethod
    def has_pending_of_type(db: Session, user_id: str, application_type: str) -> bool:
        return (
            db.query(Application.id)
            .filter(
                Application.user_id == user_id,
                Application.application_type == application_type,
                Application.status == ApplicationStatus.PENDING.value,
            )
            .first()
            is not None
        )

    @staticmethod
    def list_pending(db: Session) -> list[Application]:
        """Review queue, oldest first"""
        return (
            db.query(Application)
            .filter(Application.status == ApplicationStatus.PENDING.value)
            .order_by(Application.created_at.asc())
            .all()
        )

    @staticmethod
    def create(db: Session, **application_data) -> Application:
        application = Application(**application_data)
        db.add(application)
        db.flush()
        return application

    @staticmethod
    def decide(db: Session, application_id: str, **values) -> int:
        """
        Record a review decision on an application that is still pending

        Returns:
            Number of rows changed (0 when it was already decided)
        """
        result = db.execute(
            update(Application)
            .where(Application.id == application_id, Application.status == ApplicationStatus.PENDING.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
