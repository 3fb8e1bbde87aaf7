"""Cleaner invite repository - Database operations for company invites"""

from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ...enums import CleanerInviteStatus
from ...models import CleanerInvite


class CleanerInviteRepository:
    """Repository for cleaner invite database operations"""

    @staticmethod
    def get_by_id(db: Session, invite_id: str) -> Optional[CleanerInvite]:
        return db.query(CleanerInvite).filter(CleanerInvite.id == invite_id).first()

    @staticmethod
    def get_by_token(db: Session, token: str) -> Optional[CleanerInvite]:
        return db.query(CleanerInvite).filter(CleanerInvite.token == token).first()

    @staticmethod
    def list_by_company(db: Session, company_id: str) -> list[CleanerInvite]:
        """Company invites, newest first"""
        return (
            db.query(CleanerInvite)
            .filter(CleanerInvite.company_id == company_id)
            .order_by(CleanerInvite.created_at.desc())
            .all()
        )

    @staticmethod
    def create(db: Session, **invite_data) -> CleanerInvite:
        invite = CleanerInvite(**invite_data)
        db.add(invite)
        db.flush()
        return invite

    @staticmethod
    def close_pending(db: Session, invite_id: str, **values) -> int:
        """
        Move a still-pending invite to its final status

        Returns:
            Number of rows changed (0 when it was accepted or revoked first)
        """
        result = db.execute(
            update(CleanerInvite)
            .where(CleanerInvite.id == invite_id, CleanerInvite.status == CleanerInviteStatus.PENDING.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
