"""User repository - Database operations for users"""

from typing import Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from ...models import Application, Booking, CleanerInvite, Company, User


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def set_role(db: Session, user: User, role: str) -> User:
        """Stage a role change; the caller commits"""
        user.role = role
        db.flush()
        return user

    @staticmethod
    def apply_updates(db: Session, user: User, **updates) -> User:
        for key, value in updates.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)
        db.flush()
        return user

    @staticmethod
    def has_bookings(db: Session, user_id: str) -> bool:
        """True when the user is the customer or the cleaner of any booking"""
        return (
            db.query(Booking.id)
            .filter(or_(Booking.customer_id == user_id, Booking.cleaner_id == user_id))
            .first()
            is not None
        )

    @staticmethod
    def administers_company(db: Session, user_id: str) -> bool:
        return db.query(Company.id).filter(Company.admin_user_id == user_id).first() is not None

    @staticmethod
    def has_sent_invites(db: Session, user_id: str) -> bool:
        return db.query(CleanerInvite.id).filter(CleanerInvite.invited_by == user_id).first() is not None

    @staticmethod
    def detach_references(db: Session, user_id: str) -> None:
        """Null out the optional audit columns that point at the user"""
        for column in (Application.reviewed_by, CleanerInvite.accepted_by, Booking.cancelled_by):
            db.execute(
                update(column.class_)
                .where(column == user_id)
                .values({column: None})
                .execution_options(synchronize_session=False)
            )

    @staticmethod
    def delete(db: Session, user: User) -> None:
        """Delete the user; addresses, applications and the cleaner profile cascade"""
        db.delete(user)
        db.flush()
