"""Company repository - Database operations for companies"""

from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ...models import CleanerProfile, Company


class CompanyRepository:
    """Repository for company database operations"""

    @staticmethod
    def get_by_id(db: Session, company_id: str) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def get_by_admin_user_id(db: Session, admin_user_id: str) -> Optional[Company]:
        """Get the company a user administers"""
        return db.query(Company).filter(Company.admin_user_id == admin_user_id).first()

    @staticmethod
    def create(db: Session, **company_data) -> Company:
        company = Company(**company_data)
        db.add(company)
        db.flush()
        return company

    @staticmethod
    def increment_cleaner_counts(db: Session, company_id: str, total: int = 1, active: int = 1) -> None:
        """Atomic counter update: total_cleaners = total_cleaners + n at the store"""
        db.execute(
            update(Company)
            .where(Company.id == company_id)
            .values(
                total_cleaners=Company.total_cleaners + total,
                active_cleaners=Company.active_cleaners + active,
            )
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def list_cleaners(db: Session, company_id: str) -> list[CleanerProfile]:
        return (
            db.query(CleanerProfile)
            .filter(CleanerProfile.company_id == company_id)
            .order_by(CleanerProfile.created_at.asc())
            .all()
        )
