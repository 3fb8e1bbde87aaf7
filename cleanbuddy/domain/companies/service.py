"""Company service - Business logic for companies"""

import logging

from sqlalchemy.orm import Session

from ...database import transaction
from ...errors import Forbidden, InvariantViolation, NotFound
from ...models import Company, User
from .repository import CompanyRepository
from .schemas import CompanyCreate

logger = logging.getLogger(__name__)


class CompanyService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CompanyRepository()

    def get_company(self, company_id: str, user: User) -> Company:
        company = self.repo.get_by_id(self.db, company_id)
        if not company:
            raise NotFound("company not found")
        if not (user.is_global_admin() or company.admin_user_id == user.id):
            raise Forbidden()
        return company

    def get_my_company(self, user: User) -> Company:
        company = self.repo.get_by_admin_user_id(self.db, user.id)
        if not company:
            raise NotFound("company not found")
        return company

    def create_company(self, data: CompanyCreate, user: User) -> Company:
        """A company admin registers the one company they manage"""
        if not user.is_company_admin():
            raise Forbidden("access forbidden, only company admins can create a company")
        if self.repo.get_by_admin_user_id(self.db, user.id):
            raise InvariantViolation("you already have a company")

        with transaction(self.db):
            company = self.repo.create(
                self.db,
                admin_user_id=user.id,
                company_type=data.company_type.value,
                **data.model_dump(exclude={"company_type"}),
            )
        logger.info(f"🏢 Company {company.id} created by user {user.id}")
        return company
