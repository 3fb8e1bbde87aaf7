"""Company router - FastAPI endpoints for companies"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import CompanyCreate, CompanyResponse
from .service import CompanyService

router = APIRouter(prefix="/companies", tags=["Companies"])


def get_company_service(db: Session = Depends(get_db)) -> CompanyService:
    """Dependency injection for CompanyService"""
    return CompanyService(db)


@router.get("/mine", response_model=CompanyResponse)
async def my_company(
    current_user: User = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
):
    return service.get_my_company(current_user)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: str,
    current_user: User = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
):
    return service.get_company(company_id, current_user)


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    data: CompanyCreate,
    current_user: User = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
):
    return service.create_company(data, current_user)
