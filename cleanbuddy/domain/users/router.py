"""User router - Current user endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.schemas import MessageResponse
from .schemas import UpdateCurrentUserInput, UpdateUserRoleInput, UserResponse
from .service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


@router.get("/me", response_model=UserResponse)
async def current_user(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_current_user(
    data: UpdateCurrentUserInput,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.update_current_user(data, current_user)


@router.put("/me/role", response_model=UserResponse)
async def update_user_role(
    data: UpdateUserRoleInput,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Self-service role change (client or rejected cleaner -> pending application)"""
    return service.update_role(data.role, current_user)


@router.delete("/me", response_model=MessageResponse)
async def delete_current_user(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.delete_current_user(current_user)
    return MessageResponse(message="Account deleted")
