"""Address router - Saved addresses of the current user"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.schemas import MessageResponse
from .schemas import AddressResponse, CreateAddressInput, UpdateAddressInput
from .service import AddressService

router = APIRouter(prefix="/addresses", tags=["Addresses"])


def get_address_service(db: Session = Depends(get_db)) -> AddressService:
    """Dependency injection for AddressService"""
    return AddressService(db)


@router.get("/mine", response_model=list[AddressResponse])
async def my_addresses(
    current_user: User = Depends(get_current_user),
    service: AddressService = Depends(get_address_service),
):
    return service.list_my_addresses(current_user)


@router.get("/mine/default", response_model=Optional[AddressResponse])
async def my_default_address(
    current_user: User = Depends(get_current_user),
    service: AddressService = Depends(get_address_service),
):
    """The current default address, or null when the user has none"""
    return service.get_default_address(current_user)


@router.get("/{address_id}", response_model=AddressResponse)
async def get_address(
    address_id: str,
    current_user: User = Depends(get_current_user),
    service: AddressService = Depends(get_address_service),
):
    return service.get_address(address_id, current_user)


@router.post("", response_model=AddressResponse, status_code=201)
async def create_address(
    data: CreateAddressInput,
    current_user: User = Depends(get_current_user),
    service: AddressService = Depends(get_address_service),
):
    return service.create_address(data, current_user)


@router.patch("/{address_id}", response_model=AddressResponse)
async def update_address(
    address_id: str,
    data: UpdateAddressInput,
    current_user: User = Depends(get_current_user),
    service: AddressService = Depends(get_address_service),
):
    return service.update_address(address_id, data, current_user)


@router.delete("/{address_id}", response_model=MessageResponse)
async def delete_address(
    address_id: str,
    current_user: User = Depends(get_current_user),
    service: AddressService = Depends(get_address_service),
):
    service.delete_address(address_id, current_user)
    return MessageResponse(message="Address deleted")


@router.post("/{address_id}/default", response_model=AddressResponse)
async def set_default_address(
    address_id: str,
    current_user: User = Depends(get_current_user),
    service: AddressService = Depends(get_address_service),
):
    return service.set_default_address(address_id, current_user)
