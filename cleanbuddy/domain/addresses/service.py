"""Address service - Saved addresses and the single default per user"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...database import transaction
from ...errors import InvariantViolation, NotFound
from ...models import Address, User
from .repository import AddressRepository
from .schemas import CreateAddressInput, UpdateAddressInput

logger = logging.getLogger(__name__)


class AddressService:
    """Service layer for customer address business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AddressRepository()

    def get_address(self, address_id: str, user: User) -> Address:
        """Load one of the user's addresses; other users' addresses look missing"""
        address = self.repo.get_by_id(self.db, address_id)
        if not address or address.user_id != user.id:
            raise NotFound("address not found")
        return address

    def list_my_addresses(self, user: User) -> list[Address]:
        return self.repo.list_by_user(self.db, user.id)

    def get_default_address(self, user: User) -> Optional[Address]:
        return self.repo.get_default(self.db, user.id)

    def create_address(self, data: CreateAddressInput, user: User) -> Address:
        """The first address a user saves always becomes the default"""
        make_default = data.is_default or not self.repo.has_addresses(self.db, user.id)
        with transaction(self.db):
            address = self.repo.create(
                self.db,
                user_id=user.id,
                is_default=False,
                **data.model_dump(exclude={"is_default"}),
            )
            if make_default:
                self.repo.set_default(self.db, user.id, address.id)
        self.db.refresh(address)
        logger.info(f"🏠 Address {address.id} saved for user {user.id} (default={address.is_default})")
        return address

    def update_address(self, address_id: str, data: UpdateAddressInput, user: User) -> Address:
        address = self.get_address(address_id, user)
        with transaction(self.db):
            self.repo.apply_updates(self.db, address, **data.model_dump(exclude_unset=True))
        return address

    def delete_address(self, address_id: str, user: User) -> None:
        """Delete an unused address; the oldest remaining one inherits the default"""
        address = self.get_address(address_id, user)
        if self.repo.is_used_by_bookings(self.db, address.id):
            raise InvariantViolation("address is used by existing bookings")

        was_default = address.is_default
        with transaction(self.db):
            self.repo.delete(self.db, address)
            if was_default:
                remaining = self.repo.list_by_user(self.db, user.id)
                if remaining:
                    self.repo.set_default(self.db, user.id, remaining[0].id)
        logger.info(f"🗑️ Address {address_id} deleted for user {user.id}")

    def set_default_address(self, address_id: str, user: User) -> Address:
        address = self.get_address(address_id, user)
        with transaction(self.db):
            self.repo.set_default(self.db, user.id, address.id)
        self.db.refresh(address)
        logger.info(f"⭐ Address {address.id} is now the default for user {user.id}")
        return address
