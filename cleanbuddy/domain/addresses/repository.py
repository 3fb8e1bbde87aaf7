"""Address repository - Database operations for customer addresses"""

from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ...models import Address, Booking


class AddressRepository:
    """Repository for customer address database operations"""

    @staticmethod
    def get_by_id(db: Session, address_id: str) -> Optional[Address]:
        return db.query(Address).filter(Address.id == address_id).first()

    @staticmethod
    def list_by_user(db: Session, user_id: str) -> list[Address]:
        """Default address first, then oldest first"""
        return (
            db.query(Address)
            .filter(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.created_at.asc(), Address.id.asc())
            .all()
        )

    @staticmethod
    def get_default(db: Session, user_id: str) -> Optional[Address]:
        return db.query(Address).filter(Address.user_id == user_id, Address.is_default.is_(True)).first()

    @staticmethod
    def has_addresses(db: Session, user_id: str) -> bool:
        return db.query(Address.id).filter(Address.user_id == user_id).first() is not None

    @staticmethod
    def create(db: Session, **address_data) -> Address:
        """Stage a new address; the caller commits"""
        address = Address(**address_data)
        db.add(address)
        db.flush()
        return address

    @staticmethod
    def apply_updates(db: Session, address: Address, **updates) -> Address:
        for key, value in updates.items():
            if value is not None and hasattr(address, key):
                setattr(address, key, value)
        db.flush()
        return address

    @staticmethod
    def set_default(db: Session, user_id: str, address_id: str) -> None:
        """Clear every default the user has, then mark address_id as the default"""
        db.execute(
            update(Address)
            .where(Address.user_id == user_id, Address.id != address_id)
            .values(is_default=False)
            .execution_options(synchronize_session=False)
        )
        db.execute(
            update(Address)
            .where(Address.id == address_id, Address.user_id == user_id)
            .values(is_default=True)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def is_used_by_bookings(db: Session, address_id: str) -> bool:
        return db.query(Booking.id).filter(Booking.address_id == address_id).first() is not None

    @staticmethod
    def delete(db: Session, address: Address) -> None:
        db.delete(address)
        db.flush()
