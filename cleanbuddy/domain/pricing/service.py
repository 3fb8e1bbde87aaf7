"""Pricing service - Price quotes and the service catalog"""

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...auth import require_global_admin
from ...database import transaction
from ...enums import ServiceAddOn, ServiceType
from ...errors import AuthenticationRequired, Forbidden, InvariantViolation, NotFound
from ...models import CleanerProfile, ServiceAddOnDefinition, ServiceDefinition, User
from ..addresses.repository import AddressRepository
from ..availability.repository import ServiceAreaRepository
from ..cleaners.repository import CleanerProfileRepository
from .engine import PriceBreakdown, calculate_price, resolve_travel_fee
from .repository import ServiceCatalogRepository
from .schemas import (
    AddOnDefinitionCreate,
    AddOnDefinitionUpdate,
    CalculateServicePriceInput,
    ServiceDefinitionCreate,
    ServiceDefinitionUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_DEFINITIONS = [
    {
        "service_type": ServiceType.GENERAL.value,
        "name": "General Cleaning",
        "description": "Regular cleaning of all rooms, kitchen and bathroom",
        "base_hours": 3.0,
        "price_multiplier": 1.0,
    },
    {
        "service_type": ServiceType.DEEP.value,
        "name": "Deep Cleaning",
        "description": "Thorough cleaning including hard-to-reach areas",
        "base_hours": 5.0,
        "price_multiplier": 1.5,
    },
    {
        "service_type": ServiceType.MOVE_IN_OUT.value,
        "name": "Move In/Out Cleaning",
        "description": "Complete cleaning of an empty home before or after a move",
        "base_hours": 6.0,
        "price_multiplier": 1.8,
    },
]

DEFAULT_ADD_ON_DEFINITIONS = [
    {"add_on": ServiceAddOn.OVEN.value, "name": "Oven Cleaning", "price": 5000, "estimated_hours": 1.0},
    {"add_on": ServiceAddOn.WINDOWS.value, "name": "Window Cleaning", "price": 8000, "estimated_hours": 1.5},
    {"add_on": ServiceAddOn.FRIDGE.value, "name": "Fridge Cleaning", "price": 4000, "estimated_hours": 0.5},
    {"add_on": ServiceAddOn.GARAGE.value, "name": "Garage Cleaning", "price": 10000, "estimated_hours": 2.0},
]


class PricingService:
    """Service layer for quotes and catalog management"""

    def __init__(self, db: Session, platform_fee_percentage: float):
        self.db = db
        self.platform_fee_percentage = platform_fee_percentage
        self.repo = ServiceCatalogRepository()
        self.profile_repo = CleanerProfileRepository()
        self.area_repo = ServiceAreaRepository()
        self.address_repo = AddressRepository()

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    def build_quote(
        self,
        profile: CleanerProfile,
        service_type: str,
        add_ons: Iterable,
        city: str,
        neighborhood: Optional[str] = None,
        postal_code: Optional[str] = None,
    ) -> PriceBreakdown:
        """Price one cleaning for a cleaner at a location; used by quotes and booking creation"""
        definition = self.repo.get_service_definition(self.db, getattr(service_type, "value", service_type))
        if not definition:
            raise NotFound("service definition not found")

        areas = self.area_repo.list_by_cleaner_profile(self.db, profile.id)
        travel_fee = resolve_travel_fee(areas, city, neighborhood, postal_code)
        return calculate_price(
            profile,
            definition,
            self.repo.list_add_on_definitions(self.db, active_only=True),
            add_ons,
            travel_fee,
            self.platform_fee_percentage,
        )

    def quote(self, data: CalculateServicePriceInput, user: Optional[User]) -> PriceBreakdown:
        """
        Price estimate for calculateServicePrice.

        A saved address may only be used by its owner; anonymous callers pass
        an inline location instead.
        """
        profile = self.profile_repo.get_by_id(self.db, data.cleaner_profile_id)
        if not profile:
            raise NotFound("cleaner profile not found")

        if data.address_id:
            if not user:
                raise AuthenticationRequired("authentication required to use a saved address")
            address = self.address_repo.get_by_id(self.db, data.address_id)
            if not address:
                raise NotFound("address not found")
            if address.user_id != user.id:
                raise Forbidden("address does not belong to user")
            city, neighborhood, postal_code = address.city, address.neighborhood, address.postal_code
        else:
            city = data.location.city
            neighborhood = data.location.neighborhood
            postal_code = data.location.postal_code

        breakdown = self.build_quote(profile, data.service_type, data.add_ons, city, neighborhood, postal_code)
        logger.info(
            f"💰 Quote for {profile.id} {data.service_type.value}: total={breakdown.total_price} "
            f"payout={breakdown.cleaner_payout}"
        )
        return breakdown

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_service_definition(self, service_type: ServiceType) -> ServiceDefinition:
        definition = self.repo.get_service_definition(self.db, service_type.value)
        if not definition:
            raise NotFound("service definition not found")
        return definition

    def list_service_definitions(self, active_only: bool = True) -> list[ServiceDefinition]:
        return self.repo.list_service_definitions(self.db, active_only)

    def list_add_on_definitions(self, active_only: bool = True) -> list[ServiceAddOnDefinition]:
        return self.repo.list_add_on_definitions(self.db, active_only)

    def create_service_definition(self, data: ServiceDefinitionCreate, user: User) -> ServiceDefinition:
        require_global_admin(user)
        if self.repo.get_service_definition(self.db, data.service_type.value):
            raise InvariantViolation(f"service definition for {data.service_type.value} already exists")

        with transaction(self.db):
            definition = self.repo.add(
                self.db,
                ServiceDefinition(
                    service_type=data.service_type.value,
                    **data.model_dump(exclude={"service_type"}),
                ),
            )
        logger.info(f"✅ Service definition {definition.service_type} created by {user.id}")
        return definition

    def update_service_definition(
        self, service_type: ServiceType, data: ServiceDefinitionUpdate, user: User
    ) -> ServiceDefinition:
        require_global_admin(user)
        definition = self.get_service_definition(service_type)
        with transaction(self.db):
            self.repo.apply_updates(self.db, definition, **data.model_dump(exclude_unset=True))
        return definition

    def create_add_on_definition(self, data: AddOnDefinitionCreate, user: User) -> ServiceAddOnDefinition:
        require_global_admin(user)
        if self.repo.get_add_on_definition(self.db, data.add_on.value):
            raise InvariantViolation(f"add-on definition for {data.add_on.value} already exists")

        with transaction(self.db):
            definition = self.repo.add(
                self.db,
                ServiceAddOnDefinition(add_on=data.add_on.value, **data.model_dump(exclude={"add_on"})),
            )
        logger.info(f"✅ Add-on definition {definition.add_on} created by {user.id}")
        return definition

    def update_add_on_definition(
        self, add_on: ServiceAddOn, data: AddOnDefinitionUpdate, user: User
    ) -> ServiceAddOnDefinition:
        require_global_admin(user)
        definition = self.repo.get_add_on_definition(self.db, add_on.value)
        if not definition:
            raise NotFound("add-on definition not found")
        with transaction(self.db):
            self.repo.apply_updates(self.db, definition, **data.model_dump(exclude_unset=True))
        return definition

    def seed_catalog(self) -> bool:
        """Insert the default catalog into an empty database; returns True when rows were added"""
        if not self.repo.is_empty(self.db):
            return False

        with transaction(self.db):
            for row in DEFAULT_SERVICE_DEFINITIONS:
                self.repo.add(self.db, ServiceDefinition(**row))
            for row in DEFAULT_ADD_ON_DEFINITIONS:
                self.repo.add(self.db, ServiceAddOnDefinition(**row))
        logger.info(
            f"🌱 Seeded {len(DEFAULT_SERVICE_DEFINITIONS)} services and {len(DEFAULT_ADD_ON_DEFINITIONS)} add-ons"
        )
        return True
