"""Service catalog repository - Database operations for service and add-on definitions"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ServiceAddOnDefinition, ServiceDefinition


class ServiceCatalogRepository:
    """Repository for service catalog database operations"""

    @staticmethod
    def get_service_definition(db: Session, service_type: str) -> Optional[ServiceDefinition]:
        """Get the definition for a service type"""
        return db.query(ServiceDefinition).filter(ServiceDefinition.service_type == service_type).first()

    @staticmethod
    def list_service_definitions(db: Session, active_only: bool = True) -> list[ServiceDefinition]:
        query = db.query(ServiceDefinition)
        if active_only:
            query = query.filter(ServiceDefinition.is_active.is_(True))
        return query.order_by(ServiceDefinition.base_hours.asc()).all()

    @staticmethod
    def get_add_on_definition(db: Session, add_on: str) -> Optional[ServiceAddOnDefinition]:
        return db.query(ServiceAddOnDefinition).filter(ServiceAddOnDefinition.add_on == add_on).first()

    @staticmethod
    def list_add_on_definitions(db: Session, active_only: bool = True) -> list[ServiceAddOnDefinition]:
        query = db.query(ServiceAddOnDefinition)
        if active_only:
            query = query.filter(ServiceAddOnDefinition.is_active.is_(True))
        return query.order_by(ServiceAddOnDefinition.price.asc()).all()

    @staticmethod
    def add(db: Session, definition):
        """Stage a new catalog row; the caller commits"""
        db.add(definition)
        db.flush()
        return definition

    @staticmethod
    def apply_updates(db: Session, definition, **updates):
        """Apply non-None field updates; the caller commits"""
        for key, value in updates.items():
            if value is not None and hasattr(definition, key):
                setattr(definition, key, value)
        db.flush()
        return definition

    @staticmethod
    def is_empty(db: Session) -> bool:
        return db.query(ServiceDefinition.id).first() is None and db.query(ServiceAddOnDefinition.id).first() is None
