"""
Service-type catalog.

A persisted, id-addressed list of the services a proposal can include.
Every mutation returns the new canonical list so callers never hold a stale
or shared copy.
"""

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import ServiceType
from app.services.errors import InvalidArgument, NotFound

logger = logging.getLogger(__name__)


def list_service_types(db: Session) -> List[ServiceType]:
    return db.query(ServiceType).order_by(ServiceType.name).all()


def add_service_type(db: Session, name: str) -> List[ServiceType]:
    """
    Add a service type to the catalog.

    Raises:
        InvalidArgument: blank name or a case-insensitive duplicate
    """
    name = (name or "").strip()
    if not name:
        raise InvalidArgument("Service type name is required")

    existing = (
        db.query(ServiceType)
        .filter(func.lower(ServiceType.name) == name.lower())
        .first()
    )
    if existing:
        raise InvalidArgument(f"Service type '{existing.name}' already exists")

    db.add(ServiceType(name=name))
    db.commit()
    logger.info("Added service type %s", name)
    return list_service_types(db)


def remove_service_type(db: Session, service_type_id: int) -> List[ServiceType]:
    """
    Remove a service type from the catalog.

    Proposals that already list the name keep it; only future selection changes.

    Raises:
        NotFound: no such id
    """
    service_type = db.query(ServiceType).filter(ServiceType.id == service_type_id).first()
    if service_type is None:
        raise NotFound(f"Service type {service_type_id} not found")

    name = service_type.name
    db.delete(service_type)
    db.commit()
    logger.info("Removed service type %s", name)
    return list_service_types(db)


def ensure_default_service_types(db: Session) -> int:
    """Seed the default catalog into an empty table. Returns how many were created."""
    if db.query(ServiceType.id).first() is not None:
        return 0
    for name in ServiceType.DEFAULTS:
        db.add(ServiceType(name=name))
    db.commit()
    logger.info("Seeded %d default service types", len(ServiceType.DEFAULTS))
    return len(ServiceType.DEFAULTS)
