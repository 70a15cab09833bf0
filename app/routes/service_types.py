from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.database import get_db
from app.services import service_types as catalog

router = APIRouter(prefix="/api/service-types", tags=["service-types"])


class ServiceTypeRequest(BaseModel):
    name: str


def _serialize(service_types) -> list:
    return [{"id": s.id, "name": s.name} for s in service_types]


@router.get("")
def list_service_types(db: Session = Depends(get_db)):
    return _serialize(catalog.list_service_types(db))


@router.post("", status_code=201)
def add_service_type(payload: ServiceTypeRequest, db: Session = Depends(get_db)):
    return _serialize(catalog.add_service_type(db, payload.name))


@router.delete("/{service_type_id}")
def remove_service_type(service_type_id: int, db: Session = Depends(get_db)):
    return _serialize(catalog.remove_service_type(db, service_type_id))
