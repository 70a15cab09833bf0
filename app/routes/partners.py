from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import Partner
from app.routes.encoding import money_json
from app.routes.proposals import serialize_proposal
from app.services import partners as partner_service
from app.services.errors import NotFound

router = APIRouter(prefix="/api/partners", tags=["partners"])


class PartnerCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    username: str
    email: str
    password: str
    proposal_ids: List[int] = Field(default_factory=list)


class PartnerUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    proposal_ids: Optional[List[int]] = None


def serialize_partner(partner: Partner) -> dict:
    # password_hash is never exposed
    return {
        "id": partner.id,
        "name": partner.name,
        "username": partner.username,
        "email": partner.email,
        "proposal_ids": partner.proposal_ids or [],
    }


@router.get("")
def list_partners(db: Session = Depends(get_db)):
    return [serialize_partner(p) for p in partner_service.list_partners(db)]


@router.post("", status_code=201)
def create_partner(payload: PartnerCreateRequest, db: Session = Depends(get_db)):
    return serialize_partner(partner_service.create_partner(db, payload.model_dump()))


@router.get("/{partner_id}")
def get_partner(partner_id: int, db: Session = Depends(get_db)):
    return serialize_partner(partner_service.get_partner(db, partner_id))


@router.patch("/{partner_id}")
def update_partner(partner_id: int, payload: PartnerUpdateRequest, db: Session = Depends(get_db)):
    partner = partner_service.update_partner(db, partner_id, payload.model_dump(exclude_unset=True))
    return serialize_partner(partner)


@router.delete("/{partner_id}", status_code=204)
def delete_partner(partner_id: int, db: Session = Depends(get_db)):
    if not partner_service.delete_partner(db, partner_id):
        raise NotFound(f"Partner {partner_id} not found")
    return Response(status_code=204)


@router.get("/{partner_id}/proposals")
def get_partner_proposals(partner_id: int, db: Session = Depends(get_db)):
    """Partner dashboard data: assigned proposals and commission position."""
    proposals = partner_service.partner_proposals(db, partner_id)
    return {
        "proposals": [serialize_proposal(p) for p in proposals],
        "summary": money_json(partner_service.partner_commission_summary(db, partner_id)),
    }
