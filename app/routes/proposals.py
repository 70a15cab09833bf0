from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import Proposal
from app.routes.encoding import money_json
from app.services import proposals as proposal_service
from app.services.errors import NotFound
from app.services.ledger import compute_derived
from app.services.payments import PaymentKind, add_payment, get_ledger, list_payments

router = APIRouter(prefix="/api/proposals", tags=["proposals"])


class ProposalCreateRequest(BaseModel):
    # amount_paid / commission_paid are ledger-controlled and rejected here
    model_config = ConfigDict(extra="forbid")

    name: str
    total_value: Decimal
    commission_percent: Decimal = Decimal("0")
    client_name: Optional[str] = None
    client_type: Optional[str] = None
    proposal_date: Optional[date] = None
    project_type: Optional[str] = None
    contract_type: Optional[str] = None
    service_types: List[str] = Field(default_factory=list)
    structure_weight: Optional[Decimal] = None
    price_per_kg: Optional[Decimal] = None
    material_total: Optional[Decimal] = None
    negotiation_days: Optional[int] = None
    repeat_client: bool = False
    notes: Optional[str] = None
    # Save despite warnings (unknown client/project/contract type)
    confirm_warnings: bool = False


class ProposalUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    total_value: Optional[Decimal] = None
    commission_percent: Optional[Decimal] = None
    client_name: Optional[str] = None
    client_type: Optional[str] = None
    proposal_date: Optional[date] = None
    project_type: Optional[str] = None
    contract_type: Optional[str] = None
    service_types: Optional[List[str]] = None
    structure_weight: Optional[Decimal] = None
    price_per_kg: Optional[Decimal] = None
    material_total: Optional[Decimal] = None
    negotiation_days: Optional[int] = None
    repeat_client: Optional[bool] = None
    notes: Optional[str] = None
    confirm_warnings: bool = False


class PaymentRequest(BaseModel):
    amount: Decimal
    payment_date: date
    note: Optional[str] = None


def serialize_proposal(proposal: Proposal) -> dict:
    """Proposal columns plus the derived commission figures, amounts as strings."""
    return money_json({
        "id": proposal.id,
        "name": proposal.name,
        "client_name": proposal.client_name,
        "client_type": proposal.client_type,
        "proposal_date": proposal.proposal_date,
        "project_type": proposal.project_type,
        "contract_type": proposal.contract_type,
        "service_types": proposal.service_types or [],
        "structure_weight": proposal.structure_weight,
        "price_per_kg": proposal.price_per_kg,
        "material_total": proposal.material_total,
        "negotiation_days": proposal.negotiation_days,
        "repeat_client": proposal.repeat_client,
        "notes": proposal.notes,
        "total_value": proposal.total_value,
        "commission_percent": proposal.commission_percent,
        "amount_paid": proposal.amount_paid,
        "commission_paid": proposal.commission_paid,
        **compute_derived(proposal),
    })


def serialize_payment(entry) -> dict:
    return money_json({
        "id": entry.id,
        "proposal_id": entry.proposal_id,
        "amount": entry.amount,
        "payment_date": entry.payment_date,
        "note": entry.note,
        "created_at": entry.created_at,
    })


# ---------------------------------------------------------------------------
# Proposals
# ---------------------------------------------------------------------------
@router.get("")
def list_proposals(search: Optional[str] = None, db: Session = Depends(get_db)):
    return [serialize_proposal(p) for p in proposal_service.list_proposals(db, search=search)]


@router.post("", status_code=201)
def create_proposal(payload: ProposalCreateRequest, db: Session = Depends(get_db)):
    data = payload.model_dump(exclude={"confirm_warnings"})
    proposal = proposal_service.create_proposal(db, data, confirm_warnings=payload.confirm_warnings)
    return serialize_proposal(proposal)


@router.get("/{proposal_id}")
def get_proposal(proposal_id: int, db: Session = Depends(get_db)):
    """Proposal with derived figures and both payment histories."""
    ledger = get_ledger(db, proposal_id)
    return {
        **serialize_proposal(ledger["proposal"]),
        "client_payments": [serialize_payment(e) for e in ledger["client_payments"]],
        "commission_payments": [serialize_payment(e) for e in ledger["commission_payments"]],
    }


@router.patch("/{proposal_id}")
def update_proposal(proposal_id: int, payload: ProposalUpdateRequest, db: Session = Depends(get_db)):
    data = payload.model_dump(exclude_unset=True, exclude={"confirm_warnings"})
    proposal = proposal_service.update_proposal(
        db, proposal_id, data, confirm_warnings=payload.confirm_warnings
    )
    return serialize_proposal(proposal)


@router.delete("/{proposal_id}", status_code=204)
def delete_proposal(proposal_id: int, db: Session = Depends(get_db)):
    if not proposal_service.delete_proposal(db, proposal_id):
        raise NotFound(f"Proposal {proposal_id} not found")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Payment ledgers
# ---------------------------------------------------------------------------
@router.get("/{proposal_id}/payments")
def list_client_payments(proposal_id: int, db: Session = Depends(get_db)):
    return [serialize_payment(e) for e in list_payments(db, proposal_id, PaymentKind.CLIENT)]


@router.post("/{proposal_id}/payments", status_code=201)
def add_client_payment(proposal_id: int, payload: PaymentRequest, db: Session = Depends(get_db)):
    entry = add_payment(
        db, proposal_id, PaymentKind.CLIENT, payload.amount, payload.payment_date, payload.note
    )
    return serialize_payment(entry)


@router.get("/{proposal_id}/commissions")
def list_commission_payments(proposal_id: int, db: Session = Depends(get_db)):
    return [serialize_payment(e) for e in list_payments(db, proposal_id, PaymentKind.COMMISSION)]


@router.post("/{proposal_id}/commissions", status_code=201)
def add_commission_payment(proposal_id: int, payload: PaymentRequest, db: Session = Depends(get_db)):
    entry = add_payment(
        db, proposal_id, PaymentKind.COMMISSION, payload.amount, payload.payment_date, payload.note
    )
    return serialize_payment(entry)
