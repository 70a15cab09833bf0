"""
Proposal CRUD service.

Writes base and descriptive fields only. amount_paid / commission_paid are
owned by app.services.payments and are rejected here.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import Partner, Proposal
from app.services.errors import NotFound
from app.services.ledger import quantize_money
from app.services.payments import proposal_lock, release_proposal_lock
from app.services.validators import parse_date, parse_decimal, validate_proposal

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("name", "client_name", "client_type", "project_type", "contract_type", "notes")
MONEY_FIELDS = ("total_value", "commission_percent", "structure_weight", "price_per_kg", "material_total")


def _material_total(proposal: Proposal) -> None:
    """Material total follows weight × price per kg whenever both are set."""
    weight = proposal.structure_weight
    price = proposal.price_per_kg
    if weight and price and weight > 0 and price > 0:
        proposal.material_total = quantize_money(weight * price)


def _apply(proposal: Proposal, data: Dict[str, Any]) -> None:
    for field in TEXT_FIELDS:
        if field in data:
            value = data[field]
            setattr(proposal, field, value.strip() if isinstance(value, str) and value.strip() else None)

    for field in MONEY_FIELDS:
        if field in data:
            value = parse_decimal(data[field])
            if field == "commission_percent" and value is None:
                value = Decimal("0")
            setattr(proposal, field, value)

    if "proposal_date" in data:
        proposal.proposal_date = parse_date(data["proposal_date"])
    if "negotiation_days" in data:
        proposal.negotiation_days = data["negotiation_days"]
    if "repeat_client" in data:
        proposal.repeat_client = bool(data["repeat_client"])
    if "service_types" in data:
        names = data["service_types"] or []
        # De-duplicate while keeping the submitted order
        proposal.service_types = list(dict.fromkeys(n.strip() for n in names if n and n.strip()))

    _material_total(proposal)


def list_proposals(
    db: Session,
    search: Optional[str] = None,
    proposal_ids: Optional[Iterable[int]] = None,
) -> List[Proposal]:
    """All proposals, optionally filtered by a name/client search or an id set."""
    query = db.query(Proposal)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(Proposal.name.ilike(term), Proposal.client_name.ilike(term)))
    if proposal_ids is not None:
        ids = list(proposal_ids)
        if not ids:
            return []
        query = query.filter(Proposal.id.in_(ids))
    return query.order_by(Proposal.id).all()


def get_proposal(db: Session, proposal_id: int) -> Proposal:
    proposal = db.query(Proposal).filter(Proposal.id == proposal_id).first()
    if proposal is None:
        raise NotFound(f"Proposal {proposal_id} not found")
    return proposal


def create_proposal(db: Session, data: Dict[str, Any], confirm_warnings: bool = False) -> Proposal:
    """
    Create a proposal with an empty payment history.

    Raises:
        InvalidArgument: validation failed (including any attempt to seed
            amount_paid / commission_paid)
        UnconfirmedWarnings: unknown catalog values and confirm_warnings not set
    """
    validate_proposal(data).raise_if_invalid(confirm_warnings=confirm_warnings)

    proposal = Proposal(repeat_client=False)
    _apply(proposal, data)
    proposal.amount_paid = Decimal("0.00")
    proposal.commission_paid = Decimal("0.00")

    db.add(proposal)
    db.commit()
    logger.info("Created proposal %s (%s)", proposal.id, proposal.name)
    return proposal


def update_proposal(
    db: Session, proposal_id: int, data: Dict[str, Any], confirm_warnings: bool = False
) -> Proposal:
    """
    Update the supplied fields of a proposal.

    Raises:
        NotFound: proposal does not exist
        InvalidArgument: validation failed
        UnconfirmedWarnings: unknown catalog values and confirm_warnings not set
    """
    validate_proposal(data, partial=True).raise_if_invalid(confirm_warnings=confirm_warnings)
    proposal = get_proposal(db, proposal_id)

    _apply(proposal, data)
    db.commit()
    logger.info("Updated proposal %s fields %s", proposal_id, sorted(data))
    return proposal


def delete_proposal(db: Session, proposal_id: int) -> bool:
    """
    Delete a proposal together with both of its payment ledgers.

    Also drops the id from every partner's assignment list.

    Returns:
        True if deleted, False if no such proposal
    """
    with proposal_lock(proposal_id):
        proposal = db.query(Proposal).filter(Proposal.id == proposal_id).first()
        if proposal is None:
            return False

        for partner in db.query(Partner).all():
            if proposal_id in (partner.proposal_ids or []):
                partner.proposal_ids = [pid for pid in partner.proposal_ids if pid != proposal_id]

        db.delete(proposal)
        db.commit()
    release_proposal_lock(proposal_id)
    logger.info("Deleted proposal %s", proposal_id)
    return True
