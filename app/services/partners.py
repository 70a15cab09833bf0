"""
Partner service: reseller CRUD, proposal assignment and commission summary.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.auth import get_password_hash
from app.models import Partner, Proposal
from app.services.errors import NotFound
from app.services.ledger import compute_derived, quantize_money, to_decimal
from app.services.proposals import list_proposals
from app.services.validators import validate_partner

logger = logging.getLogger(__name__)


def _clean_ids(ids) -> List[int]:
    return list(dict.fromkeys(int(pid) for pid in (ids or [])))


def list_partners(db: Session) -> List[Partner]:
    return db.query(Partner).order_by(Partner.name).all()


def get_partner(db: Session, partner_id: int) -> Partner:
    partner = db.query(Partner).filter(Partner.id == partner_id).first()
    if partner is None:
        raise NotFound(f"Partner {partner_id} not found")
    return partner


def get_partner_by_username(db: Session, username: str) -> Partner:
    partner = db.query(Partner).filter(Partner.username == username.strip()).first()
    if partner is None:
        raise NotFound(f"Partner '{username}' not found")
    return partner


def create_partner(db: Session, data: Dict[str, Any]) -> Partner:
    """
    Create a partner account.

    Raises:
        InvalidArgument: missing fields, bad email, short password,
            duplicate username or unknown proposal ids
    """
    validate_partner(data, db).raise_if_invalid()

    partner = Partner(
        name=data["name"].strip(),
        username=data["username"].strip(),
        email=data["email"].strip(),
        password_hash=get_password_hash(data["password"]),
        proposal_ids=_clean_ids(data.get("proposal_ids")),
    )
    db.add(partner)
    db.commit()
    logger.info("Created partner %s (%s)", partner.id, partner.username)
    return partner


def update_partner(db: Session, partner_id: int, data: Dict[str, Any]) -> Partner:
    """
    Update the supplied partner fields; a new password is re-hashed.

    Raises:
        NotFound, InvalidArgument
    """
    partner = get_partner(db, partner_id)
    validate_partner(data, db, existing_id=partner_id, partial=True).raise_if_invalid()

    for field in ("name", "username", "email"):
        if field in data:
            setattr(partner, field, data[field].strip())
    if "password" in data:
        partner.password_hash = get_password_hash(data["password"])
    if "proposal_ids" in data:
        partner.proposal_ids = _clean_ids(data["proposal_ids"])

    db.commit()
    logger.info("Updated partner %s fields %s", partner_id, sorted(k for k in data if k != "password"))
    return partner


def delete_partner(db: Session, partner_id: int) -> bool:
    partner = db.query(Partner).filter(Partner.id == partner_id).first()
    if partner is None:
        return False
    db.delete(partner)
    db.commit()
    logger.info("Deleted partner %s", partner_id)
    return True


def partner_proposals(db: Session, partner_id: int) -> List[Proposal]:
    """Proposals assigned to a partner."""
    partner = get_partner(db, partner_id)
    return list_proposals(db, proposal_ids=partner.proposal_ids or [])


def partner_commission_summary(db: Session, partner_id: int) -> dict:
    """
    Commission position of a partner across their proposals.

    Returns:
        Dictionary with:
        - proposal_count
        - total_value
        - total_commission
        - commission_paid
        - open_commission
        - percent_commission_paid
    """
    proposals = partner_proposals(db, partner_id)

    total_value = Decimal("0")
    total_commission = Decimal("0")
    commission_paid = Decimal("0")
    for proposal in proposals:
        derived = compute_derived(proposal)
        total_value += to_decimal(proposal.total_value)
        total_commission += derived["total_commission"]
        commission_paid += to_decimal(proposal.commission_paid)

    if total_commission > 0:
        percent_paid = commission_paid / total_commission * Decimal("100")
    else:
        percent_paid = Decimal("0")

    return {
        "proposal_count": len(proposals),
        "total_value": quantize_money(total_value),
        "total_commission": quantize_money(total_commission),
        "commission_paid": quantize_money(commission_paid),
        "open_commission": quantize_money(total_commission - commission_paid),
        "percent_commission_paid": quantize_money(percent_paid),
    }
