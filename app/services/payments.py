"""
Proposal Payment Ledger Service

The only writer of Proposal.amount_paid and Proposal.commission_paid.

Every mutation (add or delete of a client/commission payment) runs as one
unit while holding the proposal's lock:

    lock proposal -> verify stored total -> insert/delete entry
        -> re-sum ledger rows -> write total -> commit

so the stored total always equals the sum of the active ledger entries.
"""

import enum
import logging
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from app.models import ClientPayment, CommissionPayment, Proposal
from app.services.errors import ConsistencyViolation, InvalidArgument, NotFound
from app.services.ledger import compute_derived, quantize_money, sum_entries, to_decimal
from app.services.validators import validate_payment

logger = logging.getLogger(__name__)


class PaymentKind(str, enum.Enum):
    CLIENT = "client"
    COMMISSION = "commission"

    @property
    def model(self):
        return ClientPayment if self is PaymentKind.CLIENT else CommissionPayment

    @property
    def total_field(self) -> str:
        """Proposal column holding this ledger's running total."""
        return "amount_paid" if self is PaymentKind.CLIENT else "commission_paid"

    @classmethod
    def parse(cls, value: Union["PaymentKind", str]) -> "PaymentKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidArgument(f"Unknown payment kind '{value}'") from None


# ---------------------------------------------------------------------------
# Per-proposal locks
# ---------------------------------------------------------------------------
_locks: Dict[int, threading.Lock] = {}
_locks_guard = threading.Lock()


def proposal_lock(proposal_id: int) -> threading.Lock:
    with _locks_guard:
        lock = _locks.get(proposal_id)
        if lock is None:
            lock = _locks[proposal_id] = threading.Lock()
        return lock


def release_proposal_lock(proposal_id: int) -> None:
    """Forget the lock of a deleted proposal."""
    with _locks_guard:
        _locks.pop(proposal_id, None)


@contextmanager
def _ledger_transaction(db: Session, proposal_id: int):
    """Serialize ledger writes for one proposal and commit them atomically.

    The in-process lock covers worker threads of a single server; the
    SELECT ... FOR UPDATE row lock covers separate processes sharing a
    Postgres database. Yields the locked Proposal.
    """
    with proposal_lock(proposal_id):
        try:
            # Drop anything this session cached before the lock was taken
            db.expire_all()
            proposal = (
                db.query(Proposal)
                .filter(Proposal.id == proposal_id)
                .with_for_update()
                .first()
            )
            if proposal is None:
                raise NotFound(f"Proposal {proposal_id} not found")
            yield proposal
            db.commit()
        except Exception:
            db.rollback()
            raise


def _ledger_sum(db: Session, kind: PaymentKind, proposal_id: int) -> Decimal:
    """Sum the ledger rows as currently visible in this transaction."""
    model = kind.model
    rows = db.query(model.amount).filter(model.proposal_id == proposal_id).all()
    return sum_entries({"amount": amount} for (amount,) in rows)


def verify_ledger(db: Session, proposal: Proposal, kinds=None) -> None:
    """
    Check that stored paid totals match the ledgers.

    Raises:
        ConsistencyViolation: if any stored total differs from its ledger sum
    """
    for kind in kinds or list(PaymentKind):
        stored = quantize_money(to_decimal(getattr(proposal, kind.total_field)))
        actual = _ledger_sum(db, kind, proposal.id)
        if stored != actual:
            logger.error(
                "Ledger mismatch on proposal %s: %s=%s but %s ledger sums to %s",
                proposal.id, kind.total_field, stored, kind.value, actual,
            )
            raise ConsistencyViolation(
                f"Proposal {proposal.id}: stored {kind.total_field} {stored} "
                f"does not match {kind.value} ledger total {actual}"
            )


def _write_total(db: Session, kind: PaymentKind, proposal: Proposal) -> Decimal:
    db.flush()
    total = _ledger_sum(db, kind, proposal.id)
    setattr(proposal, kind.total_field, total)
    return total


# ---------------------------------------------------------------------------
# Public operations
# ---------------------------------------------------------------------------

def add_payment(
    db: Session,
    proposal_id: int,
    kind: Union[PaymentKind, str],
    amount: Any,
    payment_date: Any,
    note: Optional[str] = None,
):
    """
    Record a client or commission payment against a proposal.

    Args:
        db: Database session
        proposal_id: Owning proposal
        kind: PaymentKind.CLIENT or PaymentKind.COMMISSION
        amount: Strictly positive amount
        payment_date: date or ISO date string
        note: Optional free text

    Returns:
        The created ClientPayment/CommissionPayment (with id assigned)

    Raises:
        InvalidArgument: bad amount/date (checked before any write)
        NotFound: proposal does not exist
        ConsistencyViolation: stored total had drifted from the ledger
    """
    kind = PaymentKind.parse(kind)
    parsed_amount, parsed_date = validate_payment(amount, payment_date)
    note = note.strip() if note and note.strip() else None

    with _ledger_transaction(db, proposal_id) as proposal:
        verify_ledger(db, proposal, kinds=[kind])

        entry = kind.model(
            proposal_id=proposal.id,
            amount=parsed_amount,
            payment_date=parsed_date,
            note=note,
        )
        db.add(entry)
        total = _write_total(db, kind, proposal)
        entry_id = entry.id

    logger.info(
        "Added %s payment %s of %s to proposal %s (%s now %s)",
        kind.value, entry_id, parsed_amount, proposal_id, kind.total_field, total,
    )
    return entry


def delete_payment(db: Session, entry_id: int, kind: Union[PaymentKind, str]) -> bool:
    """
    Remove a payment entry and recompute its proposal's paid total.

    Returns:
        True if the entry was deleted, False if no such entry exists
    """
    kind = PaymentKind.parse(kind)
    model = kind.model

    row = db.query(model.proposal_id).filter(model.id == entry_id).first()
    if row is None:
        logger.warning("Delete of unknown %s payment %s", kind.value, entry_id)
        return False
    proposal_id = row[0]

    with _ledger_transaction(db, proposal_id) as proposal:
        # Re-read under the lock; a concurrent delete may have won the race
        entry = db.query(model).filter(model.id == entry_id).first()
        if entry is None:
            deleted = False
        else:
            verify_ledger(db, proposal, kinds=[kind])
            db.delete(entry)
            total = _write_total(db, kind, proposal)
            deleted = True

    if deleted:
        logger.info(
            "Deleted %s payment %s from proposal %s (%s now %s)",
            kind.value, entry_id, proposal_id, kind.total_field, total,
        )
    else:
        logger.warning("Delete of unknown %s payment %s", kind.value, entry_id)
    return deleted


def list_payments(db: Session, proposal_id: int, kind: Union[PaymentKind, str]) -> List:
    """
    Payment history for a proposal, oldest payment date first.

    Entries sharing a date keep insertion order.

    Raises:
        NotFound: proposal does not exist
    """
    kind = PaymentKind.parse(kind)
    model = kind.model

    if db.query(Proposal.id).filter(Proposal.id == proposal_id).first() is None:
        raise NotFound(f"Proposal {proposal_id} not found")

    return (
        db.query(model)
        .filter(model.proposal_id == proposal_id)
        .order_by(model.payment_date.asc(), model.id.asc())
        .all()
    )


def get_ledger(db: Session, proposal_id: int) -> dict:
    """
    Proposal with its derived figures and both payment histories.

    Raises:
        NotFound: proposal does not exist
    """
    proposal = db.query(Proposal).filter(Proposal.id == proposal_id).first()
    if proposal is None:
        raise NotFound(f"Proposal {proposal_id} not found")

    return {
        "proposal": proposal,
        "derived": compute_derived(proposal),
        "client_payments": list_payments(db, proposal_id, PaymentKind.CLIENT),
        "commission_payments": list_payments(db, proposal_id, PaymentKind.COMMISSION),
    }


def reconcile_proposal(db: Session, proposal_id: int, fix: bool = False) -> dict:
    """
    Compare a proposal's stored totals with its ledgers.

    With fix=True the stored totals are rewritten from the ledgers; this is
    the only sanctioned way to repair drift (e.g. rows edited by hand).

    Returns:
        Dict with proposal_id, consistent flag and per-kind stored/ledger totals
    """
    report = {"proposal_id": proposal_id, "consistent": True, "totals": {}}

    with _ledger_transaction(db, proposal_id) as proposal:
        for kind in PaymentKind:
            stored = quantize_money(to_decimal(getattr(proposal, kind.total_field)))
            actual = _ledger_sum(db, kind, proposal_id)
            report["totals"][kind.total_field] = {"stored": stored, "ledger": actual}
            if stored != actual:
                report["consistent"] = False
                if fix:
                    setattr(proposal, kind.total_field, actual)
                    logger.warning(
                        "Repaired %s on proposal %s: %s -> %s",
                        kind.total_field, proposal_id, stored, actual,
                    )

    return report
