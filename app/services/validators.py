"""
Data Quality Validators

Centralized validation for Proposals, Payments and Partners.
Blocking problems raise InvalidArgument (a ValueError) with human-readable
messages; nothing is written before validation passes.
"""

import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Dict, Any, List, Iterable

from sqlalchemy.orm import Session

from app.models import Partner, Proposal
from app.services.errors import InvalidArgument, UnconfirmedWarnings

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
CENTS = Decimal("0.01")


class ValidationResult:
    """Container for validation results including warnings."""
    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def add_error(self, msg: str):
        self.errors.append(msg)

    def add_warning(self, msg: str):
        self.warnings.append(msg)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self, confirm_warnings: bool = True):
        """
        Raise InvalidArgument if there are blocking errors, or
        UnconfirmedWarnings if there are warnings the caller has not confirmed.
        """
        if not self.is_valid:
            logger.warning("Validation failed: %s", "; ".join(self.errors))
            raise InvalidArgument("; ".join(self.errors), errors=list(self.errors))
        if self.warnings and not confirm_warnings:
            logger.info("Awaiting confirmation of warnings: %s", "; ".join(self.warnings))
            raise UnconfirmedWarnings(list(self.warnings))


def _is_empty(value: Any) -> bool:
    """Check if value is None or empty string."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Parse a user-supplied number ("1,250.50", 1250.5, Decimal) or return None."""
    if _is_empty(value):
        return None
    if isinstance(value, bool):
        return None
    try:
        parsed = Decimal(str(value).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return None
    if not parsed.is_finite():
        return None
    return parsed


def _has_cents_precision(value: Decimal) -> bool:
    try:
        return value == value.quantize(CENTS)
    except InvalidOperation:
        # Too many digits to express in cents at all
        return False


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO calendar date (YYYY-MM-DD) or return None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if _is_empty(value) or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


# ============================================================
# PAYMENT VALIDATION
# ============================================================

def validate_payment(amount: Any, payment_date: Any) -> tuple:
    """
    Validate a payment entry before it touches the ledger.

    Amounts must be strictly positive; zero or negative payments are rejected,
    never clamped.

    Returns:
        (amount, payment_date) as (Decimal, date)

    Raises:
        InvalidArgument
    """
    result = ValidationResult()

    parsed_amount = parse_decimal(amount)
    if parsed_amount is None:
        result.add_error("Payment amount must be a valid number")
    elif parsed_amount <= 0:
        result.add_error("Payment amount must be greater than zero")
    elif not _has_cents_precision(parsed_amount):
        result.add_error("Payment amount cannot have more than 2 decimal places")

    parsed_date = parse_date(payment_date)
    if parsed_date is None:
        result.add_error("Payment date must be a valid date (YYYY-MM-DD)")

    result.raise_if_invalid()
    return parsed_amount, parsed_date


# ============================================================
# PROPOSAL VALIDATION
# ============================================================

def validate_proposal(data: Dict[str, Any], partial: bool = False) -> ValidationResult:
    """
    Validate proposal data.

    Required on create: name, total_value
    total_value >= 0, commission_percent between 0 and 100
    Ledger-controlled fields (amount_paid, commission_paid) are always rejected.

    Args:
        data: Dict with proposal fields
        partial: True for updates, where only supplied keys are checked

    Returns:
        ValidationResult with errors and warnings
    """
    result = ValidationResult()

    for field in Proposal.LEDGER_FIELDS:
        if field in data:
            result.add_error(
                f"'{field}' is maintained by the payment ledger and cannot be set directly"
            )

    # --- HARD REQUIRED FIELDS ---
    if (not partial or "name" in data) and _is_empty(data.get("name")):
        result.add_error("Proposal name is required")

    if not partial or "total_value" in data:
        total_value = parse_decimal(data.get("total_value"))
        if total_value is None:
            result.add_error("Total value must be a valid number")
        elif total_value < 0:
            result.add_error("Total value cannot be negative")
        elif not _has_cents_precision(total_value):
            result.add_error("Total value cannot have more than 2 decimal places")

    if "commission_percent" in data and not _is_empty(data.get("commission_percent")):
        percent = parse_decimal(data.get("commission_percent"))
        if percent is None:
            result.add_error("Commission percent must be a valid number")
        elif percent < 0 or percent > 100:
            result.add_error("Commission percent must be between 0 and 100")
        elif not _has_cents_precision(percent):
            result.add_error("Commission percent cannot have more than 2 decimal places")

    # --- OPTIONAL NUMERIC FIELDS ---
    for field, label in (
        ("structure_weight", "Structure weight"),
        ("price_per_kg", "Price per kg"),
        ("material_total", "Material total"),
    ):
        value = data.get(field)
        if not _is_empty(value):
            num = parse_decimal(value)
            if num is None:
                result.add_error(f"{label} must be a valid number")
            elif num < 0:
                result.add_error(f"{label} cannot be negative")
            elif not _has_cents_precision(num):
                result.add_error(f"{label} cannot have more than 2 decimal places")

    negotiation_days = data.get("negotiation_days")
    if negotiation_days is not None:
        if not isinstance(negotiation_days, int) or isinstance(negotiation_days, bool) or negotiation_days < 0:
            result.add_error("Negotiation days must be a whole number of days")

    if not _is_empty(data.get("proposal_date")) and parse_date(data.get("proposal_date")) is None:
        result.add_error("Proposal date must be a valid date (YYYY-MM-DD)")

    # --- CATALOG VALUES (WARN ONLY) ---
    client_type = data.get("client_type")
    if client_type and client_type not in Proposal.CLIENT_TYPES:
        result.add_warning(f"Unknown client type '{client_type}'")

    project_type = data.get("project_type")
    if project_type and project_type not in Proposal.PROJECT_TYPES:
        result.add_warning(f"Unknown project type '{project_type}'")

    contract_type = data.get("contract_type")
    if contract_type and contract_type not in Proposal.CONTRACT_TYPES:
        result.add_warning(f"Unknown contract type '{contract_type}'")

    return result


# ============================================================
# PARTNER VALIDATION
# ============================================================

def validate_partner(
    data: Dict[str, Any],
    db: Session,
    existing_id: Optional[int] = None,
    partial: bool = False
) -> ValidationResult:
    """
    Validate partner data.

    Required: name, username, email, password (>= 6 chars) on create
    Block: duplicate username, malformed email, unknown proposal ids

    Args:
        data: Dict with keys: name, username, email, password, proposal_ids
        db: Database session for duplicate checks
        existing_id: ID of partner being edited (for duplicate exclusion)
        partial: True for updates, where only supplied keys are checked

    Returns:
        ValidationResult with errors and warnings
    """
    result = ValidationResult()

    def _check(key: str) -> bool:
        return not partial or key in data

    # --- HARD REQUIRED FIELDS ---
    if _check("name") and _is_empty(data.get("name")):
        result.add_error("Name is required")

    if _check("username") and _is_empty(data.get("username")):
        result.add_error("Username is required")

    if _check("email"):
        email = (data.get("email") or "").strip()
        if not EMAIL_RE.match(email):
            result.add_error("Invalid email")

    if _check("password"):
        password = data.get("password") or ""
        if len(password) < MIN_PASSWORD_LENGTH:
            result.add_error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    # --- DUPLICATE USERNAME (BLOCK) ---
    username = (data.get("username") or "").strip()
    if username:
        query = db.query(Partner).filter(Partner.username == username)
        if existing_id:
            query = query.filter(Partner.id != existing_id)
        if query.first():
            result.add_error(f"Username '{username}' is already taken")

    # --- ASSIGNED PROPOSALS MUST EXIST ---
    proposal_ids = data.get("proposal_ids")
    if proposal_ids:
        missing = _missing_proposal_ids(db, proposal_ids)
        if missing:
            result.add_error(
                "Unknown proposal ids: " + ", ".join(str(pid) for pid in missing)
            )

    return result


def _missing_proposal_ids(db: Session, proposal_ids: Iterable[int]) -> List[int]:
    wanted = set(proposal_ids)
    found = {
        row[0]
        for row in db.query(Proposal.id).filter(Proposal.id.in_(wanted)).all()
    }
    return sorted(wanted - found)
