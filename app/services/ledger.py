"""
Ledger Calculation Service

Handles:
- Summing payment ledger entries (client payments, commission payments)
- Derived proposal figures (open balance, total/open commission, % paid)

Everything here is pure: no database access and no rounding beyond cents.
This module is the single source of these formulas; routes, the KPI service
and partner summaries all call into it.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored or submitted number to Decimal, treating None/blank as 0."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their printed value instead of binary noise
    return Decimal(str(value))


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _field(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def sum_entries(entries: Iterable[Any]) -> Decimal:
    """
    Sum the amounts of a proposal's payment ledger.

    Args:
        entries: ClientPayment/CommissionPayment rows, or dicts with an 'amount' key

    Returns:
        Exact sum of amounts (Decimal, cents precision); 0.00 for an empty ledger
    """
    total = sum((to_decimal(_field(entry, "amount")) for entry in entries), ZERO)
    return quantize_money(total)


def compute_derived(proposal: Any) -> dict:
    """
    Calculate the presentation figures of a proposal.

    Args:
        proposal: Proposal model or mapping with total_value, commission_percent,
            amount_paid and commission_paid

    Returns:
        Dictionary with:
        - open_balance (total_value - amount_paid; negative when overpaid)
        - total_commission (total_value * commission_percent / 100)
        - open_commission (total_commission - commission_paid)
        - percent_commission_paid (0 when there is no commission to pay)
    """
    total_value = to_decimal(_field(proposal, "total_value"))
    commission_percent = to_decimal(_field(proposal, "commission_percent"))
    amount_paid = to_decimal(_field(proposal, "amount_paid"))
    commission_paid = to_decimal(_field(proposal, "commission_paid"))

    open_balance = total_value - amount_paid
    total_commission = total_value * commission_percent / HUNDRED
    open_commission = total_commission - commission_paid

    if total_commission > ZERO:
        percent_commission_paid = commission_paid / total_commission * HUNDRED
    else:
        percent_commission_paid = ZERO

    return {
        "open_balance": quantize_money(open_balance),
        "total_commission": quantize_money(total_commission),
        "open_commission": quantize_money(open_commission),
        "percent_commission_paid": quantize_money(percent_commission_paid),
    }
