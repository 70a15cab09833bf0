from app.services.errors import (
    LedgerError,
    NotFound,
    InvalidArgument,
    UnconfirmedWarnings,
    ConsistencyViolation,
)
from app.services.ledger import (
    sum_entries,
    compute_derived,
)
from app.services.payments import (
    PaymentKind,
    add_payment,
    delete_payment,
    list_payments,
    get_ledger,
    verify_ledger,
    reconcile_proposal,
)

__all__ = [
    'LedgerError',
    'NotFound',
    'InvalidArgument',
    'UnconfirmedWarnings',
    'ConsistencyViolation',
    'sum_entries',
    'compute_derived',
    'PaymentKind',
    'add_payment',
    'delete_payment',
    'list_payments',
    'get_ledger',
    'verify_ledger',
    'reconcile_proposal',
]
