from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.errors import NotFound
from app.services.payments import PaymentKind, delete_payment

router = APIRouter(prefix="/api", tags=["payments"])


# ---------------------------------------------------------------------------
# Delete ledger entries (recomputes the owning proposal's paid total)
# ---------------------------------------------------------------------------
@router.delete("/payments/{entry_id}", status_code=204)
def delete_client_payment(entry_id: int, db: Session = Depends(get_db)):
    if not delete_payment(db, entry_id, PaymentKind.CLIENT):
        raise NotFound(f"Payment {entry_id} not found")
    return Response(status_code=204)


@router.delete("/commissions/{entry_id}", status_code=204)
def delete_commission_payment(entry_id: int, db: Session = Depends(get_db)):
    if not delete_payment(db, entry_id, PaymentKind.COMMISSION):
        raise NotFound(f"Commission payment {entry_id} not found")
    return Response(status_code=204)
