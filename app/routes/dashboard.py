from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.routes.encoding import money_json
from app.services.dashboard_service import get_kpi_summary
from app.services.errors import InvalidArgument

router = APIRouter(tags=["dashboard"])


@router.get("/api/kpis")
def kpis(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    issued: Optional[int] = Query(None, ge=0, description="Proposals issued in the period, for conversion rate"),
    db: Session = Depends(get_db),
):
    """Business indicators over proposals dated within the optional range."""
    if start_date and end_date and start_date > end_date:
        raise InvalidArgument("start_date must be on or before end_date")
    return money_json(get_kpi_summary(db, start_date=start_date, end_date=end_date, issued_count=issued))


@router.get("/health")
def health():
    return {"status": "ok"}
