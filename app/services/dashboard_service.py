from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.models import Proposal
from app.services.ledger import compute_derived, quantize_money, to_decimal

UNSPECIFIED = 'Unspecified'
HUNDRED = Decimal('100')


def _percent(part, whole) -> Decimal:
    if not whole:
        return Decimal('0.00')
    return quantize_money(Decimal(part) / Decimal(whole) * HUNDRED)


def get_kpi_summary(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    issued_count: Optional[int] = None,
) -> dict:
    query = db.query(Proposal)
    if start_date:
        query = query.filter(Proposal.proposal_date.isnot(None), Proposal.proposal_date >= start_date)
    if end_date:
        query = query.filter(Proposal.proposal_date.isnot(None), Proposal.proposal_date <= end_date)
    proposals = query.order_by(Proposal.id).all()

    total_proposals = len(proposals)
    total_value = sum((to_decimal(p.total_value) for p in proposals), Decimal('0'))
    total_paid = sum((to_decimal(p.amount_paid) for p in proposals), Decimal('0'))

    total_commission = Decimal('0')
    commission_paid = Decimal('0')
    for p in proposals:
        total_commission += compute_derived(p)['total_commission']
        commission_paid += to_decimal(p.commission_paid)

    unique_clients = len({p.client_name.strip().lower() for p in proposals if p.client_name})

    negotiation = [p.negotiation_days for p in proposals if p.negotiation_days is not None]
    avg_negotiation_days = (
        quantize_money(Decimal(sum(negotiation)) / len(negotiation)) if negotiation else Decimal('0.00')
    )

    repeat_count = sum(1 for p in proposals if p.repeat_client)

    # Share of revenue coming from the ten largest proposals
    top_10 = sorted(proposals, key=lambda p: to_decimal(p.total_value), reverse=True)[:10]
    top_10_value = sum((to_decimal(p.total_value) for p in top_10), Decimal('0'))

    revenue_by_client_type = {}
    for p in proposals:
        key = p.client_type or UNSPECIFIED
        revenue_by_client_type[key] = revenue_by_client_type.get(key, Decimal('0')) + to_decimal(p.total_value)

    project_counts = Counter(p.project_type or UNSPECIFIED for p in proposals)
    service_counts = Counter(name for p in proposals for name in (p.service_types or []))

    summary = {
        'total_proposals': total_proposals,
        'total_value': quantize_money(total_value),
        'average_ticket': quantize_money(total_value / total_proposals) if total_proposals else Decimal('0.00'),
        'total_paid': quantize_money(total_paid),
        'total_open': quantize_money(total_value - total_paid),
        'unique_clients': unique_clients,
        'average_negotiation_days': avg_negotiation_days,
        'repeat_clients': repeat_count,
        'repeat_client_percent': _percent(repeat_count, total_proposals),
        'top_10_share_percent': _percent(top_10_value, total_value),
        'revenue_by_client_type': [
            {
                'client_type': client_type,
                'value': quantize_money(value),
                'percent': _percent(value, total_value),
            }
            for client_type, value in sorted(revenue_by_client_type.items(), key=lambda kv: kv[1], reverse=True)
        ],
        'project_types': [
            {
                'project_type': project_type,
                'count': count,
                'percent': _percent(count, total_proposals),
            }
            for project_type, count in project_counts.most_common()
        ],
        'service_types': [
            {'name': name, 'count': count}
            for name, count in service_counts.most_common()
        ],
        'total_commission': quantize_money(total_commission),
        'commission_paid': quantize_money(commission_paid),
        'open_commission': quantize_money(total_commission - commission_paid),
        'percent_commission_paid': _percent(commission_paid, total_commission),
        'conversion': None,
    }

    # Closed proposals against how many were issued in the period
    if issued_count and issued_count > 0:
        summary['conversion'] = {
            'issued': issued_count,
            'closed': total_proposals,
            'rate_percent': _percent(total_proposals, issued_count),
        }

    return summary
