"""
Tests for KPI summary calculations.
"""

from datetime import date
from decimal import Decimal

from app.services.dashboard_service import UNSPECIFIED, get_kpi_summary
from app.services.payments import PaymentKind, add_payment


class TestKpiSummary:
    """Tests for the business indicators."""

    def _seed(self, make_proposal, db):
        a = make_proposal(
            name='A', client_name='Orlando', client_type='Industrial', project_type='PE',
            total_value='30000', commission_percent='10', proposal_date=date(2024, 1, 10),
            negotiation_days=10, repeat_client=True, service_types=['Steel Structure', 'Installation'],
        )
        b = make_proposal(
            name='B', client_name='orlando ', client_type='Commercial', project_type='PE',
            total_value='10000', commission_percent='10', proposal_date=date(2024, 2, 10),
            negotiation_days=20, service_types=['Steel Structure'],
        )
        make_proposal(
            name='C', client_name='Vale', client_type=None, project_type=None,
            total_value='0', commission_percent='0', proposal_date=date(2024, 6, 1),
        )
        add_payment(db, a.id, PaymentKind.CLIENT, '15000', date(2024, 2, 1))
        add_payment(db, a.id, PaymentKind.COMMISSION, '1500', date(2024, 2, 2))
        add_payment(db, b.id, PaymentKind.CLIENT, '10000', date(2024, 3, 1))

    def test_empty(self, db):
        summary = get_kpi_summary(db)

        assert summary['total_proposals'] == 0
        assert summary['average_ticket'] == Decimal('0')
        assert summary['percent_commission_paid'] == Decimal('0')
        assert summary['conversion'] is None

    def test_totals(self, db, make_proposal):
        self._seed(make_proposal, db)

        summary = get_kpi_summary(db)

        assert summary['total_proposals'] == 3
        assert summary['total_value'] == Decimal('40000')
        assert summary['average_ticket'] == Decimal('13333.33')
        assert summary['total_paid'] == Decimal('25000')
        assert summary['total_open'] == Decimal('15000')
        assert summary['unique_clients'] == 2
        assert summary['average_negotiation_days'] == Decimal('15')
        assert summary['repeat_clients'] == 1
        assert summary['top_10_share_percent'] == Decimal('100')

    def test_commission_figures(self, db, make_proposal):
        self._seed(make_proposal, db)

        summary = get_kpi_summary(db)

        assert summary['total_commission'] == Decimal('4000')
        assert summary['commission_paid'] == Decimal('1500')
        assert summary['open_commission'] == Decimal('2500')
        assert summary['percent_commission_paid'] == Decimal('37.5')

    def test_breakdowns(self, db, make_proposal):
        self._seed(make_proposal, db)

        summary = get_kpi_summary(db)

        revenue = {row['client_type']: row for row in summary['revenue_by_client_type']}
        assert revenue['Industrial']['percent'] == Decimal('75')
        assert revenue[UNSPECIFIED]['value'] == Decimal('0')
        assert summary['project_types'][0] == {
            'project_type': 'PE', 'count': 2, 'percent': Decimal('66.67'),
        }
        assert summary['service_types'][0] == {'name': 'Steel Structure', 'count': 2}

    def test_date_range(self, db, make_proposal):
        self._seed(make_proposal, db)

        summary = get_kpi_summary(db, start_date=date(2024, 2, 1), end_date=date(2024, 3, 31))

        assert summary['total_proposals'] == 1
        assert summary['total_value'] == Decimal('10000')

    def test_conversion(self, db, make_proposal):
        self._seed(make_proposal, db)

        summary = get_kpi_summary(db, issued_count=12)

        assert summary['conversion'] == {'issued': 12, 'closed': 3, 'rate_percent': Decimal('25')}
