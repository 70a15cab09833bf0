"""
Tests for proposal CRUD and proposal validation.
"""

from datetime import date
from decimal import Decimal

import pytest

from app.models import Partner
from app.services import payments
from app.services.errors import InvalidArgument, NotFound, UnconfirmedWarnings
from app.services.payments import PaymentKind, add_payment
from app.services.proposals import (
    create_proposal,
    delete_proposal,
    get_proposal,
    list_proposals,
    update_proposal,
)
from app.services.validators import validate_proposal


class TestValidateProposal:
    """Tests for proposal validation rules."""

    def test_valid(self):
        result = validate_proposal({'name': 'Warehouse', 'total_value': '1,250.50', 'commission_percent': 10})
        assert result.is_valid

    def test_name_required(self):
        result = validate_proposal({'name': '  ', 'total_value': 100})
        assert 'Proposal name is required' in result.errors

    def test_negative_total(self):
        result = validate_proposal({'name': 'X', 'total_value': -1})
        assert 'Total value cannot be negative' in result.errors

    @pytest.mark.parametrize('percent', [-1, 100.01, 'ten'])
    def test_commission_percent_range(self, percent):
        result = validate_proposal({'name': 'X', 'total_value': 100, 'commission_percent': percent})
        assert not result.is_valid

    @pytest.mark.parametrize('field', ['amount_paid', 'commission_paid'])
    def test_ledger_fields_rejected(self, field):
        """Paid totals can only come from the ledger."""
        result = validate_proposal({'name': 'X', 'total_value': 100, field: 0})
        assert not result.is_valid
        assert field in result.errors[0]

    def test_partial_only_checks_supplied_keys(self):
        assert validate_proposal({'notes': 'call back'}, partial=True).is_valid
        assert not validate_proposal({'total_value': 'n/a'}, partial=True).is_valid

    def test_negotiation_days_must_be_whole(self):
        assert not validate_proposal({'name': 'X', 'total_value': 1, 'negotiation_days': -3}).is_valid
        assert not validate_proposal({'name': 'X', 'total_value': 1, 'negotiation_days': 2.5}).is_valid

    def test_unknown_client_type_warns(self):
        result = validate_proposal({'name': 'X', 'total_value': 1, 'client_type': 'Martian'})
        assert result.is_valid
        assert result.warnings


class TestCreateProposal:
    """Tests for creating proposals."""

    def test_starts_with_empty_ledgers(self, proposal):
        assert proposal.id is not None
        assert proposal.amount_paid == Decimal('0')
        assert proposal.commission_paid == Decimal('0')
        assert proposal.client_payments == []
        assert proposal.commission_payments == []

    def test_rejects_ledger_fields(self, db):
        with pytest.raises(InvalidArgument) as exc:
            create_proposal(db, {'name': 'X', 'total_value': 100, 'amount_paid': 50})
        assert exc.value.errors
        assert list_proposals(db) == []

    def test_material_total_from_weight_and_price(self, make_proposal):
        proposal = make_proposal(structure_weight='1200', price_per_kg='12.5')
        assert proposal.material_total == Decimal('15000')

    def test_text_and_service_types_cleaned(self, make_proposal):
        proposal = make_proposal(
            client_name='  Orlando  ',
            notes='   ',
            service_types=['Steel Structure', 'Metal Roofing', 'Steel Structure', ''],
        )
        assert proposal.client_name == 'Orlando'
        assert proposal.notes is None
        assert proposal.service_types == ['Steel Structure', 'Metal Roofing']

    def test_missing_commission_percent_is_zero(self, db):
        proposal = create_proposal(db, {'name': 'No commission', 'total_value': 500})
        assert proposal.commission_percent == Decimal('0')
        assert proposal.derived['percent_commission_paid'] == Decimal('0')


class TestUpdateProposal:
    """Tests for editing proposals."""

    def test_update_fields(self, db, proposal):
        updated = update_proposal(db, proposal.id, {'total_value': '30000', 'notes': 'Revised'})
        assert updated.total_value == Decimal('30000')
        assert updated.notes == 'Revised'
        assert updated.name == '264.24 – Orlando'

    def test_update_keeps_paid_totals(self, db, proposal):
        add_payment(db, proposal.id, PaymentKind.CLIENT, '1000', date(2024, 3, 10))

        updated = update_proposal(db, proposal.id, {'total_value': '2000'})

        assert updated.amount_paid == Decimal('1000')
        assert updated.derived['open_balance'] == Decimal('1000')

    def test_update_rejects_ledger_field(self, db, proposal):
        with pytest.raises(InvalidArgument):
            update_proposal(db, proposal.id, {'commission_paid': 10})

    def test_update_unknown(self, db):
        with pytest.raises(NotFound):
            update_proposal(db, 9999, {'notes': 'x'})


class TestListAndDelete:
    """Tests for listing and deleting proposals."""

    def test_search(self, make_proposal, db):
        make_proposal(name='254.24 – Vale', client_name='Vale Logistics')
        make_proposal(name='259.24 – Paula', client_name='Paula')

        names = [p.name for p in list_proposals(db, search='vale')]
        assert names == ['254.24 – Vale']

    def test_filter_by_ids(self, make_proposal, db):
        a = make_proposal(name='A')
        make_proposal(name='B')

        assert [p.id for p in list_proposals(db, proposal_ids=[a.id])] == [a.id]
        assert list_proposals(db, proposal_ids=[]) == []

    def test_get_unknown(self, db):
        with pytest.raises(NotFound):
            get_proposal(db, 9999)

    def test_delete_unknown(self, db):
        assert delete_proposal(db, 9999) is False

    def test_delete_unassigns_partners(self, db, make_proposal):
        keep = make_proposal(name='Keep')
        drop = make_proposal(name='Drop')
        partner = Partner(
            name='Partner', username='p1', email='p1@example.com',
            password_hash='x', proposal_ids=[keep.id, drop.id],
        )
        db.add(partner)
        db.commit()

        delete_proposal(db, drop.id)

        db.refresh(partner)
        assert partner.proposal_ids == [keep.id]


class TestMoneyPrecision:
    """Money and percent inputs are stored exactly or rejected, never truncated."""

    @pytest.mark.parametrize('field,value', [
        ('total_value', '100.005'),
        ('commission_percent', '10.125'),
        ('structure_weight', '12.001'),
        ('price_per_kg', '3.141'),
        ('material_total', '0.001'),
    ])
    def test_sub_cent_rejected(self, db, field, value):
        data = {'name': 'X', 'total_value': '100', field: value}

        with pytest.raises(InvalidArgument) as exc:
            create_proposal(db, data)

        assert 'more than 2 decimal places' in str(exc.value)
        assert list_proposals(db) == []

    def test_sub_cent_rejected_on_update(self, db, proposal):
        with pytest.raises(InvalidArgument):
            update_proposal(db, proposal.id, {'total_value': '24500.499'})

        db.refresh(proposal)
        assert proposal.total_value == Decimal('24500')

    def test_trailing_zeros_accepted(self, db):
        proposal = create_proposal(db, {'name': 'X', 'total_value': '100.500', 'commission_percent': '10.10'})

        assert proposal.total_value == Decimal('100.50')
        assert proposal.commission_percent == Decimal('10.10')

    def test_absurdly_precise_value_rejected(self):
        result = validate_proposal({'name': 'X', 'total_value': '1e40'})
        assert not result.is_valid


class TestCatalogWarnings:
    """Unknown catalog values must be confirmed before they are saved."""

    def test_create_requires_confirmation(self, db):
        data = {'name': 'X', 'total_value': '100', 'client_type': 'Alien', 'project_type': 'Mystery'}

        with pytest.raises(UnconfirmedWarnings) as exc:
            create_proposal(db, data)

        assert exc.value.warnings == [
            "Unknown client type 'Alien'",
            "Unknown project type 'Mystery'",
        ]
        assert list_proposals(db) == []

        proposal = create_proposal(db, data, confirm_warnings=True)
        assert proposal.client_type == 'Alien'

    def test_update_requires_confirmation(self, db, proposal):
        with pytest.raises(UnconfirmedWarnings):
            update_proposal(db, proposal.id, {'contract_type': 'Barter'})

        db.refresh(proposal)
        assert proposal.contract_type is None

        updated = update_proposal(db, proposal.id, {'contract_type': 'Barter'}, confirm_warnings=True)
        assert updated.contract_type == 'Barter'

    def test_known_values_need_no_confirmation(self, make_proposal):
        proposal = make_proposal(client_type='Industrial', project_type='PE + PC', contract_type='Supply Only')
        assert proposal.contract_type == 'Supply Only'

    def test_unknown_contract_type_warns(self):
        result = validate_proposal({'name': 'X', 'total_value': 1, 'contract_type': 'Barter'})
        assert result.is_valid
        assert result.warnings == ["Unknown contract type 'Barter'"]

    def test_errors_take_precedence_over_warnings(self, db):
        with pytest.raises(InvalidArgument):
            create_proposal(db, {'name': '', 'total_value': '100', 'client_type': 'Alien'})


class TestProposalLocks:
    """Per-proposal locks are dropped with their proposal."""

    def test_delete_releases_lock(self, db, proposal):
        add_payment(db, proposal.id, PaymentKind.CLIENT, '10', date(2024, 3, 10))
        assert proposal.id in payments._locks

        proposal_id = proposal.id
        delete_proposal(db, proposal_id)

        assert proposal_id not in payments._locks

    def test_deleted_ids_not_reused(self, db, make_proposal):
        first = make_proposal(name='First')
        first_id = first.id
        delete_proposal(db, first_id)

        assert make_proposal(name='Second').id != first_id
