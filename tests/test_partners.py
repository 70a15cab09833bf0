"""
Tests for partner accounts and their commission summary.
"""

from datetime import date
from decimal import Decimal

import pytest

from app.auth import verify_password
from app.services.errors import InvalidArgument, NotFound
from app.services.partners import (
    create_partner,
    delete_partner,
    get_partner,
    get_partner_by_username,
    partner_commission_summary,
    partner_proposals,
    update_partner,
)
from app.services.payments import PaymentKind, add_payment


def partner_data(**overrides):
    data = {
        'name': 'North Partner',
        'username': 'partner1',
        'email': 'partner1@example.com',
        'password': 'secret123',
        'proposal_ids': [],
    }
    data.update(overrides)
    return data


class TestCreatePartner:
    """Tests for partner creation and validation."""

    def test_password_is_hashed(self, db):
        partner = create_partner(db, partner_data())

        assert partner.password_hash != 'secret123'
        assert verify_password('secret123', partner.password_hash)
        assert not verify_password('wrong', partner.password_hash)

    def test_duplicate_username(self, db):
        create_partner(db, partner_data())

        with pytest.raises(InvalidArgument) as exc:
            create_partner(db, partner_data(email='other@example.com'))
        assert "already taken" in str(exc.value)

    @pytest.mark.parametrize('field,value', [
        ('name', ''),
        ('username', '  '),
        ('email', 'not-an-email'),
        ('password', '123'),
    ])
    def test_invalid_fields(self, db, field, value):
        with pytest.raises(InvalidArgument):
            create_partner(db, partner_data(**{field: value}))

    def test_unknown_proposal_ids(self, db, proposal):
        with pytest.raises(InvalidArgument) as exc:
            create_partner(db, partner_data(proposal_ids=[proposal.id, 777]))
        assert '777' in str(exc.value)

    def test_duplicate_ids_collapsed(self, db, proposal):
        partner = create_partner(db, partner_data(proposal_ids=[proposal.id, proposal.id]))
        assert partner.proposal_ids == [proposal.id]


class TestUpdateAndDelete:
    """Tests for editing and removing partners."""

    def test_partial_update(self, db):
        partner = create_partner(db, partner_data())

        updated = update_partner(db, partner.id, {'email': 'new@example.com'})

        assert updated.email == 'new@example.com'
        assert updated.username == 'partner1'

    def test_password_change(self, db):
        partner = create_partner(db, partner_data())

        update_partner(db, partner.id, {'password': 'another-secret'})

        assert verify_password('another-secret', get_partner(db, partner.id).password_hash)

    def test_keep_own_username(self, db):
        """Re-submitting the same username is not a duplicate."""
        partner = create_partner(db, partner_data())
        update_partner(db, partner.id, {'username': 'partner1'})

    def test_unknown_partner(self, db):
        with pytest.raises(NotFound):
            update_partner(db, 9999, {'name': 'x'})
        with pytest.raises(NotFound):
            get_partner_by_username(db, 'nobody')

    def test_delete(self, db):
        partner = create_partner(db, partner_data())

        assert delete_partner(db, partner.id) is True
        assert delete_partner(db, partner.id) is False


class TestPartnerCommission:
    """Tests for the partner commission summary."""

    def test_summary(self, db, make_proposal):
        a = make_proposal(name='A', total_value='24500', commission_percent='10')
        b = make_proposal(name='B', total_value='18750', commission_percent='12')
        make_proposal(name='Not assigned', total_value='99999', commission_percent='50')
        add_payment(db, a.id, PaymentKind.COMMISSION, '1225', date(2024, 3, 10))
        add_payment(db, b.id, PaymentKind.COMMISSION, '2250', date(2024, 3, 10))
        partner = create_partner(db, partner_data(proposal_ids=[a.id, b.id]))

        summary = partner_commission_summary(db, partner.id)

        assert [p.name for p in partner_proposals(db, partner.id)] == ['A', 'B']
        assert summary['proposal_count'] == 2
        assert summary['total_value'] == Decimal('43250')
        assert summary['total_commission'] == Decimal('4700')
        assert summary['commission_paid'] == Decimal('3475')
        assert summary['open_commission'] == Decimal('1225')
        # 3475 / 4700 = 73.936...
        assert summary['percent_commission_paid'] == Decimal('73.94')

    def test_no_proposals(self, db):
        partner = create_partner(db, partner_data())

        summary = partner_commission_summary(db, partner.id)

        assert summary['proposal_count'] == 0
        assert summary['percent_commission_paid'] == Decimal('0')
