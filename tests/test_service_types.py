"""
Tests for the service-type catalog.
"""

import pytest

from app.models import ServiceType
from app.services.errors import InvalidArgument, NotFound
from app.services.service_types import (
    add_service_type,
    ensure_default_service_types,
    list_service_types,
    remove_service_type,
)


class TestServiceTypes:
    """Tests for adding, removing and seeding service types."""

    def test_seed_defaults_once(self, db):
        assert ensure_default_service_types(db) == len(ServiceType.DEFAULTS)
        assert ensure_default_service_types(db) == 0
        assert len(list_service_types(db)) == len(ServiceType.DEFAULTS)

    def test_add_returns_sorted_list(self, db):
        add_service_type(db, 'Mezzanine')
        result = add_service_type(db, '  Gutters  ')

        assert [s.name for s in result] == ['Gutters', 'Mezzanine']

    def test_add_rejects_blank(self, db):
        with pytest.raises(InvalidArgument):
            add_service_type(db, '   ')

    def test_add_rejects_case_insensitive_duplicate(self, db):
        add_service_type(db, 'Metal Roofing')

        with pytest.raises(InvalidArgument):
            add_service_type(db, 'metal roofing')

    def test_remove(self, db):
        result = add_service_type(db, 'Installation')

        assert remove_service_type(db, result[0].id) == []

    def test_remove_unknown(self, db):
        with pytest.raises(NotFound):
            remove_service_type(db, 9999)

    def test_remove_keeps_proposal_names(self, db, make_proposal):
        entry = add_service_type(db, 'Side Cladding')[0]
        proposal = make_proposal(service_types=['Side Cladding'])

        remove_service_type(db, entry.id)

        db.refresh(proposal)
        assert proposal.service_types == ['Side Cladding']
