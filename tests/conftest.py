import os

# Never let the suite touch a configured deployment database
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db, get_engine, init_db
from app.main import app
from app.services.proposals import create_proposal


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads (TestClient runs handlers in a pool)."""
    engine = get_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_proposal(db):
    """Factory for proposals with sensible defaults."""
    def _make(**overrides):
        data = {
            "name": "264.24 – Orlando",
            "client_name": "Orlando",
            "total_value": Decimal("24500"),
            "commission_percent": Decimal("10"),
            "proposal_date": date(2024, 3, 4),
        }
        data.update(overrides)
        return create_proposal(db, data)
    return _make


@pytest.fixture
def proposal(make_proposal):
    return make_proposal()
