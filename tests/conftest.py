"""
Shared pytest fixtures.

The application engine is created at import time, so the database URL is
pointed at SQLite before anything from ``src`` is imported.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.buyerleads.db.base import Base
from src.buyerleads.db.models import User
from src.buyerleads.models.enums import UserRole


@pytest.fixture(scope="function")
def test_engine():
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return sessionmaker(bind=test_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def test_db(session_factory):
    """Create an in-memory SQLite database session for testing."""
    session = session_factory()

    yield session

    session.close()


def _add_user(session, user_id, email, full_name, role):
    user = User(id=user_id, email=email, full_name=full_name, role=role)
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def owner(test_db):
    return _add_user(test_db, "user-owner", "owner@example.com", "Owner User", UserRole.USER)


@pytest.fixture
def other_user(test_db):
    return _add_user(test_db, "user-other", "other@example.com", "Other User", UserRole.USER)


@pytest.fixture
def admin_user(test_db):
    return _add_user(test_db, "user-admin", "admin@example.com", "Admin User", UserRole.ADMIN)


@pytest.fixture
def buyer_payload():
    """Valid create payload for an apartment buyer."""
    return {
        "full_name": "Rajesh Kumar",
        "email": "rajesh.kumar@email.com",
        "phone": "9876543210",
        "city": "CHANDIGARH",
        "property_type": "APARTMENT",
        "bhk": "TWO",
        "purpose": "BUY",
        "budget_min": 5000000,
        "budget_max": 7000000,
        "timeline": "ZERO_TO_THREE_MONTHS",
        "source": "WEBSITE",
        "notes": "Looking for a 2BHK apartment in Sector 22",
        "tags": ["premium", "urgent"],
    }
