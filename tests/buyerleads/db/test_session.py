"""
Tests for database session helpers
"""
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from src.buyerleads.db.session import create_all_tables, drop_all_tables, health_check


@pytest.fixture
def scratch_engine():
    engine = create_engine("sqlite:///:memory:")
    yield engine
    engine.dispose()


class TestHealthCheck:
    """Tests for health_check."""

    def test_connected_session(self, test_db):
        assert health_check(test_db) is True

    def test_failing_session(self):
        """Test that a store error reports unhealthy and rolls back"""
        session = MagicMock(spec=Session)
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("database is down"))

        assert health_check(session) is False
        session.rollback.assert_called_once()


class TestTableHelpers:
    """Tests for create_all_tables and drop_all_tables."""

    def test_create_and_drop(self, scratch_engine):
        tables = create_all_tables(scratch_engine)

        assert tables == ["buyer_history", "buyers", "users"]

        drop_all_tables(scratch_engine)

        assert inspect(scratch_engine).get_table_names() == []

    def test_create_is_repeatable(self, scratch_engine):
        create_all_tables(scratch_engine)

        assert create_all_tables(scratch_engine) == ["buyer_history", "buyers", "users"]
