"""
Tests for SQLAlchemy models

Tests model creation, constraints and history retention.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from src.buyerleads.db.models import Buyer, BuyerHistory, User
from src.buyerleads.models.enums import (
    BuyerField, City, HistoryAction, PropertyType, Purpose, Source, Status,
    Timeline, UserRole,
)


def make_buyer(owner, **overrides):
    fields = dict(
        full_name="Amit Singh",
        phone="9876543212",
        city=City.ZIRAKPUR,
        property_type=PropertyType.PLOT,
        purpose=Purpose.BUY,
        timeline=Timeline.MORE_THAN_SIX_MONTHS,
        source=Source.WALK_IN,
        owner_id=owner.id,
    )
    fields.update(overrides)
    return Buyer(**fields)


class TestUser:
    """Tests for User model."""

    def test_create_user(self, test_db):
        user = User(email="agent@example.com", full_name="Agent")
        test_db.add(user)
        test_db.commit()

        assert user.id
        assert user.role == UserRole.USER
        assert not user.is_admin

    def test_email_unique(self, test_db, owner):
        test_db.add(User(email=owner.email, full_name="Duplicate"))

        with pytest.raises(IntegrityError):
            test_db.commit()


class TestBuyer:
    """Tests for Buyer model."""

    def test_defaults(self, test_db, owner):
        """Test id, status, tags and timestamp defaults"""
        buyer = make_buyer(owner)
        test_db.add(buyer)
        test_db.commit()

        assert len(buyer.id) == 36
        assert buyer.status == Status.NEW
        assert buyer.tags == []
        assert buyer.created_at is not None
        assert buyer.updated_at is not None

    def test_enum_codes_round_trip(self, test_db, owner):
        """Test that enum columns load back as members"""
        buyer = make_buyer(owner, source=Source.WALK_IN)
        test_db.add(buyer)
        test_db.commit()
        test_db.expire_all()

        loaded = test_db.get(Buyer, buyer.id)
        assert loaded.source is Source.WALK_IN
        assert loaded.city is City.ZIRAKPUR

    def test_budget_range_constraint(self, test_db, owner):
        """Test that the store rejects budget_max below budget_min"""
        test_db.add(make_buyer(owner, budget_min=3000000, budget_max=2000000))

        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_positive_budget_constraint(self, test_db, owner):
        test_db.add(make_buyer(owner, budget_min=0))

        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_snapshot(self, test_db, owner):
        """Test that snapshot lists every editable field"""
        buyer = make_buyer(owner, tags=["corner"])
        test_db.add(buyer)
        test_db.commit()

        snapshot = buyer.snapshot()
        assert set(snapshot) == {field.value for field in BuyerField}
        assert snapshot["tags"] == ["corner"]
        assert "owner_id" not in snapshot


class TestBuyerHistory:
    """Tests for BuyerHistory model."""

    def test_history_outlives_buyer(self, test_db, owner):
        """Test that deleting a buyer keeps its history entries"""
        buyer = make_buyer(owner)
        test_db.add(buyer)
        test_db.flush()
        test_db.add(BuyerHistory(
            buyer_id=buyer.id,
            changed_by=owner.id,
            action=HistoryAction.CREATED,
            diff={"full_name": "Amit Singh"},
        ))
        test_db.commit()

        test_db.delete(buyer)
        test_db.commit()

        entries = test_db.query(BuyerHistory).filter_by(buyer_id=buyer.id).all()
        assert len(entries) == 1
        assert entries[0].user.email == owner.email
