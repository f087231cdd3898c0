"""
Tests for the buyer change tracker
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from src.buyerleads.db.models import BuyerHistory
from src.buyerleads.models.enums import BuyerField, HistoryAction, Status
from src.buyerleads.services.change_tracker import (
    ChangeTracker, FieldChange, serialize_value,
)


@pytest.fixture
def stored():
    return {
        "full_name": "Neha Gupta",
        "status": Status.VISITED,
        "budget_min": 15000,
        "budget_max": 25000,
        "notes": None,
        "tags": ["professional", "furnished"],
    }


class TestSerializeValue:
    """Tests for serialize_value."""

    def test_enum_to_code(self):
        assert serialize_value(Status.NEW) == "NEW"

    def test_datetime_to_iso(self):
        value = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        assert serialize_value(value) == "2026-03-01T09:00:00+00:00"

    def test_sequence_to_list(self):
        assert serialize_value(("a", Status.NEW)) == ["a", "NEW"]


class TestDiff:
    """Tests for ChangeTracker.diff."""

    def test_unchanged_values_not_reported(self, stored):
        """Test that equal values produce an empty diff"""
        diff = ChangeTracker().diff(stored, {"full_name": "Neha Gupta", "status": "VISITED"})

        assert diff == {}

    def test_changed_values_reported(self, stored):
        """Test that changes carry their old and new JSON values"""
        diff = ChangeTracker().diff(stored, {"status": Status.NEGOTIATION, "budget_max": 30000})

        assert diff == {
            BuyerField.STATUS: FieldChange("VISITED", "NEGOTIATION"),
            BuyerField.BUDGET_MAX: FieldChange(25000, 30000),
        }

    def test_cleared_value_reported(self, stored):
        """Test that clearing an optional field is a change"""
        diff = ChangeTracker().diff(stored, {"budget_min": None})

        assert diff[BuyerField.BUDGET_MIN] == FieldChange(15000, None)

    def test_tag_order_is_a_change(self, stored):
        """Test that reordering tags is reported"""
        diff = ChangeTracker().diff(stored, {"tags": ["furnished", "professional"]})

        assert BuyerField.TAGS in diff

    def test_only_supplied_fields_compared(self, stored):
        """Test that fields absent from the update are ignored"""
        diff = ChangeTracker().diff(stored, {"notes": "Call after 6"})

        assert list(diff) == [BuyerField.NOTES]

    def test_unknown_field(self, stored):
        """Test that non-editable fields are rejected"""
        with pytest.raises(ValueError):
            ChangeTracker().diff(stored, {"owner_id": "someone"})

    def test_to_payload(self, stored):
        """Test the stored JSON form of a diff"""
        tracker = ChangeTracker()
        diff = tracker.diff(stored, {"status": "DROPPED"})

        assert tracker.to_payload(diff) == {"status": {"from": "VISITED", "to": "DROPPED"}}


class TestRecording:
    """Tests for history persistence."""

    def test_record_update_appends_entry(self, test_db, owner, stored):
        """Test that a non-empty diff is stored as an updated entry"""
        tracker = ChangeTracker()
        diff = tracker.diff(stored, {"status": "CONVERTED"})

        entry = tracker.record_update(test_db, buyer_id="buyer-1", changed_by=owner.id, diff=diff)
        test_db.commit()

        assert entry.action == HistoryAction.UPDATED
        assert entry.diff == {"status": {"from": "VISITED", "to": "CONVERTED"}}
        assert entry.changed_at is not None

    def test_record_update_skips_empty_diff(self, test_db, owner):
        """Test that no entry is written when nothing changed"""
        entry = ChangeTracker().record_update(test_db, buyer_id="buyer-1", changed_by=owner.id, diff={})
        test_db.commit()

        assert entry is None
        assert test_db.scalar(select(func.count()).select_from(BuyerHistory)) == 0

    def test_record_creation_stores_fields(self, test_db, owner, stored):
        """Test that creation entries hold the JSON form of every field"""
        entry = ChangeTracker().record_creation(
            test_db, buyer_id="buyer-1", changed_by=owner.id, fields=stored
        )
        test_db.commit()

        assert entry.action == HistoryAction.CREATED
        assert entry.diff["status"] == "VISITED"
        assert entry.diff["tags"] == ["professional", "furnished"]

    def test_record_creation_rejects_update_action(self, test_db, owner, stored):
        """Test that creation entries cannot be labelled as updates"""
        with pytest.raises(ValueError):
            ChangeTracker().record_creation(
                test_db, buyer_id="buyer-1", changed_by=owner.id,
                fields=stored, action=HistoryAction.UPDATED,
            )
