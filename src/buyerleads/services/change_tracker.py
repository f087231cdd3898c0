"""
Buyer Change Tracker

Computes field-level diffs between a stored buyer and an accepted update,
and appends history entries inside the caller's transaction.
"""
import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from src.buyerleads.db.models import BuyerHistory
from src.buyerleads.db.repository import BuyerHistoryRepository
from src.buyerleads.models.enums import BuyerField, HistoryAction
from src.buyerleads.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FieldChange:
    """Old and new JSON-form value of one changed field."""
    from_value: Any
    to_value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.from_value, "to": self.to_value}


FieldDiff = Dict[BuyerField, FieldChange]


def serialize_value(value: Any) -> Any:
    """
    Convert a field value to its JSON form.

    Enums become their codes, datetimes ISO-8601 strings, sequences lists.
    """
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [serialize_value(item) for item in value]
    return value


def serialize_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """JSON form of a field mapping, keyed by field name."""
    return {name: serialize_value(value) for name, value in fields.items()}


class ChangeTracker:
    """
    Produces and persists buyer history entries.
    """

    def __init__(self, history_repository: Optional[BuyerHistoryRepository] = None):
        self.history = history_repository or BuyerHistoryRepository()

    def diff(self, before: Mapping[str, Any], changes: Mapping[str, Any]) -> FieldDiff:
        """
        Compare supplied fields against their stored values.

        Only fields present in ``changes`` are compared; a field is reported
        when its serialized old and new values differ.

        Args:
            before: Stored field values
            changes: Validated fields from the update payload

        Returns:
            Mapping of changed field to FieldChange, empty when nothing changed

        Raises:
            ValueError: If ``changes`` names a field that is not editable
        """
        diff: FieldDiff = {}
        for name, new_value in changes.items():
            field = BuyerField(name)
            old = serialize_value(before.get(name))
            new = serialize_value(new_value)
            if json.dumps(old, sort_keys=True) != json.dumps(new, sort_keys=True):
                diff[field] = FieldChange(from_value=old, to_value=new)
        return diff

    @staticmethod
    def to_payload(diff: FieldDiff) -> Dict[str, Dict[str, Any]]:
        """Render a diff as the stored JSON mapping."""
        return {field.value: change.to_dict() for field, change in diff.items()}

    def record_update(
        self,
        session: Session,
        buyer_id: str,
        changed_by: str,
        diff: FieldDiff,
    ) -> Optional[BuyerHistory]:
        """
        Append an "updated" entry, unless the diff is empty.

        Args:
            session: Database session (caller owns the transaction)
            buyer_id: Updated buyer
            changed_by: Acting user id
            diff: Result of ``diff``

        Returns:
            The new entry, or None when nothing changed
        """
        if not diff:
            logger.debug("buyer_update_no_changes", buyer_id=buyer_id)
            return None

        entry = self.history.append(
            session,
            buyer_id=buyer_id,
            changed_by=changed_by,
            action=HistoryAction.UPDATED,
            diff=self.to_payload(diff),
        )
        logger.info(
            "buyer_changes_recorded",
            buyer_id=buyer_id,
            fields=[field.value for field in diff],
        )
        return entry

    def record_creation(
        self,
        session: Session,
        buyer_id: str,
        changed_by: str,
        fields: Mapping[str, Any],
        action: HistoryAction = HistoryAction.CREATED,
    ) -> BuyerHistory:
        """
        Append a "created" or "imported" entry holding the full field set.

        Args:
            session: Database session (caller owns the transaction)
            buyer_id: New buyer
            changed_by: Acting user id
            fields: Accepted field values
            action: HistoryAction.CREATED or HistoryAction.IMPORTED

        Returns:
            The new entry
        """
        if action == HistoryAction.UPDATED:
            raise ValueError("record_creation only handles created/imported entries")

        return self.history.append(
            session,
            buyer_id=buyer_id,
            changed_by=changed_by,
            action=action,
            diff=serialize_fields(fields),
        )
