"""
Buyer Record Service

Create, update, delete, list, view, import and export buyer leads on
behalf of an authenticated user. Every mutation runs in one transaction
together with its history entry.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from pydantic.alias_generators import to_snake
from sqlalchemy.orm import Session

from config.settings import settings
from src.buyerleads.db.base import as_utc, utc_now
from src.buyerleads.db.models import Buyer, BuyerHistory, User
from src.buyerleads.db.repository import (
    SORT_COLUMNS, BuyerHistoryRepository, BuyerRepository,
)
from src.buyerleads.db.session import transaction
from src.buyerleads.etl import csv_codec
from src.buyerleads.etl.importer import BuyerImporter
from src.buyerleads.exceptions import (
    ConflictError, ForbiddenError, NotFoundError, ValidationError,
)
from src.buyerleads.models.buyer import BuyerFilters, ImportResult
from src.buyerleads.services.change_tracker import ChangeTracker
from src.buyerleads.utils.logger import get_logger
from src.buyerleads.validators.record_validator import RecordValidator, ValidationIssue

logger = get_logger(__name__)

CONFLICT_MESSAGE = "Record has been modified by another user. Please refresh and try again."


@dataclass
class BuyerPage:
    """One page of a buyer listing."""
    items: List[Buyer]
    total: int
    page: int
    page_size: int
    total_pages: int


@dataclass
class BuyerDetail:
    """A buyer with its owner loaded and its most recent history."""
    buyer: Buyer
    history: List[BuyerHistory] = field(default_factory=list)


class BuyerService:
    """
    Buyer lead operations for one database session.

    Mutations check, in order: existence, ownership (owner or ADMIN),
    concurrency token, validation. The first failure aborts the operation
    before anything is written.
    """

    def __init__(
        self,
        session: Session,
        validator: Optional[RecordValidator] = None,
        tracker: Optional[ChangeTracker] = None,
    ):
        self.session = session
        self.validator = validator or RecordValidator()
        self.tracker = tracker or ChangeTracker()
        self.buyers = BuyerRepository()
        self.history = BuyerHistoryRepository()

    def create_buyer(self, payload: Mapping[str, Any], user: User) -> Buyer:
        """
        Validate and store a new buyer owned by ``user``.

        Args:
            payload: Field values keyed by snake_case field name
            user: Acting user, becomes the owner

        Returns:
            The stored Buyer

        Raises:
            ValidationError: If the payload is invalid
            PersistenceError: If the store write failed
        """
        data = self.validator.validate_create(payload).raise_for_errors()

        with transaction(self.session, "buyer_create"):
            buyer = self.buyers.create(self.session, owner_id=user.id, **data)
            self.tracker.record_creation(
                self.session,
                buyer_id=buyer.id,
                changed_by=user.id,
                fields=data,
            )

        logger.info("buyer_created", buyer_id=buyer.id, owner_id=user.id, phone=buyer.phone)
        return buyer

    def update_buyer(
        self,
        buyer_id: str,
        payload: Mapping[str, Any],
        user: User,
        last_seen_updated_at: Optional[datetime] = None,
    ) -> Buyer:
        """
        Apply a partial update to a buyer.

        Args:
            buyer_id: Buyer to update
            payload: Supplied fields only; optional fields may be None to clear
            user: Acting user
            last_seen_updated_at: ``updated_at`` the caller last read, if any

        Returns:
            The updated Buyer

        Raises:
            NotFoundError: If the buyer does not exist
            ForbiddenError: If the user is neither owner nor admin
            ConflictError: If the buyer changed after ``last_seen_updated_at``
            ValidationError: If the merged record is invalid
            PersistenceError: If the store write failed
        """
        buyer = self._get_or_raise(buyer_id)
        self._authorize(buyer, user, "update")

        if last_seen_updated_at is not None and (
            as_utc(last_seen_updated_at) < as_utc(buyer.updated_at)
        ):
            logger.info(
                "buyer_update_conflict",
                buyer_id=buyer_id,
                last_seen=last_seen_updated_at.isoformat(),
                stored=buyer.updated_at.isoformat(),
            )
            raise ConflictError(CONFLICT_MESSAGE)

        before = buyer.snapshot()
        changes = self.validator.validate_update(payload, before).raise_for_errors()
        diff = self.tracker.diff(before, changes)

        with transaction(self.session, "buyer_update"):
            self.buyers.update(self.session, buyer, updated_at=utc_now(), **changes)
            self.tracker.record_update(
                self.session,
                buyer_id=buyer.id,
                changed_by=user.id,
                diff=diff,
            )

        logger.info(
            "buyer_updated",
            buyer_id=buyer.id,
            user_id=user.id,
            changed_fields=[f.value for f in diff],
        )
        return buyer

    def delete_buyer(self, buyer_id: str, user: User) -> None:
        """
        Delete a buyer. Its history entries are kept.

        Raises:
            NotFoundError: If the buyer does not exist
            ForbiddenError: If the user is neither owner nor admin
        """
        buyer = self._get_or_raise(buyer_id)
        self._authorize(buyer, user, "delete")

        with transaction(self.session, "buyer_delete"):
            self.buyers.delete(self.session, buyer.id)

        logger.info("buyer_deleted", buyer_id=buyer_id, user_id=user.id)

    def list_buyers(self, filters: BuyerFilters) -> BuyerPage:
        """
        Get one page of buyers.

        Args:
            filters: Filters, search term, paging and sort options

        Returns:
            BuyerPage

        Raises:
            ValidationError: If ``sort_by`` is not a sortable field
        """
        sort_by = self._sort_column(filters.sort_by)
        items, total = self.buyers.search(self.session, filters, sort_by)

        return BuyerPage(
            items=items,
            total=total,
            page=filters.page,
            page_size=filters.page_size,
            total_pages=math.ceil(total / filters.page_size),
        )

    def get_buyer(self, buyer_id: str) -> BuyerDetail:
        """
        Get a buyer with its owner and newest history entries.

        Raises:
            NotFoundError: If the buyer does not exist
        """
        buyer = self.buyers.get_with_owner(self.session, buyer_id)
        if buyer is None:
            raise NotFoundError(f"Buyer {buyer_id} not found")

        history = self.history.recent_for_buyer(
            self.session, buyer_id, limit=settings.history_preview_limit
        )
        return BuyerDetail(buyer=buyer, history=history)

    def export_buyers(self, filters: BuyerFilters) -> bytes:
        """
        Export every buyer matching the filters as CSV.

        Paging options are ignored; filters and sort order apply.

        Returns:
            UTF-8 encoded CSV with a header row
        """
        sort_by = self._sort_column(filters.sort_by)
        buyers = self.buyers.find_all(self.session, filters, sort_by)

        logger.info("buyers_exported", count=len(buyers))
        return csv_codec.encode(buyers).encode("utf-8")

    def import_buyers(self, data: bytes, user: User) -> ImportResult:
        """Import buyers from CSV content; see BuyerImporter.import_bytes."""
        return BuyerImporter(self.session, self.validator, self.tracker).import_bytes(data, user)

    def import_buyer_file(self, path: Union[str, Path], user: User) -> ImportResult:
        """Import buyers from an uploaded file, removing the file afterwards."""
        return BuyerImporter(self.session, self.validator, self.tracker).import_file(path, user)

    def _get_or_raise(self, buyer_id: str) -> Buyer:
        buyer = self.buyers.get_by_id(self.session, buyer_id)
        if buyer is None:
            raise NotFoundError(f"Buyer {buyer_id} not found")
        return buyer

    @staticmethod
    def _authorize(buyer: Buyer, user: User, action: str) -> None:
        if buyer.owner_id == user.id or user.is_admin:
            return
        logger.warning(
            "buyer_access_denied",
            buyer_id=buyer.id,
            user_id=user.id,
            action=action,
        )
        raise ForbiddenError(f"You can only {action} your own buyers")

    @staticmethod
    def _sort_column(sort_by: str) -> str:
        name = to_snake(sort_by)
        if name not in SORT_COLUMNS:
            allowed = ", ".join(SORT_COLUMNS)
            raise ValidationError([
                ValidationIssue(f"Invalid sort field. Must be one of: {allowed}", "sort_by")
            ])
        return name
