"""
Buyer CSV Importer

Bulk import of buyer leads: decode, normalize and validate every row in
order, then persist all valid rows in one transaction with an "imported"
history entry each. Invalid rows are reported, never persisted.
"""
from pathlib import Path
from typing import Dict, List, Optional, Union

from sqlalchemy.orm import Session

from config.settings import settings
from src.buyerleads.db.models import User
from src.buyerleads.db.repository import BuyerRepository
from src.buyerleads.db.session import transaction
from src.buyerleads.etl import csv_codec
from src.buyerleads.exceptions import RowLimitExceededError
from src.buyerleads.models.buyer import ImportResult, ImportRowError
from src.buyerleads.models.enums import HistoryAction
from src.buyerleads.services.change_tracker import ChangeTracker
from src.buyerleads.utils.logger import get_logger
from src.buyerleads.validators.record_validator import RecordValidator

logger = get_logger(__name__)


class BuyerImporter:
    """
    Imports buyer leads from CSV.

    Stages: rows parsed -> rows validated -> persisting -> completed.
    Decoding problems and oversized files abort before any row is
    validated; a store failure rolls back every row of the batch.
    """

    def __init__(
        self,
        session: Session,
        validator: Optional[RecordValidator] = None,
        tracker: Optional[ChangeTracker] = None,
        max_rows: Optional[int] = None,
    ):
        self.session = session
        self.validator = validator or RecordValidator()
        self.tracker = tracker or ChangeTracker()
        self.buyers = BuyerRepository()
        self.max_rows = max_rows if max_rows is not None else settings.import_max_rows

    def import_bytes(self, data: bytes, acting_user: User) -> ImportResult:
        """
        Import buyers from CSV content.

        Args:
            data: Raw CSV bytes (positional columns, no header)
            acting_user: User who becomes owner of every imported buyer

        Returns:
            ImportResult with counts, per-row errors and new buyer ids

        Raises:
            CodecError: If the CSV cannot be decoded
            RowLimitExceededError: If there are more than ``max_rows`` rows
            PersistenceError: If the batch could not be committed
        """
        rows = csv_codec.decode(data)
        logger.info("buyer_import_rows_parsed", rows=len(rows), user_id=acting_user.id)

        if len(rows) > self.max_rows:
            logger.warning(
                "buyer_import_aborted",
                reason="row_limit",
                rows=len(rows),
                limit=self.max_rows,
            )
            raise RowLimitExceededError(len(rows), self.max_rows)

        result = ImportResult()
        accepted: List[Dict] = []

        for row_number, row in enumerate(rows, start=1):
            validation = self.validator.validate_row(row)
            if validation.is_valid:
                accepted.append(validation.data)
                continue

            result.error_count += 1
            for issue in validation.errors:
                result.errors.append(ImportRowError(
                    row=row_number,
                    field=issue.field,
                    message=issue.message,
                    data=dict(row),
                ))

        logger.info(
            "buyer_import_rows_validated",
            valid=len(accepted),
            invalid=result.error_count,
        )

        if accepted:
            imported_ids = self._persist(accepted, acting_user)
            result.imported_ids = imported_ids
            result.success_count = len(imported_ids)

        logger.info(
            "buyer_import_completed",
            success_count=result.success_count,
            error_count=result.error_count,
            user_id=acting_user.id,
        )
        return result

    def import_file(self, path: Union[str, Path], acting_user: User) -> ImportResult:
        """
        Import buyers from an uploaded temp file, then remove the file.

        The file is removed whatever the outcome.

        Args:
            path: Path of the uploaded CSV
            acting_user: Owner of the imported buyers

        Returns:
            ImportResult
        """
        upload = Path(path)
        try:
            return self.import_bytes(upload.read_bytes(), acting_user)
        finally:
            try:
                upload.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("upload_cleanup_failed", path=str(upload), error=str(e))

    def _persist(self, accepted: List[Dict], acting_user: User) -> List[str]:
        imported_ids = []
        with transaction(self.session, "buyer_import"):
            for fields in accepted:
                buyer = self.buyers.create(self.session, owner_id=acting_user.id, **fields)
                self.tracker.record_creation(
                    self.session,
                    buyer_id=buyer.id,
                    changed_by=acting_user.id,
                    fields=fields,
                    action=HistoryAction.IMPORTED,
                )
                imported_ids.append(buyer.id)
        return imported_ids
