"""
Tests for the bulk CSV importer
"""
import pytest
from sqlalchemy import exc, func, select

from src.buyerleads.db.models import Buyer, BuyerHistory
from src.buyerleads.etl.importer import BuyerImporter
from src.buyerleads.exceptions import CodecError, PersistenceError, RowLimitExceededError
from src.buyerleads.models.enums import HistoryAction, PropertyType
from src.buyerleads.services.change_tracker import ChangeTracker


def row_line(index, **overrides):
    cells = {
        "full_name": f"Buyer {index}",
        "email": "",
        "phone": f"98765432{index:02d}",
        "city": "chandigarh",
        "property_type": "plot",
        "bhk": "",
        "purpose": "buy",
        "budget_min": "",
        "budget_max": "",
        "timeline": "exploring",
        "source": "website",
        "notes": "",
        "tags": "",
    }
    cells.update(overrides)
    return ",".join(cells.values())


def csv_bytes(lines):
    return ("\n".join(lines) + "\n").encode("utf-8")


def count(session, model):
    return session.scalar(select(func.count()).select_from(model))


class FailingTracker(ChangeTracker):
    """Change tracker whose second history write fails at the store."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def record_creation(self, session, **kwargs):
        self.calls += 1
        if self.calls == 2:
            raise exc.OperationalError("INSERT INTO buyer_history", {}, Exception("disk full"))
        return super().record_creation(session, **kwargs)


class TestBuyerImporter:
    """Tests for BuyerImporter."""

    def test_all_rows_valid(self, test_db, owner):
        """Test that valid rows are stored with imported history"""
        data = csv_bytes([row_line(i) for i in range(1, 4)])

        result = BuyerImporter(test_db).import_bytes(data, owner)

        assert result.success_count == 3
        assert result.error_count == 0
        assert len(result.imported_ids) == 3
        assert count(test_db, Buyer) == 3

        entries = test_db.execute(select(BuyerHistory)).scalars().all()
        assert len(entries) == 3
        assert {entry.action for entry in entries} == {HistoryAction.IMPORTED}
        assert {entry.changed_by for entry in entries} == {owner.id}

    def test_invalid_row_reported_others_stored(self, test_db, owner):
        """Test that row 3 of 5 failing leaves 4 stored and row 3 reported"""
        lines = [row_line(i) for i in range(1, 6)]
        lines[2] = row_line(3, city="delhi")

        result = BuyerImporter(test_db).import_bytes(csv_bytes(lines), owner)

        assert result.success_count == 4
        assert result.error_count == 1
        assert result.total_rows == 5
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.row == 3
        assert error.field == "city"
        assert error.data["city"] == "delhi"

        names = set(test_db.execute(select(Buyer.full_name)).scalars())
        assert names == {"Buyer 1", "Buyer 2", "Buyer 4", "Buyer 5"}
        assert count(test_db, BuyerHistory) == 4

    def test_blank_lines_not_counted_as_rows(self, test_db, owner):
        """Test that row numbers count data rows and skip blank lines"""
        lines = [row_line(1), "", row_line(2, city="delhi")]

        result = BuyerImporter(test_db).import_bytes(csv_bytes(lines), owner)

        assert result.total_rows == 2
        assert result.success_count == 1
        assert [(error.row, error.field) for error in result.errors] == [(2, "city")]

    def test_row_with_several_errors(self, test_db, owner):
        """Test that every issue of an invalid row is listed under its row"""
        data = csv_bytes([row_line(1, full_name="X", phone="123")])

        result = BuyerImporter(test_db).import_bytes(data, owner)

        assert result.error_count == 1
        assert {(e.row, e.field) for e in result.errors} == {(1, "full_name"), (1, "phone")}
        assert count(test_db, Buyer) == 0

    def test_rows_are_normalized(self, test_db, owner):
        """Test that tokens are stored as canonical codes with the importer as owner"""
        data = csv_bytes([row_line(1, property_type="Apartment", bhk="2", tags='"a, b"')])

        result = BuyerImporter(test_db).import_bytes(data, owner)

        buyer = test_db.get(Buyer, result.imported_ids[0])
        assert buyer.property_type == PropertyType.APARTMENT
        assert buyer.tags == ["a", "b"]
        assert buyer.owner_id == owner.id

    def test_row_limit(self, test_db, owner):
        """Test that more than the allowed rows rejects the whole file"""
        data = csv_bytes([row_line(i % 100) for i in range(201)])

        with pytest.raises(RowLimitExceededError) as exc_info:
            BuyerImporter(test_db).import_bytes(data, owner)

        assert exc_info.value.row_count == 201
        assert count(test_db, Buyer) == 0

    def test_row_limit_boundary(self, test_db, owner):
        """Test that exactly the allowed number of rows is accepted"""
        data = csv_bytes([row_line(i) for i in range(1, 6)])

        result = BuyerImporter(test_db, max_rows=5).import_bytes(data, owner)

        assert result.success_count == 5

    def test_malformed_csv(self, test_db, owner):
        """Test that decoding errors abort before any row is stored"""
        data = csv_bytes([row_line(1), '"Broken"row,,9876543210'])

        with pytest.raises(CodecError):
            BuyerImporter(test_db).import_bytes(data, owner)

        assert count(test_db, Buyer) == 0

    def test_store_failure_rolls_back_batch(self, test_db, owner):
        """Test that a failed write leaves no imported rows behind"""
        data = csv_bytes([row_line(i) for i in range(1, 4)])

        with pytest.raises(PersistenceError):
            BuyerImporter(test_db, tracker=FailingTracker()).import_bytes(data, owner)

        assert count(test_db, Buyer) == 0
        assert count(test_db, BuyerHistory) == 0

    def test_import_file_removes_upload(self, test_db, owner, tmp_path):
        """Test that the uploaded file is removed after import"""
        upload = tmp_path / "upload.csv"
        upload.write_bytes(csv_bytes([row_line(1)]))

        result = BuyerImporter(test_db).import_file(upload, owner)

        assert result.success_count == 1
        assert not upload.exists()

    def test_import_file_removes_upload_on_failure(self, test_db, owner, tmp_path):
        """Test that the uploaded file is removed when the import fails"""
        upload = tmp_path / "upload.csv"
        upload.write_bytes(csv_bytes([row_line(i % 100) for i in range(201)]))

        with pytest.raises(RowLimitExceededError):
            BuyerImporter(test_db).import_file(upload, owner)

        assert not upload.exists()
