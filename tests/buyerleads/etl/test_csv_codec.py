"""
Unit tests for csv_codec module
"""
import csv
import io
from datetime import datetime, timezone

import pytest

from src.buyerleads.etl import csv_codec
from src.buyerleads.etl.csv_codec import EXPORT_HEADERS, IMPORT_COLUMNS
from src.buyerleads.exceptions import CodecError
from src.buyerleads.models.enums import (
    BHK, City, PropertyType, Purpose, Source, Status, Timeline,
)
from src.buyerleads.validators.record_validator import RecordValidator


@pytest.fixture
def exported_record():
    return {
        "full_name": "Rajesh Kumar",
        "email": "rajesh.kumar@email.com",
        "phone": "9876543210",
        "city": City.CHANDIGARH,
        "property_type": PropertyType.APARTMENT,
        "bhk": BHK.TWO,
        "purpose": Purpose.BUY,
        "budget_min": 5000000,
        "budget_max": 7000000,
        "timeline": Timeline.ZERO_TO_THREE_MONTHS,
        "source": Source.WEBSITE,
        "notes": 'Said "call after 6", prefers Sector 22',
        "tags": ["a", "b"],
        "status": Status.NEW,
        "updated_at": datetime(2026, 1, 15, 10, 30, tzinfo=timezone.utc),
    }


def parse(text):
    return list(csv.reader(io.StringIO(text)))


class TestDecode:
    """Tests for decode."""

    def test_minimal_row_padded(self):
        """Test that short rows are padded to every import column"""
        rows = csv_codec.decode(b"John Doe,,9876543210,chandigarh,plot,,buy,,,exploring,website,,\n")

        assert len(rows) == 1
        row = rows[0]
        assert list(row) == list(IMPORT_COLUMNS)
        assert row["full_name"] == "John Doe"
        assert row["city"] == "chandigarh"
        assert row["tags"] == ""
        assert row["status"] == ""

    def test_first_row_is_data(self):
        """Test that there is no header row by default"""
        rows = csv_codec.decode(b"A One,,9876543210\nB Two,,9876543211\n")

        assert [row["full_name"] for row in rows] == ["A One", "B Two"]

    def test_skip_header(self):
        """Test that skip_header drops the first row"""
        rows = csv_codec.decode(b"fullName,email,phone\nA One,,9876543210\n", skip_header=True)

        assert [row["full_name"] for row in rows] == ["A One"]

    def test_empty_lines_skipped(self):
        """Test that blank lines are not rows"""
        rows = csv_codec.decode(b"A One,,9876543210\n\n\nB Two,,9876543211\n")

        assert len(rows) == 2

    def test_quoted_cells(self):
        """Test commas and doubled quotes inside quoted cells"""
        rows = csv_codec.decode(b'"Doe, John",,9876543210,,,,,,,,,"He said ""hi""","a, b"\n')

        assert rows[0]["full_name"] == "Doe, John"
        assert rows[0]["notes"] == 'He said "hi"'
        assert rows[0]["tags"] == "a, b"

    def test_extra_cells_ignored(self):
        """Test that cells past the import columns are dropped"""
        line = ",".join(["x"] * (len(IMPORT_COLUMNS) + 2))
        rows = csv_codec.decode(line.encode())

        assert len(rows[0]) == len(IMPORT_COLUMNS)

    def test_bom_tolerated(self):
        """Test that a UTF-8 byte order mark is ignored"""
        rows = csv_codec.decode("\ufeffJohn Doe,,9876543210\n".encode("utf-8"))

        assert rows[0]["full_name"] == "John Doe"

    def test_malformed_quotes(self):
        """Test that stray characters after a closing quote fail"""
        with pytest.raises(CodecError) as exc_info:
            csv_codec.decode(b'"John"Doe,,9876543210\n')

        assert exc_info.value.line == 1

    def test_invalid_utf8(self):
        """Test that undecodable bytes fail"""
        with pytest.raises(CodecError):
            csv_codec.decode(b"\xff\xfeJ\x00o\x00")

    def test_empty_input(self):
        """Test that empty content has no rows"""
        assert csv_codec.decode(b"") == []


class TestEncode:
    """Tests for encode."""

    def test_header_row(self, exported_record):
        """Test that the header lists the export titles"""
        rows = parse(csv_codec.encode([exported_record]))

        assert rows[0] == list(EXPORT_HEADERS)

    def test_every_cell_quoted(self, exported_record):
        """Test that all cells, header included, are quoted"""
        text = csv_codec.encode([exported_record])
        header, line = text.splitlines()

        assert header.startswith('"fullName","email"')
        assert line.startswith('"Rajesh Kumar","rajesh.kumar@email.com","9876543210","CHANDIGARH"')

    def test_values_rendered(self, exported_record):
        """Test enum codes, joined tags, doubled quotes and timestamps"""
        text = csv_codec.encode([exported_record])
        row = dict(zip(EXPORT_HEADERS, parse(text)[1]))

        assert row["propertyType"] == "APARTMENT"
        assert row["bhk"] == "TWO"
        assert row["budgetMin"] == "5000000"
        assert row["tags"] == "a, b"
        assert row["notes"] == 'Said "call after 6", prefers Sector 22'
        assert row["updatedAt"] == "2026-01-15T10:30:00+00:00"
        assert '""call after 6""' in text

    def test_missing_values_empty(self, exported_record):
        """Test that absent optional values render as empty strings"""
        exported_record.update({"email": None, "bhk": None, "budget_min": None, "tags": []})
        row = dict(zip(EXPORT_HEADERS, parse(csv_codec.encode([exported_record]))[1]))

        assert row["email"] == ""
        assert row["bhk"] == ""
        assert row["budgetMin"] == ""
        assert row["tags"] == ""

    def test_no_records(self):
        """Test that an empty export still has its header"""
        assert parse(csv_codec.encode([])) == [list(EXPORT_HEADERS)]

    def test_export_reimports(self, exported_record):
        """Test that an exported record decodes and validates to the same values"""
        rows = csv_codec.decode(csv_codec.encode([exported_record]).encode("utf-8"), skip_header=True)
        result = RecordValidator().validate_row(rows[0])

        assert result.is_valid
        for name in IMPORT_COLUMNS:
            assert result.data[name] == exported_record[name], name
