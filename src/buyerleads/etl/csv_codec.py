"""
Buyer CSV Codec

Decodes uploaded CSV bytes into raw row mappings and encodes buyer records
back to CSV text. Import and export share the column layout so exported
files can be imported again.
"""
import csv
import io
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from src.buyerleads.exceptions import CodecError
from src.buyerleads.utils.logger import get_logger

logger = get_logger(__name__)

# Positional import columns, keyed by record field name
IMPORT_COLUMNS = (
    'full_name', 'email', 'phone', 'city', 'property_type',
    'bhk', 'purpose', 'budget_min', 'budget_max', 'timeline',
    'source', 'notes', 'tags', 'status',
)

# Export header titles, in the same order plus the last-modified stamp
EXPORT_HEADERS = (
    'fullName', 'email', 'phone', 'city', 'propertyType',
    'bhk', 'purpose', 'budgetMin', 'budgetMax', 'timeline',
    'source', 'notes', 'tags', 'status', 'updatedAt',
)

TAG_SEPARATOR = ", "


def decode(data: bytes, skip_header: bool = False) -> List[Dict[str, str]]:
    """
    Parse CSV bytes into ordered row mappings.

    Columns are positional (see IMPORT_COLUMNS); by default the first row
    is data. Short rows are padded with empty strings and extra trailing
    cells are ignored. Empty lines are skipped and take no position in the
    result, so row numbers derived from it count data rows, not file lines.

    Args:
        data: Raw file content, UTF-8 (a leading BOM is tolerated)
        skip_header: Drop the first row, e.g. when reading an export

    Returns:
        List of {field name: raw cell} dicts in file order

    Raises:
        CodecError: If the bytes are not UTF-8 or the CSV is malformed
    """
    try:
        text = data.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise CodecError(f"CSV file is not valid UTF-8: {e.reason}") from e

    reader = csv.reader(io.StringIO(text, newline=''), strict=True)
    rows: List[Dict[str, str]] = []
    header_skipped = not skip_header

    try:
        for cells in reader:
            if not cells:
                continue
            if not header_skipped:
                header_skipped = True
                continue
            padded = list(cells[:len(IMPORT_COLUMNS)])
            padded.extend([''] * (len(IMPORT_COLUMNS) - len(padded)))
            rows.append(dict(zip(IMPORT_COLUMNS, padded)))
    except csv.Error as e:
        logger.warning("csv_decode_failed", line=reader.line_num, error=str(e))
        raise CodecError(f"Malformed CSV near line {reader.line_num}: {e}", line=reader.line_num) from e

    logger.debug("csv_decoded", rows=len(rows), bytes=len(data))
    return rows


def encode(records: Iterable[Any]) -> str:
    """
    Render buyer records as CSV text.

    Every cell is quoted (embedded quotes doubled), tags are joined with
    ", ", and absent optional values render as empty strings.

    Args:
        records: Buyer ORM objects or mappings keyed by field name

    Returns:
        CSV text with a header row
    """
    rows = [_export_row(record) for record in records]
    frame = pd.DataFrame(rows, columns=list(EXPORT_HEADERS), dtype=object)

    text = frame.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')
    logger.debug("csv_encoded", rows=len(rows))
    return text


def _export_row(record: Any) -> List[str]:
    values = [_cell(_get(record, name)) for name in IMPORT_COLUMNS]
    values.append(_cell(_get(record, 'updated_at')))
    return values


def _get(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _cell(value: Optional[Any]) -> str:
    if value is None:
        return ''
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (list, tuple)):
        return TAG_SEPARATOR.join(str(tag) for tag in value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
