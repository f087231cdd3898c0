"""
Buyer Record Validator

One validation policy for typed JSON payloads (create/update) and raw CSV
rows. Per-field errors are collected for every field before the cross-field
rules (BHK requirement, budget ordering) run; a record is valid only when
no error was found.
"""
import re
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from src.buyerleads.exceptions import ValidationError
from src.buyerleads.models.enums import (
    BHK,
    BHK_REQUIRED_TYPES,
    BuyerField,
    City,
    PropertyType,
    Purpose,
    Source,
    Status,
    Timeline,
)
from src.buyerleads.transformers.field_normalizer import FieldNormalizer
from src.buyerleads.utils.logger import get_logger

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
NON_DIGITS = re.compile(r'\D')

FULL_NAME_MIN_LENGTH = 2
FULL_NAME_MAX_LENGTH = 80
PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15
NOTES_MAX_LENGTH = 1000

ENUM_FIELDS = {
    'city': City,
    'property_type': PropertyType,
    'bhk': BHK,
    'purpose': Purpose,
    'timeline': Timeline,
    'source': Source,
    'status': Status,
}

REQUIRED_FIELDS = frozenset({
    'full_name', 'phone', 'city', 'property_type', 'purpose', 'timeline', 'source',
})

FIELD_LABELS = {
    'full_name': "Full name",
    'email': "Email",
    'phone': "Phone",
    'city': "city",
    'property_type': "property type",
    'bhk': "BHK",
    'purpose': "purpose",
    'budget_min': "Budget minimum",
    'budget_max': "Budget maximum",
    'timeline': "timeline",
    'source': "source",
    'notes': "Notes",
    'tags': "Tags",
    'status': "status",
}

BHK_REQUIRED_MESSAGE = "BHK is required for Apartment and Villa property types"
BUDGET_ORDER_MESSAGE = "Budget maximum must be greater than or equal to budget minimum"


@dataclass(frozen=True)
class ValidationIssue:
    """
    A single validation failure.

    Attributes:
        message: Human-readable description
        field: Offending field, None for record- or file-wide problems
    """
    message: str
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {'field': self.field, 'message': self.message}


@dataclass
class ValidationResult:
    """
    Outcome of validating one record.

    ``data`` holds the cleaned record (enum members, ints, digit-only phone,
    parsed tags) and is only set when there are no errors.
    """
    errors: List[ValidationIssue] = dataclass_field(default_factory=list)
    data: Optional[Dict[str, Any]] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> Dict[str, Any]:
        """Return the cleaned data or raise ValidationError with every issue."""
        if self.errors:
            raise ValidationError(self.errors)
        return self.data


class RecordValidator:
    """
    Validates buyer payloads and CSV rows.

    Never mutates its input.
    """

    field_order = tuple(f.value for f in BuyerField)

    def __init__(self, normalizer: Optional[FieldNormalizer] = None):
        self.normalizer = normalizer or FieldNormalizer()

    def validate_create(self, payload: Mapping[str, Any]) -> ValidationResult:
        """
        Validate a typed create payload.

        Args:
            payload: Field values keyed by snake_case field name

        Returns:
            ValidationResult; status defaults to NEW when not supplied
        """
        return self._validate(payload, existing=None, partial=False, from_csv=False)

    def validate_update(
        self,
        payload: Mapping[str, Any],
        existing: Mapping[str, Any],
    ) -> ValidationResult:
        """
        Validate a partial update payload.

        Only supplied fields are checked and returned, but the cross-field
        rules run against the merged record (existing values overlaid with
        the supplied ones). Optional fields may be cleared with None.

        Args:
            payload: Supplied field values
            existing: Current stored field values

        Returns:
            ValidationResult whose data holds only the supplied fields
        """
        return self._validate(payload, existing=existing, partial=True, from_csv=False)

    def validate_row(self, row: Mapping[str, Optional[str]]) -> ValidationResult:
        """
        Normalize and validate one raw CSV row.

        Args:
            row: Raw cell strings keyed by field name

        Returns:
            ValidationResult with the normalized record on success
        """
        return self._validate(row, existing=None, partial=False, from_csv=True)

    def _validate(
        self,
        payload: Mapping[str, Any],
        existing: Optional[Mapping[str, Any]],
        partial: bool,
        from_csv: bool,
    ) -> ValidationResult:
        errors: List[ValidationIssue] = []
        failed: set = set()
        cleaned: Dict[str, Any] = {}

        for name in self.field_order:
            if partial and name not in payload:
                continue

            value, issue = self._check_field(name, payload.get(name), from_csv)
            if issue is not None:
                errors.append(issue)
                failed.add(name)
                continue

            if value is None:
                if name in REQUIRED_FIELDS or (partial and name == 'status'):
                    errors.append(ValidationIssue(f"{_label(name)} is required".capitalize(), name))
                    failed.add(name)
                    continue
                if name == 'status':
                    value = Status.NEW
                elif not partial:
                    continue

            cleaned[name] = value

        merged: Dict[str, Any] = dict(existing or {})
        merged.update(cleaned)
        errors.extend(self._check_cross_fields(merged, failed))

        if errors:
            logger.debug(
                "record_validation_failed",
                source="csv" if from_csv else "json",
                error_count=len(errors),
                fields=sorted({e.field for e in errors if e.field}),
            )
            return ValidationResult(errors=errors)

        return ValidationResult(data=cleaned)

    def _check_field(self, name: str, raw: Any, from_csv: bool) -> Tuple[Any, Optional[ValidationIssue]]:
        if name in ENUM_FIELDS:
            return self._check_enum(name, raw, from_csv)
        if name in ('budget_min', 'budget_max'):
            return _check_budget(name, raw, from_csv)
        checker = _FIELD_CHECKERS[name]
        return checker(raw)

    def _check_enum(self, name: str, raw: Any, from_csv: bool) -> Tuple[Any, Optional[ValidationIssue]]:
        if isinstance(raw, Enum):
            raw = raw.value
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None, None

        if from_csv:
            value = self.normalizer.normalize(name, raw)
            accepted = self.normalizer.accepted_values(name)
        else:
            enum_type = ENUM_FIELDS[name]
            accepted = ", ".join(member.value for member in enum_type)
            try:
                value = enum_type(str(raw).strip().upper())
            except ValueError:
                value = None

        if value is None:
            return None, ValidationIssue(f"Invalid {_label(name)}. Must be one of: {accepted}", name)
        return value, None

    def _check_cross_fields(self, merged: Mapping[str, Any], failed: set) -> List[ValidationIssue]:
        issues = []

        if 'property_type' not in failed and 'bhk' not in failed:
            property_type = _coerce(PropertyType, merged.get('property_type'))
            if property_type in BHK_REQUIRED_TYPES and merged.get('bhk') is None:
                issues.append(ValidationIssue(BHK_REQUIRED_MESSAGE, 'bhk'))

        if 'budget_min' not in failed and 'budget_max' not in failed:
            budget_min = merged.get('budget_min')
            budget_max = merged.get('budget_max')
            if budget_min is not None and budget_max is not None and budget_max < budget_min:
                issues.append(ValidationIssue(BUDGET_ORDER_MESSAGE, 'budget_max'))

        return issues


def _label(name: str) -> str:
    return FIELD_LABELS.get(name, name)


def _coerce(enum_type, value):
    if value is None or isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        return None


def _check_full_name(raw: Any) -> Tuple[Any, Optional[ValidationIssue]]:
    if raw is None:
        return None, None
    if not isinstance(raw, str):
        return None, ValidationIssue("Full name must be text", 'full_name')
    name = raw.strip()
    if len(name) < FULL_NAME_MIN_LENGTH:
        return None, ValidationIssue(
            f"Full name must be at least {FULL_NAME_MIN_LENGTH} characters", 'full_name'
        )
    if len(name) > FULL_NAME_MAX_LENGTH:
        return None, ValidationIssue(
            f"Full name must be at most {FULL_NAME_MAX_LENGTH} characters", 'full_name'
        )
    return name, None


def _check_phone(raw: Any) -> Tuple[Any, Optional[ValidationIssue]]:
    if raw is None:
        return None, None
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        return None, ValidationIssue("Phone must be text", 'phone')
    digits = NON_DIGITS.sub('', str(raw))
    if not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
        return None, ValidationIssue(
            f"Phone must be {PHONE_MIN_DIGITS}-{PHONE_MAX_DIGITS} digits", 'phone'
        )
    return digits, None


def _check_email(raw: Any) -> Tuple[Any, Optional[ValidationIssue]]:
    if raw is None:
        return None, None
    if not isinstance(raw, str):
        return None, ValidationIssue("Invalid email format", 'email')
    email = raw.strip()
    if not email:
        return None, None
    if not EMAIL_PATTERN.match(email):
        return None, ValidationIssue("Invalid email format", 'email')
    return email, None


def _check_notes(raw: Any) -> Tuple[Any, Optional[ValidationIssue]]:
    if raw is None:
        return None, None
    if not isinstance(raw, str):
        return None, ValidationIssue("Notes must be text", 'notes')
    if len(raw) > NOTES_MAX_LENGTH:
        return None, ValidationIssue(
            f"Notes must be at most {NOTES_MAX_LENGTH} characters", 'notes'
        )
    notes = raw.strip()
    return (notes or None), None


def _check_tags(raw: Any) -> Tuple[Any, Optional[ValidationIssue]]:
    if raw is None:
        return [], None
    if isinstance(raw, str):
        candidates = raw.split(',')
    elif isinstance(raw, (list, tuple)):
        if not all(isinstance(tag, str) for tag in raw):
            return None, ValidationIssue("Tags must be a list of strings", 'tags')
        candidates = raw
    else:
        return None, ValidationIssue("Tags must be a list of strings", 'tags')

    tags: List[str] = []
    for tag in candidates:
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags, None


def _check_budget(name: str, raw: Any, from_csv: bool) -> Tuple[Any, Optional[ValidationIssue]]:
    issue = ValidationIssue(f"{_label(name)} must be a positive number", name)
    if raw is None:
        return None, None

    if from_csv or isinstance(raw, str):
        text = str(raw).strip()
        if not text:
            return None, None
        if not from_csv:
            return None, issue
        # CSV budgets may carry separators or currency marks, e.g. "50,00,000"
        digits = NON_DIGITS.sub('', text)
        if not digits:
            return None, issue
        value = int(digits)
    elif isinstance(raw, bool) or not isinstance(raw, int):
        return None, issue
    else:
        value = raw

    if value <= 0:
        return None, issue
    return value, None


_FIELD_CHECKERS = {
    'full_name': _check_full_name,
    'phone': _check_phone,
    'email': _check_email,
    'notes': _check_notes,
    'tags': _check_tags,
}
