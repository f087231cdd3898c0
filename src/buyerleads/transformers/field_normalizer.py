"""
Field Normalization Transformer

Maps free-text CSV tokens (e.g. "chandigarh", "2", "walk-in") to the
canonical enum codes stored on buyer records.
"""
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Type

from src.buyerleads.models.enums import (
    BHK,
    City,
    PropertyType,
    Purpose,
    Source,
    Status,
    Timeline,
)
from src.buyerleads.utils.logger import get_logger

logger = get_logger(__name__)


CITY_MAPPING = MappingProxyType({
    'chandigarh': City.CHANDIGARH,
    'mohali': City.MOHALI,
    'zirakpur': City.ZIRAKPUR,
    'panchkula': City.PANCHKULA,
    'other': City.OTHER,
})

PROPERTY_TYPE_MAPPING = MappingProxyType({
    'apartment': PropertyType.APARTMENT,
    'villa': PropertyType.VILLA,
    'plot': PropertyType.PLOT,
    'office': PropertyType.OFFICE,
    'retail': PropertyType.RETAIL,
})

BHK_MAPPING = MappingProxyType({
    'studio': BHK.STUDIO,
    '1': BHK.ONE,
    '2': BHK.TWO,
    '3': BHK.THREE,
    '4': BHK.FOUR,
})

PURPOSE_MAPPING = MappingProxyType({
    'buy': Purpose.BUY,
    'rent': Purpose.RENT,
})

TIMELINE_MAPPING = MappingProxyType({
    '0-3m': Timeline.ZERO_TO_THREE_MONTHS,
    '3-6m': Timeline.THREE_TO_SIX_MONTHS,
    '>6m': Timeline.MORE_THAN_SIX_MONTHS,
    'exploring': Timeline.EXPLORING,
})

SOURCE_MAPPING = MappingProxyType({
    'website': Source.WEBSITE,
    'referral': Source.REFERRAL,
    'walk-in': Source.WALK_IN,
    'call': Source.CALL,
    'other': Source.OTHER,
})

STATUS_MAPPING = MappingProxyType({
    'new': Status.NEW,
    'qualified': Status.QUALIFIED,
    'contacted': Status.CONTACTED,
    'visited': Status.VISITED,
    'negotiation': Status.NEGOTIATION,
    'converted': Status.CONVERTED,
    'dropped': Status.DROPPED,
})

# field name -> (token table, enum the table resolves into)
FIELD_TABLES: Mapping[str, tuple[Mapping[str, Enum], Type[Enum]]] = MappingProxyType({
    'city': (CITY_MAPPING, City),
    'property_type': (PROPERTY_TYPE_MAPPING, PropertyType),
    'bhk': (BHK_MAPPING, BHK),
    'purpose': (PURPOSE_MAPPING, Purpose),
    'timeline': (TIMELINE_MAPPING, Timeline),
    'source': (SOURCE_MAPPING, Source),
    'status': (STATUS_MAPPING, Status),
})

# Human-readable accepted values, used in validation messages
ACCEPTED_TOKENS = MappingProxyType({
    'city': "Chandigarh, Mohali, Zirakpur, Panchkula, Other",
    'property_type': "Apartment, Villa, Plot, Office, Retail",
    'bhk': "Studio, 1, 2, 3, 4",
    'purpose': "Buy, Rent",
    'timeline': "0-3m, 3-6m, >6m, Exploring",
    'source': "Website, Referral, Walk-in, Call, Other",
    'status': "New, Qualified, Contacted, Visited, Negotiation, Converted, Dropped",
})


class FieldNormalizer:
    """
    Normalizes raw enum tokens to canonical codes.

    Stateless; the lookup tables are module-level and never mutated.
    """

    fields = tuple(FIELD_TABLES)

    def normalize(self, field: str, raw: Optional[str]) -> Optional[Enum]:
        """
        Resolve a raw token for an enum-typed field.

        The token is trimmed and lower-cased before lookup. A token spelling
        the canonical code itself (e.g. "TWO", "walk_in") is accepted too, so
        exported files read back cleanly.

        Args:
            field: Field name, one of ``FieldNormalizer.fields``
            raw: Raw token as found in the CSV cell

        Returns:
            Canonical enum member, or None when the token matches nothing

        Raises:
            KeyError: If the field has no normalization table
        """
        table, enum_type = FIELD_TABLES[field]

        if raw is None:
            return None

        token = str(raw).strip().lower()
        if not token:
            return None

        if token in table:
            return table[token]

        try:
            return enum_type(token.upper())
        except ValueError:
            logger.debug("field_token_unmatched", field=field, token=token[:40])
            return None

    def accepted_values(self, field: str) -> str:
        """Describe the tokens a field accepts."""
        return ACCEPTED_TOKENS[field]
