"""Enumeration types for buyer lead entities."""

from enum import Enum


class City(str, Enum):
    CHANDIGARH = "CHANDIGARH"
    MOHALI = "MOHALI"
    ZIRAKPUR = "ZIRAKPUR"
    PANCHKULA = "PANCHKULA"
    OTHER = "OTHER"


class PropertyType(str, Enum):
    APARTMENT = "APARTMENT"
    VILLA = "VILLA"
    PLOT = "PLOT"
    OFFICE = "OFFICE"
    RETAIL = "RETAIL"


class BHK(str, Enum):
    STUDIO = "STUDIO"
    ONE = "ONE"
    TWO = "TWO"
    THREE = "THREE"
    FOUR = "FOUR"


class Purpose(str, Enum):
    BUY = "BUY"
    RENT = "RENT"


class Timeline(str, Enum):
    ZERO_TO_THREE_MONTHS = "ZERO_TO_THREE_MONTHS"
    THREE_TO_SIX_MONTHS = "THREE_TO_SIX_MONTHS"
    MORE_THAN_SIX_MONTHS = "MORE_THAN_SIX_MONTHS"
    EXPLORING = "EXPLORING"


class Source(str, Enum):
    WEBSITE = "WEBSITE"
    REFERRAL = "REFERRAL"
    WALK_IN = "WALK_IN"
    CALL = "CALL"
    OTHER = "OTHER"


class Status(str, Enum):
    NEW = "NEW"
    QUALIFIED = "QUALIFIED"
    CONTACTED = "CONTACTED"
    VISITED = "VISITED"
    NEGOTIATION = "NEGOTIATION"
    CONVERTED = "CONVERTED"
    DROPPED = "DROPPED"


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class HistoryAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    IMPORTED = "imported"


class BuyerField(str, Enum):
    """Editable buyer fields; the key set of a change diff."""

    FULL_NAME = "full_name"
    EMAIL = "email"
    PHONE = "phone"
    CITY = "city"
    PROPERTY_TYPE = "property_type"
    BHK = "bhk"
    PURPOSE = "purpose"
    BUDGET_MIN = "budget_min"
    BUDGET_MAX = "budget_max"
    TIMELINE = "timeline"
    SOURCE = "source"
    NOTES = "notes"
    TAGS = "tags"
    STATUS = "status"


# Property types that must carry a bedroom count
BHK_REQUIRED_TYPES = frozenset({PropertyType.APARTMENT, PropertyType.VILLA})
