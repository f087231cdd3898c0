"""
Domain Models

Enumerations and Pydantic models describing buyer leads.
"""
from src.buyerleads.models.enums import (
    BHK,
    BHK_REQUIRED_TYPES,
    BuyerField,
    City,
    HistoryAction,
    PropertyType,
    Purpose,
    Source,
    Status,
    Timeline,
    UserRole,
)
from src.buyerleads.models.buyer import BuyerFilters, ImportResult, ImportRowError

__all__ = [
    "BHK",
    "BHK_REQUIRED_TYPES",
    "BuyerField",
    "City",
    "HistoryAction",
    "PropertyType",
    "Purpose",
    "Source",
    "Status",
    "Timeline",
    "UserRole",
    "BuyerFilters",
    "ImportResult",
    "ImportRowError",
]
