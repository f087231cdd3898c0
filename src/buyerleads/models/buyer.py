"""
Buyer Domain Models

Pydantic models for list filters and import results, shared by the
service layer and the REST API.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from config.settings import settings
from src.buyerleads.models.enums import City, PropertyType, Status, Timeline


class BuyerFilters(BaseModel):
    """
    Filter, search and paging options for listing or exporting buyers.

    Attributes:
        city: Exact city match
        property_type: Exact property type match
        status: Exact status match
        timeline: Exact timeline match
        search: Case-insensitive substring over name, phone and email
        page: 1-based page number
        page_size: Records per page (ignored by export)
        sort_by: Field to sort on
        sort_order: asc or desc
    """

    city: Optional[City] = Field(None, description="Filter by city")
    property_type: Optional[PropertyType] = Field(None, description="Filter by property type")
    status: Optional[Status] = Field(None, description="Filter by status")
    timeline: Optional[Timeline] = Field(None, description="Filter by timeline")
    search: Optional[str] = Field(None, description="Search name, phone or email")
    page: int = Field(1, ge=1, description="Page number")
    page_size: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    sort_by: str = Field("updated_at", description="Sort field")
    sort_order: str = Field("desc", pattern="^(asc|desc)$")


class ImportRowError(BaseModel):
    """One validation failure for one CSV row."""

    row: int = Field(..., ge=1, description="1-based data row number")
    field: Optional[str] = Field(None, description="Offending field, absent for row-wide errors")
    message: str
    data: Dict[str, Any] = Field(default_factory=dict, description="Raw row as uploaded")


class ImportResult(BaseModel):
    """
    Outcome of a bulk CSV import.

    Partial success is a normal outcome: valid rows are committed and the
    invalid ones are reported in ``errors``.
    """

    success_count: int = 0
    error_count: int = 0
    errors: List[ImportRowError] = Field(default_factory=list)
    imported_ids: List[str] = Field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return self.success_count + self.error_count
