"""
Pydantic Schemas for API Request/Response Models

These schemas define the JSON structure for API endpoints. JSON keys are
camelCase; Python attributes stay snake_case.
"""
from typing import Any, Dict, List, Optional, Union
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from src.buyerleads.db.base import as_utc
from src.buyerleads.models.enums import (
    BHK, City, HistoryAction, PropertyType, Purpose, Source, Status, Timeline, UserRole,
)


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def camel_key(key: str) -> str:
    """camelCase form of a snake_case key; keys without underscores are kept."""
    return to_camel(key) if "_" in key else key


def camelize_keys(mapping: Dict[str, Any]) -> Dict[str, Any]:
    return {camel_key(key): value for key, value in mapping.items()}


class BuyerFieldsRequest(CamelModel):
    """
    Buyer fields as submitted by the client.

    Values are checked by the record validator, so enum fields accept any
    string and budgets any JSON value here.
    """
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    property_type: Optional[str] = None
    bhk: Optional[str] = None
    purpose: Optional[str] = None
    budget_min: Optional[Any] = None
    budget_max: Optional[Any] = None
    timeline: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[Union[List[str], str]] = None
    status: Optional[str] = None


class BuyerCreateRequest(BuyerFieldsRequest):
    """Create payload."""


class BuyerUpdateRequest(BuyerFieldsRequest):
    """Partial update payload; only the keys sent are changed."""
    updated_at: Optional[datetime] = Field(
        None, description="updatedAt last read by the client, for conflict detection"
    )


class OwnerOut(CamelModel):
    """Display fields of a user."""
    id: str
    full_name: str
    email: str
    role: UserRole


class BuyerOut(CamelModel):
    """Buyer as returned by list, create and update."""
    id: str
    full_name: str
    email: Optional[str] = None
    phone: str
    city: City
    property_type: PropertyType
    bhk: Optional[BHK] = None
    purpose: Purpose
    budget_min: Optional[int] = None
    budget_max: Optional[int] = None
    timeline: Timeline
    source: Source
    status: Status
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    owner_id: str
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> datetime:
        return as_utc(value)


class HistoryEntryOut(CamelModel):
    """One history entry with the acting user."""
    id: str
    action: HistoryAction
    diff: Dict[str, Any]
    changed_at: datetime
    changed_by: str
    user: Optional[OwnerOut] = None

    @field_serializer("changed_at")
    def serialize_changed_at(self, value: datetime) -> datetime:
        return as_utc(value)

    @field_serializer("diff")
    def serialize_diff(self, diff: Dict[str, Any]) -> Dict[str, Any]:
        return camelize_keys(diff)


class BuyerDetailOut(BuyerOut):
    """Buyer with owner and recent history."""
    owner: OwnerOut
    history: List[HistoryEntryOut] = Field(default_factory=list)


class BuyerPageOut(CamelModel):
    """Paged buyer listing."""
    items: List[BuyerOut]
    total: int
    page: int
    page_size: int
    total_pages: int


class ImportRowErrorOut(CamelModel):
    """Validation failure of one CSV row."""
    row: int
    field: Optional[str] = None
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_serializer("field")
    def serialize_field(self, field: Optional[str]) -> Optional[str]:
        return camel_key(field) if field else None

    @field_serializer("data")
    def serialize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return camelize_keys(data)


class ImportResultOut(CamelModel):
    """Bulk import outcome."""
    success_count: int
    error_count: int
    total_rows: int
    errors: List[ImportRowErrorOut] = Field(default_factory=list)
    imported_ids: List[str] = Field(default_factory=list)


class ErrorOut(BaseModel):
    """Error body shared by every failed request."""
    detail: str
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
    database: str = "connected"
    timestamp: datetime
