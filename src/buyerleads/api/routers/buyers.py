"""
Buyers Router

Endpoints for buyer lead CRUD, listing, CSV import and CSV export.
"""
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from config.settings import settings
from src.buyerleads.api.dependencies import get_buyer_service, get_current_user
from src.buyerleads.api.schemas import (
    BuyerCreateRequest,
    BuyerDetailOut,
    BuyerOut,
    BuyerPageOut,
    BuyerUpdateRequest,
    ErrorOut,
    ImportResultOut,
)
from src.buyerleads.db.models import User
from src.buyerleads.exceptions import ValidationError
from src.buyerleads.models.buyer import BuyerFilters
from src.buyerleads.models.enums import City, PropertyType, Status, Timeline
from src.buyerleads.services.buyer_service import BuyerService
from src.buyerleads.validators.record_validator import ValidationIssue

router = APIRouter(
    prefix="/api/v1/buyers",
    tags=["buyers"],
    responses={
        400: {"model": ErrorOut, "description": "Invalid payload, query or CSV file"},
        403: {"model": ErrorOut, "description": "Not the owner"},
        404: {"model": ErrorOut, "description": "Buyer not found"},
        409: {"model": ErrorOut, "description": "Buyer changed since it was read"},
    },
)

CSV_CONTENT_TYPES = ("text/csv", "application/vnd.ms-excel")


def buyer_filters(
    city: Optional[City] = Query(None, description="Filter by city"),
    property_type: Optional[PropertyType] = Query(None, alias="propertyType"),
    status: Optional[Status] = Query(None, description="Filter by status"),
    timeline: Optional[Timeline] = Query(None, description="Filter by timeline"),
    search: Optional[str] = Query(None, description="Search name, phone or email"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, alias="pageSize"),
    sort_by: str = Query("updatedAt", alias="sortBy"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$", alias="sortOrder"),
) -> BuyerFilters:
    """Query parameters shared by list and export."""
    return BuyerFilters(
        city=city,
        property_type=property_type,
        status=status,
        timeline=timeline,
        search=search,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/", response_model=BuyerPageOut)
def list_buyers(
    filters: BuyerFilters = Depends(buyer_filters),
    current_user: User = Depends(get_current_user),
    service: BuyerService = Depends(get_buyer_service),
):
    """
    List buyers with filtering, search, sorting and pagination.

    Returns:
        One page of buyers and paging totals
    """
    return BuyerPageOut.model_validate(service.list_buyers(filters), from_attributes=True)


@router.get("/export")
def export_buyers(
    filters: BuyerFilters = Depends(buyer_filters),
    current_user: User = Depends(get_current_user),
    service: BuyerService = Depends(get_buyer_service),
):
    """
    Export every buyer matching the filters as a CSV attachment.
    """
    content = service.export_buyers(filters)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="buyers-export-{timestamp}.csv"'},
    )


@router.post("/import", response_model=ImportResultOut)
def import_buyers(
    file: UploadFile = File(..., description="CSV file without header row"),
    current_user: User = Depends(get_current_user),
    service: BuyerService = Depends(get_buyer_service),
):
    """
    Import buyers from an uploaded CSV file.

    Valid rows are stored, invalid rows are reported per row.

    Raises:
        ValidationError: If the upload is not a CSV file or is too large
    """
    filename = file.filename or ""
    if not (filename.lower().endswith(".csv") or file.content_type in CSV_CONTENT_TYPES):
        raise ValidationError([ValidationIssue("Only CSV files are allowed", "file")])

    content = file.file.read()
    if len(content) > settings.import_max_upload_bytes:
        limit_mb = settings.import_max_upload_bytes // (1024 * 1024)
        raise ValidationError([ValidationIssue(f"File size must be less than {limit_mb}MB", "file")])

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(dir=upload_dir, prefix="import-", suffix=".csv", delete=False) as tmp:
        tmp.write(content)

    result = service.import_buyer_file(tmp.name, current_user)
    return ImportResultOut.model_validate(result, from_attributes=True)


@router.get("/{buyer_id}", response_model=BuyerDetailOut)
def get_buyer(
    buyer_id: str,
    current_user: User = Depends(get_current_user),
    service: BuyerService = Depends(get_buyer_service),
):
    """
    Get a buyer with its owner and most recent history entries.
    """
    detail = service.get_buyer(buyer_id)
    return BuyerDetailOut.model_validate({
        **BuyerOut.model_validate(detail.buyer).model_dump(),
        "owner": detail.buyer.owner,
        "history": detail.history,
    }, from_attributes=True)


@router.post("/", response_model=BuyerOut, status_code=status.HTTP_201_CREATED)
def create_buyer(
    body: BuyerCreateRequest,
    current_user: User = Depends(get_current_user),
    service: BuyerService = Depends(get_buyer_service),
):
    """
    Create a buyer owned by the current user.
    """
    return service.create_buyer(body.model_dump(exclude_unset=True), current_user)


@router.put("/{buyer_id}", response_model=BuyerOut)
def update_buyer(
    buyer_id: str,
    body: BuyerUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: BuyerService = Depends(get_buyer_service),
):
    """
    Update the supplied fields of a buyer.

    Sending ``updatedAt`` enables conflict detection against concurrent edits.
    """
    payload = body.model_dump(exclude_unset=True, exclude={"updated_at"})
    return service.update_buyer(
        buyer_id,
        payload,
        current_user,
        last_seen_updated_at=body.updated_at,
    )


@router.delete("/{buyer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_buyer(
    buyer_id: str,
    current_user: User = Depends(get_current_user),
    service: BuyerService = Depends(get_buyer_service),
):
    """
    Delete a buyer. History entries are kept.
    """
    service.delete_buyer(buyer_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
