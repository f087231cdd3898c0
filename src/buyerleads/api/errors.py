"""
Exception Handlers

Maps core exceptions to HTTP responses with a ``{"detail", "errors"}`` body.
"""
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.buyerleads.api.schemas import camel_key
from src.buyerleads.exceptions import (
    BuyerLeadsError,
    CodecError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    RowLimitExceededError,
    ValidationError,
)
from src.buyerleads.utils.logger import get_logger

logger = get_logger(__name__)

STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    CodecError: status.HTTP_400_BAD_REQUEST,
    RowLimitExceededError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_items(exc: BuyerLeadsError) -> List[Dict[str, Any]]:
    """Per-field error entries for the response body."""
    if isinstance(exc, ValidationError):
        return [
            {
                "field": camel_key(issue.field) if issue.field else None,
                "message": issue.message,
            }
            for issue in exc.issues
        ]
    if isinstance(exc, CodecError):
        return [{"field": None, "message": str(exc), "line": exc.line}]
    return []


async def buyer_leads_error_handler(request: Request, exc: BuyerLeadsError) -> JSONResponse:
    status_code = STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

    if status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
    else:
        logger.info(
            "request_rejected",
            path=request.url.path,
            status_code=status_code,
            error_type=type(exc).__name__,
        )

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "errors": error_items(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handler for every core exception class."""
    app.add_exception_handler(BuyerLeadsError, buyer_leads_error_handler)
