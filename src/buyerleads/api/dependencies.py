"""
FastAPI Dependencies

Provides dependency injection for database sessions, the acting user and
the buyer service.
"""
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from src.buyerleads.api.auth import bearer_scheme, credentials_exception, decode_access_token
from src.buyerleads.db.models import User
from src.buyerleads.db.repository import UserRepository
from src.buyerleads.db.session import SessionLocal, transaction
from src.buyerleads.services.buyer_service import BuyerService


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields:
        SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the acting user from the bearer token.

    The local user row is created the first time a token is seen.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if credentials is None:
        raise credentials_exception()

    token_data = decode_access_token(credentials.credentials)

    with transaction(db, "user_lookup"):
        user = UserRepository().get_or_create(
            db,
            user_id=token_data.user_id,
            email=token_data.email,
            full_name=token_data.name,
            role=token_data.role,
        )
    return user


def get_buyer_service(db: Session = Depends(get_db)) -> BuyerService:
    """Buyer service bound to the request's session."""
    return BuyerService(db)
