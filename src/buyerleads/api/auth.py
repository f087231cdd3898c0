"""
JWT Authentication for FastAPI

Bearer tokens are issued by the identity provider and only verified here.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError as PydanticValidationError

from config.settings import settings
from src.buyerleads.models.enums import UserRole
from src.buyerleads.utils.logger import get_logger

logger = get_logger(__name__)

# Bearer scheme; missing credentials are reported as 401 by get_current_user
bearer_scheme = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    """Claims carried by an access token."""
    user_id: str
    email: str
    role: UserRole = UserRole.USER
    name: Optional[str] = None


def credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token.

    Used by scripts and tests; the API itself never issues tokens.

    Args:
        data: Token claims (``sub``, ``email``, ``role``, optional ``name``)
        expires_delta: Token lifetime, defaults to the configured expiry

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenData:
    """
    Verify a token and extract its claims.

    Args:
        token: Encoded JWT

    Returns:
        TokenData

    Raises:
        HTTPException: 401 if the token is invalid, expired or incomplete
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info("access_token_rejected", error=str(e))
        raise credentials_exception()

    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise credentials_exception()

    try:
        return TokenData(
            user_id=user_id,
            email=email,
            role=payload.get("role") or UserRole.USER,
            name=payload.get("name"),
        )
    except PydanticValidationError:
        raise credentials_exception()
