from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import HTTPException, status
from jose import JWTError
from jose.jwt import encode, decode
from pydantic import ValidationError

from api.config import settings
from api.schemas.auth_schemas import AuthTokenPayload
from api.utils.logger import configure_logging

logger = configure_logging()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError as e:
        logger.warning("password check failed on malformed hash: %s", e)
        return False

def get_password_hash(password: str) -> str:
    """Hash a password for storing."""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

def create_access_token(data: AuthTokenPayload) -> str:
    """Create a JWT access token. Fills in exp from settings when the payload has none."""
    payload = data.model_copy()
    if payload.exp is None:
        payload.exp = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    return encode(payload.model_dump(exclude_none=True), settings.jwt_secret, algorithm=settings.jwt_algorithm)

def verify_token(token: Optional[str]) -> AuthTokenPayload:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized: No token provided")
    try:
        payload = decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return AuthTokenPayload(**payload)
    except (JWTError, ValidationError) as e:
        logger.warning("rejected token: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized: Invalid token")
