from typing import Optional
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from api.config import get_db
from api.models.models import User as DbUser, utcnow
from api.schemas.auth_schemas import AuthTokenPayload
from api.schemas.user_schemas import User
from api.utils.jwt import verify_token, get_password_hash, create_access_token, verify_password

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user or fail with 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: No token provided",
        )

    payload = verify_token(credentials.credentials)
    user = db.query(DbUser).filter(DbUser.id == payload.sub).first()
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: User not found"
        )
    return User(id=user.id, username=user.username, email=user.email, full_name=user.full_name)


def issue_token(user: DbUser) -> str:
    return create_access_token(AuthTokenPayload(sub=user.id, username=user.username))


def get_user_by_email(email: str, db: Session) -> DbUser | None:
    return db.query(DbUser).filter(DbUser.email == email.strip().lower()).first()


def get_user_by_username(username: str, db: Session) -> DbUser | None:
    return db.query(DbUser).filter(DbUser.username == username).first()


def create_user(username: str, email: str, password: str, db: Session, full_name: Optional[str] = None) -> DbUser:
    user = DbUser(
        username=username,
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        full_name=full_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(email: str, password: str, db: Session) -> DbUser | None:
    user = get_user_by_email(email, db)
    if not user or not user.is_active or not verify_password(password, user.hashed_password):
        return None
    user.last_login = utcnow()
    db.commit()
    db.refresh(user)
    return user
