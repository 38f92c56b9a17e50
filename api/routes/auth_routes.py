from fastapi import APIRouter, HTTPException, status, Depends
from sqlalchemy.orm import Session

from api.config import get_db
from api.schemas.auth_schemas import LoginRequest, RegisterRequest, LoginData
from api.schemas.response_schemas import ok
from api.schemas.user_schemas import User
from api.utils.auth import (
    authenticate_user,
    create_user,
    get_current_user,
    get_user_by_email,
    get_user_by_username,
    issue_token,
)
from api.utils.common import user_response
from api.utils.logger import configure_logging

logger = configure_logging()

auth_routes = APIRouter()


@auth_routes.post("/register", status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)) -> dict:
    """Register a new user."""
    if get_user_by_email(request.email, db):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )
    if get_user_by_username(request.username, db):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already taken"
        )

    user = create_user(request.username, request.email, request.password, db, full_name=request.full_name)
    logger.info("user registered user_id=%s", user.id)
    return ok(user_response(user), message="Registration successful")


@auth_routes.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)) -> dict:
    """Authenticate user and return a bearer token."""
    user = authenticate_user(request.email, request.password, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )
    return ok(LoginData(token=issue_token(user), user=user_response(user)), message="Login successful")


@auth_routes.get("/me")
def get_current_user_info(current_user: User = Depends(get_current_user)) -> dict:
    """Protected route to test authentication - returns current user info."""
    return ok(current_user)
