import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import db_models
from core import exceptions
from core.rate_limit_config import LOGIN_LIMIT, REGISTER_LIMIT, limiter
from core.security import create_access_token, hash_password, verify_password
from db_config import get_db
from schemas.auth import AuthResponse, UserCreate, UserLogin

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit(REGISTER_LIMIT)
def register_user(
    request: Request,  # pylint: disable=unused-argument
    user_data: UserCreate,
    db_session: Session = Depends(get_db),
):
    """
    Register a new user account
    - Validates the email is unique (stored lower-cased)
    - Hashes password before storing
    - Returns created user (without password) and an access token
    - Rate limited per IP (REGISTER_LIMIT)
    """

    logger.info(f"Registration attempt for email: {user_data.email}")

    existing_user = (
        db_session.query(db_models.User)
        .filter(db_models.User.email == user_data.email)
        .first()
    )
    if existing_user:
        logger.warning(f"Registration failed: email '{user_data.email}' already exists")
        raise exceptions.DuplicateUserError(field="email", value=user_data.email)

    new_user = db_models.User(
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
    )

    db_session.add(new_user)
    try:
        db_session.commit()
    except IntegrityError:
        # Lost a race with another registration for the same email
        db_session.rollback()
        raise exceptions.DuplicateUserError(field="email", value=user_data.email)
    db_session.refresh(new_user)

    logger.info(
        f"User registered successfully: email='{new_user.email}', user_id={new_user.id}"
    )

    return {
        "message": "User registered successfully",
        "user": new_user,
        "token": create_access_token(new_user.id),  # type: ignore
    }


@router.post("/login", response_model=AuthResponse)
@limiter.limit(LOGIN_LIMIT)
def login_user(
    request: Request,  # pylint: disable=unused-argument
    login_data: UserLogin,
    db_session: Session = Depends(get_db),
):
    """
    Login with email and password
    - Validates credentials
    - Returns JWT access token
    - Token must be included in Authorization header for protected routes
    - Rate limited per IP (LOGIN_LIMIT)
    """

    logger.info(f"Login attempt for email: {login_data.email}")

    user = (
        db_session.query(db_models.User)
        .filter(db_models.User.email == login_data.email)
        .first()
    )

    # Check if user exists and if password is correct
    if not user or not verify_password(login_data.password, user.hashed_password):  # type: ignore
        logger.warning(f"Login failed for email: {login_data.email} (invalid credentials)")
        raise exceptions.InvalidCredentialsError()

    logger.info(f"Login successful for user_id={user.id}")

    return {
        "message": "Login successful",
        "user": user,
        "token": create_access_token(user.id),  # type: ignore
    }
