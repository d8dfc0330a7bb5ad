from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

import db_models
from core.security import verify_access_token
from db_config import get_db
from services.share_service import ShareService
from services.task_list_service import TaskListService
from services.task_service import TaskService


# Custom HTTPBearer that raises 401 instead of 403
class HTTPBearerAuth(HTTPBearer):
    async def __call__(
        self, request: Request
    ) -> Optional[HTTPAuthorizationCredentials]:
        try:
            return await super().__call__(request)
        except HTTPException:
            # Override the default 403 with 401
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="No token provided. Please authenticate.",
                headers={"WWW-Authenticate": "Bearer"},
            )


# This tells FastAPI to look for "Authorization: Bearer <token>" header
security = HTTPBearerAuth()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db_session: Session = Depends(get_db),
) -> db_models.User:
    """
    Dependency that extracts and verifies JWT token from request
    Returns the authenticated User object.
    Raises 401 if token is missing, invalid, or user not found.
    Also stores user in request.state for rate limiting.
    """
    payload = verify_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid or expired token. Please login again.")

    subject = payload.get("sub")
    try:
        user_id = int(subject)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload")

    user = db_session.query(db_models.User).filter(db_models.User.id == user_id).first()

    if user is None:
        raise _unauthorized("User not found. Please login again.")

    request.state.user = user

    return user


# Per-request services, each bound to the request's database session


def get_task_list_service(db_session: Session = Depends(get_db)) -> TaskListService:
    return TaskListService(db_session)


def get_task_service(db_session: Session = Depends(get_db)) -> TaskService:
    return TaskService(db_session)


def get_share_service(db_session: Session = Depends(get_db)) -> ShareService:
    return ShareService(db_session)
