import logging

from fastapi import APIRouter, Depends, Request, status

import db_models
from core.rate_limit_config import SHARE_LIMIT, limiter
from dependencies import get_current_user, get_share_service
from schemas.sharing import (
    TaskListShareCreate,
    TaskListShareResponse,
    TaskListShares,
    TaskListShareUpdate,
)
from services.share_service import ShareService

sharing_router = APIRouter(prefix="/shares", tags=["sharing"])
logger = logging.getLogger(__name__)


@sharing_router.post(
    "/{task_list_id}",
    response_model=TaskListShareResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(SHARE_LIMIT)
def share_task_list(
    request: Request,  # pylint: disable=unused-argument
    task_list_id: int,
    share_data: TaskListShareCreate,
    service: ShareService = Depends(get_share_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Share a task list with another registered user (owner only)"""
    return service.grant_share(
        task_list_id,
        current_user.id,  # type: ignore
        email=share_data.email,
        permission=share_data.permission,
    )


@sharing_router.get("/{task_list_id}", response_model=TaskListShares)
def get_task_list_shares(
    task_list_id: int,
    service: ShareService = Depends(get_share_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Get a list of users this task list is shared with (owner only)"""
    return {"shares": service.list_shares(task_list_id, current_user.id)}  # type: ignore


@sharing_router.put("/{task_list_id}/{share_id}", response_model=TaskListShareResponse)
def update_share_permission(
    task_list_id: int,
    share_id: int,
    share_update: TaskListShareUpdate,
    service: ShareService = Depends(get_share_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Update permission level"""
    return service.update_share_permission(
        task_list_id, current_user.id, share_id, share_update.permission  # type: ignore
    )


@sharing_router.delete("/{task_list_id}/{share_id}")
def revoke_share(
    task_list_id: int,
    share_id: int,
    service: ShareService = Depends(get_share_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Remove a user's access to a task list"""
    service.revoke_share(task_list_id, current_user.id, share_id)  # type: ignore
    return {"message": "Access removed successfully"}
