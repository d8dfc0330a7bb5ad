import logging

from fastapi import APIRouter, Depends, status

import db_models
from core.permissions import ListAccess
from dependencies import get_current_user, get_task_list_service
from schemas.task_list import (
    AccessibleTaskLists,
    TaskList,
    TaskListCreate,
    TaskListUpdate,
)
from services.task_list_service import TaskListService

router = APIRouter(prefix="/tasklists", tags=["task lists"])
logger = logging.getLogger(__name__)


def serialize_task_list(access: ListAccess) -> dict:
    """Attach the caller's permission to a list for the response"""
    task_list = access.task_list
    return {
        "id": task_list.id,
        "title": task_list.title,
        "owner_id": task_list.owner_id,
        "owner": task_list.owner,
        "created_at": task_list.created_at,
        "updated_at": task_list.updated_at,
        "tasks": task_list.tasks,
        "shares": task_list.shares,
        "permission": access.permission.value,
        "is_owner": access.is_owner,
    }


@router.get("", response_model=AccessibleTaskLists)
def get_task_lists(
    service: TaskListService = Depends(get_task_list_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Get every list the user owns or has been given access to"""
    lists = service.list_accessible(current_user.id)  # type: ignore

    return {
        key: [serialize_task_list(access) for access in accesses]
        for key, accesses in lists.items()
    }


@router.get("/{task_list_id}", response_model=TaskList)
def get_task_list(
    task_list_id: int,
    service: TaskListService = Depends(get_task_list_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Retrieve a single task list with its tasks and shares"""
    access = service.get_task_list(task_list_id, current_user.id)  # type: ignore
    return serialize_task_list(access)


@router.post("", response_model=TaskList, status_code=status.HTTP_201_CREATED)
def create_task_list(
    task_list_data: TaskListCreate,
    service: TaskListService = Depends(get_task_list_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Create a new task list owned by the current user"""
    access = service.create_task_list(task_list_data.title, current_user.id)  # type: ignore
    return serialize_task_list(access)


@router.put("/{task_list_id}", response_model=TaskList)
def update_task_list(
    task_list_id: int,
    task_list_data: TaskListUpdate,
    service: TaskListService = Depends(get_task_list_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Rename a task list (owner only)"""
    access = service.update_task_list(
        task_list_id, current_user.id, task_list_data.title  # type: ignore
    )
    return serialize_task_list(access)


@router.delete("/{task_list_id}")
def delete_task_list(
    task_list_id: int,
    service: TaskListService = Depends(get_task_list_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Delete a task list with all its tasks and shares (owner only)"""
    service.delete_task_list(task_list_id, current_user.id)  # type: ignore
    return {"message": "Task list deleted successfully"}
