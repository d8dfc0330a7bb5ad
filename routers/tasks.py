import logging

from fastapi import APIRouter, Depends, status

import db_models
from dependencies import get_current_user, get_task_service
from schemas.task import Task, TaskCreate, TaskListTasks, TaskStatusUpdate, TaskUpdate
from services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)


# --- Endpoints ---


@router.get("/{task_list_id}", response_model=TaskListTasks)
def get_tasks(
    task_list_id: int,
    service: TaskService = Depends(get_task_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Retrieve all tasks in a list, newest first, with the caller's permission"""
    tasks, permission = service.list_tasks(task_list_id, current_user.id)  # type: ignore
    return {"tasks": tasks, "permission": permission.value}


@router.post(
    "/{task_list_id}", status_code=status.HTTP_201_CREATED, response_model=Task
)
def create_task(
    task_list_id: int,
    task_data: TaskCreate,
    service: TaskService = Depends(get_task_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Create a new task in a list (owner or edit permission)"""
    return service.create_task(
        task_list_id,
        current_user.id,  # type: ignore
        title=task_data.title,
        description=task_data.description,
        status=task_data.status,
    )


@router.put("/{task_list_id}/{task_id}", response_model=Task)
def update_task(
    task_list_id: int,
    task_id: int,
    task_data: TaskUpdate,
    service: TaskService = Depends(get_task_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Update a task; fields left out of the body keep their value"""

    # Get only the fields that were provided
    update_data = task_data.model_dump(exclude_unset=True)

    return service.update_task(
        task_list_id, task_id, current_user.id, update_data  # type: ignore
    )


@router.patch("/{task_list_id}/{task_id}/status", response_model=Task)
def update_task_status(
    task_list_id: int,
    task_id: int,
    status_data: TaskStatusUpdate,
    service: TaskService = Depends(get_task_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Quick status change"""
    return service.update_task_status(
        task_list_id, task_id, current_user.id, status_data.status  # type: ignore
    )


@router.delete("/{task_list_id}/{task_id}")
def delete_task(
    task_list_id: int,
    task_id: int,
    service: TaskService = Depends(get_task_service),
    current_user: db_models.User = Depends(get_current_user),
):
    """Delete a task (owner or edit permission)"""
    service.delete_task(task_list_id, task_id, current_user.id)  # type: ignore
    return {"message": "Task deleted successfully"}
