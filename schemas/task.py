from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from db_models import TaskStatus


class TaskCreate(BaseModel):
    """Schema for creating a new task"""

    title: str = Field(min_length=1, max_length=200)  # Can't be empty
    description: Optional[str] = Field(default=None, max_length=1000)
    status: TaskStatus = TaskStatus.PENDING

    # Clean up leading/trailing whitespace
    model_config = ConfigDict(str_strip_whitespace=True)


class TaskUpdate(BaseModel):
    """
    Schema for updating a task.
    Only fields sent in the request are applied (read with exclude_unset).
    Sending description as null clears it; title can't be cleared.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[TaskStatus] = None

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    @field_validator("title")
    @classmethod
    def title_not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("Title cannot be empty")
        return value

    @field_validator("status")
    @classmethod
    def status_not_null(cls, value: Optional[TaskStatus]) -> TaskStatus:
        if value is None:
            raise ValueError("Invalid status")
        return value


class TaskStatusUpdate(BaseModel):
    """Schema for the quick status toggle"""

    status: TaskStatus


class Task(BaseModel):
    """Schema for task responses"""

    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    task_list_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TaskListTasks(BaseModel):
    """Tasks of one list plus the caller's permission on it"""

    tasks: list[Task]
    permission: str
