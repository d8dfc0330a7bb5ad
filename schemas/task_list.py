from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .auth import UserSummary
from .sharing import TaskListShareResponse
from .task import Task


class TaskListCreate(BaseModel):
    """Schema for creating a task list"""

    title: str = Field(min_length=1, max_length=200)

    model_config = ConfigDict(str_strip_whitespace=True)


class TaskListUpdate(BaseModel):
    """Schema for renaming a task list"""

    title: str = Field(min_length=1, max_length=200)

    model_config = ConfigDict(str_strip_whitespace=True)


class TaskList(BaseModel):
    """Task list with its tasks, shares and the caller's permission"""

    id: int
    title: str
    owner_id: int
    owner: UserSummary
    created_at: datetime
    updated_at: Optional[datetime] = None
    tasks: list[Task] = []
    shares: list[TaskListShareResponse] = []
    permission: str  # Your permission level
    is_owner: bool  # Are you the owner?

    model_config = ConfigDict(from_attributes=True)


class AccessibleTaskLists(BaseModel):
    owned: list[TaskList]
    shared: list[TaskList]
    all: list[TaskList]
