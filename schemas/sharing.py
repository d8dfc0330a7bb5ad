from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from core.permissions import SharePermission
from .auth import UserSummary


class TaskListShareCreate(BaseModel):
    """Request to share a task list"""

    email: EmailStr  # Email of the registered user to share with
    permission: SharePermission

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class TaskListShareUpdate(BaseModel):
    """Request to update a share permission"""

    permission: SharePermission


class SharedUser(UserSummary):
    created_at: Optional[datetime] = None


class TaskListShareResponse(BaseModel):
    """Response showing a share"""

    id: int
    task_list_id: int
    user_id: int
    permission: SharePermission
    created_at: datetime
    updated_at: Optional[datetime] = None
    user: SharedUser

    model_config = ConfigDict(from_attributes=True)


class TaskListShares(BaseModel):
    shares: list[TaskListShareResponse]
