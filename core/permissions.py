import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import and_
from sqlalchemy.orm import Session

import db_models
from core.exceptions import ListAccessDeniedError, TaskListNotFoundError

logger = logging.getLogger(__name__)


class ListPermission(Enum):
    NONE = "none"
    VIEW = "view"
    EDIT = "edit"
    OWNER = "owner"


class SharePermission(str, Enum):
    """Levels an owner can grant; stored as plain strings on TaskListShare"""

    VIEW = "view"
    EDIT = "edit"


# Define permission hierarchy
PERMISSION_LEVELS = {
    ListPermission.NONE: 0,
    ListPermission.VIEW: 1,
    ListPermission.EDIT: 2,
    ListPermission.OWNER: 3,
}

SHARE_TO_LIST_PERMISSION = {
    SharePermission.VIEW: ListPermission.VIEW,
    SharePermission.EDIT: ListPermission.EDIT,
}


@dataclass
class ListAccess:
    """Result of resolving a user's tier on a task list"""

    task_list: db_models.TaskList
    permission: ListPermission

    @property
    def is_owner(self) -> bool:
        return self.permission is ListPermission.OWNER

    @property
    def can_edit(self) -> bool:
        return has_permission(self.permission, ListPermission.EDIT)


def has_permission(permission: ListPermission, min_permission: ListPermission) -> bool:
    return PERMISSION_LEVELS[permission] >= PERMISSION_LEVELS[min_permission]


def permission_from_share(stored_permission: str) -> ListPermission:
    """
    Map a stored share permission onto a list tier.
    Raises ValueError for anything outside the closed set, so a corrupt row
    never silently grants access.
    """
    return SHARE_TO_LIST_PERMISSION[SharePermission(stored_permission)]


def resolve_list_access(
    db_session: Session, task_list_id: int, user_id: int
) -> ListAccess:
    """
    Determine what permission a user has on a task list.

    The list and the caller's share are read in a single statement so the
    owner check and the share lookup see the same snapshot.

    Returns:
        OWNER - User owns the list
        EDIT - List is shared with user with edit permission
        VIEW - List is shared with user with view permission
        NONE - User has no access
    Raises:
        TaskListNotFoundError if the list does not exist
    """
    row = (
        db_session.query(db_models.TaskList, db_models.TaskListShare.permission)
        .outerjoin(
            db_models.TaskListShare,
            and_(
                db_models.TaskListShare.task_list_id == db_models.TaskList.id,
                db_models.TaskListShare.user_id == user_id,
            ),
        )
        .filter(db_models.TaskList.id == task_list_id)
        .first()
    )

    if row is None:
        raise TaskListNotFoundError(task_list_id=task_list_id)

    task_list, share_permission = row

    # Owner has full access
    if task_list.owner_id == user_id:  # type: ignore
        return ListAccess(task_list=task_list, permission=ListPermission.OWNER)

    if share_permission is None:
        return ListAccess(task_list=task_list, permission=ListPermission.NONE)

    return ListAccess(
        task_list=task_list, permission=permission_from_share(share_permission)
    )


def require_list_access(
    db_session: Session,
    task_list_id: int,
    user_id: int,
    min_permission: ListPermission = ListPermission.VIEW,
    message: str | None = None,
    hide_missing: bool = False,
) -> ListAccess:
    """
    Raise exception if user doesn't have required permission.

    With hide_missing=True a missing list is reported as access denied
    instead of not found.

    Usage:
        require_list_access(db_session, list_id, current_user.id, ListPermission.EDIT)
    """
    try:
        access = resolve_list_access(db_session, task_list_id, user_id)
    except TaskListNotFoundError:
        if not hide_missing:
            raise
        logger.warning(
            f"Access check on missing task_list_id={task_list_id} by user_id={user_id}"
        )
        raise ListAccessDeniedError(task_list_id=task_list_id, user_id=user_id)

    if access.permission is ListPermission.NONE:
        # No relation to the list at all gets the generic message
        raise ListAccessDeniedError(task_list_id=task_list_id, user_id=user_id)

    if not has_permission(access.permission, min_permission):
        raise ListAccessDeniedError(
            task_list_id=task_list_id, user_id=user_id, message=message
        )

    return access
