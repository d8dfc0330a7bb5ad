import logging

from sqlalchemy.orm import Session, selectinload

import db_models
from core.exceptions import FieldValidationError
from core.permissions import (
    ListAccess,
    ListPermission,
    permission_from_share,
    require_list_access,
)

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200


def validate_title(title: str | None) -> str:
    """Strip and check a title; used for both lists and tasks"""
    cleaned = (title or "").strip()
    if not cleaned:
        raise FieldValidationError(field="title", message="Title is required")
    if len(cleaned) > TITLE_MAX_LENGTH:
        raise FieldValidationError(
            field="title",
            message=f"Title must be at most {TITLE_MAX_LENGTH} characters",
        )
    return cleaned


class TaskListService:
    """Lifecycle of task lists. Every mutation is owner-only."""

    def __init__(self, db_session: Session):
        self.db_session = db_session

    def list_accessible(self, user_id: int) -> dict[str, list[ListAccess]]:
        """Lists the user owns plus lists shared with them, newest first"""
        logger.info(f"Retrieving accessible task lists for user_id={user_id}")

        owned_lists = (
            self.db_session.query(db_models.TaskList)
            .options(*self._embedded())
            .filter(db_models.TaskList.owner_id == user_id)
            .order_by(db_models.TaskList.created_at.desc(), db_models.TaskList.id.desc())
            .all()
        )

        shares = (
            self.db_session.query(db_models.TaskListShare)
            .options(
                selectinload(db_models.TaskListShare.task_list).options(
                    *self._embedded()
                )
            )
            .filter(db_models.TaskListShare.user_id == user_id)
            .order_by(
                db_models.TaskListShare.created_at.desc(),
                db_models.TaskListShare.id.desc(),
            )
            .all()
        )

        owned = [
            ListAccess(task_list=task_list, permission=ListPermission.OWNER)
            for task_list in owned_lists
        ]
        shared = [
            ListAccess(
                task_list=share.task_list,
                permission=permission_from_share(share.permission),  # type: ignore
            )
            for share in shares
        ]

        logger.info(
            f"Found {len(owned)} owned and {len(shared)} shared task lists for user_id={user_id}"
        )
        return {"owned": owned, "shared": shared, "all": owned + shared}

    def get_task_list(self, task_list_id: int, user_id: int) -> ListAccess:
        logger.info(f"Fetching task_list_id={task_list_id} for user_id={user_id}")
        return require_list_access(
            self.db_session, task_list_id, user_id, ListPermission.VIEW
        )

    def create_task_list(self, title: str, owner_id: int) -> ListAccess:
        title = validate_title(title)
        logger.info(f"Creating task list for user_id={owner_id}: title='{title}'")

        task_list = db_models.TaskList(title=title, owner_id=owner_id)
        self.db_session.add(task_list)
        self.db_session.commit()
        self.db_session.refresh(task_list)

        logger.info(
            f"Task list created successfully: task_list_id={task_list.id}, user_id={owner_id}"
        )
        return ListAccess(task_list=task_list, permission=ListPermission.OWNER)

    def update_task_list(self, task_list_id: int, user_id: int, title: str) -> ListAccess:
        logger.info(f"Updating task_list_id={task_list_id} for user_id={user_id}")

        access = require_list_access(
            self.db_session,
            task_list_id,
            user_id,
            ListPermission.OWNER,
            message="Only the owner can update the task list",
        )

        access.task_list.title = validate_title(title)  # type: ignore
        self.db_session.commit()
        self.db_session.refresh(access.task_list)

        logger.info(
            f"Task list updated successfully: task_list_id={task_list_id}, user_id={user_id}"
        )
        return access

    def delete_task_list(self, task_list_id: int, user_id: int) -> None:
        """Delete a list together with all of its tasks and shares"""
        logger.info(f"Deleting task_list_id={task_list_id} for user_id={user_id}")

        access = require_list_access(
            self.db_session,
            task_list_id,
            user_id,
            ListPermission.OWNER,
            message="Only the owner can delete the task list",
        )

        self.db_session.delete(access.task_list)
        self.db_session.commit()

        logger.info(
            f"Task list deleted successfully: task_list_id={task_list_id}, user_id={user_id}"
        )

    @staticmethod
    def _embedded():
        return (
            selectinload(db_models.TaskList.owner),
            selectinload(db_models.TaskList.tasks),
            selectinload(db_models.TaskList.shares).selectinload(
                db_models.TaskListShare.user
            ),
        )
