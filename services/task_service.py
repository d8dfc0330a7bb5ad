import logging
from typing import Any

from sqlalchemy.orm import Session

import db_models
from core.exceptions import FieldValidationError, TaskNotFoundError, TaskNotInListError
from core.permissions import ListPermission, require_list_access
from db_models import TaskStatus
from services.task_list_service import validate_title

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 1000
UPDATABLE_FIELDS = ("title", "description", "status")


def validate_description(description: str | None) -> str | None:
    if description is None:
        return None
    description = description.strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise FieldValidationError(
            field="description",
            message=f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters",
        )
    return description or None


def validate_status(status: TaskStatus | str) -> str:
    try:
        return TaskStatus(status).value
    except ValueError:
        raise FieldValidationError(field="status", message="Invalid status")


class TaskService:
    """
    Task CRUD inside a list.

    Reads need any access to the list; writes need owner or edit.
    A missing list is reported as access denied on these paths.
    """

    def __init__(self, db_session: Session):
        self.db_session = db_session

    def list_tasks(
        self, task_list_id: int, user_id: int
    ) -> tuple[list[db_models.Task], ListPermission]:
        logger.info(f"Retrieving tasks of task_list_id={task_list_id} for user_id={user_id}")

        access = require_list_access(
            self.db_session,
            task_list_id,
            user_id,
            ListPermission.VIEW,
            hide_missing=True,
        )

        tasks = (
            self.db_session.query(db_models.Task)
            .filter(db_models.Task.task_list_id == task_list_id)
            .order_by(db_models.Task.created_at.desc(), db_models.Task.id.desc())
            .all()
        )

        logger.info(
            f"Successfully retrieved {len(tasks)} tasks for task_list_id={task_list_id}"
        )
        return tasks, access.permission

    def create_task(
        self,
        task_list_id: int,
        user_id: int,
        title: str,
        description: str | None = None,
        status: TaskStatus | str | None = None,
    ) -> db_models.Task:
        logger.info(f"Creating task in task_list_id={task_list_id} for user_id={user_id}")

        self._require_edit(task_list_id, user_id, "You need edit permission to add tasks")

        new_task = db_models.Task(
            title=validate_title(title),
            description=validate_description(description),
            status=validate_status(status or TaskStatus.PENDING),
            task_list_id=task_list_id,
        )
        self.db_session.add(new_task)
        self.db_session.commit()
        self.db_session.refresh(new_task)

        logger.info(
            f"Task created successfully: task_id={new_task.id}, task_list_id={task_list_id}"
        )
        return new_task

    def update_task(
        self, task_list_id: int, task_id: int, user_id: int, changes: dict[str, Any]
    ) -> db_models.Task:
        """
        Apply a partial update.
        Only keys present in `changes` are touched. description=None clears the
        description; title can never be cleared.
        """
        logger.info(f"Updating task_id={task_id} in task_list_id={task_list_id}")

        self._require_edit(
            task_list_id, user_id, "You need edit permission to update tasks"
        )
        task = self._get_task_in_list(task_list_id, task_id)

        unknown_fields = set(changes) - set(UPDATABLE_FIELDS)
        if unknown_fields:
            raise FieldValidationError(
                field=sorted(unknown_fields)[0], message="Field cannot be updated"
            )
        if not changes:
            raise FieldValidationError(
                field="body", message="No fields provided for update"
            )

        if "title" in changes:
            task.title = validate_title(changes["title"])  # type: ignore
        if "description" in changes:
            task.description = validate_description(changes["description"])  # type: ignore
        if "status" in changes:
            task.status = validate_status(changes["status"])  # type: ignore

        self.db_session.commit()
        self.db_session.refresh(task)

        logger.info(
            f"Task updated successfully: task_id={task_id}, fields={sorted(changes)}"
        )
        return task

    def update_task_status(
        self, task_list_id: int, task_id: int, user_id: int, status: TaskStatus | str
    ) -> db_models.Task:
        logger.info(
            f"Updating status of task_id={task_id} in task_list_id={task_list_id} to {status}"
        )

        self._require_edit(
            task_list_id, user_id, "You need edit permission to update task status"
        )
        task = self._get_task_in_list(task_list_id, task_id)

        task.status = validate_status(status)  # type: ignore
        self.db_session.commit()
        self.db_session.refresh(task)

        return task

    def delete_task(self, task_list_id: int, task_id: int, user_id: int) -> None:
        logger.info(f"Deleting task_id={task_id} from task_list_id={task_list_id}")

        self._require_edit(
            task_list_id, user_id, "You need edit permission to delete tasks"
        )
        task = self._get_task_in_list(task_list_id, task_id)

        self.db_session.delete(task)
        self.db_session.commit()

        logger.info(f"Task deleted successfully: task_id={task_id}, user_id={user_id}")

    def _require_edit(self, task_list_id: int, user_id: int, message: str):
        return require_list_access(
            self.db_session,
            task_list_id,
            user_id,
            ListPermission.EDIT,
            message=message,
            hide_missing=True,
        )

    def _get_task_in_list(self, task_list_id: int, task_id: int) -> db_models.Task:
        task = (
            self.db_session.query(db_models.Task)
            .filter(db_models.Task.id == task_id)
            .first()
        )

        if not task:
            logger.warning(f"Task not found: task_id={task_id}")
            raise TaskNotFoundError(task_id=task_id)

        if task.task_list_id != task_list_id:  # type: ignore
            logger.warning(
                f"Task task_id={task_id} belongs to task_list_id={task.task_list_id}, "
                f"not {task_list_id}"
            )
            raise TaskNotInListError(task_id=task_id, task_list_id=task_list_id)

        return task
