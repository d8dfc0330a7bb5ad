import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

import db_models
from core.exceptions import (
    FieldValidationError,
    SelfShareError,
    ShareConflictError,
    ShareNotFoundError,
    ShareNotInListError,
    UserNotRegisteredError,
)
from core.permissions import ListPermission, SharePermission, require_list_access

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_permission(permission: SharePermission | str) -> SharePermission:
    try:
        return SharePermission(permission)
    except ValueError:
        raise FieldValidationError(
            field="permission", message='Permission must be either "view" or "edit"'
        )


class ShareService:
    """
    Grants of view/edit access on a list to other registered users.
    Every operation is owner-only and checks ownership before anything else.
    """

    def __init__(self, db_session: Session):
        self.db_session = db_session

    def grant_share(
        self,
        task_list_id: int,
        owner_id: int,
        email: str,
        permission: SharePermission | str,
    ) -> db_models.TaskListShare:
        """Share a task list with another user"""
        self._require_owner(
            task_list_id, owner_id, "Only the owner can share the task list"
        )
        permission = validate_permission(permission)

        # Look up user to share with
        email = normalize_email(email)
        shared_with_user = (
            self.db_session.query(db_models.User)
            .filter(db_models.User.email == email)
            .first()
        )

        if not shared_with_user:
            logger.warning(
                f"Share failed: no registered user for task_list_id={task_list_id}"
            )
            raise UserNotRegisteredError(email=email)

        target_user_id: int = shared_with_user.id  # type: ignore

        # Can't share with yourself
        if target_user_id == owner_id:
            raise SelfShareError(task_list_id=task_list_id)

        # Check if already shared
        if self._find_share(task_list_id, target_user_id) is not None:
            raise ShareConflictError(
                task_list_id=task_list_id, user_id=target_user_id
            )

        share = db_models.TaskListShare(
            task_list_id=task_list_id,
            user_id=target_user_id,
            permission=permission.value,
        )
        self.db_session.add(share)

        # A concurrent grant for the same pair loses at the unique constraint
        try:
            self.db_session.commit()
        except IntegrityError:
            self.db_session.rollback()
            self._raise_for_failed_grant(task_list_id, owner_id, target_user_id, email)

        self.db_session.refresh(share)

        logger.info(
            f"Task list shared: task_list_id={task_list_id}, share_id={share.id}, "
            f"user_id={target_user_id}, permission={permission.value}"
        )
        return share

    def list_shares(
        self, task_list_id: int, owner_id: int
    ) -> list[db_models.TaskListShare]:
        """Get the users this list is shared with (owner only)"""
        self._require_owner(
            task_list_id, owner_id, "Only the owner can view shared users"
        )

        return (
            self.db_session.query(db_models.TaskListShare)
            .options(joinedload(db_models.TaskListShare.user))
            .filter(db_models.TaskListShare.task_list_id == task_list_id)
            .order_by(
                db_models.TaskListShare.created_at.desc(),
                db_models.TaskListShare.id.desc(),
            )
            .all()
        )

    def update_share_permission(
        self,
        task_list_id: int,
        owner_id: int,
        share_id: int,
        permission: SharePermission | str,
    ) -> db_models.TaskListShare:
        self._require_owner(
            task_list_id, owner_id, "Only the owner can update permissions"
        )
        permission = validate_permission(permission)
        share = self._get_share_in_list(task_list_id, share_id)

        share.permission = permission.value  # type: ignore
        self.db_session.commit()
        self.db_session.refresh(share)

        logger.info(
            f"Share permission updated: share_id={share_id}, permission={permission.value}"
        )
        return share

    def revoke_share(self, task_list_id: int, owner_id: int, share_id: int) -> None:
        """Remove a user's access to a task list"""
        self._require_owner(task_list_id, owner_id, "Only the owner can remove access")
        share = self._get_share_in_list(task_list_id, share_id)

        self.db_session.delete(share)
        self.db_session.commit()

        logger.info(f"Share revoked: share_id={share_id}, task_list_id={task_list_id}")

    def _require_owner(self, task_list_id: int, owner_id: int, message: str):
        return require_list_access(
            self.db_session,
            task_list_id,
            owner_id,
            ListPermission.OWNER,
            message=message,
        )

    def _raise_for_failed_grant(
        self, task_list_id: int, owner_id: int, target_user_id: int, email: str
    ):
        """
        A rejected insert is only a conflict if both rows it points at still
        exist. A list or user deleted mid-grant is reported as missing.
        """
        self._require_owner(
            task_list_id, owner_id, "Only the owner can share the task list"
        )

        target_exists = (
            self.db_session.query(db_models.User.id)
            .filter(db_models.User.id == target_user_id)
            .first()
        )
        if target_exists is None:
            logger.warning(
                f"Share target user_id={target_user_id} deleted during grant "
                f"on task_list_id={task_list_id}"
            )
            raise UserNotRegisteredError(email=email)

        logger.warning(
            f"Concurrent share detected: task_list_id={task_list_id}, "
            f"user_id={target_user_id}"
        )
        raise ShareConflictError(task_list_id=task_list_id, user_id=target_user_id)

    def _find_share(
        self, task_list_id: int, user_id: int
    ) -> db_models.TaskListShare | None:
        return (
            self.db_session.query(db_models.TaskListShare)
            .filter(
                db_models.TaskListShare.task_list_id == task_list_id,
                db_models.TaskListShare.user_id == user_id,
            )
            .first()
        )

    def _get_share_in_list(
        self, task_list_id: int, share_id: int
    ) -> db_models.TaskListShare:
        share = (
            self.db_session.query(db_models.TaskListShare)
            .options(joinedload(db_models.TaskListShare.user))
            .filter(db_models.TaskListShare.id == share_id)
            .first()
        )

        if not share:
            raise ShareNotFoundError(share_id=share_id)

        if share.task_list_id != task_list_id:  # type: ignore
            logger.warning(
                f"Share share_id={share_id} belongs to task_list_id={share.task_list_id}, "
                f"not {task_list_id}"
            )
            raise ShareNotInListError(share_id=share_id, task_list_id=task_list_id)

        return share
