"""
Custom exceptions for the Shared Task Lists API.
These exceptions represent specific logic errors
that can be converted to appropriate HTTP responses.

Each concrete error derives from one category base class, and main.py
registers one handler per category.
"""


# --- Categories ---


class FieldValidationError(Exception):
    """Raised when a field value is rejected by the core after schema validation"""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.message)


class ForbiddenError(Exception):
    """Caller is authenticated but their permission on the list is too low"""


class NotFoundError(Exception):
    """Referenced entity does not exist"""


class ConflictError(Exception):
    """Write would violate a uniqueness rule"""


class InvalidOperationError(Exception):
    """Request is well-formed but semantically disallowed"""


class InvalidReferenceError(Exception):
    """Entity exists but does not belong to the parent named in the path"""


# --- Authentication ---


class DuplicateUserError(FieldValidationError):
    """Raised when trying to register with an email that is already taken"""

    def __init__(self, field: str, value: str):
        self.value = value
        super().__init__(field, f"User with this {field} already exists")


class InvalidCredentialsError(Exception):
    """Raised when login credentials are incorrect"""

    def __init__(self):
        self.message = "Invalid email or password"
        super().__init__(self.message)


# --- Access control ---


class ListAccessDeniedError(ForbiddenError):
    """Raised when a user's tier on a task list is below what the operation needs"""

    def __init__(self, task_list_id: int, user_id: int, message: str | None = None):
        self.task_list_id = task_list_id
        self.user_id = user_id
        self.message = message or "You do not have access to this task list"
        super().__init__(self.message)


# --- Missing entities ---


class TaskListNotFoundError(NotFoundError):
    def __init__(self, task_list_id: int):
        self.task_list_id = task_list_id
        self.message = "Task list not found"
        super().__init__(self.message)


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: int):
        self.task_id = task_id
        self.message = "Task not found"
        super().__init__(self.message)


class ShareNotFoundError(NotFoundError):
    def __init__(self, share_id: int):
        self.share_id = share_id
        self.message = "Share not found"
        super().__init__(self.message)


class UserNotRegisteredError(NotFoundError):
    """Share target has no account; the owner must ask them to register first"""

    def __init__(self, email: str):
        self.email = email
        self.message = "User with this email is not registered in the system"
        super().__init__(self.message)


# --- Sharing rules ---


class ShareConflictError(ConflictError):
    """Raised when a list is already shared with the target user"""

    def __init__(self, task_list_id: int, user_id: int):
        self.task_list_id = task_list_id
        self.user_id = user_id
        self.message = (
            "Task list is already shared with this user; update the existing share instead"
        )
        super().__init__(self.message)


class SelfShareError(InvalidOperationError):
    def __init__(self, task_list_id: int):
        self.task_list_id = task_list_id
        self.message = "You cannot share a task list with yourself"
        super().__init__(self.message)


# --- Cross-list references ---


class TaskNotInListError(InvalidReferenceError):
    def __init__(self, task_id: int, task_list_id: int):
        self.task_id = task_id
        self.task_list_id = task_list_id
        self.message = "Task does not belong to this task list"
        super().__init__(self.message)


class ShareNotInListError(InvalidReferenceError):
    def __init__(self, share_id: int, task_list_id: int):
        self.share_id = share_id
        self.task_list_id = task_list_id
        self.message = "Share does not belong to this task list"
        super().__init__(self.message)
