"""
Error types raised by the task manager services.

A missing user or preference is not an error: lookups return ``None``.
"""


class TaskManagerError(Exception):
    """Base class for task manager errors."""


class ConfigurationError(TaskManagerError):
    """Raised when a configuration value cannot be interpreted."""


class ValidationError(TaskManagerError):
    """Raised when user input is rejected before it reaches storage."""


class DuplicateUserError(TaskManagerError):
    """Raised when registering an email that already belongs to a user."""

    def __init__(self, email: str):
        super().__init__(f"User with email {email} already exists")
        self.email = email


class TaskNotFoundError(TaskManagerError):
    """Raised when updating a task that no longer exists."""

    def __init__(self, task_id: int):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class NotAuthenticatedError(TaskManagerError):
    """Raised when a session operation needs a logged-in user."""

    def __init__(self, message: str = "No user logged in"):
        super().__init__(message)


class StorageFailure(TaskManagerError):
    """Raised after a rolled back transaction or a failed connection."""
