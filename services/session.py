"""Session state - the logged-in user and the task list shown for them."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from datetime import date

from models.enums import Priority
from services.filtering import compute_stats, filter_tasks, is_blank
from services.repository import TaskRepository
from services.validation import validate_login, validate_registration, validate_task
from shared.errors import NotAuthenticatedError, TaskNotFoundError, ValidationError
from shared.logging_utils import setup_logging
from shared.models import (
    LoginRequest,
    RegisterRequest,
    TaskItem,
    TaskRequest,
    TaskStats,
    UserAccount,
)

logger = setup_logging("task-session")

DEFAULT_PRIORITY_KEY = "defaultTaskPriority"
FILTER_ALL = "All"
STATUS_FILTERS = {FILTER_ALL: None, "Pending": False, "Completed": True}


class TaskSession:
    """State for the single user of a running application instance.

    ``tasks`` mirrors what storage holds for the current view. Storage sends
    no change notifications, so every mutation here resynchronises the list
    explicitly.

    Loads may run off the UI thread. Each load takes a generation number from
    ``begin_load`` and its result is applied by ``apply_load`` only if no newer
    load started in the meantime, so a slow older query never replaces the
    result of a newer one. Task actions that edit the list directly also take
    a generation, so a load started before the action cannot undo it.
    """

    def __init__(self, repository: TaskRepository):
        self.repository = repository
        self.current_user: UserAccount | None = None
        self.tasks: list[TaskItem] = []
        self._generation = 0
        self._lock = threading.Lock()

    # Authentication

    def login(self, request: LoginRequest) -> UserAccount | None:
        """Authenticate and make the user current; ``None`` when credentials don't match."""
        request = validate_login(request)
        user = self.repository.authenticate(request.email, request.password)
        if user is not None:
            self.set_current_user(user)
        return user

    def register(self, request: RegisterRequest) -> UserAccount:
        """Create an account. The new user still has to log in."""
        request = validate_registration(request)
        return self.repository.register(request.email, request.password, request.display_name)

    def logout(self) -> None:
        self.current_user = None
        self._change_tasks(lambda tasks: [])

    def set_current_user(self, user: UserAccount | None) -> None:
        self.current_user = user
        if user is None:
            self._change_tasks(lambda tasks: [])
        else:
            self.load_tasks()

    def require_user(self) -> UserAccount:
        if self.current_user is None:
            raise NotAuthenticatedError()
        return self.current_user

    # Ordered loading

    def begin_load(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def apply_load(self, generation: int, tasks: Sequence[TaskItem]) -> bool:
        """Install a load result unless a newer load has been started since."""
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Discarding stale task load {generation} (current {self._generation})")
                return False
            self.tasks = list(tasks)
            return True

    def _change_tasks(self, change: Callable[[list[TaskItem]], list[TaskItem]]) -> None:
        """Edit the loaded list in place of a reload; loads still in flight become stale."""
        with self._lock:
            self._generation += 1
            self.tasks = change(self.tasks)

    def _reload(self, fetch: Callable[[], list[TaskItem]]) -> list[TaskItem]:
        generation = self.begin_load()
        self.apply_load(generation, fetch())
        return self.tasks

    def load_tasks(self) -> list[TaskItem]:
        user = self.require_user()
        return self._reload(lambda: self.repository.get_tasks_for_user(user.id))

    def load_tasks_by_status(self, completed: bool) -> list[TaskItem]:
        user = self.require_user()
        return self._reload(
            lambda: self.repository.get_tasks_for_user(user.id, completed=completed)
        )

    def load_tasks_by_priority(self, priority: Priority) -> list[TaskItem]:
        user = self.require_user()
        return self._reload(
            lambda: self.repository.get_tasks_for_user(user.id, priority=priority)
        )

    def apply_filters(
        self, priority: str | None = FILTER_ALL, status: str | None = FILTER_ALL
    ) -> list[TaskItem]:
        """
        Reload using the dashboard filter values.

        Args:
            priority: "All" or a priority name (High, Medium, Low)
            status: "All", "Pending" or "Completed"

        Returns:
            The reloaded task list
        """
        user = self.require_user()
        if status is not None and status not in STATUS_FILTERS:
            raise ValidationError(f"Unknown status filter: {status}")
        completed = STATUS_FILTERS.get(status) if status is not None else None

        selected_priority = None
        if priority is not None and priority != FILTER_ALL:
            try:
                selected_priority = Priority(priority)
            except ValueError as e:
                raise ValidationError(f"Unknown priority filter: {priority}") from e

        return self._reload(
            lambda: self.repository.get_tasks_for_user(
                user.id, completed=completed, priority=selected_priority
            )
        )

    def search_tasks(self, search_term: str | None) -> list[TaskItem]:
        """Reload from storage and keep the tasks matching the term.

        A blank term restores the full list from storage, not from memory.
        """
        user = self.require_user()
        if is_blank(search_term):
            return self.load_tasks()
        return self._reload(
            lambda: filter_tasks(self.repository.get_tasks_for_user(user.id), search_term)
        )

    # Task actions

    def add_task(self, request: TaskRequest) -> TaskItem:
        user = self.require_user()
        request = validate_task(request)
        task = TaskItem(
            user_id=user.id,
            title=request.title,
            description=request.description or None,
            priority=request.priority or self.get_default_priority(),
            deadline=request.deadline,
            completed=False,
        )
        saved = self.repository.save_task(task)
        self._change_tasks(lambda tasks: [saved, *tasks])
        return saved

    def update_task(self, task_id: int, request: TaskRequest) -> TaskItem:
        """Apply the edit form to an existing task of the current user."""
        request = validate_task(request)
        current = self.find_task(task_id)
        edited = current.model_copy(
            update={
                "title": request.title,
                "description": request.description or None,
                "priority": request.priority or current.priority,
                "deadline": request.deadline,
                "completed": current.completed if request.completed is None else request.completed,
            }
        )
        saved = self.repository.update_task(edited)
        self._replace(saved)
        return saved

    def toggle_completion(self, task_id: int) -> TaskItem:
        current = self.find_task(task_id)
        saved = self.repository.update_task(
            current.model_copy(update={"completed": not current.completed})
        )
        self._replace(saved)
        return saved

    def delete_task(self, task_id: int) -> None:
        current = self.find_task(task_id)
        self.repository.delete_task(current.id)
        self._change_tasks(lambda tasks: [task for task in tasks if task.id != task_id])

    def clear_completed(self) -> int:
        user = self.require_user()
        removed = self.repository.delete_completed_tasks(user.id)
        self.load_tasks()
        return removed

    def find_task(self, task_id: int) -> TaskItem:
        """Locate a task of the current user, in the loaded list or else in storage."""
        user = self.require_user()
        for task in self.tasks:
            if task.id == task_id:
                return task
        for task in self.repository.get_tasks_for_user(user.id):
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    def _replace(self, saved: TaskItem) -> None:
        self._change_tasks(
            lambda tasks: [saved if task.id == saved.id else task for task in tasks]
        )

    def stats(self, today: date | None = None) -> TaskStats:
        return compute_stats(self.tasks, today)

    # Settings

    def get_default_priority(self) -> Priority:
        user = self.require_user()
        stored = self.repository.get_preference(user.id, DEFAULT_PRIORITY_KEY)
        if stored is None:
            return Priority.MEDIUM
        try:
            return Priority(stored)
        except ValueError:
            logger.warning(f"Ignoring unknown default priority {stored!r} for user {user.id}")
            return Priority.MEDIUM

    def set_default_priority(self, priority: Priority) -> None:
        user = self.require_user()
        self.repository.set_preference(user.id, DEFAULT_PRIORITY_KEY, Priority(priority).value)
