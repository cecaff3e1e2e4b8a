"""Task repository - transaction-scoped data access for users, tasks and preferences."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from database import Database
from models.database import Task, User, UserPreference
from models.enums import Priority
from shared.errors import DuplicateUserError, StorageFailure, TaskNotFoundError, ValidationError
from shared.logging_utils import setup_logging
from shared.models import TaskItem, UserAccount

logger = setup_logging("task-repository")


class TaskRepository:
    """Data access for the task manager.

    Every public method runs in its own session and transaction: it commits
    when the method returns and rolls back on any error. Storage errors are
    re-raised as ``StorageFailure``; lookups that find nothing return ``None``.
    Only pydantic records leave this class, never ORM instances.
    """

    def __init__(self, database: Database):
        self.database = database

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        session = self.database.session()
        try:
            with session.begin():
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Failed to {action}: {e}")
            raise StorageFailure(f"Failed to {action}: {e}") from e
        finally:
            session.close()

    # User management

    def authenticate(self, email: str, password: str) -> UserAccount | None:
        """Return the user matching both credentials and stamp its last login."""
        with self._transaction("authenticate user") as session:
            user = session.execute(
                select(User).where(User.email == email, User.password == password)
            ).scalar_one_or_none()
            if user is None:
                logger.info(f"Authentication failed for {email}")
                return None

            user.last_login = datetime.now()
            session.flush()
            account = UserAccount.model_validate(user)

        logger.info(f"User {account.id} logged in")
        return account

    def register(self, email: str, password: str, display_name: str) -> UserAccount:
        """Create a user; the email check and the insert share one transaction."""
        with self._transaction("register user") as session:
            existing = session.execute(
                select(User.id).where(User.email == email)
            ).scalar_one_or_none()
            if existing is not None:
                raise DuplicateUserError(email)

            user = User(
                email=email,
                password=password,
                display_name=display_name,
                created_at=datetime.now(),
            )
            session.add(user)
            try:
                session.flush()
            except IntegrityError as e:
                # Another instance inserted the same email after our check
                raise DuplicateUserError(email) from e
            account = UserAccount.model_validate(user)

        logger.info(f"Registered new user {account.id} ({account.email})")
        return account

    def get_user(self, user_id: int) -> UserAccount | None:
        with self._transaction("load user") as session:
            user = session.get(User, user_id)
            return UserAccount.model_validate(user) if user is not None else None

    def delete_user(self, user_id: int) -> bool:
        """Delete a user together with its preferences and tasks."""
        with self._transaction("delete user") as session:
            user = session.get(User, user_id)
            if user is None:
                return False
            session.execute(delete(UserPreference).where(UserPreference.user_id == user_id))
            session.execute(delete(Task).where(Task.user_id == user_id))
            session.delete(user)

        logger.info(f"Deleted user {user_id} with its tasks and preferences")
        return True

    # Task management

    def get_tasks_for_user(
        self,
        user_id: int,
        completed: bool | None = None,
        priority: Priority | str | None = None,
    ) -> list[TaskItem]:
        """
        List a user's tasks, newest first.

        Args:
            user_id: Owner of the tasks
            completed: Only tasks with this completion flag, when given
            priority: Only tasks with this priority, when given

        Returns:
            Tasks ordered by creation time descending
        """
        stmt = select(Task).where(Task.user_id == user_id)
        if completed is not None:
            stmt = stmt.where(Task.completed.is_(completed))
        if priority is not None:
            try:
                priority = Priority(priority)
            except ValueError as e:
                raise ValidationError(f"Unknown priority: {priority}") from e
            stmt = stmt.where(Task.priority == priority)
        stmt = stmt.order_by(Task.created_at.desc(), Task.id.desc())

        with self._transaction("load tasks") as session:
            return [TaskItem.model_validate(task) for task in session.scalars(stmt)]

    def save_task(self, task: TaskItem) -> TaskItem:
        """Insert the task, or overwrite the stored row when its id exists."""
        self._check_title(task.title)
        now = datetime.now()
        with self._transaction("save task") as session:
            row = session.get(Task, task.id) if task.id is not None else None
            if row is None:
                row = Task(id=task.id, created_at=task.created_at or now)
                session.add(row)
            self._apply(row, task)
            row.updated_at = task.updated_at or now
            session.flush()
            saved = TaskItem.model_validate(row)

        logger.debug(f"Saved task {saved.id} for user {saved.user_id}")
        return saved

    def update_task(self, task: TaskItem) -> TaskItem:
        """Persist every field of an existing task and refresh its updated timestamp."""
        if task.id is None:
            raise TaskNotFoundError(0)
        self._check_title(task.title)
        with self._transaction("update task") as session:
            row = session.get(Task, task.id)
            if row is None:
                raise TaskNotFoundError(task.id)
            self._apply(row, task)
            row.updated_at = datetime.now()
            session.flush()
            updated = TaskItem.model_validate(row)

        logger.debug(f"Updated task {updated.id}")
        return updated

    def delete_task(self, task_id: int) -> None:
        """Delete a task; unknown ids are ignored."""
        with self._transaction("delete task") as session:
            row = session.get(Task, task_id)
            if row is None:
                return
            session.delete(row)
        logger.info(f"Deleted task {task_id}")

    def delete_completed_tasks(self, user_id: int) -> int:
        """Delete every completed task of a user and return how many were removed."""
        with self._transaction("clear completed tasks") as session:
            result = session.execute(
                delete(Task).where(Task.user_id == user_id, Task.completed.is_(True))
            )
            removed = result.rowcount or 0
        logger.info(f"Cleared {removed} completed tasks for user {user_id}")
        return removed

    @staticmethod
    def _check_title(title: str | None) -> None:
        if title is None or not title.strip():
            raise ValidationError("Task title is required")

    @staticmethod
    def _apply(row: Task, task: TaskItem) -> None:
        row.user_id = task.user_id
        row.title = task.title.strip()
        row.description = task.description
        row.priority = Priority(task.priority)
        row.deadline = task.deadline
        row.completed = task.completed

    # User preferences

    def get_preference(self, user_id: int, key: str) -> str | None:
        with self._transaction("load user preference") as session:
            return session.execute(
                select(UserPreference.value).where(
                    UserPreference.user_id == user_id, UserPreference.key == key
                )
            ).scalars().first()

    def get_preferences(self, user_id: int) -> dict[str, str | None]:
        with self._transaction("load user preferences") as session:
            rows = session.execute(
                select(UserPreference.key, UserPreference.value).where(
                    UserPreference.user_id == user_id
                )
            ).all()
            return {key: value for key, value in rows}

    def set_preference(self, user_id: int, key: str, value: str | None) -> None:
        """Insert or overwrite the single preference row for (user, key)."""
        with self._transaction("save user preference") as session:
            # Locking the owner serialises concurrent upserts where the backend supports
            # row locks; elsewhere the (user, key) unique constraint rejects the loser
            owner = session.execute(
                select(User.id).where(User.id == user_id).with_for_update()
            ).scalar_one_or_none()
            if owner is None:
                raise StorageFailure(f"Failed to save user preference: user {user_id} not found")

            existing = session.execute(
                select(UserPreference).where(
                    UserPreference.user_id == user_id, UserPreference.key == key
                )
            ).scalars().first()
            if existing is not None:
                existing.value = value
            else:
                session.add(
                    UserPreference(user_id=user_id, key=key, value=value, created_at=datetime.now())
                )

        logger.info(f"Saved preference {key} for user {user_id}")
