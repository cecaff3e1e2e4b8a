"""FastAPI application exposing the login, dashboard and settings actions."""

from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from database import Database
from services.repository import TaskRepository
from services.session import FILTER_ALL, TaskSession
from shared.config import AppConfig
from shared.errors import (
    ConfigurationError,
    DuplicateUserError,
    NotAuthenticatedError,
    StorageFailure,
    TaskManagerError,
    TaskNotFoundError,
    ValidationError,
)
from shared.logging_utils import setup_logging
from shared.models import (
    LoginRequest,
    RegisterRequest,
    SettingsRequest,
    SettingsResponse,
    TaskItem,
    TaskListResponse,
    TaskRequest,
    TaskStats,
    UserAccount,
)
from shared.response_models import ErrorResponse, HealthResponse, MessageResponse

logger = setup_logging("task-manager-api")

ERROR_STATUS = {
    ValidationError: (400, "validation_error"),
    NotAuthenticatedError: (401, "not_authenticated"),
    TaskNotFoundError: (404, "task_not_found"),
    DuplicateUserError: (409, "duplicate_user"),
    StorageFailure: (500, "storage_failure"),
    ConfigurationError: (500, "configuration_error"),
}

router = APIRouter()


def get_task_session(request: Request) -> TaskSession:
    return request.app.state.task_session


@router.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check(request: Request) -> HealthResponse:
    """Health endpoint reporting the application title and version."""
    config: AppConfig = request.app.state.config
    return HealthResponse(status="ok", message=config.app_title, version=config.app_version)


@router.post("/login", response_model=UserAccount, tags=["Login"])
def login(payload: LoginRequest, session: TaskSession = Depends(get_task_session)) -> UserAccount:
    """Authenticate and open the dashboard for the user."""
    user = session.login(payload)
    if user is None:
        raise NotAuthenticatedError("Invalid email or password")
    return user


@router.post("/register", response_model=UserAccount, status_code=201, tags=["Login"])
def register(payload: RegisterRequest, session: TaskSession = Depends(get_task_session)) -> UserAccount:
    """Create an account. Logging in is a separate step."""
    return session.register(payload)


@router.post("/logout", response_model=MessageResponse, tags=["Login"])
def logout(session: TaskSession = Depends(get_task_session)) -> MessageResponse:
    session.logout()
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserAccount, tags=["Login"])
def current_user(session: TaskSession = Depends(get_task_session)) -> UserAccount:
    return session.require_user()


@router.get("/tasks", response_model=TaskListResponse, tags=["Dashboard"])
def list_tasks(
    search: str | None = None,
    priority: str = FILTER_ALL,
    status: str = FILTER_ALL,
    session: TaskSession = Depends(get_task_session),
) -> TaskListResponse:
    """Reload the dashboard list; a search term takes precedence over the filters."""
    if search is not None and search.strip():
        tasks = session.search_tasks(search)
    else:
        tasks = session.apply_filters(priority=priority, status=status)
    return TaskListResponse(tasks=tasks, stats=session.stats())


@router.get("/tasks/stats", response_model=TaskStats, tags=["Dashboard"])
def task_stats(session: TaskSession = Depends(get_task_session)) -> TaskStats:
    """Counters for the list currently shown."""
    session.require_user()
    return session.stats()


@router.post("/tasks", response_model=TaskItem, status_code=201, tags=["Dashboard"])
def add_task(payload: TaskRequest, session: TaskSession = Depends(get_task_session)) -> TaskItem:
    return session.add_task(payload)


@router.post("/tasks/clear-completed", response_model=MessageResponse, tags=["Dashboard"])
def clear_completed(session: TaskSession = Depends(get_task_session)) -> MessageResponse:
    removed = session.clear_completed()
    return MessageResponse(message=f"Cleared {removed} completed tasks")


@router.put("/tasks/{task_id}", response_model=TaskItem, tags=["Dashboard"])
def update_task(
    task_id: int, payload: TaskRequest, session: TaskSession = Depends(get_task_session)
) -> TaskItem:
    return session.update_task(task_id, payload)


@router.post("/tasks/{task_id}/toggle", response_model=TaskItem, tags=["Dashboard"])
def toggle_task(task_id: int, session: TaskSession = Depends(get_task_session)) -> TaskItem:
    return session.toggle_completion(task_id)


@router.delete("/tasks/{task_id}", response_model=MessageResponse, tags=["Dashboard"])
def delete_task(task_id: int, session: TaskSession = Depends(get_task_session)) -> MessageResponse:
    session.delete_task(task_id)
    return MessageResponse(message="Task deleted successfully")


@router.get("/settings", response_model=SettingsResponse, tags=["Settings"])
def get_settings(session: TaskSession = Depends(get_task_session)) -> SettingsResponse:
    return SettingsResponse(default_priority=session.get_default_priority())


@router.put("/settings", response_model=SettingsResponse, tags=["Settings"])
def save_settings(
    payload: SettingsRequest, session: TaskSession = Depends(get_task_session)
) -> SettingsResponse:
    session.set_default_priority(payload.default_priority)
    logger.info(f"Preference saved: {payload.default_priority.value}")
    return SettingsResponse(default_priority=session.get_default_priority())


async def handle_task_manager_error(request: Request, exc: TaskManagerError) -> JSONResponse:
    status_code, error_code = 500, "internal_error"
    for error_type, mapping in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code, error_code = mapping
            break
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    body = ErrorResponse(message=str(exc), error_code=error_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(config: AppConfig | None = None, database: Database | None = None) -> FastAPI:
    """
    Build the application with its own configuration, database and session.

    Args:
        config: Configuration, loaded from the environment when omitted
        database: Storage backend, built from the configuration when omitted

    Returns:
        Configured FastAPI application
    """
    config = config or AppConfig()
    database = database or Database(config)
    config.log_status(logger)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        database.dispose()

    app = FastAPI(
        title=config.app_title,
        description="Personal task management: accounts, tasks, filters and settings",
        version=config.app_version,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.database = database
    app.state.task_session = TaskSession(TaskRepository(database))

    app.add_exception_handler(TaskManagerError, handle_task_manager_error)
    app.include_router(router)
    return app
