import sys
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from database import Database
from services.app import create_app
from services.repository import TaskRepository
from services.session import TaskSession
from shared.config import HARDCODED_DEFAULTS, AppConfig
from shared.models import UserAccount


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep configuration variables from the host environment out of the tests."""
    for key in HARDCODED_DEFAULTS:
        monkeypatch.delenv(AppConfig.env_key(key), raising=False)
    monkeypatch.delenv("TASKMANAGER_CONFIG", raising=False)


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Configuration pointing at a throwaway SQLite file."""
    return AppConfig(
        overrides={"db.url": f"sqlite:///{tmp_path / 'tasks.db'}"},
        load_env_file=False,
    )


@pytest.fixture
def database(app_config: AppConfig) -> Generator[Database, None, None]:
    db = Database(app_config)
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def repository(database: Database) -> TaskRepository:
    return TaskRepository(database)


@pytest.fixture
def alice(repository: TaskRepository) -> UserAccount:
    return repository.register("a@x.com", "secret1", "Alice")


@pytest.fixture
def task_session(repository: TaskRepository) -> TaskSession:
    return TaskSession(repository)


@pytest.fixture
def client(app_config: AppConfig, database: Database) -> Generator[TestClient, None, None]:
    app = create_app(app_config, database)
    with TestClient(app) as test_client:
        yield test_client
