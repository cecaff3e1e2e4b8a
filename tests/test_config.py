"""Tests for layered configuration resolution."""

from pathlib import Path

import pytest

from models.enums import SchemaMode
from shared.config import AppConfig
from shared.errors import ConfigurationError


def _write_config(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def defaults_file(tmp_path: Path) -> Path:
    return _write_config(
        tmp_path / "application.yaml",
        "db:\n  pool_size: 25\n  show_sql: true\napp:\n  title: From File\n",
    )


class TestResolutionOrder:
    """Environment > override > defaults file > hardcoded defaults."""

    def test_hardcoded_defaults_without_file(self, tmp_path: Path) -> None:
        config = AppConfig(defaults_path=tmp_path / "missing.yaml", load_env_file=False)
        assert config.db_url == "sqlite:///taskmanager.db"
        assert config.pool_size == 10
        assert config.show_sql is False
        assert config.format_sql is True
        assert config.schema_mode == SchemaMode.UPDATE
        assert config.app_title == "Task Management & To-Do Application"
        assert config.app_version == "1.0.0"

    def test_file_beats_hardcoded(self, defaults_file: Path) -> None:
        config = AppConfig(defaults_path=defaults_file, load_env_file=False)
        assert config.pool_size == 25
        assert config.show_sql is True
        assert config.app_title == "From File"
        assert config.app_version == "1.0.0"

    def test_override_beats_file(self, defaults_file: Path) -> None:
        config = AppConfig(
            overrides={"db.pool_size": 5}, defaults_path=defaults_file, load_env_file=False
        )
        assert config.pool_size == 5

    def test_environment_beats_override(
        self, defaults_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DB_POOL_SIZE", "7")
        config = AppConfig(
            overrides={"db.pool_size": 5}, defaults_path=defaults_file, load_env_file=False
        )
        assert config.pool_size == 7

    def test_empty_environment_value_is_ignored(
        self, defaults_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("APP_TITLE", "")
        config = AppConfig(defaults_path=defaults_file, load_env_file=False)
        assert config.app_title == "From File"

    def test_set_registers_override(self, tmp_path: Path) -> None:
        config = AppConfig(defaults_path=tmp_path / "missing.yaml", load_env_file=False)
        config.set("app.version", "2.1.0")
        assert config.app_version == "2.1.0"

    def test_flat_dotted_keys_in_file(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path / "flat.yaml", "app.version: 3.0.0\n")
        config = AppConfig(defaults_path=path, load_env_file=False)
        assert config.app_version == "3.0.0"

    def test_config_file_from_environment(
        self, defaults_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TASKMANAGER_CONFIG", str(defaults_file))
        config = AppConfig(load_env_file=False)
        assert config.app_title == "From File"


def test_packaged_defaults_file_is_loaded() -> None:
    config = AppConfig(load_env_file=False)
    assert config.file_config["db"]["schema_mode"] == "update"
    assert config.file_config["app"]["title"] == "Task Management & To-Do Application"


def test_env_key_uppercases_and_replaces_dots() -> None:
    assert AppConfig.env_key("db.schema_mode") == "DB_SCHEMA_MODE"
    assert AppConfig.env_key("app.title") == "APP_TITLE"


def test_schema_mode_is_case_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_SCHEMA_MODE", "CREATE")
    assert AppConfig(load_env_file=False).schema_mode == SchemaMode.CREATE


def test_unknown_schema_mode_raises() -> None:
    config = AppConfig(overrides={"db.schema_mode": "validate"}, load_env_file=False)
    with pytest.raises(ConfigurationError):
        _ = config.schema_mode


def test_invalid_pool_size_raises() -> None:
    config = AppConfig(overrides={"db.pool_size": "many"}, load_env_file=False)
    with pytest.raises(ConfigurationError):
        _ = config.pool_size


def test_boolean_values_only_accept_true(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_SHOW_SQL", "TRUE")
    monkeypatch.setenv("DB_FORMAT_SQL", "yes")
    config = AppConfig(load_env_file=False)
    assert config.show_sql is True
    assert config.format_sql is False


def test_describe_masks_password() -> None:
    config = AppConfig(overrides={"db.password": "hunter2"}, load_env_file=False)
    described = config.describe()
    assert described["db.password"] == "***"
    assert "hunter2" not in str(described)


def test_non_mapping_file_raises(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "list.yaml", "- one\n- two\n")
    with pytest.raises(ConfigurationError):
        AppConfig(defaults_path=path, load_env_file=False)
