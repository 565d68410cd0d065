"""
Unit Tests for Configuration Management.

Black box tests against the public interface of config.py.
Tests run against the real YAML files in config/settings/. Secrets come
from the environment set up by the root conftest. Failure scenarios use
tmp_path to create controlled filesystems.
"""

import pytest

from notes_api.core.config import (
    AppConfig,
    find_project_root,
    get_app_config,
    get_database_url,
    get_settings,
    load_yaml_config,
)
from notes_api.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    FeaturesSchema,
    LoggingSchema,
    SecuritySchema,
)


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Clear lru_cache between tests so each test gets a fresh load."""
    get_app_config.cache_clear()
    yield
    get_app_config.cache_clear()


def _write_project(tmp_path, **files: str) -> None:
    """Create a project root whose config/settings holds the given YAML files."""
    (tmp_path / ".project_root").touch()
    settings_dir = tmp_path / "config" / "settings"
    settings_dir.mkdir(parents=True)
    for name, text in files.items():
        (settings_dir / f"{name}.yaml").write_text(text)


class TestFindProjectRoot:
    """Tests for .project_root marker discovery."""

    def test_finds_root_from_project_directory(self):
        root = find_project_root()
        assert (root / ".project_root").exists()
        assert (root / "config" / "settings").is_dir()

    def test_finds_root_from_a_subdirectory(self, monkeypatch):
        root = find_project_root()
        monkeypatch.chdir(root / "config" / "settings")
        assert find_project_root() == root

    def test_raises_when_no_marker_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(RuntimeError, match="Project root not found"):
            find_project_root()


class TestLoadYamlConfig:
    """Tests for YAML file loading from config/settings/."""

    @pytest.mark.parametrize(
        "filename",
        ["application.yaml", "database.yaml", "logging.yaml", "features.yaml", "security.yaml"],
    )
    def test_loads_every_config_file(self, filename):
        data = load_yaml_config(filename)
        assert isinstance(data, dict)
        assert data

    def test_raises_for_nonexistent_file(self):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_yaml_config("does_not_exist.yaml")

    def test_returns_empty_dict_for_empty_yaml(self, tmp_path, monkeypatch):
        _write_project(tmp_path, empty="")
        monkeypatch.chdir(tmp_path)

        assert load_yaml_config("empty.yaml") == {}


class TestAppConfig:
    """Tests for validated YAML configuration loading."""

    def test_sections_are_typed(self):
        config = AppConfig()

        assert isinstance(config.application, ApplicationSchema)
        assert isinstance(config.database, DatabaseSchema)
        assert isinstance(config.logging, LoggingSchema)
        assert isinstance(config.features, FeaturesSchema)
        assert isinstance(config.security, SecuritySchema)

    def test_shipped_policies(self):
        config = AppConfig()

        assert config.application.pagination.max_limit == 100
        assert config.security.login_rate_limit.max_attempts == 5
        assert config.security.login_rate_limit.window_seconds == 900
        assert config.security.account_lock.lock_seconds == 7200

    def test_unknown_key_is_rejected(self, tmp_path, monkeypatch):
        root = find_project_root()
        files = {
            path.stem: path.read_text()
            for path in (root / "config" / "settings").glob("*.yaml")
        }
        files["features"] += "\nsurprise_flag: true\n"
        _write_project(tmp_path, **files)
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ValueError, match="Invalid configuration in features.yaml"):
            AppConfig()

    def test_get_app_config_is_cached(self):
        assert get_app_config() is get_app_config()


class TestSettings:
    """Tests for secrets."""

    def test_reads_secrets_from_environment(self):
        settings = get_settings()
        assert len(settings.jwt_secret) >= 32
        assert settings.database_url

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("postgres://u:p@db/notes", "postgresql+asyncpg://u:p@db/notes"),
            ("postgresql://u:p@db/notes", "postgresql+asyncpg://u:p@db/notes"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_database_url_uses_asyncpg(self, monkeypatch, raw, expected):
        monkeypatch.setenv("DATABASE_URL", raw)
        get_settings.cache_clear()

        assert get_database_url() == expected
