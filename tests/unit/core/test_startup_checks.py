"""
Unit Tests for Startup Security Checks.

The config boundary is stubbed with real Pydantic schema objects copied
from the shipped configuration and then altered per test.
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from notes_api.core.config import AppConfig
from notes_api.core.startup_checks import StartupSecurityError, run_startup_checks

STRONG_SECRET = "x" * 32


def _config(environment: str = "development", **application_overrides):
    shipped = AppConfig()
    application = shipped.application.model_copy(
        update={"environment": environment, **application_overrides}
    )
    return SimpleNamespace(
        application=application,
        features=shipped.features,
        security=shipped.security,
        is_production=environment == "production",
    )


def _run(app_config, secret: str = STRONG_SECRET) -> None:
    with (
        patch("notes_api.core.startup_checks.get_app_config", return_value=app_config),
        patch(
            "notes_api.core.startup_checks.get_settings",
            return_value=SimpleNamespace(jwt_secret=secret),
        ),
    ):
        run_startup_checks()


class TestRunStartupChecks:
    """Tests for run_startup_checks."""

    def test_development_defaults_pass(self):
        _run(_config())

    def test_short_secret_blocks_startup(self):
        with pytest.raises(StartupSecurityError, match="JWT_SECRET is 8 chars"):
            _run(_config(), secret="short-ok")

    def test_production_with_debug_blocks_startup(self):
        with pytest.raises(StartupSecurityError) as exc_info:
            _run(_config("production"))

        message = str(exc_info.value)
        assert "debug is true in production environment" in message
        assert "api_detailed_errors is true in production environment" in message
        assert "CORS origins contain localhost" in message

    def test_hardened_production_passes(self):
        app_config = _config(
            "production",
            debug=False,
            docs_enabled=False,
            cors=SimpleNamespace(origins=["https://notes.example.org"]),
        )
        app_config.features = app_config.features.model_copy(
            update={"api_detailed_errors": False}
        )

        _run(app_config)
