"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real user directories and a
throwaway vault per test.
"""

from __future__ import annotations

import logging
from datetime import date
from unittest.mock import patch

import pytest

from gtd_vault.adapters.vault import LocalVaultFileSystem
from gtd_vault.models import AppConfig
from gtd_vault.services.context_manager import build_context

# Friday
TODAY = date(2024, 3, 15)


# ---------------------------------------------------------------------------
# Isolation from the user's machine
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_logger(tmp_path):
    """Send the application log into the test's tmp dir."""
    import gtd_vault.utils.logger as logger_mod

    app_logger = logging.getLogger("gtd_vault")
    for handler in list(app_logger.handlers):
        handler.close()
    app_logger.handlers.clear()
    logger_mod._logger = None

    log_dir = tmp_path / "logs"
    with patch("gtd_vault.utils.logger.user_log_dir", return_value=str(log_dir)):
        yield log_dir

    for handler in list(app_logger.handlers):
        handler.close()
    app_logger.handlers.clear()
    logger_mod._logger = None


@pytest.fixture()
def tmp_config_dirs(tmp_path):
    """Point platformdirs config/data lookups at *tmp_path*."""
    from gtd_vault.services.config_service import get_config_service

    get_config_service.cache_clear()
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    with patch("gtd_vault.services.config_service.user_config_dir", return_value=str(config_dir)):
        with patch("gtd_vault.services.config_service.user_data_dir", return_value=str(data_dir)):
            yield config_dir, data_dir
    get_config_service.cache_clear()


# ---------------------------------------------------------------------------
# Vault fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def vault_path(tmp_path):
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture()
def config(vault_path) -> AppConfig:
    return AppConfig(vault_path=str(vault_path))


@pytest.fixture()
def fs(vault_path) -> LocalVaultFileSystem:
    return LocalVaultFileSystem(vault_path)


@pytest.fixture()
def ctx(config, fs):
    """Fully wired services over the temporary vault, pinned to TODAY."""
    return build_context(config, fs, clock=lambda: TODAY)


@pytest.fixture()
def gateway(ctx):
    return ctx.gateway


@pytest.fixture()
def task_service(ctx):
    return ctx.task_service


@pytest.fixture()
def project_service(ctx):
    return ctx.project_service


@pytest.fixture()
def write_doc(vault_path):
    """Drop a hand-written document into the vault."""

    def write(relative: str, text: str):
        target = vault_path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        return target

    return write
