"""Shared test fixtures for oidc_session.

Wraps the doubles from ``fakes.py`` in fixtures and isolates the
module-level globals (current location, output manager, config directory).
These fixtures are automatically discovered by pytest and available to all
test modules.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from fakes import CoreUserManager, FakeUser, FullUserManager, Recorder
from oidc_session.models import UserManagerSettings
from oidc_session.output import reset_output
from oidc_session.utils import reset_current_location


# ---------------------------------------------------------------------------
# Global state isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals() -> None:
    """Reset the installed location and output manager around every test."""
    reset_current_location()
    reset_output()
    yield
    reset_current_location()
    reset_output()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at tmp_path and clear OIDC_SESSION_* variables."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setattr("oidc_session.config._is_xdg_platform", lambda: True)
    for name in UserManagerSettings.model_fields:
        monkeypatch.delenv(f"OIDC_SESSION_{name.upper()}", raising=False)
    return tmp_path


# ---------------------------------------------------------------------------
# Doubles
# ---------------------------------------------------------------------------


@pytest.fixture
def user() -> FakeUser:
    return FakeUser()


@pytest.fixture
def core_manager() -> CoreUserManager:
    return CoreUserManager()


@pytest.fixture
def full_manager() -> FullUserManager:
    return FullUserManager()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
