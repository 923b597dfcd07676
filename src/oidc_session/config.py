"""Settings management with XDG paths, atomic writes, and precedence resolution.

This module handles the persistent configuration a user manager is built
from:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.oidc_session/`` on macOS and Windows. See :func:`get_config_dir`.
* **Settings file** -- one JSON file deserialised into
  :class:`~oidc_session.models.UserManagerSettings`. Managed via
  :func:`load_settings` and :func:`save_settings`.
* **Environment** -- ``OIDC_SESSION_<FIELD>`` variables, read by
  :func:`settings_from_env`.
* **Precedence resolution** -- :func:`resolve_settings` merges explicit
  overrides, environment variables, and the settings file.

File writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from oidc_session.exceptions import ConfigError
from oidc_session.models import UserManagerSettings

_APP_NAME = "oidc_session"
_SETTINGS_FILENAME = "settings.json"
ENV_PREFIX = "OIDC_SESSION_"

_BOOL_TRUE = {"1", "true", "yes", "on"}
_BOOL_FALSE = {"0", "false", "no", "off"}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/oidc_session/`` (default
    ``~/.config/oidc_session/``). On macOS/Windows: ``~/.oidc_session/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_settings_path() -> Path:
    """Path of the settings file in the configuration directory."""
    return get_config_dir() / _SETTINGS_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Settings file ---


def _read_settings_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid settings file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid settings file at {path}: expected a JSON object")
    return data


def load_settings(path: Optional[Path] = None) -> UserManagerSettings:
    """Load and validate settings from a JSON file.

    Args:
        path: File to read. Defaults to :func:`default_settings_path`.

    Raises:
        ConfigError: If the file does not exist, contains invalid JSON, or
            fails validation.
    """
    path = path or default_settings_path()
    if not path.is_file():
        raise ConfigError(f"Settings file not found at {path}")
    data = _read_settings_file(path)
    try:
        return UserManagerSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings file at {path}: {exc}") from exc


def save_settings(settings: UserManagerSettings, path: Optional[Path] = None) -> Path:
    """Persist *settings* atomically and return the path written."""
    path = path or default_settings_path()
    data = settings.model_dump(mode="json", exclude_none=True)
    _atomic_write(path, json.dumps(data, indent=2) + "\n")
    return path


# --- Environment ---


def _parse_env_value(name: str, raw: str) -> Any:
    if name == "automatic_silent_renew":
        lowered = raw.strip().lower()
        if lowered in _BOOL_TRUE:
            return True
        if lowered in _BOOL_FALSE:
            return False
        raise ConfigError(f"Invalid boolean for {ENV_PREFIX}{name.upper()}: {raw!r}")
    return raw


def settings_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Collect settings fields from ``OIDC_SESSION_<FIELD>`` variables.

    Only declared :class:`~oidc_session.models.UserManagerSettings` fields
    are read. Empty values are ignored.

    Returns:
        A partial settings dict (may be empty).
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for name in UserManagerSettings.model_fields:
        raw = env.get(f"{ENV_PREFIX}{name.upper()}", "")
        if raw:
            values[name] = _parse_env_value(name, raw)
    return values


# --- Precedence resolution ---


def resolve_settings(
    path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> UserManagerSettings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. ``overrides`` (e.g. CLI flags); ``None`` values are skipped
        2. Environment variables (``OIDC_SESSION_AUTHORITY``, ...)
        3. Settings file (*path*, or the default file if it exists)

    Raises:
        ConfigError: If an explicit *path* is missing or invalid, or the
            merged values fail validation.
    """
    merged: dict[str, Any] = {}

    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Settings file not found at {path}")
        merged.update(_read_settings_file(path))
    else:
        default_path = default_settings_path()
        if default_path.is_file():
            merged.update(_read_settings_file(default_path))

    merged.update(settings_from_env(environ))

    if overrides:
        merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return UserManagerSettings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Incomplete or invalid settings: {exc}") from exc
