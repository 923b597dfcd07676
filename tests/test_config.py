"""Tests for settings loading, environment parsing, and precedence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from oidc_session.config import (
    default_settings_path,
    get_config_dir,
    load_settings,
    resolve_settings,
    save_settings,
    settings_from_env,
)
from oidc_session.exceptions import ConfigError
from oidc_session.models import UserManagerSettings

BASE = {
    "authority": "https://id.example.com",
    "client_id": "spa",
    "redirect_uri": "https://app.example.com/callback",
}


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestPaths:
    def test_config_dir_follows_xdg(self, isolated_config: Path):
        assert get_config_dir() == isolated_config / "config" / "oidc_session"
        assert get_config_dir().is_dir()

    def test_default_settings_path(self, isolated_config: Path):
        assert default_settings_path().name == "settings.json"


class TestLoadSave:
    def test_load_valid_file(self, tmp_path: Path):
        path = _write(tmp_path / "s.json", {**BASE, "scope": "openid profile", "ui_locales": "fr"})
        settings = load_settings(path)
        assert settings.scope == "openid profile"
        assert settings.model_extra == {"ui_locales": "fr"}

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "s.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid settings file"):
            load_settings(path)

    def test_non_object_json(self, tmp_path: Path):
        path = _write(tmp_path / "s.json", ["a"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_settings(path)

    def test_missing_required_field(self, tmp_path: Path):
        path = _write(tmp_path / "s.json", {"authority": "https://id.example.com"})
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_save_writes_default_location(self, isolated_config: Path):
        settings = UserManagerSettings(**BASE)
        path = save_settings(settings)
        assert path == default_settings_path()
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["client_id"] == "spa"
        assert "post_logout_redirect_uri" not in data
        assert list(path.parent.glob(".*.tmp")) == []


class TestEnvironment:
    def test_reads_prefixed_variables(self):
        env = {
            "OIDC_SESSION_AUTHORITY": "https://env.example.com",
            "OIDC_SESSION_SCOPE": "openid email",
            "OIDC_SESSION_UNRELATED": "ignored",
            "OIDC_SESSION_CLIENT_ID": "",
        }
        assert settings_from_env(env) == {
            "authority": "https://env.example.com",
            "scope": "openid email",
        }

    @pytest.mark.parametrize("raw,expected", [("true", True), ("0", False), ("Yes", True)])
    def test_boolean_values(self, raw, expected):
        env = {"OIDC_SESSION_AUTOMATIC_SILENT_RENEW": raw}
        assert settings_from_env(env) == {"automatic_silent_renew": expected}

    def test_invalid_boolean(self):
        with pytest.raises(ConfigError, match="AUTOMATIC_SILENT_RENEW"):
            settings_from_env({"OIDC_SESSION_AUTOMATIC_SILENT_RENEW": "maybe"})


class TestResolveSettings:
    def test_precedence(self, isolated_config: Path):
        path = _write(isolated_config / "s.json", {**BASE, "scope": "file"})
        env = {"OIDC_SESSION_SCOPE": "env", "OIDC_SESSION_CLIENT_ID": "env-client"}

        settings = resolve_settings(
            path=path, overrides={"client_id": "cli-client", "scope": None}, environ=env
        )

        assert settings.client_id == "cli-client"
        assert settings.scope == "env"
        assert settings.authority == BASE["authority"]

    def test_uses_default_file_when_present(self, isolated_config: Path):
        save_settings(UserManagerSettings(**BASE))
        assert resolve_settings(environ={}).client_id == "spa"

    def test_env_only(self, isolated_config: Path):
        env = {f"OIDC_SESSION_{k.upper()}": v for k, v in BASE.items()}
        assert resolve_settings(environ=env).redirect_uri == BASE["redirect_uri"]

    def test_incomplete(self, isolated_config: Path):
        with pytest.raises(ConfigError, match="Incomplete or invalid settings"):
            resolve_settings(environ={})

    def test_explicit_missing_file(self, isolated_config: Path):
        with pytest.raises(ConfigError, match="not found"):
            resolve_settings(path=isolated_config / "missing.json", environ={})
