from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from condoadmin.app.runtime_paths import app_root


_APP_SETTINGS_DIRNAME = "condoadmin"
_LEGACY_SETTINGS_PATH = app_root() / "config" / "settings.json"

_SUPABASE_URL_KEY = "supabaseUrl"
_SUPABASE_ANON_KEY = "supabaseAnonKey"
_SUPABASE_TIMEOUT_KEY = "supabaseTimeoutSeconds"
_DARK_MODE_KEY = "darkMode"
_REMEMBERED_EMAIL_KEY = "rememberedEmail"

SUPABASE_URL_ENV = "CONDOADMIN_SUPABASE_URL"
SUPABASE_ANON_KEY_ENV = "CONDOADMIN_SUPABASE_ANON_KEY"
DEFAULT_SUPABASE_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class SupabaseSettings:
    url: str = ""
    anon_key: str = ""
    timeout_seconds: float = DEFAULT_SUPABASE_TIMEOUT_SECONDS

    @property
    def configured(self) -> bool:
        return bool(self.url and self.anon_key)

    @classmethod
    def from_mapping(cls, value: dict[str, Any] | None) -> SupabaseSettings:
        raw = value or {}
        url = str(raw.get("url", "") or "").strip().rstrip("/")
        anon_key = str(raw.get("anon_key", "") or "").strip()
        timeout_raw = raw.get("timeout_seconds", DEFAULT_SUPABASE_TIMEOUT_SECONDS)
        try:
            timeout_seconds = float(timeout_raw)
        except (TypeError, ValueError):
            timeout_seconds = DEFAULT_SUPABASE_TIMEOUT_SECONDS
        return cls(
            url=url,
            anon_key=anon_key,
            timeout_seconds=max(1.0, timeout_seconds),
        )

    def to_mapping(self, *, redact_anon_key: bool = False) -> dict[str, Any]:
        anon_key = self.anon_key
        if redact_anon_key and anon_key:
            anon_key = "********"
        return {
            "url": self.url,
            "anon_key": anon_key,
            "timeout_seconds": self.timeout_seconds,
        }


def settings_path() -> Path:
    env = os.environ
    if os.name == "nt":
        appdata = str(env.get("APPDATA", "") or "").strip()
        if appdata:
            return Path(appdata) / _APP_SETTINGS_DIRNAME / "config" / "settings.json"
        localappdata = str(env.get("LOCALAPPDATA", "") or "").strip()
        if localappdata:
            return Path(localappdata) / _APP_SETTINGS_DIRNAME / "config" / "settings.json"
    else:
        xdg_config_home = str(env.get("XDG_CONFIG_HOME", "") or "").strip()
        if xdg_config_home:
            return Path(xdg_config_home) / _APP_SETTINGS_DIRNAME / "settings.json"
        home = str(env.get("HOME", "") or "").strip()
        if home:
            return Path(home) / ".config" / _APP_SETTINGS_DIRNAME / "settings.json"

    return _LEGACY_SETTINGS_PATH


def load_settings() -> dict[str, Any]:
    path = settings_path()
    if not path.exists():
        return {}
    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def save_settings(settings: dict[str, Any]) -> None:
    path = settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings, indent=2), encoding="utf-8")


def load_supabase_settings() -> SupabaseSettings:
    settings = load_settings()
    env = os.environ
    url = str(env.get(SUPABASE_URL_ENV, "") or "").strip() or settings.get(_SUPABASE_URL_KEY, "")
    anon_key = str(env.get(SUPABASE_ANON_KEY_ENV, "") or "").strip() or settings.get(_SUPABASE_ANON_KEY, "")
    return SupabaseSettings.from_mapping(
        {
            "url": url,
            "anon_key": anon_key,
            "timeout_seconds": settings.get(_SUPABASE_TIMEOUT_KEY, DEFAULT_SUPABASE_TIMEOUT_SECONDS),
        }
    )


def save_supabase_settings(value: SupabaseSettings | dict[str, Any]) -> SupabaseSettings:
    if isinstance(value, SupabaseSettings):
        normalized = SupabaseSettings.from_mapping(value.to_mapping())
    else:
        normalized = SupabaseSettings.from_mapping(value)
    settings = load_settings()
    settings[_SUPABASE_URL_KEY] = normalized.url
    settings[_SUPABASE_ANON_KEY] = normalized.anon_key
    settings[_SUPABASE_TIMEOUT_KEY] = normalized.timeout_seconds
    save_settings(settings)
    return normalized


def load_dark_mode(default: bool = False) -> bool:
    settings = load_settings()
    value = settings.get(_DARK_MODE_KEY, default)
    if isinstance(value, bool):
        return value
    return bool(default)


def save_dark_mode(enabled: bool) -> None:
    settings = load_settings()
    settings[_DARK_MODE_KEY] = bool(enabled)
    save_settings(settings)


def load_remembered_email() -> str:
    value = load_settings().get(_REMEMBERED_EMAIL_KEY, "")
    if isinstance(value, str):
        return value.strip()
    return ""


def save_remembered_email(email: str | None) -> None:
    settings = load_settings()
    normalized = str(email or "").strip()
    if normalized:
        settings[_REMEMBERED_EMAIL_KEY] = normalized
    else:
        settings.pop(_REMEMBERED_EMAIL_KEY, None)
    save_settings(settings)
