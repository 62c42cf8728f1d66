from __future__ import annotations

from pathlib import Path
from typing import Iterable, Literal

from PySide6.QtWidgets import QApplication


_THEME_DIR = Path(__file__).resolve().parent
_THEME_PROPERTY = "condoadmin.theme_mode"
ThemeMode = Literal["light", "dark"]
_DEFAULT_MODE: ThemeMode = "light"
_MODE_QSS_FILES: dict[ThemeMode, tuple[str, ...]] = {
    "light": ("window.qss", "window_light.qss"),
    "dark": ("window.qss", "window_dark.qss"),
}


def normalize_theme_mode(mode: str | None, *, default: ThemeMode = _DEFAULT_MODE) -> ThemeMode:
    if mode == "dark":
        return "dark"
    if mode == "light":
        return "light"
    return default


def current_theme_mode(default: ThemeMode = _DEFAULT_MODE) -> ThemeMode:
    app = QApplication.instance()
    if app is None:
        return default
    value = app.property(_THEME_PROPERTY)
    if isinstance(value, str):
        return normalize_theme_mode(value, default=default)
    return default


def load_stylesheet(
    file_names: Iterable[str] | None = None,
    *,
    mode: ThemeMode = _DEFAULT_MODE,
) -> str:
    selected_files = tuple(file_names) if file_names is not None else _MODE_QSS_FILES.get(
        mode,
        _MODE_QSS_FILES[_DEFAULT_MODE],
    )

    parts: list[str] = []
    for file_name in selected_files:
        qss_path = _THEME_DIR / file_name
        if not qss_path.exists():
            continue
        stylesheet = qss_path.read_text(encoding="utf-8").strip()
        if stylesheet:
            parts.append(stylesheet)
    return "\n\n".join(parts)


def apply_app_theme(
    app: QApplication,
    *,
    mode: ThemeMode = _DEFAULT_MODE,
    file_names: Iterable[str] | None = None,
) -> None:
    app.setProperty(_THEME_PROPERTY, mode)
    app.setStyleSheet(load_stylesheet(file_names=file_names, mode=mode))
