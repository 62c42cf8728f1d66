from __future__ import annotations

from condoadmin.ui.window.app_dialogs import AppConfirmDialog
from condoadmin.ui.window.frameless_dialog import DialogTitleBar, FramelessDialog, repolish

__all__ = [
    "AppConfirmDialog",
    "DialogTitleBar",
    "FramelessDialog",
    "repolish",
]
