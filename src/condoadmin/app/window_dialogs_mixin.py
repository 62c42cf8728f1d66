from __future__ import annotations

from PySide6.QtWidgets import QApplication

from condoadmin.app.settings_store import save_dark_mode
from condoadmin.ui.theme import apply_app_theme
from condoadmin.ui.window.app_dialogs import AppConfirmDialog
from condoadmin.ui.window.frameless_dialog import repolish


class WindowDialogsMixin:
    def _dialog_theme_mode(self) -> str:
        return "dark" if self._dark_mode_enabled else "light"

    def _confirm_dialog(
        self,
        title: str,
        message: str,
        *,
        confirm_text: str = "Confirmar",
        cancel_text: str = "Cancelar",
        danger: bool = False,
    ) -> bool:
        return AppConfirmDialog.ask(
            parent=self,
            title=title,
            message=message,
            confirm_text=confirm_text,
            cancel_text=cancel_text,
            danger=danger,
            theme_mode=self._dialog_theme_mode(),
        )

    def _set_status(self, message: str, *, kind: str = "success") -> None:
        label = self._status_label
        label.setText(message)
        label.setProperty("kind", kind if message else "")
        label.setVisible(bool(message))
        repolish(label)
        if message:
            self._status_timer.start()

    def _clear_status(self) -> None:
        self._set_status("")

    def _toggle_dark_mode(self) -> None:
        self._dark_mode_enabled = not self._dark_mode_enabled
        app = QApplication.instance()
        if app is not None:
            apply_app_theme(app, mode=self._dialog_theme_mode())
        try:
            save_dark_mode(self._dark_mode_enabled)
        except OSError as exc:
            self._logger.warning("Could not persist dark mode: %s", exc)
        self._theme_button.setText("Tema claro" if self._dark_mode_enabled else "Tema escuro")
