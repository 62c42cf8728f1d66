from __future__ import annotations

from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
)

from condoadmin.ui.window.frameless_dialog import FramelessDialog


class AppConfirmDialog(FramelessDialog):
    """Blocking yes/no question for actions that do not go through a gate."""

    def __init__(
        self,
        *,
        title: str,
        message: str,
        confirm_text: str = "Confirmar",
        cancel_text: str = "Cancelar",
        danger: bool = False,
        parent=None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title=title, parent=parent, theme_mode=theme_mode)
        self.setMinimumSize(440, 210)
        self.resize(500, 230)

        message_label = QLabel(message, self.body)
        message_label.setWordWrap(True)
        message_label.setObjectName("DialogWarning" if danger else "DialogHint")
        self.body_layout.addWidget(message_label)

        footer = QHBoxLayout()
        footer.setContentsMargins(0, 0, 0, 0)
        footer.setSpacing(8)
        footer.addStretch(1)

        cancel_button = QPushButton(cancel_text, self.body)
        cancel_button.setObjectName("DialogButton")
        cancel_button.clicked.connect(self.reject)
        footer.addWidget(cancel_button)

        confirm_button = QPushButton(confirm_text, self.body)
        if danger:
            confirm_button.setObjectName("DangerButton")
        else:
            confirm_button.setObjectName("DialogButton")
            confirm_button.setProperty("primary", "true")
        confirm_button.clicked.connect(self.accept)
        footer.addWidget(confirm_button)
        self.body_layout.addLayout(footer)

        cancel_button.setFocus()

    @classmethod
    def ask(
        cls,
        *,
        parent,
        title: str,
        message: str,
        confirm_text: str = "Confirmar",
        cancel_text: str = "Cancelar",
        danger: bool = False,
        theme_mode: str | None = None,
    ) -> bool:
        dialog = cls(
            title=title,
            message=message,
            confirm_text=confirm_text,
            cancel_text=cancel_text,
            danger=danger,
            parent=parent,
            theme_mode=theme_mode,
        )
        return dialog.exec() == dialog.DialogCode.Accepted
