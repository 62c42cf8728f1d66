from __future__ import annotations

from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QWidget

from condoadmin.core.confirmation import ConfirmationGate
from condoadmin.ui.window.frameless_dialog import FramelessDialog, repolish


BUSY_TEXT = "Processando..."


class ConfirmGateDialog(FramelessDialog):
    """View of a ``ConfirmationGate``.

    The dialog never decides anything itself: it shows whatever the gate holds,
    forwards the buttons to ``confirm``/``cancel`` and hides once the gate
    closes. Escape and the title-bar button count as cancel, and are ignored
    while the confirmed action is running.
    """

    def __init__(
        self,
        gate: ConfirmationGate,
        parent: QWidget | None = None,
        *,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title="Confirmar", parent=parent, theme_mode=theme_mode)
        self.setMinimumSize(440, 220)
        self.resize(500, 240)
        self._gate = gate
        self._syncing = False

        self._message_label = QLabel(self.body)
        self._message_label.setWordWrap(True)
        self._message_label.setObjectName("DialogHint")
        self.body_layout.addWidget(self._message_label)

        self._error_label = QLabel(self.body)
        self._error_label.setWordWrap(True)
        self._error_label.setObjectName("DialogError")
        self._error_label.hide()
        self.body_layout.addWidget(self._error_label)
        self.body_layout.addStretch(1)

        footer = QHBoxLayout()
        footer.setContentsMargins(0, 0, 0, 0)
        footer.setSpacing(8)
        self._busy_label = QLabel(BUSY_TEXT, self.body)
        self._busy_label.setObjectName("BusyLabel")
        self._busy_label.hide()
        footer.addWidget(self._busy_label)
        footer.addStretch(1)

        self._cancel_button = QPushButton("Cancelar", self.body)
        self._cancel_button.setObjectName("DialogButton")
        self._cancel_button.clicked.connect(self._gate.cancel)
        footer.addWidget(self._cancel_button)

        self._confirm_button = QPushButton("Confirmar", self.body)
        self._confirm_button.setObjectName("DialogButton")
        self._confirm_button.setProperty("primary", "true")
        self._confirm_button.clicked.connect(self._gate.confirm)
        footer.addWidget(self._confirm_button)
        self.body_layout.addLayout(footer)

        self._unsubscribe = gate.subscribe(self._on_gate_changed)
        self.destroyed.connect(lambda _obj=None: self._unsubscribe())

    def reject(self) -> None:
        if self._syncing or not self._gate.is_open:
            super().reject()
            return
        # cancel() is a no-op while busy, so the dialog stays up.
        self._gate.cancel()

    def _on_gate_changed(self, gate: ConfirmationGate) -> None:
        pending = gate.pending
        if pending is None:
            if self.isVisible():
                self._syncing = True
                try:
                    super().reject()
                finally:
                    self._syncing = False
            return

        self.set_dialog_title(pending.title)
        self._message_label.setText(pending.message)
        self._cancel_button.setText(pending.cancel_text)
        self._confirm_button.setText(pending.confirm_text)
        self._confirm_button.setObjectName("DangerButton" if pending.danger else "DialogButton")
        repolish(self._confirm_button)

        error = gate.error or ""
        self._error_label.setText(error)
        self._error_label.setVisible(bool(error))

        busy = gate.busy
        self._busy_label.setVisible(busy)
        self._confirm_button.setEnabled(not busy)
        self._cancel_button.setEnabled(not busy)
        self.title_bar.set_close_enabled(not busy)

        if not self.isVisible():
            self.open()
            self._cancel_button.setFocus()
