from __future__ import annotations

from PySide6.QtWidgets import (
    QCheckBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QWidget,
)

from condoadmin.app.auth_session import MISSING_CREDENTIALS_MESSAGE, login_error_message, sign_in
from condoadmin.app.supabase_client import AuthSession, SupabaseClient
from condoadmin.core.tasks import TaskRunner
from condoadmin.ui.window.frameless_dialog import FramelessDialog


class LoginDialog(FramelessDialog):
    def __init__(
        self,
        client: SupabaseClient,
        *,
        runner: TaskRunner,
        remembered_email: str = "",
        parent: QWidget | None = None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title="Portal do Condomínio", parent=parent, theme_mode=theme_mode)
        self.setMinimumSize(460, 300)
        self.resize(500, 320)
        self._client = client
        self._runner = runner
        self._busy = False
        self.session: AuthSession | None = None

        hint = QLabel("Acesse a área administrativa.", self.body)
        hint.setObjectName("DialogHint")
        self.body_layout.addWidget(hint)

        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(12)
        form.setVerticalSpacing(10)

        self._email_input = QLineEdit(self.body)
        self._email_input.setObjectName("FormInput")
        self._email_input.setPlaceholderText("seu.email@exemplo.com")
        self._email_input.setText(remembered_email)
        form.addRow("E-mail", self._email_input)

        self._password_input = QLineEdit(self.body)
        self._password_input.setObjectName("FormInput")
        self._password_input.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Senha", self._password_input)

        self._remember_check = QCheckBox("Lembrar-me", self.body)
        self._remember_check.setChecked(bool(remembered_email))
        form.addRow("", self._remember_check)
        self.body_layout.addLayout(form)

        self._error_label = QLabel(self.body)
        self._error_label.setWordWrap(True)
        self._error_label.setObjectName("DialogError")
        self._error_label.hide()
        self.body_layout.addWidget(self._error_label)
        self.body_layout.addStretch(1)

        footer = QHBoxLayout()
        footer.setContentsMargins(0, 0, 0, 0)
        footer.setSpacing(8)
        self._busy_label = QLabel("Entrando...", self.body)
        self._busy_label.setObjectName("BusyLabel")
        self._busy_label.hide()
        footer.addWidget(self._busy_label)
        footer.addStretch(1)

        self._cancel_button = QPushButton("Sair", self.body)
        self._cancel_button.setObjectName("DialogButton")
        self._cancel_button.clicked.connect(self.reject)
        footer.addWidget(self._cancel_button)

        self._login_button = QPushButton("Entrar", self.body)
        self._login_button.setObjectName("DialogButton")
        self._login_button.setProperty("primary", "true")
        self._login_button.setDefault(True)
        self._login_button.clicked.connect(self._submit)
        footer.addWidget(self._login_button)
        self.body_layout.addLayout(footer)

        self._password_input.returnPressed.connect(self._submit)
        if remembered_email:
            self._password_input.setFocus()
        else:
            self._email_input.setFocus()

    def reject(self) -> None:
        if self._busy:
            return
        super().reject()

    def _submit(self) -> None:
        if self._busy:
            return
        email = self._email_input.text().strip()
        password = self._password_input.text()
        if not email or not password:
            self._show_error(MISSING_CREDENTIALS_MESSAGE)
            return
        remember = self._remember_check.isChecked()
        self._set_busy(True)
        self._show_error("")
        self._runner.submit(
            lambda: sign_in(self._client, email, password, remember=remember),
            on_success=self._on_signed_in,
            on_error=self._on_failed,
        )

    def _on_signed_in(self, session: AuthSession) -> None:
        self._set_busy(False)
        self.session = session
        self.accept()

    def _on_failed(self, exc: BaseException) -> None:
        self._set_busy(False)
        self._password_input.clear()
        self._password_input.setFocus()
        self._show_error(login_error_message(exc))

    def _set_busy(self, busy: bool) -> None:
        self._busy = busy
        self._busy_label.setVisible(busy)
        self._login_button.setEnabled(not busy)
        self._cancel_button.setEnabled(not busy)
        self._email_input.setEnabled(not busy)
        self._password_input.setEnabled(not busy)
        self.title_bar.set_close_enabled(not busy)

    def _show_error(self, message: str) -> None:
        self._error_label.setText(message)
        self._error_label.setVisible(bool(message))
