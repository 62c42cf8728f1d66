from __future__ import annotations

from PySide6.QtWidgets import QFormLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton, QWidget

from condoadmin.app.settings_store import SupabaseSettings, save_supabase_settings
from condoadmin.ui.window.frameless_dialog import FramelessDialog


class SupabaseSettingsDialog(FramelessDialog):
    def __init__(
        self,
        current: SupabaseSettings,
        *,
        parent: QWidget | None = None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title="Conexão com o Supabase", parent=parent, theme_mode=theme_mode)
        self.setMinimumSize(520, 280)
        self.resize(580, 300)
        self._current = current
        self.settings: SupabaseSettings | None = None

        hint = QLabel(
            "Informe a URL do projeto e a chave anônima (anon key) do Supabase.",
            self.body,
        )
        hint.setWordWrap(True)
        hint.setObjectName("DialogHint")
        self.body_layout.addWidget(hint)

        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(12)
        form.setVerticalSpacing(10)

        self._url_input = QLineEdit(self.body)
        self._url_input.setObjectName("FormInput")
        self._url_input.setPlaceholderText("https://<projeto>.supabase.co")
        self._url_input.setText(current.url)
        form.addRow("URL", self._url_input)

        self._key_input = QLineEdit(self.body)
        self._key_input.setObjectName("FormInput")
        self._key_input.setEchoMode(QLineEdit.EchoMode.Password)
        self._key_input.setText(current.anon_key)
        form.addRow("Anon key", self._key_input)
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
        footer.addStretch(1)

        cancel_button = QPushButton("Cancelar", self.body)
        cancel_button.setObjectName("DialogButton")
        cancel_button.clicked.connect(self.reject)
        footer.addWidget(cancel_button)

        save_button = QPushButton("Salvar", self.body)
        save_button.setObjectName("DialogButton")
        save_button.setProperty("primary", "true")
        save_button.clicked.connect(self._on_save)
        footer.addWidget(save_button)
        self.body_layout.addLayout(footer)

        self._url_input.setFocus()

    def _on_save(self) -> None:
        url = self._url_input.text().strip()
        anon_key = self._key_input.text().strip()
        if not url or not anon_key:
            self._error_label.setText("Informe a URL e a chave anônima.")
            self._error_label.show()
            return
        if not url.startswith(("https://", "http://")):
            self._error_label.setText("A URL deve começar com https://")
            self._error_label.show()
            return
        try:
            self.settings = save_supabase_settings(
                SupabaseSettings(
                    url=url,
                    anon_key=anon_key,
                    timeout_seconds=self._current.timeout_seconds,
                )
            )
        except OSError as exc:
            self._error_label.setText(f"Não foi possível salvar as configurações: {exc}")
            self._error_label.show()
            return
        self.accept()
