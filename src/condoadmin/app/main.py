from __future__ import annotations

import logging
import os
import sys
from typing import Sequence

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from condoadmin.app.condominio_service import CondominioService
from condoadmin.app.models import Condominio, Usuario, access_type_label, format_phone
from condoadmin.app.settings_store import (
    load_dark_mode,
    load_remembered_email,
    load_supabase_settings,
)
from condoadmin.app.supabase_client import SupabaseClient
from condoadmin.app.task_runner import QtTaskRunner
from condoadmin.app.usuario_service import UsuarioService
from condoadmin.app.validators import validate_condominio, validate_usuario
from condoadmin.app.window_dialogs_mixin import WindowDialogsMixin
from condoadmin.app.window_entity_actions_mixin import WindowEntityActionsMixin
from condoadmin.core.collection import RecordCollection
from condoadmin.core.confirmation import ConfirmationGate
from condoadmin.core.workflow import EditWorkflow
from condoadmin.ui.dialogs import (
    ConfirmGateDialog,
    LoginDialog,
    SupabaseSettingsDialog,
    create_condominio_dialog,
    create_usuario_dialog,
)
from condoadmin.ui.theme import apply_app_theme
from condoadmin.ui.widgets import EntityListPanel, TableColumn
from condoadmin.version import APP_NAME, APP_VERSION


_LOG_LEVEL_ENV = "CONDOADMIN_LOG_LEVEL"
_STATUS_TIMEOUT_MS = 6000

_CONDOMINIO_COLUMNS = (
    TableColumn("ID", lambda row: row.id),
    TableColumn("Nome", lambda row: row.nome_condominio, stretch=True),
    TableColumn("Endereço", lambda row: row.endereco_condominio or "-", stretch=True),
    TableColumn("Cidade", lambda row: row.cidade_condominio),
    TableColumn("UF", lambda row: row.uf_condominio),
    TableColumn("Tipo", lambda row: row.tipo_condominio or "-"),
)
_USUARIO_COLUMNS = (
    TableColumn("Nome", lambda row: row.nome, stretch=True),
    TableColumn("E-mail", lambda row: row.email, stretch=True),
    TableColumn("Telefone", lambda row: format_phone(row.telefone) or "-"),
    TableColumn("Administradora", lambda row: row.id_administradora),
    TableColumn("Acesso", lambda row: access_type_label(row.tipo_acesso)),
)


class AdminWindow(WindowDialogsMixin, WindowEntityActionsMixin, QMainWindow):
    def __init__(
        self,
        *,
        client: SupabaseClient,
        runner: QtTaskRunner,
        dark_mode_enabled: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__()
        self._client = client
        self._runner = runner
        self._dark_mode_enabled = bool(dark_mode_enabled)
        self._logger = logger or logging.getLogger("condoadmin.window")
        self._is_admin = False
        session = client.session
        self._session_email = session.user.email if session is not None else ""

        self._condominio_service = CondominioService(client)
        self._usuario_service = UsuarioService(client)
        self._condominios: RecordCollection[Condominio] = RecordCollection()
        self._usuarios: RecordCollection[Usuario] = RecordCollection()

        self._condominio_workflow = EditWorkflow(
            self._condominio_service,
            validator=validate_condominio,
            require_confirmation=False,
            runner=runner,
            on_result=self._on_condominio_result,
            name="condomínio",
        )
        self._usuario_workflow = EditWorkflow(
            self._usuario_service,
            validator=validate_usuario,
            require_confirmation=True,
            runner=runner,
            on_result=self._on_usuario_result,
            confirm_title="Confirmar alterações",
            confirm_message="Deseja salvar os dados deste usuário?",
            name="usuário",
        )
        self._delete_gate = ConfirmationGate(runner=runner)

        self.setWindowTitle(f"Condomínios · Administração ({APP_VERSION})")
        self.resize(1100, 700)
        self._build_ui()

    def _build_ui(self) -> None:
        root = QWidget(self)
        root.setObjectName("AdminWindowRoot")
        layout = QVBoxLayout(root)
        layout.setContentsMargins(18, 14, 18, 14)
        layout.setSpacing(10)

        header = QHBoxLayout()
        header.setContentsMargins(0, 0, 0, 0)
        header.setSpacing(8)
        self._session_label = QLabel(self._session_email, root)
        self._session_label.setObjectName("SessionLabel")
        header.addWidget(self._session_label)
        header.addStretch(1)
        self._theme_button = QPushButton("Tema claro" if self._dark_mode_enabled else "Tema escuro", root)
        self._theme_button.setObjectName("DialogButton")
        self._theme_button.clicked.connect(self._toggle_dark_mode)
        header.addWidget(self._theme_button)
        reload_button = QPushButton("Atualizar", root)
        reload_button.setObjectName("DialogButton")
        reload_button.clicked.connect(self.reload_all)
        header.addWidget(reload_button)
        sign_out_button = QPushButton("Sair", root)
        sign_out_button.setObjectName("DialogButton")
        sign_out_button.clicked.connect(self._sign_out)
        header.addWidget(sign_out_button)
        layout.addLayout(header)

        self._tabs = QTabWidget(root)
        self._condominio_panel = EntityListPanel(
            title="Condomínios",
            columns=_CONDOMINIO_COLUMNS,
            new_text="Novo Condomínio",
            search_placeholder="Buscar por nome, cidade ou UF",
            empty_text="Nenhum condomínio cadastrado",
            empty_filtered_text="Nenhum condomínio encontrado com esse filtro",
            parent=self._tabs,
        )
        self._condominio_panel.create_requested.connect(self._open_create_condominio)
        self._condominio_panel.edit_requested.connect(self._open_edit_condominio)
        self._condominio_panel.delete_requested.connect(self._request_delete_condominio)
        self._condominio_panel.search_changed.connect(lambda _text: self._refresh_condominio_view())
        self._tabs.addTab(self._condominio_panel, "Condomínios")

        self._usuario_panel = EntityListPanel(
            title="Usuários",
            columns=_USUARIO_COLUMNS,
            new_text="Novo Usuário",
            search_placeholder="Buscar por nome ou e-mail",
            empty_text="Nenhum usuário cadastrado",
            empty_filtered_text="Nenhum usuário encontrado com esse filtro",
            parent=self._tabs,
        )
        self._usuario_panel.set_actions_enabled(create=False, edit=False, delete=False)
        self._usuario_panel.create_requested.connect(self._open_create_usuario)
        self._usuario_panel.edit_requested.connect(self._open_edit_usuario)
        self._usuario_panel.delete_requested.connect(self._request_delete_usuario)
        self._usuario_panel.search_changed.connect(lambda _text: self._refresh_usuario_view())
        self._tabs.addTab(self._usuario_panel, "Usuários")
        layout.addWidget(self._tabs, 1)

        self._status_label = QLabel(root)
        self._status_label.setObjectName("StatusLine")
        self._status_label.setWordWrap(True)
        self._status_label.hide()
        layout.addWidget(self._status_label)
        self._status_timer = QTimer(self)
        self._status_timer.setSingleShot(True)
        self._status_timer.setInterval(_STATUS_TIMEOUT_MS)
        self._status_timer.timeout.connect(self._clear_status)

        self.setCentralWidget(root)

        theme_mode = self._dialog_theme_mode()
        self._condominio_dialog = create_condominio_dialog(
            self._condominio_workflow,
            parent=self,
            theme_mode=theme_mode,
        )
        self._usuario_dialog = create_usuario_dialog(
            self._usuario_workflow,
            parent=self,
            theme_mode=theme_mode,
        )
        self._delete_dialog = ConfirmGateDialog(self._delete_gate, self, theme_mode=theme_mode)

    def _sign_out(self) -> None:
        confirmed = self._confirm_dialog(
            "Sair",
            "Deseja encerrar a sessão?",
            confirm_text="Sair",
        )
        if not confirmed:
            return
        self._runner.submit(
            self._client.sign_out,
            on_success=lambda _result: self.close(),
            on_error=lambda _exc: self.close(),
        )

    def closeEvent(self, event) -> None:
        self._condominio_workflow.close()
        self._usuario_workflow.close()
        self._delete_gate.close()
        super().closeEvent(event)


def _configure_logging() -> None:
    level_name = str(os.getenv(_LOG_LEVEL_ENV, "") or "").strip().upper() or "WARNING"
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def run(argv: Sequence[str] | None = None) -> int:
    _configure_logging()
    logger = logging.getLogger("condoadmin")
    app = QApplication.instance()
    if app is None:
        app = QApplication(list(argv or sys.argv))

    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    dark_mode_enabled = load_dark_mode(default=False)
    theme_mode = "dark" if dark_mode_enabled else "light"
    apply_app_theme(app, mode=theme_mode)

    settings = load_supabase_settings()
    if not settings.configured:
        settings_dialog = SupabaseSettingsDialog(settings, theme_mode=theme_mode)
        if settings_dialog.exec() != settings_dialog.DialogCode.Accepted or settings_dialog.settings is None:
            logger.warning("Supabase is not configured; exiting")
            return 1
        settings = settings_dialog.settings

    client = SupabaseClient(settings)
    runner = QtTaskRunner(app)
    login_dialog = LoginDialog(
        client,
        runner=runner,
        remembered_email=load_remembered_email(),
        theme_mode=theme_mode,
    )
    if login_dialog.exec() != login_dialog.DialogCode.Accepted or login_dialog.session is None:
        runner.shutdown()
        return 0
    logger.info("Starting %s %s", APP_NAME, APP_VERSION)

    window = AdminWindow(client=client, runner=runner, dark_mode_enabled=dark_mode_enabled)
    window.show()
    window.reload_all()
    exit_code = app.exec()
    runner.shutdown()
    return exit_code


if __name__ == "__main__":
    raise SystemExit(run())
