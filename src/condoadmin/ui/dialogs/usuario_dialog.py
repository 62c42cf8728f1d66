from __future__ import annotations

from PySide6.QtWidgets import (
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QSpinBox,
    QToolButton,
    QWidget,
)

from condoadmin.app.models import ACCESS_TYPE_LABELS, UsuarioDraft, clean_phone
from condoadmin.core.workflow import EditWorkflow
from condoadmin.ui.dialogs.edit_dialog import DraftUpdater, EditDialogBase


PHONE_INPUT_MASK = "(00) 00000-0000;_"


class _PasswordField(QWidget):
    """Password line edit with a show/hide toggle."""

    def __init__(self, placeholder: str, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)

        self.input = QLineEdit(self)
        self.input.setObjectName("FormInput")
        self.input.setPlaceholderText(placeholder)
        self.input.setEchoMode(QLineEdit.EchoMode.Password)
        layout.addWidget(self.input, 1)

        self.toggle = QToolButton(self)
        self.toggle.setObjectName("RowActionButton")
        self.toggle.setCheckable(True)
        self.toggle.setText("Mostrar")
        self.toggle.toggled.connect(self._on_toggled)
        layout.addWidget(self.toggle)

    def _on_toggled(self, visible: bool) -> None:
        self.input.setEchoMode(QLineEdit.EchoMode.Normal if visible else QLineEdit.EchoMode.Password)
        self.toggle.setText("Ocultar" if visible else "Mostrar")


class UsuarioFields(QWidget):
    """Form for a user; drafts with an id render in edit mode.

    In edit mode the e-mail is read-only and a current-password field appears,
    needed only when a new password is typed.
    """

    def __init__(
        self,
        draft: UsuarioDraft,
        update_draft: DraftUpdater,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._update_draft = update_draft
        editing = draft.editing

        form = QFormLayout(self)
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(12)
        form.setVerticalSpacing(10)

        self.nome_input = QLineEdit(self)
        self.nome_input.setObjectName("FormInput")
        self.nome_input.setPlaceholderText("Digite o nome completo")
        self.nome_input.setText(draft.nome)
        form.addRow("Nome", self.nome_input)

        self.email_input = QLineEdit(self)
        self.email_input.setObjectName("FormInput")
        self.email_input.setPlaceholderText("usuario@exemplo.com")
        self.email_input.setText(draft.email)
        self.email_input.setReadOnly(editing)
        form.addRow("E-mail", self.email_input)

        self.telefone_input = QLineEdit(self)
        self.telefone_input.setObjectName("FormInput")
        self.telefone_input.setInputMask(PHONE_INPUT_MASK)
        self.telefone_input.setText(clean_phone(draft.telefone) or "")
        form.addRow("Telefone", self.telefone_input)

        self.senha_atual_field: _PasswordField | None = None
        if editing:
            self.senha_atual_field = _PasswordField("Digite a senha atual", self)
            form.addRow("Senha atual", self.senha_atual_field)
            self.senha_atual_field.input.textEdited.connect(
                lambda text: self._update_draft(senha_atual=text)
            )

        self.senha_field = _PasswordField(
            "Digite a nova senha" if editing else "Mínimo 6 caracteres",
            self,
        )
        form.addRow("Nova senha" if editing else "Senha", self.senha_field)

        self.administradora_input = QSpinBox(self)
        self.administradora_input.setObjectName("FormSpin")
        self.administradora_input.setRange(0, 999999)
        self.administradora_input.setValue(int(draft.id_administradora or 0))
        form.addRow("ID Administradora", self.administradora_input)

        self.tipo_acesso_combo = QComboBox(self)
        self.tipo_acesso_combo.setObjectName("FormCombo")
        for value, label in ACCESS_TYPE_LABELS.items():
            self.tipo_acesso_combo.addItem(label, value)
        index = self.tipo_acesso_combo.findData(draft.tipo_acesso)
        if index >= 0:
            self.tipo_acesso_combo.setCurrentIndex(index)
        form.addRow("Tipo de acesso", self.tipo_acesso_combo)

        self.nome_input.textEdited.connect(lambda text: self._update_draft(nome=text))
        self.email_input.textEdited.connect(lambda text: self._update_draft(email=text))
        self.telefone_input.textEdited.connect(lambda _text: self._on_phone_edited())
        self.senha_field.input.textEdited.connect(lambda text: self._update_draft(senha=text))
        self.administradora_input.valueChanged.connect(
            lambda value: self._update_draft(id_administradora=int(value))
        )
        self.tipo_acesso_combo.currentIndexChanged.connect(self._on_access_changed)

        self.nome_input.setFocus()

    def _on_phone_edited(self) -> None:
        self._update_draft(telefone=clean_phone(self.telefone_input.text()) or "")

    def _on_access_changed(self, _index: int) -> None:
        value = self.tipo_acesso_combo.currentData()
        self._update_draft(tipo_acesso=str(value or ""))


def create_usuario_dialog(
    workflow: EditWorkflow[UsuarioDraft, object],
    *,
    parent: QWidget | None = None,
    theme_mode: str | None = None,
) -> EditDialogBase:
    return EditDialogBase(
        workflow,
        UsuarioFields,
        create_title="Novo Usuário",
        edit_title="Editar Usuário",
        save_text="Salvar",
        parent=parent,
        theme_mode=theme_mode,
    )
