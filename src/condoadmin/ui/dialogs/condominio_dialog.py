from __future__ import annotations

from PySide6.QtWidgets import QFormLayout, QLineEdit, QWidget

from condoadmin.app.models import CondominioDraft
from condoadmin.core.workflow import EditWorkflow
from condoadmin.ui.dialogs.edit_dialog import DraftUpdater, EditDialogBase


class CondominioFields(QWidget):
    def __init__(
        self,
        draft: CondominioDraft,
        update_draft: DraftUpdater,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._update_draft = update_draft

        form = QFormLayout(self)
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(12)
        form.setVerticalSpacing(10)

        self.nome_input = self._line_edit(draft.nome_condominio, "Nome do condomínio")
        form.addRow("Nome", self.nome_input)

        self.endereco_input = self._line_edit(draft.endereco_condominio, "Endereço")
        form.addRow("Endereço", self.endereco_input)

        self.cidade_input = self._line_edit(draft.cidade_condominio, "Cidade")
        form.addRow("Cidade", self.cidade_input)

        self.uf_input = self._line_edit(draft.uf_condominio, "SP")
        self.uf_input.setMaxLength(2)
        form.addRow("UF", self.uf_input)

        self.tipo_input = self._line_edit(draft.tipo_condominio, "Residencial, Comercial...")
        form.addRow("Tipo", self.tipo_input)

        self.nome_input.textEdited.connect(lambda text: self._update_draft(nome_condominio=text))
        self.endereco_input.textEdited.connect(lambda text: self._update_draft(endereco_condominio=text))
        self.cidade_input.textEdited.connect(lambda text: self._update_draft(cidade_condominio=text))
        self.uf_input.textEdited.connect(self._on_uf_edited)
        self.tipo_input.textEdited.connect(lambda text: self._update_draft(tipo_condominio=text))

        self.nome_input.setFocus()

    def _line_edit(self, text: str, placeholder: str) -> QLineEdit:
        field = QLineEdit(self)
        field.setObjectName("FormInput")
        field.setPlaceholderText(placeholder)
        field.setText(text or "")
        return field

    def _on_uf_edited(self, text: str) -> None:
        upper = text.upper()
        if upper != text:
            position = self.uf_input.cursorPosition()
            self.uf_input.setText(upper)
            self.uf_input.setCursorPosition(position)
        self._update_draft(uf_condominio=upper)


def create_condominio_dialog(
    workflow: EditWorkflow[CondominioDraft, object],
    *,
    parent: QWidget | None = None,
    theme_mode: str | None = None,
) -> EditDialogBase:
    return EditDialogBase(
        workflow,
        CondominioFields,
        create_title="Adicionar Condomínio",
        edit_title="Editar Condomínio",
        save_text="Salvar",
        parent=parent,
        theme_mode=theme_mode,
    )
