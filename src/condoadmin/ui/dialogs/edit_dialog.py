from __future__ import annotations

from typing import Any, Callable

from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from condoadmin.core.workflow import EditWorkflow, WorkflowMode, WorkflowState
from condoadmin.ui.dialogs.confirm_dialog import ConfirmGateDialog
from condoadmin.ui.window.frameless_dialog import FramelessDialog


SAVING_TEXT = "Salvando..."

DraftUpdater = Callable[..., None]
RenderFields = Callable[[Any, DraftUpdater], QWidget]


class EditDialogBase(FramelessDialog):
    """Create/edit dialog driven entirely by an ``EditWorkflow``.

    The dialog shows itself when the workflow opens and hides when it closes.
    ``render_fields(draft, update_draft)`` builds the form once per open; field
    widgets push their edits back through ``update_draft``. Escape and the
    title-bar close button force-close the workflow, even mid-save.
    """

    def __init__(
        self,
        workflow: EditWorkflow[Any, Any],
        render_fields: RenderFields,
        *,
        create_title: str,
        edit_title: str,
        save_text: str = "Salvar",
        parent: QWidget | None = None,
        theme_mode: str | None = None,
    ) -> None:
        super().__init__(title=create_title, parent=parent, theme_mode=theme_mode)
        self.setMinimumSize(540, 380)
        self.resize(600, 440)
        self._workflow = workflow
        self._render_fields = render_fields
        self._create_title = create_title
        self._edit_title = edit_title
        self._fields: QWidget | None = None
        self._fields_generation = -1
        self._syncing = False

        self._fields_host = QWidget(self.body)
        self._fields_layout = QVBoxLayout(self._fields_host)
        self._fields_layout.setContentsMargins(0, 0, 0, 0)
        self.body_layout.addWidget(self._fields_host, 1)

        self._error_label = QLabel(self.body)
        self._error_label.setWordWrap(True)
        self._error_label.setObjectName("DialogError")
        self._error_label.hide()
        self.body_layout.addWidget(self._error_label)

        footer = QHBoxLayout()
        footer.setContentsMargins(0, 0, 0, 0)
        footer.setSpacing(8)
        self._busy_label = QLabel(SAVING_TEXT, self.body)
        self._busy_label.setObjectName("BusyLabel")
        self._busy_label.hide()
        footer.addWidget(self._busy_label)
        footer.addStretch(1)

        self._cancel_button = QPushButton("Cancelar", self.body)
        self._cancel_button.setObjectName("DialogButton")
        self._cancel_button.clicked.connect(self._workflow.cancel)
        footer.addWidget(self._cancel_button)

        self._save_button = QPushButton(save_text, self.body)
        self._save_button.setObjectName("DialogButton")
        self._save_button.setProperty("primary", "true")
        self._save_button.setDefault(True)
        self._save_button.clicked.connect(self._workflow.submit)
        footer.addWidget(self._save_button)
        self.body_layout.addLayout(footer)

        self._confirm_dialog = ConfirmGateDialog(workflow.gate, self, theme_mode=self.theme_mode)

        self._unsubscribe = workflow.subscribe(self._on_workflow_changed)
        self.destroyed.connect(lambda _obj=None: self._unsubscribe())

    @property
    def workflow(self) -> EditWorkflow[Any, Any]:
        return self._workflow

    @property
    def fields(self) -> QWidget | None:
        return self._fields

    def reject(self) -> None:
        if self._syncing:
            super().reject()
            return
        self._workflow.close()

    def _on_workflow_changed(self, workflow: EditWorkflow[Any, Any]) -> None:
        if not workflow.is_open:
            self._clear_fields()
            if self.isVisible():
                self._syncing = True
                try:
                    super().reject()
                finally:
                    self._syncing = False
            return

        if self._fields is None or self._fields_generation != workflow.generation:
            self._clear_fields()
            self._build_fields(workflow)

        error = workflow.error or ""
        self._error_label.setText(error)
        self._error_label.setVisible(bool(error))

        busy = workflow.busy
        self._busy_label.setVisible(workflow.state is WorkflowState.SAVING)
        self._save_button.setEnabled(workflow.state is WorkflowState.EDITING)
        self._cancel_button.setEnabled(not busy)
        self._fields_host.setEnabled(workflow.state is WorkflowState.EDITING)

        if not self.isVisible():
            self.open()

    def _build_fields(self, workflow: EditWorkflow[Any, Any]) -> None:
        title = self._edit_title if workflow.mode is WorkflowMode.EDIT else self._create_title
        self.set_dialog_title(title)
        self._fields = self._render_fields(workflow.draft, workflow.update_draft)
        self._fields.setParent(self._fields_host)
        self._fields_layout.addWidget(self._fields)
        self._fields_generation = workflow.generation

    def _clear_fields(self) -> None:
        if self._fields is None:
            return
        self._fields_layout.removeWidget(self._fields)
        self._fields.deleteLater()
        self._fields = None
