from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMenu,
    QPushButton,
    QStackedWidget,
    QTableWidget,
    QTableWidgetItem,
    QToolButton,
    QVBoxLayout,
    QWidget,
)


@dataclass(frozen=True, slots=True)
class TableColumn:
    header: str
    value: Callable[[Any], Any]
    stretch: bool = False


class EntityListPanel(QWidget):
    """Searchable table of records with a "Novo" button and per-row actions.

    The panel only displays what it is given; the owner filters records and
    handles the emitted requests.
    """

    create_requested = Signal()
    edit_requested = Signal(object)
    delete_requested = Signal(object)
    search_changed = Signal(str)

    def __init__(
        self,
        *,
        title: str,
        columns: Sequence[TableColumn],
        new_text: str = "Novo",
        search_placeholder: str = "Buscar...",
        empty_text: str = "Nenhum registro cadastrado",
        empty_filtered_text: str = "Nenhum registro encontrado com esse filtro",
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._columns = tuple(columns)
        self._empty_text = empty_text
        self._empty_filtered_text = empty_filtered_text
        self._records: tuple[Any, ...] = ()
        self._can_edit = True
        self._can_delete = True

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(10)

        header = QHBoxLayout()
        header.setContentsMargins(0, 0, 0, 0)
        header.setSpacing(8)
        self._title_label = QLabel(title, self)
        self._title_label.setObjectName("EntityPanelTitle")
        header.addWidget(self._title_label)
        header.addStretch(1)

        self._search_input = QLineEdit(self)
        self._search_input.setObjectName("EntitySearch")
        self._search_input.setPlaceholderText(search_placeholder)
        self._search_input.setClearButtonEnabled(True)
        self._search_input.setMinimumWidth(240)
        self._search_input.textChanged.connect(self.search_changed.emit)
        header.addWidget(self._search_input)

        self._new_button = QPushButton(new_text, self)
        self._new_button.setObjectName("EntityNewButton")
        self._new_button.clicked.connect(self.create_requested.emit)
        header.addWidget(self._new_button)
        root.addLayout(header)

        self._stack = QStackedWidget(self)
        self._table = QTableWidget(0, len(self._columns) + 1, self._stack)
        self._table.setObjectName("EntityTable")
        self._table.setHorizontalHeaderLabels([column.header for column in self._columns] + [""])
        self._table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self._table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self._table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self._table.setAlternatingRowColors(True)
        self._table.verticalHeader().setVisible(False)
        self._table.cellDoubleClicked.connect(self._on_row_double_clicked)
        table_header = self._table.horizontalHeader()
        for index, column in enumerate(self._columns):
            mode = QHeaderView.ResizeMode.Stretch if column.stretch else QHeaderView.ResizeMode.ResizeToContents
            table_header.setSectionResizeMode(index, mode)
        table_header.setSectionResizeMode(len(self._columns), QHeaderView.ResizeMode.ResizeToContents)
        self._stack.addWidget(self._table)

        self._empty_label = QLabel(self._empty_text, self._stack)
        self._empty_label.setObjectName("EntityEmptyState")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._stack.addWidget(self._empty_label)
        root.addWidget(self._stack, 1)

    @property
    def search_text(self) -> str:
        return self._search_input.text()

    def set_actions_enabled(self, *, create: bool, edit: bool, delete: bool) -> None:
        self._new_button.setVisible(create)
        self._can_edit = edit
        self._can_delete = delete
        self.set_records(self._records)

    def set_records(self, records: Sequence[Any]) -> None:
        self._records = tuple(records)
        self._table.setRowCount(0)
        if not self._records:
            filtered = bool(self._search_input.text().strip())
            self._empty_label.setText(self._empty_filtered_text if filtered else self._empty_text)
            self._stack.setCurrentWidget(self._empty_label)
            return

        self._stack.setCurrentWidget(self._table)
        self._table.setRowCount(len(self._records))
        for row, record in enumerate(self._records):
            for column_index, column in enumerate(self._columns):
                value = column.value(record)
                item = QTableWidgetItem("" if value is None else str(value))
                self._table.setItem(row, column_index, item)
            self._table.setCellWidget(row, len(self._columns), self._build_row_actions(record))

    def _build_row_actions(self, record: Any) -> QWidget:
        button = QToolButton(self._table)
        button.setObjectName("RowActionButton")
        button.setText("⋯")
        button.setToolTip("Ações")
        button.setPopupMode(QToolButton.ToolButtonPopupMode.InstantPopup)
        menu = QMenu(button)
        edit_action = menu.addAction("Editar")
        edit_action.setEnabled(self._can_edit)
        edit_action.triggered.connect(lambda _checked=False, value=record: self.edit_requested.emit(value))
        delete_action = menu.addAction("Excluir")
        delete_action.setEnabled(self._can_delete)
        delete_action.triggered.connect(lambda _checked=False, value=record: self.delete_requested.emit(value))
        button.setMenu(menu)
        button.setEnabled(self._can_edit or self._can_delete)
        return button

    def _on_row_double_clicked(self, row: int, _column: int) -> None:
        if not self._can_edit or not (0 <= row < len(self._records)):
            return
        self.edit_requested.emit(self._records[row])
