from condoadmin.ui.widgets.entity_table import EntityListPanel, TableColumn

__all__ = [
    "EntityListPanel",
    "TableColumn",
]
