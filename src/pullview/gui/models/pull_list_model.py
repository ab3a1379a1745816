from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import (
    QAbstractListModel,
    QModelIndex,
    Qt,
    Signal,
    Slot,
)

from pullview.application.services.list_store import ChangeKind, ListChange, ListSnapshot
from pullview.gui.models.roles import Roles, role_names
from pullview.gui.viewmodels.pull_list_viewmodel import PullListViewModel


_LOGGER = logging.getLogger(__name__)


class PullListModel(QAbstractListModel):
    """
    Qt adapter for PullListViewModel.
    Views drive pulling through canFetchMore()/fetchMore(); list changes are
    forwarded as row-level insert/update/reset notifications.
    """

    footerVisibleChanged = Signal(bool)

    _UPDATE_ROLES = [int(Qt.ItemDataRole.DisplayRole), int(Roles.ITEM), int(Roles.KEY)]

    def __init__(
        self,
        view_model: PullListViewModel,
        display: Optional[Callable[[Any], str]] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._view_model = view_model
        self._display = display or str
        self._rows = tuple(view_model.items.value)

        self._view_model.list_changed.connect(self._on_list_changed)
        self._view_model.more_available.changed.connect(self._on_more_available_changed)

    def view_model(self) -> PullListViewModel:
        return self._view_model

    def rowCount(self, parent=QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._rows)

    def roleNames(self):  # type: ignore[override]
        return role_names(super().roleNames())

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid():
            return None
        row = index.row()
        if not 0 <= row < len(self._rows):
            return None
        item = self._rows[row]

        role_int = int(role)
        if role_int == int(Qt.ItemDataRole.DisplayRole):
            return self._display(item)
        if role_int == Roles.ITEM:
            return item
        if role_int == Roles.KEY:
            return self._view_model.key(item)
        return None

    def canFetchMore(self, parent=QModelIndex()) -> bool:  # type: ignore[override]
        if parent.isValid():
            return False
        return bool(self._view_model.more_available.value)

    def fetchMore(self, parent=QModelIndex()) -> None:  # type: ignore[override]
        if parent.isValid():
            return
        self._view_model.on_end_reached()

    @Slot(result=bool)
    def footerVisible(self) -> bool:
        return self._view_model.footer_visible()

    def detach(self) -> None:
        """Stop listening to the view model."""
        try:
            self._view_model.list_changed.disconnect(self._on_list_changed)
            self._view_model.more_available.changed.disconnect(self._on_more_available_changed)
        except ValueError:
            _LOGGER.debug("PullListModel already detached")

    def _on_list_changed(self, snapshot: ListSnapshot, change: ListChange) -> None:
        kind = change.kind
        if kind is ChangeKind.APPEND and change.count:
            first = change.start
            self.beginInsertRows(QModelIndex(), first, first + change.count - 1)
            self._rows = snapshot.items
            self.endInsertRows()
        elif kind is ChangeKind.PREPEND:
            self.beginInsertRows(QModelIndex(), 0, change.count - 1)
            self._rows = snapshot.items
            self.endInsertRows()
        elif kind is ChangeKind.UPDATE:
            self._rows = snapshot.items
            idx = self.index(change.start, 0)
            if idx.isValid():
                self.dataChanged.emit(idx, idx, self._UPDATE_ROLES)
            else:
                _LOGGER.warning("Skipped dataChanged for invalid row %d", change.start)
        elif kind is ChangeKind.RESET:
            self.beginResetModel()
            self._rows = snapshot.items
            self.endResetModel()
        else:
            self._rows = snapshot.items

    def _on_more_available_changed(self, new_value: bool, _old_value: bool) -> None:
        self.footerVisibleChanged.emit(bool(new_value))
