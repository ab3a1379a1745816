"""List state shared by the scroll and prefix pull controllers.

The store never mutates a published tuple: every change builds a new
``ListSnapshot`` so consumers that compare by reference see it, toggles the
change token for consumers that only watch the token, and emits a precise
``ListChange`` for consumers that want row-level invalidation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Tuple

from pullview.gui.viewmodels.signal import Signal

LOGGER = logging.getLogger(__name__)


class ChangeKind(Enum):
    RESET = "reset"
    APPEND = "append"
    PREPEND = "prepend"
    UPDATE = "update"
    STATUS = "status"


@dataclass(frozen=True)
class ListChange:
    """One store mutation: *items* now occupy rows ``start`` onwards."""

    kind: ChangeKind
    start: int = 0
    items: Tuple[Any, ...] = ()

    @property
    def count(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class ListSnapshot:
    """Immutable view of the list handed to the rendering surface."""

    items: Tuple[Any, ...] = ()
    more_available: bool = True
    change_token: int = 0

    def __len__(self) -> int:
        return len(self.items)


class ListStore:
    """Single mutable source of truth for one pull list.

    ``changed`` is emitted as ``changed(snapshot, change)`` after every
    mutation.
    """

    def __init__(self) -> None:
        self._snapshot = ListSnapshot()
        self.changed = Signal()

    # -- properties --------------------------------------------------------

    @property
    def snapshot(self) -> ListSnapshot:
        return self._snapshot

    @property
    def items(self) -> Tuple[Any, ...]:
        return self._snapshot.items

    @property
    def more_available(self) -> bool:
        return self._snapshot.more_available

    @property
    def change_token(self) -> int:
        return self._snapshot.change_token

    # -- queries -----------------------------------------------------------

    def index_of(self, key: Callable[[Any], Any], value: Any) -> int:
        """Return the row whose key equals *value*, or -1."""
        for row, item in enumerate(self._snapshot.items):
            if key(item) == value:
                return row
        return -1

    # -- mutations ---------------------------------------------------------

    def replace_at(self, row: int, item: Any) -> None:
        items = list(self._snapshot.items)
        items[row] = item
        self._commit(tuple(items), self._snapshot.more_available, ListChange(ChangeKind.UPDATE, row, (item,)))

    def append(self, items: Iterable[Any], more_available: bool) -> None:
        batch = tuple(items)
        start = len(self._snapshot.items)
        self._commit(
            self._snapshot.items + batch,
            more_available,
            ListChange(ChangeKind.APPEND, start, batch),
        )

    def prepend(self, item: Any) -> None:
        self._commit(
            (item,) + self._snapshot.items,
            self._snapshot.more_available,
            ListChange(ChangeKind.PREPEND, 0, (item,)),
        )

    def set_more_available(self, more_available: bool) -> None:
        if more_available == self._snapshot.more_available:
            return
        self._commit(self._snapshot.items, more_available, ListChange(ChangeKind.STATUS))

    def reset(self) -> None:
        """Drop every item and expect more again."""
        self._commit((), True, ListChange(ChangeKind.RESET))

    def _commit(self, items: Tuple[Any, ...], more_available: bool, change: ListChange) -> None:
        self._snapshot = ListSnapshot(
            items=items,
            more_available=more_available,
            change_token=1 - self._snapshot.change_token,
        )
        LOGGER.debug(
            "List %s at row %d (%d items), %d rows total, more_available=%s",
            change.kind.value,
            change.start,
            change.count,
            len(items),
            more_available,
        )
        self.changed.emit(self._snapshot, change)


__all__ = ["ChangeKind", "ListChange", "ListSnapshot", "ListStore"]
