"""Scroll pull controller.

Turns "more items needed" signals into batched requests against the scroll
source.  At most one batch (a :class:`PullSession`) is in flight; end-reached
signals raised meanwhile are folded into a single queued follow-up batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from pullview.application.services.list_store import ListStore
from pullview.config import DEFAULT_INITIAL_PULL_AMOUNT, DEFAULT_PULL_AMOUNT
from pullview.errors import KeyExtractionError
from pullview.errors.handler import ErrorHandler, ErrorSeverity
from pullview.streams.source import Source, SourceReader, as_exception, is_error

LOGGER = logging.getLogger(__name__)

KeyExtractor = Callable[[Any], Any]


def default_key(item: Any) -> Any:
    """Return ``item.key`` or ``item["key"]``."""
    if isinstance(item, dict):
        if "key" in item:
            return item["key"]
    else:
        value = getattr(item, "key", None)
        if value is not None:
            return value
    raise KeyExtractionError(f"Cannot extract a key from {item!r}")


@dataclass
class PullSession:
    """Bookkeeping for one batch pull."""

    amount: int
    buffer: List[Any] = field(default_factory=list)
    keys: List[Any] = field(default_factory=list)

    @property
    def full(self) -> bool:
        return len(self.buffer) >= self.amount

    def position(self, key: Any) -> int:
        for index, buffered in enumerate(self.keys):
            if buffered == key:
                return index
        return -1

    def add(self, key: Any, item: Any) -> None:
        self.keys.append(key)
        self.buffer.append(item)


class ScrollPullController:
    """Pull items from the scroll source into a :class:`ListStore`.

    *key* maps an item to its identity; items whose key is already known
    replace the known entry instead of being appended.
    """

    def __init__(
        self,
        store: ListStore,
        key: KeyExtractor,
        *,
        initial_amount: int = DEFAULT_INITIAL_PULL_AMOUNT,
        pull_amount: int = DEFAULT_PULL_AMOUNT,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        if key is None:
            raise KeyExtractionError("ScrollPullController requires a key extractor")
        self._store = store
        self._key = key
        self._initial_amount = initial_amount
        self._pull_amount = pull_amount
        self._error_handler = error_handler

        self._reader: Optional[SourceReader] = None
        self._session: Optional[PullSession] = None
        self._queued_amount = 0
        # Bumped by stop(); replies stamped with an older epoch are dropped.
        self._epoch = 0

    # -- properties --------------------------------------------------------

    @property
    def source(self) -> Optional[Source]:
        return self._reader.source if self._reader is not None else None

    @property
    def is_pulling(self) -> bool:
        return self._session is not None

    @property
    def queued_amount(self) -> int:
        return self._queued_amount

    @property
    def session(self) -> Optional[PullSession]:
        return self._session

    # -- public API --------------------------------------------------------

    def start(self, source: Optional[Source] = None) -> None:
        """Bind *source* (if given) and pull the initial batch.

        Binding while a batch is in flight keeps the batch: items it already
        buffered are committed as usual and its remaining requests go to the
        new source.
        """
        if source is not None:
            self._bind(source)
            if not self._store.more_available:
                # A fresh source has not ended yet, whatever the old one did.
                self._store.set_more_available(True)
        if self._store.more_available:
            self._pull(self._initial_amount)

    def on_end_reached(self, info: Any = None) -> None:
        """Handle the rendering surface reporting that the end is near."""
        if self._store.more_available:
            self._pull(self._pull_amount)

    def stop(self) -> None:
        """Terminate the source and reset the list to empty."""
        if self._reader is not None:
            self._reader.abort()
            self._reader = None
        self._epoch += 1
        if self._session is not None:
            LOGGER.debug("Discarding in-flight batch of %d items", len(self._session.buffer))
        self._session = None
        self._queued_amount = 0
        self._store.reset()

    # -- internal ----------------------------------------------------------

    def _bind(self, source: Source) -> None:
        epoch = self._epoch
        reader: SourceReader

        def _on_reply(end: Any, item: Any) -> None:
            self._on_reply(reader, epoch, end, item)

        reader = SourceReader(source, _on_reply, name="scroll source")
        self._reader = reader

    def _pull(self, amount: int) -> None:
        if self._reader is None:
            return
        if self._session is not None:
            self._queued_amount = amount
            LOGGER.debug("Pull of %d queued behind in-flight batch", amount)
            return
        self._session = PullSession(amount=amount)
        self._reader.request()

    def _on_reply(self, reader: SourceReader, epoch: int, end: Any, item: Any) -> None:
        session = self._session
        if epoch != self._epoch or session is None:
            LOGGER.debug("Dropping scroll reply outside of a batch")
            return

        if end:
            if is_error(end):
                self._report(end)
            # A superseded source ending says nothing about the bound one.
            self._finalize(session, more_available=reader is not self._reader)
            return

        key = self._key(item)
        row = self._store.index_of(self._key, key)
        if row >= 0:
            self._store.replace_at(row, item)
        else:
            position = session.position(key)
            if position >= 0:
                session.buffer[position] = item
            else:
                session.add(key, item)
                if session.full:
                    self._finalize(session, more_available=True)
                    return

        if self._session is session and self._reader is not None:
            self._reader.request()

    def _finalize(self, session: PullSession, more_available: bool) -> None:
        self._session = None
        self._store.append(session.buffer, more_available)
        remaining = self._queued_amount
        if remaining > 0:
            self._queued_amount = 0
            if self._store.more_available:
                self._pull(remaining)
            else:
                LOGGER.debug("Dropping queued pull of %d; scroll source exhausted", remaining)

    def _report(self, end: Any) -> None:
        exc = as_exception(end)
        if self._error_handler is not None:
            self._error_handler.handle(exc, ErrorSeverity.WARNING, {"stream": "scroll"})
        else:
            LOGGER.warning("Scroll source ended with error: %s", exc)


__all__ = ["KeyExtractor", "PullSession", "ScrollPullController", "default_key"]
