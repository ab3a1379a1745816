"""Prefix pull controller: drains a source onto the head of the list."""

from __future__ import annotations

import logging
from typing import Any, Optional

from pullview.application.services.list_store import ListStore
from pullview.errors.handler import ErrorHandler, ErrorSeverity
from pullview.streams.source import Source, SourceReader, as_exception, is_error

LOGGER = logging.getLogger(__name__)


class PrefixPullController:
    """Continuously pull from a source and prepend each item as it arrives.

    Prefix items are not deduplicated, neither against each other nor
    against scroll items already in the list.
    """

    def __init__(self, store: ListStore, *, error_handler: Optional[ErrorHandler] = None) -> None:
        self._store = store
        self._error_handler = error_handler
        self._reader: Optional[SourceReader] = None

    @property
    def source(self) -> Optional[Source]:
        return self._reader.source if self._reader is not None else None

    @property
    def running(self) -> bool:
        return self._reader is not None

    def start(self, source: Optional[Source]) -> None:
        if source is None:
            return
        if self._reader is not None:
            self._reader.abort()
        reader: SourceReader

        def _on_reply(end: Any, item: Any) -> None:
            self._on_reply(reader, end, item)

        reader = SourceReader(source, _on_reply, name="prefix source")
        self._reader = reader
        reader.request()

    def stop(self) -> None:
        if self._reader is not None:
            self._reader.abort()
            self._reader = None

    def _on_reply(self, reader: SourceReader, end: Any, item: Any) -> None:
        if reader is not self._reader:
            return
        if end:
            if is_error(end):
                self._report(end)
            else:
                LOGGER.debug("Prefix source ended")
            self._reader = None
            return
        self._store.prepend(item)
        if reader is self._reader:
            reader.request()

    def _report(self, end: Any) -> None:
        exc = as_exception(end)
        if self._error_handler is not None:
            self._error_handler.handle(exc, ErrorSeverity.WARNING, {"stream": "prefix"})
        else:
            LOGGER.warning("Prefix source ended with error: %s", exc)


__all__ = ["PrefixPullController"]
