"""Qt event-loop helpers for pull sources."""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import QTimer

from .source import Callback, Source


def deferred(source: Source, delay_ms: int = 0) -> Source:
    """Wrap *source* so every reply is delivered from the Qt event loop.

    Useful to turn a synchronous source into one that behaves like a network
    or database backed stream: the consumer's request returns before the
    reply arrives.
    """

    def wrapped(abort: Any, callback: Callback) -> None:
        def _forward(*reply: Any) -> None:
            QTimer.singleShot(delay_ms, lambda: callback(*reply))

        source(abort, _forward)

    return wrapped


__all__ = ["deferred"]
