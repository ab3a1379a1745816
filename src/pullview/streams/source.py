"""Pull source protocol and the reader that drives it.

A pull source is a callable ``source(abort, callback)``.  Calling it with a
falsy ``abort`` asks for the next item; the source answers exactly once, now or
later, with ``callback(end)`` where ``end`` is truthy (``True`` for a clean end,
anything else is an error value) or with ``callback(None, item)``.  Calling it
with a truthy ``abort`` asks the source to terminate.

Only one request may be outstanding on a source at a time.  ``SourceReader``
enforces that and keeps the call stack flat when a source answers
synchronously.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from pullview.errors import PullProtocolError, SourceError

_logger = logging.getLogger(__name__)

Callback = Callable[..., None]
Source = Callable[[Any, Callback], None]
SourceFactory = Callable[..., Source]
ReplyHandler = Callable[[Any, Any], None]


def is_error(end: Any) -> bool:
    """Return True when *end* is a termination that carries an error value."""
    return bool(end) and end is not True


def as_exception(end: Any) -> BaseException:
    """Normalise an error termination value into an exception instance."""
    if isinstance(end, BaseException):
        return end
    return SourceError(repr(end))


def _ignore_reply(*_args: Any) -> None:
    return None


class SourceReader:
    """Issue requests against one pull source, one at a time.

    ``request()`` may be called again from inside the reply handler.  When the
    source replies synchronously the follow-up request is picked up by the loop
    in the outer ``request()`` frame instead of nesting a new call, so a source
    that yields thousands of items synchronously does not grow the stack.
    """

    def __init__(self, source: Source, on_reply: ReplyHandler, *, name: str = "source") -> None:
        self._source = source
        self._on_reply = on_reply
        self._name = name
        self._outstanding = False
        self._requested = False
        self._draining = False
        self._closed = False

    @property
    def source(self) -> Source:
        return self._source

    @property
    def outstanding(self) -> bool:
        return self._outstanding or self._requested

    @property
    def closed(self) -> bool:
        return self._closed

    def request(self) -> None:
        """Ask the source for its next item."""
        if self._closed:
            return
        if self._outstanding or self._requested:
            raise PullProtocolError(f"{self._name} already has an outstanding request")
        self._requested = True
        if self._draining:
            return
        self._draining = True
        try:
            while self._requested and not self._closed:
                self._requested = False
                self._outstanding = True
                self._call()
                if self._outstanding:
                    # Reply is deferred; the handler restarts the loop.
                    break
        finally:
            self._draining = False

    def abort(self) -> None:
        """Send a termination request and drop any reply still to come."""
        if self._closed:
            return
        self._closed = True
        self._requested = False
        try:
            self._source(True, _ignore_reply)
        except Exception as exc:
            _logger.warning("%s raised while terminating: %s", self._name, exc)

    def _call(self) -> None:
        try:
            self._source(None, self._reply)
        except Exception as exc:
            if not self._outstanding:
                # The reply was already delivered, the failure is the consumer's.
                raise
            _logger.warning("%s raised while reading: %s", self._name, exc)
            self._reply(exc)

    def _reply(self, end: Any = None, item: Optional[Any] = None) -> None:
        if not self._outstanding:
            _logger.warning("%s replied without an outstanding request; ignored", self._name)
            return
        self._outstanding = False
        if self._closed:
            _logger.debug("%s replied after termination; dropped", self._name)
            return
        self._on_reply(end, item)


__all__ = [
    "Callback",
    "ReplyHandler",
    "Source",
    "SourceFactory",
    "SourceReader",
    "as_exception",
    "is_error",
]
