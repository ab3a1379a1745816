"""Ready-made pull sources built from plain Python values."""

from __future__ import annotations

from typing import Any, Iterable

from .source import Callback, Source


def values(iterable: Iterable[Any]) -> Source:
    """Return a source that yields each element of *iterable* lazily.

    Infinite iterables are fine; only one element is consumed per request.
    An exception raised by the iterator ends the stream with that error.
    """

    iterator = iter(iterable)
    state = {"done": False}

    def source(abort: Any, callback: Callback) -> None:
        if abort:
            if not state["done"]:
                state["done"] = True
                close = getattr(iterator, "close", None)
                if close is not None:
                    close()
            callback(abort)
            return
        if state["done"]:
            callback(True)
            return
        try:
            item = next(iterator)
        except StopIteration:
            state["done"] = True
            callback(True)
            return
        except Exception as exc:
            state["done"] = True
            callback(exc)
            return
        callback(None, item)

    return source


def once(item: Any) -> Source:
    """Source yielding a single item."""
    return values((item,))


def empty() -> Source:
    """Source that ends immediately."""
    return values(())


def error(exc: BaseException) -> Source:
    """Source that terminates with *exc* on the first request."""

    def source(abort: Any, callback: Callback) -> None:
        callback(abort if abort else exc)

    return source


__all__ = ["empty", "error", "once", "values"]
