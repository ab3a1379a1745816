"""Custom exception hierarchy for pullview."""

from __future__ import annotations


class PullViewError(Exception):
    """Base class for all custom errors raised by pullview."""


# --- Stream protocol errors ---

class PullProtocolError(PullViewError):
    """Raised when a pull source is driven against its one-request contract."""


class SourceError(PullViewError):
    """Carries a non-exception error value a source terminated with."""


class KeyExtractionError(PullViewError):
    """Raised when an item's identity key cannot be determined."""


# --- Configuration errors ---

class OptionsError(PullViewError):
    """Base class for list option failures."""


class OptionsValidationError(OptionsError):
    """Raised when list options fail schema validation."""


__all__ = [
    "KeyExtractionError",
    "OptionsError",
    "OptionsValidationError",
    "PullProtocolError",
    "PullViewError",
    "SourceError",
]
