from .source import (
    Callback,
    Source,
    SourceFactory,
    SourceReader,
    as_exception,
    is_error,
)
from .sources import empty, error, once, values

__all__ = [
    "Callback",
    "Source",
    "SourceFactory",
    "SourceReader",
    "as_exception",
    "empty",
    "error",
    "is_error",
    "once",
    "values",
]
