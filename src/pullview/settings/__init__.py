from .options import PullListOptions
from .schema import DEFAULT_OPTIONS, OPTIONS_SCHEMA, merge_with_defaults, validate_options

__all__ = [
    "DEFAULT_OPTIONS",
    "OPTIONS_SCHEMA",
    "PullListOptions",
    "merge_with_defaults",
    "validate_options",
]
