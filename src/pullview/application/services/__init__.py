from .list_store import ChangeKind, ListChange, ListSnapshot, ListStore
from .prefix_controller import PrefixPullController
from .scroll_controller import KeyExtractor, PullSession, ScrollPullController, default_key

__all__ = [
    "ChangeKind",
    "KeyExtractor",
    "ListChange",
    "ListSnapshot",
    "ListStore",
    "PrefixPullController",
    "PullSession",
    "ScrollPullController",
    "default_key",
]
