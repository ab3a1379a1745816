"""Incrementally materialise pull streams into lists for virtualized views."""

from __future__ import annotations

from .application.services import (
    ChangeKind,
    ListChange,
    ListSnapshot,
    ListStore,
    PrefixPullController,
    ScrollPullController,
    default_key,
)
from .gui.viewmodels.pull_list_viewmodel import PullListViewModel
from .settings import PullListOptions

__version__ = "0.1.0"

__all__ = [
    "ChangeKind",
    "ListChange",
    "ListSnapshot",
    "ListStore",
    "PrefixPullController",
    "PullListOptions",
    "PullListViewModel",
    "ScrollPullController",
    "default_key",
]
