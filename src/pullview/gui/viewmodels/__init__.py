from .signal import Signal, ObservableProperty
from .base import BaseViewModel

__all__ = [
    "BaseViewModel",
    "ObservableProperty",
    "Signal",
]
