"""Role definitions exposed by the pull list model."""

from __future__ import annotations

from enum import IntEnum
from typing import Dict

from PySide6.QtCore import Qt


class Roles(IntEnum):
    """Custom roles exposed to QML or widgets."""

    ITEM = Qt.UserRole + 1
    KEY = Qt.UserRole + 2


def role_names(base: Dict[int, bytes] | None = None) -> Dict[int, bytes]:
    """Return a mapping of Qt role numbers to byte names."""

    mapping: Dict[int, bytes] = {} if base is None else dict(base)
    mapping.update(
        {
            Roles.ITEM: b"item",
            Roles.KEY: b"itemKey",
        }
    )
    return mapping


__all__ = ["Roles", "role_names"]
