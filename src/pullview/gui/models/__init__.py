"""Qt item models backed by pull list view models."""

from .pull_list_model import PullListModel
from .roles import Roles, role_names

__all__ = ["PullListModel", "Roles", "role_names"]
