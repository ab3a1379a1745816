"""Typed list options built from a validated mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..config import DEFAULT_END_THRESHOLD, DEFAULT_INITIAL_PULL_AMOUNT, DEFAULT_PULL_AMOUNT
from .schema import merge_with_defaults


@dataclass(frozen=True)
class PullListOptions:
    initial_amount: int = DEFAULT_INITIAL_PULL_AMOUNT
    pull_amount: int = DEFAULT_PULL_AMOUNT
    end_threshold: float = DEFAULT_END_THRESHOLD

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None = None) -> "PullListOptions":
        """Validate *data* and fill the gaps with defaults."""
        merged = merge_with_defaults(data)
        return cls(
            initial_amount=merged["initial_amount"],
            pull_amount=merged["pull_amount"],
            end_threshold=merged["end_threshold"],
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "initial_amount": self.initial_amount,
            "pull_amount": self.pull_amount,
            "end_threshold": self.end_threshold,
        }
