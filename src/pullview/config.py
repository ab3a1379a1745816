"""Default configuration values for pullview."""

from __future__ import annotations

from typing import Final

# Items requested from the scroll source as soon as it is bound.
DEFAULT_INITIAL_PULL_AMOUNT: Final[int] = 4

# Items requested each time the view reports that the end is near.
DEFAULT_PULL_AMOUNT: Final[int] = 30

# Distance from the end, in viewport lengths, at which the rendering surface
# should report end-reached.  Forwarded untouched unless overridden.
DEFAULT_END_THRESHOLD: Final[float] = 4

OPTIONS_SCHEMA_ID: Final[str] = "pullview/list-options@1"
