"""Type aliases used across MeritFlow."""

from __future__ import annotations

# One sheet row as trimmed cell text
RawRow = list[str]
