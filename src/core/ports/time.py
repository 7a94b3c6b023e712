"""
Time Adapter Interface.

All timestamps are UTC. Components never read the wall clock directly so
tests can pin time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockPort(Protocol):
    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
