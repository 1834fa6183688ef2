"""
Injectable Year Clock
=====================

Source of "the current year" for open-ended ranges such as `1949~`.

GUARANTEES:
- Never read at import time; every open range asks the clock when parsed
- LIVE mode reads the system clock and counts each reading
- FIXED mode always answers the same year (deterministic tests and replay)
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class YearClock:
    """
    Injectable clock answering the current calendar year.

    MODES:
    ======
    1. LIVE mode: uses real system time, counts readings
    2. FIXED mode: returns a pinned year
    """
    _reading_count: int = 0
    _last_reading: Optional[int] = None
    _is_live: bool = True
    _fixed_year: Optional[int] = None

    def current_year(self) -> int:
        """
        Get the current calendar year.

        In LIVE mode: reads system time and records it as the last reading
        In FIXED mode: returns the pinned year
        """
        if self._is_live:
            year = datetime.now(timezone.utc).year
        else:
            year = self._fixed_year
        self._reading_count += 1
        self._last_reading = year
        return year

    def reading_count(self) -> int:
        """Number of readings taken."""
        return self._reading_count

    def last_reading(self) -> Optional[int]:
        """Year answered by the most recent reading, if any."""
        return self._last_reading

    def is_live(self) -> bool:
        """Whether clock is in live mode."""
        return self._is_live

    @classmethod
    def live(cls) -> 'YearClock':
        """Create clock in LIVE mode (uses system time)."""
        return cls(_is_live=True)

    @classmethod
    def fixed(cls, year: int) -> 'YearClock':
        """Create clock pinned to `year`."""
        return cls(_is_live=False, _fixed_year=int(year))

    def __repr__(self) -> str:
        mode = "LIVE" if self._is_live else f"FIXED({self._fixed_year})"
        return f"YearClock({mode}, readings={self._reading_count})"
