"""
Time Field Parser
=================

Turns a time field ("-2070~-1600", "221BC-207BC", "1949~", "1054") into a
canonical YearRange.

RULES:
- Two tokens joined by any range delimiter; the delimiter carries no meaning
- A missing trailing token ends the range at the clock's current year
- Reversed pairs are swapped so start <= end always holds
- No delimiter: the whole field is one token and yields a point range
- Any token failure yields None
"""

from __future__ import annotations
import re
from typing import Optional, Union

from ..contracts.base import YearRange
from .clock import YearClock
from .tokens import normalize_token, parse_year_token

RANGE_DELIMITERS = ("~", "–", "—", "－", "-", "〜", "～", "至", "到", "to", "until")

_YEAR_TOKEN = r"(?:-?[0-9]+|[0-9]+\s*(?:BC|BCE)|(?:公元)?前\s*[0-9]+)"
_DELIMITER = "(?:" + "|".join(re.escape(d) for d in RANGE_DELIMITERS) + ")"
_RANGE = re.compile(
    r"^\s*(" + _YEAR_TOKEN + r")\s*" + _DELIMITER + r"\s*(" + _YEAR_TOKEN + r")?\s*$",
    re.IGNORECASE,
)


def parse_time_field(
    field: Union[str, int, None],
    clock: Optional[YearClock] = None
) -> Optional[YearRange]:
    """
    Parse a time field into a YearRange.

    Args:
        field: the raw time column
        clock: current-year source for open-ended ranges (system clock
               when omitted)

    Returns:
        YearRange, or None if the field is not a recognisable time.
    """
    s = normalize_token(field)
    if not s:
        return None

    m = _RANGE.match(s)
    if m:
        start = parse_year_token(m.group(1))
        if start is None:
            return None
        if m.group(2) is None:
            end = (clock or YearClock.live()).current_year()
        else:
            end = parse_year_token(m.group(2))
            if end is None:
                return None
        return YearRange.ordered(start, end)

    year = parse_year_token(s)
    if year is None:
        return None
    return YearRange.point(year)


# =============================================================================
# DISPLAY FORMATTING
# =============================================================================

def format_year(year: int) -> str:
    """Axis label: negative years print as "<n> BC"."""
    return f"{-year} BC" if year < 0 else f"{year}"


def format_range(start: int, end: int) -> str:
    """Compact event label such as "220BC~206BC" or "1949~2024"."""
    a = f"{-start}BC" if start < 0 else f"{start}"
    b = f"{-end}BC" if end < 0 else f"{end}"
    return f"{a}~{b}"
