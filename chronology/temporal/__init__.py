"""
Temporal Parsing Layer
======================

Historical-date parsing for the timeline.

INVARIANTS:
- Parsing never raises; failure is None
- Ranges are always normalised to start <= end
- The current year is read from an injected YearClock, never at import

Modules:
- clock: injectable current-year source
- tokens: single year token -> signed year
- ranges: time field -> YearRange
"""

from .clock import YearClock
from .tokens import parse_year_token, bc_to_astronomical
from .ranges import parse_time_field, format_year, format_range, RANGE_DELIMITERS

__all__ = [
    'YearClock',
    'parse_year_token',
    'bc_to_astronomical',
    'parse_time_field',
    'format_year',
    'format_range',
    'RANGE_DELIMITERS',
]
