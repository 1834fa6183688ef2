"""
Year Token Parser
=================

Turns one textual token into a signed astronomical year.

GRAMMAR (checked in this order):
1. "<digits> BC" / "<digits>BCE"   -> -(n - 1)   ("1 BC" -> 0)
2. "前<digits>" / "公元前<digits>"   -> -(n - 1)
3. "-<digits>" / "<digits>"         -> the integer as written
4. anything else                    -> None

The parser never raises. Absence (None) is the failure signal.
"""

from __future__ import annotations
import re
from typing import Optional, Union

BOM = "\ufeff"

_BC_SUFFIX = re.compile(r"^([0-9]+)\s*(?:BC|BCE)$", re.IGNORECASE)
_BEFORE_ERA_PREFIX = re.compile(r"^(?:公元)?前\s*([0-9]+)")
_INTEGER = re.compile(r"^-?[0-9]+$")


def bc_to_astronomical(year: int) -> int:
    """There is no year zero in BC/AD numbering: n BC is year -(n - 1)."""
    return -(year - 1)


def normalize_token(token: Union[str, int, None]) -> str:
    """Trim whitespace and a leading byte-order mark."""
    if token is None:
        return ""
    s = str(token).strip()
    if s.startswith(BOM):
        s = s[1:].strip()
    return s


def parse_year_token(token: Union[str, int, None]) -> Optional[int]:
    """
    Parse a single year token.

    Args:
        token: text such as "221BC", "公元前221", "-221" or "1054";
               plain ints are accepted as well

    Returns:
        The astronomical year, or None when the token is not a year.
    """
    s = normalize_token(token)
    if not s:
        return None

    m = _BC_SUFFIX.match(s)
    if m:
        return bc_to_astronomical(int(m.group(1)))

    m = _BEFORE_ERA_PREFIX.match(s)
    if m:
        return bc_to_astronomical(int(m.group(1)))

    if _INTEGER.match(s):
        return int(s)

    return None
