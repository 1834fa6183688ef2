"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Layers may import types but MUST NOT modify this module
- All types are frozen dataclasses for immutability guarantee
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple
from enum import Enum, auto
import itertools


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for deterministic error handling.
    No silent fallbacks - every error state is enumerated.
    """
    # Ingestion errors
    NO_EVENTS_PRODUCED = auto()

    # Layer errors
    LAYER_NOT_FOUND = auto()

    # Reposition errors
    NO_ACTIVE_DRAG = auto()
    DRAG_IN_PROGRESS = auto()

    # Viewport errors
    INVALID_ZOOM = auto()
    INVALID_PAN = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(code: ErrorCode, message: str, **context: str) -> Error:
        """Build an error stamped with the current UTC time."""
        return Error(
            code=code,
            message=message,
            timestamp=datetime.now(timezone.utc),
            context=tuple((k, str(v)) for k, v in context.items())
        )


@dataclass(frozen=True)
class Result:
    """
    Generic result type for operations that can fail.
    Either contains a value OR an error, never both.
    """
    value: Optional[object] = None
    error: Optional[Error] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @staticmethod
    def success(value: object) -> Result:
        return Result(value=value, error=None)

    @staticmethod
    def failure(error: Error) -> Result:
        return Result(value=None, error=error)


# =============================================================================
# IDENTITY TYPES
# =============================================================================

@dataclass(frozen=True)
class EventId:
    """Immutable event identifier, assigned once at ingestion."""
    value: str

    def __post_init__(self):
        if not self.value or not isinstance(self.value, str):
            raise ValueError("EventId value must be a non-empty string")


class EventIdSequence:
    """
    Strictly monotonic event id generator.

    Ids are never reused, even after the events they named are deleted.
    """

    def __init__(self, prefix: str = "evt", start: int = 1):
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._issued = 0

    def next_id(self) -> EventId:
        self._issued += 1
        return EventId(value=f"{self._prefix}_{next(self._counter):06d}")

    @property
    def issued(self) -> int:
        return self._issued


# =============================================================================
# TEMPORAL TYPES (Immutable, explicit semantics)
# =============================================================================

@dataclass(frozen=True)
class YearRange:
    """
    Immutable signed-year range (astronomical numbering, year 0 = 1 BC).

    start == end denotes a single point in time.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError("YearRange start must be before or equal to end")

    @staticmethod
    def ordered(a: int, b: int) -> YearRange:
        """Build a range from two years in either order."""
        return YearRange(start=a, end=b) if a <= b else YearRange(start=b, end=a)

    @staticmethod
    def point(year: int) -> YearRange:
        return YearRange(start=year, end=year)

    @property
    def is_point(self) -> bool:
        return self.start == self.end

    @property
    def span(self) -> int:
        return self.end - self.start
