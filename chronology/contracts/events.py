"""
Event Contracts

Immutable records exchanged between the layers:

- ingestion   -> TimelineEvent, IngestionBatch
- layout      -> LayerLayout
- engine      -> DeletionOutcome
- all layers  -> AuditLogEntry
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple
import hashlib

from .base import Error, EventId, YearRange


# =============================================================================
# INGESTION LAYER CONTRACTS
# =============================================================================

@dataclass(frozen=True)
class RecordRow:
    """One raw `time,title` row before the time field is parsed."""
    time: str
    title: str
    layer: str
    line_number: int = 0


@dataclass(frozen=True)
class TimelineEvent:
    """
    A titled year range on a named layer.

    INVARIANTS:
    ===========
    - start <= end (start == end is a point event)
    - layer is never empty
    - event_id is stable for the event's lifetime
    """
    event_id: EventId
    title: str
    start: int
    end: int
    layer: str

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(
                f"TimelineEvent start {self.start} is after end {self.end}"
            )
        if not self.layer:
            raise ValueError("TimelineEvent layer must be a non-empty string")

    @property
    def is_point(self) -> bool:
        return self.start == self.end

    @property
    def year_range(self) -> YearRange:
        return YearRange(start=self.start, end=self.end)

    def overlaps(self, other: TimelineEvent) -> bool:
        """
        Strict overlap test.

        Events that merely touch (one ends the year the other starts) do not
        overlap, and neither do two coincident point events.
        """
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class IngestionBatch:
    """
    Immutable outcome of ingesting one text blob.

    An empty batch is not an exception: `events` is empty and `error`
    carries NO_EVENTS_PRODUCED for the caller to surface.
    """
    batch_id: str
    layer: str
    events: Tuple[TimelineEvent, ...]
    rows_total: int
    rows_dropped: int
    error: Optional[Error] = None

    @property
    def is_empty(self) -> bool:
        return not self.events


# =============================================================================
# LAYOUT CONTRACTS
# =============================================================================

@dataclass(frozen=True)
class LayerLayout:
    """
    Lane assignment for one layer.

    Derived data: recomputed from scratch whenever the layer's events change.
    """
    layer: str
    lane_count: int
    lanes: Tuple[Tuple[EventId, int], ...] = field(default_factory=tuple)

    def lane_of(self, event_id: EventId) -> Optional[int]:
        for eid, lane in self.lanes:
            if eid == event_id:
                return lane
        return None

    def as_dict(self) -> dict:
        return {eid.value: lane for eid, lane in self.lanes}


@dataclass(frozen=True)
class DeletionOutcome:
    """Result of a layer deletion request (idempotent)."""
    layer: str
    removed: bool
    events_removed: int = 0


# =============================================================================
# OBSERVABILITY CONTRACTS
# =============================================================================

class AuditEventType(Enum):
    """Explicit audit event types."""
    INGESTION = "ingestion"
    LAYOUT = "layout"
    VIEWPORT = "viewport"
    ORDERING = "ordering"
    ERROR = "error"
    SYSTEM = "system"


# Per-layer cap on retained audit entries; the oldest are evicted first.
AUDIT_LOG_LIMIT = 10000


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    entry_id: str
    event_type: AuditEventType
    timestamp: datetime
    layer: str  # Which engine layer generated this
    action: str
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(
        event_type: AuditEventType,
        layer: str,
        action: str,
        sequence: int,
        entity_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        metadata: tuple = ()
    ) -> AuditLogEntry:
        now = datetime.now(timezone.utc)
        entry_hash = hashlib.sha256(
            f"{layer}|{action}|{sequence}|{now.timestamp()}".encode()
        ).hexdigest()[:16]
        return AuditLogEntry(
            entry_id=f"audit_{entry_hash}",
            event_type=event_type,
            timestamp=now,
            layer=layer,
            action=action,
            entity_id=entity_id,
            entity_type=entity_type,
            metadata=tuple((k, str(v)) for k, v in metadata)
        )
