"""
Ingestion Layer

RESPONSIBILITY: Turn raw delimited text into normalised TimelineEvents
ALLOWED INPUTS: `time,title[,...]` text blobs (pasted text or file contents)
OUTPUTS: IngestionBatch (immutable)

WHAT THIS LAYER MUST NOT DO:
============================
- Lay out lanes (layout layer's job)
- Decide layer display order (ordering layer's job)
- Raise on bad rows: unparseable rows are dropped and counted

BOUNDARY ENFORCEMENT:
=====================
This layer ONLY produces IngestionBatch / TimelineEvent objects.
Its only dependencies are the contracts and the temporal parsers.
"""

from __future__ import annotations
from dataclasses import dataclass
from collections import deque
from typing import Deque, Iterable, List, Optional
import hashlib
import itertools
import re

from ..contracts.base import Error, ErrorCode, EventIdSequence
from ..contracts.events import (
    AUDIT_LOG_LIMIT, RecordRow, TimelineEvent, IngestionBatch, AuditLogEntry, AuditEventType
)
from ..temporal.clock import YearClock
from ..temporal.ranges import parse_time_field
from ..temporal.tokens import BOM

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_EXTENSION = re.compile(r"\.[^.]+$")


@dataclass
class IngestionConfig:
    """Configuration for ingestion engine."""
    default_layer_name: str = "default"
    text_layer_name: str = "text"
    file_layer_fallback: str = "file"
    untitled_title: str = "(untitled)"
    comment_prefix: str = "#"
    field_delimiter: str = ","


def layer_name_from_filename(filename: Optional[str], fallback: str = "file") -> str:
    """Layer name for an imported file: its name without the last extension."""
    name = _EXTENSION.sub("", filename or "")
    return name or fallback


class IngestionEngine:
    """
    Record ingestion pipeline.

    PIPELINE:
    =========
    text -> parse_records -> RecordRow* -> rows_to_events -> TimelineEvent*

    Ids come from a strictly monotonic sequence owned by this engine, so
    an id is never reused for the lifetime of the engine.
    """

    def __init__(
        self,
        config: Optional[IngestionConfig] = None,
        clock: Optional[YearClock] = None,
        id_sequence: Optional[EventIdSequence] = None,
        audit_log_limit: int = AUDIT_LOG_LIMIT
    ):
        self._config = config or IngestionConfig()
        self._clock = clock or YearClock.live()
        self._ids = id_sequence or EventIdSequence()
        self._audit_log: Deque[AuditLogEntry] = deque(maxlen=audit_log_limit)
        self._audit_sequence = itertools.count()
        self._batch_count = 0

    @property
    def config(self) -> IngestionConfig:
        return self._config

    @property
    def clock(self) -> YearClock:
        return self._clock

    def parse_records(self, text: Optional[str], layer_name: Optional[str] = None) -> List[RecordRow]:
        """
        Split raw text into rows.

        Blank lines and comment lines are skipped; only the first two
        fields are kept.
        """
        layer = layer_name or self._config.default_layer_name
        t = text or ""
        if t.startswith(BOM):
            t = t[1:]

        rows = []
        for line_number, raw in enumerate(_LINE_BREAK.split(t), start=1):
            line = raw.strip()
            if not line or line.startswith(self._config.comment_prefix):
                continue
            parts = line.split(self._config.field_delimiter)
            time_field = parts[0].strip()
            title = parts[1].strip() if len(parts) > 1 else ""
            rows.append(RecordRow(
                time=time_field,
                title=title,
                layer=layer,
                line_number=line_number
            ))
        return rows

    def rows_to_events(self, rows: Iterable[RecordRow]) -> List[TimelineEvent]:
        """Parse each row's time field; rows that fail are dropped."""
        events = []
        for row in rows:
            year_range = parse_time_field(row.time, clock=self._clock)
            if year_range is None:
                continue
            events.append(TimelineEvent(
                event_id=self._ids.next_id(),
                title=row.title or self._config.untitled_title,
                start=year_range.start,
                end=year_range.end,
                layer=row.layer or self._config.default_layer_name
            ))
        return events

    def ingest_text(self, text: Optional[str], layer_name: Optional[str] = None) -> IngestionBatch:
        """
        Run the whole pipeline over one text blob.

        Returns an IngestionBatch; when nothing survived, the batch is empty
        and carries a NO_EVENTS_PRODUCED error instead of raising.
        """
        layer = layer_name or self._config.default_layer_name
        rows = self.parse_records(text, layer)
        events = self.rows_to_events(rows)
        batch_id = self._generate_batch_id(layer, len(rows))

        error = None
        if not events:
            error = Error.create(
                ErrorCode.NO_EVENTS_PRODUCED,
                f"No events could be parsed for layer '{layer}'",
                layer=layer,
                rows_total=str(len(rows))
            )

        batch = IngestionBatch(
            batch_id=batch_id,
            layer=layer,
            events=tuple(events),
            rows_total=len(rows),
            rows_dropped=len(rows) - len(events),
            error=error
        )

        self._log_audit(
            action="batch_ingestion_completed" if events else "batch_ingestion_empty",
            entity_id=batch_id,
            entity_type="batch",
            event_type=AuditEventType.INGESTION if events else AuditEventType.ERROR,
            metadata=(
                ("layer", layer),
                ("rows_total", str(batch.rows_total)),
                ("rows_dropped", str(batch.rows_dropped)),
                ("event_count", str(len(events))),
            )
        )
        return batch

    def ingest_file(self, filename: str, text: Optional[str]) -> IngestionBatch:
        """Ingest file contents into a layer named after the file."""
        layer = layer_name_from_filename(filename, self._config.file_layer_fallback)
        return self.ingest_text(text, layer)

    def _generate_batch_id(self, layer: str, count: int) -> str:
        """Generate batch ID unique within this engine."""
        self._batch_count += 1
        content = f"{layer}|{count}|{self._batch_count}"
        hash_val = hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]
        return f"batch_{hash_val}"

    def _log_audit(
        self,
        action: str,
        entity_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        event_type: AuditEventType = AuditEventType.INGESTION,
        metadata: tuple = ()
    ):
        """Add entry to internal audit log."""
        self._audit_log.append(AuditLogEntry.create(
            event_type=event_type,
            layer="ingestion",
            action=action,
            sequence=next(self._audit_sequence),
            entity_id=entity_id,
            entity_type=entity_type,
            metadata=metadata
        ))

    def get_audit_log(self) -> List[AuditLogEntry]:
        """Return copy of audit log entries."""
        return list(self._audit_log)
