"""
Observability & Audit Layer

RESPONSIBILITY: Collect audit entries and metrics from every engine layer
ALLOWED INPUTS: AuditLogEntry copies, metric data points
OUTPUTS: unified audit log, audit report, metric series

WHAT THIS LAYER MUST NOT DO:
============================
- Modify system behavior
- Filter or interpret events beyond read-side queries
- Make decisions based on logged data
"""

from __future__ import annotations
from dataclasses import dataclass, field
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

from ..contracts.events import AUDIT_LOG_LIMIT, AuditLogEntry, AuditEventType

ENGINE_LAYERS = ("ingestion", "layout", "viewport", "ordering", "engine")


# =============================================================================
# LOG COLLECTORS (One per layer)
# =============================================================================

class LogCollector:
    """
    Append-only collector of one layer's audit entries.

    Entries already collected (by entry_id) are ignored, so a layer's log
    can be synced repeatedly. At most `max_entries` are retained; the
    oldest entry and its id are evicted first.
    """

    def __init__(self, layer_name: str, max_entries: int = AUDIT_LOG_LIMIT):
        self._layer_name = layer_name
        self._entries: Deque[AuditLogEntry] = deque(maxlen=max_entries)
        self._seen: Set[str] = set()

    def collect(self, entry: AuditLogEntry) -> bool:
        """Collect an audit entry (append-only). Returns False for repeats."""
        if entry.entry_id in self._seen:
            return False
        if len(self._entries) == self._entries.maxlen:
            self._seen.discard(self._entries[0].entry_id)
        self._seen.add(entry.entry_id)
        self._entries.append(entry)
        return True

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None,
        action: Optional[str] = None
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = list(self._entries)
        if event_type:
            entries = [e for e in entries if e.event_type == event_type]
        if action:
            entries = [e for e in entries if e.action == action]
        return list(entries)

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

@dataclass(frozen=True)
class MetricPoint:
    """Immutable metric data point."""
    metric_name: str
    value: float
    timestamp: datetime
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


class MetricsCollector:
    """Append-only metric series keyed by metric name."""

    def __init__(self):
        self._metrics: Dict[str, List[MetricPoint]] = {}

    def record(self, metric_name: str, value: float, labels: Optional[Dict[str, str]] = None):
        point = MetricPoint(
            metric_name=metric_name,
            value=float(value),
            timestamp=datetime.now(timezone.utc),
            labels=tuple(sorted((labels or {}).items()))
        )
        self._metrics.setdefault(metric_name, []).append(point)

    def get_metric(self, metric_name: str) -> List[MetricPoint]:
        return list(self._metrics.get(metric_name, []))

    def get_latest(self, metric_name: str) -> Optional[MetricPoint]:
        points = self._metrics.get(metric_name)
        return points[-1] if points else None

    def total(self, metric_name: str) -> float:
        return sum(p.value for p in self._metrics.get(metric_name, []))


# =============================================================================
# OBSERVABILITY ENGINE
# =============================================================================

@dataclass
class ObservabilityConfig:
    """Configuration for observability engine."""
    enable_metrics: bool = True
    audit_log_limit: int = AUDIT_LOG_LIMIT

    def __post_init__(self):
        if self.audit_log_limit <= 0:
            raise ValueError("audit_log_limit must be positive")


class ObservabilityEngine:
    """
    Central observability engine.

    BOUNDARY ENFORCEMENT:
    - ONLY observes, never modifies
    - Receives copies of all entries
    - Provides read-only access to collected data
    """

    def __init__(self, config: Optional[ObservabilityConfig] = None):
        self._config = config or ObservabilityConfig()
        self._collectors: Dict[str, LogCollector] = {
            name: LogCollector(name, self._config.audit_log_limit) for name in ENGINE_LAYERS
        }
        self._metrics = MetricsCollector() if self._config.enable_metrics else None

    def collect_audit(self, entry: AuditLogEntry) -> bool:
        """Collect an audit log entry from any layer."""
        collector = self._collectors.get(entry.layer)
        if collector is None:
            collector = self._collectors[entry.layer] = LogCollector(
                entry.layer, self._config.audit_log_limit
            )
        return collector.collect(entry)

    def collect_all(self, entries: Iterable[AuditLogEntry]) -> int:
        return sum(1 for entry in entries if self.collect_audit(entry))

    def collect_metric(self, metric_name: str, value: float, labels: Optional[Dict[str, str]] = None):
        """Collect a metric data point."""
        if self._metrics:
            self._metrics.record(metric_name, value, labels)

    def get_unified_log(
        self,
        layers: Optional[List[str]] = None,
        event_type: Optional[AuditEventType] = None
    ) -> List[AuditLogEntry]:
        """Get unified log from all or specified layers, oldest first."""
        target_layers = layers or list(self._collectors.keys())
        all_entries = []
        for layer_name in target_layers:
            collector = self._collectors.get(layer_name)
            if collector:
                all_entries.extend(collector.get_entries(event_type=event_type))
        all_entries.sort(key=lambda e: e.timestamp)
        return all_entries

    def get_layer_log(self, layer_name: str) -> List[AuditLogEntry]:
        collector = self._collectors.get(layer_name)
        return collector.get_entries() if collector else []

    def get_metrics(self) -> Optional[MetricsCollector]:
        """Get metrics collector (read-only access)."""
        return self._metrics

    def generate_audit_report(self) -> Dict:
        """Counts of collected entries by layer and event type."""
        entries = self.get_unified_log()
        by_layer: Dict[str, int] = {}
        by_type: Dict[str, int] = {}
        for entry in entries:
            by_layer[entry.layer] = by_layer.get(entry.layer, 0) + 1
            by_type[entry.event_type.value] = by_type.get(entry.event_type.value, 0) + 1
        return {
            'total_entries': len(entries),
            'by_layer': by_layer,
            'by_event_type': by_type,
            'time_range': {
                'start': entries[0].timestamp.isoformat() if entries else None,
                'end': entries[-1].timestamp.isoformat() if entries else None,
            },
            'generated_at': datetime.now(timezone.utc).isoformat()
        }
