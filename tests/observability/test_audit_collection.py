"""
Observability Layer Tests
Verifies append-only, idempotent audit collection and metric series.
"""

import pytest

from chronology.contracts.events import AuditEventType, AuditLogEntry
from chronology.observability import (
    ENGINE_LAYERS, LogCollector, MetricsCollector, ObservabilityConfig, ObservabilityEngine
)


def entry(layer: str, action: str, sequence: int,
          event_type: AuditEventType = AuditEventType.SYSTEM) -> AuditLogEntry:
    return AuditLogEntry.create(event_type=event_type, layer=layer, action=action, sequence=sequence)


class TestLogCollector:

    def test_repeated_entries_are_ignored(self):
        collector = LogCollector("layout")
        e = entry("layout", "layout_recomputed", 0)
        assert collector.collect(e) is True
        assert collector.collect(e) is False
        assert collector.entry_count == 1
        assert collector.layer_name == "layout"

    def test_filters(self):
        collector = LogCollector("viewport")
        collector.collect(entry("viewport", "zoom", 0, AuditEventType.VIEWPORT))
        collector.collect(entry("viewport", "pan", 1, AuditEventType.VIEWPORT))
        collector.collect(entry("viewport", "oops", 2, AuditEventType.ERROR))
        assert len(collector.get_entries(event_type=AuditEventType.VIEWPORT)) == 2
        assert [e.action for e in collector.get_entries(action="pan")] == ["pan"]


    def test_retains_only_newest_entries(self):
        collector = LogCollector("layout", max_entries=2)
        entries = [entry("layout", "layout_recomputed", i) for i in range(4)]
        for e in entries:
            assert collector.collect(e) is True
        assert collector.get_entries() == entries[2:]
        assert collector.collect(entries[3]) is False
        assert collector.entry_count == 2


class TestObservabilityEngine:

    def test_known_layers_exist_up_front(self):
        engine = ObservabilityEngine()
        for layer in ENGINE_LAYERS:
            assert engine.get_layer_log(layer) == []

    def test_unknown_layer_gets_a_collector(self):
        engine = ObservabilityEngine()
        engine.collect_audit(entry("plugins", "loaded", 0))
        assert len(engine.get_layer_log("plugins")) == 1

    def test_collect_all_counts_new_entries(self):
        engine = ObservabilityEngine()
        batch = [entry("ingestion", "a", 0), entry("layout", "b", 1)]
        assert engine.collect_all(batch) == 2
        assert engine.collect_all(batch) == 0
        assert len(engine.get_unified_log()) == 2
        assert len(engine.get_unified_log(layers=["layout"])) == 1

    def test_report(self):
        engine = ObservabilityEngine()
        engine.collect_all([
            entry("ingestion", "a", 0, AuditEventType.INGESTION),
            entry("ingestion", "b", 1, AuditEventType.ERROR),
        ])
        report = engine.generate_audit_report()
        assert report["total_entries"] == 2
        assert report["by_layer"] == {"ingestion": 2}
        assert report["by_event_type"] == {"ingestion": 1, "error": 1}
        assert report["time_range"]["start"] is not None

    def test_empty_report(self):
        report = ObservabilityEngine().generate_audit_report()
        assert report["total_entries"] == 0
        assert report["time_range"] == {"start": None, "end": None}

    def test_audit_limit_applies_to_every_collector(self):
        engine = ObservabilityEngine(ObservabilityConfig(audit_log_limit=3))
        engine.collect_all(entry("viewport", "zoom", i) for i in range(5))
        engine.collect_all(entry("plugins", "loaded", i) for i in range(5))
        assert len(engine.get_layer_log("viewport")) == 3
        assert len(engine.get_layer_log("plugins")) == 3

    def test_non_positive_audit_limit_raises(self):
        with pytest.raises(ValueError):
            ObservabilityConfig(audit_log_limit=0)

    def test_metrics_can_be_disabled(self):
        engine = ObservabilityEngine(ObservabilityConfig(enable_metrics=False))
        engine.collect_metric("events_ingested_total", 3)
        assert engine.get_metrics() is None


class TestMetricsCollector:

    def test_series(self):
        metrics = MetricsCollector()
        metrics.record("events_ingested_total", 2, {"layer": "a"})
        metrics.record("events_ingested_total", 5)
        assert metrics.total("events_ingested_total") == 7
        assert metrics.get_latest("events_ingested_total").value == 5
        assert metrics.get_metric("events_ingested_total")[0].labels == (("layer", "a"),)
        assert metrics.get_latest("missing") is None
