"""
Timeline Engine Integration Tests
=================================

End-to-end behaviour of the owned context object: ingest, lay out,
reorder, delete and zoom through one TimelineEngine.
"""

import math

import pytest

from chronology import TimelineConfig, TimelineEngine
from chronology.contracts.base import ErrorCode
from chronology.contracts.events import AuditEventType
from chronology.ingestion import IngestionConfig
from chronology.observability import ObservabilityConfig
from chronology.temporal.clock import YearClock
from frontend.visualization.timeline import build_timeline_view


@pytest.fixture
def engine():
    return TimelineEngine(clock=YearClock.fixed(2024))


class TestEndToEnd:

    def test_documented_scenario(self, engine):
        batch = engine.ingest_text("-2070~-1600,夏\n1949~,中华人民共和国", "文本")

        events = engine.events
        assert [(e.title, e.start, e.end, e.layer) for e in events] == [
            ("夏", -2070, -1600, "文本"),
            ("中华人民共和国", 1949, 2024, "文本"),
        ]
        assert engine.layer_order == ("文本",)
        assert engine.layout_for("文本").lane_count == 1
        assert all(engine.lane_of(e.event_id) == 0 for e in batch.events)

    def test_empty_ingest_leaves_state_untouched(self, engine):
        engine.ingest_text("618~907,唐", "a")
        viewport_before = engine.viewport.state

        batch = engine.ingest_text("no years here", "b")

        assert batch.error.code == ErrorCode.NO_EVENTS_PRODUCED
        assert engine.layer_order == ("a",)
        assert len(engine.events) == 1
        assert engine.viewport.state == viewport_before

    def test_ingest_resets_view_to_whole_dataset(self, engine):
        engine.ingest_text("-2070~-1600,夏", "a")
        engine.ingest_text("1949~,中华人民共和国", "b")
        viewport = engine.viewport
        assert math.isclose(viewport.year_to_pixel(-2070), 90)
        assert math.isclose(viewport.year_to_pixel(2024), 1190)

    def test_text_panel_and_file_layers(self):
        config = TimelineConfig(ingestion=IngestionConfig(text_layer_name="文本"))
        engine = TimelineEngine(config, clock=YearClock.fixed(2024))
        engine.load_text_panel("618~907,唐")
        engine.ingest_file("europe.csv", "1066,Hastings")
        assert engine.layer_order == ("文本", "europe")


class TestLayers:

    def test_order_follows_import_sequence(self, engine):
        for name in ("c", "a", "b"):
            engine.ingest_text("1,x", name)
        assert engine.layer_order == ("c", "a", "b")

    def test_name_collision_merges_layers(self, engine):
        engine.ingest_file("dynasties.csv", "618~907,唐")
        engine.ingest_file("dynasties.txt", "700~800,overlap")
        assert engine.layer_order == ("dynasties",)
        assert len(engine.layer_events("dynasties")) == 2
        assert engine.layout_for("dynasties").lane_count == 2

    def test_layers_pack_independently(self, engine):
        engine.ingest_text("0~100,x", "a")
        engine.ingest_text("0~100,y", "b")
        assert engine.layout_for("a").lane_count == 1
        assert engine.layout_for("b").lane_count == 1


class TestDeletion:

    def test_delete_removes_layer_and_events_only(self, engine):
        engine.ingest_text("0~10,a1\n5~15,a2", "a")
        engine.ingest_text("0~10,b1", "b")
        engine.ingest_text("0~10,c1", "c")
        survivors = [e for e in engine.events if e.layer != "b"]
        layout_a = engine.layout_for("a")

        outcome = engine.delete_layer("b")

        assert outcome.removed is True
        assert outcome.events_removed == 1
        assert engine.layer_order == ("a", "c")
        assert list(engine.events) == survivors
        assert engine.layout_for("b") is None
        assert engine.layout_for("a") == layout_a

    def test_delete_is_idempotent(self, engine):
        engine.ingest_text("0~10,a1", "a")
        outcome = engine.delete_layer("missing")
        assert outcome.removed is False
        assert outcome.events_removed == 0
        assert engine.layer_order == ("a",)

    def test_delete_cancels_active_drag(self, engine):
        engine.ingest_text("0~10,a1", "a")
        engine.ingest_text("0~10,b1", "b")
        engine.begin_drag("a")
        engine.delete_layer("b")
        assert engine.repositioner.state is None

    def test_ids_are_not_reused_after_delete(self, engine):
        first = engine.ingest_text("0~10,a1", "a").events[0].event_id
        engine.delete_layer("a")
        second = engine.ingest_text("0~10,a1", "a").events[0].event_id
        assert first != second


class TestReordering:

    def test_drag_from_label_gutter(self, engine):
        for name in ("a", "b", "c"):
            engine.ingest_text("0~10,x", name)
        # bands are 38px tall at tops 40, 96, 152; the gutter is 80px wide
        assert engine.begin_layer_drag(10, 160).is_success
        engine.update_drag(20)
        assert engine.commit_drag().value == ("c", "a", "b")
        assert engine.layer_order == ("c", "a", "b")

    def test_drag_outside_gutter_fails(self, engine):
        engine.ingest_text("0~10,x", "a")
        result = engine.begin_layer_drag(200, 50)
        assert result.error.code == ErrorCode.LAYER_NOT_FOUND

    def test_reorder_survives_new_ingest(self, engine):
        for name in ("a", "b"):
            engine.ingest_text("0~10,x", name)
        engine.begin_drag("b")
        engine.update_drag(0)
        engine.commit_drag()
        engine.ingest_text("0~10,x", "c")
        assert engine.layer_order == ("b", "a", "c")

    def test_commit_is_audited(self, engine):
        for name in ("a", "b"):
            engine.ingest_text("0~10,x", name)
        engine.begin_drag("b")
        engine.update_drag(0)
        engine.commit_drag()
        actions = [e.action for e in engine.get_audit_log(layers=["ordering"])]
        assert actions == ["layer_reordered"]


class TestViewportInterface:

    def test_zoom_failure_is_a_value(self, engine):
        result = engine.zoom(100, 0)
        assert result.error.code == ErrorCode.INVALID_ZOOM

    def test_non_finite_pivot_keeps_frame_renderable(self, engine):
        engine.ingest_text("0~1000,x", "a")
        before = engine.viewport.state
        assert engine.zoom(float("nan"), 2).error.code == ErrorCode.INVALID_ZOOM
        assert engine.set_scale(float("inf")).error.code == ErrorCode.INVALID_ZOOM
        assert engine.viewport.state == before
        assert build_timeline_view(engine).segments

    def test_pan_failure_is_a_value(self, engine):
        engine.ingest_text("0~1000,x", "a")
        before = engine.viewport.state
        result = engine.pan(float("inf"))
        assert result.error.code == ErrorCode.INVALID_PAN
        assert engine.viewport.state == before

    def test_pan_success_carries_state(self, engine):
        result = engine.pan(40)
        assert result.is_success
        assert result.value == engine.viewport.state

    def test_wheel_pinned_to_centre(self, engine):
        engine.ingest_text("0~1000,x", "a")
        centre_year = engine.viewport.pixel_to_year(engine.canvas_width / 2)
        engine.wheel(pointer_x=100, delta_y=-120, pin_center=True)
        assert math.isclose(engine.viewport.pixel_to_year(engine.canvas_width / 2), centre_year)

    def test_reset_without_data_is_noop(self, engine):
        assert engine.reset_view() is None

    def test_resize_rejects_non_positive(self, engine):
        with pytest.raises(ValueError):
            engine.resize(0)


class TestObservability:

    def test_audit_report_counts_layers(self, engine):
        engine.ingest_text("0~10,x", "a")
        engine.delete_layer("a")
        report = engine.get_audit_report()
        assert report["by_layer"]["ingestion"] == 1
        assert report["by_event_type"][AuditEventType.LAYOUT.value] >= 2

    def test_ingested_events_metric(self, engine):
        engine.ingest_text("0~10,x\n5~6,y", "a")
        assert engine.get_metrics().total("events_ingested_total") == 2

    def test_audit_logs_are_bounded(self):
        engine = TimelineEngine(
            TimelineConfig(observability=ObservabilityConfig(audit_log_limit=4)),
            clock=YearClock.fixed(2024)
        )
        for i in range(6):
            engine.ingest_text(f"{i}~{i + 10},x{i}", f"layer{i}")
        for _ in range(6):
            engine.zoom(100, 1.1)
        for layer in ("ingestion", "layout", "viewport"):
            assert len(engine.get_audit_log(layers=[layer])) == 4
        assert engine.get_audit_report()["total_entries"] == 12

    def test_repeated_sync_does_not_duplicate(self, engine):
        engine.ingest_text("0~10,x", "a")
        first = engine.get_audit_report()["total_entries"]
        assert engine.get_audit_report()["total_entries"] == first
