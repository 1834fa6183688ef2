"""
Engine Orchestration Module

This module provides the single owned context object that holds the event
dataset, the layer order, the per-layer layouts and the viewport.

DESIGN PRINCIPLES:
==================
1. Layers communicate ONLY through contracts
2. Mutating the event set and recomputing layout is one call
3. All operations are traceable through observability
4. No module-level mutable state: every host owns its own engine
"""

from __future__ import annotations
from dataclasses import dataclass
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple
import itertools

from .contracts.base import Error, ErrorCode, EventId, EventIdSequence, Result
from .contracts.events import (
    AuditEventType, AuditLogEntry, DeletionOutcome, IngestionBatch,
    LayerLayout, TimelineEvent
)
from .core.layout import group_by_layer, layout_layers
from .core.ordering import (
    FrameGeometry, LayerBox, LayerOrder, LayerRepositioner,
    hit_test_layer, stack_layer_boxes
)
from .ingestion import IngestionConfig, IngestionEngine
from .observability import MetricsCollector, ObservabilityConfig, ObservabilityEngine
from .temporal.clock import YearClock
from .viewport import ViewportConfig, ViewportState, ViewportTransform, wheel_zoom_factor


@dataclass
class TimelineConfig:
    """Unified configuration for the timeline engine."""
    ingestion: IngestionConfig = None
    viewport: ViewportConfig = None
    geometry: FrameGeometry = None
    observability: ObservabilityConfig = None
    canvas_width: float = 1200.0

    def __post_init__(self):
        self.ingestion = self.ingestion or IngestionConfig()
        self.viewport = self.viewport or ViewportConfig()
        self.geometry = self.geometry or FrameGeometry()
        self.observability = self.observability or ObservabilityConfig()


class TimelineEngine:
    """
    Owned timeline context.

    FLOW:
    =====
    1. Ingestion: text -> IngestionBatch -> appended to the dataset
    2. Layout: dataset grouped by layer -> LayerLayout per layer (from scratch)
    3. Ordering: layer order synced with the layers present
    4. Viewport: reset to fit the whole dataset after every ingest

    Not safe for concurrent mutation: hosts with parallel callers must
    serialise every call (see chronology.api.server).
    """

    def __init__(self, config: Optional[TimelineConfig] = None, clock: Optional[YearClock] = None):
        self._config = config or TimelineConfig()
        self._clock = clock or YearClock.live()

        audit_limit = self._config.observability.audit_log_limit
        self._ingestion = IngestionEngine(
            self._config.ingestion,
            clock=self._clock,
            id_sequence=EventIdSequence(),
            audit_log_limit=audit_limit
        )
        self._viewport = ViewportTransform(self._config.viewport, audit_log_limit=audit_limit)
        self._order = LayerOrder()
        self._repositioner = LayerRepositioner(self._order, self._config.geometry)
        self._observability = ObservabilityEngine(self._config.observability)

        self._events: List[TimelineEvent] = []
        self._layouts: Dict[str, LayerLayout] = {}
        self._canvas_width = float(self._config.canvas_width)
        self._audit_log: Deque[AuditLogEntry] = deque(maxlen=audit_limit)
        self._audit_sequence = itertools.count()

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def config(self) -> TimelineConfig:
        return self._config

    @property
    def events(self) -> Tuple[TimelineEvent, ...]:
        return tuple(self._events)

    @property
    def layer_order(self) -> Tuple[str, ...]:
        return self._order.as_tuple()

    @property
    def layouts(self) -> Dict[str, LayerLayout]:
        return dict(self._layouts)

    @property
    def viewport(self) -> ViewportTransform:
        return self._viewport

    @property
    def repositioner(self) -> LayerRepositioner:
        return self._repositioner

    @property
    def canvas_width(self) -> float:
        return self._canvas_width

    def layer_events(self, layer: str) -> Tuple[TimelineEvent, ...]:
        return tuple(e for e in self._events if e.layer == layer)

    def layout_for(self, layer: str) -> Optional[LayerLayout]:
        return self._layouts.get(layer)

    def lane_of(self, event_id: EventId) -> Optional[int]:
        for layout in self._layouts.values():
            lane = layout.lane_of(event_id)
            if lane is not None:
                return lane
        return None

    def layer_boxes(self) -> Tuple[LayerBox, ...]:
        return stack_layer_boxes(self._order.as_tuple(), self._layouts, self._config.geometry)

    # =========================================================================
    # INGESTION INTERFACE
    # =========================================================================

    def ingest_text(self, text: Optional[str], layer_name: Optional[str] = None) -> IngestionBatch:
        """
        Parse text into events and append them to the dataset.

        An empty batch leaves the dataset untouched.
        """
        batch = self._ingestion.ingest_text(text, layer_name)
        if not batch.is_empty:
            self._append(batch.events)
        return batch

    def load_text_panel(self, text: Optional[str]) -> IngestionBatch:
        """Ingest pasted text into the configured text layer."""
        return self.ingest_text(text, self._config.ingestion.text_layer_name)

    def ingest_file(self, filename: str, text: Optional[str]) -> IngestionBatch:
        """Ingest file contents into a layer named after the file."""
        batch = self._ingestion.ingest_file(filename, text)
        if not batch.is_empty:
            self._append(batch.events)
        return batch

    def delete_layer(self, layer: str) -> DeletionOutcome:
        """
        Remove a layer and all of its events.

        Idempotent: deleting an unknown layer reports removed=False.
        """
        self._repositioner.cancel_drag()

        before = len(self._events)
        self._events = [e for e in self._events if e.layer != layer]
        self._order.remove(layer)
        removed = before - len(self._events)
        self._rebuild()

        self._log_audit(
            "layout",
            "layer_deleted" if removed else "layer_delete_noop",
            AuditEventType.LAYOUT,
            entity_id=layer,
            entity_type="layer",
            metadata=(("events_removed", str(removed)),)
        )
        return DeletionOutcome(layer=layer, removed=removed > 0, events_removed=removed)

    def _append(self, events) -> None:
        self._repositioner.cancel_drag()
        self._events.extend(events)
        self._rebuild()
        self.reset_view()
        self._observability.collect_metric("events_ingested_total", len(events))

    def _rebuild(self) -> None:
        """Regroup, resync the order and repack every layer from scratch."""
        present = list(group_by_layer(self._events).keys())
        order = self._order.sync(present)
        self._layouts = layout_layers(self._events, order)
        self._log_audit(
            "layout",
            "layout_recomputed",
            AuditEventType.LAYOUT,
            metadata=(
                ("layers", str(len(order))),
                ("events", str(len(self._events))),
                ("lanes", str(sum(l.lane_count for l in self._layouts.values()))),
            )
        )

    # =========================================================================
    # VIEWPORT INTERFACE
    # =========================================================================

    def resize(self, canvas_width: float) -> None:
        if canvas_width <= 0:
            raise ValueError(f"canvas width must be positive, got {canvas_width}")
        self._canvas_width = float(canvas_width)

    def reset_view(self) -> Optional[ViewportState]:
        """Fit the whole dataset into the drawable width. No-op without data."""
        if not self._events:
            return None
        width = self._viewport.drawable_width(self._canvas_width)
        if width <= 0:
            return None
        return self._viewport.reset_to_fit(
            min(e.start for e in self._events),
            max(e.end for e in self._events),
            width
        )

    def zoom(self, pivot_px: float, factor: float) -> Result:
        try:
            return Result.success(self._viewport.zoom(pivot_px, factor))
        except ValueError as exc:
            return Result.failure(Error.create(ErrorCode.INVALID_ZOOM, str(exc)))

    def wheel(self, pointer_x: float, delta_y: float,
              accelerated: bool = False, pin_center: bool = False) -> Result:
        """Wheel zoom around the pointer (or the canvas centre when pinned)."""
        cfg = self._config.viewport
        pivot = self._canvas_width / 2 if pin_center else pointer_x
        factor = wheel_zoom_factor(delta_y, accelerated, cfg.wheel_base, cfg.wheel_accelerator)
        return self.zoom(pivot, factor)

    def set_scale(self, scale: float) -> Result:
        """Zoom slider: absolute scale around the canvas centre."""
        try:
            return Result.success(self._viewport.set_scale(scale, self._canvas_width / 2))
        except ValueError as exc:
            return Result.failure(Error.create(ErrorCode.INVALID_ZOOM, str(exc)))

    def pan(self, delta_px: float) -> Result:
        try:
            return Result.success(self._viewport.pan(delta_px))
        except ValueError as exc:
            return Result.failure(Error.create(ErrorCode.INVALID_PAN, str(exc)))

    # =========================================================================
    # LAYER ORDER INTERFACE
    # =========================================================================

    def begin_layer_drag(self, pointer_x: float, pointer_y: float) -> Result:
        """Start a drag if the pointer is on a layer label."""
        boxes = self.layer_boxes()
        box = hit_test_layer(boxes, pointer_x, pointer_y, self._config.viewport.left_pad)
        if box is None:
            return Result.failure(Error.create(
                ErrorCode.LAYER_NOT_FOUND,
                "No layer label under the pointer",
                x=str(pointer_x),
                y=str(pointer_y)
            ))
        return self._repositioner.begin_drag(box.layer, pointer_y - box.top, boxes)

    def begin_drag(self, layer: str, grab_offset: float = 0.0) -> Result:
        return self._repositioner.begin_drag(layer, grab_offset, self.layer_boxes())

    def update_drag(self, pointer_y: float) -> Result:
        return self._repositioner.update_drag(pointer_y)

    def commit_drag(self) -> Result:
        layer = self._repositioner.state.layer if self._repositioner.state else None
        result = self._repositioner.commit_drag()
        if result.is_success:
            self._log_audit(
                "ordering",
                "layer_reordered",
                AuditEventType.ORDERING,
                entity_id=layer,
                entity_type="layer",
                metadata=(("order", "|".join(result.value)),)
            )
        return result

    def cancel_drag(self) -> bool:
        return self._repositioner.cancel_drag()

    # =========================================================================
    # OBSERVABILITY INTERFACE
    # =========================================================================

    def get_audit_log(self, layers: Optional[List[str]] = None) -> List[AuditLogEntry]:
        """Get unified audit log."""
        self._sync_audit_logs()
        return self._observability.get_unified_log(layers=layers)

    def get_audit_report(self) -> Dict:
        self._sync_audit_logs()
        return self._observability.generate_audit_report()

    def get_metrics(self) -> Optional[MetricsCollector]:
        return self._observability.get_metrics()

    def _sync_audit_logs(self):
        """Sync audit logs from all layers to observability."""
        self._observability.collect_all(self._ingestion.get_audit_log())
        self._observability.collect_all(self._viewport.get_audit_log())
        self._observability.collect_all(self._audit_log)

    def _log_audit(
        self,
        layer: str,
        action: str,
        event_type: AuditEventType,
        entity_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        metadata: tuple = ()
    ):
        self._audit_log.append(AuditLogEntry.create(
            event_type=event_type,
            layer=layer,
            action=action,
            sequence=next(self._audit_sequence),
            entity_id=entity_id,
            entity_type=entity_type,
            metadata=metadata
        ))
