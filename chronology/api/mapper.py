"""
API Mapper
==========

Transforms engine contracts into plain JSON-ready dicts.
"""
from typing import Any, Dict, Optional

from ..contracts.base import Error
from ..contracts.events import IngestionBatch, LayerLayout, TimelineEvent, DeletionOutcome
from ..core.ordering import DragState
from ..engine import TimelineEngine
from ..viewport import ViewportState


def map_event(event: TimelineEvent, lane: Optional[int] = None) -> Dict[str, Any]:
    return {
        "event_id": event.event_id.value,
        "title": event.title,
        "start": event.start,
        "end": event.end,
        "layer": event.layer,
        "lane": lane,
    }


def map_layout(layout: LayerLayout) -> Dict[str, Any]:
    return {
        "layer": layout.layer,
        "lane_count": layout.lane_count,
        "lanes": layout.as_dict(),
    }


def map_error(error: Error) -> Dict[str, Any]:
    return {
        "code": error.code.name,
        "message": error.message,
        "context": dict(error.context),
    }


def map_batch(batch: IngestionBatch) -> Dict[str, Any]:
    return {
        "batch_id": batch.batch_id,
        "layer": batch.layer,
        "event_count": len(batch.events),
        "rows_total": batch.rows_total,
        "rows_dropped": batch.rows_dropped,
        "error": map_error(batch.error) if batch.error else None,
    }


def map_viewport(state: ViewportState) -> Dict[str, Any]:
    return {"scale": state.scale, "origin_year": state.origin_year}


def map_drag(state: DragState) -> Dict[str, Any]:
    return {
        "layer": state.layer,
        "phase": state.phase.value,
        "grab_offset": state.grab_offset,
        "overlay_top": state.overlay_top,
        "target_index": state.target_index,
    }


def map_deletion(outcome: DeletionOutcome) -> Dict[str, Any]:
    return {
        "layer": outcome.layer,
        "removed": outcome.removed,
        "events_removed": outcome.events_removed,
    }


def map_engine_state(engine: TimelineEngine) -> Dict[str, Any]:
    """Full engine snapshot: order, layouts, events with lanes, viewport."""
    layouts = engine.layouts
    lanes: Dict[str, int] = {}
    for layout in layouts.values():
        lanes.update(layout.as_dict())
    drag = engine.repositioner.state
    return {
        "layer_order": list(engine.layer_order),
        "layouts": [map_layout(layouts[name]) for name in engine.layer_order if name in layouts],
        "events": [map_event(e, lanes.get(e.event_id.value)) for e in engine.events],
        "viewport": map_viewport(engine.viewport.state),
        "canvas_width": engine.canvas_width,
        "drag": map_drag(drag) if drag else None,
    }
