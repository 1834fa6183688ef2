"""
Timeline Visualization Contracts

Responsibility:
Deterministic transformation of engine state into a renderable frame.
Input: TimelineEngine (State) -> Output: TimelineView (Visualization)

The rendering shell only draws what is in the view: axis ticks, layer
bands, event bars and point markers, and the drag overlay. No layout logic
is allowed in the shell.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
import hashlib
import math

from chronology.contracts.events import LayerLayout, TimelineEvent
from chronology.core.ordering import FrameGeometry
from chronology.engine import TimelineEngine
from chronology.temporal.ranges import format_range, format_year
from chronology.viewport import ViewportTransform, clamp

TICK_BASES = (1, 2, 5)
MIN_LABELLED_BAR_PX = 40.0
MIN_VISIBLE_BAR_PX = 1.0
MAX_POINT_RADIUS = 6.0


@dataclass(frozen=True)
class RenderedSegment:
    """A visual event ready for rendering."""
    event_id: str
    layer: str
    lane: int
    kind: str               # "bar" | "point"
    x: float                # bar left edge, or point centre
    y: float                # lane top
    width: float            # 0 for points
    height: float
    radius: float           # 0 for bars
    color_token: str
    label: str
    show_label: bool


@dataclass(frozen=True)
class TimeAxis:
    """The rendered time axis."""
    start_year: int
    end_year: int
    step: int
    baseline_y: float
    ticks: Tuple[Tuple[float, str], ...]  # (x position, label)


@dataclass(frozen=True)
class LayerBand:
    """Background band and label of one layer."""
    layer: str
    top: float
    height: float
    lane_count: int
    color_token: str
    ghost: bool = False


@dataclass(frozen=True)
class DragOverlay:
    """Active layer drag: where the ghost is and where it would land."""
    layer: str
    overlay_top: float
    target_index: int
    indicator_y: float


@dataclass(frozen=True)
class TimelineView:
    """
    Fully calculated timeline frame.

    DETERMINISTIC:
    Same engine state + same viewport = identical view_id and content.
    """
    view_id: str
    canvas_width: float
    scale: float
    origin_year: float
    axis: TimeAxis
    bands: Tuple[LayerBand, ...]
    segments: Tuple[RenderedSegment, ...]
    drag: Optional[DragOverlay]
    generated_at: datetime

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["generated_at"] = self.generated_at.isoformat()
        return data


# =============================================================================
# AXIS
# =============================================================================

def choose_tick_step(scale: float, target_px: float = 110.0) -> int:
    """Smallest 1/2/5 x 10^n year step that is at least `target_px` wide."""
    if scale <= 0 or not math.isfinite(scale):
        raise ValueError(f"scale must be a positive finite number, got {scale}")
    target = target_px / scale
    p = 1
    while True:
        for base in TICK_BASES:
            step = base * p
            if step >= target:
                return step
        p *= 10


def build_axis(viewport: ViewportTransform, canvas_width: float,
               geometry: FrameGeometry) -> TimeAxis:
    step = choose_tick_step(viewport.scale, geometry.tick_target_px)
    left, right = viewport.visible_years(canvas_width)
    start = math.floor(left / step) * step
    end = math.ceil(right / step) * step
    ticks = tuple(
        (viewport.year_to_pixel(year), format_year(year))
        for year in range(start, end + 1, step)
    )
    return TimeAxis(
        start_year=start,
        end_year=end,
        step=step,
        baseline_y=geometry.top_pad - 8,
        ticks=ticks
    )


# =============================================================================
# COLOURS
# =============================================================================

def color_token_for_layer(layer: str) -> str:
    """Stable hue per layer name (hash over UTF-16 code units)."""
    h = 0
    data = layer.encode("utf-16-le")
    for i in range(0, len(data), 2):
        h = (h * 131 + (data[i] | (data[i + 1] << 8))) & 0xFFFFFFFF
    return f"hsl({h % 360} 60% 55% / 0.85)"


# =============================================================================
# SEGMENTS
# =============================================================================

def render_event(
    event: TimelineEvent,
    lane: int,
    layer_top: float,
    viewport: ViewportTransform,
    canvas_width: float,
    geometry: FrameGeometry,
    color_token: str
) -> Optional[RenderedSegment]:
    """Geometry of one event, or None when nothing of it is visible."""
    cfg = viewport.config
    top = geometry.lane_top(layer_top, lane)
    height = geometry.lane_height - 2
    x1 = viewport.year_to_pixel(event.start)
    x2 = viewport.year_to_pixel(event.end)
    if x2 < 0 or x1 > canvas_width:
        return None

    label = f"{event.title}  {format_range(event.start, event.end)}"

    if event.is_point:
        return RenderedSegment(
            event_id=event.event_id.value,
            layer=event.layer,
            lane=lane,
            kind="point",
            x=clamp(x1, cfg.left_pad, canvas_width - cfg.right_pad),
            y=top,
            width=0.0,
            height=height,
            radius=min(MAX_POINT_RADIUS, height / 2),
            color_token=color_token,
            label=label,
            show_label=True
        )

    left = max(x1, cfg.left_pad)
    width = min(x2, canvas_width - cfg.right_pad) - left
    if width <= MIN_VISIBLE_BAR_PX:
        return None
    return RenderedSegment(
        event_id=event.event_id.value,
        layer=event.layer,
        lane=lane,
        kind="bar",
        x=left,
        y=top,
        width=width,
        height=height,
        radius=0.0,
        color_token=color_token,
        label=label,
        show_label=width > MIN_LABELLED_BAR_PX
    )


def _render_layer(engine: TimelineEngine, layer: str, layer_top: float,
                  layout: Optional[LayerLayout]) -> List[RenderedSegment]:
    if layout is None:
        return []
    lanes = layout.as_dict()
    color = color_token_for_layer(layer)
    segments = []
    for event in engine.layer_events(layer):
        segment = render_event(
            event,
            lanes.get(event.event_id.value, 0),
            layer_top,
            engine.viewport,
            engine.canvas_width,
            engine.config.geometry,
            color
        )
        if segment is not None:
            segments.append(segment)
    return segments


# =============================================================================
# FRAME
# =============================================================================

def build_timeline_view(engine: TimelineEngine) -> TimelineView:
    """Compute the full frame for the engine's current state."""
    geometry = engine.config.geometry
    viewport = engine.viewport
    width = engine.canvas_width
    drag_state = engine.repositioner.state

    bands = []
    segments = []
    for box in engine.layer_boxes():
        layout = engine.layout_for(box.layer)
        ghost = drag_state is not None and drag_state.layer == box.layer
        top = drag_state.overlay_top if ghost else box.top
        bands.append(LayerBand(
            layer=box.layer,
            top=top,
            height=box.height,
            lane_count=layout.lane_count if layout else 0,
            color_token=color_token_for_layer(box.layer),
            ghost=ghost
        ))
        segments.extend(_render_layer(engine, box.layer, top, layout))

    drag = None
    if drag_state is not None:
        drag = DragOverlay(
            layer=drag_state.layer,
            overlay_top=drag_state.overlay_top,
            target_index=drag_state.target_index,
            indicator_y=engine.repositioner.indicator_y()
        )

    axis = build_axis(viewport, width, geometry)
    return TimelineView(
        view_id=_view_id(engine, bands, segments),
        canvas_width=width,
        scale=viewport.scale,
        origin_year=viewport.origin_year,
        axis=axis,
        bands=tuple(bands),
        segments=tuple(segments),
        drag=drag,
        generated_at=datetime.now(timezone.utc)
    )


def _view_id(engine: TimelineEngine, bands, segments) -> str:
    content = "|".join([
        f"{engine.canvas_width:.6f}",
        f"{engine.viewport.scale:.12g}",
        f"{engine.viewport.origin_year:.12g}",
        ",".join(f"{b.layer}@{b.top:.3f}" for b in bands),
        ",".join(f"{s.event_id}:{s.lane}:{s.x:.3f}" for s in segments),
    ])
    return "view_" + hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]
