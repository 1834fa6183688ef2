"""
Layer Order & Reposition
========================

Owns the display order of layers and turns a continuous drag of a layer
label into one discrete reorder.

INVARIANT: the order always holds each present layer name exactly once.

DRAG STATE MACHINE:
===================
    IDLE --begin--> DRAGGING --update--> READY_TO_COMMIT --commit--> IDLE
                       |                      |   ^
                       |                      +---+ update
                       +--------cancel--------+----------> IDLE

Updates never touch the committed order; only commit does.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..contracts.base import Error, ErrorCode, Result
from ..contracts.events import LayerLayout


# =============================================================================
# LAYER ORDER
# =============================================================================

class LayerOrder:
    """Ordered, duplicate-free sequence of layer names."""

    def __init__(self, layers: Iterable[str] = ()):
        self._layers: List[str] = []
        for layer in layers:
            if layer not in self._layers:
                self._layers.append(layer)

    def sync(self, present: Sequence[str]) -> Tuple[str, ...]:
        """
        Reconcile with the layers present in the data.

        New layers are appended in first-seen order; absent layers are dropped.
        """
        for layer in present:
            if layer not in self._layers:
                self._layers.append(layer)
        keep = set(present)
        self._layers = [layer for layer in self._layers if layer in keep]
        return self.as_tuple()

    def remove(self, layer: str) -> bool:
        if layer not in self._layers:
            return False
        self._layers.remove(layer)
        return True

    def move(self, layer: str, target_index: int) -> Tuple[str, ...]:
        """
        Relocate one layer; all others keep their relative order.

        `target_index` is an index into the order with `layer` removed and is
        clamped to [0, len].
        """
        if layer not in self._layers:
            raise KeyError(layer)
        order = [name for name in self._layers if name != layer]
        target = max(0, min(int(target_index), len(order)))
        order.insert(target, layer)
        self._layers = order
        return self.as_tuple()

    def index_of(self, layer: str) -> int:
        return self._layers.index(layer)

    def as_tuple(self) -> Tuple[str, ...]:
        return tuple(self._layers)

    def __contains__(self, layer: object) -> bool:
        return layer in self._layers

    def __iter__(self):
        return iter(list(self._layers))

    def __len__(self) -> int:
        return len(self._layers)

    def __repr__(self) -> str:
        return f"LayerOrder({self._layers!r})"


# =============================================================================
# LAYER STACKING GEOMETRY
# =============================================================================

@dataclass
class FrameGeometry:
    """Vertical metrics of the stacked layer bands (pixels)."""
    lane_height: float = 26.0
    lane_gap: float = 6.0
    layer_gap: float = 18.0
    top_pad: float = 40.0
    layer_padding: float = 6.0
    tick_target_px: float = 110.0

    def layer_height(self, lane_count: int) -> float:
        return lane_count * (self.lane_height + self.lane_gap) + self.layer_padding

    def lane_top(self, layer_top: float, lane: int) -> float:
        return layer_top + 3 + lane * (self.lane_height + self.lane_gap)


@dataclass(frozen=True)
class LayerBox:
    """Vertical extent of one layer band."""
    layer: str
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def midpoint(self) -> float:
        return self.top + self.height / 2

    def contains_y(self, y: float) -> bool:
        return self.top <= y <= self.bottom


def stack_layer_boxes(
    order: Sequence[str],
    layouts: Dict[str, LayerLayout],
    geometry: Optional[FrameGeometry] = None
) -> Tuple[LayerBox, ...]:
    """Stack layer bands top-down in display order."""
    geometry = geometry or FrameGeometry()
    boxes = []
    y = geometry.top_pad
    for layer in order:
        layout = layouts.get(layer)
        height = geometry.layer_height(layout.lane_count if layout else 0)
        boxes.append(LayerBox(layer=layer, top=y, height=height))
        y += height + geometry.layer_gap
    return tuple(boxes)


def hit_test_layer(
    boxes: Sequence[LayerBox],
    x: float,
    y: float,
    gutter_width: float
) -> Optional[LayerBox]:
    """Box whose label gutter (x < gutter_width) contains the pointer."""
    if x >= gutter_width:
        return None
    for box in boxes:
        if box.contains_y(y):
            return box
    return None


# =============================================================================
# REPOSITION STATE MACHINE
# =============================================================================

class DragPhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    READY_TO_COMMIT = "ready_to_commit"


@dataclass(frozen=True)
class DragState:
    """Transient state of one drag gesture. Never persisted."""
    layer: str
    grab_offset: float
    pointer_y: float
    overlay_top: float
    overlay_height: float
    target_index: int
    phase: DragPhase

    @property
    def overlay_center(self) -> float:
        return self.overlay_top + self.overlay_height / 2


def target_index_for(overlay_center: float, others: Sequence[LayerBox]) -> int:
    """Number of other layers whose midpoint lies above the overlay centre."""
    return sum(1 for box in others if overlay_center > box.midpoint)


class LayerRepositioner:
    """
    Drag-to-reorder engine over a LayerOrder.

    The layer boxes are captured at begin_drag; they are static for the
    duration of a gesture because nothing else runs while it is active.
    """

    def __init__(self, order: LayerOrder, geometry: Optional[FrameGeometry] = None):
        self._order = order
        self._geometry = geometry or FrameGeometry()
        self._state: Optional[DragState] = None
        self._boxes: Tuple[LayerBox, ...] = ()

    @property
    def phase(self) -> DragPhase:
        return self._state.phase if self._state else DragPhase.IDLE

    @property
    def state(self) -> Optional[DragState]:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is not None

    def begin_drag(
        self,
        layer: str,
        grab_offset: float,
        boxes: Sequence[LayerBox]
    ) -> Result:
        """Start dragging `layer`, grabbed `grab_offset` px below its top."""
        if self._state is not None:
            return Result.failure(Error.create(
                ErrorCode.DRAG_IN_PROGRESS,
                f"Layer '{self._state.layer}' is already being dragged",
                layer=layer
            ))
        box = next((b for b in boxes if b.layer == layer), None)
        if box is None or layer not in self._order:
            return Result.failure(Error.create(
                ErrorCode.LAYER_NOT_FOUND,
                f"Layer '{layer}' is not displayed",
                layer=layer
            ))

        self._boxes = tuple(boxes)
        others = self._others(layer)
        self._state = DragState(
            layer=layer,
            grab_offset=grab_offset,
            pointer_y=box.top + grab_offset,
            overlay_top=box.top,
            overlay_height=box.height,
            target_index=target_index_for(box.midpoint, others),
            phase=DragPhase.DRAGGING
        )
        return Result.success(self._state)

    def update_drag(self, pointer_y: float) -> Result:
        """Move the overlay and recompute the candidate insertion index."""
        if self._state is None:
            return Result.failure(Error.create(
                ErrorCode.NO_ACTIVE_DRAG,
                "update_drag called without an active drag"
            ))
        overlay_top = pointer_y - self._state.grab_offset
        center = overlay_top + self._state.overlay_height / 2
        self._state = replace(
            self._state,
            pointer_y=pointer_y,
            overlay_top=overlay_top,
            target_index=target_index_for(center, self._others(self._state.layer)),
            phase=DragPhase.READY_TO_COMMIT
        )
        return Result.success(self._state)

    def commit_drag(self) -> Result:
        """Apply the drag to the order and return to IDLE."""
        if self._state is None:
            return Result.failure(Error.create(
                ErrorCode.NO_ACTIVE_DRAG,
                "commit_drag called without an active drag"
            ))
        state = self._clear()
        if state.layer not in self._order:
            return Result.failure(Error.create(
                ErrorCode.LAYER_NOT_FOUND,
                f"Layer '{state.layer}' disappeared during the drag",
                layer=state.layer
            ))
        return Result.success(self._order.move(state.layer, state.target_index))

    def cancel_drag(self) -> bool:
        """Abandon the gesture without touching the order."""
        return self._clear() is not None

    def indicator_y(self) -> Optional[float]:
        """Y of the drop indicator line for the active drag."""
        if self._state is None:
            return None
        others = self._others(self._state.layer)
        gap = self._geometry.layer_gap
        idx = self._state.target_index
        if not others:
            return self._geometry.top_pad
        if idx == 0:
            return others[0].top - gap / 2
        if idx >= len(others):
            return others[-1].bottom + gap / 2
        return others[idx].top - gap / 2

    def _others(self, layer: str) -> Tuple[LayerBox, ...]:
        return tuple(b for b in self._boxes if b.layer != layer)

    def _clear(self) -> Optional[DragState]:
        state, self._state, self._boxes = self._state, None, ()
        return state
