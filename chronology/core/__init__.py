"""
Core Layout Engine

RESPONSIBILITY: Lane packing per layer, layer display order, drag reordering
ALLOWED INPUTS: TimelineEvent collections, layer names, pointer positions
OUTPUTS: LayerLayout, ordered layer tuples, DragState

WHAT THIS LAYER MUST NOT DO:
============================
- Parse text (ingestion layer's job)
- Map years to pixels (viewport layer's job)
- Patch layouts incrementally: every change repacks from scratch
"""

from .layout import pack_lanes, layout_layers, group_by_layer, sort_for_packing
from .ordering import (
    LayerOrder, FrameGeometry, LayerBox, stack_layer_boxes, hit_test_layer,
    DragPhase, DragState, LayerRepositioner, target_index_for,
)

__all__ = [
    'pack_lanes',
    'layout_layers',
    'group_by_layer',
    'sort_for_packing',
    'LayerOrder',
    'FrameGeometry',
    'LayerBox',
    'stack_layer_boxes',
    'hit_test_layer',
    'DragPhase',
    'DragState',
    'LayerRepositioner',
    'target_index_for',
]
