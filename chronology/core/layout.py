"""
Lane Packing
============

Assigns every event of a layer to a lane so that no two overlapping events
share one, using as few lanes as possible.

ALGORITHM (greedy earliest fit):
1. Sort by (start, end), then event id
2. Keep the end year of the last event placed in each lane
3. Place each event in the lowest lane whose end year <= event.start,
   otherwise open a new lane

A lane ending in year Y is free for an event starting in Y, so touching
events reuse the lane. Layouts are never patched: any change to a layer's
events means packing it again from scratch.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Sequence

from ..contracts.events import LayerLayout, TimelineEvent


def sort_for_packing(events: Iterable[TimelineEvent]) -> List[TimelineEvent]:
    """Deterministic packing order: start, then end, then event id."""
    return sorted(events, key=lambda e: (e.start, e.end, e.event_id.value))


def pack_lanes(layer: str, events: Iterable[TimelineEvent]) -> LayerLayout:
    """
    Pack one layer's events into lanes.

    Args:
        layer: name of the layer being packed
        events: the layer's events, in any order

    Returns:
        LayerLayout with the lane count and each event's lane index.
    """
    lane_ends: List[int] = []
    assignments = []

    for event in sort_for_packing(events):
        lane = next(
            (i for i, end in enumerate(lane_ends) if end <= event.start),
            None
        )
        if lane is None:
            lane = len(lane_ends)
            lane_ends.append(event.end)
        else:
            lane_ends[lane] = event.end
        assignments.append((event.event_id, lane))

    return LayerLayout(
        layer=layer,
        lane_count=len(lane_ends),
        lanes=tuple(assignments)
    )


def group_by_layer(events: Iterable[TimelineEvent]) -> Dict[str, List[TimelineEvent]]:
    """Group events by layer name, keeping first-seen layer order."""
    groups: Dict[str, List[TimelineEvent]] = {}
    for event in events:
        groups.setdefault(event.layer, []).append(event)
    return groups


def layout_layers(
    events: Iterable[TimelineEvent],
    layers: Sequence[str] = ()
) -> Dict[str, LayerLayout]:
    """
    Pack every layer from scratch.

    Layers listed in `layers` but holding no events get an empty layout.
    """
    groups = group_by_layer(events)
    layouts = {name: pack_lanes(name, members) for name, members in groups.items()}
    for name in layers:
        layouts.setdefault(name, LayerLayout(layer=name, lane_count=0))
    return layouts
