from .timeline import (
    RenderedSegment, TimeAxis, LayerBand, DragOverlay, TimelineView,
    build_timeline_view, build_axis, choose_tick_step, color_token_for_layer,
    render_event,
)

__all__ = [
    'RenderedSegment',
    'TimeAxis',
    'LayerBand',
    'DragOverlay',
    'TimelineView',
    'build_timeline_view',
    'build_axis',
    'choose_tick_step',
    'color_token_for_layer',
    'render_event',
]
