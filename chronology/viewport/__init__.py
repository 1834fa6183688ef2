"""
Viewport Transform Layer

RESPONSIBILITY: Year <-> pixel mapping, pivot-preserving zoom, pan, fit
ALLOWED INPUTS: pixel positions, zoom factors, year bounds
OUTPUTS: ViewportState (immutable snapshots)

CORE GUARANTEE:
===============
zoom(p, k) leaves pixel_to_year(p) unchanged: the year under the pivot
does not move. Scale is always clamped to [min_scale, max_scale].
A mutation whose inputs or resulting origin are not finite raises
ValueError and leaves the state untouched.
"""

from __future__ import annotations
from dataclasses import dataclass
from collections import deque
from typing import Deque, List, Optional, Tuple
import itertools
import math

from ..contracts.events import AUDIT_LOG_LIMIT, AuditLogEntry, AuditEventType


@dataclass
class ViewportConfig:
    """Configuration for the viewport transform (pixels per year, pixels)."""
    min_scale: float = 0.01
    max_scale: float = 1000.0
    initial_scale: float = 2.0
    initial_origin_year: float = -2100.0
    left_pad: float = 80.0
    right_pad: float = 20.0
    fallback_span_years: float = 10.0
    fit_margin_px: float = 10.0
    wheel_base: float = 1.0015
    wheel_accelerator: float = 4.0

    def __post_init__(self):
        if not 0 < self.min_scale <= self.max_scale:
            raise ValueError("ViewportConfig requires 0 < min_scale <= max_scale")


@dataclass(frozen=True)
class ViewportState:
    """Snapshot of the transform: pixels per year and the year at left_pad."""
    scale: float
    origin_year: float


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")


def wheel_zoom_factor(delta_y: float, accelerated: bool = False,
                      base: float = 1.0015, accelerator: float = 4.0) -> float:
    """Zoom factor for a wheel delta; scrolling up (negative) zooms in."""
    speed = accelerator if accelerated else 1.0
    return math.pow(base, -delta_y * speed)


class ViewportTransform:
    """
    Mutable owner of one ViewportState.

    Every mutation replaces the state snapshot; callers may keep old
    snapshots for comparison.
    """

    def __init__(self, config: Optional[ViewportConfig] = None,
                 audit_log_limit: int = AUDIT_LOG_LIMIT):
        self._config = config or ViewportConfig()
        self._state = ViewportState(
            scale=self._clamp_scale(self._config.initial_scale),
            origin_year=self._config.initial_origin_year
        )
        self._audit_log: Deque[AuditLogEntry] = deque(maxlen=audit_log_limit)
        self._audit_sequence = itertools.count()

    @property
    def config(self) -> ViewportConfig:
        return self._config

    @property
    def state(self) -> ViewportState:
        return self._state

    @property
    def scale(self) -> float:
        return self._state.scale

    @property
    def origin_year(self) -> float:
        return self._state.origin_year

    # =========================================================================
    # COORDINATE MAPPING
    # =========================================================================

    def year_to_pixel(self, year: float) -> float:
        return self._config.left_pad + (year - self._state.origin_year) * self._state.scale

    def pixel_to_year(self, px: float) -> float:
        return self._state.origin_year + (px - self._config.left_pad) / self._state.scale

    def visible_years(self, width: float) -> Tuple[float, float]:
        """Years at the left and right edges of a canvas `width` px wide."""
        return self.pixel_to_year(0), self.pixel_to_year(width)

    def drawable_width(self, canvas_width: float) -> float:
        return canvas_width - self._config.left_pad - self._config.right_pad

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def zoom(self, pivot_px: float, factor: float) -> ViewportState:
        """Multiply the scale by `factor`, keeping the year under `pivot_px`."""
        if not math.isfinite(factor) or factor <= 0:
            raise ValueError(f"zoom factor must be a positive finite number, got {factor}")
        return self._rescale(pivot_px, self._state.scale * factor, "zoom")

    def set_scale(self, scale: float, pivot_px: float) -> ViewportState:
        """Jump to an absolute scale (zoom slider), keeping the pivot year."""
        if not math.isfinite(scale) or scale <= 0:
            raise ValueError(f"scale must be a positive finite number, got {scale}")
        return self._rescale(pivot_px, scale, "set_scale")

    def pan(self, delta_px: float) -> ViewportState:
        """Drag the content right by `delta_px` (earlier years come into view)."""
        _require_finite("pan delta", delta_px)
        origin_year = self._state.origin_year - delta_px / self._state.scale
        _require_finite("origin year", origin_year)
        self._state = ViewportState(scale=self._state.scale, origin_year=origin_year)
        return self._state

    def reset_to_fit(self, min_year: float, max_year: float, drawable_width: float) -> ViewportState:
        """Fit [min_year, max_year] into `drawable_width` px with a left margin."""
        if not math.isfinite(drawable_width) or drawable_width <= 0:
            raise ValueError(f"drawable width must be positive, got {drawable_width}")
        span = max(max_year - min_year, self._config.fallback_span_years)
        scale = self._clamp_scale(drawable_width / span)
        origin_year = min_year - self._config.fit_margin_px / scale
        _require_finite("origin year", origin_year)
        self._state = ViewportState(scale=scale, origin_year=origin_year)
        self._log_audit("reset_to_fit", (
            ("min_year", str(min_year)),
            ("max_year", str(max_year)),
            ("scale", f"{scale:.6g}"),
        ))
        return self._state

    def restore(self, state: ViewportState) -> ViewportState:
        self._state = ViewportState(
            scale=self._clamp_scale(state.scale),
            origin_year=state.origin_year
        )
        return self._state

    def _rescale(self, pivot_px: float, new_scale: float, action: str) -> ViewportState:
        _require_finite("pivot", pivot_px)
        year_at_pivot = self.pixel_to_year(pivot_px)
        scale = self._clamp_scale(new_scale)
        origin_year = year_at_pivot - (pivot_px - self._config.left_pad) / scale
        _require_finite("origin year", origin_year)
        self._state = ViewportState(scale=scale, origin_year=origin_year)
        self._log_audit(action, (
            ("pivot_px", str(pivot_px)),
            ("scale", f"{scale:.6g}"),
        ))
        return self._state

    def _clamp_scale(self, scale: float) -> float:
        return clamp(scale, self._config.min_scale, self._config.max_scale)

    def _log_audit(self, action: str, metadata: tuple = ()):
        self._audit_log.append(AuditLogEntry.create(
            event_type=AuditEventType.VIEWPORT,
            layer="viewport",
            action=action,
            sequence=next(self._audit_sequence),
            metadata=metadata
        ))

    def get_audit_log(self) -> List[AuditLogEntry]:
        """Return copy of audit log entries."""
        return list(self._audit_log)
