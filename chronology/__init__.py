"""
Layered Timeline Engine

This package implements the computational core behind a zoomable,
pannable, multi-layer historical timeline. Rendering is left to an
external shell that consumes the engine's state.

LAYER STRUCTURE:
================

1. TEMPORAL PARSING (temporal/)
   - Responsibility: year tokens and time fields -> YearRange
   - Outputs: YearRange or None (never raises)

2. INGESTION LAYER (ingestion/)
   - Responsibility: delimited text -> TimelineEvent batches
   - MUST NOT: lay out, order or render anything

3. CORE LAYOUT ENGINE (core/)
   - Responsibility: lane packing per layer, layer order, drag reordering
   - MUST NOT: parse text or map years to pixels

4. VIEWPORT LAYER (viewport/)
   - Responsibility: year <-> pixel transform, pivot-preserving zoom, pan

5. OBSERVABILITY & AUDIT LAYER (observability/)
   - Responsibility: audit entries and metrics from every layer
   - MUST NOT: modify system behavior

6. ENGINE (engine.py)
   - The one owned context object tying the layers together

CONSTRAINTS ENFORCED:
=====================
- Explicit failures: parse and ingestion failures are values, not exceptions
- Derived data is recomputed, never patched
- Deterministic: an injected YearClock is the only time source
"""

from .engine import TimelineEngine, TimelineConfig

__all__ = ['TimelineEngine', 'TimelineConfig']
