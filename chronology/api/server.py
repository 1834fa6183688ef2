"""
Layered Timeline: API Server
============================

HTTP surface for a rendering shell. The shell reads frames and forwards
user gestures; every call is serialised behind one lock because the engine
is not designed for concurrent mutation.

Endpoints:
- GET    /api/v1/state                -> engine snapshot
- GET    /api/v1/frame                -> computed TimelineView
- POST   /api/v1/ingest               -> parse text / file contents into a layer
- DELETE /api/v1/layers/{layer}       -> remove a layer and its events
- POST   /api/v1/viewport/{zoom,wheel,scale,pan,reset,resize}
- POST   /api/v1/drag/{begin,update,commit,cancel}
- GET    /api/v1/audit                -> audit report

Usage:
    uvicorn chronology.api.server:app --reload
"""
import os
import threading
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from frontend.visualization.timeline import build_timeline_view

from ..contracts.base import ErrorCode, Result
from ..engine import TimelineConfig, TimelineEngine
from ..ingestion.samples import SAMPLE_RECORDS
from ..temporal.clock import YearClock
from .mapper import (
    map_batch, map_deletion, map_drag, map_engine_state, map_error, map_viewport
)

# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

# Global engine instance, only touched while holding engine_lock
engine_instance: Optional[TimelineEngine] = None
engine_lock = threading.Lock()

_STATUS_BY_CODE = {
    ErrorCode.NO_EVENTS_PRODUCED: 422,
    ErrorCode.INVALID_ZOOM: 422,
    ErrorCode.INVALID_PAN: 422,
    ErrorCode.LAYER_NOT_FOUND: 404,
    ErrorCode.NO_ACTIVE_DRAG: 409,
    ErrorCode.DRAG_IN_PROGRESS: 409,
}


def build_engine_from_env() -> TimelineEngine:
    """Engine configured from TIMELINE_* environment variables."""
    config = TimelineConfig(
        canvas_width=float(os.environ.get("TIMELINE_CANVAS_WIDTH", "1200"))
    )
    pinned_year = os.environ.get("TIMELINE_CURRENT_YEAR")
    clock = YearClock.fixed(int(pinned_year)) if pinned_year else YearClock.live()
    engine = TimelineEngine(config, clock=clock)

    seed_file = os.environ.get("TIMELINE_SEED_FILE")
    if seed_file:
        with open(seed_file, 'r', encoding='utf-8') as f:
            batch = engine.ingest_file(os.path.basename(seed_file), f.read())
    else:
        batch = engine.load_text_panel(SAMPLE_RECORDS)
    print(f"[*] Seeded layer '{batch.layer}' with {len(batch.events)} events")
    return engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the engine on startup."""
    global engine_instance

    print("[*] Initializing timeline engine")
    try:
        engine = build_engine_from_env()
    except (OSError, ValueError) as e:
        print(f"[!] FAILED to initialize engine: {e}")
        raise
    with engine_lock:
        engine_instance = engine
    print("[*] Engine initialized successfully.")

    yield

    print("[*] Shutting down timeline engine.")
    with engine_lock:
        engine_instance = None


app = FastAPI(
    title="Layered Timeline API",
    version="0.1.0",
    description="Computational core of a zoomable multi-layer timeline",
    lifespan=lifespan
)

# CORS (Allow rendering shell)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)


def _engine() -> TimelineEngine:
    if engine_instance is None:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine_instance


def _unwrap(result: Result):
    if result.is_failure:
        raise HTTPException(
            status_code=_STATUS_BY_CODE.get(result.error.code, 400),
            detail=map_error(result.error)
        )
    return result.value


# =============================================================================
# REQUEST MODELS
# =============================================================================

class IngestRequest(BaseModel):
    text: str
    layer: Optional[str] = None
    filename: Optional[str] = None


class ZoomRequest(BaseModel):
    pivot_px: float
    factor: float


class WheelRequest(BaseModel):
    pointer_x: float
    delta_y: float
    accelerated: bool = False
    pin_center: bool = False


class ScaleRequest(BaseModel):
    scale: float


class PanRequest(BaseModel):
    delta_px: float


class ResizeRequest(BaseModel):
    canvas_width: float = Field(gt=0)


class DragBeginRequest(BaseModel):
    x: float
    y: float


class DragUpdateRequest(BaseModel):
    y: float


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/health")
def health_check():
    """System status."""
    with engine_lock:
        engine = _engine()
        return {"status": "online", "layers": len(engine.layer_order), "events": len(engine.events)}


@app.get("/api/v1/state")
def get_state():
    with engine_lock:
        return map_engine_state(_engine())


@app.get("/api/v1/frame")
def get_frame():
    """Computed frame for the current state; the shell only draws it."""
    with engine_lock:
        return build_timeline_view(_engine()).to_dict()


@app.post("/api/v1/ingest")
def ingest(request: IngestRequest):
    """
    Parse text into a layer.

    Layer precedence: explicit layer, then the file name, then the text layer.
    Zero parsed events answers 422 and leaves the data untouched.
    """
    with engine_lock:
        engine = _engine()
        if request.layer:
            batch = engine.ingest_text(request.text, request.layer)
        elif request.filename:
            batch = engine.ingest_file(request.filename, request.text)
        else:
            batch = engine.load_text_panel(request.text)
        if batch.is_empty:
            raise HTTPException(status_code=422, detail=map_batch(batch))
        return map_batch(batch)


@app.delete("/api/v1/layers/{layer}")
def delete_layer(layer: str):
    """Idempotent: an unknown layer reports removed=false."""
    with engine_lock:
        return map_deletion(_engine().delete_layer(layer))


@app.post("/api/v1/viewport/zoom")
def zoom(request: ZoomRequest):
    with engine_lock:
        return map_viewport(_unwrap(_engine().zoom(request.pivot_px, request.factor)))


@app.post("/api/v1/viewport/wheel")
def wheel(request: WheelRequest):
    with engine_lock:
        result = _engine().wheel(
            request.pointer_x, request.delta_y,
            accelerated=request.accelerated, pin_center=request.pin_center
        )
        return map_viewport(_unwrap(result))


@app.post("/api/v1/viewport/scale")
def set_scale(request: ScaleRequest):
    with engine_lock:
        return map_viewport(_unwrap(_engine().set_scale(request.scale)))


@app.post("/api/v1/viewport/pan")
def pan(request: PanRequest):
    with engine_lock:
        return map_viewport(_unwrap(_engine().pan(request.delta_px)))


@app.post("/api/v1/viewport/reset")
def reset_view():
    with engine_lock:
        engine = _engine()
        engine.reset_view()
        return map_viewport(engine.viewport.state)


@app.post("/api/v1/viewport/resize")
def resize(request: ResizeRequest):
    with engine_lock:
        engine = _engine()
        engine.resize(request.canvas_width)
        return {"canvas_width": engine.canvas_width}


@app.post("/api/v1/drag/begin")
def drag_begin(request: DragBeginRequest):
    with engine_lock:
        return map_drag(_unwrap(_engine().begin_layer_drag(request.x, request.y)))


@app.post("/api/v1/drag/update")
def drag_update(request: DragUpdateRequest):
    with engine_lock:
        return map_drag(_unwrap(_engine().update_drag(request.y)))


@app.post("/api/v1/drag/commit")
def drag_commit():
    with engine_lock:
        return {"layer_order": list(_unwrap(_engine().commit_drag()))}


@app.post("/api/v1/drag/cancel")
def drag_cancel():
    with engine_lock:
        return {"cancelled": _engine().cancel_drag()}


@app.get("/api/v1/audit")
def get_audit():
    with engine_lock:
        return _engine().get_audit_report()
