"""
Simulation control endpoints — play/pause, data refresh, pointer, view size.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from debris_tracker.api.models import RefreshResponse, SimulationStatus
from debris_tracker.simulation.tle_loader import DataSource

router = APIRouter(prefix="/api/simulation", tags=["simulation"])


def _get_clock():
    from debris_tracker.api.main import app_state
    return app_state["clock"]


def _get_controller():
    from debris_tracker.api.main import app_state
    return app_state["controller"]


def _get_loader():
    from debris_tracker.api.main import app_state
    return app_state["loader"]


@router.get("/status", response_model=SimulationStatus)
async def simulation_status():
    """Get current clock and dataset status."""
    clock = _get_clock()
    controller = _get_controller()
    result = _get_loader().last_result
    return SimulationStatus(
        is_playing=clock.is_playing,
        interval_ms=clock.interval_ms,
        tick_count=clock.tick_count,
        generation=controller.generation,
        object_count=len(controller.objects),
        source=result.source if result else None,
        pointer=list(controller.pointer) if controller.pointer else None,
    )


@router.post("/play")
async def play():
    """Resume ticking."""
    _get_clock().play()
    return {"status": "playing"}


@router.post("/pause")
async def pause():
    """Pause ticking."""
    _get_clock().pause()
    return {"status": "paused"}


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(source: DataSource = Query(DataSource.RECENT)):
    """
    Reload the dataset from a source.

    Fetch failures fall back to simulated data and come back as a warning.
    """
    result = await _get_loader().refresh(source)
    return RefreshResponse(
        source=result.source,
        committed=result.committed,
        generation=result.generation,
        object_count=len(result.objects),
        synthetic=result.synthetic,
        warning=result.warning,
    )


@router.post("/pointer")
async def set_pointer(x: float = Query(...), y: float = Query(...)):
    """Set the pointer position used for hover resolution."""
    _get_controller().set_pointer(x, y)
    return {"pointer": [x, y]}


@router.delete("/pointer")
async def clear_pointer():
    """Pointer left the view."""
    _get_controller().clear_pointer()
    return {"pointer": None}


@router.post("/resize")
async def resize(width: int = Query(..., ge=1, le=10000), height: int = Query(..., ge=1, le=10000)):
    """Change the view size used for screen projection."""
    _get_controller().resize(width, height)
    return {"width": width, "height": height}
