"""
FastAPI Application — Debris Tracker backend.

Serves the per-tick positions, trails and hover result to the map view over
REST and WebSocket, and the growth forecasts to the predictions view.
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from debris_tracker.api.dataset_loader import DatasetLoader
from debris_tracker.api.models import HealthResponse
from debris_tracker.api.simulation_clock import SimulationClock
from debris_tracker.simulation.classifier import RecordClassifier
from debris_tracker.simulation.controller import SimulationController
from debris_tracker.simulation.orbital_mechanics import PositionPropagator, SkyfieldBackend
from debris_tracker.simulation.tle_loader import TLELoader
from debris_tracker.utils.config_loader import Config

logger = logging.getLogger(__name__)

# Global app state (accessed by route modules)
app_state: dict = {}

CONFIG_DIR = Path(os.environ.get("DEBRIS_TRACKER_CONFIG_DIR", "config"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the engine, load the initial dataset and start ticking."""
    t0 = time.perf_counter()

    config = Config(CONFIG_DIR)
    config.load_all()
    app_state["config"] = config

    backend = SkyfieldBackend()
    controller = SimulationController(
        PositionPropagator(backend),
        view=config.view,
        trail=config.trail,
        hover=config.hover,
    )
    app_state["controller"] = controller

    loader = DatasetLoader(
        controller,
        RecordClassifier(backend=backend),
        TLELoader(timeout=config.data_source.request_timeout_seconds),
        offline=config.data_source.offline,
        max_objects=config.simulation.max_tracked_objects,
    )
    app_state["loader"] = loader

    await loader.refresh(config.data_source.source)

    from debris_tracker.api.routes.websocket import broadcast_positions
    clock = SimulationClock(controller, interval_ms=config.simulation.tick_interval_ms)
    clock.on_tick(broadcast_positions)
    app_state["clock"] = clock
    await clock.start()

    logger.info("Startup complete in %.2fs", time.perf_counter() - t0)
    yield

    await clock.stop()
    app_state.clear()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Debris Tracker API",
    description="Orbital object positions, trails and debris growth forecasts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

from debris_tracker.api.routes import objects, predictions, simulation, websocket  # noqa: E402

app.include_router(objects.router)
app.include_router(simulation.router)
app.include_router(predictions.router)
app.include_router(websocket.router)


@app.get("/api/health", response_model=HealthResponse)
async def health():
    """Liveness plus a glance at the loaded dataset."""
    controller = app_state.get("controller")
    loader = app_state.get("loader")
    result = loader.last_result if loader else None
    return HealthResponse(
        status="ok" if controller is not None else "starting",
        objects_loaded=len(controller.objects) if controller else 0,
        generation=controller.generation if controller else 0,
        source=result.source if result else None,
        synthetic=result.synthetic if result else False,
    )
