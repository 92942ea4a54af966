"""
WebSocket endpoint — pushes each tick's frame to connected map views.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from debris_tracker.api.models import PositionsFrame
from debris_tracker.simulation.controller import TickSnapshot

router = APIRouter(tags=["websocket"])
logger = logging.getLogger(__name__)


class FrameBroadcaster:
    """
    Tracks map-view connections and what each wants per frame.

    A client that turned trails off gets frames without the trails map;
    each variant is serialized at most once per tick.
    """

    def __init__(self):
        # id(websocket) -> [websocket, wants trails]; WebSocket is unhashable
        self._clients: Dict[int, list] = {}

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._clients[id(websocket)] = [websocket, True]
        logger.info("Map view connected (%d total)", len(self._clients))

    def disconnect(self, websocket: WebSocket) -> None:
        self._clients.pop(id(websocket), None)
        logger.info("Map view disconnected (%d total)", len(self._clients))

    def set_trails(self, websocket: WebSocket, enabled: bool) -> None:
        entry = self._clients.get(id(websocket))
        if entry is not None:
            entry[1] = enabled

    async def send_frame(self, snapshot: TickSnapshot) -> None:
        if not self._clients:
            return

        payloads: Dict[bool, str] = {}
        stale = []
        for websocket, with_trails in list(self._clients.values()):
            if with_trails not in payloads:
                frame = PositionsFrame.from_snapshot(snapshot, include_trails=with_trails)
                payloads[with_trails] = json.dumps({"type": "frame", **frame.model_dump(mode="json")})
            try:
                await websocket.send_text(payloads[with_trails])
            except Exception:
                stale.append(websocket)

        for websocket in stale:
            self.disconnect(websocket)

    @property
    def count(self) -> int:
        return len(self._clients)


broadcaster = FrameBroadcaster()


def _handle_message(websocket: WebSocket, msg: dict) -> Optional[dict]:
    """Apply one client message; returns a reply, if any."""
    from debris_tracker.api.main import app_state

    kind = msg.get("type")
    if kind == "ping":
        return {"type": "pong"}
    if kind == "pointer":
        controller = app_state["controller"]
        if "x" in msg and "y" in msg:
            controller.set_pointer(float(msg["x"]), float(msg["y"]))
        else:
            controller.clear_pointer()
    elif kind == "subscribe":
        broadcaster.set_trails(websocket, bool(msg.get("trails", True)))
        return {"type": "subscribed", "trails": bool(msg.get("trails", True))}
    return None


@router.websocket("/api/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    Per-tick frames for the map view.

    Each tick the client receives
    {"type": "frame", "generation": 3, "timestamp": 1767225600000.0,
     "objects": [{"id": 40001, "x": 512.3, "y": 288.1, "lat": 12.4, "lon": -33.0,
                  "category": "Debris", "color": [255, 80, 80]}],
     "trails": {"40001": [{"x": 510.0, "y": 287.9, "timestamp": 1767225599967.0,
                           "alpha": 0.0, "thickness": 0.0}, ...]},
     "hovered": null}

    Client messages:
        {"type": "pointer", "x": 100, "y": 80}  move the hover pointer
        {"type": "pointer"}                      pointer left the view
        {"type": "subscribe", "trails": false}   drop trails from frames
        {"type": "ping"}
    """
    await broadcaster.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                reply = _handle_message(websocket, json.loads(data))
            except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
                logger.debug("Ignoring malformed client message %r: %s", data, e)
                continue
            if reply is not None:
                await websocket.send_text(json.dumps(reply))
    except WebSocketDisconnect:
        logger.debug("Map view closed the connection")
    finally:
        broadcaster.disconnect(websocket)


async def broadcast_positions(snapshot: TickSnapshot) -> None:
    """SimulationClock callback, once per tick."""
    await broadcaster.send_frame(snapshot)
