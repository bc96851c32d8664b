from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..config import AppConfig, SimulationConfig
from ..sim.core.world import World

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    """Drives a :class:`World` on a frame timer and fans snapshots out to clients.

    Each client keeps the tick of the last snapshot it was sent. Snapshots stay
    queued until a client acknowledges them, so a slow client catches up in
    order instead of skipping frames.
    """

    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1):
        self.config = config
        self.world = World(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.tick = 0
        self._last_sent: Dict[WebSocket, int] = {}
        self._queue: deque[QueuedSnapshot] = deque()
        self._lock = asyncio.Lock()
        self._frame_task: Optional[asyncio.Task] = None

    @property
    def client_count(self) -> int:
        return len(self._last_sent)

    def queued_ticks(self) -> list[int]:
        return [item.tick for item in self._queue]

    async def start(self) -> None:
        if self._frame_task is None:
            self._frame_task = asyncio.create_task(self._run_frames())
        self.running = True
        logger.info("Frame loop running at %.1f ticks/s", self.config.tick_rate)

    def pause(self) -> None:
        self.running = False
        logger.info("Paused at tick %d", self.tick)

    def resume(self) -> None:
        self.running = True
        logger.info("Resumed at tick %d", self.tick)

    async def reset(self) -> None:
        async with self._lock:
            self.world.reset()
            self.tick = 0
            self._queue.clear()
            for client in self._last_sent:
                self._last_sent[client] = -1
        await self.publish()

    async def set_viewport(self, width: float, height: float) -> bool:
        async with self._lock:
            arena = self.world.set_arena(width, height)
        return arena is not None

    async def advance(self) -> bool:
        """Run one frame. Returns ``False`` while the driver is idle."""
        async with self._lock:
            if self.world.step(self.tick) is None:
                return False
            self.tick += 1
        if self.tick % self.broadcast_interval == 0:
            await self.publish()
        return True

    async def _run_frames(self) -> None:
        period = 1.0 / self.config.tick_rate
        while True:
            await asyncio.sleep(period)
            if self.running:
                await self.advance()

    async def handle_message(self, message: Any) -> None:
        """Apply one decoded client message: an ``ack`` or a ``viewport`` report."""
        if not isinstance(message, dict):
            return
        kind = message.get("type")
        if kind == "ack":
            tick = message.get("tick")
            if isinstance(tick, int):
                self.acknowledge(tick)
        elif kind == "viewport":
            try:
                width = float(message["width"])
                height = float(message["height"])
            except (KeyError, TypeError, ValueError):
                logger.warning("Ignoring malformed viewport message %r", message)
                return
            await self.set_viewport(width, height)

    def acknowledge(self, tick: int) -> None:
        while self._queue and self._queue[0].tick <= tick:
            self._queue.popleft()

    def encode_snapshot(self) -> QueuedSnapshot:
        snapshot = self.world.snapshot(self.tick)
        message = {
            "type": "snapshot",
            "tick": snapshot.tick,
            "payload": {
                "metrics": None if snapshot.metrics is None else asdict(snapshot.metrics),
                "agents": snapshot.agents,
                "arena": None if snapshot.arena is None else asdict(snapshot.arena),
                "metadata": asdict(snapshot.metadata),
            },
        }
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(message))

    async def connect(self, client: WebSocket) -> None:
        self._last_sent[client] = -1
        logger.info("Client connected (%d total)", self.client_count)
        await self._flush(client)

    def disconnect(self, client: WebSocket) -> None:
        if self._last_sent.pop(client, None) is not None:
            logger.info("Client disconnected (%d left)", self.client_count)

    async def _flush(self, client: WebSocket) -> None:
        last_sent = self._last_sent.get(client, -1)
        for item in [item for item in self._queue if item.tick > last_sent]:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._last_sent[client] = last_sent

    async def publish(self) -> None:
        self._queue.append(self.encode_snapshot())
        for client in list(self._last_sent):
            try:
                await self._flush(client)
            except WebSocketDisconnect:
                self.disconnect(client)


# Arena bounds arrive from the client's viewport; until then the flock stays idle.
app_config = AppConfig(simulation=SimulationConfig(arena_width=None, arena_height=None))
app = FastAPI(title="Boids Arena")
controller = SimulationController(app_config.simulation, broadcast_interval=app_config.broadcast_interval)


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.get("/api/status")
async def status() -> JSONResponse:
    metrics = controller.world.metrics
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "state": controller.world.state.value,
            "population": len(controller.world.agents),
            "clients": controller.client_count,
            "metrics": None if metrics is None else asdict(metrics),
        }
    )


@app.post("/api/viewport")
async def set_viewport(payload: dict) -> JSONResponse:
    try:
        width = float(payload["width"])
        height = float(payload["height"])
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Rejected viewport payload %r", payload)
        raise HTTPException(status_code=422, detail="width and height are required numbers") from exc
    if not await controller.set_viewport(width, height):
        raise HTTPException(status_code=422, detail="width and height must be finite and positive")
    return JSONResponse({"width": width, "height": height})


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.resume()
    return JSONResponse({"running": controller.running})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.pause()
    return JSONResponse({"running": controller.running})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    await controller.connect(websocket)
    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
            except json.JSONDecodeError:
                logger.debug("Dropping non-JSON client message")
                continue
            await controller.handle_message(message)
    except WebSocketDisconnect:
        controller.disconnect(websocket)


__all__ = ["app", "controller"]
