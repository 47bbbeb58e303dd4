from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import asdict
from typing import Literal, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from dispatch import get_algorithm
from simulation import Simulation, SimulationConfig

logger = logging.getLogger(__name__)


class ConfigRequest(BaseModel):
    floors: int = Field(10, ge=2, le=200)
    elevators: int = Field(3, ge=1, le=32)
    capacity: int = Field(8, ge=1, le=50)
    speed_floors_per_sec: float = Field(1.5, gt=0, le=20)
    acceleration_floors_per_sec2: Optional[float] = Field(None, gt=0, le=20)
    stop_duration_sec: float = Field(1.0, ge=0, le=30)
    spawn_rate_per_min: float = Field(40.0, ge=0, le=600)
    ground_bias: float = Field(3.0, ge=1, le=20)
    to_lobby_pct: float = Field(70.0, ge=0, le=100)
    algorithm: str = "nearest"
    random_seed: Optional[int] = None

    def to_config(self) -> SimulationConfig:
        return SimulationConfig(**self.model_dump())


class AlgorithmSelection(BaseModel):
    name: str


class CallRequest(BaseModel):
    origin: int
    direction: Literal["up", "down"]


class StepRequest(BaseModel):
    dt: float = Field(0.1, gt=0, le=5)
    count: int = Field(1, ge=1, le=10000)


class SimulationManager:
    def __init__(self, config: Optional[ConfigRequest] = None, tick_interval: float = 0.05) -> None:
        self.config = config or ConfigRequest()
        self.simulation = Simulation(self.config.to_config())
        self.tick_interval = tick_interval
        self.clients: Set[WebSocket] = set()
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
            self._task.add_done_callback(self._on_loop_done)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def _on_loop_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Simulation loop stopped", exc_info=exc)

    async def _run(self) -> None:
        while True:
            async with self._lock:
                self.simulation.step(self.tick_interval)
                payload = self.current_state()
            await self.broadcast(payload)
            await asyncio.sleep(self.tick_interval)

    async def broadcast(self, payload: dict) -> None:
        message = json.dumps(payload)
        disconnected: Set[WebSocket] = set()
        for client in set(self.clients):
            try:
                await client.send_text(message)
            except (WebSocketDisconnect, RuntimeError):
                logger.debug("Dropping stream client that went away")
                disconnected.add(client)
        for client in disconnected:
            await self.unregister(client)

    async def register(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.clients.add(websocket)
        await websocket.send_text(json.dumps(self.current_state()))

    async def unregister(self, websocket: WebSocket) -> None:
        if websocket in self.clients:
            self.clients.remove(websocket)
        with contextlib.suppress(Exception):
            await websocket.close()

    def current_state(self) -> dict:
        state = self.simulation.snapshot()
        state["stats"] = asdict(state["stats"])
        return state

    async def reconfigure(self, config: ConfigRequest) -> dict:
        async with self._lock:
            self.config = config
            self.simulation = Simulation(config.to_config())
            logger.info("Simulation rebuilt: %s floors, %s elevators", config.floors, config.elevators)
            return self.current_state()

    async def set_algorithm(self, name: str) -> dict:
        async with self._lock:
            self.simulation.set_algorithm(get_algorithm(name))
            self.config = self.config.model_copy(update={"algorithm": name})
            return self.current_state()

    async def call(self, origin: int, direction: str) -> dict:
        async with self._lock:
            passenger = self.simulation.request(origin, direction)
            state = self.current_state()
            state["accepted"] = passenger is not None
            return state

    async def advance(self, dt: float, count: int) -> dict:
        async with self._lock:
            for _ in range(count):
                self.simulation.step(dt)
            return self.current_state()

    async def next_stop(self, elevator_id: int) -> Optional[int]:
        async with self._lock:
            if self.simulation.building.get_elevator(elevator_id) is None:
                raise KeyError(elevator_id)
            return self.simulation.next_stop_for(elevator_id)


manager = SimulationManager()
app = FastAPI(title="Elevator Fleet Simulation API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup() -> None:
    await manager.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await manager.stop()


@app.get("/state")
async def get_state() -> dict:
    return manager.current_state()


@app.post("/config")
async def set_config(config: ConfigRequest) -> dict:
    try:
        get_algorithm(config.algorithm)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return await manager.reconfigure(config)


@app.post("/algorithm")
async def set_algorithm(selection: AlgorithmSelection) -> dict:
    try:
        return await manager.set_algorithm(selection.name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.post("/calls")
async def place_call(request: CallRequest) -> dict:
    return await manager.call(request.origin, request.direction)


@app.post("/step")
async def step(request: StepRequest) -> dict:
    return await manager.advance(request.dt, request.count)


@app.get("/elevators/{elevator_id}/next-stop")
async def next_stop(elevator_id: int) -> dict:
    try:
        floor = await manager.next_stop(elevator_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown elevator {elevator_id}")
    return {"elevator_id": elevator_id, "next_stop": floor}


@app.websocket("/ws/stream")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await manager.register(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.unregister(websocket)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.app:app", host="0.0.0.0", port=8000, reload=False)
