import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, WebSocket

from app.api_schemas import ConfigResponse, HealthResponse, MonitorStatusResponse
from app.config import settings
from app.registry import load_target
from app.runner import Monitor
from app.sinks import WebSocketBroadcaster

logger = logging.getLogger(__name__)
broadcaster = WebSocketBroadcaster(delivery_timeout_s=settings.MONITOR_DELIVERY_TIMEOUT)
monitor: Monitor | None = None


@asynccontextmanager
async def lifespan(_: FastAPI):
    global monitor

    broadcaster.bind(asyncio.get_running_loop())
    monitor = Monitor(load_target(), broadcaster)
    monitor.start()
    try:
        yield
    finally:
        # stop() blocks on the monitor thread, which may be waiting on this loop.
        await asyncio.to_thread(monitor.stop)


app = FastAPI(
    title="Web App Monitor",
    version="1.0.0",
    description=(
        "Periodically checks one HTTP endpoint and pushes each latency "
        "or failure result to WebSocket clients connected on /ws."
    ),
    lifespan=lifespan,
)


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["system"],
    summary="Health Check",
    description="Liveness endpoint used by probes and orchestration.",
)
def health():
    return {"status": "ok"}


@app.get(
    "/config",
    response_model=ConfigResponse,
    tags=["system"],
    summary="Current Effective Config",
    description="Returns the monitored target as loaded at startup.",
)
def config():
    if monitor is None:
        raise HTTPException(status_code=503, detail="monitor not initialized")
    return monitor.target.model_dump()


@app.get(
    "/api/status",
    response_model=MonitorStatusResponse,
    tags=["status"],
    summary="Monitor Status",
    description="Monitor lifecycle state, tick counters and the latest check result.",
)
def status():
    if monitor is None:
        raise HTTPException(status_code=503, detail="monitor not initialized")
    return {**monitor.snapshot(), "clients": broadcaster.client_count}


@app.websocket("/ws")
async def results_feed(websocket: WebSocket):
    await broadcaster.connect(websocket)
    try:
        while True:
            # Incoming frames, text or binary, are ignored; only the disconnect matters.
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        broadcaster.disconnect(websocket)
