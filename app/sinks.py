from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Protocol

from fastapi import WebSocket

from app.checks.results import CheckResult
from app.formatting import format_result

logger = logging.getLogger(__name__)


class DeliveryError(RuntimeError):
    pass


class Sink(Protocol):
    def deliver(self, result: CheckResult) -> None:
        """Push one result to observers; raise DeliveryError if it could not be sent."""
        ...


class WebSocketBroadcaster:
    """
    Sink that fans each result out as a text frame to every connected WebSocket.

    deliver() is called from the monitor thread; the sends themselves run on
    the server's event loop, which must be bound before the first delivery.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        delivery_timeout_s: float = 5.0,
    ) -> None:
        self._loop = loop
        self.delivery_timeout_s = delivery_timeout_s
        self._clients: set[WebSocket] = set()
        self._lock = threading.Lock()

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    @property
    def client_count(self) -> int:
        with self._lock:
            return len(self._clients)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        with self._lock:
            self._clients.add(websocket)
            total = len(self._clients)
        logger.info("WebSocket client connected. Total: %d", total)

    def disconnect(self, websocket: WebSocket) -> None:
        with self._lock:
            if websocket not in self._clients:
                return
            self._clients.discard(websocket)
            total = len(self._clients)
        logger.info("WebSocket client disconnected. Total: %d", total)

    def deliver(self, result: CheckResult) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            raise DeliveryError("no running event loop bound to broadcaster")

        future = asyncio.run_coroutine_threadsafe(self._broadcast(format_result(result)), loop)
        # Each send has its own timeout; the outer wait only guards a stalled loop.
        wait_s = self.delivery_timeout_s + 1
        try:
            failed = future.result(timeout=wait_s)
        except concurrent.futures.TimeoutError as exc:
            future.cancel()
            raise DeliveryError(f"broadcast timed out after {wait_s}s") from exc

        if failed:
            raise DeliveryError(f"failed to deliver to {failed} client(s)")

    async def _send(self, websocket: WebSocket, message: str) -> None:
        await asyncio.wait_for(websocket.send_text(message), timeout=self.delivery_timeout_s)

    async def _broadcast(self, message: str) -> int:
        with self._lock:
            clients = list(self._clients)

        outcomes = await asyncio.gather(
            *(self._send(websocket, message) for websocket in clients),
            return_exceptions=True,
        )

        failed = 0
        for websocket, outcome in zip(clients, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Dropping WebSocket client after send error: %r", outcome
                )
                self.disconnect(websocket)
                failed += 1
        return failed
