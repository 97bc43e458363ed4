from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Any, Callable

from app.checks.http_check import check_target
from app.checks.results import CheckResult, Failure, FailureReason
from app.formatting import result_to_dict
from app.models import CheckTarget
from app.sinks import Sink

logger = logging.getLogger(__name__)

Prober = Callable[[CheckTarget], CheckResult]


class InvalidStateError(RuntimeError):
    pass


class MonitorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Monitor:
    """
    Periodically checks one target and forwards every result to a sink.

    Lifecycle is Idle -> Running -> Stopped; a stopped monitor cannot be
    restarted. Ticks run sequentially on one background thread. A tick that
    overruns the interval causes the missed firings to be skipped, not queued.
    stop() may be called from a sink on the monitor thread; it then returns
    without waiting, and the loop exits once the current delivery finishes.
    """

    def __init__(
        self,
        target: CheckTarget,
        sink: Sink,
        prober: Prober | None = None,
        stop_grace_s: float | None = None,
    ) -> None:
        self.target = target
        self.sink = sink
        self._prober = prober or check_target
        self._stop_grace_s = target.timeout_s + 1 if stop_grace_s is None else stop_grace_s

        self._state = MonitorState.IDLE
        self._lock = threading.Lock()
        # Held across each delivery; stop() takes it once to fence late deliveries.
        self._deliver_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        self._ticks = 0
        self._skipped_ticks = 0
        self._delivery_failures = 0
        self._last_result: CheckResult | None = None

    @property
    def state(self) -> MonitorState:
        return self._state

    def start(self) -> None:
        with self._lock:
            if self._state is not MonitorState.IDLE:
                raise InvalidStateError(f"cannot start monitor in state {self._state.value}")
            self._state = MonitorState.RUNNING
            self._thread = threading.Thread(
                target=self._run,
                name=f"monitor-{self.target.url}",
                daemon=True,
            )
            self._thread.start()

        if self.target.timeout_s >= self.target.interval_s:
            logger.warning(
                "Check timeout %.1fs is not below interval %.1fs; slow checks will skip ticks",
                self.target.timeout_s,
                self.target.interval_s,
            )
        logger.info("Monitor started for %s every %.1fs", self.target.url, self.target.interval_s)

    def stop(self) -> None:
        with self._lock:
            if self._state is not MonitorState.RUNNING:
                raise InvalidStateError(f"cannot stop monitor in state {self._state.value}")
            self._state = MonitorState.STOPPED
            self._stop_event.set()
            thread, self._thread = self._thread, None

        if thread is threading.current_thread():
            # Called from a sink on the monitor thread: the loop exits after this tick.
            logger.info("Monitor stopped from its own thread for %s", self.target.url)
            return

        if thread is not None:
            thread.join(timeout=self._stop_grace_s)
            if thread.is_alive():
                logger.warning(
                    "Monitor thread still busy %.1fs after stop; its result will be discarded",
                    self._stop_grace_s,
                )

        with self._deliver_lock:
            pass
        logger.info("Monitor stopped for %s", self.target.url)

    def __enter__(self) -> Monitor:
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._state is MonitorState.RUNNING:
            self.stop()

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            last = self._last_result
            return {
                "state": self._state.value,
                "url": self.target.url,
                "interval_s": self.target.interval_s,
                "timeout_s": self.target.timeout_s,
                "ticks": self._ticks,
                "skipped_ticks": self._skipped_ticks,
                "delivery_failures": self._delivery_failures,
                "last_result": result_to_dict(last) if last is not None else None,
            }

    def _run(self) -> None:
        interval = self.target.interval_s
        next_tick = time.monotonic() + interval

        while not self._stop_event.wait(max(0.0, next_tick - time.monotonic())):
            self._tick()

            next_tick += interval
            now = time.monotonic()
            if now > next_tick:
                missed = int((now - next_tick) // interval) + 1
                next_tick += missed * interval
                with self._lock:
                    self._skipped_ticks += missed
                logger.warning("Check overran its interval; skipped %d tick(s)", missed)

    def _probe(self) -> CheckResult:
        try:
            return self._prober(self.target)
        except Exception as e:
            logger.exception("Prober raised for %s", self.target.url)
            return Failure(reason=FailureReason.TRANSPORT_ERROR, detail=str(e))

    def _tick(self) -> None:
        result = self._probe()

        with self._deliver_lock:
            if self._stop_event.is_set():
                logger.debug("Discarding result produced after stop: %r", result)
                return

            with self._lock:
                self._ticks += 1
                self._last_result = result

            try:
                self.sink.deliver(result)
            except Exception as e:
                # Delivery errors should never stop the check loop.
                with self._lock:
                    self._delivery_failures += 1
                logger.warning("Failed to deliver check result: %s", e)
