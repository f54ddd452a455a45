from __future__ import annotations

import collections
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from onboarding.core.events.models import EventSeverity, OnboardingEvent, SourceSubsystem
from onboarding.core.events.registry import HANDLER_ERROR

Handler = Callable[[OnboardingEvent], None]


class EventBusConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    shutdown_grace_seconds: float = Field(default=5.0, ge=0.1, le=60.0)
    keep_recent: int = Field(default=200, ge=10, le=10_000)


def _matches(pattern: str, event_type: str) -> bool:
    if pattern == "*":
        return True
    if pattern.endswith(".*"):
        return event_type.startswith(pattern[:-1])
    return pattern == event_type


class _Subscription:
    """A handler with its own FIFO inbox and worker thread."""

    def __init__(self, pattern: str, handler: Handler, priority: int, *, name: str, on_error: Callable[[Handler, OnboardingEvent, Exception], None]):
        self.pattern = pattern
        self.handler = handler
        self.priority = priority
        self._on_error = on_error
        self._inbox: "queue.Queue[OnboardingEvent]" = queue.Queue()
        self._closed = threading.Event()
        self._thread = threading.Thread(target=self._serve, name=name, daemon=True)
        self._thread.start()

    def deliver(self, ev: OnboardingEvent) -> None:
        self._inbox.put_nowait(ev)

    def busy(self) -> bool:
        return self._inbox.unfinished_tasks > 0

    def close(self, timeout: float) -> None:
        self._closed.set()
        self._thread.join(timeout=max(0.1, timeout))

    def _serve(self) -> None:
        while not self._closed.is_set():
            try:
                ev = self._inbox.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                self.handler(ev)
            except Exception as e:  # noqa: BLE001
                self._on_error(self.handler, ev, e)
            finally:
                self._inbox.task_done()


@dataclass
class _Counters:
    published: int = 0
    delivered: int = 0
    handler_errors: int = 0
    per_type: Dict[str, int] = field(default_factory=dict)


class EventBus:
    """
    In-process bus for the onboarding signals (`registration.done`, ...).

    Nothing is dropped: each event reaches every subscriber whose pattern
    matches at dispatch time, and each subscriber sees events in the order they
    were published. A failing handler does not affect the others; the failure
    is logged and published as `events.handler_error`.
    """

    def __init__(self, *, cfg: Optional[EventBusConfig] = None, logger: Any = None):
        self.cfg = cfg or EventBusConfig()
        self.logger = logger

        self._lock = threading.Lock()
        self._wakeup = threading.Condition(self._lock)
        self._pending: Deque[OnboardingEvent] = collections.deque()
        self._subs: List[_Subscription] = []
        self._counters = _Counters()
        self._recent: Deque[Dict[str, Any]] = collections.deque(maxlen=self.cfg.keep_recent)
        self._running = False
        self._closing = False
        self._pump = threading.Thread(target=self._pump_loop, name="eventbus-pump", daemon=True)
        if self.cfg.enabled:
            self.start()

    # ---- lifecycle ----
    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._pump.start()

    def enabled(self) -> bool:
        return self.cfg.enabled and self._running

    def shutdown(self, grace_seconds: Optional[float] = None) -> None:
        """Stop accepting events, drain what is queued, stop the workers."""
        grace = self.cfg.shutdown_grace_seconds if grace_seconds is None else float(grace_seconds)
        self._closing = True
        self.wait_idle(grace)
        with self._lock:
            self._running = False
            self._wakeup.notify_all()
            subs, self._subs = self._subs, []
        if self._pump.is_alive():
            self._pump.join(timeout=max(0.1, grace))
        for sub in subs:
            sub.close(0.5)

    # ---- subscriptions ----
    def subscribe(self, event_type: str, handler: Handler, priority: int = 50) -> None:
        """`event_type` is an exact name, a prefix such as "registration.*", or "*"."""
        if not callable(handler):
            raise ValueError("handler must be callable")
        with self._lock:
            sub = _Subscription(str(event_type), handler, int(priority), name=f"eventbus-sub-{len(self._subs) + 1}", on_error=self._handler_failed)
            self._subs.append(sub)
            self._subs.sort(key=lambda s: s.priority)

    def unsubscribe(self, handler: Handler) -> int:
        with self._lock:
            gone = [s for s in self._subs if s.handler is handler]
            self._subs = [s for s in self._subs if s.handler is not handler]
        for sub in gone:
            sub.close(0.5)
        return len(gone)

    # ---- publishing ----
    def publish(self, ev: OnboardingEvent) -> bool:
        if self._closing or not self.cfg.enabled:
            return False
        with self._lock:
            self._pending.append(ev)
            self._counters.published += 1
            self._counters.per_type[ev.event_type] = self._counters.per_type.get(ev.event_type, 0) + 1
            self._recent.appendleft(ev.model_dump())
            self._wakeup.notify()
        return True

    def trigger(self, event_type: str, *, source: SourceSubsystem, trace_id: Optional[str] = None, **payload: Any) -> bool:
        return self.publish(OnboardingEvent(event_type=event_type, source=source, trace_id=trace_id, payload=payload))

    # ---- inspection ----
    def wait_idle(self, timeout: float = 2.0) -> bool:
        """True once every published event was handled by every subscriber."""
        deadline = time.monotonic() + timeout
        while True:
            with self._lock:
                idle = not self._pending and not any(s.busy() for s in self._subs)
            if idle:
                return True
            if time.monotonic() >= deadline:
                return False
            time.sleep(0.01)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            c = self._counters
            return {
                "enabled": self.enabled(),
                "published_total": c.published,
                "delivered_total": c.delivered,
                "handler_errors_total": c.handler_errors,
                "queue_depth": len(self._pending),
                "subscribers": len(self._subs),
                "per_type_published": dict(c.per_type),
            }

    def dump_recent(self, n: int = 50) -> List[Dict[str, Any]]:
        """Newest first."""
        with self._lock:
            return list(self._recent)[: max(1, n)]

    # ---- internals ----
    def _pump_loop(self) -> None:
        with self._lock:
            while self._running:
                if not self._pending:
                    self._wakeup.wait(timeout=0.2)
                    continue
                ev = self._pending[0]
                targets = [s for s in self._subs if _matches(s.pattern, ev.event_type)]
                for sub in targets:
                    sub.deliver(ev)
                # popped after hand-off, so wait_idle always finds it in one of the queues
                self._pending.popleft()
                self._counters.delivered += len(targets)

    def _handler_failed(self, handler: Handler, ev: OnboardingEvent, exc: Exception) -> None:
        name = getattr(handler, "__name__", type(handler).__name__)
        with self._lock:
            self._counters.handler_errors += 1
        if self.logger is not None:
            self.logger.warning(f"[events] handler {name} failed on {ev.event_type}: {exc}")
        if ev.event_type != HANDLER_ERROR:
            self.publish(
                OnboardingEvent(
                    event_type=HANDLER_ERROR,
                    source=SourceSubsystem.events,
                    severity=EventSeverity.ERROR,
                    trace_id=ev.trace_id,
                    payload={"handler": name, "event_type": ev.event_type, "error": str(exc)[:500]},
                )
            )
