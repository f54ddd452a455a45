from __future__ import annotations

import queue
import threading
from typing import Any, Callable, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, field_validator

from onboarding.core.events.bus import EventBus
from onboarding.core.events.models import SourceSubsystem
from onboarding.core.events.registry import ACTIVATION_FAILED


class CancelledError(Exception):
    pass


class CancellationToken:
    """Cooperative cancellation for the linking poll."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Sleep up to `timeout`; returns True as soon as the token is cancelled."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError()

    @classmethod
    def cancelled_token(cls) -> "CancellationToken":
        tok = cls()
        tok.cancel()
        return tok


class ActivationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    account_id: str
    display_name: str
    trace_id: Optional[str] = None

    @field_validator("account_id", "display_name")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not str(v or "").strip():
            raise ValueError("must not be empty")
        return v


class ActivationChannel:
    """Single-message-type channel from the orchestrator to the activation listener."""

    def __init__(self) -> None:
        self._q: "queue.Queue[ActivationRequest]" = queue.Queue()

    def send(self, request: ActivationRequest) -> None:
        self._q.put_nowait(request)

    def receive(self, timeout: Optional[float] = None) -> Optional[ActivationRequest]:
        try:
            return self._q.get(timeout=timeout)
        except queue.Empty:
            return None

    def task_done(self) -> None:
        self._q.task_done()

    def join(self) -> None:
        self._q.join()

    def pending(self) -> int:
        return self._q.qsize()


class ProfilePoller(Protocol):
    def poll_once_for_display_name(self, cancel_token: Optional[CancellationToken] = None) -> Optional[str]: ...


class RetryingProfilePoller:
    """
    Calls `fetch` until it yields a display name, the attempts run out, or the
    token is cancelled. The token is checked before every attempt and the wait
    between attempts ends early on cancel.
    """

    def __init__(self, fetch: Callable[[], Optional[str]], *, interval_seconds: float = 2.0, max_attempts: int = 15, logger: Any = None):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.fetch = fetch
        self.interval_seconds = float(interval_seconds)
        self.max_attempts = int(max_attempts)
        self.logger = logger
        self.attempts = 0

    def poll_once_for_display_name(self, cancel_token: Optional[CancellationToken] = None) -> Optional[str]:
        token = cancel_token or CancellationToken()
        for attempt in range(1, self.max_attempts + 1):
            if token.cancelled:
                if self.logger:
                    self.logger.info("[linking] display name poll cancelled")
                return None
            self.attempts = attempt
            try:
                name = self.fetch()
            except Exception as e:  # noqa: BLE001
                if self.logger:
                    self.logger.warning(f"[linking] poll attempt {attempt} failed: {e}")
                name = None
            if name:
                return name
            if attempt < self.max_attempts and token.wait(self.interval_seconds):
                return None
        return None


class ActivationListener:
    """
    Consumes ActivationRequests and finishes registration for each one.

    Runs on its own thread. A failing activation is logged, kept in
    `failures` and published as `registration.activation_failed`; the thread
    keeps serving the channel.
    """

    def __init__(self, *, channel: ActivationChannel, complete: Callable[[str, str], None], event_bus: Optional[EventBus] = None, logger: Any = None):
        self.channel = channel
        self.complete = complete
        self.event_bus = event_bus
        self.logger = logger
        self.failures: List[dict] = []
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="activation-listener", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def _run(self) -> None:
        while not self._stop.is_set():
            req = self.channel.receive(timeout=0.1)
            if req is None:
                continue
            try:
                self.handle(req)
            finally:
                self.channel.task_done()

    def handle(self, req: ActivationRequest) -> None:
        try:
            self.complete(req.account_id, req.display_name)
        except Exception as e:  # noqa: BLE001
            self.failures.append({"account_id": req.account_id, "error": repr(e)})
            if self.logger:
                self.logger.error(f"[onboarding] activation after linking failed for {req.account_id}: {e}")
            if self.event_bus is not None:
                self.event_bus.trigger(ACTIVATION_FAILED, source=SourceSubsystem.linking, trace_id=req.trace_id, account_id=req.account_id, error=str(e)[:500])
