from __future__ import annotations

import threading
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict

UserObserver = Callable[["UserSnapshot"], None]


class UserSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    our_display_name_in_profile: str
    our_number: str
    our_primary: str


class UserState:
    """
    Presentation-side view of "who we are".

    `user_changed` replaces the snapshot and notifies the observers that were
    registered at that moment, each exactly once per change. Observer errors are
    logged, not raised to the notifier.
    """

    def __init__(self, *, logger: Any = None):
        self.logger = logger
        self._lock = threading.Lock()
        self._current: Optional[UserSnapshot] = None
        self._observers: List[UserObserver] = []

    @property
    def current(self) -> Optional[UserSnapshot]:
        with self._lock:
            return self._current

    def subscribe(self, observer: UserObserver) -> Callable[[], None]:
        with self._lock:
            self._observers.append(observer)

        def _unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return _unsubscribe

    def user_changed(self, snapshot: UserSnapshot) -> None:
        with self._lock:
            self._current = snapshot
            observers = list(self._observers)
        for obs in observers:
            try:
                obs(snapshot)
            except Exception as e:  # noqa: BLE001
                if self.logger:
                    self.logger.warning(f"[user_state] observer failed: {e}")
