from __future__ import annotations

import json
import os
import threading

from onboarding.core.events.models import OnboardingEvent


class EventJsonlSink:
    """Bus subscriber that appends each event to a JSONL file."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    def __call__(self, ev: OnboardingEvent) -> None:
        line = json.dumps(ev.model_dump(mode="json"), ensure_ascii=False)
        with self._lock, open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
