from __future__ import annotations

import json
import time
import uuid
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from onboarding.core.events.audit import redact


class EventSeverity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class SourceSubsystem(str, Enum):
    registration = "registration"
    linking = "linking"
    activation = "activation"
    storage = "storage"
    events = "events"


class OnboardingEvent(BaseModel):
    """
    One signal on the bus. Payloads are redacted on construction, so whatever
    reaches a subscriber or a log file is already safe to write.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    event_type: str
    source: SourceSubsystem
    payload: Dict[str, Any] = Field(default_factory=dict)
    trace_id: Optional[str] = None
    severity: EventSeverity = EventSeverity.INFO
    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    emitted_at: float = Field(default_factory=time.time)

    @field_validator("event_type")
    @classmethod
    def _dotted_name(cls, v: str) -> str:
        name = str(v or "").strip()
        if not name:
            raise ValueError("event_type must not be empty")
        return name

    @field_validator("payload", mode="before")
    @classmethod
    def _safe_payload(cls, v: Any) -> Dict[str, Any]:
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("payload must be a mapping")
        cleaned = redact(v)
        try:
            json.dumps(cleaned, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ValueError(f"payload is not JSON-serializable: {e}") from e
        return cleaned
