from __future__ import annotations

import json
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any, FrozenSet

# Field names whose values never leave the process: keys, phrases, passwords.
SECRET_FIELDS: FrozenSet[str] = frozenset(
    {
        "password",
        "secret",
        "seed",
        "seed_hex",
        "mnemonic",
        "phrase",
        "recovery_phrase",
        "recoveryphrase",
        "identitykey",
        "privkey",
        "private_key",
        "key",
        "store_key",
    }
)
REDACTED = "***REDACTED***"


def redact(obj: Any) -> Any:
    """Copy of `obj` with every secret field replaced, at any depth."""
    if isinstance(obj, dict):
        return {k: (REDACTED if str(k).lower() in SECRET_FIELDS else redact(v)) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [redact(v) for v in obj]
    return obj


@dataclass(frozen=True)
class AuditLog:
    """
    Append-only JSONL audit trail, one line per recorded action.
    """

    path: str
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, trace_id: str, action: str, **details: Any) -> None:
        entry = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "trace_id": trace_id,
            "action": action,
            "details": redact(details),
        }
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with self._lock, open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
