from __future__ import annotations

import copy
import json
import threading
from typing import Any, Dict, List, Optional


class MemoryStateStore:
    """Thread-safe in-process store (tests and dry runs)."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return default
            return copy.deepcopy(self._data[key])

    def put(self, key: str, value: Any) -> None:
        try:
            json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Value for {key!r} must be JSON-serializable.") from e
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        with self._lock:
            ks = sorted(self._data.keys())
        if prefix:
            ks = [k for k in ks if k.startswith(prefix)]
        return ks

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._data)
