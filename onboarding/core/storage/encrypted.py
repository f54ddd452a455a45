from __future__ import annotations

import json
import os
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from cryptography.exceptions import InvalidTag
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from onboarding.core.crypto import key_id_from_key_bytes, read_store_key, seal, unseal
from onboarding.core.errors import StoreCorruptError, StoreLockedError


class StoreMode(str, Enum):
    READY = "READY"
    KEY_MISSING = "KEY_MISSING"
    STORE_MISSING = "STORE_MISSING"
    STORE_CORRUPT = "STORE_CORRUPT"


class _StateDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    format: int = Field(default=1, ge=1)
    document_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    key_id: str
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)
    items: Dict[str, Any] = Field(default_factory=dict)


@dataclass
class EncryptedFileStateStore:
    """
    Account state persisted as one AES-GCM sealed JSON document.

    The 32-byte key lives in its own file; without it the store is locked.
    Each put/remove rewrites the whole document via temp file + fsync +
    os.replace, so every call is durable on its own and a crash leaves either
    the old or the new document.
    """

    key_path: str
    store_path: str
    aad: bytes = b"onboarding.account_state.v1"
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    # ---- AccountStateStore ----
    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            doc = self._read(allow_missing=True)
        return doc.items.get(key, default)

    def put(self, key: str, value: Any) -> None:
        try:
            json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Value for {key!r} must be JSON-serializable.") from e
        with self._lock:
            doc = self._read(allow_missing=True)
            doc.items[key] = value
            self._write(doc)

    def remove(self, key: str) -> None:
        with self._lock:
            doc = self._read(allow_missing=True)
            if key not in doc.items:
                return
            del doc.items[key]
            self._write(doc)

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        with self._lock:
            names = sorted(self._read(allow_missing=True).items)
        return [k for k in names if not prefix or k.startswith(prefix)]

    # ---- status ----
    def mode(self) -> StoreMode:
        if not os.path.exists(self.key_path):
            return StoreMode.KEY_MISSING
        if not os.path.exists(self.store_path):
            return StoreMode.STORE_MISSING
        try:
            with self._lock:
                self._read(allow_missing=False)
        except StoreCorruptError:
            return StoreMode.STORE_CORRUPT
        return StoreMode.READY

    # ---- file handling ----
    def _read(self, *, allow_missing: bool) -> _StateDocument:
        key = read_store_key(self.key_path)
        try:
            with open(self.store_path, "r", encoding="utf-8") as f:
                blob = json.load(f)
        except FileNotFoundError:
            if not allow_missing:
                raise StoreLockedError("Account store does not exist yet.", path=self.store_path)
            return _StateDocument(key_id=key_id_from_key_bytes(key))
        except ValueError as e:
            raise StoreCorruptError(path=self.store_path, error=type(e).__name__) from e
        try:
            plaintext = unseal(key, blob, aad=self.aad)
            return _StateDocument.model_validate_json(plaintext)
        except (InvalidTag, ValueError, KeyError, TypeError, AttributeError, ValidationError) as e:
            raise StoreCorruptError(path=self.store_path, error=type(e).__name__) from e

    def _write(self, doc: _StateDocument) -> None:
        key = read_store_key(self.key_path)
        doc.updated_at = time.time()
        blob = seal(key, doc.model_dump_json().encode("utf-8"), aad=self.aad)
        directory = os.path.dirname(os.path.abspath(self.store_path))
        os.makedirs(directory, exist_ok=True)
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=directory, prefix=".tmp_state_", suffix=".enc", delete=False) as tmp:
            json.dump(blob, tmp, sort_keys=True)
            tmp.flush()
            os.fsync(tmp.fileno())
        try:
            os.replace(tmp.name, self.store_path)
        except OSError:
            os.unlink(tmp.name)
            raise
