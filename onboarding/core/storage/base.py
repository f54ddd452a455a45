from __future__ import annotations

from typing import Any, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class AccountStateStore(Protocol):
    """
    Key/value contract used by the registration core.

    Every `put`/`remove` is durable before it returns. There is no batching
    across keys: after a crash each key may be observed independently.
    Values must be JSON-compatible.
    """

    def get(self, key: str, default: Any = None) -> Any: ...

    def put(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self, prefix: Optional[str] = None) -> List[str]: ...
