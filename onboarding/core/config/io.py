from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Dict, Optional


class JsonReadError(Exception):
    pass


def read_json_object(path: str) -> Optional[Dict[str, Any]]:
    """
    The JSON object stored at `path`, or None when there is no such file.
    Unreadable files and non-object documents raise JsonReadError.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise JsonReadError(str(e)) from e
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise JsonReadError(f"corrupt json: {e.msg} (line {e.lineno})") from e
    if not isinstance(obj, dict):
        raise JsonReadError(f"expected a JSON object, got {type(obj).__name__}")
    return obj


def atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    """Write through a sibling temp file so readers never see a partial file."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=directory, prefix=".tmp_", suffix=".json", delete=False) as tmp:
        json.dump(data, tmp, indent=2, sort_keys=True, ensure_ascii=False)
        tmp.write("\n")
    try:
        os.replace(tmp.name, path)
    except OSError:
        os.unlink(tmp.name)
        raise
