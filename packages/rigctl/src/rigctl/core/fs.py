from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..errors import LocalIOError


def ensure_dir(path: Path) -> Path:
    if path.exists() and not path.is_dir():
        raise LocalIOError(f"not a directory: {path}")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise LocalIOError(f"cannot create directory {path}: {exc}") from exc
    return path


def write_json(path: Path, payload: Any) -> Path:
    ensure_dir(path.parent)
    try:
        path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except OSError as exc:
        raise LocalIOError(f"cannot write {path}: {exc}") from exc
    return path


def dumps_json(payload: Any, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(payload, indent=2, sort_keys=True)
    return json.dumps(payload, sort_keys=True)
