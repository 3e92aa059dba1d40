from __future__ import annotations

import json
from pathlib import Path

ERROR_REGISTRY = Path(__file__).resolve().parent / "schemas" / "error-registry.json"


def _load_registry() -> dict[str, int]:
    payload = json.loads(ERROR_REGISTRY.read_text(encoding="utf-8"))
    mapping: dict[str, int] = {}
    for row in payload.get("codes", []):
        mapping[str(row["name"])] = int(row["code"])
    return mapping


_REG = _load_registry()

OK = _REG["RIG_OK"]
ERR_COORDINATOR = _REG["RIG_ERR_COORDINATOR"]
ERR_REMOTE = _REG["RIG_ERR_REMOTE"]
ERR_INPUT = _REG["RIG_ERR_INPUT"]
ERR_LOCAL_IO = _REG["RIG_ERR_LOCAL_IO"]
ERR_INTERNAL = _REG["RIG_ERR_INTERNAL"]
