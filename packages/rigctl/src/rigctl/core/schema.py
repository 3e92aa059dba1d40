from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema

from ..errors import InputError, ScriptError

SCHEMAS_DIR = Path(__file__).resolve().parents[1] / "schemas"


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> dict[str, Any]:
    return json.loads((SCHEMAS_DIR / f"{schema_name}.schema.json").read_text(encoding="utf-8"))


def validate(schema_name: str, payload: Any, error_cls: type[ScriptError] = InputError) -> None:
    try:
        jsonschema.validate(payload, load_schema(schema_name))
    except jsonschema.ValidationError as exc:
        pointer = "/".join(str(p) for p in exc.absolute_path)
        loc = pointer or "<root>"
        raise error_cls(f"schema validation failed for {schema_name} at {loc}: {exc.message}") from exc
