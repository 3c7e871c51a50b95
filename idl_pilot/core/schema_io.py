from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from idl_pilot.core.errors import MalformedSchema, SchemaWriteError
from idl_pilot.core.ir import Schema

REQUIRED_KEYS = ("instructions", "types")


def load_schema(path: Union[str, Path]) -> Schema:
    p = Path(path)
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise MalformedSchema(str(p), "file does not exist") from None
    except OSError as exc:
        raise MalformedSchema(str(p), f"cannot be read ({exc.strerror or exc})") from exc
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedSchema(str(p), f"not valid JSON ({exc})") from exc
    return parse_schema(raw, source=str(p))


def parse_schema(raw: object, source: str = "<memory>") -> Schema:
    if not isinstance(raw, dict):
        raise MalformedSchema(source, "top-level value must be an object")
    missing = [k for k in REQUIRED_KEYS if k not in raw]
    if missing:
        raise MalformedSchema(source, "missing required field(s): " + ", ".join(missing))
    try:
        return Schema.model_validate(raw)
    except ValidationError as exc:
        raise MalformedSchema(source, str(exc)) from exc


def dumps_schema(schema: Schema) -> str:
    """Canonical text: 2-space indent, sorted keys, trailing newline."""
    payload = schema.model_dump(mode="json", exclude_unset=True)
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def save_schema(schema: Schema, path: Union[str, Path]) -> bool:
    """Write ``schema`` to ``path`` in canonical form.

    Returns False (and leaves the file alone) when the content is already
    byte-identical.
    """
    p = Path(path)
    data = dumps_schema(schema).encode("utf-8")
    try:
        if p.is_file() and p.read_bytes() == data:
            return False
        p.write_bytes(data)
    except OSError as exc:
        raise SchemaWriteError(str(p), exc.strerror or str(exc)) from exc
    return True
