from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path
from typing import List, Sequence

from idl_pilot.adapters.base import ClientGenerator
from idl_pilot.core.errors import GeneratorFailure
from idl_pilot.core.ir import Schema
from idl_pilot.core.schema_io import dumps_schema
from idl_pilot.logging import get_logger

logger = get_logger("generator.command")


def render_argv(template: Sequence[str], **values: str) -> List[str]:
    """Substitute the known ``{name}`` placeholders; other braces (globs like ``*.{ts,js}``) stay as written."""
    rendered = []
    for part in template:
        for key, value in values.items():
            part = part.replace("{" + key + "}", value)
        rendered.append(part)
    return rendered


class CommandGenerator(ClientGenerator):
    """Hand the schema to an external generator CLI through a temporary file.

    ``argv`` may reference ``{schema}`` (path of the serialized schema) and
    ``{out_dir}``.
    """

    name = "command"

    def __init__(self, argv: Sequence[str]):
        if not argv:
            raise ValueError("generator command must not be empty")
        self.argv = list(argv)

    def generate(self, schema: Schema, out_dir: Path) -> None:
        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="idl-pilot-") as tmp:
            schema_file = Path(tmp) / f"{schema.name or 'program'}.json"
            schema_file.write_text(dumps_schema(schema), encoding="utf-8")
            cmd = render_argv(self.argv, schema=str(schema_file), out_dir=str(out_dir))
            logger.info("Generating client into %s with %s", out_dir, cmd[0])
            try:
                proc = subprocess.run(cmd, check=False)
            except FileNotFoundError:
                raise GeneratorFailure(self.argv[0], f"executable '{cmd[0]}' not found") from None
        if proc.returncode != 0:
            raise GeneratorFailure(self.argv[0], f"exited with status {proc.returncode}")
