from __future__ import annotations

from pathlib import Path
from typing import Optional

from idl_pilot.adapters.base import ClientGenerator
from idl_pilot.core.errors import GeneratorFailure
from idl_pilot.core.ir import Schema
from idl_pilot.core.schema_io import dumps_schema


class AnchorPyGenerator(ClientGenerator):
    """Render a Python client with anchorpy's clientgen (``pip install idl-pilot[anchorpy]``)."""

    name = "anchorpy"

    def __init__(self, program_id: Optional[str] = None):
        self.program_id = program_id

    def resolve_program_id(self, schema: Schema) -> str:
        metadata = getattr(schema, "metadata", None) or {}
        program_id = self.program_id or metadata.get("address")
        if not program_id:
            raise GeneratorFailure(self.name, "no program id: set metadata.address in the schema")
        return program_id

    def generate(self, schema: Schema, out_dir: Path) -> None:
        program_id = self.resolve_program_id(schema)
        try:
            from anchorpy.clientgen.accounts import gen_accounts
            from anchorpy.clientgen.errors import gen_errors
            from anchorpy.clientgen.instructions import gen_instructions
            from anchorpy.clientgen.program_id import gen_program_id
            from anchorpy.clientgen.types import gen_types
            from anchorpy_core.idl import Idl
        except ImportError as exc:
            raise GeneratorFailure(self.name, f"anchorpy is not installed ({exc})") from exc

        try:
            idl = Idl.from_json(dumps_schema(schema))
        except Exception as exc:
            raise GeneratorFailure(self.name, f"schema rejected: {exc}") from exc

        out_dir = Path(out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        (out_dir / "__init__.py").touch(exist_ok=True)
        try:
            gen_program_id(program_id, out_dir)
            gen_errors(idl, out_dir)
            gen_instructions(idl, out_dir, True)
            gen_types(idl, out_dir)
            gen_accounts(idl, out_dir)
        except Exception as exc:
            raise GeneratorFailure(self.name, str(exc)) from exc
