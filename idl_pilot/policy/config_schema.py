from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PipelineConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    program_name: str = Field(default="phoenix")
    crate_root: str = Field(default="program")
    idl_dir: str = Field(default="idl")
    sdk_dir: str = Field(default="sdk/src/generated")

    extractor: str = Field(default="shank")
    extractor_args: List[str] = Field(
        default_factory=lambda: ["idl", "--out-dir", "{out_dir}", "--crate-root", "{crate_root}"]
    )

    generator: str = Field(default="command")
    generator_command: List[str] = Field(
        default_factory=lambda: ["npx", "solita", "--idl", "{schema}", "--out", "{out_dir}"]
    )

    formatter: Optional[List[str]] = Field(
        default_factory=lambda: ["npx", "prettier", "--write", "{out_dir}"]
    )
    wait_for_formatter: bool = Field(default=False)

    patch_table: Optional[str] = None
    strict_coverage: bool = Field(default=True)

    @property
    def schema_path(self) -> Path:
        return Path(self.idl_dir) / f"{self.program_name}.json"
