from __future__ import annotations

from pathlib import Path
from typing import Optional

from idl_pilot.adapters.command.adapter import render_argv
from idl_pilot.core.errors import IdlPilotError, ToolFailed
from idl_pilot.core.patch_table import PatchTable
from idl_pilot.core.patcher import PatchResult, patch_schema
from idl_pilot.core.schema_io import load_schema, save_schema
from idl_pilot.logging import get_logger
from idl_pilot.orchestration.process import Sink, run_streaming
from idl_pilot.orchestration.state import PipelineRun, PipelineState
from idl_pilot.policy.config_schema import PipelineConfig

logger = get_logger("extract")

SHANK_HINT = (
    "Ensure that `shank` is installed and on your PATH "
    "(cargo install shank-cli), see:\n  https://github.com/metaplex-foundation/shank"
)


def patch_file(
    path: Path,
    table: PatchTable,
    strict: bool = True,
    run: Optional[PipelineRun] = None,
) -> PatchResult:
    """Load, patch and rewrite the schema at ``path``.

    Nothing is written unless every step before the save succeeds.
    """
    run = run or PipelineRun()
    run.advance(PipelineState.PATCHING)
    try:
        result = patch_schema(load_schema(path), table, strict=strict)
        changed = save_schema(result.schema, path)
    except IdlPilotError as exc:
        run.fail(exc)
        raise
    logger.info("Wrote %s" if changed else "%s already up to date", path)
    run.advance(PipelineState.PATCHED)
    return result


class ExtractionOrchestrator:
    def __init__(
        self,
        config: PipelineConfig,
        table: PatchTable,
        run: Optional[PipelineRun] = None,
        stdout: Optional[Sink] = None,
        stderr: Optional[Sink] = None,
    ):
        self.config = config
        self.table = table
        self.run_state = run or PipelineRun()
        self.stdout = stdout
        self.stderr = stderr

    def command(self) -> list[str]:
        cfg = self.config
        return [cfg.extractor] + render_argv(cfg.extractor_args, out_dir=cfg.idl_dir, crate_root=cfg.crate_root)

    async def run(self) -> PatchResult:
        self.run_state.advance(PipelineState.EXTRACTING)
        try:
            cmd = self.command()
            logger.info("Extracting IDL with %s", " ".join(cmd))
            returncode = await run_streaming(
                cmd, self.config.extractor, SHANK_HINT, stdout=self.stdout, stderr=self.stderr
            )
            if returncode != 0:
                raise ToolFailed(self.config.extractor, returncode)
        except IdlPilotError as exc:
            self.run_state.fail(exc)
            raise

        logger.info("Mutating IDL at %s", self.config.schema_path)
        return patch_file(
            self.config.schema_path, self.table, strict=self.config.strict_coverage, run=self.run_state
        )
