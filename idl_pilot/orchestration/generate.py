from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from idl_pilot.adapters.base import ClientGenerator
from idl_pilot.adapters.command.adapter import render_argv
from idl_pilot.core.errors import GeneratorFailure, IdlPilotError, ToolNotFound
from idl_pilot.core.registry import GeneratorRegistry
from idl_pilot.core.schema_io import load_schema
from idl_pilot.logging import get_logger
from idl_pilot.orchestration.process import run_streaming
from idl_pilot.orchestration.state import PipelineRun, PipelineState
from idl_pilot.policy.config_schema import PipelineConfig

logger = get_logger("generate")


def build_generator(config: PipelineConfig) -> ClientGenerator:
    factory = GeneratorRegistry.get(config.generator)
    if not factory:
        raise GeneratorFailure(
            config.generator, f"unknown generator. Available: {', '.join(GeneratorRegistry.names())}"
        )
    return factory(config)


class GenerationDriver:
    """Render the client from the patched schema, then format it best-effort.

    The formatter runs as a detached task. Its failures are logged and never
    reach the caller; ``wait_formatting`` joins it when deterministic output
    matters.
    """

    def __init__(
        self,
        config: PipelineConfig,
        generator: Optional[ClientGenerator] = None,
        run: Optional[PipelineRun] = None,
    ):
        self.config = config
        self.generator = generator
        self.run_state = run or PipelineRun()
        self.format_task: Optional[asyncio.Task] = None
        self.format_ok: Optional[bool] = None

    @property
    def out_dir(self) -> Path:
        return Path(self.config.sdk_dir)

    async def generate(self, wait_for_formatter: Optional[bool] = None) -> Path:
        self.run_state.advance(PipelineState.GENERATING)
        try:
            schema = load_schema(self.config.schema_path)
            generator = self.generator or build_generator(self.config)
            logger.info("Generating client to %s", self.out_dir)
            try:
                generator.generate(schema, self.out_dir)
            except IdlPilotError:
                raise
            except Exception as exc:
                raise GeneratorFailure(getattr(generator, "name", type(generator).__name__), str(exc)) from exc
        except IdlPilotError as exc:
            self.run_state.fail(exc)
            raise

        if self.config.formatter:
            self.run_state.advance(PipelineState.FORMATTING)
            self.format_task = asyncio.create_task(self._format())
        wait = self.config.wait_for_formatter if wait_for_formatter is None else wait_for_formatter
        if wait:
            await self.wait_formatting()
        self.run_state.advance(PipelineState.DONE)
        return self.out_dir

    async def wait_formatting(self) -> Optional[bool]:
        if self.format_task is not None:
            await self.format_task
        return self.format_ok

    async def _format(self) -> None:
        argv = render_argv(self.config.formatter or [], out_dir=str(self.out_dir))
        try:
            returncode = await run_streaming(argv, argv[0])
        except ToolNotFound as exc:
            logger.warning("Skipping formatting, %s", exc)
            self.format_ok = False
            return
        except Exception:
            # never raises: an unformatted client is still valid
            logger.exception("Formatter %s failed; client left unformatted", argv[0])
            self.format_ok = False
            return
        if returncode != 0:
            logger.warning("Formatter %s exited with status %d; client left unformatted", argv[0], returncode)
            self.format_ok = False
            return
        self.format_ok = True
