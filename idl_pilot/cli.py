from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from idl_pilot.core.errors import IdlPilotError
from idl_pilot.core.patch_table import PatchTable
from idl_pilot.core.patcher import PatchReport, check_coverage
from idl_pilot.core.registry import GeneratorRegistry
from idl_pilot.core.schema_io import load_schema
from idl_pilot.orchestration.extract import ExtractionOrchestrator, patch_file
from idl_pilot.orchestration.generate import GenerationDriver
from idl_pilot.orchestration.state import PipelineRun
from idl_pilot.policy.config import load_pipeline_config
from idl_pilot.policy.config_schema import PipelineConfig
from idl_pilot.policy.rules import load_patch_table

app = typer.Typer(add_completion=False, help="IDL patch and client generation pipeline")
console = Console(stderr=True)


def _fail(exc: Exception) -> None:
    console.print(f"[red]Failed:[/red] {escape(str(exc))}")
    raise typer.Exit(code=1)


def _load(config: Optional[str]) -> tuple[PipelineConfig, PatchTable]:
    cfg = load_pipeline_config(config)
    return cfg, load_patch_table(cfg.patch_table)


@app.command("patch")
def patch(
    path: Path = typer.Argument(..., help="Schema (IDL) JSON file, rewritten in place"),
    table: Optional[str] = typer.Option(None, "--table", "-t", help="YAML patch table (defaults to the built-in table)"),
    strict: bool = typer.Option(True, "--strict/--no-strict", help="Fail when the table names instructions missing from the schema"),
    check: bool = typer.Option(False, "--check", help="Report coverage only, do not write"),
):
    """Append the arguments the extractor cannot infer to a schema file."""
    try:
        patch_table = load_patch_table(table)
        if check:
            report = check_coverage(load_schema(path), patch_table)
            _print_report(report)
            if report.missing and strict:
                raise typer.Exit(code=1)
            return
        result = patch_file(path, patch_table, strict=strict)
    except IdlPilotError as exc:
        _fail(exc)
    _print_report(result.report)
    console.print(f"[green]Patched {path}[/green]")


@app.command("extract")
def extract(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to idl-pilot.yml"),
):
    """Run the IDL extractor and patch its output."""
    try:
        cfg, patch_table = _load(config)
        result = asyncio.run(ExtractionOrchestrator(cfg, patch_table).run())
    except IdlPilotError as exc:
        _fail(exc)
    _print_report(result.report)
    console.print(f"[green]IDL written to {cfg.schema_path}[/green]")


@app.command("generate")
def generate(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to idl-pilot.yml"),
    generator: Optional[str] = typer.Option(
        None, help=f"Client generator to use. Available: {', '.join(GeneratorRegistry.names())}"
    ),
    wait_format: Optional[bool] = typer.Option(None, "--wait-format/--no-wait-format", help="Finish formatting before reporting success"),
):
    """Generate the typed client from the patched IDL."""
    try:
        cfg = load_pipeline_config(config)
        if generator:
            cfg = cfg.model_copy(update={"generator": generator})
        asyncio.run(_generate(cfg, PipelineRun(), wait_format, "Client generated in"))
    except IdlPilotError as exc:
        _fail(exc)


@app.command("run")
def run(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to idl-pilot.yml"),
):
    """Extract, patch and generate in one go."""
    try:
        cfg, patch_table = _load(config)
        asyncio.run(_run_all(cfg, patch_table))
    except IdlPilotError as exc:
        _fail(exc)


@app.command("rules")
def rules(
    table: Optional[str] = typer.Option(None, "--table", "-t", help="YAML patch table (defaults to the built-in table)"),
):
    """Print the patch table."""
    try:
        patch_table = load_patch_table(table)
    except IdlPilotError as exc:
        _fail(exc)
    out = Table(title=f"Patch table {patch_table.version}")
    out.add_column("Instructions")
    out.add_column("Appended argument")
    out.add_column("Aliases")
    for rule in patch_table.rules:
        out.add_row(", ".join(rule.matches), f"{rule.append.name}: {rule.append.type}", ", ".join(rule.aliases))
    Console().print(out)


async def _generate(cfg: PipelineConfig, pipeline: PipelineRun, wait_format: Optional[bool], summary: str) -> Path:
    driver = GenerationDriver(cfg, run=pipeline)
    out_dir = await driver.generate(wait_for_formatter=wait_format)
    console.print(f"[green]{summary} {escape(str(out_dir))}[/green]")
    # success is already reported; a detached formatter still finishes before the loop closes
    await driver.wait_formatting()
    return out_dir


async def _run_all(cfg: PipelineConfig, patch_table: PatchTable) -> Path:
    pipeline = PipelineRun()
    result = await ExtractionOrchestrator(cfg, patch_table, run=pipeline).run()
    _print_report(result.report)
    return await _generate(cfg, pipeline, None, "Done: client generated in")


def _print_report(report: PatchReport) -> None:
    table = Table(title=f"IDL Patch Summary ({report.table_version})")
    table.add_column("Status")
    table.add_column("Instructions")
    rows = [
        ("patched", report.patched),
        ("already present", report.already_present),
        ("conflicting", report.conflicting),
        ("missing from schema", report.missing),
        ("undefined types", report.unknown_types),
    ]
    for label, names in rows:
        if names:
            table.add_row(label, ", ".join(names))
    console.print(table)


if __name__ == "__main__":
    app()
