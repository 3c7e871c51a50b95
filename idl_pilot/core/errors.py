"""Exceptions raised by the IDL patch and generation pipeline."""

from __future__ import annotations

from typing import Iterable, List


class IdlPilotError(RuntimeError):
    """Base error for every failure the CLI reports with exit code 1."""


class ConfigError(IdlPilotError):
    """Raised when the pipeline configuration cannot be read or validated."""


class ToolNotFound(IdlPilotError):
    def __init__(self, tool: str, hint: str | None = None, reason: str = "executable not found"):
        self.tool = tool
        self.hint = hint
        self.reason = reason
        message = f"'{tool}' could not be started: {reason}"
        if hint:
            message = f"{message}\n{hint}"
        super().__init__(message)


class ToolFailed(IdlPilotError):
    def __init__(self, tool: str, returncode: int):
        self.tool = tool
        self.returncode = returncode
        super().__init__(f"'{tool}' exited with status {returncode}")


class MalformedSchema(IdlPilotError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed schema at {path}: {reason}")


class SchemaWriteError(IdlPilotError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write schema to {path}: {reason}")


class GeneratorFailure(IdlPilotError):
    def __init__(self, generator: str, reason: str):
        self.generator = generator
        self.reason = reason
        super().__init__(f"Client generator '{generator}' failed: {reason}")


class AmbiguousPatchRule(IdlPilotError):
    """Raised when one instruction name is claimed by more than one patch rule."""

    def __init__(self, name: str, rule_indexes: Iterable[int]):
        self.name = name
        self.rule_indexes: List[int] = list(rule_indexes)
        super().__init__(
            f"Instruction '{name}' is matched by multiple patch rules: "
            + ", ".join(f"#{i}" for i in self.rule_indexes)
        )


class PatchTableDrift(IdlPilotError):
    """Raised when the patch table names instructions the schema does not contain."""

    def __init__(self, missing: Iterable[str]):
        self.missing: List[str] = list(missing)
        super().__init__(
            "Patch table references instructions absent from the schema: " + ", ".join(self.missing)
        )
