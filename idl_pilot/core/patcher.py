from __future__ import annotations

from dataclasses import dataclass
from typing import List

from pydantic import BaseModel, Field

from idl_pilot.core.errors import PatchTableDrift
from idl_pilot.core.ir import Schema, defined_name
from idl_pilot.core.patch_table import PatchTable
from idl_pilot.logging import get_logger

logger = get_logger("patcher")


class PatchReport(BaseModel):
    table_version: str
    patched: List[str] = Field(default_factory=list)
    already_present: List[str] = Field(default_factory=list)
    conflicting: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    unknown_types: List[str] = Field(default_factory=list)


@dataclass
class PatchResult:
    schema: Schema
    report: PatchReport


def apply_patches(schema: Schema, table: PatchTable) -> Schema:
    """Append each matching rule's argument to the tail of its instruction.

    Returns a new schema; ``schema`` and ``table`` are left untouched. An
    instruction that already carries an argument with the rule's name is
    passed through unchanged, so applying twice equals applying once.
    """
    patched = schema.model_copy(deep=True)
    for ix in patched.instructions:
        rule = table.rule_for(ix.name)
        if rule is None:
            continue
        existing = next((a for a in ix.args if a.name == rule.append.name), None)
        if existing is not None:
            if existing.type != rule.append.type:
                logger.warning(
                    "Instruction %s already has argument '%s' of type %s, expected %s; left unchanged",
                    ix.name,
                    existing.name,
                    existing.type,
                    rule.append.type,
                )
            continue
        # assignment (not list.append) so the field is marked as set and always serialized
        ix.args = [*ix.args, rule.append.model_copy(deep=True)]
    return patched


def check_coverage(schema: Schema, table: PatchTable) -> PatchReport:
    present = set(schema.instruction_names())
    known_types = schema.type_names()
    report = PatchReport(table_version=table.version)

    report.missing = [name for name in table.names() if name not in present]
    for rule in table.rules:
        target = defined_name(rule.append.type)
        if target and target not in known_types and target not in report.unknown_types:
            report.unknown_types.append(target)

    for ix in schema.instructions:
        rule = table.rule_for(ix.name)
        if rule is None:
            continue
        existing = next((a for a in ix.args if a.name == rule.append.name), None)
        if existing is None:
            report.patched.append(ix.name)
        elif existing.type == rule.append.type:
            report.already_present.append(ix.name)
        else:
            report.conflicting.append(ix.name)
    return report


def patch_schema(schema: Schema, table: PatchTable, strict: bool = True) -> PatchResult:
    """Check table coverage against ``schema`` and apply the patches.

    With ``strict`` set, instructions named by the table but absent from the
    schema raise :class:`PatchTableDrift` before anything is patched.
    Otherwise each absent name is logged and patching proceeds.
    """
    report = check_coverage(schema, table)
    if report.missing:
        if strict:
            raise PatchTableDrift(report.missing)
        for name in report.missing:
            logger.warning("Patch table %s names '%s' but the schema has no such instruction", table.version, name)
    for type_name in report.unknown_types:
        logger.warning("Patch table %s appends type '%s' which the schema does not define", table.version, type_name)

    patched = apply_patches(schema, table)
    logger.info(
        "Patched %d instruction(s) with table %s (%d already present)",
        len(report.patched),
        table.version,
        len(report.already_present),
    )
    return PatchResult(schema=patched, report=report)
