import json
from pathlib import Path

import pytest

from idl_pilot.core.errors import PatchTableDrift
from idl_pilot.core.ir import Argument, Instruction, Schema, TypeDef, defined
from idl_pilot.core.patch_table import PHOENIX_PATCH_TABLE, PatchRule, PatchTable
from idl_pilot.core.patcher import apply_patches, check_coverage, patch_schema
from idl_pilot.core.schema_io import parse_schema

RAW_IDL = Path(__file__).resolve().parents[1] / "examples/phoenix/idl/phoenix.raw.json"

ORDER_TABLE = PatchTable(
    version="test",
    rules=(
        PatchRule(
            matches=("PlaceLimitOrder", "PlaceLimitOrderWithFreeFunds"),
            append=Argument(name="orderPacket", type=defined("OrderPacket")),
        ),
    ),
)


def make_schema(*instructions: Instruction) -> Schema:
    return Schema(instructions=list(instructions), types=[TypeDef(name="OrderPacket")])


def raw_phoenix() -> Schema:
    return parse_schema(json.loads(RAW_IDL.read_text()))


def test_place_limit_order_gets_single_order_packet():
    schema = make_schema(Instruction(name="PlaceLimitOrder", args=[]))
    once = apply_patches(schema, ORDER_TABLE)
    twice = apply_patches(once, ORDER_TABLE)
    expected = [Argument(name="orderPacket", type={"defined": "OrderPacket"})]
    assert once.instructions[0].args == expected
    assert twice.instructions[0].args == expected


def test_full_table_is_idempotent():
    once = apply_patches(raw_phoenix(), PHOENIX_PATCH_TABLE)
    twice = apply_patches(once, PHOENIX_PATCH_TABLE)
    assert twice == once


def test_appended_argument_is_last_and_existing_order_kept():
    existing = [Argument(name="side", type="u8"), Argument(name="size", type="u64")]
    schema = make_schema(Instruction(name="PlaceLimitOrderWithFreeFunds", args=existing))
    patched = apply_patches(schema, ORDER_TABLE)
    args = patched.instructions[0].args
    assert args[:2] == existing
    assert len(args) == len(existing) + 1
    assert args[len(existing)].name == "orderPacket"


def test_unmatched_instructions_pass_through():
    untouched = Instruction(name="CancelAllOrders", args=[Argument(name="x", type="bool")])
    schema = make_schema(untouched, Instruction(name="PlaceLimitOrder"))
    patched = apply_patches(schema, ORDER_TABLE)
    assert patched.instructions[0] == untouched
    assert [ix.name for ix in patched.instructions] == ["CancelAllOrders", "PlaceLimitOrder"]


def test_every_covered_name_gets_exactly_one_argument():
    schema = raw_phoenix()
    patched = apply_patches(schema, PHOENIX_PATCH_TABLE)
    covered = set(PHOENIX_PATCH_TABLE.names())
    for before, after in zip(schema.instructions, patched.instructions):
        if before.name in covered:
            rule = PHOENIX_PATCH_TABLE.rule_for(before.name)
            assert after.args == before.args + [rule.append]
        else:
            assert after.args == before.args


def test_known_hidden_arguments():
    patched = apply_patches(raw_phoenix(), PHOENIX_PATCH_TABLE)
    by_name = {ix.name: ix.args for ix in patched.instructions}
    assert by_name["Swap"][-1].type == {"defined": "OrderPacket"}
    assert by_name["ForceCancelOrders"][-1].type == {"defined": "CancelUpToParams"}
    assert by_name["DepositFunds"][-1].name == "depositFundsParams"
    assert by_name["NameSuccessor"] == [Argument(name="successor", type="publicKey")]
    assert by_name["CancelAllOrders"] == []
    assert by_name["RequestSeat"] == []


def test_input_schema_is_not_mutated():
    schema = make_schema(Instruction(name="PlaceLimitOrder"))
    snapshot = schema.model_copy(deep=True)
    apply_patches(schema, ORDER_TABLE)
    assert schema == snapshot


def test_same_name_with_other_type_is_left_alone(caplog):
    clash = Instruction(name="PlaceLimitOrder", args=[Argument(name="orderPacket", type="bytes")])
    patched = apply_patches(make_schema(clash), ORDER_TABLE)
    assert patched.instructions[0].args == clash.args
    assert "already has argument 'orderPacket'" in caplog.text
    assert check_coverage(make_schema(clash), ORDER_TABLE).conflicting == ["PlaceLimitOrder"]


def test_historical_alias_is_patched_without_drift():
    schema = make_schema(
        Instruction(name="CancelMulitpleOrdersById"),
        Instruction(name="CancelMultipleOrdersById"),
        Instruction(name="CancelMultipleOrdersByIdWithFreeFunds"),
    )
    table = PatchTable(version="t", rules=(PHOENIX_PATCH_TABLE.rules[1],))
    result = patch_schema(schema, table, strict=True)
    assert result.report.missing == []
    assert all(ix.args[-1].name == "params" for ix in result.schema.instructions)


def test_strict_drift_raises_before_patching():
    schema = make_schema(Instruction(name="PlaceLimitOrder"))
    with pytest.raises(PatchTableDrift) as err:
        patch_schema(schema, ORDER_TABLE, strict=True)
    assert err.value.missing == ["PlaceLimitOrderWithFreeFunds"]


def test_lenient_drift_logs_and_patches(caplog):
    schema = make_schema(Instruction(name="PlaceLimitOrder"))
    result = patch_schema(schema, ORDER_TABLE, strict=False)
    assert result.report.missing == ["PlaceLimitOrderWithFreeFunds"]
    assert result.report.patched == ["PlaceLimitOrder"]
    assert result.schema.instructions[0].args[-1].name == "orderPacket"
    assert "PlaceLimitOrderWithFreeFunds" in caplog.text


def test_report_on_phoenix_schema():
    report = patch_schema(raw_phoenix(), PHOENIX_PATCH_TABLE).report
    assert report.missing == []
    assert report.unknown_types == []
    assert len(report.patched) == len(PHOENIX_PATCH_TABLE.names())
    repeat = check_coverage(apply_patches(raw_phoenix(), PHOENIX_PATCH_TABLE), PHOENIX_PATCH_TABLE)
    assert repeat.patched == []
    assert sorted(repeat.already_present) == sorted(PHOENIX_PATCH_TABLE.names())


def test_undefined_type_reference_is_reported():
    schema = Schema(instructions=[Instruction(name="PlaceLimitOrder"), Instruction(name="PlaceLimitOrderWithFreeFunds")], types=[])
    report = check_coverage(schema, ORDER_TABLE)
    assert report.unknown_types == ["OrderPacket"]


def test_mutating_output_leaves_table_and_siblings_alone():
    schema = make_schema(Instruction(name="Swap"), Instruction(name="PlaceLimitOrder"))
    rule = PHOENIX_PATCH_TABLE.rule_for("Swap")
    before = rule.append.model_copy(deep=True)

    patched = apply_patches(schema, PHOENIX_PATCH_TABLE)
    patched.instructions[0].args[0].type["defined"] = "Changed"

    assert patched.instructions[1].args[0].type == {"defined": "OrderPacket"}
    assert rule.append == before
    assert PHOENIX_PATCH_TABLE.rule_for("PlaceLimitOrder").append.type == {"defined": "OrderPacket"}
