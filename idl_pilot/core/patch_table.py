"""Instruction arguments the IDL extractor cannot see.

Instructions that decode their payload as a single borsh-encoded composite
(an order packet, a params struct, a status enum) expose no ``args`` in the
extracted IDL. Each rule below names those instructions and the argument that
has to be appended so the generated client serializes the payload.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from idl_pilot.core.errors import AmbiguousPatchRule
from idl_pilot.core.ir import Argument, defined


class PatchRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    matches: Tuple[str, ...]
    append: Argument
    # Historical spellings still matched, but not expected in current schemas
    aliases: Tuple[str, ...] = ()

    def all_names(self) -> Tuple[str, ...]:
        return self.matches + self.aliases


class PatchTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    program: Optional[str] = None
    rules: Tuple[PatchRule, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _check_disjoint(self) -> "PatchTable":
        self.validate_rules()
        return self

    def validate_rules(self) -> None:
        owners: Dict[str, List[int]] = {}
        for idx, rule in enumerate(self.rules):
            for name in rule.all_names():
                owners.setdefault(name, [])
                if idx not in owners[name]:
                    owners[name].append(idx)
        for name, idxs in owners.items():
            if len(idxs) > 1:
                raise AmbiguousPatchRule(name, idxs)

    def rule_for(self, instruction_name: str) -> Optional[PatchRule]:
        found = [r for r in self.rules if instruction_name in r.all_names()]
        if len(found) > 1:
            raise AmbiguousPatchRule(instruction_name, [self.rules.index(r) for r in found])
        return found[0] if found else None

    def names(self) -> List[str]:
        return [n for r in self.rules for n in r.matches]


def _rule(names: Tuple[str, ...], arg_name: str, arg_type, aliases: Tuple[str, ...] = ()) -> PatchRule:
    return PatchRule(matches=names, append=Argument(name=arg_name, type=arg_type), aliases=aliases)


PHOENIX_PATCH_TABLE = PatchTable(
    version="phoenix-v1",
    program="phoenix",
    rules=(
        _rule(("ReduceOrder", "ReduceOrderWithFreeFunds"), "params", defined("ReduceOrderParams")),
        _rule(
            ("CancelMultipleOrdersById", "CancelMultipleOrdersByIdWithFreeFunds"),
            "params",
            defined("CancelMultipleOrdersByIdParams"),
            aliases=("CancelMulitpleOrdersById", "CancelMulitpleOrdersByIdWithFreeFunds"),
        ),
        _rule(
            ("PlaceLimitOrder", "PlaceLimitOrderWithFreeFunds", "Swap", "SwapWithFreeFunds"),
            "orderPacket",
            defined("OrderPacket"),
        ),
        _rule(
            ("PlaceMultiplePostOnlyOrders", "PlaceMultiplePostOnlyOrdersWithFreeFunds"),
            "multipleOrderPacket",
            defined("MultipleOrderPacket"),
        ),
        _rule(
            ("CancelUpTo", "CancelUpToWithFreeFunds", "ForceCancelOrders"),
            "params",
            defined("CancelUpToParams"),
        ),
        _rule(("DepositFunds",), "depositFundsParams", defined("DepositParams")),
        _rule(("WithdrawFunds",), "withdrawFundsParams", defined("WithdrawParams")),
        _rule(("ChangeSeatStatus",), "approvalStatus", defined("SeatApprovalStatus")),
        _rule(("ChangeMarketStatus",), "marketStatus", defined("MarketStatus")),
        _rule(("InitializeMarket",), "initializeParams", defined("InitializeParams")),
        _rule(("NameSuccessor",), "successor", "publicKey"),
    ),
)
