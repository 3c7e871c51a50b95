from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Primitive tag ("u64", "bool", "publicKey") or a composite such as {"defined": "OrderPacket"}
TypeRef = Union[str, Dict[str, Any]]


def defined(type_name: str) -> Dict[str, str]:
    return {"defined": type_name}


def defined_name(type_ref: TypeRef) -> Optional[str]:
    """Return the referenced type name when ``type_ref`` points at a named type."""
    if isinstance(type_ref, dict):
        target = type_ref.get("defined")
        if isinstance(target, str):
            return target
        # newer IDLs nest the name: {"defined": {"name": "X"}}
        if isinstance(target, dict) and isinstance(target.get("name"), str):
            return target["name"]
    return None


class Argument(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    type: TypeRef


class Instruction(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    args: List[Argument] = Field(default_factory=list)


class TypeDef(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str


class ErrorDef(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: Optional[int] = None
    name: str


class Schema(BaseModel):
    model_config = ConfigDict(extra="allow")

    version: Optional[str] = None
    name: Optional[str] = None
    instructions: List[Instruction]
    types: List[TypeDef]
    accounts: List[Dict[str, Any]] = Field(default_factory=list)
    errors: List[ErrorDef] = Field(default_factory=list)

    @field_validator("instructions")
    @classmethod
    def _unique_instruction_names(cls, value: List[Instruction]) -> List[Instruction]:
        seen: set[str] = set()
        for ix in value:
            if ix.name in seen:
                raise ValueError(f"duplicate instruction name '{ix.name}'")
            seen.add(ix.name)
        return value

    def instruction_names(self) -> List[str]:
        return [ix.name for ix in self.instructions]

    def type_names(self) -> set[str]:
        return {t.name for t in self.types}
