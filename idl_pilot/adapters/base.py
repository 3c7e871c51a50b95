from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from idl_pilot.core.ir import Schema


class ClientGenerator(ABC):
    name: str = "base"

    @abstractmethod
    def generate(self, schema: Schema, out_dir: Path) -> None:  # pragma: no cover - interface
        """Render a typed client for ``schema`` into ``out_dir``.

        Implementations raise GeneratorFailure when the schema is rejected.
        """
