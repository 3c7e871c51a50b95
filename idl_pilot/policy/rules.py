from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from idl_pilot.core.errors import ConfigError
from idl_pilot.core.patch_table import PHOENIX_PATCH_TABLE, PatchTable


def load_patch_table(path: Optional[str]) -> PatchTable:
    """Return the patch table stored at ``path``, or the built-in table when unset.

    Ambiguous rules raise :class:`AmbiguousPatchRule` rather than ConfigError
    so callers can tell a structurally valid but conflicting table apart.
    """
    if not path:
        return PHOENIX_PATCH_TABLE
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Patch table not found at {p}")
    try:
        content = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Patch table at {p} is not valid YAML: {exc}") from exc
    if not isinstance(content, dict):
        raise ConfigError(f"Patch table at {p} must be a mapping")
    try:
        return PatchTable.model_validate(content)
    except ValidationError as exc:
        raise ConfigError(f"Invalid patch table at {p}:\n{exc}") from exc
