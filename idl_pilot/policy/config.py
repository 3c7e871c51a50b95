from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from idl_pilot.core.errors import ConfigError
from .config_schema import PipelineConfig

DEFAULT_CONFIG_NAME = "idl-pilot.yml"


def load_pipeline_config(path: Optional[str]) -> PipelineConfig:
    """Load ``idl-pilot.yml``; a missing file yields the defaults."""
    p = Path(path) if path else Path(os.getcwd()) / DEFAULT_CONFIG_NAME
    if not p.exists():
        if path:
            raise ConfigError(f"Config not found at {p}")
        return PipelineConfig()
    try:
        cfg_raw = yaml.safe_load(p.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config at {p} is not valid YAML: {exc}") from exc
    if not isinstance(cfg_raw, dict):
        raise ConfigError(f"Config at {p} must be a mapping")
    try:
        return PipelineConfig(**cfg_raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {p}:\n{exc}") from exc
