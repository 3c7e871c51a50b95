from pathlib import Path

import pytest

from idl_pilot.core.errors import ConfigError
from idl_pilot.policy.config import load_pipeline_config
from idl_pilot.policy.config_schema import PipelineConfig

EXAMPLE_CONFIG = Path(__file__).resolve().parents[1] / "examples/phoenix/idl-pilot.yml"


def test_defaults_when_no_file(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_pipeline_config(None)
    assert cfg == PipelineConfig()
    assert cfg.schema_path == Path("idl/phoenix.json")
    assert cfg.extractor == "shank"
    assert cfg.strict_coverage is True


def test_explicit_missing_file_is_an_error(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_pipeline_config(str(tmp_path / "idl-pilot.yml"))


def test_example_config():
    cfg = load_pipeline_config(str(EXAMPLE_CONFIG))
    assert cfg.formatter is None
    assert cfg.generator_command[:2] == ["python", "fake_generator.py"]


def test_unknown_keys_and_bad_yaml(tmp_path: Path):
    cfg = tmp_path / "idl-pilot.yml"
    cfg.write_text("programme_name: typo\n")
    with pytest.raises(ConfigError):
        load_pipeline_config(str(cfg))

    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError):
        load_pipeline_config(str(cfg))

    cfg.write_text("program_name: [unterminated\n")
    with pytest.raises(ConfigError):
        load_pipeline_config(str(cfg))
