from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from museum_finder.config import ConfigLocator, ConfigRepository, HttpConfig, PipelineConfig


def test_config_locator_uses_env_and_creates_directories(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("MUSEUM_FINDER_HOME", str(tmp_path))
    locator = ConfigLocator()
    assert locator.project_root == tmp_path.resolve()
    for path in (locator.data_dir, locator.outputs_dir, locator.logs_dir):
        assert path.exists()
    assert locator.pipeline_config_path() == tmp_path.resolve() / "data" / "pipeline_config.yaml"


def test_first_load_writes_defaults(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load_pipeline_config()
    path = temp_config_repository.locator.pipeline_config_path()
    assert config == PipelineConfig()
    assert path.exists()
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["output_format"] == "txt"


def test_roundtrip(temp_config_repository: ConfigRepository) -> None:
    config = PipelineConfig(http=HttpConfig(timeout=5, user_agent="probe/1.0"), output_format="jsonl")
    temp_config_repository.save_pipeline_config(config)
    fresh = ConfigRepository(temp_config_repository.locator)
    assert fresh.load_pipeline_config() == config


def test_explicit_path_json(tmp_path: Path, temp_config_repository: ConfigRepository) -> None:
    path = tmp_path / "custom.json"
    path.write_text('{"concurrency": {"max_units": 8}}', encoding="utf-8")
    config = temp_config_repository.load_pipeline_config(path)
    assert config.concurrency.max_units == 8


def test_explicit_path_errors(tmp_path: Path, temp_config_repository: ConfigRepository) -> None:
    with pytest.raises(FileNotFoundError):
        temp_config_repository.load_pipeline_config(tmp_path / "absent.yaml")
    bad = tmp_path / "config.toml"
    bad.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load_pipeline_config(bad)
    not_mapping = tmp_path / "list.yaml"
    not_mapping.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load_pipeline_config(not_mapping)


def test_output_path_is_rooted_at_project(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load_pipeline_config()
    assert temp_config_repository.output_path(config) == (
        temp_config_repository.locator.outputs_dir / "museum_data.txt"
    )
