"""Configuration loading helpers for museum-finder."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import PipelineConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
PIPELINE_CONFIG_FILENAME = "pipeline_config.yaml"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    outputs_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("MUSEUM_FINDER_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.outputs_dir = (self.data_dir / "outputs").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.outputs_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def pipeline_config_path(self) -> Path:
        return self.data_dir / PIPELINE_CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: PipelineConfig | None = None

    def load_pipeline_config(self, path: Path | None = None) -> PipelineConfig:
        """Load the pipeline config, writing defaults on first use.

        An explicit ``path`` bypasses the cache and is never created.
        """

        if path is not None:
            if path.suffix not in CONFIG_EXTENSIONS:
                raise ValueError(f"Unsupported configuration format: {path.suffix}")
            if not path.exists():
                raise FileNotFoundError(f"Configuration not found: {path}")
            return PipelineConfig.model_validate(_read_file(path))
        if self._cache is not None:
            return self._cache
        default_path = self.locator.pipeline_config_path()
        if default_path.exists():
            config = PipelineConfig.model_validate(_read_file(default_path))
        else:
            config = PipelineConfig()
            self.save_pipeline_config(config)
        self._cache = config
        return config

    def save_pipeline_config(self, config: PipelineConfig, path: Path | None = None) -> Path:
        target = path or self.locator.pipeline_config_path()
        _write_file(target, config.model_dump(mode="json"))
        if path is None:
            self._cache = config
        return target

    def output_path(self, config: PipelineConfig) -> Path:
        return config.resolved_output_path(self.locator.project_root)


__all__ = ["ConfigLocator", "ConfigRepository", "CONFIG_EXTENSIONS"]
