"""Pydantic models used across museum-finder configuration flow."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_CATEGORY = [
    "museum",
    "musée",
    "museo",
    "muzeum",
    "múzeum",
    "muzej",
    "museu",
    "muzeul",
    "muuseum",
    "museet",
    "музей",
    "музеј",
    "μουσείο",
]

DEFAULT_LINK_MARKERS = [
    "website",
    "http",
    "https",
    "www.",
    ".com",
    ".de",
    ".at",
    ".uk",
    ".eu",
    ".it",
    ".by",
    ".ch",
    ".cz",
    ".am",
    ".bg",
    ".dk",
    ".ee",
    ".es",
    ".fi",
    ".fr",
    ".gl",
    ".gr",
    ".hr",
    ".hu",
    ".ie",
    ".is",
    ".je",
    ".li",
    ".lt",
    ".lu",
    ".lv",
    ".mc",
    ".md",
    ".me",
    ".nl",
    ".no",
    ".pl",
    ".pt",
    ".ro",
    ".rs",
    ".se",
    ".si",
    ".sk",
    ".ua",
]

DEFAULT_ARTICLE_KEYWORDS = [
    "art",
    "изкуство",
    "kunst",
    "taide",
    "τέχνη",
    "ealaín",
    "gr",
    "arte",
    "קונסט",
    "umjetnost",
    "чл",
    "sztuka",
    "artă",
    "искусство",
    "konst",
    "уметност",
    "čl",
    "umetnost",
    "umění",
    "ст",
    "művészet",
    "celf",
    "арт",
]


def _normalise_words(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        raise ValueError("Keyword table expects a list of strings")
    words: list[str] = []
    for item in value:
        word = str(item).strip().lower()
        if word and word not in words:
            words.append(word)
    return words


def _read_mapping(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Keyword file must contain a mapping: {path}")
    return data


class KeywordTables(BaseModel):
    """Word lists driving tag classification and article matching.

    Every table is lower-cased and de-duplicated on load, so lookups can
    compare against lower-cased input directly.
    """

    category: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORY))
    link_markers: list[str] = Field(default_factory=lambda: list(DEFAULT_LINK_MARKERS))
    link_exclusions: list[str] = Field(default_factory=lambda: ["@"])
    name_keys: list[str] = Field(default_factory=lambda: ["name"])
    address_keys: list[str] = Field(default_factory=lambda: ["city", "country"])
    contact_keys: list[str] = Field(default_factory=lambda: ["contact"])
    article_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_ARTICLE_KEYWORDS))

    @field_validator(
        "category",
        "link_markers",
        "link_exclusions",
        "name_keys",
        "address_keys",
        "contact_keys",
        "article_keywords",
        mode="before",
    )
    @classmethod
    def _coerce_words(cls, value: Any) -> list[str]:
        return _normalise_words(value)

    @model_validator(mode="after")
    def _require_core_tables(self) -> "KeywordTables":
        if not self.category:
            raise ValueError("category keywords cannot be empty")
        if not self.link_markers:
            raise ValueError("link_markers cannot be empty")
        if not self.article_keywords:
            raise ValueError("article_keywords cannot be empty")
        return self

    @classmethod
    def from_file(cls, path: Path) -> "KeywordTables":
        if not path.exists():
            raise ValueError(f"Keyword file not found: {path}")
        return cls.model_validate(_read_mapping(path))


class HttpConfig(BaseModel):
    """Outbound request settings shared by every probe."""

    timeout: float = 30.0
    user_agent: str | None = None
    follow_redirects: bool = True

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value


class ConcurrencyConfig(BaseModel):
    """Explicit bounds for dispatched units, per-unit fetches and the sink queue."""

    max_units: int = Field(default=256, ge=1)
    max_fetches_per_unit: int | None = Field(default=None, ge=1)
    sink_capacity: int = Field(default=10_000, ge=1)
    io_workers: int = Field(default=20, ge=1)


class PipelineConfig(BaseModel):
    """Top-level settings for one extraction run."""

    http: HttpConfig = Field(default_factory=HttpConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    keywords: KeywordTables | Path = Field(default_factory=KeywordTables)
    output_path: Path = Field(default=Path("data/outputs/museum_data.txt"))
    output_format: Literal["txt", "jsonl"] = "txt"

    @field_validator("output_path", mode="before")
    @classmethod
    def _coerce_output(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("keywords", mode="before")
    @classmethod
    def _coerce_keywords(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Path(value)
        return value

    @model_validator(mode="after")
    def _load_keyword_file(self) -> "PipelineConfig":
        if isinstance(self.keywords, Path):
            self.keywords = KeywordTables.from_file(self.keywords)
        return self

    def resolved_output_path(self, base_dir: Path) -> Path:
        """Return output path relative to project root when not absolute."""

        if not self.output_path.is_absolute():
            return (base_dir / self.output_path).resolve()
        return self.output_path


__all__ = [
    "ConcurrencyConfig",
    "HttpConfig",
    "KeywordTables",
    "PipelineConfig",
]
