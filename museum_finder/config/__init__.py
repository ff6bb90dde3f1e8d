"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import ConcurrencyConfig, HttpConfig, KeywordTables, PipelineConfig

__all__ = [
    "ConcurrencyConfig",
    "ConfigLocator",
    "ConfigRepository",
    "HttpConfig",
    "KeywordTables",
    "PipelineConfig",
]
