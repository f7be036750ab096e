"""Configuration and stored-state normalization."""

from .config_resolver import DEFAULT_ENGINE_CONFIG, resolve_engine_config
from .report import NormalizationIssue, NormalizationReport

__all__ = [
    "DEFAULT_ENGINE_CONFIG",
    "NormalizationIssue",
    "NormalizationReport",
    "resolve_engine_config",
]
