"""Resolve the effective engine configuration from optional overrides."""

from __future__ import annotations

import math
from typing import Any

from .report import NormalizationReport

DEFAULT_ENGINE_CONFIG: dict[str, float] = {
    "min_hours": 1.0,
    "interest_alignment_tolerance": 0.2,
    "workload_cv_threshold": 0.5,
    "low_confidence_allocation_share": 0.7,
    "overload_tolerance": 1.1,
}


def resolve_engine_config(source: Any, report: NormalizationReport | None = None) -> dict[str, float]:
    """Merge overrides over defaults.

    Unknown keys and non-numeric values are dropped with an error issue;
    negative numbers are clamped to 0 with an info issue.
    """
    report = report if report is not None else NormalizationReport()
    config = dict(DEFAULT_ENGINE_CONFIG)
    if not isinstance(source, dict):
        return config

    for key, value in source.items():
        path = f"$.config.{key}"
        if key not in DEFAULT_ENGINE_CONFIG:
            report.add_error(
                code="INVALID_CONFIG_KEY",
                message=f"Config key {key!r} is not supported",
                field_path=path,
                extra={"suggested_fix": f"Use one of: {', '.join(sorted(DEFAULT_ENGINE_CONFIG))}"},
            )
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            report.add_error(
                code="INVALID_TYPE",
                message=f"Expected a number for {key}, got {type(value).__name__}",
                field_path=path,
            )
            continue
        if value < 0:
            report.add_info(
                code="INFO_CLAMP_APPLIED",
                message=f"{key} was clamped to 0",
                field_path=path,
                extra={"applied_value": 0.0},
            )
            value = 0.0
        config[key] = float(value)

    return config
