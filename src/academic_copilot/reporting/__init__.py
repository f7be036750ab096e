"""Reporting utilities."""

from .constraints import HARD_CONSTRAINTS, SOFT_CONSTRAINTS, evaluate_constraints
from .reports import build_error_report, build_success_report
from .summaries import format_constraint_summary, format_scenario_summary

__all__ = [
    "HARD_CONSTRAINTS",
    "SOFT_CONSTRAINTS",
    "build_error_report",
    "build_success_report",
    "evaluate_constraints",
    "format_constraint_summary",
    "format_scenario_summary",
]
