"""Aggregate execution logs per subject against the plan in force."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from academic_copilot.metrics.stats import safe_mean
from academic_copilot.models import ExecutionHistory, ExecutionLogEntry, WeeklyExecutionLog, WeeklyPlan


def entries_by_subject(logs: Sequence[WeeklyExecutionLog]) -> dict[str, list[ExecutionLogEntry]]:
    """Group log entries per subject, keeping log order."""
    grouped: dict[str, list[ExecutionLogEntry]] = defaultdict(list)
    for log in logs:
        for entry in log.entries:
            grouped[entry.subject_id].append(entry)
    return dict(grouped)


def build_execution_history(
    logs: Sequence[WeeklyExecutionLog],
    weekly_plans: Sequence[WeeklyPlan],
) -> dict[str, ExecutionHistory]:
    """Return history keyed by subject id for every planned subject with entries."""
    grouped = entries_by_subject(logs)
    history: dict[str, ExecutionHistory] = {}
    for plan in weekly_plans:
        entries = grouped.get(plan.subject_id, [])
        if not entries:
            continue
        actual = [entry.actual_hours for entry in entries]
        history[plan.subject_id] = ExecutionHistory(
            subject_id=plan.subject_id,
            avg_actual_hours=safe_mean(actual),
            recommended_hours=plan.recommended_hours,
            data_points=len(entries),
            deviations=tuple(hours - plan.recommended_hours for hours in actual),
        )
    return history
