"""Plain-text summaries for constraint evaluations and scenario outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from academic_copilot.models import ConstraintEvaluation

if TYPE_CHECKING:
    from academic_copilot.engine.scenario import ScenarioError, ScenarioResult, SubjectDelta


def _signed(value: float, digits: int | None = None) -> str:
    text = f"{value:.{digits}f}" if digits is not None else f"{value:g}"
    return f"+{text}" if value > 0 else text


def _rank(delta: "SubjectDelta") -> str:
    return "new" if delta.rank_delta is None else _signed(delta.rank_delta)


def format_constraint_summary(evaluation: ConstraintEvaluation) -> str:
    lines: list[str] = []
    if evaluation.has_hard_violations:
        lines.append("HARD CONSTRAINT VIOLATIONS:")
        lines.extend(f"  • {item.name}: {item.message}" for item in evaluation.hard if item.violation)
    if evaluation.has_soft_violations:
        lines.append("SOFT CONSTRAINT ADVISORIES:")
        lines.extend(f"  • {item.name}: {item.message}" for item in evaluation.soft if item.violation)
    if not lines:
        lines.append("All constraints satisfied.")
    return "\n".join(lines)


def format_scenario_summary(outcome: "ScenarioResult | ScenarioError") -> str:
    """Describe a scenario outcome; an error outcome is reported by its message."""
    if not outcome.ok:
        return outcome.message

    change = outcome.change
    summary = outcome.summary
    lines: list[str] = []
    if outcome.scenario_type == "drop_subject":
        lines.append(f"Scenario: Dropping {change['subject_name']}")
        lines.append(f"Freed hours: {change['freed_hours']:g}")
        lines.append(f"Remaining subjects: {summary['total_subjects']}")
        moved = [delta for delta in outcome.deltas if delta.hours_delta != 0 or delta.rank_delta != 0]
        if moved:
            lines.append("")
            lines.append("Impact on remaining subjects:")
            lines.extend(
                f"  • {delta.subject_name}: {_signed(delta.hours_delta, 1)}h, Rank {_rank(delta)}" for delta in moved
            )
    elif outcome.scenario_type == "modify_hours":
        lines.append(f"Scenario: Modifying hours for {change['subject_name']}")
        lines.append(
            f"Hours change: {change['old_hours']:g} → {change['new_hours']:g} ({_signed(change['hours_delta'])})"
        )
        lines.append(
            f"Total available hours: {summary['total_available_hours']:g} "
            f"({_signed(summary['available_hours_delta'])})"
        )
    elif outcome.scenario_type == "change_policy":
        lines.append(f"Scenario: Changing policy from {change['old_policy_id']} to {change['new_policy_id']}")
        lines.append(f"Policy: {change['new_policy_name']}")
        moved = sorted(
            (delta for delta in outcome.deltas if delta.priority_delta != 0 or delta.rank_delta != 0),
            key=lambda delta: abs(delta.priority_delta),
            reverse=True,
        )[:5]
        if moved:
            lines.append("")
            lines.append("Priority changes:")
            lines.extend(
                f"  • {delta.subject_name}: Priority {_signed(delta.priority_delta, 2)}, Rank {_rank(delta)}"
                for delta in moved
            )
    return "\n".join(lines)
