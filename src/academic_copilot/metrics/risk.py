"""Per-subject failure risk scoring."""

from __future__ import annotations

from collections.abc import Sequence

from academic_copilot.models import ExecutionHistory, RiskAssessment, Subject, WeeklyPlan
from academic_copilot.reporting.explain import format_risk_explanation

from .stats import clamp01

RISK_WEIGHTS: dict[str, float] = {
    "difficulty": 0.30,
    "interest": 0.25,
    "execution": 0.25,
    "deviation": 0.20,
}


def risk_level(score: float) -> str:
    if score <= 0.33:
        return "low"
    if score <= 0.66:
        return "medium"
    return "high"


def execution_risk(rate: float) -> float:
    """Shortfall below 70% counts fully; 70-100% counts half; over-execution is free."""
    if rate < 0.7:
        return 1.0 - rate
    if rate <= 1.0:
        return (1.0 - rate) * 0.5
    return 0.0


def deviation_risk(deviation_percent: float) -> float:
    magnitude = abs(deviation_percent)
    if magnitude > 30:
        return 1.0
    if magnitude > 10:
        return magnitude / 30.0
    return 0.0


def plan_deviation_percent(history: ExecutionHistory, plan: WeeklyPlan) -> float:
    if plan.recommended_hours <= 0:
        return 0.0
    return (history.avg_actual_hours - plan.recommended_hours) / plan.recommended_hours * 100.0


def calculate_risk_score(
    subject: Subject,
    execution_history: ExecutionHistory | None = None,
    deviation_percent: float | None = None,
) -> RiskAssessment:
    execution_rate = execution_history.execution_rate if execution_history is not None else None

    components = {
        "difficulty": (subject.difficulty - 1.0) / 4.0 * RISK_WEIGHTS["difficulty"],
        "interest": (6.0 - subject.interest) / 4.0 * RISK_WEIGHTS["interest"],
        "execution": (
            execution_risk(execution_rate) * RISK_WEIGHTS["execution"] if execution_rate is not None else 0.0
        ),
        "deviation": (
            deviation_risk(deviation_percent) * RISK_WEIGHTS["deviation"] if deviation_percent is not None else 0.0
        ),
    }
    score = clamp01(sum(components.values()))
    level = risk_level(score)

    return RiskAssessment(
        subject_id=subject.id,
        subject_name=subject.name,
        risk_score=score,
        risk_level=level,
        components=components,
        explanation=format_risk_explanation(
            subject, score, level, components, execution_rate, deviation_percent
        ),
    )


def rank_by_risk(assessments: Sequence[RiskAssessment]) -> list[RiskAssessment]:
    """Return a new list, highest risk first."""
    return sorted(assessments, key=lambda item: -item.risk_score)
