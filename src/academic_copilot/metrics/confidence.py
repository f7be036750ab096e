"""Confidence in a recommendation, from history volume and stability."""

from __future__ import annotations

from collections.abc import Sequence

from academic_copilot.models import ConfidenceAssessment, ExecutionHistory, Subject
from academic_copilot.reporting.explain import format_confidence_explanation

from .stats import clamp01, coefficient_of_variation

LOW_CONFIDENCE_DISCLAIMER = "Low confidence recommendation. Use with caution."
MEDIUM_CONFIDENCE_DISCLAIMER = "Medium confidence recommendation. Monitor and adjust as needed."


def confidence_level(score: float) -> str:
    if score >= 0.7:
        return "high"
    if score >= 0.4:
        return "medium"
    return "low"


def _data_availability(history: ExecutionHistory | None, factors: list[str]) -> float:
    points = history.data_points if history is not None else 0
    if points >= 3:
        factors.append("sufficient historical data")
        return 0.4
    if points >= 1:
        factors.append("limited historical data")
        return 0.2
    factors.append("no historical data")
    return 0.0


def _execution_stability(history: ExecutionHistory | None, factors: list[str]) -> float:
    if history is None or history.data_points < 2 or not history.deviations:
        return 0.0
    cv = coefficient_of_variation([abs(value) for value in history.deviations])
    if cv < 0.2:
        factors.append("stable execution patterns")
        return 0.3
    if cv < 0.5:
        factors.append("moderate execution variability")
        return 0.15
    factors.append("high execution variability")
    return 0.0


def _input_consistency(historical_scores: Sequence[float] | None, factors: list[str]) -> float:
    if not historical_scores or len(historical_scores) < 2:
        factors.append("initial assessment")
        return 0.15
    cv = coefficient_of_variation(list(historical_scores))
    if cv < 0.1:
        factors.append("stable input parameters")
        return 0.3
    if cv < 0.2:
        factors.append("moderate input variability")
        return 0.15
    factors.append("high input variability")
    return 0.0


def calculate_confidence(
    subject: Subject,
    execution_history: ExecutionHistory | None = None,
    historical_scores: Sequence[float] | None = None,
) -> ConfidenceAssessment:
    """Sum three independent sub-scores (max 1.0).

    - data availability: 0.4 for >= 3 data points, 0.2 for 1-2
    - execution stability: CV of absolute plan deviations, >= 2 points
    - input consistency: CV of the subject's past priority scores; defaults
      to 0.15 until two samples exist
    """

    factors: list[str] = []
    score = _data_availability(execution_history, factors)
    score += _execution_stability(execution_history, factors)
    score += _input_consistency(historical_scores, factors)
    score = clamp01(score)

    level = confidence_level(score)
    return ConfidenceAssessment(
        subject_id=subject.id,
        confidence_score=score,
        confidence_level=level,
        factors=tuple(factors),
        explanation=format_confidence_explanation(level, score, factors),
    )


def confidence_disclaimer(assessment: ConfidenceAssessment) -> str:
    if assessment.confidence_level == "low":
        return LOW_CONFIDENCE_DISCLAIMER
    if assessment.confidence_level == "medium":
        return MEDIUM_CONFIDENCE_DISCLAIMER
    return ""
