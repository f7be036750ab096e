"""Explanation text for scored subjects.

Engines compute numbers first and hand them to these renderers, so the
wording can change without touching any score.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from academic_copilot.models import Subject

if TYPE_CHECKING:
    from academic_copilot.engine.policies import Policy


def _fmt_num(value: float) -> str:
    return f"{value:g}"


def priority_tier(score: float) -> str:
    if score >= 3.5:
        return "high"
    if score >= 2.5:
        return "medium"
    return "lower"


def format_priority_explanation(
    subject: Subject,
    policy: Policy,
    priority_score: float,
    components: dict[str, float],
    execution_rate: float | None = None,
) -> str:
    details: list[str] = []
    if components.get("interest", 0.0) > 0:
        details.append(
            f"interest ({_fmt_num(subject.interest)}/5) contributed {components['interest']:.2f}"
        )
    if components.get("credits", 0.0) > 0:
        details.append(
            f"credit weight ({_fmt_num(subject.credit_weight)}) contributed {components['credits']:.2f}"
        )
    if components.get("difficulty", 0.0) > 0:
        details.append(
            f"difficulty factor ({_fmt_num(6 - subject.difficulty)}) contributed {components['difficulty']:.2f}"
        )
    if components.get("execution", 0.0) > 0 and execution_rate is not None:
        details.append(
            f"execution history contributed {components['execution']:.2f} "
            f"(historical execution rate: {execution_rate * 100:.0f}%)"
        )

    criteria = policy.name.lower()
    tier = priority_tier(priority_score)
    if tier == "high":
        closing = (
            f"High priority (score: {priority_score:.2f}) due to strong alignment "
            f"with {criteria} criteria."
        )
    elif tier == "medium":
        closing = (
            f"Medium priority (score: {priority_score:.2f}) with moderate alignment "
            f"to {criteria} criteria."
        )
    else:
        closing = (
            f"Lower priority (score: {priority_score:.2f}) as it does not strongly align "
            f"with {criteria} criteria."
        )

    summary = ", ".join(details) if details else "no positive contributions"
    return f"Under {policy.name}: Score components: {summary}. {closing}"


def format_risk_explanation(
    subject: Subject,
    risk_score: float,
    risk_level: str,
    components: dict[str, float],
    execution_rate: float | None = None,
    deviation_percent: float | None = None,
) -> str:
    factors: list[str] = []
    if components.get("difficulty", 0.0) > 0.1:
        factors.append(f"high difficulty ({_fmt_num(subject.difficulty)}/5)")
    if components.get("interest", 0.0) > 0.1:
        factors.append(f"low interest level ({_fmt_num(subject.interest)}/5)")
    if components.get("execution", 0.0) > 0.1 and execution_rate is not None:
        factors.append(f"poor execution history ({execution_rate * 100:.0f}% of recommended)")
    if components.get("deviation", 0.0) > 0.1 and deviation_percent is not None:
        factors.append(f"high planning deviation ({abs(deviation_percent):.0f}%)")

    parts = [f"Risk Level: {risk_level.upper()} (score: {risk_score:.2f})."]
    if factors:
        parts.append(f"Risk factors: {', '.join(factors)}.")
    else:
        parts.append("No significant risk factors identified.")

    if risk_level == "high":
        parts.append("This subject requires careful planning and may need additional support or buffer time.")
    elif risk_level == "medium":
        parts.append("Monitor progress closely and adjust plans if needed.")
    else:
        parts.append("This subject appears manageable with standard planning.")
    return " ".join(parts)


def format_confidence_explanation(level: str, score: float, factors: Sequence[str]) -> str:
    reliability = {
        "low": "Recommendations should be treated as preliminary.",
        "medium": "Recommendations are reasonably reliable.",
        "high": "Recommendations are highly reliable.",
    }[level]
    return f"Confidence: {level.upper()} (score: {score:.2f}). Based on: {', '.join(factors)}. {reliability}"
