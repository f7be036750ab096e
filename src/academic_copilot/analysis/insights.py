"""Tiered observations derived from execution logs against weekly plans.

Three tiers unlock with more history and are computed independently:
raw (one logged week), pattern (two) and behavioral (three).
"""

from __future__ import annotations

from collections.abc import Sequence

from academic_copilot.metrics.stats import coefficient_of_variation, safe_mean, safe_ratio
from academic_copilot.models import (
    ExecutionLogEntry,
    Insight,
    InsightReport,
    Subject,
    WeeklyExecutionLog,
    WeeklyPlan,
)

RAW = "raw"
PATTERN = "pattern"
BEHAVIORAL = "behavioral"

PATTERN_MIN_WEEKS = 2
BEHAVIORAL_MIN_WEEKS = 3


def _entries_for(logs: Sequence[WeeklyExecutionLog], subject_id: str) -> list[ExecutionLogEntry]:
    return [entry for log in logs for entry in log.entries if entry.subject_id == subject_id]


def _share(entries: Sequence[ExecutionLogEntry], predicate) -> float:
    return safe_ratio(sum(1 for entry in entries if predicate(entry)), len(entries))


def raw_insights(
    logs: Sequence[WeeklyExecutionLog],
    weekly_plans: Sequence[WeeklyPlan],
    subjects: Sequence[Subject],
) -> list[Insight]:
    known = {subject.id for subject in subjects}
    insights: list[Insight] = []
    for plan in weekly_plans:
        if plan.subject_id not in known:
            continue
        entries = _entries_for(logs, plan.subject_id)
        if not entries:
            continue
        avg_actual = safe_mean([entry.actual_hours for entry in entries])
        deviation = avg_actual - plan.recommended_hours
        deviation_percent = safe_ratio(deviation, plan.recommended_hours) * 100
        if abs(deviation_percent) <= 20:
            continue
        verb = "exceed" if deviation > 0 else "fall short of"
        insights.append(
            Insight(
                type="deviation",
                subject=plan.subject_name,
                subject_id=plan.subject_id,
                tier=RAW,
                message=(
                    f"{plan.subject_name}: Actual hours ({avg_actual:.1f}) {verb} recommended hours "
                    f"({plan.recommended_hours:.1f}) by {abs(deviation_percent):.0f}%."
                ),
                recommendation=(
                    "Consider if recommendations are too conservative."
                    if deviation > 0
                    else "Review if recommendations are realistic."
                ),
                data={
                    "recommended": plan.recommended_hours,
                    "actual": avg_actual,
                    "deviation": deviation,
                    "deviation_percent": deviation_percent,
                },
            )
        )
    return insights


def pattern_insights(logs: Sequence[WeeklyExecutionLog], weekly_plans: Sequence[WeeklyPlan]) -> list[Insight]:
    insights: list[Insight] = []
    for plan in weekly_plans:
        entries = _entries_for(logs, plan.subject_id)
        if len(entries) < 2:
            continue
        recommended = plan.recommended_hours

        def pattern(kind: str, message: str, recommendation: str, data: dict[str, float]) -> Insight:
            return Insight(
                type=kind,
                subject=plan.subject_name,
                subject_id=plan.subject_id,
                tier=PATTERN,
                message=f"{plan.subject_name}: {message}",
                recommendation=recommendation,
                data=data,
            )

        under_rate = _share(entries, lambda entry: entry.actual_hours < recommended * 0.8)
        if under_rate >= 0.6:
            insights.append(
                pattern(
                    "repeated_underestimation",
                    f"You consistently study less than recommended in {under_rate * 100:.0f}% of weeks.",
                    "Consider adjusting expectations or re-evaluating available time.",
                    {"underestimation_rate": under_rate, "weeks_analyzed": float(len(entries))},
                )
            )

        over_rate = _share(entries, lambda entry: entry.actual_hours > recommended * 1.2)
        if over_rate >= 0.6:
            insights.append(
                pattern(
                    "repeated_overcommitment",
                    f"You consistently study more than recommended in {over_rate * 100:.0f}% of weeks.",
                    "Consider if this allocation aligns with overall academic goals.",
                    {"overcommitment_rate": over_rate, "weeks_analyzed": float(len(entries))},
                )
            )

        skipped_rate = _share(entries, lambda entry: entry.completion_status == "skipped")
        low_execution_rate = _share(entries, lambda entry: entry.actual_hours < recommended * 0.5)
        if plan.priority_score >= 3.5 and (skipped_rate > 0.3 or low_execution_rate > 0.4):
            insights.append(
                pattern(
                    "priority_misalignment",
                    "High priority but frequently skipped or under-executed.",
                    "Consider re-evaluating priority factors or identifying barriers to execution.",
                    {
                        "priority_score": plan.priority_score,
                        "skipped_rate": skipped_rate,
                        "low_execution_rate": low_execution_rate,
                    },
                )
            )

        if len(entries) >= 3:
            hours = [entry.actual_hours for entry in entries]
            cv = coefficient_of_variation(hours)
            data = {"coefficient_of_variation": cv, "mean_hours": safe_mean(hours)}
            if cv < 0.15:
                insights.append(
                    pattern(
                        "high_consistency",
                        "Very consistent execution pattern.",
                        "This reliability can be used to improve planning for other subjects.",
                        data,
                    )
                )
            elif cv > 0.5:
                insights.append(
                    pattern(
                        "low_consistency",
                        "Highly variable execution pattern.",
                        "Consider identifying factors causing variability.",
                        data,
                    )
                )
    return insights


def behavioral_insights(
    logs: Sequence[WeeklyExecutionLog],
    weekly_plans: Sequence[WeeklyPlan],
    subjects: Sequence[Subject],
) -> list[Insight]:
    insights: list[Insight] = []
    total_planned = sum(plan.recommended_hours for plan in weekly_plans)
    ratios = [safe_ratio(log.total_actual_hours, total_planned) for log in logs]
    avg_ratio = safe_mean(ratios)
    if len(ratios) >= BEHAVIORAL_MIN_WEEKS and avg_ratio < 0.7:
        insights.append(
            Insight(
                type="overconfidence_bias",
                subject="Overall Planning",
                tier=BEHAVIORAL,
                message=(
                    "Overconfidence bias detected: You consistently plan "
                    f"{(1 - avg_ratio) * 100:.0f}% more than you execute."
                ),
                recommendation=(
                    "Consider adding 20-30% buffer to all plans or using historical "
                    "execution rates to calibrate."
                ),
                data={"average_execution_ratio": avg_ratio, "weeks_analyzed": float(len(ratios))},
            )
        )

    plans = {plan.subject_id: plan for plan in weekly_plans}
    for subject in subjects:
        plan = plans.get(subject.id)
        if subject.difficulty < 4 or plan is None:
            continue
        entries = _entries_for(logs, subject.id)
        if len(entries) < 3:
            continue
        rate = safe_mean([safe_ratio(entry.actual_hours, plan.recommended_hours) for entry in entries])
        if rate < 0.5:
            insights.append(
                Insight(
                    type="avoidance_pattern",
                    subject=subject.name,
                    subject_id=subject.id,
                    tier=BEHAVIORAL,
                    message=f"{subject.name}: High difficulty subject executed at {rate * 100:.0f}% rate.",
                    recommendation="Consider breaking down into smaller tasks or scheduling at peak energy times.",
                    data={"difficulty": subject.difficulty, "execution_rate": rate},
                )
            )

    for plan in weekly_plans:
        entries = _entries_for(logs, plan.subject_id)
        if len(entries) < 3:
            continue
        exceeded_rate = _share(entries, lambda entry: entry.actual_hours > plan.recommended_hours * 1.3)
        if exceeded_rate > 0.4 and plan.recommended_hours < 5:
            insights.append(
                Insight(
                    type="planning_fallacy",
                    subject=plan.subject_name,
                    subject_id=plan.subject_id,
                    tier=BEHAVIORAL,
                    message=(
                        f"{plan.subject_name}: Planning fallacy detected. Actual execution exceeded "
                        f"plans in {exceeded_rate * 100:.0f}% of weeks."
                    ),
                    recommendation="Consider using historical data to calibrate estimates or adding time buffers.",
                    data={"exceeded_rate": exceeded_rate, "initial_plan": plan.recommended_hours},
                )
            )
    return insights


def generate_insights(
    logs: Sequence[WeeklyExecutionLog],
    weekly_plans: Sequence[WeeklyPlan],
    subjects: Sequence[Subject],
) -> InsightReport:
    """Build every unlocked tier; a tier that is still locked stays empty."""
    if not logs or not weekly_plans:
        return InsightReport(status="insufficient_data", weeks_analyzed=len(logs))

    weeks = len(logs)
    return InsightReport(
        status="ok",
        weeks_analyzed=weeks,
        raw=tuple(raw_insights(logs, weekly_plans, subjects)),
        pattern=tuple(pattern_insights(logs, weekly_plans)) if weeks >= PATTERN_MIN_WEEKS else (),
        behavioral=tuple(behavioral_insights(logs, weekly_plans, subjects)) if weeks >= BEHAVIORAL_MIN_WEEKS else (),
    )
