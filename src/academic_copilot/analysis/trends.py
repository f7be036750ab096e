"""Trend analyses over multi-week history.

Every analysis regresses a per-period metric against the period index with
``ols_slope`` and returns ``trend="insufficient_data"`` when the minimum
sample size is not met.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence

from academic_copilot.metrics.stats import coefficient_of_variation, direction, ols_slope, safe_mean, safe_ratio
from academic_copilot.models import (
    PrioritySnapshot,
    RiskSnapshot,
    TrendResult,
    WeeklyExecutionLog,
    WeeklyPlan,
)
from academic_copilot.weeks import week_sort_key

INSUFFICIENT = "insufficient_data"


def _plans_for_week(
    week: str,
    weekly_plans: Sequence[WeeklyPlan],
    plans_by_week: Mapping[str, Sequence[WeeklyPlan]] | None,
) -> Sequence[WeeklyPlan]:
    """Plans in force for ``week``: its own snapshot, else the latest earlier one, else current plans."""
    if not plans_by_week:
        return weekly_plans
    if week in plans_by_week:
        return plans_by_week[week]
    target = week_sort_key(week)
    earlier = [key for key in plans_by_week if week_sort_key(key) < target]
    if earlier:
        return plans_by_week[max(earlier, key=week_sort_key)]
    return weekly_plans


def _ordered_logs(logs: Sequence[WeeklyExecutionLog]) -> list[WeeklyExecutionLog]:
    by_week = {log.week_id: log for log in logs}
    return [by_week[week] for week in sorted(by_week, key=week_sort_key)]


def entry_accuracy(actual: float, recommended: float) -> float:
    return max(0.0, 1.0 - abs(actual - recommended) / max(recommended, 1.0))


def analyze_planning_accuracy(
    logs: Sequence[WeeklyExecutionLog],
    weekly_plans: Sequence[WeeklyPlan],
    plans_by_week: Mapping[str, Sequence[WeeklyPlan]] | None = None,
) -> TrendResult:
    if len(logs) < 2:
        return TrendResult(
            analysis="planning_accuracy",
            trend=INSUFFICIENT,
            slope=0.0,
            message="Insufficient data for trend analysis (need at least 2 weeks).",
        )

    week_averages: list[float] = []
    scored_entries = 0
    for log in _ordered_logs(logs):
        plans = {plan.subject_id: plan for plan in _plans_for_week(log.week_id, weekly_plans, plans_by_week)}
        scores = [
            entry_accuracy(entry.actual_hours, plans[entry.subject_id].recommended_hours)
            for entry in log.entries
            if entry.subject_id in plans
        ]
        if scores:
            week_averages.append(safe_mean(scores))
            scored_entries += len(scores)

    if scored_entries < 2:
        return TrendResult(
            analysis="planning_accuracy",
            trend=INSUFFICIENT,
            slope=0.0,
            message="Insufficient data points for trend analysis.",
            series=tuple(week_averages),
        )

    slope = ols_slope(week_averages)
    trend = direction(slope, rising="improving", falling="deteriorating")
    if trend == "improving":
        message = f"Planning accuracy is improving over time (slope: {slope:.3f})."
    elif trend == "deteriorating":
        message = f"Planning accuracy is deteriorating over time (slope: {slope:.3f})."
    else:
        message = f"Planning accuracy is relatively stable (slope: {slope:.3f})."
    return TrendResult(
        analysis="planning_accuracy",
        trend=trend,
        slope=slope,
        message=message,
        series=tuple(week_averages),
        extra={"weeks": float(len(week_averages)), "entries": float(scored_entries)},
    )


def volatility_level(cv: float) -> str:
    if cv > 0.2:
        return "high"
    if cv > 0.1:
        return "medium"
    return "low"


def analyze_priority_volatility(snapshots: Sequence[PrioritySnapshot]) -> TrendResult:
    if len(snapshots) < 2:
        return TrendResult(
            analysis="priority_volatility",
            trend=INSUFFICIENT,
            slope=0.0,
            message="Insufficient data for volatility analysis.",
        )

    scores_by_subject: dict[str, list[float]] = defaultdict(list)
    for snapshot in snapshots:
        for result in snapshot.results:
            scores_by_subject[result.subject_id].append(result.priority_score)

    breakdown = []
    for subject_id, scores in scores_by_subject.items():
        cv = coefficient_of_variation(scores)
        breakdown.append(
            TrendResult(
                analysis="priority_volatility",
                trend=volatility_level(cv),
                slope=ols_slope(scores),
                message=f"Priority CV {cv:.2f}.",
                series=tuple(scores),
                subject_id=subject_id,
                extra={"coefficient_of_variation": cv},
            )
        )

    avg_cv = safe_mean([item.extra["coefficient_of_variation"] for item in breakdown])
    level = volatility_level(avg_cv)
    message = {
        "high": f"High priority volatility detected (avg CV: {avg_cv:.2f}).",
        "medium": f"Moderate priority volatility (avg CV: {avg_cv:.2f}).",
        "low": f"Low priority volatility (avg CV: {avg_cv:.2f}).",
    }[level]
    return TrendResult(
        analysis="priority_volatility",
        trend=level,
        slope=0.0,
        message=message,
        breakdown=tuple(breakdown),
        extra={"coefficient_of_variation": avg_cv},
    )


def analyze_burnout(
    logs: Sequence[WeeklyExecutionLog],
    weekly_plans: Sequence[WeeklyPlan],
    plans_by_week: Mapping[str, Sequence[WeeklyPlan]] | None = None,
) -> TrendResult:
    """Flag burnout when planned workload rises while the execution rate falls."""
    if len(logs) < 3:
        return TrendResult(
            analysis="burnout",
            trend=INSUFFICIENT,
            slope=0.0,
            message="Insufficient data for burnout analysis (need at least 3 weeks).",
        )

    planned_series: list[float] = []
    execution_series: list[float] = []
    for log in _ordered_logs(logs):
        planned = sum(plan.recommended_hours for plan in _plans_for_week(log.week_id, weekly_plans, plans_by_week))
        planned_series.append(planned)
        execution_series.append(safe_ratio(log.total_actual_hours, planned))

    workload_slope = ols_slope(planned_series)
    execution_slope = ols_slope(execution_series)
    burnout = workload_slope > 0 and execution_slope < -0.05

    if burnout:
        message = "Burnout risk detected: workload increasing while execution decreasing."
    elif workload_slope > 0 and execution_slope > 0:
        message = "Workload and execution both increasing. Monitor capacity."
    elif workload_slope < 0 and execution_slope > 0:
        message = "Good capacity management."
    else:
        message = "Workload and execution trends are stable or mixed."

    return TrendResult(
        analysis="burnout",
        trend="high" if burnout else "low",
        slope=execution_slope,
        message=message,
        series=tuple(execution_series),
        extra={
            "workload_slope": workload_slope,
            "execution_slope": execution_slope,
            "weeks": float(len(execution_series)),
        },
    )


def analyze_risk_trends(snapshots: Sequence[RiskSnapshot]) -> TrendResult:
    if len(snapshots) < 2:
        return TrendResult(
            analysis="risk_trend",
            trend=INSUFFICIENT,
            slope=0.0,
            message="Insufficient data for risk trend analysis.",
        )

    scores_by_subject: dict[str, list[float]] = defaultdict(list)
    for snapshot in sorted(snapshots, key=lambda item: week_sort_key(item.week_id)):
        for assessment in snapshot.assessments:
            scores_by_subject[assessment.subject_id].append(assessment.risk_score)

    breakdown = []
    for subject_id, scores in scores_by_subject.items():
        if len(scores) < 2:
            breakdown.append(
                TrendResult(
                    analysis="risk_trend",
                    trend=INSUFFICIENT,
                    slope=0.0,
                    message="Insufficient data points.",
                    series=tuple(scores),
                    subject_id=subject_id,
                )
            )
            continue
        slope = ols_slope(scores)
        trend = direction(slope, rising="increasing", falling="decreasing")
        breakdown.append(
            TrendResult(
                analysis="risk_trend",
                trend=trend,
                slope=slope,
                message=f"Risk is {trend} (slope: {slope:.3f}).",
                series=tuple(scores),
                subject_id=subject_id,
            )
        )

    return TrendResult(
        analysis="risk_trend",
        trend="analyzed",
        slope=0.0,
        message=f"Analyzed risk trends for {len(breakdown)} subject(s).",
        breakdown=tuple(breakdown),
    )
