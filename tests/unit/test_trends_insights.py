from __future__ import annotations

import pytest

from academic_copilot.analysis import (
    analyze_burnout,
    analyze_planning_accuracy,
    analyze_priority_volatility,
    analyze_risk_trends,
    generate_insights,
)
from academic_copilot.models import (
    ExecutionLogEntry,
    PriorityResult,
    PrioritySnapshot,
    RiskAssessment,
    RiskSnapshot,
    Subject,
    WeeklyExecutionLog,
    WeeklyPlan,
)


def _log(week: str, *entries: tuple[str, float, str]) -> WeeklyExecutionLog:
    return WeeklyExecutionLog(week, tuple(ExecutionLogEntry(sid, hours, status) for sid, hours, status in entries))


def _plan(sid: str, hours: float, score: float = 3.0) -> WeeklyPlan:
    return WeeklyPlan(sid, sid.upper(), hours, 10.0, score)


def _priority_snapshot(**scores: float) -> PrioritySnapshot:
    return PrioritySnapshot(
        timestamp="",
        policy_id="balanced",
        results=tuple(PriorityResult(sid, sid, score, {}, 1, "", "balanced") for sid, score in scores.items()),
    )


def _risk_snapshot(week: str, **scores: float) -> RiskSnapshot:
    return RiskSnapshot(week, tuple(RiskAssessment(sid, sid, score, "low", {}, "") for sid, score in scores.items()))


def test_trend_analyses_need_minimum_history() -> None:
    one_week = [_log("2025-W1", ("s1", 2, "partial"))]
    assert analyze_planning_accuracy(one_week, [_plan("s1", 4)]).trend == "insufficient_data"
    assert analyze_burnout(one_week * 2, [_plan("s1", 4)]).trend == "insufficient_data"
    assert analyze_priority_volatility([_priority_snapshot(s1=3.0)]).trend == "insufficient_data"
    assert not analyze_risk_trends([]).sufficient


def test_planning_accuracy_improves_as_execution_meets_plan() -> None:
    # Logs arrive out of order; weeks are sorted numerically.
    logs = [
        _log("2025-W10", ("s1", 4, "completed")),
        _log("2025-W8", ("s1", 2, "partial")),
        _log("2025-W9", ("s1", 3, "partial")),
    ]
    result = analyze_planning_accuracy(logs, [_plan("s1", 4)])

    assert result.series == pytest.approx((0.5, 0.75, 1.0))
    assert result.slope == pytest.approx(0.25)
    assert result.trend == "improving"
    assert result.message.startswith("Planning accuracy is improving")


def test_burnout_uses_plans_in_force_each_week() -> None:
    logs = [
        _log("2025-W1", ("s1", 4, "completed")),
        _log("2025-W2", ("s1", 3, "partial")),
        _log("2025-W3", ("s1", 2, "partial")),
    ]
    plans_by_week = {
        "2025-W1": (_plan("s1", 4),),
        "2025-W2": (_plan("s1", 6),),
        "2025-W3": (_plan("s1", 8),),
    }
    result = analyze_burnout(logs, [_plan("s1", 8)], plans_by_week)

    assert result.trend == "high"
    assert result.extra["workload_slope"] == pytest.approx(2.0)
    assert result.extra["execution_slope"] == pytest.approx(-0.375)
    assert result.message == "Burnout risk detected: workload increasing while execution decreasing."


def test_burnout_falls_back_to_earlier_plan_snapshot() -> None:
    logs = [_log(f"2025-W{n}", ("s1", 4, "completed")) for n in (1, 2, 3)]
    result = analyze_burnout(logs, [_plan("s1", 99)], {"2025-W1": (_plan("s1", 4),)})

    assert result.trend == "low"
    assert result.series == pytest.approx((1.0, 1.0, 1.0))


def test_priority_volatility_levels() -> None:
    steady = analyze_priority_volatility([_priority_snapshot(s1=3.0, s2=2.0)] * 3)
    assert steady.trend == "low"

    swinging = analyze_priority_volatility([_priority_snapshot(s1=2.0, s2=2.0), _priority_snapshot(s1=4.0, s2=2.0)])
    assert swinging.trend == "medium"
    assert swinging.extra["coefficient_of_variation"] == pytest.approx(1 / 6)
    by_subject = {item.subject_id: item.trend for item in swinging.breakdown}
    assert by_subject == {"s1": "high", "s2": "low"}


def test_risk_trends_per_subject() -> None:
    result = analyze_risk_trends(
        [
            _risk_snapshot("2025-W2", s1=0.4, s2=0.5),
            _risk_snapshot("2025-W1", s1=0.2),
        ]
    )
    assert result.trend == "analyzed"
    by_subject = {item.subject_id: item for item in result.breakdown}
    assert by_subject["s1"].trend == "increasing"
    assert by_subject["s1"].slope == pytest.approx(0.2)
    assert by_subject["s2"].trend == "insufficient_data"


def test_insights_need_logs_and_plans() -> None:
    report = generate_insights([], [_plan("s1", 4)], [])
    assert report.status == "insufficient_data"
    assert report.all() == []
    assert generate_insights([_log("2025-W1", ("s1", 1, "partial"))], [], []).status == "insufficient_data"


def test_raw_deviation_insight() -> None:
    subjects = [Subject("s1", "S1", 5, 3, 3, 10)]
    report = generate_insights([_log("2025-W1", ("s1", 2, "partial"))], [_plan("s1", 4)], subjects)

    assert report.status == "ok"
    assert report.pattern == () and report.behavioral == ()
    (insight,) = report.raw
    assert insight.type == "deviation"
    assert insight.tier == "raw"
    assert insight.data["deviation_percent"] == pytest.approx(-50.0)
    assert insight.message == "S1: Actual hours (2.0) fall short of recommended hours (4.0) by 50%."


def test_pattern_and_behavioral_tiers_unlock_with_history() -> None:
    subjects = [Subject("s1", "S1", 5, 4, 3, 10), Subject("s2", "S2", 5, 2, 3, 10)]
    plans = [_plan("s1", 4, score=3.8), _plan("s2", 2)]
    logs = [
        _log("2025-W1", ("s1", 1, "skipped"), ("s2", 3, "completed")),
        _log("2025-W2", ("s1", 1, "partial"), ("s2", 3, "completed")),
        _log("2025-W3", ("s1", 1, "partial"), ("s2", 3, "completed")),
    ]

    two_weeks = generate_insights(logs[:2], plans, subjects)
    assert two_weeks.behavioral == ()
    pattern_types = {(item.subject_id, item.type) for item in two_weeks.pattern}
    assert ("s1", "repeated_underestimation") in pattern_types
    assert ("s1", "priority_misalignment") in pattern_types
    assert ("s2", "repeated_overcommitment") in pattern_types

    three_weeks = generate_insights(logs, plans, subjects)
    assert ("s2", "high_consistency") in {(item.subject_id, item.type) for item in three_weeks.pattern}
    behavioral = {(item.subject_id, item.type) for item in three_weeks.behavioral}
    assert behavioral == {
        (None, "overconfidence_bias"),
        ("s1", "avoidance_pattern"),
        ("s2", "planning_fallacy"),
    }
    assert all(item.tier == "behavioral" for item in three_weeks.behavioral)
    assert len(three_weeks.raw) == 2


def test_erratic_execution_is_a_low_consistency_pattern() -> None:
    subjects = [Subject("s1", "S1", 5, 3, 3, 10)]
    logs = [
        _log("2025-W1", ("s1", 1, "partial")),
        _log("2025-W2", ("s1", 5, "completed")),
        _log("2025-W3", ("s1", 0.5, "partial")),
    ]
    report = generate_insights(logs, [_plan("s1", 4)], subjects)

    by_type = {item.type: item for item in report.pattern}
    assert "high_consistency" not in by_type
    low = by_type["low_consistency"]
    assert low.message == "S1: Highly variable execution pattern."
    assert low.data["coefficient_of_variation"] > 0.5
