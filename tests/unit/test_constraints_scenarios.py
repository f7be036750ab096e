from __future__ import annotations

from datetime import datetime, timezone

import pytest

from academic_copilot.engine.allocator import allocate_hours
from academic_copilot.engine.policies import get_policy
from academic_copilot.engine.scenario import (
    ScenarioError,
    create_snapshot,
    simulate_change_policy,
    simulate_drop_subject,
    simulate_modify_hours,
)
from academic_copilot.engine.scoring import rank_priorities
from academic_copilot.metrics import calculate_confidence
from academic_copilot.models import Subject, WeeklyPlan
from academic_copilot.reporting import evaluate_constraints, format_constraint_summary, format_scenario_summary

FIXED_TIME = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


def _subjects() -> list[Subject]:
    return [
        Subject("s1", "Calculus", credit_weight=8, difficulty=3, interest=5, available_study_hours=10),
        Subject("s2", "Algebra", credit_weight=4, difficulty=5, interest=2, available_study_hours=5),
    ]


def _baseline(subjects: list[Subject], policy_id: str = "balanced"):
    policy = get_policy(policy_id)
    results = rank_priorities(subjects, policy)
    plans = allocate_hours(results, subjects)
    return create_snapshot(subjects, results, plans, policy.id.value, timestamp=FIXED_TIME)


def test_constraints_flag_interest_misalignment_only() -> None:
    subjects = _subjects()
    plans = allocate_hours(rank_priorities(subjects, get_policy("balanced")), subjects)
    evaluation = evaluate_constraints(subjects, plans)

    assert [result.constraint_id for result in evaluation.hard] == [
        "total_hours",
        "individual_capacity",
        "minimum_hours",
    ]
    assert not evaluation.has_hard_violations
    assert evaluation.all_satisfied
    assert evaluation.has_soft_violations

    interest, workload, confidence = evaluation.soft
    assert interest.violation and interest.severity == "advisory"
    assert interest.details[0]["subject_id"] == "s2"
    assert not workload.violation and workload.severity == "advisory"
    assert confidence.message == "Confidence data not available."
    assert confidence.severity == "ok"

    assert format_constraint_summary(evaluation) == (
        "SOFT CONSTRAINT ADVISORIES:\n  • Interest Alignment: 1 subject(s) show interest misalignment."
    )


def test_constraints_report_hard_violations() -> None:
    subjects = _subjects()
    plans = [
        WeeklyPlan("s1", "Calculus", 12.0, 10.0, 4.1),
        WeeklyPlan("s2", "Algebra", 0.5, 5.0, 1.7),
    ]
    evaluation = evaluate_constraints(subjects, plans, {"min_hours": 1.0})

    total, capacity, minimum = evaluation.hard
    assert not total.violation
    assert capacity.violation and capacity.severity == "error"
    assert capacity.details[0]["excess"] == pytest.approx(2.0)
    assert minimum.violation and minimum.severity == "warning"
    assert not evaluation.all_satisfied

    summary = format_constraint_summary(evaluation)
    assert summary.startswith("HARD CONSTRAINT VIOLATIONS:")
    assert "  • Individual Subject Capacity: 1 subject(s) exceed available hours" in summary


def test_confidence_alignment_flags_low_confidence_heavy_allocations() -> None:
    subjects = _subjects()
    plans = allocate_hours(rank_priorities(subjects, get_policy("balanced")), subjects)
    confidence = [calculate_confidence(subject) for subject in subjects]

    result = evaluate_constraints(subjects, plans, confidence_data=confidence).soft[2]
    assert result.violation
    assert {item["subject_id"] for item in result.details} == {"s1", "s2"}


def test_drop_last_subject_returns_error_and_keeps_snapshot() -> None:
    baseline = _baseline(_subjects()[:1])
    before = baseline.as_dict()

    outcome = simulate_drop_subject(baseline, "s1", get_policy("balanced"))

    assert isinstance(outcome, ScenarioError)
    assert not outcome.ok
    assert outcome.code == "last_subject"
    assert baseline.as_dict() == before
    assert format_scenario_summary(outcome) == "Cannot drop the only remaining subject."


def test_drop_subject_recomputes_remaining() -> None:
    baseline = _baseline(_subjects())
    outcome = simulate_drop_subject(baseline, "s2", get_policy("balanced"))

    assert outcome.ok
    assert [plan.subject_id for plan in outcome.weekly_plans] == ["s1"]
    assert outcome.weekly_plans[0].recommended_hours == 10.0
    assert outcome.change["freed_hours"] == 5
    assert outcome.change["previous_priority"] == pytest.approx(1.7)
    assert outcome.summary["total_subjects"] == 1
    assert outcome.deltas[0].hours_delta == 0.0

    text = format_scenario_summary(outcome)
    assert text.splitlines()[:3] == ["Scenario: Dropping Algebra", "Freed hours: 5", "Remaining subjects: 1"]


def test_unknown_subject_is_a_scenario_error() -> None:
    baseline = _baseline(_subjects())
    outcome = simulate_modify_hours(baseline, "missing", 3, get_policy("balanced"))
    assert isinstance(outcome, ScenarioError)
    assert outcome.code == "unknown_subject"


def test_modify_hours_reports_capacity_change() -> None:
    baseline = _baseline(_subjects())
    outcome = simulate_modify_hours(baseline, "s2", 8, get_policy("balanced"))

    assert outcome.ok
    assert outcome.change == {
        "subject_id": "s2",
        "subject_name": "Algebra",
        "old_hours": 5,
        "new_hours": 8.0,
        "hours_delta": 3.0,
    }
    assert outcome.summary["available_hours_delta"] == pytest.approx(3.0)
    assert all(plan.recommended_hours <= plan.available_hours for plan in outcome.weekly_plans)
    # The baseline subjects are untouched.
    assert baseline.subjects[1].available_study_hours == 5
    assert "Hours change: 5 → 8 (+3)" in format_scenario_summary(outcome)


def test_change_to_same_policy_has_zero_deltas() -> None:
    baseline = _baseline(_subjects(), "exam_focused")
    outcome = simulate_change_policy(baseline, get_policy("exam_focused"))

    assert outcome.summary["policy_changed"] is False
    for delta in outcome.deltas:
        assert delta.priority_delta == 0
        assert delta.rank_delta == 0
        assert delta.hours_delta == 0


def test_change_policy_reports_priority_shift() -> None:
    baseline = _baseline(_subjects())
    outcome = simulate_change_policy(baseline, get_policy("exam_focused"))

    assert outcome.change["new_policy_name"] == "Exam-Focused Policy"
    calculus = next(delta for delta in outcome.deltas if delta.subject_id == "s1")
    # 5*.2 + 4*.5 + 3*.3 = 3.9 versus 4.1 under balanced
    assert calculus.priority_delta == pytest.approx(-0.2)
    text = format_scenario_summary(outcome)
    assert text.startswith("Scenario: Changing policy from balanced to exam_focused")
    assert "  • Calculus: Priority -0.20, Rank 0" in text


def test_total_hours_over_capacity_is_an_error() -> None:
    plans = [
        WeeklyPlan("s1", "Calculus", 10.0, 10.0, 4.1),
        WeeklyPlan("s2", "Algebra", 7.0, 5.0, 1.7),
    ]
    total = evaluate_constraints(_subjects(), plans).hard[0]

    assert total.constraint_id == "total_hours"
    assert total.violation and total.severity == "error"
    assert total.message == "Total recommended hours (17.0) exceeds total available hours (15) by 2.0 hours."


def test_workload_imbalance_is_advisory() -> None:
    plans = [
        WeeklyPlan("s1", "Calculus", 9.0, 10.0, 4.1),
        WeeklyPlan("s2", "Algebra", 1.0, 5.0, 1.7),
    ]
    workload = evaluate_constraints(_subjects(), plans).soft[1]

    assert workload.violation and workload.severity == "advisory"
    assert workload.message == "Workload is imbalanced (CV: 0.80)."
    assert workload.details[0]["coefficient_of_variation"] == pytest.approx(0.8)


def test_summary_when_every_constraint_holds() -> None:
    subjects = [
        Subject("s1", "Calculus", credit_weight=8, difficulty=3, interest=5, available_study_hours=10),
        Subject("s2", "Algebra", credit_weight=4, difficulty=5, interest=5, available_study_hours=8),
    ]
    plans = [
        WeeklyPlan("s1", "Calculus", 10.0, 10.0, 4.1),
        WeeklyPlan("s2", "Algebra", 8.0, 8.0, 3.3),
    ]
    evaluation = evaluate_constraints(subjects, plans)

    assert not evaluation.has_hard_violations
    assert not evaluation.has_soft_violations
    assert format_constraint_summary(evaluation) == "All constraints satisfied."
