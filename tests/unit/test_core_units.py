from __future__ import annotations

import logging
from datetime import date, datetime

import pytest

from academic_copilot.engine.allocator import allocate_hours, round_tenth, summarize_allocation
from academic_copilot.engine.history import build_execution_history
from academic_copilot.engine.policies import PolicyId, all_policies, get_policy
from academic_copilot.engine.scoring import rank_priorities, score_subject
from academic_copilot.logging_config import configure_logging
from academic_copilot.metrics.stats import coefficient_of_variation, direction, ols_slope, safe_ratio
from academic_copilot.models import (
    ExecutionHistory,
    ExecutionLogEntry,
    Subject,
    WeeklyExecutionLog,
    WeeklyPlan,
)
from academic_copilot.normalization import NormalizationReport, resolve_engine_config
from academic_copilot.weeks import week_id, week_sort_key


def _subject(sid: str, *, interest: float = 3, difficulty: float = 3, credits: float = 5, hours: float = 5) -> Subject:
    return Subject(
        id=sid,
        name=sid.upper(),
        credit_weight=credits,
        difficulty=difficulty,
        interest=interest,
        available_study_hours=hours,
    )


def test_policy_catalog_weights_and_fallback() -> None:
    assert [policy.id for policy in all_policies()] == list(PolicyId)
    exam = get_policy("exam_focused")
    assert (exam.weights.interest, exam.weights.credits, exam.weights.difficulty) == (0.2, 0.5, 0.3)
    assert get_policy("execution_aware").weights.execution == 0.2
    assert get_policy("nonexistent").id is PolicyId.BALANCED
    assert get_policy(None).id is PolicyId.BALANCED
    assert get_policy(PolicyId.RISK_AVERSE).name == "Risk-Averse Policy"


def test_score_components_follow_policy_weights() -> None:
    score = score_subject(_subject("s1", interest=5, difficulty=3, credits=8), get_policy("balanced"))
    assert score.components["interest"] == pytest.approx(2.0)
    assert score.components["credits"] == pytest.approx(1.2)
    assert score.components["difficulty"] == pytest.approx(0.9)
    assert score.components["execution"] == 0.0
    assert score.priority_score == pytest.approx(4.1)
    assert "High priority (score: 4.10)" in score.explanation
    assert score.explanation.startswith("Under Balanced Policy:")


def test_execution_component_is_capped_and_only_used_by_execution_policy() -> None:
    subject = _subject("s1")
    over_executed = ExecutionHistory("s1", avg_actual_hours=8, recommended_hours=4, data_points=2)

    aware = score_subject(subject, get_policy("execution_aware"), over_executed)
    assert aware.components["execution"] == pytest.approx(5 * 0.2)
    assert "historical execution rate: 100%" in aware.explanation

    balanced = score_subject(subject, get_policy("balanced"), over_executed)
    assert balanced.components["execution"] == 0.0

    no_history = score_subject(subject, get_policy("execution_aware"))
    assert no_history.components["execution"] == 0.0


def test_rank_priorities_is_stable_for_ties() -> None:
    subjects = [_subject("a"), _subject("b", interest=5), _subject("c"), _subject("d", interest=1)]
    results = rank_priorities(subjects, get_policy("balanced"))
    assert [result.subject_id for result in results] == ["b", "a", "c", "d"]
    assert [result.rank for result in results] == [1, 2, 3, 4]
    assert all(result.policy_id == "balanced" for result in results)


def test_allocation_matches_reference_example() -> None:
    subjects = [
        _subject("s1", interest=5, difficulty=3, credits=8, hours=10),
        _subject("s2", interest=2, difficulty=5, credits=4, hours=5),
    ]
    results = rank_priorities(subjects, get_policy("balanced"))
    assert results[1].priority_score == pytest.approx(1.7)

    plans = allocate_hours(results, subjects)
    assert [plan.recommended_hours for plan in plans] == [10.0, 4.4]
    assert [plan.available_hours for plan in plans] == [10, 5]

    summary = summarize_allocation(plans, subjects)
    assert summary["total_recommended_hours"] == pytest.approx(14.4)
    assert summary["unallocated_hours"] == pytest.approx(0.6)
    assert summary["overloaded"] is False


def test_allocation_rounds_down_when_capacity_is_not_a_tenth() -> None:
    subjects = [_subject("s1", hours=2.35)]
    plans = allocate_hours(rank_priorities(subjects, get_policy("balanced")), subjects)
    assert plans[0].recommended_hours == pytest.approx(2.3)


def test_allocation_with_zero_scores_gives_zero_hours() -> None:
    subject = Subject("z", "Z", credit_weight=0, difficulty=6, interest=0, available_study_hours=4)
    plans = allocate_hours(rank_priorities([subject], get_policy("balanced")), [subject])
    assert plans[0].recommended_hours == 0.0


def test_round_tenth_is_half_up() -> None:
    assert round_tenth(4.25) == 4.3
    assert round_tenth(4.24) == 4.2
    assert round_tenth(0.0) == 0.0


def test_stats_helpers_define_zero_cases() -> None:
    assert safe_ratio(3, 0) == 0.0
    assert coefficient_of_variation([]) == 0.0
    assert coefficient_of_variation([0, 0]) == 0.0
    assert coefficient_of_variation([2, 4]) == pytest.approx(1 / 3)
    assert ols_slope([1.0]) == 0.0
    assert ols_slope([2, 4, 6]) == pytest.approx(2.0)
    assert direction(0.06, rising="up", falling="down") == "up"
    assert direction(-0.05, rising="up", falling="down") == "stable"


def test_execution_history_uses_plan_in_force() -> None:
    logs = [
        WeeklyExecutionLog("2025-W1", (ExecutionLogEntry("s1", 3, "partial"),)),
        WeeklyExecutionLog("2025-W2", (ExecutionLogEntry("s1", 5, "completed"),)),
    ]
    plans = [WeeklyPlan("s1", "S1", 4.0, 6.0, 3.0), WeeklyPlan("s2", "S2", 2.0, 3.0, 2.0)]

    history = build_execution_history(logs, plans)
    assert set(history) == {"s1"}
    assert history["s1"].avg_actual_hours == pytest.approx(4.0)
    assert history["s1"].deviations == (-1.0, 1.0)
    assert history["s1"].execution_rate == pytest.approx(1.0)
    assert ExecutionHistory("x", 2, 0, 1).execution_rate == 0.0


def test_log_payload_keeps_one_entry_per_subject() -> None:
    log = WeeklyExecutionLog.from_dict(
        {
            "week_id": "2025-W3",
            "entries": [
                {"subject_id": "s1", "actual_hours": 2, "completion_status": "partial"},
                {"subject_id": "s1", "actual_hours": 4, "completion_status": "done"},
                "garbage",
            ],
        }
    )
    assert len(log.entries) == 1
    assert log.entry_for("s1").actual_hours == 4.0
    assert log.entry_for("s1").completion_status == "partial"


def test_week_id_counts_sunday_started_weeks() -> None:
    # 2024-01-01 is a Monday.
    assert week_id(date(2024, 1, 1)) == "2024-W1"
    assert week_id(date(2024, 1, 6)) == "2024-W1"
    assert week_id(date(2024, 1, 7)) == "2024-W2"
    # Time of day counts as a fractional day.
    assert week_id(datetime(2024, 1, 6, 12, 0)) == "2024-W2"


def test_week_sort_key_orders_numerically() -> None:
    weeks = ["2025-W10", "2024-W52", "2025-W2", "bogus"]
    assert sorted(weeks, key=week_sort_key) == ["2024-W52", "2025-W2", "2025-W10", "bogus"]


def test_config_resolution_reports_unknown_keys_and_clamps() -> None:
    report = NormalizationReport()
    config = resolve_engine_config({"min_hours": -2, "workload_cv_threshold": 0.8, "bogus": 1}, report)

    assert config["min_hours"] == 0.0
    assert config["workload_cv_threshold"] == 0.8
    assert config["overload_tolerance"] == 1.1
    assert "bogus" not in config
    assert [issue.code for issue in report.errors] == ["INVALID_CONFIG_KEY"]
    assert report.errors[0].as_dict()["suggested_fix"].startswith("Use one of:")
    assert [issue.code for issue in report.infos] == ["INFO_CLAMP_APPLIED"]


def test_config_resolution_rejects_non_finite_numbers() -> None:
    report = NormalizationReport()
    config = resolve_engine_config({"min_hours": float("nan"), "overload_tolerance": float("inf")}, report)

    assert config["min_hours"] == 1.0
    assert config["overload_tolerance"] == 1.1
    assert [issue.code for issue in report.errors] == ["INVALID_TYPE", "INVALID_TYPE"]


def test_configure_logging_reads_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COPILOT_LOG_LEVEL", "debug")
    configure_logging()
    assert logging.getLogger().level == logging.DEBUG

    monkeypatch.setenv("COPILOT_LOG_LEVEL", "chatty")
    configure_logging()
    assert logging.getLogger().level == logging.WARNING
