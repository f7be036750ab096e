from __future__ import annotations

from pathlib import Path

from academic_copilot.models import ExecutionLogEntry, Subject, WeeklyExecutionLog
from academic_copilot.normalization import NormalizationReport
from academic_copilot.state import (
    EngineState,
    add_subject,
    record_execution_log,
    remove_subject,
    reset_profile,
    set_policy,
    update_subject_hours,
)
from academic_copilot.storage import STORAGE_KEYS, JsonFileStore, MemoryStore, load_state, save_state


def _state() -> EngineState:
    state = EngineState(current_week="2025-W10")
    state = add_subject(state, Subject("s1", "Calculus", 8, 3, 5, 10))
    state = add_subject(state, Subject("s2", "Algebra", 4, 5, 2, 5))
    return record_execution_log(
        state, WeeklyExecutionLog("2025-W9", (ExecutionLogEntry("s1", 6, "partial"),), "2025-03-01T10:00:00Z")
    )


def test_transitions_return_new_states() -> None:
    state = _state()
    updated = update_subject_hours(state, "s2", -3)

    assert updated.subject("s2").available_study_hours == 0.0
    assert state.subject("s2").available_study_hours == 5
    assert set_policy(state, "exam_focused").current_policy == "exam_focused"
    assert set_policy(state, "unknown").current_policy == "balanced"

    replaced = add_subject(state, Subject("s1", "Calculus II", 8, 3, 5, 12))
    assert [subject.name for subject in replaced.subjects] == ["Calculus II", "Algebra"]
    assert [subject.id for subject in remove_subject(state, "s1").subjects] == ["s2"]

    cleared = reset_profile(state)
    assert cleared.subjects == () and cleared.execution_logs == ()
    assert cleared.current_week == "2025-W10"


def test_recording_a_log_replaces_the_same_week() -> None:
    state = _state()
    state = record_execution_log(state, WeeklyExecutionLog("2025-W8", (ExecutionLogEntry("s2", 1, "skipped"),)))
    state = record_execution_log(state, WeeklyExecutionLog("2025-W9", (ExecutionLogEntry("s1", 9, "completed"),)))

    assert [log.week_id for log in state.execution_logs] == ["2025-W8", "2025-W9"]
    assert state.execution_logs[1].entry_for("s1").actual_hours == 9


def test_empty_store_loads_defaults_with_infos() -> None:
    report = NormalizationReport()
    state = load_state(MemoryStore(), report)

    assert state.subjects == ()
    assert state.current_policy == "balanced"
    assert state.current_week.count("-W") == 1
    assert report.errors == []
    assert {issue.field_path for issue in report.infos} == {f"$.{key}" for key in STORAGE_KEYS}


def test_corrupt_entries_are_replaced() -> None:
    report = NormalizationReport()
    store = MemoryStore(
        {
            "subjects": [{"id": "s1", "name": "Calculus", "credit_weight": "x"}, 42],
            "weekly_plans": "oops",
            "current_policy": "nope",
            "current_week": "2025-W3",
        }
    )
    state = load_state(store, report)

    assert len(state.subjects) == 1
    assert state.subjects[0].credit_weight == 1.0
    assert state.weekly_plans == ()
    assert state.current_policy == "balanced"
    assert state.current_week == "2025-W3"
    corrupt = {issue.field_path for issue in report.infos if issue.code == "INFO_CORRUPT_ENTRY"}
    assert corrupt == {"$.subjects[1]", "$.weekly_plans"}


def test_state_survives_a_json_file_round_trip(tmp_path: Path) -> None:
    state = _state()
    path = tmp_path / "state.json"
    save_state(JsonFileStore(path), state)

    assert load_state(JsonFileStore(path)) == state


def test_unreadable_state_file_is_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    store = JsonFileStore(path)
    assert store.get("subjects") is None
    store.set("current_policy", "risk_averse")
    assert JsonFileStore(path).get("current_policy") == "risk_averse"


def test_non_string_policy_falls_back_to_balanced() -> None:
    for stored in (["balanced"], {"id": "balanced"}, 3):
        report = NormalizationReport()
        state = load_state(MemoryStore({"current_policy": stored}), report)

        assert state.current_policy == "balanced"
        assert "$.current_policy" in {issue.field_path for issue in report.infos}


def test_non_finite_numbers_use_record_defaults() -> None:
    store = MemoryStore(
        {
            "priority_results": [
                {"subject_id": "s1", "rank": float("inf"), "priority_score": float("nan")},
                {"subject_id": "s2", "rank": float("nan"), "priority_score": 2.5},
            ],
            "execution_history": [{"subject_id": "s1", "data_points": float("-inf"), "deviations": [float("nan")]}],
            "subjects": [{"id": "s1", "credit_weight": float("nan"), "available_study_hours": float("inf")}],
        }
    )
    state = load_state(store)

    assert [result.rank for result in state.priority_results] == [0, 0]
    assert [result.priority_score for result in state.priority_results] == [0.0, 2.5]
    assert state.execution_history[0].data_points == 0
    assert state.execution_history[0].deviations == (0.0,)
    assert state.subjects[0].credit_weight == 1.0
    assert state.subjects[0].available_study_hours == 0.0


def test_hand_edited_file_with_nan_and_overflow_loads(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        '{"priority_results": [{"subject_id": "s1", "rank": 1e999, "priority_score": NaN}],'
        ' "current_policy": ["exam_focused"]}',
        encoding="utf-8",
    )

    state = load_state(JsonFileStore(path))
    assert state.priority_results[0].rank == 0
    assert state.priority_results[0].priority_score == 0.0
    assert state.current_policy == "balanced"
