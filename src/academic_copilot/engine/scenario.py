"""What-if simulations against a frozen baseline.

Every variant recomputes through ``rank_priorities`` and ``allocate_hours``,
the same functions the live calculation uses, and reports deltas against the
baseline snapshot. Nothing here mutates the snapshot or its inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from copy import deepcopy
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from academic_copilot.models import ExecutionHistory, PriorityResult, Subject, WeeklyPlan

from .allocator import allocate_hours, round_tenth
from .policies import Policy
from .scoring import rank_priorities

logger = logging.getLogger(__name__)

DROP_SUBJECT = "drop_subject"
MODIFY_HOURS = "modify_hours"
CHANGE_POLICY = "change_policy"


@dataclass(frozen=True, slots=True)
class ScenarioSnapshot:
    timestamp: str
    subjects: tuple[Subject, ...]
    priority_results: tuple[PriorityResult, ...]
    weekly_plans: tuple[WeeklyPlan, ...]
    policy_id: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "subjects": [subject.as_dict() for subject in self.subjects],
            "priority_results": [result.as_dict() for result in self.priority_results],
            "weekly_plans": [plan.as_dict() for plan in self.weekly_plans],
            "policy_id": self.policy_id,
        }


@dataclass(frozen=True, slots=True)
class SubjectDelta:
    subject_id: str
    subject_name: str
    priority_delta: float
    rank_delta: int | None
    hours_delta: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "priority_delta": self.priority_delta,
            "rank_delta": self.rank_delta,
            "hours_delta": self.hours_delta,
        }


@dataclass(frozen=True, slots=True)
class ScenarioResult:
    scenario_type: str
    subjects: tuple[Subject, ...]
    priority_results: tuple[PriorityResult, ...]
    weekly_plans: tuple[WeeklyPlan, ...]
    deltas: tuple[SubjectDelta, ...]
    summary: dict[str, Any] = field(default_factory=dict)
    change: dict[str, Any] = field(default_factory=dict)

    ok = True

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "scenario_type": self.scenario_type,
            "subjects": [subject.as_dict() for subject in self.subjects],
            "priority_results": [result.as_dict() for result in self.priority_results],
            "weekly_plans": [plan.as_dict() for plan in self.weekly_plans],
            "deltas": [delta.as_dict() for delta in self.deltas],
            "summary": dict(self.summary),
            "change": dict(self.change),
        }


@dataclass(frozen=True, slots=True)
class ScenarioError:
    """Returned instead of a result when a scenario cannot be simulated."""

    scenario_type: str
    code: str
    message: str

    ok = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": "error",
            "scenario_type": self.scenario_type,
            "error": {"code": self.code, "message": self.message},
        }


def create_snapshot(
    subjects: Sequence[Subject],
    priority_results: Sequence[PriorityResult],
    weekly_plans: Sequence[WeeklyPlan],
    policy_id: str,
    *,
    timestamp: datetime | None = None,
) -> ScenarioSnapshot:
    moment = timestamp or datetime.now(timezone.utc)
    return ScenarioSnapshot(
        timestamp=moment.isoformat().replace("+00:00", "Z"),
        subjects=tuple(deepcopy(list(subjects))),
        priority_results=tuple(deepcopy(list(priority_results))),
        weekly_plans=tuple(deepcopy(list(weekly_plans))),
        policy_id=str(policy_id),
    )


def _recompute(
    subjects: Sequence[Subject],
    policy: Policy,
    history: Mapping[str, ExecutionHistory] | None,
) -> tuple[list[PriorityResult], list[WeeklyPlan]]:
    results = rank_priorities(subjects, policy, history)
    return results, allocate_hours(results, subjects)


def _deltas(
    baseline: ScenarioSnapshot,
    results: Sequence[PriorityResult],
    plans: Sequence[WeeklyPlan],
) -> tuple[SubjectDelta, ...]:
    old_results = {result.subject_id: result for result in baseline.priority_results}
    old_plans = {plan.subject_id: plan for plan in baseline.weekly_plans}
    new_plans = {plan.subject_id: plan for plan in plans}

    deltas: list[SubjectDelta] = []
    for result in results:
        old_result = old_results.get(result.subject_id)
        old_plan = old_plans.get(result.subject_id)
        new_plan = new_plans.get(result.subject_id)
        new_hours = new_plan.recommended_hours if new_plan is not None else 0.0
        deltas.append(
            SubjectDelta(
                subject_id=result.subject_id,
                subject_name=result.subject_name,
                priority_delta=(
                    result.priority_score - old_result.priority_score
                    if old_result is not None
                    else result.priority_score
                ),
                rank_delta=old_result.rank - result.rank if old_result is not None else None,
                hours_delta=round_tenth(new_hours - old_plan.recommended_hours) if old_plan is not None else new_hours,
            )
        )
    return tuple(deltas)


def _total_recommended(plans: Sequence[WeeklyPlan]) -> float:
    return round_tenth(sum(plan.recommended_hours for plan in plans))


def _find_subject(subjects: Sequence[Subject], subject_id: str) -> Subject | None:
    return next((subject for subject in subjects if subject.id == subject_id), None)


def simulate_drop_subject(
    baseline: ScenarioSnapshot,
    subject_id: str,
    policy: Policy,
    history: Mapping[str, ExecutionHistory] | None = None,
) -> ScenarioResult | ScenarioError:
    dropped = _find_subject(baseline.subjects, subject_id)
    if dropped is None:
        return ScenarioError(DROP_SUBJECT, "unknown_subject", f"Unknown subject: {subject_id}")
    remaining = [subject for subject in baseline.subjects if subject.id != subject_id]
    if not remaining:
        return ScenarioError(DROP_SUBJECT, "last_subject", "Cannot drop the only remaining subject.")

    results, plans = _recompute(remaining, policy, history)
    previous = next((r for r in baseline.priority_results if r.subject_id == subject_id), None)
    logger.debug("Simulated dropping %s; %d subjects remain", subject_id, len(remaining))

    return ScenarioResult(
        scenario_type=DROP_SUBJECT,
        subjects=tuple(remaining),
        priority_results=tuple(results),
        weekly_plans=tuple(plans),
        deltas=_deltas(baseline, results, plans),
        summary={
            "total_subjects": len(remaining),
            "total_available_hours": sum(subject.available_study_hours for subject in remaining),
            "total_recommended_hours": _total_recommended(plans),
        },
        change={
            "subject_id": dropped.id,
            "subject_name": dropped.name,
            "freed_hours": dropped.available_study_hours,
            "previous_priority": previous.priority_score if previous is not None else 0.0,
        },
    )


def simulate_modify_hours(
    baseline: ScenarioSnapshot,
    subject_id: str,
    new_hours: float,
    policy: Policy,
    history: Mapping[str, ExecutionHistory] | None = None,
) -> ScenarioResult | ScenarioError:
    original = _find_subject(baseline.subjects, subject_id)
    if original is None:
        return ScenarioError(MODIFY_HOURS, "unknown_subject", f"Unknown subject: {subject_id}")

    new_hours = float(new_hours)
    modified = [
        replace(subject, available_study_hours=new_hours) if subject.id == subject_id else subject
        for subject in baseline.subjects
    ]
    results, plans = _recompute(modified, policy, history)
    total_available = sum(subject.available_study_hours for subject in modified)
    baseline_available = sum(subject.available_study_hours for subject in baseline.subjects)

    return ScenarioResult(
        scenario_type=MODIFY_HOURS,
        subjects=tuple(modified),
        priority_results=tuple(results),
        weekly_plans=tuple(plans),
        deltas=_deltas(baseline, results, plans),
        summary={
            "total_available_hours": total_available,
            "total_recommended_hours": _total_recommended(plans),
            "available_hours_delta": total_available - baseline_available,
        },
        change={
            "subject_id": original.id,
            "subject_name": original.name,
            "old_hours": original.available_study_hours,
            "new_hours": new_hours,
            "hours_delta": new_hours - original.available_study_hours,
        },
    )


def simulate_change_policy(
    baseline: ScenarioSnapshot,
    new_policy: Policy,
    history: Mapping[str, ExecutionHistory] | None = None,
) -> ScenarioResult:
    results, plans = _recompute(baseline.subjects, new_policy, history)
    return ScenarioResult(
        scenario_type=CHANGE_POLICY,
        subjects=baseline.subjects,
        priority_results=tuple(results),
        weekly_plans=tuple(plans),
        deltas=_deltas(baseline, results, plans),
        summary={
            "policy_changed": new_policy.id.value != baseline.policy_id,
            "total_recommended_hours": _total_recommended(plans),
        },
        change={
            "old_policy_id": baseline.policy_id,
            "new_policy_id": new_policy.id.value,
            "new_policy_name": new_policy.name,
        },
    )
