"""Caller-owned application state and its pure transitions.

The engine never keeps state between calls: each transition takes an
``EngineState`` and returns a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from academic_copilot.engine.policies import DEFAULT_POLICY_ID, get_policy
from academic_copilot.models import (
    ConfidenceAssessment,
    ExecutionHistory,
    PlanSnapshot,
    PriorityResult,
    PrioritySnapshot,
    RiskAssessment,
    RiskSnapshot,
    Subject,
    WeeklyExecutionLog,
    WeeklyPlan,
)
from academic_copilot.weeks import week_sort_key


@dataclass(frozen=True, slots=True)
class EngineState:
    subjects: tuple[Subject, ...] = ()
    priority_results: tuple[PriorityResult, ...] = ()
    weekly_plans: tuple[WeeklyPlan, ...] = ()
    execution_logs: tuple[WeeklyExecutionLog, ...] = ()
    historical_priorities: tuple[PrioritySnapshot, ...] = ()
    risk_assessments: tuple[RiskAssessment, ...] = ()
    risk_history: tuple[RiskSnapshot, ...] = ()
    plan_history: tuple[PlanSnapshot, ...] = ()
    confidence_data: tuple[ConfidenceAssessment, ...] = ()
    # History the last calculation scored with; scenarios reuse it verbatim.
    execution_history: tuple[ExecutionHistory, ...] = ()
    current_policy: str = DEFAULT_POLICY_ID.value
    current_week: str = ""

    def subject(self, subject_id: str) -> Subject | None:
        return next((subject for subject in self.subjects if subject.id == subject_id), None)

    def history_by_subject(self) -> dict[str, ExecutionHistory]:
        return {item.subject_id: item for item in self.execution_history}

    def plans_by_week(self) -> dict[str, tuple[WeeklyPlan, ...]]:
        return {snapshot.week_id: snapshot.plans for snapshot in self.plan_history}

    def as_dict(self) -> dict[str, Any]:
        return {
            "subjects": [item.as_dict() for item in self.subjects],
            "priority_results": [item.as_dict() for item in self.priority_results],
            "weekly_plans": [item.as_dict() for item in self.weekly_plans],
            "execution_logs": [item.as_dict() for item in self.execution_logs],
            "historical_priorities": [item.as_dict() for item in self.historical_priorities],
            "risk_assessments": [item.as_dict() for item in self.risk_assessments],
            "risk_history": [item.as_dict() for item in self.risk_history],
            "plan_history": [item.as_dict() for item in self.plan_history],
            "confidence_data": [item.as_dict() for item in self.confidence_data],
            "execution_history": [item.as_dict() for item in self.execution_history],
            "current_policy": self.current_policy,
            "current_week": self.current_week,
        }


def add_subject(state: EngineState, subject: Subject) -> EngineState:
    """Append ``subject``; a subject with the same id is replaced in place."""
    if state.subject(subject.id) is not None:
        subjects = tuple(subject if item.id == subject.id else item for item in state.subjects)
    else:
        subjects = (*state.subjects, subject)
    return replace(state, subjects=subjects)


def remove_subject(state: EngineState, subject_id: str) -> EngineState:
    """Remove a subject; current results and plans become stale and are cleared."""
    return replace(
        state,
        subjects=tuple(subject for subject in state.subjects if subject.id != subject_id),
        priority_results=(),
        weekly_plans=(),
    )


def update_subject_hours(state: EngineState, subject_id: str, hours: float) -> EngineState:
    return replace(
        state,
        subjects=tuple(
            replace(subject, available_study_hours=max(0.0, float(hours))) if subject.id == subject_id else subject
            for subject in state.subjects
        ),
    )


def record_execution_log(state: EngineState, log: WeeklyExecutionLog) -> EngineState:
    """Store ``log``, fully replacing any log already recorded for its week."""
    logs = [item for item in state.execution_logs if item.week_id != log.week_id]
    logs.append(log)
    logs.sort(key=lambda item: week_sort_key(item.week_id))
    return replace(state, execution_logs=tuple(logs))


def set_policy(state: EngineState, policy_id: str) -> EngineState:
    return replace(state, current_policy=get_policy(policy_id).id.value)


def set_current_week(state: EngineState, week_id: str) -> EngineState:
    return replace(state, current_week=week_id)


def reset_profile(state: EngineState) -> EngineState:
    return replace(
        state,
        subjects=(),
        priority_results=(),
        weekly_plans=(),
        execution_logs=(),
        execution_history=(),
    )
