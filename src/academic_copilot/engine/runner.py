"""Live calculation pipeline over an explicit application state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from academic_copilot.analysis.insights import generate_insights
from academic_copilot.analysis.trends import (
    analyze_burnout,
    analyze_planning_accuracy,
    analyze_priority_volatility,
    analyze_risk_trends,
)
from academic_copilot.metrics.confidence import calculate_confidence
from academic_copilot.metrics.risk import calculate_risk_score, plan_deviation_percent
from academic_copilot.models import (
    ConfidenceAssessment,
    ConstraintEvaluation,
    InsightReport,
    PlanSnapshot,
    PrioritySnapshot,
    RiskAssessment,
    RiskSnapshot,
    TrendResult,
)
from academic_copilot.normalization.config_resolver import DEFAULT_ENGINE_CONFIG
from academic_copilot.reporting.constraints import evaluate_constraints
from academic_copilot.state import EngineState
from academic_copilot.weeks import week_id, week_sort_key

from .allocator import allocate_hours, summarize_allocation
from .history import build_execution_history
from .policies import get_policy
from .scenario import (
    CHANGE_POLICY,
    DROP_SUBJECT,
    MODIFY_HOURS,
    ScenarioError,
    ScenarioResult,
    ScenarioSnapshot,
    create_snapshot,
    simulate_change_policy,
    simulate_drop_subject,
    simulate_modify_hours,
)
from .scoring import rank_priorities

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CalculationOutcome:
    state: EngineState
    constraints: ConstraintEvaluation
    allocation_summary: dict[str, Any]

    def as_dict(self) -> dict[str, Any]:
        state = self.state
        return {
            "policy": get_policy(state.current_policy).as_dict(),
            "week_id": state.current_week,
            "priority_results": [item.as_dict() for item in state.priority_results],
            "weekly_plans": [item.as_dict() for item in state.weekly_plans],
            "risk_assessments": [item.as_dict() for item in state.risk_assessments],
            "confidence_data": [item.as_dict() for item in state.confidence_data],
            "constraints": self.constraints.as_dict(),
            "allocation_summary": dict(self.allocation_summary),
        }


def _timestamp(moment: datetime | None) -> str:
    return (moment or datetime.now(timezone.utc)).isoformat().replace("+00:00", "Z")


def _upsert_week(snapshots: tuple[Any, ...], snapshot: Any) -> tuple[Any, ...]:
    kept = [item for item in snapshots if item.week_id != snapshot.week_id]
    kept.append(snapshot)
    return tuple(sorted(kept, key=lambda item: week_sort_key(item.week_id)))


def run_calculation(
    state: EngineState,
    config: dict[str, float] | None = None,
    *,
    timestamp: datetime | None = None,
) -> CalculationOutcome:
    """Recompute priorities, plans, risk and confidence for every subject.

    Execution history is measured against the plans in force before this
    calculation, since those are the plans the logged weeks followed.
    """
    effective_config = {**DEFAULT_ENGINE_CONFIG, **(config or {})}
    policy = get_policy(state.current_policy)
    current_week = state.current_week or week_id(timestamp)
    history = build_execution_history(state.execution_logs, state.weekly_plans)
    previous_plans = {plan.subject_id: plan for plan in state.weekly_plans}

    results = rank_priorities(state.subjects, policy, history)
    plans = allocate_hours(results, state.subjects)
    historical_priorities = (
        *state.historical_priorities,
        PrioritySnapshot(timestamp=_timestamp(timestamp), policy_id=policy.id.value, results=tuple(results)),
    )

    risk_assessments: list[RiskAssessment] = []
    confidence_data: list[ConfidenceAssessment] = []
    for subject in state.subjects:
        subject_history = history.get(subject.id)
        previous_plan = previous_plans.get(subject.id)
        deviation = (
            plan_deviation_percent(subject_history, previous_plan)
            if subject_history is not None and previous_plan is not None
            else None
        )
        risk_assessments.append(calculate_risk_score(subject, subject_history, deviation))
        scores = [
            item.priority_score
            for snapshot in historical_priorities
            for item in snapshot.results
            if item.subject_id == subject.id
        ]
        confidence_data.append(calculate_confidence(subject, subject_history, scores))

    new_state = replace(
        state,
        priority_results=tuple(results),
        weekly_plans=tuple(plans),
        historical_priorities=historical_priorities,
        risk_assessments=tuple(risk_assessments),
        risk_history=_upsert_week(state.risk_history, RiskSnapshot(current_week, tuple(risk_assessments))),
        plan_history=_upsert_week(state.plan_history, PlanSnapshot(current_week, tuple(plans))),
        confidence_data=tuple(confidence_data),
        execution_history=tuple(history.values()),
        current_week=current_week,
    )
    constraints = evaluate_constraints(state.subjects, plans, effective_config, confidence_data)
    logger.debug(
        "Calculated %d subjects under %s (hard violations: %s)",
        len(results),
        policy.id.value,
        constraints.has_hard_violations,
    )
    return CalculationOutcome(
        state=new_state,
        constraints=constraints,
        allocation_summary=summarize_allocation(
            plans, state.subjects, overload_tolerance=effective_config["overload_tolerance"]
        ),
    )


def run_insights(state: EngineState) -> InsightReport:
    return generate_insights(state.execution_logs, state.weekly_plans, state.subjects)


def run_trends(state: EngineState) -> dict[str, TrendResult]:
    plans_by_week = state.plans_by_week()
    return {
        "planning_accuracy": analyze_planning_accuracy(state.execution_logs, state.weekly_plans, plans_by_week),
        "priority_volatility": analyze_priority_volatility(state.historical_priorities),
        "burnout": analyze_burnout(state.execution_logs, state.weekly_plans, plans_by_week),
        "risk_trend": analyze_risk_trends(state.risk_history),
    }


def build_snapshot(state: EngineState, *, timestamp: datetime | None = None) -> ScenarioSnapshot:
    return create_snapshot(
        state.subjects,
        state.priority_results,
        state.weekly_plans,
        state.current_policy,
        timestamp=timestamp,
    )


def run_scenario(state: EngineState, scenario_type: str, **params: Any) -> ScenarioResult | ScenarioError:
    """Simulate one scenario against a snapshot of ``state``; ``state`` is untouched."""
    if not state.subjects or not state.priority_results:
        return ScenarioError(scenario_type, "not_calculated", "Calculate priorities before running scenarios.")

    baseline = build_snapshot(state)
    policy = get_policy(state.current_policy)
    history = state.history_by_subject()

    if scenario_type == DROP_SUBJECT:
        return simulate_drop_subject(baseline, str(params["subject_id"]), policy, history)
    if scenario_type == MODIFY_HOURS:
        return simulate_modify_hours(
            baseline, str(params["subject_id"]), float(params["new_hours"]), policy, history
        )
    if scenario_type == CHANGE_POLICY:
        return simulate_change_policy(baseline, get_policy(params.get("policy_id")), history)
    return ScenarioError(scenario_type, "unknown_scenario", f"Unknown scenario type: {scenario_type}")
