"""Hard and soft constraint checks over a weekly allocation.

Catalog order is fixed: hard checks (total hours, individual capacity,
minimum hours) followed by soft advisories (interest alignment, workload
balance, confidence alignment).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from academic_copilot.metrics.stats import coefficient_of_variation, safe_ratio
from academic_copilot.models import (
    ConfidenceAssessment,
    ConstraintEvaluation,
    ConstraintResult,
    Subject,
    WeeklyPlan,
)
from academic_copilot.normalization.config_resolver import DEFAULT_ENGINE_CONFIG


@dataclass(frozen=True, slots=True)
class _CheckContext:
    subjects: Sequence[Subject]
    subjects_by_id: Mapping[str, Subject]
    plans: Sequence[WeeklyPlan]
    config: Mapping[str, float]
    confidence_by_id: Mapping[str, ConfidenceAssessment] | None


@dataclass(frozen=True, slots=True)
class ConstraintDefinition:
    id: str
    kind: str
    name: str
    check: Callable[["ConstraintDefinition", _CheckContext], ConstraintResult]


def _result(
    definition: ConstraintDefinition,
    *,
    violation: bool,
    message: str,
    severity: str,
    details: list[dict[str, Any]] | None = None,
) -> ConstraintResult:
    return ConstraintResult(
        constraint_id=definition.id,
        name=definition.name,
        kind=definition.kind,
        satisfied=not violation,
        violation=violation,
        severity=severity,
        message=message,
        details=tuple(details or ()),
    )


def _check_total_hours(definition: ConstraintDefinition, ctx: _CheckContext) -> ConstraintResult:
    total_recommended = sum(plan.recommended_hours for plan in ctx.plans)
    total_available = sum(subject.available_study_hours for subject in ctx.subjects)
    violation = total_recommended > total_available
    if violation:
        message = (
            f"Total recommended hours ({total_recommended:.1f}) exceeds total available hours "
            f"({total_available:g}) by {total_recommended - total_available:.1f} hours."
        )
    else:
        message = f"Total recommended hours ({total_recommended:.1f}) within available capacity ({total_available:g})."
    return _result(definition, violation=violation, message=message, severity="error" if violation else "ok")


def _check_individual_capacity(definition: ConstraintDefinition, ctx: _CheckContext) -> ConstraintResult:
    details: list[dict[str, Any]] = []
    for plan in ctx.plans:
        subject = ctx.subjects_by_id.get(plan.subject_id)
        if subject is not None and plan.recommended_hours > subject.available_study_hours:
            details.append(
                {
                    "subject_id": plan.subject_id,
                    "subject_name": plan.subject_name,
                    "excess": plan.recommended_hours - subject.available_study_hours,
                }
            )
    if details:
        listed = ", ".join(f"{item['subject_name']} ({item['excess']:.1f}h excess)" for item in details)
        message = f"{len(details)} subject(s) exceed available hours: {listed}."
    else:
        message = "All recommendations within individual subject capacities."
    return _result(
        definition,
        violation=bool(details),
        message=message,
        severity="error" if details else "ok",
        details=details,
    )


def _check_minimum_hours(definition: ConstraintDefinition, ctx: _CheckContext) -> ConstraintResult:
    floor = float(ctx.config["min_hours"])
    details = [
        {
            "subject_id": plan.subject_id,
            "subject_name": plan.subject_name,
            "recommended": plan.recommended_hours,
            "minimum": floor,
        }
        for plan in ctx.plans
        if plan.recommended_hours < floor
    ]
    message = (
        f"{len(details)} subject(s) below minimum hours."
        if details
        else "All subjects meet minimum hour requirements."
    )
    return _result(
        definition,
        violation=bool(details),
        message=message,
        severity="warning" if details else "ok",
        details=details,
    )


def _check_interest_alignment(definition: ConstraintDefinition, ctx: _CheckContext) -> ConstraintResult:
    tolerance = float(ctx.config["interest_alignment_tolerance"])
    details: list[dict[str, Any]] = []
    for plan in ctx.plans:
        subject = ctx.subjects_by_id.get(plan.subject_id)
        if subject is None:
            continue
        allocated_share = safe_ratio(plan.recommended_hours, subject.available_study_hours)
        expected_share = subject.interest / 5.0
        if abs(allocated_share - expected_share) > tolerance:
            details.append(
                {
                    "subject_id": plan.subject_id,
                    "subject_name": plan.subject_name,
                    "interest": subject.interest,
                    "allocated_share": allocated_share,
                }
            )
    message = (
        f"{len(details)} subject(s) show interest misalignment."
        if details
        else "Recommendations align well with interest levels."
    )
    return _result(definition, violation=bool(details), message=message, severity="advisory", details=details)


def _check_workload_balance(definition: ConstraintDefinition, ctx: _CheckContext) -> ConstraintResult:
    if len(ctx.plans) < 2:
        return _result(
            definition, violation=False, message="Insufficient subjects for balance analysis.", severity="ok"
        )
    cv = coefficient_of_variation([plan.recommended_hours for plan in ctx.plans])
    imbalanced = cv > float(ctx.config["workload_cv_threshold"])
    message = (
        f"Workload is imbalanced (CV: {cv:.2f})."
        if imbalanced
        else f"Workload is reasonably balanced (CV: {cv:.2f})."
    )
    return _result(
        definition,
        violation=imbalanced,
        message=message,
        severity="advisory",
        details=[{"coefficient_of_variation": cv}],
    )


def _check_confidence_alignment(definition: ConstraintDefinition, ctx: _CheckContext) -> ConstraintResult:
    if ctx.confidence_by_id is None:
        return _result(definition, violation=False, message="Confidence data not available.", severity="ok")
    share = float(ctx.config["low_confidence_allocation_share"])
    details: list[dict[str, Any]] = []
    for plan in ctx.plans:
        confidence = ctx.confidence_by_id.get(plan.subject_id)
        if confidence is None or confidence.confidence_level != "low":
            continue
        subject = ctx.subjects_by_id.get(plan.subject_id)
        if subject is not None and plan.recommended_hours > subject.available_study_hours * share:
            details.append({"subject_id": plan.subject_id, "subject_name": plan.subject_name, "confidence": "low"})
    message = (
        f"{len(details)} low-confidence subject(s) have high hour allocations."
        if details
        else "Recommendations align with confidence levels."
    )
    return _result(definition, violation=bool(details), message=message, severity="advisory", details=details)


HARD_CONSTRAINTS: tuple[ConstraintDefinition, ...] = (
    ConstraintDefinition("total_hours", "hard", "Total Available Hours", _check_total_hours),
    ConstraintDefinition("individual_capacity", "hard", "Individual Subject Capacity", _check_individual_capacity),
    ConstraintDefinition("minimum_hours", "hard", "Minimum Study Hours", _check_minimum_hours),
)

SOFT_CONSTRAINTS: tuple[ConstraintDefinition, ...] = (
    ConstraintDefinition("interest_alignment", "soft", "Interest Alignment", _check_interest_alignment),
    ConstraintDefinition("workload_balance", "soft", "Workload Balance", _check_workload_balance),
    ConstraintDefinition("confidence_alignment", "soft", "Confidence Alignment", _check_confidence_alignment),
)


def evaluate_constraints(
    subjects: Sequence[Subject],
    weekly_plans: Sequence[WeeklyPlan],
    config: Mapping[str, float] | None = None,
    confidence_data: Sequence[ConfidenceAssessment] | None = None,
) -> ConstraintEvaluation:
    """Run every check in catalog order; checks never short-circuit each other."""
    ctx = _CheckContext(
        subjects=subjects,
        subjects_by_id={subject.id: subject for subject in subjects},
        plans=weekly_plans,
        config={**DEFAULT_ENGINE_CONFIG, **(config or {})},
        confidence_by_id=(
            {item.subject_id: item for item in confidence_data} if confidence_data is not None else None
        ),
    )
    return ConstraintEvaluation(
        hard=tuple(definition.check(definition, ctx) for definition in HARD_CONSTRAINTS),
        soft=tuple(definition.check(definition, ctx) for definition in SOFT_CONSTRAINTS),
    )
