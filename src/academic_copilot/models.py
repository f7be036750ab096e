"""Engine records.

Every record is an immutable value. Inputs (subjects, logs) can be rebuilt
from loosely-typed JSON payloads; every record exports itself through
``as_dict`` for storage and reports.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

COMPLETION_STATUSES = ("completed", "partial", "skipped")


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    # NaN and infinities from hand-edited JSON fall back too.
    return number if math.isfinite(number) else default


def _as_str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


@dataclass(frozen=True, slots=True)
class Subject:
    """A subject the student studies every week."""

    id: str
    name: str
    credit_weight: float
    difficulty: float
    interest: float
    available_study_hours: float

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Subject":
        subject_id = payload.get("id", "")
        return cls(
            id=str(subject_id),
            name=_as_str(payload.get("name"), str(subject_id)),
            credit_weight=_as_float(payload.get("credit_weight"), 1.0),
            difficulty=_as_float(payload.get("difficulty"), 1.0),
            interest=_as_float(payload.get("interest"), 1.0),
            available_study_hours=_as_float(payload.get("available_study_hours"), 0.0),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "credit_weight": self.credit_weight,
            "difficulty": self.difficulty,
            "interest": self.interest,
            "available_study_hours": self.available_study_hours,
        }


@dataclass(frozen=True, slots=True)
class ExecutionLogEntry:
    subject_id: str
    actual_hours: float
    completion_status: str = "partial"

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ExecutionLogEntry":
        status = payload.get("completion_status")
        return cls(
            subject_id=str(payload.get("subject_id", "")),
            actual_hours=max(0.0, _as_float(payload.get("actual_hours"), 0.0)),
            completion_status=status if status in COMPLETION_STATUSES else "partial",
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "actual_hours": self.actual_hours,
            "completion_status": self.completion_status,
        }


@dataclass(frozen=True, slots=True)
class WeeklyExecutionLog:
    """What was actually studied in one week, at most one entry per subject."""

    week_id: str
    entries: tuple[ExecutionLogEntry, ...] = ()
    timestamp: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "WeeklyExecutionLog":
        raw_entries = payload.get("entries", [])
        by_subject: dict[str, ExecutionLogEntry] = {}
        if isinstance(raw_entries, list):
            for raw in raw_entries:
                if isinstance(raw, dict):
                    entry = ExecutionLogEntry.from_dict(raw)
                    # Later entries for the same subject win.
                    by_subject[entry.subject_id] = entry
        return cls(
            week_id=str(payload.get("week_id", "")),
            entries=tuple(by_subject.values()),
            timestamp=_as_str(payload.get("timestamp")),
        )

    def entry_for(self, subject_id: str) -> ExecutionLogEntry | None:
        for entry in self.entries:
            if entry.subject_id == subject_id:
                return entry
        return None

    @property
    def total_actual_hours(self) -> float:
        return sum(entry.actual_hours for entry in self.entries)

    def as_dict(self) -> dict[str, Any]:
        return {
            "week_id": self.week_id,
            "entries": [entry.as_dict() for entry in self.entries],
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class PriorityResult:
    subject_id: str
    subject_name: str
    priority_score: float
    components: dict[str, float]
    rank: int
    explanation: str
    policy_id: str

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "PriorityResult":
        components = payload.get("components")
        return cls(
            subject_id=str(payload.get("subject_id", "")),
            subject_name=_as_str(payload.get("subject_name")),
            priority_score=_as_float(payload.get("priority_score"), 0.0),
            components=(
                {str(k): _as_float(v, 0.0) for k, v in components.items()}
                if isinstance(components, dict)
                else {}
            ),
            rank=int(_as_float(payload.get("rank"), 0)),
            explanation=_as_str(payload.get("explanation")),
            policy_id=_as_str(payload.get("policy_id"), "balanced"),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "priority_score": self.priority_score,
            "components": dict(self.components),
            "rank": self.rank,
            "explanation": self.explanation,
            "policy_id": self.policy_id,
        }


@dataclass(frozen=True, slots=True)
class WeeklyPlan:
    subject_id: str
    subject_name: str
    recommended_hours: float
    available_hours: float
    priority_score: float

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "WeeklyPlan":
        return cls(
            subject_id=str(payload.get("subject_id", "")),
            subject_name=_as_str(payload.get("subject_name")),
            recommended_hours=_as_float(payload.get("recommended_hours"), 0.0),
            available_hours=_as_float(payload.get("available_hours"), 0.0),
            priority_score=_as_float(payload.get("priority_score"), 0.0),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "recommended_hours": self.recommended_hours,
            "available_hours": self.available_hours,
            "priority_score": self.priority_score,
        }


@dataclass(frozen=True, slots=True)
class ExecutionHistory:
    """Execution logs of one subject aggregated against the plan in force."""

    subject_id: str
    avg_actual_hours: float
    recommended_hours: float
    data_points: int
    deviations: tuple[float, ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ExecutionHistory":
        deviations = payload.get("deviations")
        return cls(
            subject_id=str(payload.get("subject_id", "")),
            avg_actual_hours=_as_float(payload.get("avg_actual_hours"), 0.0),
            recommended_hours=_as_float(payload.get("recommended_hours"), 0.0),
            data_points=int(_as_float(payload.get("data_points"), 0)),
            deviations=(
                tuple(_as_float(value, 0.0) for value in deviations) if isinstance(deviations, list) else ()
            ),
        )

    @property
    def execution_rate(self) -> float:
        if self.recommended_hours <= 0:
            return 0.0
        return self.avg_actual_hours / self.recommended_hours

    def as_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "avg_actual_hours": self.avg_actual_hours,
            "recommended_hours": self.recommended_hours,
            "data_points": self.data_points,
            "deviations": list(self.deviations),
        }


@dataclass(frozen=True, slots=True)
class RiskAssessment:
    subject_id: str
    subject_name: str
    risk_score: float
    risk_level: str
    components: dict[str, float]
    explanation: str

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RiskAssessment":
        components = payload.get("components")
        return cls(
            subject_id=str(payload.get("subject_id", "")),
            subject_name=_as_str(payload.get("subject_name")),
            risk_score=min(1.0, max(0.0, _as_float(payload.get("risk_score"), 0.0))),
            risk_level=_as_str(payload.get("risk_level"), "low"),
            components=(
                {str(k): _as_float(v, 0.0) for k, v in components.items()}
                if isinstance(components, dict)
                else {}
            ),
            explanation=_as_str(payload.get("explanation")),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level,
            "components": dict(self.components),
            "explanation": self.explanation,
        }


@dataclass(frozen=True, slots=True)
class ConfidenceAssessment:
    subject_id: str
    confidence_score: float
    confidence_level: str
    factors: tuple[str, ...]
    explanation: str

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ConfidenceAssessment":
        factors = payload.get("factors")
        return cls(
            subject_id=str(payload.get("subject_id", "")),
            confidence_score=min(1.0, max(0.0, _as_float(payload.get("confidence_score"), 0.0))),
            confidence_level=_as_str(payload.get("confidence_level"), "low"),
            factors=tuple(str(f) for f in factors) if isinstance(factors, list) else (),
            explanation=_as_str(payload.get("explanation")),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "subject_id": self.subject_id,
            "confidence_score": self.confidence_score,
            "confidence_level": self.confidence_level,
            "factors": list(self.factors),
            "explanation": self.explanation,
        }


@dataclass(frozen=True, slots=True)
class ConstraintResult:
    constraint_id: str
    name: str
    kind: str
    satisfied: bool
    violation: bool
    severity: str
    message: str
    details: tuple[dict[str, Any], ...] = ()

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "constraint_id": self.constraint_id,
            "name": self.name,
            "kind": self.kind,
            "satisfied": self.satisfied,
            "violation": self.violation,
            "severity": self.severity,
            "message": self.message,
        }
        if self.details:
            payload["details"] = [dict(item) for item in self.details]
        return payload


@dataclass(frozen=True, slots=True)
class ConstraintEvaluation:
    hard: tuple[ConstraintResult, ...]
    soft: tuple[ConstraintResult, ...]

    @property
    def has_hard_violations(self) -> bool:
        return any(result.violation for result in self.hard)

    @property
    def has_soft_violations(self) -> bool:
        return any(result.violation for result in self.soft)

    @property
    def all_satisfied(self) -> bool:
        return not self.has_hard_violations

    def as_dict(self) -> dict[str, Any]:
        return {
            "hard": [result.as_dict() for result in self.hard],
            "soft": [result.as_dict() for result in self.soft],
            "all_satisfied": self.all_satisfied,
            "has_hard_violations": self.has_hard_violations,
            "has_soft_violations": self.has_soft_violations,
        }


@dataclass(frozen=True, slots=True)
class PrioritySnapshot:
    timestamp: str
    policy_id: str
    results: tuple[PriorityResult, ...]

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "PrioritySnapshot":
        results = payload.get("results")
        return cls(
            timestamp=_as_str(payload.get("timestamp")),
            policy_id=_as_str(payload.get("policy_id"), "balanced"),
            results=tuple(
                PriorityResult.from_dict(item) for item in results if isinstance(item, dict)
            ) if isinstance(results, list) else (),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "policy_id": self.policy_id,
            "results": [result.as_dict() for result in self.results],
        }


@dataclass(frozen=True, slots=True)
class RiskSnapshot:
    week_id: str
    assessments: tuple[RiskAssessment, ...]

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RiskSnapshot":
        assessments = payload.get("assessments")
        return cls(
            week_id=str(payload.get("week_id", "")),
            assessments=tuple(
                RiskAssessment.from_dict(item) for item in assessments if isinstance(item, dict)
            ) if isinstance(assessments, list) else (),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "week_id": self.week_id,
            "assessments": [item.as_dict() for item in self.assessments],
        }


@dataclass(frozen=True, slots=True)
class PlanSnapshot:
    """Plans that were in force during one week."""

    week_id: str
    plans: tuple[WeeklyPlan, ...]

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "PlanSnapshot":
        plans = payload.get("plans")
        return cls(
            week_id=str(payload.get("week_id", "")),
            plans=tuple(
                WeeklyPlan.from_dict(item) for item in plans if isinstance(item, dict)
            ) if isinstance(plans, list) else (),
        )

    def as_dict(self) -> dict[str, Any]:
        return {"week_id": self.week_id, "plans": [plan.as_dict() for plan in self.plans]}


@dataclass(frozen=True, slots=True)
class Insight:
    type: str
    subject: str
    tier: str
    message: str
    recommendation: str
    data: dict[str, float] = field(default_factory=dict)
    subject_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "subject": self.subject,
            "subject_id": self.subject_id,
            "tier": self.tier,
            "message": self.message,
            "recommendation": self.recommendation,
            "data": dict(self.data),
        }


@dataclass(frozen=True, slots=True)
class InsightReport:
    status: str
    weeks_analyzed: int
    raw: tuple[Insight, ...] = ()
    pattern: tuple[Insight, ...] = ()
    behavioral: tuple[Insight, ...] = ()

    def all(self) -> list[Insight]:
        return [*self.raw, *self.pattern, *self.behavioral]

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "weeks_analyzed": self.weeks_analyzed,
            "raw": [item.as_dict() for item in self.raw],
            "pattern": [item.as_dict() for item in self.pattern],
            "behavioral": [item.as_dict() for item in self.behavioral],
        }


@dataclass(frozen=True, slots=True)
class TrendResult:
    analysis: str
    trend: str
    slope: float
    message: str
    series: tuple[float, ...] = ()
    subject_id: str | None = None
    breakdown: tuple["TrendResult", ...] = ()
    extra: dict[str, float] = field(default_factory=dict)

    @property
    def sufficient(self) -> bool:
        return self.trend != "insufficient_data"

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "analysis": self.analysis,
            "trend": self.trend,
            "slope": self.slope,
            "message": self.message,
            "series": list(self.series),
        }
        if self.subject_id is not None:
            payload["subject_id"] = self.subject_id
        if self.breakdown:
            payload["breakdown"] = [item.as_dict() for item in self.breakdown]
        if self.extra:
            payload["extra"] = dict(self.extra)
        return payload
