"""Policy-driven priority scoring and deterministic ranking."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from academic_copilot.models import ExecutionHistory, PriorityResult, Subject
from academic_copilot.reporting.explain import format_priority_explanation

from .policies import Policy

EXECUTION_RATE_CAP = 1.0
FACTOR_SCALE = 5.0


@dataclass(frozen=True, slots=True)
class SubjectScore:
    priority_score: float
    components: dict[str, float]
    explanation: str


def normalized_credits(credit_weight: float) -> float:
    return credit_weight / 10.0 * FACTOR_SCALE


def normalized_difficulty(difficulty: float) -> float:
    # Easier subjects contribute more.
    return 6.0 - difficulty


def score_subject(
    subject: Subject,
    policy: Policy,
    execution: ExecutionHistory | None = None,
) -> SubjectScore:
    """Score one subject under ``policy``.

    Formula:
    - interest * w_interest
    - (credit_weight / 10 * 5) * w_credits
    - (6 - difficulty) * w_difficulty
    - min(avg_actual / recommended, 1) * 5 * w_execution, only for policies
      that weigh execution and only when history exists
    """

    w = policy.weights
    execution_rate: float | None = None
    execution_component = 0.0
    if w.execution > 0 and execution is not None:
        execution_rate = min(execution.execution_rate, EXECUTION_RATE_CAP)
        execution_component = execution_rate * FACTOR_SCALE

    components = {
        "interest": subject.interest * w.interest,
        "credits": normalized_credits(subject.credit_weight) * w.credits,
        "difficulty": normalized_difficulty(subject.difficulty) * w.difficulty,
        "execution": execution_component * w.execution,
    }
    priority_score = sum(components.values())

    return SubjectScore(
        priority_score=priority_score,
        components=components,
        explanation=format_priority_explanation(
            subject, policy, priority_score, components, execution_rate
        ),
    )


def rank_priorities(
    subjects: Sequence[Subject],
    policy: Policy,
    history: Mapping[str, ExecutionHistory] | None = None,
) -> list[PriorityResult]:
    """Score every subject and return the complete ranked list.

    Ranks run 1..N by descending score; equal scores keep the input order.
    """

    history = history or {}
    scored = [(subject, score_subject(subject, policy, history.get(subject.id))) for subject in subjects]
    ordered = sorted(scored, key=lambda item: -item[1].priority_score)

    return [
        PriorityResult(
            subject_id=subject.id,
            subject_name=subject.name,
            priority_score=score.priority_score,
            components=score.components,
            rank=rank,
            explanation=score.explanation,
            policy_id=policy.id.value,
        )
        for rank, (subject, score) in enumerate(ordered, start=1)
    ]
