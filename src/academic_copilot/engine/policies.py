"""Decision policies: named weight vectors for priority scoring."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class PolicyId(str, Enum):
    BALANCED = "balanced"
    EXAM_FOCUSED = "exam_focused"
    RISK_AVERSE = "risk_averse"
    EXECUTION_AWARE = "execution_aware"


@dataclass(frozen=True, slots=True)
class PolicyWeights:
    interest: float
    credits: float
    difficulty: float
    execution: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {
            "interest": self.interest,
            "credits": self.credits,
            "difficulty": self.difficulty,
            "execution": self.execution,
        }


@dataclass(frozen=True, slots=True)
class Policy:
    id: PolicyId
    name: str
    description: str
    weights: PolicyWeights
    rationale: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.value,
            "name": self.name,
            "description": self.description,
            "weights": self.weights.as_dict(),
            "rationale": self.rationale,
        }


POLICY_CATALOG: Mapping[PolicyId, Policy] = MappingProxyType(
    {
        PolicyId.BALANCED: Policy(
            id=PolicyId.BALANCED,
            name="Balanced Policy",
            description="Balances all factors, suitable for general academic planning.",
            weights=PolicyWeights(interest=0.4, credits=0.3, difficulty=0.3),
            rationale=(
                "Gives comparable importance to interest, credit weight and difficulty. "
                "Default for users who want a neutral approach to prioritization."
            ),
        ),
        PolicyId.EXAM_FOCUSED: Policy(
            id=PolicyId.EXAM_FOCUSED,
            name="Exam-Focused Policy",
            description="Prioritizes high-credit subjects, suitable for exam preparation.",
            weights=PolicyWeights(interest=0.2, credits=0.5, difficulty=0.3),
            rationale=(
                "Emphasizes credit weight because exams carry most of the final grade. "
                "Interest counts less since exam preparation is needed regardless of it."
            ),
        ),
        PolicyId.RISK_AVERSE: Policy(
            id=PolicyId.RISK_AVERSE,
            name="Risk-Averse Policy",
            description="Prioritizes manageable difficulty and high interest.",
            weights=PolicyWeights(interest=0.5, credits=0.2, difficulty=0.3),
            rationale=(
                "Favors subjects with lower difficulty and higher interest to reduce the "
                "chance of poor performance while juggling demanding commitments."
            ),
        ),
        PolicyId.EXECUTION_AWARE: Policy(
            id=PolicyId.EXECUTION_AWARE,
            name="Execution-Aware Policy",
            description="Adapts recommendations to historical execution rates.",
            weights=PolicyWeights(interest=0.3, credits=0.3, difficulty=0.2, execution=0.2),
            rationale=(
                "Subjects where past recommendations were met get more priority, "
                "reflecting a realistic view of capacity."
            ),
        ),
    }
)

DEFAULT_POLICY_ID = PolicyId.BALANCED


def get_policy(policy_id: str | PolicyId | None) -> Policy:
    """Return the policy for ``policy_id``; unknown ids fall back to balanced."""
    try:
        key = PolicyId(policy_id)
    except ValueError:
        return POLICY_CATALOG[DEFAULT_POLICY_ID]
    return POLICY_CATALOG[key]


def all_policies() -> list[Policy]:
    return list(POLICY_CATALOG.values())
