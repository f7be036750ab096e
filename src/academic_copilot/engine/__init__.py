"""Decision engine: policies, scoring, allocation and scenarios.

The state-level pipeline lives in ``academic_copilot.engine.runner``.
"""

from .allocator import allocate_hours, round_tenth, summarize_allocation
from .history import build_execution_history
from .policies import POLICY_CATALOG, Policy, PolicyId, all_policies, get_policy
from .scenario import (
    ScenarioError,
    ScenarioResult,
    ScenarioSnapshot,
    create_snapshot,
    simulate_change_policy,
    simulate_drop_subject,
    simulate_modify_hours,
)
from .scoring import rank_priorities, score_subject

__all__ = [
    "POLICY_CATALOG",
    "Policy",
    "PolicyId",
    "ScenarioError",
    "ScenarioResult",
    "ScenarioSnapshot",
    "all_policies",
    "allocate_hours",
    "build_execution_history",
    "create_snapshot",
    "get_policy",
    "rank_priorities",
    "round_tenth",
    "score_subject",
    "simulate_change_policy",
    "simulate_drop_subject",
    "simulate_modify_hours",
    "summarize_allocation",
]
