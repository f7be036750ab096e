"""Proportional weekly hour allocation.

Single pass:
1) share of total available hours proportional to priority score,
2) cap at the subject's own available hours,
3) round half-up to one decimal.

Rule preserved: hours trimmed by the cap are not redistributed, so the total
recommended can stay below the total available.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from academic_copilot.models import PriorityResult, Subject, WeeklyPlan


def round_tenth(value: float) -> float:
    return math.floor(value * 10.0 + 0.5) / 10.0


def allocate_hours(
    priority_results: Sequence[PriorityResult],
    subjects: Sequence[Subject],
) -> list[WeeklyPlan]:
    """Return one plan per priority result, in the same order."""
    subjects_by_id = {subject.id: subject for subject in subjects}
    total_priority = sum(result.priority_score for result in priority_results)
    total_available = sum(subject.available_study_hours for subject in subjects)

    plans: list[WeeklyPlan] = []
    for result in priority_results:
        subject = subjects_by_id.get(result.subject_id)
        if subject is None:
            continue
        raw_hours = (
            result.priority_score / total_priority * total_available if total_priority > 0 else 0.0
        )
        capped = max(0.0, min(raw_hours, subject.available_study_hours))
        recommended = round_tenth(capped)
        if recommended > subject.available_study_hours:
            # Capacity is not a multiple of 0.1: round down instead.
            recommended = math.floor(capped * 10.0 + 1e-9) / 10.0
        plans.append(
            WeeklyPlan(
                subject_id=result.subject_id,
                subject_name=result.subject_name,
                recommended_hours=recommended,
                available_hours=subject.available_study_hours,
                priority_score=result.priority_score,
            )
        )
    return plans


def summarize_allocation(
    plans: Sequence[WeeklyPlan],
    subjects: Sequence[Subject],
    *,
    overload_tolerance: float = 1.1,
) -> dict[str, Any]:
    total_recommended = round_tenth(sum(plan.recommended_hours for plan in plans))
    total_available = sum(subject.available_study_hours for subject in subjects)
    return {
        "subjects_count": len(subjects),
        "total_recommended_hours": total_recommended,
        "total_available_hours": total_available,
        "unallocated_hours": round_tenth(max(0.0, total_available - total_recommended)),
        "overloaded": total_recommended > total_available * overload_tolerance,
    }
