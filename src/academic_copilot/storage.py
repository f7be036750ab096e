"""Key/value persistence for the application state.

The store is opaque: ``get`` and ``set`` move JSON-serializable values by
key. Loading never requires a valid store; every missing or corrupt entry is
replaced with an empty default and noted in the normalization report.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from academic_copilot.engine.policies import DEFAULT_POLICY_ID, PolicyId
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
from academic_copilot.normalization import NormalizationReport
from academic_copilot.state import EngineState
from academic_copilot.weeks import week_id, week_sort_key

logger = logging.getLogger(__name__)

RECORD_KEYS: dict[str, Callable[[dict[str, Any]], Any]] = {
    "subjects": Subject.from_dict,
    "priority_results": PriorityResult.from_dict,
    "weekly_plans": WeeklyPlan.from_dict,
    "execution_logs": WeeklyExecutionLog.from_dict,
    "historical_priorities": PrioritySnapshot.from_dict,
    "risk_assessments": RiskAssessment.from_dict,
    "risk_history": RiskSnapshot.from_dict,
    "plan_history": PlanSnapshot.from_dict,
    "confidence_data": ConfidenceAssessment.from_dict,
    "execution_history": ExecutionHistory.from_dict,
}
STORAGE_KEYS: tuple[str, ...] = (*RECORD_KEYS, "current_policy", "current_week")


def read_json(path: str | Path) -> dict[str, Any]:
    """Read a JSON file and return a dictionary payload."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"JSON root must be an object: {path}")
    return payload


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    """Write a JSON payload with stable formatting."""
    Path(path).write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )


class Store(Protocol):
    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileStore:
    """A store backed by one JSON object on disk; every ``set`` rewrites the file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._data is None:
            try:
                self._data = read_json(self.path)
            except FileNotFoundError:
                self._data = {}
            except ValueError as exc:
                # json.JSONDecodeError is a ValueError too.
                logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
                self._data = {}
        return self._data

    def get(self, key: str) -> Any:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        write_json(self.path, data)


def _load_records(store: Store, key: str, report: NormalizationReport) -> tuple[Any, ...]:
    raw = store.get(key)
    path = f"$.{key}"
    if raw is None:
        report.add_info(code="INFO_DEFAULT_APPLIED", message=f"{key} missing; using []", field_path=path)
        return ()
    if not isinstance(raw, list):
        logger.warning("Stored %s is not a list (%s); using []", key, type(raw).__name__)
        report.add_info(code="INFO_CORRUPT_ENTRY", message=f"{key} is not a list; using []", field_path=path)
        return ()

    parse = RECORD_KEYS[key]
    records = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning("Skipping corrupt %s item at index %d", key, index)
            report.add_info(
                code="INFO_CORRUPT_ENTRY",
                message=f"{key}[{index}] is not an object; skipped",
                field_path=f"{path}[{index}]",
            )
            continue
        records.append(parse(item))
    return tuple(records)


def load_state(store: Store, report: NormalizationReport | None = None) -> EngineState:
    report = report if report is not None else NormalizationReport()
    records = {key: _load_records(store, key, report) for key in RECORD_KEYS}
    records["execution_logs"] = tuple(
        sorted(records["execution_logs"], key=lambda log: week_sort_key(log.week_id))
    )

    policy = store.get("current_policy")
    if not isinstance(policy, str) or policy not in {item.value for item in PolicyId}:
        report.add_info(
            code="INFO_DEFAULT_APPLIED",
            message=f"current_policy {policy!r} unavailable; using {DEFAULT_POLICY_ID.value}",
            field_path="$.current_policy",
        )
        policy = DEFAULT_POLICY_ID.value

    current_week = store.get("current_week")
    if not isinstance(current_week, str) or not current_week:
        current_week = week_id()
        report.add_info(
            code="INFO_DEFAULT_APPLIED",
            message=f"current_week missing; using {current_week}",
            field_path="$.current_week",
        )

    return EngineState(**records, current_policy=policy, current_week=current_week)


def save_state(store: Store, state: EngineState) -> None:
    for key, value in state.as_dict().items():
        store.set(key, value)
