"""CLI entrypoint for academic-copilot."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from academic_copilot.engine.policies import PolicyId
from academic_copilot.engine.runner import run_calculation, run_insights, run_scenario, run_trends
from academic_copilot.engine.scenario import CHANGE_POLICY, DROP_SUBJECT, MODIFY_HOURS
from academic_copilot.logging_config import configure_logging
from academic_copilot.metrics.confidence import confidence_disclaimer
from academic_copilot.models import WeeklyExecutionLog
from academic_copilot.normalization import NormalizationIssue, NormalizationReport, resolve_engine_config
from academic_copilot.reporting import (
    build_error_report,
    build_success_report,
    format_constraint_summary,
    format_scenario_summary,
)
from academic_copilot.state import record_execution_log, set_policy
from academic_copilot.storage import JsonFileStore, load_state, read_json, save_state, write_json

logger = logging.getLogger(__name__)


def _fail(output_path: str, code: str, issues: list[NormalizationIssue], report: NormalizationReport) -> int:
    write_json(output_path, build_error_report(issues, code=code, report=report))
    logger.info("Command failed with %s (%d issue(s))", code, len(issues))
    return 2


def _read_input(path: str, field_path: str) -> tuple[dict[str, Any] | None, NormalizationIssue | None]:
    try:
        return read_json(path), None
    except FileNotFoundError:
        return None, NormalizationIssue(code="file_not_found", message=f"File not found: {path}", field_path=field_path)
    except ValueError as exc:
        return None, NormalizationIssue(code="invalid_json", message=str(exc), field_path=field_path)


def run_calculate_command(
    state_path: str, output_path: str, policy_id: str | None = None, config_path: str | None = None
) -> int:
    report = NormalizationReport()
    store = JsonFileStore(state_path)
    state = load_state(store, report)

    config_source: Any = None
    if config_path:
        config_source, issue = _read_input(config_path, "$.config")
        if issue is not None:
            return _fail(output_path, "config_read_error", [issue], report)
    config_report = NormalizationReport()
    config = resolve_engine_config(config_source, config_report)
    report.extend(config_report)
    if config_report.errors:
        return _fail(output_path, "invalid_config", list(config_report.errors), report)

    if policy_id is not None:
        if policy_id not in {item.value for item in PolicyId}:
            report.add_info(
                code="INFO_DEFAULT_APPLIED",
                message=f"Unknown policy {policy_id!r}; using balanced",
                field_path="$.policy",
            )
        state = set_policy(state, policy_id)

    if not state.subjects:
        issue = NormalizationIssue(code="no_subjects", message="Add subjects before calculating.", field_path="$.subjects")
        return _fail(output_path, "no_subjects", [issue], report)

    outcome = run_calculation(state, config)
    save_state(store, outcome.state)

    result = outcome.as_dict()
    result["constraint_summary"] = format_constraint_summary(outcome.constraints)
    disclaimers = {item.subject_id: confidence_disclaimer(item) for item in outcome.state.confidence_data}
    result["disclaimers"] = {subject_id: text for subject_id, text in disclaimers.items() if text}
    write_json(output_path, build_success_report("calculate", result, report))
    return 0


def run_log_command(state_path: str, input_path: str, output_path: str) -> int:
    report = NormalizationReport()
    store = JsonFileStore(state_path)
    state = load_state(store, report)

    payload, issue = _read_input(input_path, "$.log")
    if issue is not None:
        return _fail(output_path, "input_read_error", [issue], report)

    log = WeeklyExecutionLog.from_dict(payload)
    if not log.week_id:
        log = WeeklyExecutionLog(week_id=state.current_week, entries=log.entries, timestamp=log.timestamp)
        report.add_info(
            code="INFO_DEFAULT_APPLIED",
            message=f"week_id missing; using {state.current_week}",
            field_path="$.log.week_id",
        )
    if not log.timestamp:
        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        log = WeeklyExecutionLog(week_id=log.week_id, entries=log.entries, timestamp=timestamp)

    known = {subject.id for subject in state.subjects}
    for index, entry in enumerate(log.entries):
        if entry.subject_id not in known:
            report.add_error(
                code="UNKNOWN_SUBJECT",
                message=f"Log entry references unknown subject {entry.subject_id!r}",
                field_path=f"$.log.entries[{index}].subject_id",
            )
    if report.errors:
        return _fail(output_path, "invalid_log", list(report.errors), report)

    state = record_execution_log(state, log)
    save_state(store, state)
    write_json(output_path, build_success_report("log", log.as_dict(), report))
    return 0


def run_scenario_command(state_path: str, output_path: str, scenario_type: str, **params: Any) -> int:
    report = NormalizationReport()
    state = load_state(JsonFileStore(state_path), report)
    outcome = run_scenario(state, scenario_type, **params)
    if not outcome.ok:
        issue = NormalizationIssue(code=outcome.code, message=outcome.message, field_path="$.scenario")
        return _fail(output_path, "scenario_error", [issue], report)

    result = outcome.as_dict()
    result["summary_text"] = format_scenario_summary(outcome)
    write_json(output_path, build_success_report("scenario", result, report))
    return 0


def run_insights_command(state_path: str, output_path: str) -> int:
    report = NormalizationReport()
    state = load_state(JsonFileStore(state_path), report)
    write_json(output_path, build_success_report("insights", run_insights(state).as_dict(), report))
    return 0


def run_trends_command(state_path: str, output_path: str) -> int:
    report = NormalizationReport()
    state = load_state(JsonFileStore(state_path), report)
    trends = {name: result.as_dict() for name, result in run_trends(state).items()}
    write_json(output_path, build_success_report("trends", trends, report))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="academic-copilot", description="Study-time decision engine CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def with_io(name: str, help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--state", required=True, help="Path to the state JSON file")
        sub.add_argument("--output", required=True, help="Path to the report JSON file")
        return sub

    calculate = with_io("calculate", "Recompute priorities, plans, risk and confidence")
    calculate.add_argument("--policy", help="Policy id to switch to before calculating")
    calculate.add_argument("--config", help="Path to engine config overrides JSON")

    log = with_io("log", "Record a weekly execution log")
    log.add_argument("--input", required=True, help="Path to the weekly log JSON")

    scenario = with_io("scenario", "Simulate a what-if scenario without touching the state")
    kinds = scenario.add_subparsers(dest="scenario", required=True)
    drop = kinds.add_parser("drop", help="Drop one subject")
    drop.add_argument("--subject", required=True)
    modify = kinds.add_parser("modify", help="Change one subject's available hours")
    modify.add_argument("--subject", required=True)
    modify.add_argument("--hours", required=True, type=float)
    policy = kinds.add_parser("policy", help="Switch to another policy")
    policy.add_argument("--policy", required=True)

    with_io("insights", "Derive tiered insights from execution logs")
    with_io("trends", "Analyze multi-week trends")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "calculate":
        return run_calculate_command(args.state, args.output, args.policy, args.config)
    if args.command == "log":
        return run_log_command(args.state, args.input, args.output)
    if args.command == "scenario":
        if args.scenario == "drop":
            return run_scenario_command(args.state, args.output, DROP_SUBJECT, subject_id=args.subject)
        if args.scenario == "modify":
            return run_scenario_command(
                args.state, args.output, MODIFY_HOURS, subject_id=args.subject, new_hours=args.hours
            )
        return run_scenario_command(args.state, args.output, CHANGE_POLICY, policy_id=args.policy)
    if args.command == "insights":
        return run_insights_command(args.state, args.output)
    if args.command == "trends":
        return run_trends_command(args.state, args.output)

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
