"""Build CLI reports."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from academic_copilot.normalization import NormalizationIssue, NormalizationReport


def build_error_report(
    issues: Sequence[NormalizationIssue],
    code: str = "invalid_input",
    report: NormalizationReport | None = None,
) -> dict[str, Any]:
    """Return a JSON-serializable error report."""
    payload: dict[str, Any] = {
        "status": "error",
        "error": {
            "code": code,
            "count": len(issues),
            "details": [
                {"code": issue.code, "message": issue.message, "path": issue.field_path}
                for issue in issues
            ],
        },
    }
    if report is not None:
        payload["normalization_report"] = report.as_dict()
    return payload


def build_success_report(command: str, result: dict[str, Any], report: NormalizationReport) -> dict[str, Any]:
    """Return a JSON-serializable success report."""
    generated_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return {
        "status": "ok",
        "command": command,
        "generated_at": generated_at,
        "result": result,
        "normalization_report": report.as_dict(),
    }
