"""Issues collected while normalizing stored state and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class NormalizationIssue:
    """One problem found at a field path; never fatal on its own."""

    code: str
    message: str
    field_path: str
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "field_path": self.field_path,
        }
        payload.update(self.extra)
        return payload


@dataclass(slots=True)
class NormalizationReport:
    """Aggregated errors and infos (no short-circuit)."""

    errors: list[NormalizationIssue] = field(default_factory=list)
    infos: list[NormalizationIssue] = field(default_factory=list)

    def add_error(
        self,
        *,
        code: str,
        message: str,
        field_path: str,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.errors.append(
            NormalizationIssue(code=code, message=message, field_path=field_path, extra=extra or {})
        )

    def add_info(
        self,
        *,
        code: str,
        message: str,
        field_path: str,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.infos.append(
            NormalizationIssue(code=code, message=message, field_path=field_path, extra=extra or {})
        )

    def extend(self, other: "NormalizationReport") -> None:
        self.errors.extend(other.errors)
        self.infos.extend(other.infos)

    def as_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "errors": [issue.as_dict() for issue in self.errors],
            "infos": [issue.as_dict() for issue in self.infos],
        }
