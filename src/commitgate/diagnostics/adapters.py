from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypeVar

from .catalog import CANONICAL_DIAGNOSTIC_CATALOG
from .models import DiagnosticEvent, GateStage, Severity
from .sort import sort_diagnostics


@dataclass(frozen=True, slots=True)
class LineViolation:
    """A single rule hit inside one file, before it becomes a diagnostic."""

    code: str
    path: str
    line: int
    message: str


def build_diagnostic_event(  # noqa: PLR0913
    *,
    code: str,
    message: str,
    path: str | None = None,
    line: int | None = None,
    witness: object | None = None,
    severity: Severity | None = None,
    stage: GateStage | None = None,
    suggested_action: str | None = None,
) -> DiagnosticEvent:
    if not code:
        raise ValueError("diagnostic code must be non-empty")
    if not message:
        raise ValueError("diagnostic message must be non-empty")
    if path is not None and not path:
        raise ValueError("diagnostic path must be non-empty when provided")

    catalog_entry = CANONICAL_DIAGNOSTIC_CATALOG.get(code)
    resolved_severity = (
        severity
        if severity is not None
        else _require_catalog_field(
            code=code,
            field_name="severity",
            value=(None if catalog_entry is None else catalog_entry.severity),
        )
    )
    resolved_stage = (
        stage
        if stage is not None
        else _require_catalog_field(
            code=code,
            field_name="stage",
            value=(None if catalog_entry is None else catalog_entry.stage),
        )
    )
    resolved_action = (
        suggested_action
        if suggested_action is not None
        else _require_catalog_field(
            code=code,
            field_name="suggested_action",
            value=(None if catalog_entry is None else catalog_entry.suggested_action),
        )
    )
    if not resolved_action:
        raise ValueError("diagnostic suggested_action must be non-empty")

    return DiagnosticEvent(
        code=code,
        severity=resolved_severity,
        message=message,
        suggested_action=resolved_action,
        stage=resolved_stage,
        path=path,
        line=line,
        witness=witness,
    )


def adapt_line_violation(violation: LineViolation) -> DiagnosticEvent:
    return build_diagnostic_event(
        code=violation.code,
        message=f"{violation.path}:{violation.line}: {violation.message}",
        path=violation.path,
        line=violation.line,
    )


def adapt_line_violations(violations: Iterable[LineViolation]) -> tuple[DiagnosticEvent, ...]:
    return tuple(sort_diagnostics(adapt_line_violation(item) for item in violations))


T = TypeVar("T")


def _require_catalog_field(*, code: str, field_name: str, value: T | None) -> T:
    if value is None:
        raise ValueError(
            f"diagnostic code '{code}' is not in canonical catalog; explicit {field_name} is required"
        )
    return value
