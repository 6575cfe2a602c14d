from __future__ import annotations

import json
from collections.abc import Iterable

from .models import DiagnosticEvent, GateStage, Severity

_SEVERITY_RANK: dict[Severity, int] = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
}

_STAGE_RANK: dict[GateStage, int] = {
    GateStage.SETUP: 0,
    GateStage.FILENAMES: 1,
    GateStage.FORMAT: 2,
    GateStage.LINE_LENGTH: 3,
    GateStage.TABS: 4,
    GateStage.TRAILING_WHITESPACE: 5,
    GateStage.LINE_ENDINGS: 6,
    GateStage.COPYRIGHT: 7,
}


def canonical_witness_json(witness: object | None) -> str:
    if witness is None:
        return ""
    return json.dumps(witness, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def _path_sort_key(path: str | None) -> tuple[int, str]:
    if path is None:
        return (1, "")
    return (0, path)


def _line_sort_key(line: int | None) -> tuple[int, int]:
    if line is None:
        return (1, 0)
    return (0, line)


def diagnostic_sort_key(
    event: DiagnosticEvent,
) -> tuple[int, int, tuple[int, str], tuple[int, int], str, str, str]:
    return (
        _SEVERITY_RANK[event.severity],
        _STAGE_RANK[event.stage],
        _path_sort_key(event.path),
        _line_sort_key(event.line),
        event.code,
        event.message,
        canonical_witness_json(event.witness),
    )


def sort_diagnostics(events: Iterable[DiagnosticEvent]) -> list[DiagnosticEvent]:
    return sorted(events, key=diagnostic_sort_key)
