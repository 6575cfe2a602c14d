from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Final

from .diagnostics import CANONICAL_DIAGNOSTIC_CATALOG, DiagnosticEvent
from .errors import GateError
from .pipeline import RunOutcome
from .stages import STAGES, StageOutcome, StageSpec

REPORT_SCHEMA_ID: Final[str] = "commitgate/run_report_v1"
REPORT_SCHEMA_VERSION: Final[int] = 1
RESTAGE_REMINDER: Final[str] = (
    "commit blocked: fix the problems above, re-stage the corrected files "
    "with 'git add', then commit again"
)


def format_stage_header(index: int, spec: StageSpec, total: int = len(STAGES)) -> str:
    return f"== [{index + 1}/{total}] {spec.title} =="


def format_diagnostic(event: DiagnosticEvent) -> str:
    line = (
        "DIAG"
        f" severity={event.severity}"
        f" stage={event.stage}"
        f" code={event.code}"
    )
    if event.path is not None:
        line += f" path={event.path}"
    if event.line is not None:
        line += f" line={event.line}"
    return line + f" message={event.message}"


def format_stage_status(spec: StageSpec, outcome: StageOutcome) -> str:
    if outcome.state == "skipped":
        return f"SKIP {spec.title}: {outcome.notice}"
    if outcome.state == "passed":
        return f"PASS {spec.title} ({outcome.files_checked} files checked)"
    count = len(outcome.diagnostics)
    noun = "violation" if count == 1 else "violations"
    return f"FAIL {spec.title} ({count} {noun})"


def stage_section_lines(index: int, spec: StageSpec, outcome: StageOutcome) -> list[str]:
    lines = [format_stage_header(index, spec)]
    lines.extend(format_diagnostic(event) for event in outcome.diagnostics)
    lines.append(format_stage_status(spec, outcome))
    return lines


def summary_lines(result: RunOutcome) -> list[str]:
    if result.passed:
        return ["commit gate passed"]
    failed = ", ".join(str(outcome.stage) for outcome in result.failed_stages)
    return [f"commit gate failed: {failed}", RESTAGE_REMINDER]


def fatal_suggested_action(error: GateError) -> str:
    return CANONICAL_DIAGNOSTIC_CATALOG[error.detail.code].suggested_action


def fatal_lines(error: GateError) -> list[str]:
    detail = error.detail
    line = f"FATAL code={detail.code}"
    if detail.path is not None:
        line += f" path={detail.path}"
    return [
        line + f" message={detail.message}",
        f"FATAL action={fatal_suggested_action(error)}",
        "commit blocked: the gate could not run",
    ]


def _stage_payload(spec: StageSpec, outcome: StageOutcome) -> dict[str, object]:
    return {
        "stage": str(outcome.stage),
        "title": spec.title,
        "state": outcome.state,
        "notice": outcome.notice,
        "files_checked": outcome.files_checked,
        "diagnostics": [
            event.model_dump(mode="json", exclude_none=True) for event in outcome.diagnostics
        ],
    }


def build_json_report(
    *,
    repo_root: str,
    result: RunOutcome | None,
    specs: Sequence[StageSpec] = STAGES,
    error: GateError | None = None,
) -> str:
    stages: list[dict[str, object]] = []
    if result is not None:
        stages = [
            _stage_payload(spec, outcome)
            for spec, outcome in zip(specs[: len(result.outcomes)], result.outcomes, strict=True)
        ]
    passed = error is None and result is not None and result.passed
    payload: dict[str, object] = {
        "schema": REPORT_SCHEMA_ID,
        "schema_version": REPORT_SCHEMA_VERSION,
        "repo_root": repo_root,
        "status": "pass" if passed else "fail",
        "exit_code": 0 if passed else 1,
        "stages": stages,
    }
    if error is not None:
        payload["fatal"] = {
            "code": error.detail.code,
            "message": error.detail.message,
            "path": error.detail.path,
            "suggested_action": fatal_suggested_action(error),
        }
    return json.dumps(payload, ensure_ascii=True, separators=(",", ":"))
