from __future__ import annotations

import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from commitgate.diagnostics import DiagnosticEvent, GateStage, build_diagnostic_event
from commitgate.errors import GateErrorCode, build_environment_error
from commitgate.vcs import CandidateFile

from .base import GateContext, StageOutcome, finish_outcome, survivors

_TEMP_PREFIX = "commitgate-"


def write_reformatted_copy(content: bytes, *, original: Path, temp_dir: Path) -> Path:
    """Store reformatted output in a new uniquely named file that is kept for review."""
    try:
        fd, name = tempfile.mkstemp(
            prefix=f"{_TEMP_PREFIX}{original.stem}-",
            suffix=original.suffix,
            dir=temp_dir,
        )
    except OSError as exc:
        raise build_environment_error(
            GateErrorCode.E_FORMAT_TOOL_FAILED,
            f"unable to create temp file in '{temp_dir}': {exc}",
        ) from exc
    with os.fdopen(fd, "wb") as handle:
        handle.write(content)
    return Path(name)


def check_format_compliance(
    candidates: Sequence[CandidateFile],
    context: GateContext,
) -> StageOutcome:
    checked = survivors(candidates, GateStage.FORMAT, context)
    if not checked:
        return finish_outcome(GateStage.FORMAT, (), files_checked=0)

    runner = context.formatter_factory(context.config, context.repo_root)
    diagnostics: list[DiagnosticEvent] = []
    for candidate in checked:
        original = context.absolute_path(candidate)
        if runner.check(original):
            continue
        reformatted = write_reformatted_copy(
            runner.reformat(original),
            original=original,
            temp_dir=context.temp_dir,
        )
        diagnostics.append(
            build_diagnostic_event(
                code="E_FORMAT_NONCOMPLIANT",
                message=(
                    f"{candidate.path} does not follow code conventions; "
                    f"reformatted copy: {reformatted} original: {original}"
                ),
                path=candidate.path,
                witness={
                    "original": str(original),
                    "reformatted": str(reformatted),
                },
            )
        )
    return finish_outcome(GateStage.FORMAT, diagnostics, files_checked=len(checked))
