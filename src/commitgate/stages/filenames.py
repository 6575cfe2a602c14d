from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from commitgate.diagnostics import GateStage, build_diagnostic_event
from commitgate.vcs import CandidateFile, ChangeStatus

from .base import GateContext, StageOutcome, finish_outcome, survivors

_PRINTABLE_MIN: Final[int] = 0x20
_PRINTABLE_MAX: Final[int] = 0x7E


def has_non_printable_ascii(raw_path: bytes) -> bool:
    return any(byte < _PRINTABLE_MIN or byte > _PRINTABLE_MAX for byte in raw_path)


def check_filename_encoding(
    candidates: Sequence[CandidateFile],
    context: GateContext,
) -> StageOutcome:
    added = [
        candidate
        for candidate in survivors(candidates, GateStage.FILENAMES, context)
        if candidate.status is ChangeStatus.ADDED
    ]
    offending = sum(1 for candidate in added if has_non_printable_ascii(candidate.raw_path))
    if not offending:
        return finish_outcome(GateStage.FILENAMES, (), files_checked=len(added))

    diagnostic = build_diagnostic_event(
        code="E_FILENAME_NON_ASCII",
        message=(
            "attempt to add a file name with characters outside printable ASCII; "
            "such names break on other platforms"
        ),
        witness={"offending_count": offending},
    )
    return finish_outcome(GateStage.FILENAMES, (diagnostic,), files_checked=len(added))
