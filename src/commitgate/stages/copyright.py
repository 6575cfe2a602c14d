from __future__ import annotations

import re
from collections.abc import Sequence
from functools import cache
from typing import Final

from commitgate.diagnostics import DiagnosticEvent, GateStage, build_diagnostic_event
from commitgate.vcs import CandidateFile

from .base import (
    GateContext,
    StageOutcome,
    finish_outcome,
    read_text_lines,
    skipped_outcome,
    survivors,
)

_YEAR_RE: Final[re.Pattern[str]] = re.compile(r"\d{4}", re.ASCII)


@cache
def copyright_pattern(holder: str) -> re.Pattern[str]:
    """Compile the copyright-line pattern for ``holder``.

    Accepted shape: any prefix, ``Copyright``, one whitespace, an optional
    ``(c)`` plus at most one whitespace, one or more ``<year>,`` groups, at
    least one whitespace, the holder, and a period.
    """
    if not holder:
        raise ValueError("copyright holder must be non-empty")
    return re.compile(
        r"^.*Copyright\s(?:\(c\)\s?)?"
        r"(?P<years>(?:\d{4},\s*)*\d{4},)\s+"
        + re.escape(holder)
        + r"\..*$",
        re.ASCII,
    )


def copyright_years(match: re.Match[str]) -> tuple[int, ...]:
    return tuple(int(token) for token in _YEAR_RE.findall(match.group("years")))


def evaluate_copyright(
    lines: Sequence[str],
    *,
    pattern: re.Pattern[str],
    current_year: int,
) -> str | None:
    """Return the failing diagnostic code for ``lines``, or None when they pass."""
    found = False
    for line in lines:
        match = pattern.match(line)
        if match is None:
            continue
        found = True
        if current_year in copyright_years(match):
            return None
    if not found:
        return "E_COPYRIGHT_MISSING"
    return "E_COPYRIGHT_YEAR_STALE"


def check_copyright(
    candidates: Sequence[CandidateFile],
    context: GateContext,
) -> StageOutcome:
    if not context.config.copyright_enabled:
        return skipped_outcome(GateStage.COPYRIGHT, "no copyright holder configured")

    holder = context.config.copyright_holder
    assert holder is not None
    pattern = copyright_pattern(holder)
    checked = survivors(candidates, GateStage.COPYRIGHT, context)
    diagnostics: list[DiagnosticEvent] = []
    for candidate in checked:
        code = evaluate_copyright(
            read_text_lines(candidate, context),
            pattern=pattern,
            current_year=context.current_year,
        )
        if code is None:
            continue
        absolute = context.absolute_path(candidate)
        reason = (
            "missing/non-matching copyright line"
            if code == "E_COPYRIGHT_MISSING"
            else "copyright line missing current year"
        )
        diagnostics.append(
            build_diagnostic_event(
                code=code,
                message=f"{absolute}: {reason}",
                path=candidate.path,
                witness={
                    "current_year": context.current_year,
                    "holder": holder,
                },
            )
        )
    return finish_outcome(GateStage.COPYRIGHT, diagnostics, files_checked=len(checked))
