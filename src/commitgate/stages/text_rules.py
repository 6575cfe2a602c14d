from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeAlias

from commitgate.diagnostics import GateStage, LineViolation, adapt_line_violations
from commitgate.vcs import CandidateFile

from .base import GateContext, StageOutcome, finish_outcome, read_text_lines, survivors

LineRule: TypeAlias = Callable[[str], str | None]


def _scan_lines(
    candidates: Sequence[CandidateFile],
    context: GateContext,
    *,
    stage: GateStage,
    code: str,
    rule: LineRule,
) -> StageOutcome:
    violations: list[LineViolation] = []
    for candidate in candidates:
        for line_number, line in enumerate(read_text_lines(candidate, context), start=1):
            message = rule(line)
            if message is not None:
                violations.append(
                    LineViolation(code=code, path=candidate.path, line=line_number, message=message)
                )
    return finish_outcome(stage, adapt_line_violations(violations), files_checked=len(candidates))


def is_makefile(candidate: CandidateFile) -> bool:
    return "makefile" in candidate.basename.lower()


def check_line_length(
    candidates: Sequence[CandidateFile],
    context: GateContext,
) -> StageOutcome:
    limit = context.config.max_line_length

    def rule(line: str) -> str | None:
        if len(line) > limit:
            return f"line is {len(line)} characters long (limit {limit})"
        return None

    return _scan_lines(
        survivors(candidates, GateStage.LINE_LENGTH, context),
        context,
        stage=GateStage.LINE_LENGTH,
        code="E_LINE_TOO_LONG",
        rule=rule,
    )


def check_tab_characters(
    candidates: Sequence[CandidateFile],
    context: GateContext,
) -> StageOutcome:
    # Makefiles need tabs; they are skipped before any other exemption applies.
    eligible = [candidate for candidate in candidates if not is_makefile(candidate)]
    return _scan_lines(
        survivors(eligible, GateStage.TABS, context),
        context,
        stage=GateStage.TABS,
        code="E_TAB_CHARACTER",
        rule=lambda line: "tab character" if "\t" in line else None,
    )


def check_trailing_whitespace(
    candidates: Sequence[CandidateFile],
    context: GateContext,
) -> StageOutcome:
    return _scan_lines(
        survivors(candidates, GateStage.TRAILING_WHITESPACE, context),
        context,
        stage=GateStage.TRAILING_WHITESPACE,
        code="E_TRAILING_WHITESPACE",
        rule=lambda line: "trailing whitespace" if line.endswith((" ", "\t")) else None,
    )


def check_line_endings(
    candidates: Sequence[CandidateFile],
    context: GateContext,
) -> StageOutcome:
    return _scan_lines(
        survivors(candidates, GateStage.LINE_ENDINGS, context),
        context,
        stage=GateStage.LINE_ENDINGS,
        code="E_DOS_LINE_ENDING",
        rule=lambda line: "carriage return (non-Unix line ending)" if "\r" in line else None,
    )
