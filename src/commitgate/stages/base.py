from __future__ import annotations

import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Literal, TypeAlias

from commitgate.config import GateConfig
from commitgate.diagnostics import DiagnosticEvent, GateStage, sort_diagnostics
from commitgate.errors import GateErrorCode, build_environment_error
from commitgate.exemptions import is_exempt
from commitgate.formatter import FormatterRunner, build_formatter_runner
from commitgate.vcs import CandidateFile

StageState: TypeAlias = Literal["skipped", "passed", "failed"]
FormatterFactory: TypeAlias = Callable[[GateConfig, Path], FormatterRunner]


@dataclass(frozen=True, slots=True)
class GateContext:
    config: GateConfig
    repo_root: Path
    current_year: int = field(default_factory=lambda: date.today().year)
    formatter_factory: FormatterFactory = build_formatter_runner

    @property
    def temp_dir(self) -> Path:
        if self.config.temp_dir:
            return Path(self.config.temp_dir)
        return Path(tempfile.gettempdir())

    def absolute_path(self, candidate: CandidateFile) -> Path:
        return candidate.absolute_path(self.repo_root)


@dataclass(frozen=True, slots=True)
class StageOutcome:
    stage: GateStage
    state: StageState
    diagnostics: tuple[DiagnosticEvent, ...] = ()
    notice: str | None = None
    files_checked: int = 0

    def __post_init__(self) -> None:
        if self.state == "failed" and not self.diagnostics:
            raise ValueError(f"failed stage '{self.stage}' must carry diagnostics")

    @property
    def passed(self) -> bool:
        return self.state != "failed"


StageCheck: TypeAlias = Callable[[Sequence[CandidateFile], GateContext], StageOutcome]


@dataclass(frozen=True, slots=True)
class StageSpec:
    stage: GateStage
    title: str
    check: StageCheck


def skipped_outcome(stage: GateStage, notice: str) -> StageOutcome:
    return StageOutcome(stage=stage, state="skipped", notice=notice)


def finish_outcome(
    stage: GateStage,
    diagnostics: Sequence[DiagnosticEvent],
    *,
    files_checked: int,
) -> StageOutcome:
    ordered = tuple(sort_diagnostics(diagnostics))
    return StageOutcome(
        stage=stage,
        state="failed" if ordered else "passed",
        diagnostics=ordered,
        files_checked=files_checked,
    )


def survivors(
    candidates: Sequence[CandidateFile],
    stage: GateStage,
    context: GateContext,
) -> list[CandidateFile]:
    return [
        candidate
        for candidate in candidates
        if not is_exempt(candidate, stage, context.config, context.repo_root)
    ]


def read_text_lines(candidate: CandidateFile, context: GateContext) -> list[str]:
    """Return the file's lines without their ``\\n`` terminators.

    Undecodable bytes survive as surrogate escapes, so each one still counts as
    a single character.
    """
    path = context.repo_root / candidate.path
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise build_environment_error(
            GateErrorCode.E_FILE_READ_FAILED,
            f"unable to read staged file '{path}': {exc}",
            path=candidate.path,
        ) from exc
    text = raw.decode("utf-8", errors="surrogateescape")
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines
