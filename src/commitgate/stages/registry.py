from __future__ import annotations

from commitgate.diagnostics import GateStage

from .base import StageSpec
from .copyright import check_copyright
from .filenames import check_filename_encoding
from .formatting import check_format_compliance
from .text_rules import (
    check_line_endings,
    check_line_length,
    check_tab_characters,
    check_trailing_whitespace,
)

STAGES: tuple[StageSpec, ...] = (
    StageSpec(GateStage.FILENAMES, "filename encoding", check_filename_encoding),
    StageSpec(GateStage.FORMAT, "code conventions", check_format_compliance),
    StageSpec(GateStage.LINE_LENGTH, "line length", check_line_length),
    StageSpec(GateStage.TABS, "tab characters", check_tab_characters),
    StageSpec(GateStage.TRAILING_WHITESPACE, "trailing whitespace", check_trailing_whitespace),
    StageSpec(GateStage.LINE_ENDINGS, "line endings", check_line_endings),
    StageSpec(GateStage.COPYRIGHT, "copyright header", check_copyright),
)


def stage_spec(stage: GateStage) -> StageSpec:
    for spec in STAGES:
        if spec.stage is stage:
            return spec
    raise KeyError(f"no registered stage for '{stage}'")
