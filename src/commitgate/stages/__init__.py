from .base import (
    GateContext,
    StageOutcome,
    StageSpec,
    StageState,
    finish_outcome,
    read_text_lines,
    skipped_outcome,
    survivors,
)
from .copyright import check_copyright, copyright_pattern, evaluate_copyright
from .filenames import check_filename_encoding, has_non_printable_ascii
from .formatting import check_format_compliance, write_reformatted_copy
from .registry import STAGES, stage_spec
from .text_rules import (
    check_line_endings,
    check_line_length,
    check_tab_characters,
    check_trailing_whitespace,
    is_makefile,
)

__all__ = [
    "GateContext",
    "STAGES",
    "StageOutcome",
    "StageSpec",
    "StageState",
    "check_copyright",
    "check_filename_encoding",
    "check_format_compliance",
    "check_line_endings",
    "check_line_length",
    "check_tab_characters",
    "check_trailing_whitespace",
    "copyright_pattern",
    "evaluate_copyright",
    "finish_outcome",
    "has_non_printable_ascii",
    "is_makefile",
    "read_text_lines",
    "skipped_outcome",
    "stage_spec",
    "survivors",
    "write_reformatted_copy",
]
