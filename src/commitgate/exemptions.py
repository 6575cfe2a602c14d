from __future__ import annotations

from pathlib import Path
from typing import Final

from .config import GateConfig
from .diagnostics import GateStage
from .errors import GateErrorCode, build_environment_error
from .vcs import CandidateFile

BINARY_SNIFF_BYTES: Final[int] = 8000

# Stages that inspect file text line by line.
_TEXT_STAGES: Final[frozenset[GateStage]] = frozenset(
    {
        GateStage.LINE_LENGTH,
        GateStage.TABS,
        GateStage.TRAILING_WHITESPACE,
        GateStage.LINE_ENDINGS,
    }
)
_BINARY_EXEMPT_STAGES: Final[frozenset[GateStage]] = _TEXT_STAGES | {GateStage.COPYRIGHT}
_EXTENSION_EXEMPT_STAGES: Final[frozenset[GateStage]] = _TEXT_STAGES | {GateStage.COPYRIGHT}


def is_binary_content(head: bytes) -> bool:
    return b"\0" in head[:BINARY_SNIFF_BYTES]


def sniff_binary(path: Path) -> bool:
    try:
        with path.open("rb") as handle:
            head = handle.read(BINARY_SNIFF_BYTES)
    except OSError as exc:
        raise build_environment_error(
            GateErrorCode.E_FILE_READ_FAILED,
            f"unable to read staged file '{path}': {exc}",
            path=str(path),
        ) from exc
    return is_binary_content(head)


def is_exempt_from_all(candidate: CandidateFile, config: GateConfig) -> bool:
    return candidate.basename in config.exempt_filenames_all


def is_directory_exempt(candidate: CandidateFile, config: GateConfig) -> bool:
    return any(segment in config.exempt_directories for segment in candidate.directory_segments)


def is_extension_exempt(candidate: CandidateFile, config: GateConfig) -> bool:
    return candidate.extension in config.exempt_extensions


def is_format_checked(candidate: CandidateFile, config: GateConfig) -> bool:
    return candidate.extension in config.checked_extensions


def is_copyright_exempt(candidate: CandidateFile, config: GateConfig) -> bool:
    return candidate.basename in config.exempt_filenames_copyright


def is_exempt(
    candidate: CandidateFile,
    stage: GateStage,
    config: GateConfig,
    repo_root: Path,
) -> bool:
    """Return True when ``stage`` must not inspect ``candidate``.

    Symlinks and submodule gitlinks carry no file content, so only the filename
    stage sees them. Cheap name-based rules run first; the binary sniff only
    reads the file when every other rule lets it through.
    """
    if is_exempt_from_all(candidate, config):
        return True
    if stage is GateStage.FILENAMES:
        return False
    if not candidate.is_regular_file:
        return True

    if is_directory_exempt(candidate, config):
        return True

    if stage is GateStage.FORMAT:
        return not is_format_checked(candidate, config)

    if stage in _EXTENSION_EXEMPT_STAGES and is_extension_exempt(candidate, config):
        return True
    if stage is GateStage.COPYRIGHT and is_copyright_exempt(candidate, config):
        return True
    if stage in _BINARY_EXEMPT_STAGES:
        return sniff_binary(repo_root / candidate.path)
    return False
