from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path, PurePosixPath
from typing import Final

from .config import OVERRIDE_SECTION, StageOverrides
from .errors import GateError, GateErrorCode, build_environment_error

_STAGED_STATUS_ARGS: Final[tuple[str, ...]] = (
    "diff",
    "--cached",
    "--raw",
    "-z",
    "--diff-filter=AM",
)
_OVERRIDE_KEY_PATTERN: Final[str] = rf"^{OVERRIDE_SECTION}\.allow-"
_GIT_CONFIG_NO_MATCH: Final[int] = 1
REGULAR_FILE_MODES: Final[frozenset[str]] = frozenset({"100644", "100755"})


class ChangeStatus(StrEnum):
    ADDED = "added"
    MODIFIED = "modified"


_STATUS_LETTERS: Final[dict[str, ChangeStatus]] = {
    "A": ChangeStatus.ADDED,
    "M": ChangeStatus.MODIFIED,
}


@dataclass(frozen=True, slots=True)
class CandidateFile:
    path: str
    status: ChangeStatus
    mode: str = "100644"

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("candidate path must be non-empty")

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix

    @property
    def directory_segments(self) -> tuple[str, ...]:
        parts = PurePosixPath(self.path).parent.parts
        return tuple(part for part in parts if part not in ("", "."))

    @property
    def is_regular_file(self) -> bool:
        return self.mode in REGULAR_FILE_MODES

    @property
    def raw_path(self) -> bytes:
        return os.fsencode(self.path)

    def absolute_path(self, repo_root: Path) -> Path:
        return (repo_root / self.path).resolve()


def _git_output(repo_root: Path, *args: str) -> subprocess.CompletedProcess[bytes]:
    try:
        return subprocess.run(
            ["git", "-C", str(repo_root), *args],
            check=False,
            capture_output=True,
        )
    except OSError as exc:
        raise build_environment_error(
            GateErrorCode.E_VCS_STATUS_FAILED, f"unable to execute git: {exc}"
        ) from exc


def _failure_text(completed: subprocess.CompletedProcess[bytes]) -> str:
    stderr = os.fsdecode(completed.stderr).strip()
    stdout = os.fsdecode(completed.stdout).strip()
    return stderr or stdout or f"exit status {completed.returncode}"


def parse_raw_status(output: bytes) -> tuple[CandidateFile, ...]:
    """Parse ``git diff --raw -z`` output into added/modified candidates.

    Each record is ``:<old mode> <new mode> <old sha> <new sha> <status>`` followed
    by the path; the staged (new) mode is carried on the candidate.
    """
    fields = output.split(b"\0")
    if fields and fields[-1] == b"":
        fields.pop()
    if len(fields) % 2:
        raise _malformed_status()

    candidates: list[CandidateFile] = []
    for index in range(0, len(fields), 2):
        meta = fields[index].decode("ascii", errors="replace").split()
        if len(meta) != 5 or not meta[0].startswith(":"):
            raise _malformed_status()
        status = _STATUS_LETTERS.get(meta[4][:1])
        if status is None:
            continue
        candidates.append(
            CandidateFile(path=os.fsdecode(fields[index + 1]), status=status, mode=meta[1])
        )
    return tuple(candidates)


def _malformed_status() -> GateError:
    return build_environment_error(
        GateErrorCode.E_VCS_STATUS_FAILED, "malformed staged status output from git"
    )


def select_candidates(repo_root: Path) -> tuple[CandidateFile, ...]:
    completed = _git_output(repo_root, *_STAGED_STATUS_ARGS)
    if completed.returncode != 0:
        raise build_environment_error(
            GateErrorCode.E_VCS_STATUS_FAILED,
            f"git staged status query failed: {_failure_text(completed)}",
        )
    return parse_raw_status(completed.stdout)


def read_override_settings(repo_root: Path) -> dict[str, str]:
    """Return the ``hooks.allow-*`` keys with values normalized by git to true/false."""
    completed = _git_output(
        repo_root, "config", "--type=bool", "--get-regexp", _OVERRIDE_KEY_PATTERN
    )
    if completed.returncode == _GIT_CONFIG_NO_MATCH and not completed.stdout.strip():
        return {}
    if completed.returncode != 0:
        raise build_environment_error(
            GateErrorCode.E_VCS_CONFIG_FAILED,
            f"git config query failed: {_failure_text(completed)}",
        )

    settings: dict[str, str] = {}
    for raw_line in os.fsdecode(completed.stdout).splitlines():
        key, _, value = raw_line.partition(" ")
        if key:
            settings[key.strip()] = value.strip()
    return settings


def read_stage_overrides(repo_root: Path) -> StageOverrides:
    return StageOverrides.from_settings(read_override_settings(repo_root))


def discover_repo_root(start: Path) -> Path:
    completed = _git_output(start, "rev-parse", "--show-toplevel")
    if completed.returncode != 0:
        return start.resolve()
    return Path(os.fsdecode(completed.stdout).strip()).resolve()
