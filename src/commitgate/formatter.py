from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from .config import GateConfig
from .errors import GateErrorCode, build_environment_error


@runtime_checkable
class FormatterRunner(Protocol):
    def check(self, path: Path) -> bool: ...

    def reformat(self, path: Path) -> bytes: ...


@dataclass(frozen=True, slots=True)
class ClangFormatRunner:
    """Drive a clang-format compatible binary in check and reformat modes."""

    executable: Path
    style_file: Path

    @property
    def _style_arg(self) -> str:
        return f"--style=file:{self.style_file}"

    def check(self, path: Path) -> bool:
        completed = self._run("--dry-run", "--Werror", self._style_arg, str(path))
        return completed.returncode == 0

    def reformat(self, path: Path) -> bytes:
        completed = self._run(self._style_arg, str(path))
        if completed.returncode != 0:
            stderr = os.fsdecode(completed.stderr).strip()
            raise build_environment_error(
                GateErrorCode.E_FORMAT_TOOL_FAILED,
                f"formatter failed on '{path}': {stderr or completed.returncode}",
                path=str(path),
            )
        return completed.stdout

    def _run(self, *args: str) -> subprocess.CompletedProcess[bytes]:
        try:
            return subprocess.run(
                [str(self.executable), *args],
                check=False,
                capture_output=True,
            )
        except OSError as exc:
            raise build_environment_error(
                GateErrorCode.E_FORMAT_TOOL_FAILED,
                f"unable to execute formatter '{self.executable}': {exc}",
            ) from exc


def resolve_formatter_executable(config: GateConfig, repo_root: Path) -> Path | None:
    raw = config.formatter_executable
    if os.sep in raw or (os.altsep is not None and os.altsep in raw):
        candidate = Path(raw)
        if not candidate.is_absolute():
            candidate = repo_root / candidate
        return candidate if candidate.is_file() else None
    found = shutil.which(raw)
    return None if found is None else Path(found)


def resolve_style_file(config: GateConfig, repo_root: Path) -> Path | None:
    candidate = Path(config.formatter_style_file)
    if not candidate.is_absolute():
        candidate = repo_root / candidate
    return candidate if candidate.is_file() else None


def build_formatter_runner(config: GateConfig, repo_root: Path) -> ClangFormatRunner:
    """Verify the formatter binary and its style file, then build the runner."""
    executable = resolve_formatter_executable(config, repo_root)
    if executable is None:
        raise build_environment_error(
            GateErrorCode.E_FORMAT_TOOL_MISSING,
            f"formatter executable not found: {config.formatter_executable}",
        )
    style_file = resolve_style_file(config, repo_root)
    if style_file is None:
        raise build_environment_error(
            GateErrorCode.E_FORMAT_STYLE_MISSING,
            f"formatter style file not found: {config.formatter_style_file}",
        )
    return ClangFormatRunner(executable=executable, style_file=style_file)
