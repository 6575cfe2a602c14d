from __future__ import annotations

import os
import stat
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from commitgate.config import GateConfig
from commitgate.errors import GateEnvironmentError
from commitgate.formatter import ClangFormatRunner, FormatterRunner, build_formatter_runner
from commitgate.stages import GateContext, check_format_compliance, write_reformatted_copy
from commitgate.vcs import CandidateFile, ChangeStatus

pytestmark = pytest.mark.unit

# Stand-in formatter: compliant files contain no "{ }"; reformatting collapses it.
_FAKE_FORMATTER = """\
import sys
args = sys.argv[1:]
target = args[-1]
with open(target, "rb") as handle:
    data = handle.read()
fixed = data.replace(b"{ }", b"{}")
if "--dry-run" in args:
    sys.exit(0 if fixed == data else 1)
sys.stdout.buffer.write(fixed)
"""


@dataclass
class _RecordingRunner:
    noncompliant: set[str]
    checked: list[Path] = field(default_factory=list)

    def check(self, path: Path) -> bool:
        self.checked.append(path)
        return path.name not in self.noncompliant

    def reformat(self, path: Path) -> bytes:
        return b"// reformatted\n" + path.read_bytes()


def _stage_file(root: Path, rel_path: str, content: bytes = b"int main() { }\n") -> CandidateFile:
    target = root / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    return CandidateFile(path=rel_path, status=ChangeStatus.MODIFIED)


def _context(root: Path, runner: FormatterRunner, **config_overrides: object) -> GateContext:
    config_overrides.setdefault("temp_dir", str(root / "tmp"))
    (root / "tmp").mkdir(exist_ok=True)
    return GateContext(
        config=GateConfig(**config_overrides),
        repo_root=root,
        formatter_factory=lambda config, repo_root: runner,
    )


def _install_fake_formatter(root: Path) -> Path:
    script = root / "bin" / "fake-format"
    script.parent.mkdir(parents=True, exist_ok=True)
    script.write_text(f"#!{sys.executable}\n{_FAKE_FORMATTER}", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    (root / ".clang-format").write_text("BasedOnStyle: LLVM\n", encoding="utf-8")
    return script


def test_only_checked_extensions_reach_the_formatter(tmp_path: Path) -> None:
    runner = _RecordingRunner(noncompliant=set())
    candidates = [
        _stage_file(tmp_path, "src/main.c"),
        _stage_file(tmp_path, "include/api.hpp"),
        _stage_file(tmp_path, "tools/gen.py"),
        _stage_file(tmp_path, "third_party/lib.c"),
    ]

    outcome = check_format_compliance(candidates, _context(tmp_path, runner))

    assert outcome.state == "passed"
    assert outcome.files_checked == 2
    assert [path.name for path in runner.checked] == ["main.c", "api.hpp"]


def test_noncompliant_file_gets_reformatted_copy(tmp_path: Path) -> None:
    runner = _RecordingRunner(noncompliant={"main.c"})
    candidate = _stage_file(tmp_path, "src/main.c")

    outcome = check_format_compliance([candidate], _context(tmp_path, runner))

    assert outcome.state == "failed"
    (event,) = outcome.diagnostics
    assert event.code == "E_FORMAT_NONCOMPLIANT"
    assert event.path == "src/main.c"
    reformatted = Path(event.witness["reformatted"])  # type: ignore[index]
    original = Path(event.witness["original"])  # type: ignore[index]
    assert reformatted.parent == tmp_path / "tmp"
    assert reformatted.suffix == ".c"
    assert reformatted.read_bytes().startswith(b"// reformatted\n")
    assert original == (tmp_path / "src/main.c").resolve()
    assert str(reformatted) in event.message
    assert str(original) in event.message


def test_reformatted_copies_never_collide(tmp_path: Path) -> None:
    temp_dir = tmp_path / "out"
    temp_dir.mkdir()
    original = tmp_path / "main.c"

    first = write_reformatted_copy(b"a", original=original, temp_dir=temp_dir)
    second = write_reformatted_copy(b"b", original=original, temp_dir=temp_dir)

    assert first != second
    assert first.read_bytes() == b"a"
    assert second.read_bytes() == b"b"


def test_formatter_is_not_resolved_without_checked_files(tmp_path: Path) -> None:
    def _factory(config: GateConfig, repo_root: Path) -> FormatterRunner:
        raise AssertionError("formatter must not be resolved")

    context = GateContext(config=GateConfig(), repo_root=tmp_path, formatter_factory=_factory)
    candidate = _stage_file(tmp_path, "README.md", b"# readme\n")

    assert check_format_compliance([candidate], context).state == "passed"
    assert check_format_compliance([], context).state == "passed"


def test_missing_formatter_executable_is_fatal(tmp_path: Path) -> None:
    (tmp_path / ".clang-format").write_text("BasedOnStyle: LLVM\n", encoding="utf-8")
    config = GateConfig(formatter_executable=str(tmp_path / "bin" / "no-such-formatter"))

    with pytest.raises(GateEnvironmentError) as excinfo:
        build_formatter_runner(config, tmp_path)
    assert excinfo.value.code == "E_FORMAT_TOOL_MISSING"

    context = GateContext(config=config, repo_root=tmp_path)
    with pytest.raises(GateEnvironmentError):
        check_format_compliance([_stage_file(tmp_path, "src/main.c")], context)


def test_missing_style_file_is_fatal(tmp_path: Path) -> None:
    script = _install_fake_formatter(tmp_path)
    (tmp_path / ".clang-format").unlink()
    config = GateConfig(formatter_executable=str(script))

    with pytest.raises(GateEnvironmentError) as excinfo:
        build_formatter_runner(config, tmp_path)
    assert excinfo.value.code == "E_FORMAT_STYLE_MISSING"


@pytest.mark.skipif(os.name == "nt", reason="shebang scripts need a POSIX shell")
def test_clang_format_runner_check_and_reformat_modes(tmp_path: Path) -> None:
    script = _install_fake_formatter(tmp_path)
    runner = build_formatter_runner(GateConfig(formatter_executable="bin/fake-format"), tmp_path)
    assert isinstance(runner, ClangFormatRunner)
    assert runner.executable == script

    compliant = tmp_path / "ok.c"
    compliant.write_bytes(b"int main() {}\n")
    broken = tmp_path / "bad.c"
    broken.write_bytes(b"int main() { }\n")

    assert runner.check(compliant)
    assert not runner.check(broken)
    assert runner.reformat(broken) == b"int main() {}\n"


@pytest.mark.skipif(os.name == "nt", reason="shebang scripts need a POSIX shell")
def test_reformat_of_compliant_file_is_stable(tmp_path: Path) -> None:
    _install_fake_formatter(tmp_path)
    runner = build_formatter_runner(GateConfig(formatter_executable="bin/fake-format"), tmp_path)
    compliant = tmp_path / "ok.c"
    compliant.write_bytes(b"int main() {}\n")

    first = runner.reformat(compliant)
    second = runner.reformat(compliant)

    assert first == second == compliant.read_bytes()
