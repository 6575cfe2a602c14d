from __future__ import annotations

from pathlib import Path

import pytest

from commitgate.config import GateConfig
from commitgate.diagnostics import GateStage
from commitgate.errors import GateEnvironmentError
from commitgate.exemptions import BINARY_SNIFF_BYTES, is_binary_content, is_exempt
from commitgate.vcs import CandidateFile, ChangeStatus

pytestmark = pytest.mark.unit

_TEXT_STAGES = (
    GateStage.LINE_LENGTH,
    GateStage.TABS,
    GateStage.TRAILING_WHITESPACE,
    GateStage.LINE_ENDINGS,
)


def _stage_file(root: Path, rel_path: str, content: bytes = b"int x;\n") -> CandidateFile:
    target = root / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    return CandidateFile(path=rel_path, status=ChangeStatus.ADDED)


def test_exempt_filenames_all_apply_to_every_stage(tmp_path: Path) -> None:
    config = GateConfig(exempt_filenames_all=frozenset({"generated.c"}))
    candidate = _stage_file(tmp_path, "src/generated.c")

    for stage in GateStage:
        assert is_exempt(candidate, stage, config, tmp_path)


def test_filename_stage_ignores_directory_and_extension_rules(tmp_path: Path) -> None:
    candidate = _stage_file(tmp_path, "vendor/notes.md")

    assert not is_exempt(candidate, GateStage.FILENAMES, GateConfig(), tmp_path)


def test_directory_segments_match_exactly_and_case_sensitively(tmp_path: Path) -> None:
    config = GateConfig(exempt_directories=frozenset({"vendor"}))
    nested = _stage_file(tmp_path, "lib/vendor/zlib/inflate.c")
    other_case = _stage_file(tmp_path, "lib/Vendor/inflate.c")
    partial = _stage_file(tmp_path, "vendors/inflate.c")
    named_like_dir = _stage_file(tmp_path, "src/vendor")

    for stage in (GateStage.FORMAT, *_TEXT_STAGES, GateStage.COPYRIGHT):
        assert is_exempt(nested, stage, config, tmp_path)
        assert not is_exempt(other_case, stage, config, tmp_path)
        assert not is_exempt(partial, stage, config, tmp_path)
    assert not is_exempt(named_like_dir, GateStage.TABS, config, tmp_path)


def test_exempt_extensions_apply_to_text_and_copyright_stages(tmp_path: Path) -> None:
    config = GateConfig(exempt_extensions=frozenset({".md"}))
    readme = _stage_file(tmp_path, "README.md")
    upper = _stage_file(tmp_path, "NOTES.MD")

    for stage in (*_TEXT_STAGES, GateStage.COPYRIGHT):
        assert is_exempt(readme, stage, config, tmp_path)
        assert not is_exempt(upper, stage, config, tmp_path)


def test_format_stage_uses_checked_extensions_allow_list(tmp_path: Path) -> None:
    config = GateConfig(
        checked_extensions=frozenset({".c", ".h"}),
        exempt_extensions=frozenset({".c"}),
    )
    source = _stage_file(tmp_path, "src/main.c")
    script = _stage_file(tmp_path, "tools/build.py")

    assert not is_exempt(source, GateStage.FORMAT, config, tmp_path)
    assert is_exempt(script, GateStage.FORMAT, config, tmp_path)


def test_copyright_exempt_filenames_only_affect_copyright_stage(tmp_path: Path) -> None:
    license_file = _stage_file(tmp_path, "LICENSE", b"MIT License\n")
    config = GateConfig(exempt_filenames_copyright=frozenset({"LICENSE"}))

    assert is_exempt(license_file, GateStage.COPYRIGHT, config, tmp_path)
    for stage in _TEXT_STAGES:
        assert not is_exempt(license_file, stage, config, tmp_path)


def test_binary_files_skip_text_and_copyright_stages_but_not_format(tmp_path: Path) -> None:
    blob = _stage_file(tmp_path, "assets/logo.h", b"\x89PNG\r\n\x1a\n\0\0\0\rIHDR")
    config = GateConfig()

    for stage in (*_TEXT_STAGES, GateStage.COPYRIGHT):
        assert is_exempt(blob, stage, config, tmp_path)
    assert not is_exempt(blob, GateStage.FORMAT, config, tmp_path)


def test_binary_sniff_only_inspects_leading_window() -> None:
    assert is_binary_content(b"abc\0def")
    assert not is_binary_content("naïve UTF-8 text\n".encode())
    assert not is_binary_content(b"a" * BINARY_SNIFF_BYTES + b"\0")


def test_missing_file_is_a_read_error(tmp_path: Path) -> None:
    ghost = CandidateFile(path="src/ghost.c", status=ChangeStatus.MODIFIED)

    with pytest.raises(GateEnvironmentError) as excinfo:
        is_exempt(ghost, GateStage.TABS, GateConfig(), tmp_path)
    assert excinfo.value.code == "E_FILE_READ_FAILED"


@pytest.mark.parametrize("mode", ["120000", "160000"])
def test_symlinks_and_gitlinks_only_reach_the_filename_stage(tmp_path: Path, mode: str) -> None:
    # Nothing exists on disk: a dangling link or an unpopulated submodule.
    entry = CandidateFile(path="lib/current.c", status=ChangeStatus.ADDED, mode=mode)
    config = GateConfig()

    assert not is_exempt(entry, GateStage.FILENAMES, config, tmp_path)
    for stage in (GateStage.FORMAT, GateStage.COPYRIGHT, *_TEXT_STAGES):
        assert is_exempt(entry, stage, config, tmp_path)
