from __future__ import annotations

from pathlib import Path
from typing import Literal

import typer

from commitgate.config import GateConfig, StageOverrides, load_gate_config
from commitgate.errors import GateError
from commitgate.pipeline import RunOutcome, run_gate
from commitgate.report import (
    build_json_report,
    fatal_lines,
    stage_section_lines,
    summary_lines,
)
from commitgate.stages import GateContext, StageOutcome, StageSpec
from commitgate.vcs import (
    CandidateFile,
    discover_repo_root,
    read_stage_overrides,
    select_candidates,
)

app = typer.Typer(help="Pre-commit gate that checks staged files against coding standards")

EXIT_BLOCK = 1


def _discover_repo_root(start: Path) -> Path:
    return discover_repo_root(start)


def _read_stage_overrides(repo_root: Path) -> StageOverrides:
    return read_stage_overrides(repo_root)


def _load_config(
    *, repo_root: Path, config_path: Path | None, overrides: StageOverrides
) -> GateConfig:
    return load_gate_config(repo_root=repo_root, explicit_path=config_path, overrides=overrides)


def _select_candidates(repo_root: Path) -> tuple[CandidateFile, ...]:
    return select_candidates(repo_root)


def _build_context(config: GateConfig, repo_root: Path) -> GateContext:
    return GateContext(config=config, repo_root=repo_root)


@app.command()
def check(
    repo_root: Path | None = typer.Option(
        None,
        "--repo-root",
        help="Repository root (default: git top-level of the current directory)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Gate configuration YAML (default: $COMMITGATE_CONFIG or .commitgate.yaml)",
    ),
    format: Literal["text", "json"] = typer.Option(
        "text",
        "--format",
        help="Report format: text|json",
        show_default=True,
    ),
) -> None:
    """Check the files staged for commit; exit 1 blocks the commit."""
    root = repo_root.resolve() if repo_root is not None else _discover_repo_root(Path.cwd())
    text_output = format == "text"
    completed: list[StageOutcome] = []

    def echo_stage(index: int, spec: StageSpec, outcome: StageOutcome) -> None:
        completed.append(outcome)
        if text_output:
            for line in stage_section_lines(index, spec, outcome):
                typer.echo(line)

    result: RunOutcome | None = None
    try:
        overrides = _read_stage_overrides(root)
        gate_config = _load_config(repo_root=root, config_path=config, overrides=overrides)
        candidates = _select_candidates(root)
        result = run_gate(candidates, _build_context(gate_config, root), observer=echo_stage)
    except GateError as exc:
        partial = RunOutcome(outcomes=tuple(completed))
        _emit_fatal(repo_root=root, error=exc, partial=partial, text_output=text_output)
        raise typer.Exit(code=EXIT_BLOCK) from exc

    if text_output:
        for line in summary_lines(result):
            typer.echo(line)
    else:
        typer.echo(build_json_report(repo_root=str(root), result=result))
    raise typer.Exit(code=result.exit_code)


def _emit_fatal(
    *, repo_root: Path, error: GateError, partial: RunOutcome, text_output: bool
) -> None:
    if not text_output:
        typer.echo(build_json_report(repo_root=str(repo_root), result=partial, error=error))
        return
    for line in fatal_lines(error):
        typer.echo(line)


def main() -> None:
    app()
