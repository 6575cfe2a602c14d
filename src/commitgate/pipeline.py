from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from .config import OVERRIDE_KEYS, OVERRIDE_SECTION
from .stages import STAGES, GateContext, StageOutcome, StageSpec, skipped_outcome
from .vcs import CandidateFile

StageObserver: TypeAlias = Callable[[int, StageSpec, StageOutcome], None]


@dataclass(frozen=True, slots=True)
class RunOutcome:
    outcomes: tuple[StageOutcome, ...]

    @property
    def passed(self) -> bool:
        return all(outcome.passed for outcome in self.outcomes)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    @property
    def failed_stages(self) -> tuple[StageOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.passed)


def override_notice(spec: StageSpec) -> str:
    key = OVERRIDE_KEYS[spec.stage]
    return f"bypassed by git config {OVERRIDE_SECTION}.{key}=true"


def run_stage(
    spec: StageSpec,
    candidates: Sequence[CandidateFile],
    context: GateContext,
) -> StageOutcome:
    if context.config.overrides.is_bypassed(spec.stage):
        return skipped_outcome(spec.stage, override_notice(spec))
    return spec.check(candidates, context)


def run_gate(
    candidates: Sequence[CandidateFile],
    context: GateContext,
    *,
    stages: Sequence[StageSpec] = STAGES,
    observer: StageObserver | None = None,
) -> RunOutcome:
    """Run every stage in order; fatal ``GateError`` propagates to the caller."""
    outcomes: list[StageOutcome] = []
    for index, spec in enumerate(stages):
        outcome = run_stage(spec, candidates, context)
        outcomes.append(outcome)
        if observer is not None:
            observer(index, spec, outcome)
    return RunOutcome(outcomes=tuple(outcomes))
