from .config import GateConfig, StageOverrides, load_gate_config
from .errors import GateConfigError, GateEnvironmentError, GateError
from .pipeline import RunOutcome, run_gate
from .vcs import CandidateFile, ChangeStatus, select_candidates

__all__ = [
    "CandidateFile",
    "ChangeStatus",
    "GateConfig",
    "GateConfigError",
    "GateEnvironmentError",
    "GateError",
    "RunOutcome",
    "StageOverrides",
    "load_gate_config",
    "run_gate",
    "select_candidates",
]
