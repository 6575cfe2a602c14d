from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class GateErrorCode(StrEnum):
    E_CONFIG_READ_FAILED = "E_CONFIG_READ_FAILED"
    E_CONFIG_PARSE_FAILED = "E_CONFIG_PARSE_FAILED"
    E_CONFIG_INVALID = "E_CONFIG_INVALID"
    E_VCS_STATUS_FAILED = "E_VCS_STATUS_FAILED"
    E_VCS_CONFIG_FAILED = "E_VCS_CONFIG_FAILED"
    E_FILE_READ_FAILED = "E_FILE_READ_FAILED"
    E_FORMAT_TOOL_MISSING = "E_FORMAT_TOOL_MISSING"
    E_FORMAT_STYLE_MISSING = "E_FORMAT_STYLE_MISSING"
    E_FORMAT_TOOL_FAILED = "E_FORMAT_TOOL_FAILED"


@dataclass(frozen=True, slots=True)
class GateErrorDetail:
    code: str
    message: str
    path: str | None = None


class GateError(Exception):
    """Fatal condition that aborts the run before all stages report."""

    def __init__(self, detail: GateErrorDetail) -> None:
        super().__init__(f"{detail.code}: {detail.message}")
        self.detail = detail

    @property
    def code(self) -> str:
        return self.detail.code


class GateConfigError(GateError, ValueError):
    pass


class GateEnvironmentError(GateError, RuntimeError):
    pass


def build_config_error(code: GateErrorCode, message: str, path: str | None = None) -> GateConfigError:
    return GateConfigError(GateErrorDetail(code=code.value, message=message, path=path))


def build_environment_error(
    code: GateErrorCode, message: str, path: str | None = None
) -> GateEnvironmentError:
    return GateEnvironmentError(GateErrorDetail(code=code.value, message=message, path=path))
