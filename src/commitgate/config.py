from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Final, cast

import yaml  # type: ignore[import-untyped]

from .diagnostics import GateStage
from .errors import GateErrorCode, build_config_error

CONFIG_ENV_VAR: Final[str] = "COMMITGATE_CONFIG"
DEFAULT_CONFIG_FILENAME: Final[str] = ".commitgate.yaml"
CONFIG_SCHEMA_VERSION: Final[int] = 1
OVERRIDE_SECTION: Final[str] = "hooks"

OVERRIDE_KEYS: Final[Mapping[GateStage, str]] = MappingProxyType(
    {
        GateStage.FILENAMES: "allow-non-ascii-filenames",
        GateStage.FORMAT: "allow-no-code-conventions",
        GateStage.LINE_LENGTH: "allow-over-80-chars",
        GateStage.TABS: "allow-tab-chars",
        GateStage.TRAILING_WHITESPACE: "allow-trailing-whitespace",
        GateStage.LINE_ENDINGS: "allow-dos-newlines",
        GateStage.COPYRIGHT: "allow-no-copyright",
    }
)

_STRING_SET_KEYS: Final[tuple[str, ...]] = (
    "exempt_directories",
    "exempt_extensions",
    "checked_extensions",
    "exempt_filenames_all",
    "exempt_filenames_copyright",
)
_OPTIONAL_STRING_KEYS: Final[tuple[str, ...]] = (
    "copyright_holder",
    "temp_dir",
)
_STRING_KEYS: Final[tuple[str, ...]] = (
    "formatter_executable",
    "formatter_style_file",
)
_ALLOWED_KEYS: Final[frozenset[str]] = frozenset(
    ("schema_version", "max_line_length")
    + _STRING_SET_KEYS
    + _OPTIONAL_STRING_KEYS
    + _STRING_KEYS
)


@dataclass(frozen=True, slots=True)
class StageOverrides:
    bypassed: frozenset[GateStage] = frozenset()

    def is_bypassed(self, stage: GateStage) -> bool:
        return stage in self.bypassed

    @classmethod
    def from_settings(cls, settings: Mapping[str, str]) -> StageOverrides:
        """Build overrides from ``key -> raw value`` pairs; only ``true`` bypasses."""
        lowered = {key.lower(): value.strip().lower() for key, value in settings.items()}
        bypassed = frozenset(
            stage
            for stage, key in OVERRIDE_KEYS.items()
            if lowered.get(f"{OVERRIDE_SECTION}.{key}") == "true"
        )
        return cls(bypassed=bypassed)


@dataclass(frozen=True, slots=True)
class GateConfig:
    exempt_directories: frozenset[str] = frozenset(
        {"3rdparty", "third_party", "external", "vendor"}
    )
    exempt_extensions: frozenset[str] = frozenset({".md", ".csv"})
    checked_extensions: frozenset[str] = frozenset({".c", ".h", ".cpp", ".hpp"})
    exempt_filenames_all: frozenset[str] = frozenset()
    exempt_filenames_copyright: frozenset[str] = frozenset({"LICENSE", "COPYING"})
    copyright_holder: str | None = None
    overrides: StageOverrides = field(default_factory=StageOverrides)
    formatter_executable: str = "clang-format"
    formatter_style_file: str = ".clang-format"
    temp_dir: str | None = None
    max_line_length: int = 80
    source_path: str | None = None

    def __post_init__(self) -> None:
        if self.max_line_length < 1:
            raise build_config_error(
                GateErrorCode.E_CONFIG_INVALID, "max_line_length must be a positive integer"
            )
        if not self.formatter_executable:
            raise build_config_error(
                GateErrorCode.E_CONFIG_INVALID, "formatter_executable must be non-empty"
            )
        if not self.formatter_style_file:
            raise build_config_error(
                GateErrorCode.E_CONFIG_INVALID, "formatter_style_file must be non-empty"
            )

    @property
    def copyright_enabled(self) -> bool:
        return bool(self.copyright_holder)

    def with_overrides(self, overrides: StageOverrides) -> GateConfig:
        return replace(self, overrides=overrides)


def resolve_config_path(
    *,
    repo_root: Path,
    explicit_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    if explicit_path is not None:
        return Path(explicit_path)
    env = os.environ if environ is None else environ
    from_env = env.get(CONFIG_ENV_VAR, "").strip()
    if from_env:
        return Path(from_env)
    candidate = repo_root / DEFAULT_CONFIG_FILENAME
    if candidate.is_file():
        return candidate
    return None


def load_gate_config(
    *,
    repo_root: Path,
    explicit_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: StageOverrides | None = None,
) -> GateConfig:
    path = resolve_config_path(repo_root=repo_root, explicit_path=explicit_path, environ=environ)
    config = GateConfig() if path is None else parse_gate_config(_read_yaml_file(path), source=path)
    if overrides is not None:
        config = config.with_overrides(overrides)
    return config


def parse_gate_config(raw: Mapping[str, object], *, source: Path | None = None) -> GateConfig:
    unknown = sorted(set(raw) - _ALLOWED_KEYS)
    if unknown:
        raise build_config_error(
            GateErrorCode.E_CONFIG_INVALID,
            f"unsupported configuration keys: {', '.join(unknown)}",
        )
    if raw.get("schema_version") != CONFIG_SCHEMA_VERSION:
        raise build_config_error(
            GateErrorCode.E_CONFIG_INVALID,
            f"gate configuration must use schema_version={CONFIG_SCHEMA_VERSION}",
        )

    defaults = GateConfig()
    values: dict[str, object] = {}
    for key in _STRING_SET_KEYS:
        if key in raw:
            values[key] = _require_string_set(raw, key)
    for key in _OPTIONAL_STRING_KEYS:
        if key in raw:
            values[key] = _require_optional_string(raw, key)
    for key in _STRING_KEYS:
        if key in raw:
            values[key] = _require_string(raw, key)
    if "max_line_length" in raw:
        values["max_line_length"] = _require_positive_int(raw, "max_line_length")

    return replace(
        defaults,
        source_path=(None if source is None else str(source)),
        **values,  # type: ignore[arg-type]
    )


def _read_yaml_file(path: Path) -> dict[str, object]:
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise build_config_error(
            GateErrorCode.E_CONFIG_READ_FAILED,
            f"unable to read gate configuration '{path}': {exc}",
            path=str(path),
        ) from exc
    try:
        payload = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise build_config_error(
            GateErrorCode.E_CONFIG_PARSE_FAILED,
            f"invalid gate configuration yaml in '{path}': {exc}",
            path=str(path),
        ) from exc
    if not isinstance(payload, dict):
        raise build_config_error(
            GateErrorCode.E_CONFIG_INVALID,
            "gate configuration root must be a mapping",
            path=str(path),
        )
    return cast(dict[str, object], payload)


def _require_string_set(data: Mapping[str, object], key: str) -> frozenset[str]:
    value = data.get(key)
    if not isinstance(value, list):
        raise build_config_error(
            GateErrorCode.E_CONFIG_INVALID, f"missing or invalid list for key '{key}'"
        )
    entries: set[str] = set()
    for index, item in enumerate(value):
        if not isinstance(item, str) or not item:
            raise build_config_error(
                GateErrorCode.E_CONFIG_INVALID,
                f"invalid entry at index {index} for key '{key}'",
            )
        entries.add(item)
    return frozenset(entries)


def _require_optional_string(data: Mapping[str, object], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    raise build_config_error(GateErrorCode.E_CONFIG_INVALID, f"invalid string for key '{key}'")


def _require_string(data: Mapping[str, object], key: str) -> str:
    value = data.get(key)
    if isinstance(value, str) and value:
        return value
    raise build_config_error(
        GateErrorCode.E_CONFIG_INVALID, f"missing or invalid string for key '{key}'"
    )


def _require_positive_int(data: Mapping[str, object], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise build_config_error(
            GateErrorCode.E_CONFIG_INVALID, f"missing or invalid positive integer for key '{key}'"
        )
    return value
