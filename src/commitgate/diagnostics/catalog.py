from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .models import GateStage, Severity


@dataclass(frozen=True, slots=True)
class DiagnosticCatalogEntry:
    code: str
    severity: Severity
    stage: GateStage
    suggested_action: str

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("diagnostic catalog code must be non-empty")
        if not self.suggested_action:
            raise ValueError(
                f"diagnostic catalog entry '{self.code}' suggested_action must be non-empty"
            )


def _entry(
    code: str,
    severity: Severity,
    stage: GateStage,
    suggested_action: str,
) -> DiagnosticCatalogEntry:
    return DiagnosticCatalogEntry(
        code=code,
        severity=severity,
        stage=stage,
        suggested_action=suggested_action,
    )


def _build_catalog(
    entries: tuple[DiagnosticCatalogEntry, ...],
) -> Mapping[str, DiagnosticCatalogEntry]:
    catalog: dict[str, DiagnosticCatalogEntry] = {}
    for entry in entries:
        if entry.code in catalog:
            raise ValueError(f"duplicate diagnostic catalog code: {entry.code}")
        catalog[entry.code] = entry
    return MappingProxyType(catalog)


_CATALOG_ENTRIES: tuple[DiagnosticCatalogEntry, ...] = (
    _entry(
        "E_CONFIG_READ_FAILED",
        Severity.ERROR,
        GateStage.SETUP,
        "make the gate configuration file readable or remove the --config option",
    ),
    _entry(
        "E_CONFIG_PARSE_FAILED",
        Severity.ERROR,
        GateStage.SETUP,
        "fix the YAML syntax of the gate configuration file",
    ),
    _entry(
        "E_CONFIG_INVALID",
        Severity.ERROR,
        GateStage.SETUP,
        "fix the gate configuration values (schema_version: 1, known keys only)",
    ),
    _entry(
        "E_VCS_STATUS_FAILED",
        Severity.ERROR,
        GateStage.SETUP,
        "run the hook from inside a git work tree with a readable index",
    ),
    _entry(
        "E_VCS_CONFIG_FAILED",
        Severity.ERROR,
        GateStage.SETUP,
        "set hooks.allow-* keys to boolean values and check that 'git config' works here",
    ),
    _entry(
        "E_FILE_READ_FAILED",
        Severity.ERROR,
        GateStage.SETUP,
        "make sure every staged file is present and readable in the work tree",
    ),
    _entry(
        "E_FILENAME_NON_ASCII",
        Severity.ERROR,
        GateStage.FILENAMES,
        "rename the file to printable ASCII or set 'git config hooks.allow-non-ascii-filenames true'",
    ),
    _entry(
        "E_FORMAT_TOOL_MISSING",
        Severity.ERROR,
        GateStage.FORMAT,
        "install the formatter or point formatter_executable at it",
    ),
    _entry(
        "E_FORMAT_STYLE_MISSING",
        Severity.ERROR,
        GateStage.FORMAT,
        "add the formatter style file or point formatter_style_file at it",
    ),
    _entry(
        "E_FORMAT_TOOL_FAILED",
        Severity.ERROR,
        GateStage.FORMAT,
        "run the formatter by hand on the file and fix the reported problem",
    ),
    _entry(
        "E_FORMAT_NONCOMPLIANT",
        Severity.ERROR,
        GateStage.FORMAT,
        "diff the reformatted copy against the file, or copy it over the file and re-stage",
    ),
    _entry(
        "E_LINE_TOO_LONG",
        Severity.ERROR,
        GateStage.LINE_LENGTH,
        "wrap the line or set 'git config hooks.allow-over-80-chars true'",
    ),
    _entry(
        "E_TAB_CHARACTER",
        Severity.ERROR,
        GateStage.TABS,
        "replace tabs with spaces or set 'git config hooks.allow-tab-chars true'",
    ),
    _entry(
        "E_TRAILING_WHITESPACE",
        Severity.ERROR,
        GateStage.TRAILING_WHITESPACE,
        "strip trailing whitespace or set 'git config hooks.allow-trailing-whitespace true'",
    ),
    _entry(
        "E_DOS_LINE_ENDING",
        Severity.ERROR,
        GateStage.LINE_ENDINGS,
        "convert the file to LF line endings or set 'git config hooks.allow-dos-newlines true'",
    ),
    _entry(
        "E_COPYRIGHT_MISSING",
        Severity.ERROR,
        GateStage.COPYRIGHT,
        "add a 'Copyright <years>, <holder>.' line or set 'git config hooks.allow-no-copyright true'",
    ),
    _entry(
        "E_COPYRIGHT_YEAR_STALE",
        Severity.ERROR,
        GateStage.COPYRIGHT,
        "add the current year to the copyright line",
    ),
)


CANONICAL_DIAGNOSTIC_CATALOG: Mapping[str, DiagnosticCatalogEntry] = _build_catalog(
    _CATALOG_ENTRIES
)

REQUIRED_CATALOG_FIELDS: tuple[str, ...] = ("code", "severity", "stage", "suggested_action")
