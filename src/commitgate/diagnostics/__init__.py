from .adapters import (
    LineViolation,
    adapt_line_violation,
    adapt_line_violations,
    build_diagnostic_event,
)
from .catalog import CANONICAL_DIAGNOSTIC_CATALOG, REQUIRED_CATALOG_FIELDS
from .models import DiagnosticEvent, GateStage, Severity
from .sort import canonical_witness_json, diagnostic_sort_key, sort_diagnostics

__all__ = [
    "CANONICAL_DIAGNOSTIC_CATALOG",
    "DiagnosticEvent",
    "GateStage",
    "LineViolation",
    "REQUIRED_CATALOG_FIELDS",
    "Severity",
    "adapt_line_violation",
    "adapt_line_violations",
    "build_diagnostic_event",
    "canonical_witness_json",
    "diagnostic_sort_key",
    "sort_diagnostics",
]
