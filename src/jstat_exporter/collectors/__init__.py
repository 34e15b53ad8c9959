"""Collectors for JVM statistics."""

from .jstat import (
    REPORTS,
    GaugeField,
    JstatCommandError,
    JstatError,
    JstatParseError,
    JstatReport,
    collect_report,
    parse_report,
    run_jstat,
)

__all__ = [
    "REPORTS",
    "GaugeField",
    "JstatCommandError",
    "JstatError",
    "JstatParseError",
    "JstatReport",
    "collect_report",
    "parse_report",
    "run_jstat",
]
