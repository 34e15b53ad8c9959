"""jstat report collector."""

import logging
import subprocess
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class JstatError(Exception):
    """Base exception for jstat errors."""
    pass


class JstatCommandError(JstatError):
    """jstat could not be run or exited with an error."""
    pass


class JstatParseError(JstatError):
    """jstat output did not have the expected layout."""
    pass


@dataclass(frozen=True)
class GaugeField:
    """A gauge read from one column of a jstat report."""

    name: str
    column: int
    help: str


@dataclass(frozen=True)
class JstatReport:
    """A jstat output option and the gauges read from it."""

    option: str
    fields: Tuple[GaugeField, ...]


# Capacities and utilizations are in kB, as printed by jstat.
GCCAPACITY = JstatReport("gccapacity", (
    GaugeField("newMax", 1, "Maximum new generation capacity (kB)."),
    GaugeField("newCommit", 2, "Current new generation capacity (kB)."),
    GaugeField("oldMax", 7, "Maximum old generation capacity (kB)."),
    GaugeField("oldCommit", 8, "Current old generation capacity (kB)."),
    GaugeField("metaMax", 11, "Maximum metaspace capacity (kB)."),
    GaugeField("metaCommit", 12, "Metaspace capacity (kB)."),
))

GCOLD = JstatReport("gcold", (
    GaugeField("metaUsed", 1, "Metaspace utilization (kB)."),
    GaugeField("oldUsed", 5, "Old space utilization (kB)."),
))

GCNEW = JstatReport("gcnew", (
    GaugeField("sv0Used", 2, "Survivor space 0 utilization (kB)."),
    GaugeField("sv1Used", 3, "Survivor space 1 utilization (kB)."),
    GaugeField("edenUsed", 8, "Eden space utilization (kB)."),
))

GC = JstatReport("gc", (
    GaugeField("fgcTimes", 14, "Number of full GC events."),
    GaugeField("fgcSec", 15, "Full garbage collection time (seconds)."),
))

REPORTS = (GCCAPACITY, GCOLD, GCNEW, GC)


def run_jstat(
    jstat_path: str,
    option: str,
    target_pid: str,
    timeout: Optional[float] = None,
) -> str:
    """
    Run jstat with a single output option against the target JVM.

    Args:
        jstat_path: Path to the jstat executable
        option: Output option without the leading dash (e.g. "gcold")
        target_pid: jstat vmid, a local pid or pid@host
        timeout: Seconds to wait for jstat, None waits forever

    Returns:
        jstat standard output

    Raises:
        JstatCommandError: If jstat cannot be run, times out or exits non-zero
        JstatParseError: If jstat output is not valid UTF-8
    """
    cmd = [jstat_path, f"-{option}", target_pid]
    logger.debug(f"Running {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            encoding="utf-8",
            timeout=timeout,
            check=True,
        )
    except FileNotFoundError:
        raise JstatCommandError(f"jstat not found: {jstat_path}")
    except PermissionError:
        raise JstatCommandError(f"jstat is not executable: {jstat_path}")
    except OSError as e:
        raise JstatCommandError(f"jstat could not be run: {jstat_path}: {e}")
    except UnicodeDecodeError as e:
        raise JstatParseError(f"jstat -{option} {target_pid} printed non UTF-8 output: {e}")
    except subprocess.TimeoutExpired:
        raise JstatCommandError(f"jstat -{option} {target_pid} timed out after {timeout}s")
    except subprocess.CalledProcessError as e:
        # jstat reports a vanished target on stdout, not stderr
        detail = (e.stderr or e.stdout or "").strip()
        raise JstatCommandError(
            f"jstat -{option} {target_pid} exited with status {e.returncode}: {detail}"
        )

    return result.stdout


def parse_report(output: str, fields: Tuple[GaugeField, ...]) -> Dict[str, float]:
    """
    Read gauge values from the first data row of a jstat report.

    The first line is the column header and is skipped. Columns are split on
    whitespace and addressed by position.

    Raises:
        JstatParseError: If the row is missing, too short or not numeric
    """
    lines = output.split("\n")
    if len(lines) < 2:
        raise JstatParseError("jstat output has no data line")

    parts = lines[1].split()
    values = {}

    for field in fields:
        if field.column >= len(parts):
            raise JstatParseError(
                f"{field.name}: expected at least {field.column + 1} columns, got {len(parts)}"
            )

        raw = parts[field.column]
        try:
            values[field.name] = float(raw)
        except ValueError:
            raise JstatParseError(f"{field.name}: column {field.column} is not a number: {raw!r}")

    return values


def collect_report(
    report: JstatReport,
    jstat_path: str,
    target_pid: str,
    timeout: Optional[float] = None,
) -> Dict[str, float]:
    """Run one jstat report and return its gauge values by name."""
    output = run_jstat(jstat_path, report.option, target_pid, timeout)

    try:
        return parse_report(output, report.fields)
    except JstatParseError as e:
        raise JstatParseError(f"jstat -{report.option}: {e}")
