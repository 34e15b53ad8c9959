"""Shared fixtures: sample jstat output and a stub jstat executable."""

import stat
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

GCCAPACITY_OUTPUT = (
    " NGCMN    NGCMX     NGC     S0C   S1C       EC      OGCMN      OGCMX       OGC         OC       MCMN     MCMX      MC     CCSMN    CCSMX     CCSC    YGC    FGC \n"
    " 43520.0 697856.0  86016.0 10752.0 10752.0  64512.0    87552.0  1395712.0    95744.0    95744.0      0.0 1079296.0  33192.0      0.0 1048576.0   4520.0      4     2\n"
)

GCOLD_OUTPUT = (
    "   MC       MU      CCSC     CCSU       OC          OU       YGC    FGC    FGCT     GCT   \n"
    " 33192.0  31011.2   4520.0   4011.9     95744.0     11240.6      4     2    0.154    0.215\n"
)

GCNEW_OUTPUT = (
    " S0C    S1C    S0U    S1U   TT MTT  DSS      EC       EU     YGC     YGCT  \n"
    "10752.0 10752.0    0.0 10736.1  6  15 10752.0  64512.0  41283.5      4    0.061\n"
)

GC_OUTPUT = (
    " S0C    S1C    S0U    S1U      EC       EU        OC         OU       MC     MU    CCSC   CCSU   YGC     YGCT    FGC    FGCT     GCT   \n"
    "10752.0 10752.0  0.0   10736.1 64512.0  41283.5   95744.0    11240.6   33192.0 31011.2 4520.0 4011.9      4    0.061   2      0.154    0.215\n"
)

SAMPLE_OUTPUTS = {
    "gccapacity": GCCAPACITY_OUTPUT,
    "gcold": GCOLD_OUTPUT,
    "gcnew": GCNEW_OUTPUT,
    "gc": GC_OUTPUT,
}

EXPECTED_VALUES = {
    "newMax": 697856.0,
    "newCommit": 86016.0,
    "oldMax": 1395712.0,
    "oldCommit": 95744.0,
    "metaMax": 1079296.0,
    "metaCommit": 33192.0,
    "metaUsed": 31011.2,
    "oldUsed": 11240.6,
    "sv0Used": 0.0,
    "sv1Used": 10736.1,
    "edenUsed": 41283.5,
    "fgcTimes": 2.0,
    "fgcSec": 0.154,
}

# Prints <dir>/<option>.txt for "-<option> <pid>", or fails like jstat does
# when the target is gone.
STUB_SCRIPT = """#!/bin/sh
out="{dir}/${{1#-}}.txt"
if [ ! -f "$out" ]; then
    echo "$2 not found"
    exit 1
fi
cat "$out"
"""


@pytest.fixture
def make_jstat(tmp_path: Path) -> Callable[[Optional[Dict[str, str]]], str]:
    """Factory writing a stub jstat that replays canned output per option."""

    def _make(outputs: Optional[Dict[str, str]] = None) -> str:
        outputs = SAMPLE_OUTPUTS if outputs is None else outputs
        out_dir = tmp_path / "reports"
        out_dir.mkdir(exist_ok=True)
        for option, text in outputs.items():
            (out_dir / f"{option}.txt").write_text(text)

        script = tmp_path / "jstat"
        script.write_text(STUB_SCRIPT.format(dir=out_dir))
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture
def jstat_path(make_jstat) -> str:
    return make_jstat()


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[[str], str]:
    """Write an executable file with the given content and return its path."""

    def _write(content: str) -> str:
        script = tmp_path / "jstat-script"
        script.write_text(content)
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _write
