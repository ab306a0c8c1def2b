# core/lrc.py
from __future__ import annotations

import re
from typing import List, Tuple

_TS_RE = re.compile(r"\[(\d+):(\d+)(?:\.(\d+))?\]")
_META_RE = re.compile(r"^\[[a-zA-Z#]+:")


def _ts_to_ms(mm: str, ss: str, frac: str | None) -> int:
    m = int(mm)
    s = int(ss)
    if frac is None:
        ms = 0
    else:
        frac = frac.strip()
        if len(frac) == 1:
            ms = int(frac) * 100
        elif len(frac) == 2:
            ms = int(frac) * 10
        else:
            ms = int(frac[:3])
    return (m * 60 + s) * 1000 + ms


def parse_lrc(lrc_text: str, keep_empty: bool = False) -> List[Tuple[int, str]]:
    """
    Returns list of (time_ms, text) sorted by time.
    Supports multiple timestamps per line.
    Ignores metadata tags like [ar:], [ti:], [au:], etc.
    With keep_empty=True, timestamped lines without text are kept
    (they mark pauses in the song).
    """
    out: List[Tuple[int, str]] = []
    if not lrc_text:
        return out

    for raw_line in lrc_text.splitlines():
        line = raw_line.strip()
        if not line or _META_RE.match(line):
            continue

        matches = list(_TS_RE.finditer(line))
        if not matches:
            continue

        text = _TS_RE.sub("", line).strip()
        if not text and not keep_empty:
            continue

        for m in matches:
            out.append((_ts_to_ms(m.group(1), m.group(2), m.group(3)), text))

    # stable: lines sharing a timestamp keep their file order
    out.sort(key=lambda x: x[0])
    return out
