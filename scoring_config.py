#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
scoring_config.py
Common configuration for scoring_table_converter: the fixed event list,
display labels, file defaults and the time helpers.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

# ============================================================
#   FILE DEFAULTS
# ============================================================

# CSV export of the scoring tables (several stacked sections)
INPUT_CSV_DEFAULT: str = "tabulatimes.csv"

# Generated data module loaded by index.html
OUTPUT_JS_DEFAULT: str = "scoring.js"

# Names of the two globals defined in the generated module
LABELS_VAR: str = "labels"
SCORING_VAR: str = "scoring"

# ============================================================
#   SCORING TABLE LAYOUT
# ============================================================

# Inclusive points range of every dense table
POINTS_MIN: int = 1
POINTS_MAX: int = 1400

# Header cell (case-insensitive) that marks the start of a new section
POINTS_HEADER: str = "points"

# Cells meaning "no time for this points value"
ABSENT_MARKERS: Tuple[str, ...] = ("", "-", "—")

# Placeholder written to the output for points with no time at all
DASH: str = "-"

# ============================================================
#   EVENTS
# ============================================================

@dataclass(frozen=True)
class Event:
    key: str                  # "100m", used as key in both output tables
    headers: Tuple[str, ...]  # exact CSV header strings of its column
    label: str                # shown in index.html


EVENTS: Tuple[Event, ...] = (
    Event("100m", ("100m",), "100m"),
    Event("200m", ("200m",), "200m"),
    Event("300m", ("300m",), "300m"),
    Event("400m", ("400m",), "400m"),
    Event("800m", ("800m",), "800m"),
    Event("mile", ("Mile",), "1 mile (road)"),
    Event("5k", ("5 km",), "5 km (road)"),
    Event("10k", ("10 km",), "10 km (road)"),
    Event("hm", ("HM",), "Half Marathon"),
    Event("marathon", ("Marathon",), "Marathon"),
)

# key -> label, in event order
LABELS: Dict[str, str] = {ev.key: ev.label for ev in EVENTS}

# Number literals a cell may hold: decimal (optionally signed, with exponent)
# or unsigned 0x / 0o / 0b integers. An empty part counts as 0.
DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
PREFIXED_RE = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)", re.ASCII)
PREFIX_BASES: Dict[str, int] = {"x": 16, "o": 8, "b": 2}

# Whitespace plus the byte-order mark, which spreadsheet exports can leave
# at the start of any cell
TRIM_RE = re.compile(r"^[\s\ufeff]+|[\s\ufeff]+$")

# ============================================================
#   CELL / TIME HELPERS
# ============================================================

def clean(val) -> str:
    """Cell text with surrounding whitespace and BOMs removed ('' for None)."""
    if val is None:
        return ""
    return TRIM_RE.sub("", str(val))


def is_blank_or_dash(val) -> bool:
    return clean(val) in ABSENT_MARKERS


def _to_number(s: str) -> Optional[float]:
    s = clean(s)
    if s == "":
        return 0.0

    m = PREFIXED_RE.fullmatch(s)
    if m:
        digits = m.group(1)
        try:
            return float(int(digits[1:], PREFIX_BASES[digits[0].lower()]))
        except OverflowError:
            return None

    if not DECIMAL_RE.fullmatch(s):
        return None
    x = float(s)
    return x if np.isfinite(x) else None


def to_seconds(time_str) -> Optional[float]:
    """
    Parse a scoring-table time into seconds.

    Accepts:
      - '9.46'     -> 9.46
      - '17:37'    -> 1057
      - '2:16.92'  -> 136.92
      - '1:24:26'  -> 5066
    An empty part between colons counts as 0 ('1:' -> 60), and parts may be
    0x/0o/0b integers. Returns None for blanks, dash markers, other colon
    counts or any non-numeric part (including '1_000').
    """
    s = clean(time_str)
    if s in ABSENT_MARKERS:
        return None

    if ":" not in s:
        return _to_number(s)

    parts = [_to_number(p) for p in s.split(":")]
    if any(p is None for p in parts):
        return None

    if len(parts) == 2:
        return parts[0] * 60 + parts[1]
    if len(parts) == 3:
        return parts[0] * 3600 + parts[1] * 60 + parts[2]

    return None
