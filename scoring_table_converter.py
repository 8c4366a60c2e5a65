#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
scoring_table_converter.py

Reads the scoring-table CSV export (several stacked sections, each starting
with its own "Points" header row) and writes:
  scoring.js
    const labels  = { "<event>": "<label>", ... };
    const scoring = { "<event>": [ {pts, time, sec}, ... 1400 rows ], ... };

Then in index.html either:
  <script src="scoring.js"></script>
or rename scoring.js -> event_data.js and keep the existing script tag.

Usage examples:
  python scoring_table_converter.py
  python scoring_table_converter.py tabulatimes.csv scoring.js --verbose

Requirements:
  pip install pandas numpy
"""

from __future__ import annotations
import argparse
import csv
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from scoring_config import (
    DASH,
    EVENTS,
    INPUT_CSV_DEFAULT,
    LABELS,
    LABELS_VAR,
    OUTPUT_JS_DEFAULT,
    POINTS_HEADER,
    POINTS_MAX,
    POINTS_MIN,
    SCORING_VAR,
    clean,
    is_blank_or_dash,
    to_seconds,
)

log = logging.getLogger("scoring")

# One extracted time: (points, event key, raw time string)
Hit = Tuple[int, str, str]

# ------------------------- Models --------------------------------------

@dataclass(frozen=True)
class SectionState:
    """Column layout of the section currently being read."""
    points_idx: Optional[int] = None  # None until the first header row
    event_columns: Mapping[str, int] = field(default_factory=dict)

    @property
    def saw_header(self) -> bool:
        return self.points_idx is not None

# ------------------------- Row classification --------------------------

def is_integer_points(s: str) -> bool:
    return len(s) <= 4 and s.isascii() and s.isdigit()


def find_points_column(row: Sequence[str]) -> Optional[int]:
    for i, cell in enumerate(row):
        if cell.lower() == POINTS_HEADER:
            return i
    return None


def section_from_header(row: Sequence[str], points_idx: int) -> SectionState:
    """
    Map every configured event to the first column whose header text is one
    of the event's header strings. Events missing from this header row are
    left out of the section.
    """
    columns: Dict[str, int] = {}
    for ev in EVENTS:
        for i, cell in enumerate(row):
            if cell in ev.headers:
                columns[ev.key] = i
                break
    return SectionState(points_idx=points_idx, event_columns=columns)


def classify_row(state: SectionState, row: Sequence[str]) -> Tuple[SectionState, List[Hit]]:
    """
    Process one cleaned CSV row.

    Returns the section state to use for the next row together with the
    (points, event, time) tuples found on this row. Header rows replace the
    state; everything else keeps it.
    """
    if not any(cell != "" for cell in row):
        return state, []

    p = find_points_column(row)
    if p is not None:
        return section_from_header(row, p), []

    if not state.saw_header:
        return state, []

    pts_str = row[state.points_idx] if state.points_idx < len(row) else ""
    if not is_integer_points(pts_str):
        return state, []

    pts = int(pts_str)
    if pts < POINTS_MIN or pts > POINTS_MAX:
        return state, []

    hits: List[Hit] = []
    for key, idx in state.event_columns.items():
        if idx >= len(row) or is_blank_or_dash(row[idx]):
            continue
        hits.append((pts, key, row[idx]))
    return state, hits

# ------------------------- CSV reading ---------------------------------

def read_sparse_tables(path) -> Dict[str, Dict[int, str]]:
    """
    Stream the CSV once, in file order, and collect the directly observed
    times: { event_key: { points: time_str } }.

    A later row for the same event and points overwrites the earlier one.
    I/O, decode and CSV errors propagate to the caller.
    """
    raw: Dict[str, Dict[int, str]] = {ev.key: {} for ev in EVENTS}
    state = SectionState()
    sections = 0
    rows_used = 0

    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        for line_no, cells in enumerate(csv.reader(f), start=1):
            row = [clean(c) for c in cells]
            new_state, hits = classify_row(state, row)

            if new_state is not state:
                sections += 1
                cols = ", ".join(f"{k}@{i}" for k, i in new_state.event_columns.items())
                log.debug(
                    f"[section {sections}] header at line {line_no}: "
                    f"points@{new_state.points_idx}; events: {cols or 'none'}"
                )
            state = new_state

            if hits:
                rows_used += 1
            for pts, key, time_str in hits:
                raw[key][pts] = time_str

    log.info(f"Read {path}: {sections} section(s), {rows_used} data row(s) with times")
    if not sections:
        log.warning(f"No header row containing '{POINTS_HEADER}' found in {path}")
    return raw

# ------------------------- Gap filling ---------------------------------

def fill_dense_table(sparse: Mapping[int, str]) -> pd.DataFrame:
    """
    Build the full points table (POINTS_MIN..POINTS_MAX) for one event.

    Rule: if a points value has no recorded time, use the time of the next
    higher points value that has one. Points above the highest recorded value
    take that value. Events with no data at all get DASH everywhere.

    Returns a DataFrame with columns pts, time, sec.
    """
    index = pd.RangeIndex(POINTS_MIN, POINTS_MAX + 1, name="pts")
    times = pd.Series(dict(sparse), dtype="string").reindex(index)

    # Carry downward from POINTS_MAX -> POINTS_MIN
    times = times.bfill()
    # If the very top end was missing, fill upward from the highest found
    times = times.ffill()

    times = times.fillna(DASH).astype(object)
    df = pd.DataFrame({"pts": index.to_numpy(), "time": times.to_numpy()})
    df["sec"] = [None if t == DASH else to_seconds(t) for t in df["time"]]
    return df


def build_dense_tables(raw: Mapping[str, Mapping[int, str]]) -> Dict[str, pd.DataFrame]:
    scoring: Dict[str, pd.DataFrame] = {}
    for ev in EVENTS:
        sparse = raw.get(ev.key, {})
        if not sparse:
            log.warning(f"[{ev.key}] no times found; every row will be '{DASH}'")
        else:
            log.debug(
                f"[{ev.key}] {len(sparse)} recorded point value(s), "
                f"range {min(sparse)}..{max(sparse)}"
            )
        scoring[ev.key] = fill_dense_table(sparse)
    return scoring

# ------------------------- Output --------------------------------------

def table_records(df: pd.DataFrame) -> List[dict]:
    """Dense table as the list of {pts, time, sec} objects read by index.html."""
    records = []
    for pts, time_str, sec in df[["pts", "time", "sec"]].itertuples(index=False, name=None):
        records.append({
            "pts": int(pts),
            "time": str(time_str),
            "sec": None if sec is None or pd.isna(sec) else float(sec),
        })
    return records


def render_scoring_js(labels: Mapping[str, str], scoring: Mapping[str, pd.DataFrame]) -> str:
    payload = {key: table_records(df) for key, df in scoring.items()}
    return (
        f"const {LABELS_VAR} = " + json.dumps(dict(labels), indent=2, ensure_ascii=False) + ";\n\n"
        f"const {SCORING_VAR} = " + json.dumps(payload, indent=2, ensure_ascii=False) + ";\n"
    )


def write_scoring_js(path, text: str) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    return out


def count_non_dash_rows(df: pd.DataFrame) -> int:
    return int((df["time"] != DASH).sum())


def log_summary(scoring: Mapping[str, pd.DataFrame], level: int = logging.INFO) -> None:
    # Quick sanity print so you can see it's not empty
    for key, df in scoring.items():
        log.log(level, f"{key} non-dash rows: {count_non_dash_rows(df)}")

# ------------------------- Main ----------------------------------------

def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Convert scoring-table CSV export to scoring.js")
    parser.add_argument("input", nargs="?", default=INPUT_CSV_DEFAULT,
                        help=f"Scoring-table CSV export (default: {INPUT_CSV_DEFAULT})")
    parser.add_argument("output", nargs="?", default=OUTPUT_JS_DEFAULT,
                        help=f"Generated data module (default: {OUTPUT_JS_DEFAULT})")

    # Logging
    g = parser.add_mutually_exclusive_group()
    g.add_argument("--verbose", action="store_true", help="Verbose (DEBUG) logging")
    g.add_argument("--quiet", action="store_true", help="Only warnings, errors and the per-event row counts")

    args = parser.parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    if args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        raw = read_sparse_tables(args.input)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        log.error(f"Error: {e}")
        return 1

    scoring = build_dense_tables(raw)
    try:
        out = write_scoring_js(args.output, render_scoring_js(LABELS, scoring))
    except OSError as e:
        log.error(f"Failed to write {args.output}: {e}")
        return 1
    log.info(f"Wrote: {out}")
    # Row counts are always reported, even with --quiet
    log_summary(scoring, logging.WARNING if args.quiet else logging.INFO)

    return 0


if __name__ == "__main__":
    sys.exit(main())
