"""Grid-based table detection over a page's fragments.

A table is a run of at least two "row candidates" (quantized `y` positions
holding three or more fragments) spaced less than `row_gap` apart. Columns come
from `x` positions that several fragments in the run share.

Detection runs before line grouping: fragments placed in a table are reported
by index in `TableDetection.consumed` and must not be grouped into lines again.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
import pandas as pd

from pdfxml.docs.model import Cell, Table, TextFragment
from pdfxml.layout.canonical import QUANTIZE_SCALE, as_key, dequantize, quantize
from pdfxml.layout.lines import fragments_frame

MIN_ROW_FRAGMENTS = 3
ROW_GAP = 1.5
MIN_TABLE_ROWS = 2
COLUMN_TOLERANCE = 0.1
MIN_COLUMN_HITS = 2


@dataclass
class TableDetection:
    tables: List[Table] = field(default_factory=list)
    consumed: Set[int] = field(default_factory=set)

    @property
    def table_count(self) -> int:
        return len(self.tables)


def find_row_candidates(frame: pd.DataFrame, min_fragments: int = MIN_ROW_FRAGMENTS) -> List[int]:
    """Quantized `y` keys holding at least `min_fragments` fragments, ascending.

    Doxygen:
    - @param frame: DataFrame from `fragments_frame`.
    - @param min_fragments: Minimum aligned fragments for a row.
    - @return: Sorted integer keys; non-finite keys never qualify.
    """
    if frame.empty:
        return []
    keys = frame["y_key"].astype(float)
    finite = frame[np.isfinite(keys)]
    counts = finite.groupby("y_key").size()
    return sorted(int(k) for k, n in counts.items() if n >= min_fragments)


def split_row_runs(
    candidates: Sequence[int],
    gap: float = ROW_GAP,
    min_rows: int = MIN_TABLE_ROWS,
    scale: int = QUANTIZE_SCALE,
) -> List[List[int]]:
    """Partition sorted row keys into runs of rows closer than `gap`.

    Runs shorter than `min_rows` are dropped; their fragments stay available
    for ordinary line grouping.
    """
    runs: List[List[int]] = []
    current: List[int] = []
    for key in candidates:
        if current and dequantize(key - current[-1], scale) >= gap:
            if len(current) >= min_rows:
                runs.append(current)
            current = []
        current.append(key)
    if len(current) >= min_rows:
        runs.append(current)
    return runs


def find_column_positions(
    xs: Sequence[float],
    tolerance: float = COLUMN_TOLERANCE,
    min_hits: int = MIN_COLUMN_HITS,
    scale: int = QUANTIZE_SCALE,
) -> List[float]:
    """Column start positions for the fragments of one table.

    Doxygen:
    - @param xs: Raw `x` of every fragment in the table's rows.
    - @param tolerance: Absolute distance under which a fragment hits a candidate.
    - @param min_hits: Hits needed for a candidate to become a column.
    - @param scale: Quantization scale for candidate positions.
    - @return: Ascending column starts. With fewer than two frequent positions,
      every distinct quantized `x` is returned instead (one column per position).
    """
    values = np.asarray([float(x) for x in xs], dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return []
    candidates = np.array(sorted({dequantize(quantize(x, scale), scale) for x in values}), dtype=float)
    hits = (np.abs(values[None, :] - candidates[:, None]) < tolerance).sum(axis=1)
    significant = candidates[hits >= min_hits]
    if significant.size >= 2:
        return [float(c) for c in significant]
    return [float(c) for c in candidates]


def assign_columns(xs: Sequence[float], columns: Sequence[float]) -> List[int]:
    """Index of the column interval `[columns[i], columns[i+1])` holding each `x`.

    The last column is open-ended; positions left of the first column fall in
    the first column.
    """
    if not columns:
        return [0 for _ in xs]
    cols = np.asarray(columns, dtype=float)
    slots = np.searchsorted(cols, np.asarray(xs, dtype=float), side="right") - 1
    return [int(s) for s in np.clip(slots, 0, len(cols) - 1)]


def build_table(
    rows: Dict[int, List[Tuple[int, TextFragment]]],
    columns: Sequence[float],
) -> Table:
    """Partition the fragments of each row into cells.

    Doxygen:
    - @param rows: Row key → (fragment index, fragment) pairs in input order.
    - @param columns: Column starts from `find_column_positions`.
    - @return: Table whose rows hold only non-empty cells, ordered by column.
    """
    table = Table()
    n_cols = max(1, len(columns))
    for row_pos, key in enumerate(sorted(rows)):
        members = sorted(rows[key], key=lambda m: m[1].x)
        slots = assign_columns([f.x for _, f in members], columns)
        cells: List[Cell] = []
        for col in range(n_cols):
            frags = [f for (_, f), s in zip(members, slots) if s == col]
            if not frags:
                continue
            start = float(columns[col]) if columns else frags[0].x
            end = float(columns[col + 1]) if col + 1 < len(columns) else math.inf
            cells.append(Cell(
                x_start=start,
                width=end - start,
                fragments=frags,
                is_header=row_pos == 0 or any(f.bold for f in frags),
            ))
        table.rows[key] = cells
    return table


def detect_tables(
    fragments: Sequence[TextFragment],
    min_row_fragments: int = MIN_ROW_FRAGMENTS,
    row_gap: float = ROW_GAP,
    min_rows: int = MIN_TABLE_ROWS,
    column_tolerance: float = COLUMN_TOLERANCE,
    min_column_hits: int = MIN_COLUMN_HITS,
    frame: Optional[pd.DataFrame] = None,
) -> TableDetection:
    """Find tables on a page and report which fragments they consume.

    Doxygen:
    - @param fragments: All fragments of the page, in input order.
    - @param min_row_fragments: Aligned fragments needed for a row candidate.
    - @param row_gap: Rows closer than this (in coordinate units) share a table.
    - @param min_rows: Rows needed for a run to become a table.
    - @param column_tolerance: Tolerance for column frequency counting.
    - @param min_column_hits: Hits needed for a column position.
    - @param frame: Optional precomputed `fragments_frame(fragments)`.
    - @return: `TableDetection` with tables in page order and consumed indices.
    """
    detection = TableDetection()
    if not fragments:
        return detection
    if frame is None:
        frame = fragments_frame(fragments)

    candidates = find_row_candidates(frame, min_row_fragments)
    if not candidates:
        return detection

    for run in split_row_runs(candidates, gap=row_gap, min_rows=min_rows):
        run_frame = frame[frame["y_key"].isin(run)]
        columns = find_column_positions(
            run_frame["x"].tolist(),
            tolerance=column_tolerance,
            min_hits=min_column_hits,
        )
        rows: Dict[int, List[Tuple[int, TextFragment]]] = {}
        for key, g in run_frame.groupby("y_key", sort=True):
            rows[as_key(key)] = [(int(i), fragments[int(i)]) for i in g["idx"]]
        detection.tables.append(build_table(rows, columns))
        detection.consumed.update(int(i) for i in run_frame["idx"])
    return detection
