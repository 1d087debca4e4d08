"""Line grouping for positioned text fragments.

Fragments are loaded into a pandas DataFrame (one row per fragment, keeping
the fragment's index in the page) and grouped by quantized `y`.
"""

from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from pdfxml.docs.model import Line, TextFragment
from pdfxml.layout.canonical import QUANTIZE_SCALE, as_key, quantize

FRAME_COLUMNS = ["idx", "x", "y", "x_key", "y_key", "font_size", "bold", "italic", "text"]


def fragments_frame(fragments: Sequence[TextFragment], scale: int = QUANTIZE_SCALE) -> pd.DataFrame:
    """Build a DataFrame describing fragments for grouping decisions.

    Doxygen:
    - @param fragments: Page fragments in input order.
    - @param scale: Quantization scale for the `x_key`/`y_key` columns.
    - @return: DataFrame with columns `FRAME_COLUMNS`; `idx` is the position in `fragments`.
    """
    if not fragments:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    rows = [
        {
            "idx": i,
            "x": float(f.x),
            "y": float(f.y),
            "x_key": quantize(f.x, scale),
            "y_key": quantize(f.y, scale),
            "font_size": f.font_size,
            "bold": bool(f.bold),
            "italic": bool(f.italic),
            "text": f.text,
        }
        for i, f in enumerate(fragments)
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def group_fragments_to_lines(fragments: Sequence[TextFragment], scale: int = QUANTIZE_SCALE) -> List[Line]:
    """Group fragments sharing a quantized `y` into lines.

    Doxygen:
    - @param fragments: Fragments still available for line grouping.
    - @param scale: Quantization scale (10 → 0.1 units).
    - @return: Lines ascending by key (NaN keys last); fragments in each line
      ascending by raw `x`, ties kept in input order.
    """
    if not fragments:
        return []
    df = fragments_frame(fragments, scale)
    lines: List[Line] = []
    for key, g in df.groupby("y_key", sort=True, dropna=False):
        g_sorted = g.sort_values("x", kind="mergesort")
        lines.append(Line(key=as_key(key), fragments=[fragments[int(i)] for i in g_sorted["idx"]]))
    return lines
