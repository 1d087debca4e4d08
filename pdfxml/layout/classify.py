"""Heading and list classification of grouped lines."""

from __future__ import annotations

import math
import re
from typing import List, Optional, Sequence

from pdfxml.docs.model import Line, TextFragment

# Bullet glyphs or a numeral followed by '.' or ')', at the start of the text only.
LIST_MARKER_RE = re.compile(r"^(?:[•·\-–—*]|\d+[.)])")


def rank_font_sizes(fragments: Sequence[TextFragment]) -> List[float]:
    """Distinct font sizes seen on a page, largest first.

    Fragments without a style descriptor carry no size and are not ranked.
    """
    sizes = set()
    for f in fragments:
        size = f.font_size
        if size is None or (isinstance(size, float) and math.isnan(size)):
            continue
        sizes.add(float(size))
    return sorted(sizes, reverse=True)


def heading_level(
    line: Line,
    ranked_sizes: Sequence[float],
    max_fragments: int = 10,
    levels: int = 3,
) -> Optional[int]:
    """Return the heading level of a line, or None for body text.

    Doxygen:
    - @param line: Grouped line (fragments ordered by x).
    - @param ranked_sizes: Output of `rank_font_sizes` for the whole page.
    - @param max_fragments: Lines with this many fragments or more are never headings.
    - @param levels: Number of top font sizes mapped to heading levels.
    - @return: 1 for the largest size, 2 for the second, 3 for the third; otherwise None.
    """
    if not line.fragments or len(line.fragments) >= max_fragments:
        return None
    size = line.fragments[0].font_size
    if size is None:
        return None
    top = list(ranked_sizes[:levels])
    try:
        rank = top.index(float(size))
    except ValueError:
        return None
    return rank + 1


def is_list_text(text: str) -> bool:
    return bool(LIST_MARKER_RE.match(text or ""))


def is_list_item(line: Line) -> bool:
    """True when the first fragment of the line starts with a list marker."""
    if not line.fragments:
        return False
    return is_list_text(line.fragments[0].text)
