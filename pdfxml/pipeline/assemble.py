"""Per-page document assembly for the three conversion profiles.

Each profile has its own page pipeline:

- basic: one raw text leaf per fragment, in input order.
- enhanced: lines classified as heading / list item / paragraph.
- full: image block, table block, then the enhanced line flow with styles.

Pipelines return the page layout and the page's detection counters; pages
share no state, so they may be laid out concurrently and merged in order.
"""

from __future__ import annotations

import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pdfxml.config import LayoutConfig
from pdfxml.docs.model import (
    Document,
    DocumentNode,
    Heading,
    ImageBlock,
    ListItem,
    Page,
    PageLayout,
    Paragraph,
    RawText,
    Statistics,
    TableBlock,
    TextFragment,
)
from pdfxml.layout import (
    detect_tables,
    group_fragments_to_lines,
    heading_level,
    is_list_item,
    rank_font_sizes,
)

logger = logging.getLogger(__name__)


class Profile(enum.Enum):
    BASIC = "basic"
    ENHANCED = "enhanced"
    FULL = "full"

    @classmethod
    def parse(cls, value) -> "Profile":
        """Map a profile selector to a Profile; unknown values fall back to ENHANCED."""
        if isinstance(value, Profile):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            logger.warning("Unknown profile %r, falling back to %r", value, cls.ENHANCED.value)
            return cls.ENHANCED


PageResult = Tuple[PageLayout, Statistics]


def layout_lines(
    fragments: Sequence[TextFragment],
    ranked_sizes: Sequence[float],
    stats: Statistics,
    config: LayoutConfig,
    styled: bool = False,
) -> List[DocumentNode]:
    """Group fragments into lines and classify each line.

    Doxygen:
    - @param fragments: Fragments not owned by a table.
    - @param ranked_sizes: Distinct page font sizes, descending.
    - @param stats: Page counters; headings and lists are counted here.
    - @param config: Heading thresholds.
    - @param styled: Whether text leaves carry bold/italic style attributes.
    - @return: Heading, ListItem and Paragraph nodes ascending by y.
    """
    nodes: List[DocumentNode] = []
    for line in group_fragments_to_lines(fragments):
        level = heading_level(
            line,
            ranked_sizes,
            max_fragments=config.max_heading_fragments,
            levels=config.heading_levels,
        )
        if level is not None:
            text = " ".join(f.text for f in line.fragments)
            nodes.append(Heading(level=level, y_key=line.key, text=text))
            stats.headings += 1
        elif is_list_item(line):
            nodes.append(ListItem(y_key=line.key, fragments=line.fragments, styled=styled))
            stats.lists += 1
        else:
            nodes.append(Paragraph(y_key=line.key, fragments=line.fragments, styled=styled))
    return nodes


def assemble_basic_page(number: int, page: Page, config: LayoutConfig) -> PageResult:
    nodes: List[DocumentNode] = [RawText(fragment=f) for f in page.fragments]
    return PageLayout(number=number, nodes=nodes), Statistics()


def assemble_enhanced_page(number: int, page: Page, config: LayoutConfig) -> PageResult:
    stats = Statistics()
    ranked = rank_font_sizes(page.fragments)
    nodes = layout_lines(page.fragments, ranked, stats, config)
    return PageLayout(number=number, nodes=nodes), stats


def assemble_full_page(number: int, page: Page, config: LayoutConfig) -> PageResult:
    stats = Statistics()
    nodes: List[DocumentNode] = []

    if page.images:
        nodes.append(ImageBlock(images=list(page.images)))
        stats.images += len(page.images)

    fragments = page.fragments
    detection = detect_tables(
        fragments,
        min_row_fragments=config.min_row_fragments,
        row_gap=config.row_gap,
        min_rows=config.min_table_rows,
        column_tolerance=config.column_tolerance,
        min_column_hits=config.min_column_hits,
    )
    if detection.tables:
        nodes.append(TableBlock(page_number=number, tables=detection.tables))
        stats.tables += detection.table_count

    remaining = [f for i, f in enumerate(fragments) if i not in detection.consumed]
    ranked = rank_font_sizes(fragments)
    nodes.extend(layout_lines(remaining, ranked, stats, config, styled=True))
    return PageLayout(number=number, nodes=nodes), stats


PIPELINES: Dict[Profile, Callable[[int, Page, LayoutConfig], PageResult]] = {
    Profile.BASIC: assemble_basic_page,
    Profile.ENHANCED: assemble_enhanced_page,
    Profile.FULL: assemble_full_page,
}


def assemble_document(
    document: Document,
    profile: Profile = Profile.ENHANCED,
    config: Optional[LayoutConfig] = None,
    workers: int = 1,
) -> Tuple[List[PageLayout], Statistics]:
    """Lay out every page of a document with the profile's pipeline.

    Doxygen:
    - @param document: Input pages.
    - @param profile: Profile selecting the page pipeline.
    - @param config: Layout thresholds (defaults when None).
    - @param workers: Thread count for page layout; results keep page order.
    - @return: (page layouts in page order, summed detection counters).
    """
    config = config or LayoutConfig()
    pipeline = PIPELINES[Profile.parse(profile)]

    # output pages are numbered by position, whatever Page.number says
    numbered = list(enumerate(document.pages, 1))

    def run(item: Tuple[int, Page]) -> PageResult:
        number, page = item
        return pipeline(number, page, config)

    if workers > 1 and len(numbered) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(numbered))) as executor:
            results = list(executor.map(run, numbered))
    else:
        results = [run(item) for item in numbered]

    total = Statistics()
    layouts: List[PageLayout] = []
    for layout, page_stats in results:
        logger.debug(
            "Page %d: %d nodes, %d tables, %d lists, %d headings, %d images",
            layout.number, len(layout.nodes), page_stats.tables,
            page_stats.lists, page_stats.headings, page_stats.images,
        )
        total.merge(page_stats)
        layouts.append(layout)
    return layouts, total
