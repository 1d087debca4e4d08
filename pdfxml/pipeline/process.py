"""High-level conversion: fragments → layout → XML string + statistics.

`convert_document` is the whole engine as a pure function of its input pages;
`convert_file` adds the reading step for pdf2json dumps and PDF files.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pdfxml.config import LayoutConfig
from pdfxml.docs.model import Document, Statistics
from pdfxml.docs.pdf_io import read_pdf, read_pdf_json
from pdfxml.render import count_words, render_document

from .assemble import Profile, assemble_document

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    xml: str
    statistics: Statistics
    page_count: int
    profile: Profile
    metadata: Dict[str, str] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "xml": self.xml,
            "page_count": self.page_count,
            "structure_type": self.profile.value,
            "statistics": self.statistics.to_dict(),
            "metadata": dict(self.metadata),
            "tags": list(self.tags),
        }


def build_tags(source_name: Optional[str], profile: Profile, page_count: int, stats: Statistics) -> List[str]:
    """Searchable tags for a finished conversion (empty entries dropped)."""
    name = source_name or ""
    if name.lower().endswith(".pdf"):
        name = name[:-4]
    tags = [
        name,
        profile.value,
        f"pages:{page_count}",
        "tables" if stats.tables > 0 else "",
        "lists" if stats.lists > 0 else "",
        "headings" if stats.headings > 0 else "",
    ]
    return [t for t in tags if t]


def convert_document(
    document: Document,
    profile: Union[Profile, str] = Profile.ENHANCED,
    config: Optional[LayoutConfig] = None,
    workers: int = 1,
) -> ConversionResult:
    """Convert a document to XML with the selected profile.

    Doxygen:
    - @param document: Pages of positioned fragments.
    - @param profile: `basic`, `enhanced` or `full`; anything else means `enhanced`.
    - @param config: Layout thresholds.
    - @param workers: Thread count for per-page layout.
    - @return: ConversionResult with XML, statistics, metadata and tags.
    """
    start = time.perf_counter()
    selected = Profile.parse(profile)

    layouts, stats = assemble_document(document, selected, config=config, workers=workers)
    xml = render_document(layouts)

    stats.characters = len(xml)
    stats.words = count_words(xml)
    stats.processing_time = int(round((time.perf_counter() - start) * 1000))

    page_count = len(document.pages)
    logger.info(
        "Converted %d page(s) with profile '%s': %d tables, %d lists, %d headings, %d images in %d ms",
        page_count, selected.value, stats.tables, stats.lists, stats.headings,
        stats.images, stats.processing_time,
    )
    return ConversionResult(
        xml=xml,
        statistics=stats,
        page_count=page_count,
        profile=selected,
        metadata=dict(document.metadata),
        tags=build_tags(document.source_name, selected, page_count, stats),
    )


def _read_input(path: str) -> Document:
    ext = os.path.splitext(path)[1].lower()
    if ext == ".json":
        return read_pdf_json(path)
    if ext == ".pdf":
        return read_pdf(path)
    raise ValueError(f"Unsupported file type: {path}")


def convert_file(
    file_path: str,
    profile: Union[Profile, str] = Profile.ENHANCED,
    config: Optional[LayoutConfig] = None,
    workers: int = 1,
    out_path: Optional[str] = None,
) -> ConversionResult:
    """Read a pdf2json dump (.json) or a PDF (.pdf) and convert it to XML.

    When `out_path` is given the XML is also written there (UTF-8).
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    document = _read_input(file_path)
    result = convert_document(document, profile=profile, config=config, workers=workers)

    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(result.xml)
        logger.info("Saved XML to %s", out_path)
    return result
