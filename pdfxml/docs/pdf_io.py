from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from .model import Document, ImageRegion, Page, TextFragment

logger = logging.getLogger(__name__)

_META_FIELDS = {
    "Title": "title",
    "Author": "author",
    "Subject": "subject",
    "Keywords": "keywords",
    "Creator": "creator",
    "Producer": "producer",
    "CreationDate": "creation_date",
}

# PyMuPDF span flags
_FLAG_ITALIC = 2
_FLAG_BOLD = 16

# "%" not followed by two hex digits
_STRAY_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_fragment_text(raw: Any) -> str:
    """Percent-decode fragment content; undecodable content becomes ''.

    Both a `%` that does not start a two-digit hex escape and escapes that
    decode to invalid UTF-8 count as undecodable.
    """
    if raw is None:
        return ""
    text = str(raw)
    if _STRAY_PERCENT.search(text):
        logger.debug("Malformed percent escape in fragment content %r", raw)
        return ""
    try:
        return unquote(text, errors="strict")
    except UnicodeDecodeError:
        logger.debug("Undecodable fragment content %r", raw)
        return ""


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _style_at(style: Any, pos: int) -> Optional[float]:
    if not isinstance(style, (list, tuple)) or len(style) <= pos:
        return None
    return _number(style[pos])


def fragment_from_pdf2json(item: Dict[str, Any]) -> TextFragment:
    """Normalize one pdf2json `Texts[]` entry into a TextFragment.

    Doxygen:
    - @param item: Dict with `x`, `y`, optional `w`/`h` and runs `R[0].T` / `R[0].TS`.
    - @return: Fragment with decoded text; absent fields degrade to defaults.
    """
    runs = item.get("R") or []
    run = runs[0] if runs and isinstance(runs[0], dict) else {}
    style = run.get("TS")
    bold = _style_at(style, 2)
    italic = _style_at(style, 3)
    x = _number(item.get("x"))
    y = _number(item.get("y"))
    return TextFragment(
        x=x if x is not None else 0.0,
        y=y if y is not None else 0.0,
        text=decode_fragment_text(run.get("T")),
        width=_number(item.get("w")),
        height=_number(item.get("h")),
        font_size=_style_at(style, 1),
        bold=bold is not None and bold > 1,
        italic=italic is not None and italic > 0,
    )


def image_from_fill(fill: Any) -> Optional[ImageRegion]:
    """Fill rectangles count as image placeholders only when they declare w and h."""
    if not isinstance(fill, dict):
        return None
    w = _number(fill.get("w"))
    h = _number(fill.get("h"))
    if not w or not h:
        return None
    return ImageRegion(
        x=_number(fill.get("x")) or 0.0,
        y=_number(fill.get("y")) or 0.0,
        width=w,
        height=h,
    )


def document_from_pdf2json(data: Dict[str, Any], source_name: Optional[str] = None) -> Document:
    """Build a Document from pdf2json output (`{"Pages": [...], "Meta": {...}}`).

    Raises:
        ValueError: If `data` has no `Pages` list.
    """
    if not isinstance(data, dict) or not isinstance(data.get("Pages"), list):
        raise ValueError("pdf2json data must contain a 'Pages' list")

    pages: List[Page] = []
    for pi, raw_page in enumerate(data["Pages"]):
        raw_page = raw_page if isinstance(raw_page, dict) else {}
        page = Page(
            number=pi + 1,
            width=_number(raw_page.get("Width")),
            height=_number(raw_page.get("Height")),
        )
        for item in raw_page.get("Texts") or []:
            page.fragments.append(fragment_from_pdf2json(item if isinstance(item, dict) else {}))
        for fill in raw_page.get("Fills") or []:
            region = image_from_fill(fill)
            if region is not None:
                page.images.append(region)
        pages.append(page)

    meta = data.get("Meta") if isinstance(data.get("Meta"), dict) else {}
    metadata = {dst: str(meta.get(src) or "") for src, dst in _META_FIELDS.items()}
    if not metadata["title"] and source_name:
        metadata["title"] = source_name
    return Document(pages=pages, metadata=metadata, source_name=source_name)


def read_pdf_json(path: str) -> Document:
    """Read a pdf2json JSON dump from disk."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"JSON file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    # pdf2json may wrap the payload as {"formImage": {...}}
    if isinstance(data, dict) and "Pages" not in data and isinstance(data.get("formImage"), dict):
        data = data["formImage"]
    return document_from_pdf2json(data, source_name=os.path.basename(path))


def read_pdf(path: str) -> Document:
    """Read text spans and image blocks of a PDF with PyMuPDF.

    Args:
        path: Path to the PDF file.

    Returns:
        A Document with one fragment per text span (top-left origin) and one
        image region per image block.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"PDF file not found: {path}")

    try:
        import fitz
    except ImportError as e:
        raise RuntimeError(
            "PyMuPDF is required to read PDF files directly. Please install it (`pip install pymupdf`) "
            "or convert the PDF with pdf2json first."
        ) from e

    pages: List[Page] = []
    with fitz.open(path) as pdf:
        raw_meta = pdf.metadata or {}
        for pi, pdf_page in enumerate(pdf):
            rect = pdf_page.rect
            page = Page(number=pi + 1, width=float(rect.width), height=float(rect.height))
            for block in pdf_page.get_text("dict").get("blocks", []):
                if block.get("type") == 1:
                    x0, y0, x1, y1 = block.get("bbox", (0, 0, 0, 0))
                    if x1 > x0 and y1 > y0:
                        page.images.append(ImageRegion(x=x0, y=y0, width=x1 - x0, height=y1 - y0))
                    continue
                for line in block.get("lines", []):
                    for span in line.get("spans", []):
                        x0, y0, x1, y1 = span.get("bbox", (0, 0, 0, 0))
                        flags = int(span.get("flags", 0))
                        page.fragments.append(TextFragment(
                            x=float(x0),
                            y=float(y0),
                            text=span.get("text", ""),
                            width=float(x1 - x0),
                            height=float(y1 - y0),
                            font_size=_number(span.get("size")),
                            bold=bool(flags & _FLAG_BOLD),
                            italic=bool(flags & _FLAG_ITALIC),
                        ))
            pages.append(page)

    metadata = {
        "title": raw_meta.get("title") or os.path.basename(path),
        "author": raw_meta.get("author") or "",
        "subject": raw_meta.get("subject") or "",
        "keywords": raw_meta.get("keywords") or "",
        "creator": raw_meta.get("creator") or "",
        "producer": raw_meta.get("producer") or "",
        "creation_date": raw_meta.get("creationDate") or "",
    }
    return Document(pages=pages, metadata=metadata, source_name=os.path.basename(path))
