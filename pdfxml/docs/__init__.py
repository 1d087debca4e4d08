"""Document model and input adapters.

Exposes:
- Data model: Document, Page, TextFragment, ImageRegion and layout nodes
- Readers: pdf2json JSON dumps, PDF files via PyMuPDF
"""

from .model import (
    Document,
    Page,
    TextFragment,
    ImageRegion,
    Line,
    Cell,
    Table,
    Heading,
    Paragraph,
    ListItem,
    RawText,
    TableBlock,
    ImageBlock,
    PageLayout,
    Statistics,
)
from .pdf_io import document_from_pdf2json, read_pdf_json, read_pdf, decode_fragment_text

__all__ = [
    "Document",
    "Page",
    "TextFragment",
    "ImageRegion",
    "Line",
    "Cell",
    "Table",
    "Heading",
    "Paragraph",
    "ListItem",
    "RawText",
    "TableBlock",
    "ImageBlock",
    "PageLayout",
    "Statistics",
    "document_from_pdf2json",
    "read_pdf_json",
    "read_pdf",
    "decode_fragment_text",
]
