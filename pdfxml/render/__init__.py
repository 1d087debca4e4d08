"""XML rendering of assembled page layouts."""

from .xml_writer import (
    render_document,
    render_page,
    count_words,
    xml_text,
)

__all__ = [
    "render_document",
    "render_page",
    "count_words",
    "xml_text",
]
