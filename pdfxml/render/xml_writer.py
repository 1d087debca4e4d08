"""XML rendering of assembled page layouts.

Output is built by string concatenation, two spaces per nesting level:

    <?xml version="1.0" encoding="UTF-8"?>
    <document>
      <page number="1">
        <images>...</images>
        <tables>...</tables>
        <heading level="1" y="5">Title</heading>
        <paragraph y="20">
          <text x="10">Body</text>
        </paragraph>
      </page>
    </document>

Fragment text is already decoded. `&`, `<` and `>` are escaped and characters
that XML 1.0 cannot carry (most C0 controls, lone surrogates, U+FFFE/U+FFFF)
are dropped; everything else is written verbatim.
"""

from __future__ import annotations

import re
from typing import List, Sequence
from xml.sax.saxutils import escape

from pdfxml.docs.model import (
    DocumentNode,
    Heading,
    ImageBlock,
    ListItem,
    PageLayout,
    Paragraph,
    RawText,
    TableBlock,
    TextFragment,
)
from pdfxml.layout.canonical import format_key, format_number

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = "  "

# complement of the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(r"[^\u0009\u000A\u000D\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def xml_text(value: str) -> str:
    """Escape text for element content, dropping characters XML 1.0 forbids."""
    return escape(_INVALID_XML_CHARS.sub("", value))


def _pad(depth: int) -> str:
    return INDENT * depth


def render_text_leaf(fragment: TextFragment, depth: int, styled: bool) -> str:
    attrs = f'x="{format_number(fragment.x)}"'
    style = fragment.style if styled else None
    if style:
        attrs += f' style="{style}"'
    return f"{_pad(depth)}<text {attrs}>{xml_text(fragment.text)}</text>"


def render_images(block: ImageBlock, depth: int) -> List[str]:
    out = [f"{_pad(depth)}<images>"]
    for img in block.images:
        out.append(
            f'{_pad(depth + 1)}<image x="{format_number(img.x)}" y="{format_number(img.y)}" '
            f'width="{format_number(img.width)}" height="{format_number(img.height)}" />'
        )
    out.append(f"{_pad(depth)}</images>")
    return out


def render_tables(block: TableBlock, depth: int) -> List[str]:
    out = [f"{_pad(depth)}<tables>"]
    for ti, table in enumerate(block.tables):
        out.append(f'{_pad(depth + 1)}<table id="table-{block.page_number}-{ti + 1}">')
        for key in table.row_keys:
            out.append(f"{_pad(depth + 2)}<tr>")
            for cell in table.rows[key]:
                tag = "th" if cell.is_header else "td"
                out.append(f"{_pad(depth + 3)}<{tag}>{xml_text(cell.text)}</{tag}>")
            out.append(f"{_pad(depth + 2)}</tr>")
        out.append(f"{_pad(depth + 1)}</table>")
    out.append(f"{_pad(depth)}</tables>")
    return out


def render_node(node: DocumentNode, depth: int) -> List[str]:
    """Render one layout node into output lines."""
    if isinstance(node, RawText):
        f = node.fragment
        return [
            f'{_pad(depth)}<text x="{format_number(f.x)}" y="{format_number(f.y)}">{xml_text(f.text)}</text>'
        ]
    if isinstance(node, Heading):
        return [
            f'{_pad(depth)}<heading level="{node.level}" y="{format_key(node.y_key)}">{xml_text(node.text)}</heading>'
        ]
    if isinstance(node, (ListItem, Paragraph)):
        tag = "list-item" if isinstance(node, ListItem) else "paragraph"
        out = [f'{_pad(depth)}<{tag} y="{format_key(node.y_key)}">']
        out.extend(render_text_leaf(f, depth + 1, node.styled) for f in node.fragments)
        out.append(f"{_pad(depth)}</{tag}>")
        return out
    if isinstance(node, ImageBlock):
        return render_images(node, depth)
    if isinstance(node, TableBlock):
        return render_tables(node, depth)
    raise TypeError(f"Unsupported layout node: {type(node).__name__}")


def render_page(layout: PageLayout, depth: int = 1) -> List[str]:
    out = [f'{_pad(depth)}<page number="{layout.number}">']
    for node in layout.nodes:
        out.extend(render_node(node, depth + 1))
    out.append(f"{_pad(depth)}</page>")
    return out


def render_document(pages: Sequence[PageLayout]) -> str:
    """Render page layouts (in page order) as a complete XML document string."""
    out = [XML_DECLARATION, "<document>"]
    for layout in pages:
        out.extend(render_page(layout))
    out.append("</document>")
    return "\n".join(out)


def count_words(xml: str) -> int:
    """Whitespace-delimited token count of the serialized XML."""
    return len(xml.split())
