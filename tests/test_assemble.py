from pdfxml.docs.model import (
    Document,
    Heading,
    ImageBlock,
    ImageRegion,
    ListItem,
    Page,
    Paragraph,
    RawText,
    TableBlock,
    TextFragment,
)
from pdfxml.pipeline.assemble import PIPELINES, Profile, assemble_document


def _grid_page():
    frags = [TextFragment(x=10, y=2.0, text="Report", font_size=20)]
    for y in (10.0, 11.0):
        frags += [TextFragment(x=x, y=y, text=f"c{x}", font_size=9) for x in (10, 20, 30)]
    frags.append(TextFragment(x=10, y=30.0, text="• first", font_size=9, italic=True))
    frags.append(TextFragment(x=10, y=40.0, text="closing words", font_size=9))
    # two more sizes so that the body size ranks fourth
    frags.append(TextFragment(x=10, y=50.0, text="Notes", font_size=16))
    frags.append(TextFragment(x=10, y=60.0, text="Aside", font_size=14))
    return Page(number=1, fragments=frags, images=[ImageRegion(0, 0, 5, 5)])


def test_profile_parse_falls_back_to_enhanced():
    assert Profile.parse("full") is Profile.FULL
    assert Profile.parse(" BASIC ") is Profile.BASIC
    assert Profile.parse("fancy") is Profile.ENHANCED
    assert Profile.parse(None) is Profile.ENHANCED
    assert set(PIPELINES) == set(Profile)


def test_basic_profile_keeps_every_fragment_ungrouped():
    page = Page(number=1, fragments=[TextFragment(x=i, y=5.0, text=str(i)) for i in range(3)])
    layouts, stats = assemble_document(Document(pages=[page]), Profile.BASIC)
    nodes = layouts[0].nodes
    assert len(nodes) == 3
    assert all(isinstance(n, RawText) for n in nodes)
    assert (stats.headings, stats.lists, stats.tables, stats.images) == (0, 0, 0, 0)


def test_enhanced_profile_skips_tables_images_and_styles():
    layouts, stats = assemble_document(Document(pages=[_grid_page()]), Profile.ENHANCED)
    nodes = layouts[0].nodes
    assert not any(isinstance(n, (TableBlock, ImageBlock)) for n in nodes)
    assert isinstance(nodes[0], Heading) and nodes[0].text == "Report"
    assert all(not n.styled for n in nodes if isinstance(n, (Paragraph, ListItem)))
    assert stats.tables == 0 and stats.images == 0
    assert stats.lists == 1


def test_full_profile_orders_images_tables_then_lines():
    layouts, stats = assemble_document(Document(pages=[_grid_page()]), Profile.FULL)
    nodes = layouts[0].nodes
    assert isinstance(nodes[0], ImageBlock)
    assert isinstance(nodes[1], TableBlock)
    assert isinstance(nodes[2], Heading)
    assert isinstance(nodes[3], ListItem) and nodes[3].styled
    assert isinstance(nodes[4], Paragraph)
    assert [n.level for n in nodes[5:]] == [2, 3]
    assert (stats.tables, stats.images, stats.headings, stats.lists) == (1, 1, 3, 1)


def test_full_profile_counts_across_pages():
    doc = Document(pages=[_grid_page(), _grid_page(), Page(number=3)])
    layouts, stats = assemble_document(doc, Profile.FULL)
    assert [l.number for l in layouts] == [1, 2, 3]
    assert layouts[2].nodes == []
    assert stats.tables == 2 and stats.images == 2


def test_pages_are_numbered_by_position():
    pages = [_grid_page(), _grid_page(), Page(number=7)]
    layouts, _ = assemble_document(Document(pages=pages), Profile.FULL, workers=2)
    assert [l.number for l in layouts] == [1, 2, 3]
    blocks = [n for l in layouts for n in l.nodes if isinstance(n, TableBlock)]
    assert [b.page_number for b in blocks] == [1, 2]


def test_threaded_layout_keeps_page_order():
    pages = [Page(number=i + 1, fragments=[TextFragment(x=0, y=1.0, text=f"p{i}")]) for i in range(6)]
    serial, _ = assemble_document(Document(pages=pages), Profile.FULL)
    threaded, _ = assemble_document(Document(pages=pages), Profile.FULL, workers=4)
    assert serial == threaded
