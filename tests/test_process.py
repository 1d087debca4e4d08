import json
import xml.etree.ElementTree as ET
from collections import Counter

import pytest

from pdfxml.config import LayoutConfig, load_config
from pdfxml.docs.model import Document, ImageRegion, Page, TextFragment
from pdfxml.docs.pdf_io import document_from_pdf2json
from pdfxml.pipeline import Profile, build_tags, convert_document, convert_file


def _title_page(body_size=10):
    return Page(number=1, fragments=[
        TextFragment(x=10, y=5, text="Title", font_size=24),
        TextFragment(x=10, y=20, text="Body text", font_size=body_size),
    ])


def _mixed_document():
    """Every fragment text is a unique whitespace-free id."""
    n = 0

    def frag(x, y, size=9, prefix="", **kw):
        nonlocal n
        n += 1
        return TextFragment(x=x, y=y, text=f"{prefix}id{n}", font_size=size, **kw)

    page1 = [frag(10, 2, size=20), frag(10, 4, size=16), frag(10, 6, size=14)]
    for y in (10.0, 10.5, 11.0):
        page1 += [frag(x, y) for x in (10, 25, 40, 55)]
    page1 += [frag(10, 20, prefix="•"), frag(15, 20), frag(10, 22, prefix="3)")]
    page1 += [frag(x, 30, bold=True) for x in (5, 15)]
    # single qualifying row: not a table
    page1 += [frag(x, 40) for x in (10, 20, 30)]
    # duplicate coordinates
    page1 += [frag(70, 50), frag(70, 50)]
    page2 = [frag(x, y, size=None) for x, y in ((3, 3), (9, 3.02), (1, 8), (2, 8.5))]
    return Document(pages=[
        Page(number=1, fragments=page1, images=[ImageRegion(1, 1, 4, 4)]),
        Page(number=2, fragments=page2),
        Page(number=3),
    ])


def _output_texts(xml):
    root = ET.fromstring(xml.encode("utf-8"))
    found = Counter()
    for el in root.iter():
        if el.tag in ("text", "heading", "th", "td") and el.text:
            found.update(el.text.split(" "))
    return found


@pytest.mark.parametrize("profile", ["basic", "enhanced", "full"])
def test_every_fragment_appears_exactly_once(profile):
    doc = _mixed_document()
    expected = Counter(f.text for p in doc.pages for f in p.fragments)
    result = convert_document(doc, profile)
    assert _output_texts(result.xml) == expected


def test_title_and_unstyled_body():
    page = _title_page()
    page.fragments[1] = TextFragment(x=10, y=20, text="Body text")
    result = convert_document(Document(pages=[page]), "full")
    assert result.xml.count("<heading ") == 1
    assert '<heading level="1" y="5">Title</heading>' in result.xml
    assert '<paragraph y="20">\n      <text x="10">Body text</text>\n    </paragraph>' in result.xml
    stats = result.statistics
    assert (stats.headings, stats.tables, stats.lists) == (1, 0, 0)


def test_second_distinct_size_ranks_as_level_two():
    result = convert_document(Document(pages=[_title_page()]), "full")
    assert '<heading level="1" y="5">Title</heading>' in result.xml
    assert '<heading level="2" y="20">Body text</heading>' in result.xml
    assert result.statistics.headings == 2


def test_basic_profile_three_leaves():
    page = Page(number=1, fragments=[TextFragment(x=i, y=5.0 + i * 0.01, text=f"t{i}") for i in range(3)])
    result = convert_document(Document(pages=[page]), "basic")
    assert result.xml.count("<text ") == 3
    assert "<paragraph" not in result.xml


def test_character_and_word_counts_follow_xml():
    result = convert_document(_mixed_document(), "full")
    assert result.statistics.characters == len(result.xml)
    assert result.statistics.words == len(result.xml.split())
    assert result.statistics.processing_time >= 0
    assert result.xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<document>')


def test_unknown_profile_uses_enhanced():
    doc = _mixed_document()
    assert convert_document(doc, "pretty").xml == convert_document(doc, "enhanced").xml
    assert convert_document(doc, "pretty").profile is Profile.ENHANCED


def test_full_profile_statistics():
    result = convert_document(_mixed_document(), Profile.FULL, workers=3)
    stats = result.statistics
    assert stats.tables == 1
    assert stats.images == 1
    assert stats.lists == 2
    assert stats.headings == 3
    assert result.page_count == 3
    assert '<table id="table-1-1">' in result.xml


def test_build_tags():
    stats = convert_document(_mixed_document(), "full").statistics
    assert build_tags("report.pdf", Profile.FULL, 3, stats) == [
        "report", "full", "pages:3", "tables", "lists", "headings",
    ]
    empty = convert_document(Document(pages=[Page(number=1)]), "basic")
    assert empty.tags == ["basic", "pages:1"]


def test_convert_file_writes_xml(tmp_path):
    src = tmp_path / "sample.json"
    src.write_text(json.dumps({
        "Meta": {"Title": "Sample"},
        "Pages": [{"Texts": [
            {"x": 10, "y": 5, "R": [{"T": "Title", "TS": [0, 24, 0, 0]}]},
            {"x": 10, "y": 20, "R": [{"T": "%E2%80%A2%20Item"}]},
        ]}],
    }), encoding="utf-8")
    out = tmp_path / "sample.xml"
    result = convert_file(str(src), "full", out_path=str(out))
    assert out.read_text(encoding="utf-8") == result.xml
    assert '<list-item y="20">' in result.xml
    payload = result.to_dict()
    assert payload["structure_type"] == "full"
    assert payload["statistics"]["detected_lists"] == 1
    assert payload["metadata"]["title"] == "Sample"


def test_convert_file_rejects_unknown_extension(tmp_path):
    src = tmp_path / "notes.txt"
    src.write_text("hello", encoding="utf-8")
    with pytest.raises(ValueError):
        convert_file(str(src))
    with pytest.raises(FileNotFoundError):
        convert_file(str(tmp_path / "nope.json"))


def test_load_config_overrides_and_defaults(tmp_path):
    path = tmp_path / "layout.json"
    path.write_text(json.dumps({"row_gap": 2.5, "default_profile": "full", "colour": "blue"}), encoding="utf-8")
    cfg = load_config(str(path))
    assert cfg.row_gap == 2.5
    assert cfg.default_profile == "full"
    assert cfg.min_row_fragments == 3
    assert load_config(str(tmp_path / "missing.json")) == LayoutConfig()
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert load_config(str(bad)) == LayoutConfig()


def test_row_gap_config_joins_distant_rows():
    frags = [TextFragment(x=x, y=y, text="v") for y in (10.0, 12.0) for x in (1, 2, 3)]
    doc = Document(pages=[Page(number=1, fragments=frags)])
    assert convert_document(doc, "full").statistics.tables == 0
    assert convert_document(doc, "full", config=LayoutConfig(row_gap=2.5)).statistics.tables == 1


def test_load_config_coerces_json_values(tmp_path):
    path = tmp_path / "layout.json"
    path.write_text(json.dumps({
        "row_gap": "2.5",
        "min_row_fragments": "4",
        "min_table_rows": 2.0,
        "heading_levels": "three",
        "column_tolerance": True,
        "log_file": None,
    }), encoding="utf-8")
    cfg = load_config(str(path))
    assert cfg.row_gap == 2.5
    assert cfg.min_row_fragments == 4 and isinstance(cfg.min_row_fragments, int)
    assert cfg.min_table_rows == 2 and isinstance(cfg.min_table_rows, int)
    assert cfg.heading_levels == 3
    assert cfg.column_tolerance == 0.1
    assert cfg.log_file is None
    frags = [TextFragment(x=x, y=y, text="v") for y in (10.0, 12.0) for x in (1, 2, 3)]
    doc = Document(pages=[Page(number=1, fragments=frags)])
    assert convert_document(doc, "full", config=cfg).statistics.tables == 0


def test_control_characters_keep_xml_well_formed():
    doc = document_from_pdf2json({"Pages": [{"Texts": [
        {"x": 1, "y": 2, "R": [{"T": "a%01b"}]},
        {"x": 1, "y": 4, "R": [{"T": "tab%09ok%0B"}]},
    ]}]})
    for profile in ("basic", "enhanced", "full"):
        root = ET.fromstring(convert_document(doc, profile).xml.encode("utf-8"))
        texts = [el.text for el in root.iter() if el.tag == "text"]
        assert texts == ["ab", "tab\tok"]
