import pytest

from fonts import clamp_lines, text_width, wrap_text
from layout import (DEFAULT_STYLE, MAX_EXPECTED_PAGES, LayoutStyle, layout_outline,
                    measure_blocks, paginate)
from limits import normalize_outline
from models import Item, Outline, Section, SectionType

EPS = 0.01


def assert_no_overflow(document):
    style = document.style
    for page in document.pages:
        for element in page.elements:
            if element.kind == "footer":
                assert element.bottom >= 0
                assert element.y <= style.content_bottom + EPS
                continue
            assert element.height <= style.usable_height + EPS
            assert element.y <= style.content_top + EPS
            assert element.bottom >= style.content_bottom - EPS


def test_paginate_breaks_before_overflowing_block():
    assert paginate([100, 100, 100], 250) == [[0, 1], [2]]
    assert paginate([], 250) == []


def test_paginate_keeps_flagged_block_with_next():
    heights = [100, 30, 100]
    assert paginate(heights, 200) == [[0, 1], [2]]
    assert paginate(heights, 200, [False, True, False]) == [[0], [1, 2]]


def test_paginate_rejects_block_taller_than_page():
    with pytest.raises(ValueError):
        paginate([50, 300], 200)


def test_wrap_text_respects_width():
    text = "Compressor ratio 3:1 to 4:1 " + "x" * 200
    lines = wrap_text(text, 120, "Helvetica", 10)
    assert len(lines) > 1
    assert all(text_width(line, "Helvetica", 10) <= 120 for line in lines)
    assert "".join(lines).replace(" ", "") == text.replace(" ", "")


def test_wrap_text_empty():
    assert wrap_text("", 100, "Helvetica", 10) == [""]


def test_clamp_lines_adds_ellipsis():
    lines = ["one two three", "four five six", "seven eight"]
    clamped = clamp_lines(lines, 2, 60, "Helvetica", 10)
    assert len(clamped) == 2
    assert clamped[-1].endswith("...")
    assert text_width(clamped[-1], "Helvetica", 10) <= 60


def test_cover_page_comes_first(sample_outline):
    document = layout_outline(normalize_outline(sample_outline))
    cover = document.pages[0]
    assert [e.kind for e in cover.elements] == ["cover"]
    assert cover.elements[0].data["title_lines"] == ["Mixing Essentials"]


def test_toc_follows_cover_with_section_pages(sample_outline):
    document = layout_outline(normalize_outline(sample_outline))
    toc = document.pages[1]

    entries = toc.of_kind("toc_entry")
    assert toc.of_kind("toc_title")
    assert [e.data["text"] for e in entries] == ["1. Key Concepts", "2. Workflow", "3. Pro Tips"]
    assert [e.data["page_number"] for e in entries] == document.section_pages
    assert document.section_pages[0] == 3

    for number in document.section_pages:
        headers = document.pages[number - 1].of_kind("section_header")
        assert headers


def test_toc_can_be_disabled(sample_outline):
    style = LayoutStyle(include_toc=False)
    document = layout_outline(normalize_outline(sample_outline), style)
    assert document.section_pages[0] == 2
    assert not any(page.of_kind("toc_entry") for page in document.pages)


def test_every_page_after_cover_has_footer_with_total(sample_outline):
    document = layout_outline(normalize_outline(sample_outline))
    assert not document.pages[0].of_kind("footer")
    for page in document.pages[1:]:
        footers = page.of_kind("footer")
        assert len(footers) == 1
        assert footers[0].data["page_number"] == page.number
        assert footers[0].data["total_pages"] == document.page_count
        assert footers[0].data["text"] == "Cheat Sheet Generator"


def test_numbering_resets_per_section_and_skips_callouts():
    outline = Outline(title="t", sections=[
        Section(SectionType.STEP_BY_STEP, "First", [Item("a"), Item("tip", is_tip=True), Item("b")]),
        Section(SectionType.STEP_BY_STEP, "Second", [Item("c")]),
        Section(SectionType.QUICK_REFERENCE, "Third", [Item("d")]),
    ])
    blocks = measure_blocks(outline)
    markers = [(b.kind, b.data.get("marker")) for b in blocks if b.kind != "section_header"]
    assert markers == [
        ("item", "1."), ("callout", "•"), ("item", "2."),
        ("item", "1."),
        ("item", "•"),
    ]


def test_callout_kinds(sample_outline):
    blocks = measure_blocks(normalize_outline(sample_outline))
    callouts = [b.data for b in blocks if b.kind == "callout"]
    assert [(c["callout"], c["label"]) for c in callouts] == [("tip", "PRO TIP"), ("warning", "WARNING")]


def test_sample_outline_does_not_overflow(sample_outline):
    assert_no_overflow(layout_outline(normalize_outline(sample_outline)))


@pytest.mark.parametrize("page_size", ["A4", "letter"])
def test_worst_case_outline_stays_under_page_ceiling(worst_case_outline, page_size):
    style = LayoutStyle.for_page_size(page_size)
    document = layout_outline(normalize_outline(worst_case_outline), style)

    assert_no_overflow(document)
    assert document.page_count <= MAX_EXPECTED_PAGES


def test_long_titles_are_clamped(worst_case_outline):
    document = layout_outline(normalize_outline(worst_case_outline))
    cover = document.pages[0].elements[0]
    assert len(cover.data["title_lines"]) == DEFAULT_STYLE.max_title_lines
    assert cover.data["title_lines"][-1].endswith("...")
    for page in document.pages:
        for header in page.of_kind("section_header"):
            assert len(header.data["lines"]) <= DEFAULT_STYLE.max_heading_lines


def test_empty_outline_is_cover_only():
    document = layout_outline(Outline(title="Nothing here"))
    assert document.page_count == 1
    assert document.section_pages == []


def test_section_header_never_ends_a_page():
    # Items tall enough that a page holds only a couple of them
    item = Item("x", sub_items=["y"] * 3)
    sections = [Section(SectionType.QUICK_REFERENCE, f"S{i}", [item] * 6) for i in range(4)]
    style = LayoutStyle(page_height=300, include_toc=False)
    document = layout_outline(Outline(title="t", sections=sections), style)

    assert_no_overflow(document)
    for page in document.pages[1:]:
        flow = [e for e in page.elements if e.kind != "footer"]
        assert flow[-1].kind != "section_header"
