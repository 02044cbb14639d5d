"""
Cheat Sheet Layout Engine
Places a normalized outline onto fixed-size portrait pages.

Layout runs in two passes so the page total is known before anything is
positioned:

1. measure_blocks() wraps every heading/item to the column width and gives
   each block a height; paginate() turns those heights into page boundaries.
2. layout_outline() walks the boundaries and emits positioned elements per
   page, including the "Page N of M" footers and the table of contents page
   numbers, which both depend on the final page count.

Coordinates are PDF points with the origin at the bottom-left corner. An
element's ``y`` is its top edge.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.units import mm

from fonts import clamp_lines, register_fonts, text_width, wrap_text
from models import Outline, SectionType

PAGE_SIZES = {"A4": A4, "letter": letter}

# Page ceiling for the default style and default limits, worst-case text
MAX_EXPECTED_PAGES = 10

BULLET = "•"
SUB_BULLET = "–"

# Badge text drawn on each section header bar
SECTION_LABELS = {
    SectionType.QUICK_REFERENCE: "QUICK REF",
    SectionType.STEP_BY_STEP: "STEPS",
    SectionType.COMPARISON: "COMPARE",
    SectionType.TIPS: "TIPS",
    SectionType.KEY_TAKEAWAYS: "KEY POINTS",
    SectionType.GLOSSARY: "GLOSSARY",
    SectionType.CUSTOM: "NOTES",
}

CALLOUT_LABELS = {"tip": "PRO TIP", "warning": "WARNING"}


@dataclass(frozen=True)
class LayoutStyle:
    page_width: float = A4[0]
    page_height: float = A4[1]
    margin_x: float = 15 * mm
    margin_top: float = 16 * mm
    margin_bottom: float = 16 * mm
    footer_height: float = 10 * mm

    font_regular: str = "Helvetica"
    font_bold: str = "Helvetica-Bold"
    regular_font_path: Optional[str] = None
    bold_font_path: Optional[str] = None

    title_font_size: float = 26
    title_line_height: float = 32
    subtitle_font_size: float = 13
    subtitle_line_height: float = 17
    max_title_lines: int = 4
    max_subtitle_lines: int = 3

    heading_font_size: float = 12.5
    heading_line_height: float = 16
    header_padding: float = 1.5 * mm
    max_heading_lines: int = 2
    badge_font_size: float = 6.5
    section_spacing: float = 4 * mm

    body_font_size: float = 10
    line_height: float = 13
    sub_font_size: float = 9
    sub_line_height: float = 11.5
    bullet_indent: float = 4 * mm
    sub_indent: float = 4 * mm
    item_spacing: float = 1.5 * mm

    callout_padding: float = 2 * mm
    label_font_size: float = 7
    label_line_height: float = 10

    toc_font_size: float = 11
    toc_line_height: float = 18
    footer_font_size: float = 8

    include_toc: bool = True

    @classmethod
    def for_page_size(cls, name: str, **overrides) -> "LayoutStyle":
        width, height = PAGE_SIZES[name]
        return cls(page_width=width, page_height=height, **overrides)

    @property
    def content_left(self) -> float:
        return self.margin_x

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin_x

    @property
    def content_top(self) -> float:
        return self.page_height - self.margin_top

    @property
    def content_bottom(self) -> float:
        return self.margin_bottom + self.footer_height

    @property
    def usable_height(self) -> float:
        return self.content_top - self.content_bottom


DEFAULT_STYLE = LayoutStyle()


@dataclass
class Block:
    """A measured, not yet positioned, unit of flow content."""
    kind: str
    height: float
    data: dict
    keep_with_next: bool = False


@dataclass
class Element:
    kind: str
    x: float
    y: float
    width: float
    height: float
    data: dict = field(default_factory=dict)

    @property
    def bottom(self) -> float:
        return self.y - self.height


@dataclass
class PageLayout:
    number: int
    elements: List[Element] = field(default_factory=list)

    def of_kind(self, kind: str) -> List[Element]:
        return [e for e in self.elements if e.kind == kind]


@dataclass
class DocumentLayout:
    style: LayoutStyle
    pages: List[PageLayout]
    title: str = ""
    # Page number each section header landed on, in render order
    section_pages: List[int] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)


def paginate(heights: Sequence[float], usable_height: float,
             keep_with_next: Optional[Sequence[bool]] = None) -> List[List[int]]:
    """Split a run of block heights into pages.

    Returns a list of pages, each a list of block indices in order. A block
    that does not fit in the space left starts a new page. A block flagged
    keep_with_next also moves when the block after it would not fit, as long
    as the pair fits on an empty page.

    Raises:
        ValueError: a single block is taller than the usable height
    """
    pages: List[List[int]] = []
    current: List[int] = []
    used = 0.0

    for i, height in enumerate(heights):
        if height > usable_height:
            raise ValueError(f"Block {i} is {height:.1f}pt tall, page holds {usable_height:.1f}pt")

        needed = height
        if keep_with_next and keep_with_next[i] and i + 1 < len(heights):
            pair = height + heights[i + 1]
            if pair <= usable_height:
                needed = pair

        if current and used + needed > usable_height:
            pages.append(current)
            current = []
            used = 0.0

        current.append(i)
        used += height

    if current:
        pages.append(current)
    return pages


def _section_header_block(section, index: int, style: LayoutStyle) -> Block:
    label = SECTION_LABELS[section.type]
    badge_width = text_width(label, style.font_bold, style.badge_font_size) + 4 * mm
    title_width = style.content_width - 2 * style.header_padding - badge_width
    lines = wrap_text(section.title, title_width, style.font_bold, style.heading_font_size)
    lines = clamp_lines(lines, style.max_heading_lines, title_width,
                        style.font_bold, style.heading_font_size)
    bar_height = len(lines) * style.heading_line_height + 2 * style.header_padding
    return Block(
        kind="section_header",
        height=style.section_spacing + bar_height + style.item_spacing,
        data={
            "section_index": index,
            "section_type": section.type.value,
            "label": label,
            "lines": lines,
            "bar_height": bar_height,
        },
        keep_with_next=True,
    )


def _item_block(item, marker: Optional[str], style: LayoutStyle) -> Block:
    callout = "warning" if item.is_warning else ("tip" if item.is_tip else None)

    if callout:
        inner_width = style.content_width - 2 * style.callout_padding
        text_x_offset = style.callout_padding
    else:
        inner_width = style.content_width - style.bullet_indent
        text_x_offset = style.bullet_indent
    sub_width = inner_width - style.sub_indent

    text_lines = wrap_text(item.text, inner_width, style.font_regular, style.body_font_size)
    sub_lines = [wrap_text(sub, sub_width, style.font_regular, style.sub_font_size)
                 for sub in item.sub_items]

    body_height = (len(text_lines) * style.line_height
                   + sum(len(lines) for lines in sub_lines) * style.sub_line_height)
    if callout:
        box_height = 2 * style.callout_padding + style.label_line_height + body_height
    else:
        box_height = body_height

    return Block(
        kind="callout" if callout else "item",
        height=box_height + style.item_spacing,
        data={
            "marker": marker,
            "callout": callout,
            "label": CALLOUT_LABELS.get(callout),
            "text_lines": text_lines,
            "sub_lines": sub_lines,
            "text_x_offset": text_x_offset,
            "box_height": box_height,
        },
    )


def measure_blocks(outline: Outline, style: LayoutStyle = DEFAULT_STYLE) -> List[Block]:
    """First pass: turn the outline's sections into measured flow blocks."""
    blocks = []
    for index, section in enumerate(outline.sections):
        blocks.append(_section_header_block(section, index, style))
        step = 0
        for item in section.items:
            marker = BULLET
            if section.numbered and not (item.is_tip or item.is_warning):
                step += 1
                marker = f"{step}."
            blocks.append(_item_block(item, marker, style))
    return blocks


def _toc_blocks(outline: Outline, style: LayoutStyle) -> List[Block]:
    blocks = [Block(kind="toc_title", height=style.title_line_height + style.section_spacing,
                    data={"text": "Contents"}, keep_with_next=True)]
    entry_width = style.content_width - 20 * mm
    for index, section in enumerate(outline.sections):
        text = f"{index + 1}. {section.title}"
        lines = clamp_lines(wrap_text(text, entry_width, style.font_regular, style.toc_font_size),
                            1, entry_width, style.font_regular, style.toc_font_size)
        blocks.append(Block(kind="toc_entry", height=style.toc_line_height,
                            data={"section_index": index, "text": lines[0]}))
    return blocks


def _cover_element(outline: Outline, style: LayoutStyle) -> Element:
    width = style.content_width
    title_lines = clamp_lines(
        wrap_text(outline.title or "Cheat Sheet", width, style.font_bold, style.title_font_size),
        style.max_title_lines, width, style.font_bold, style.title_font_size)
    subtitle_lines = []
    if outline.subtitle:
        subtitle_lines = clamp_lines(
            wrap_text(outline.subtitle, width, style.font_regular, style.subtitle_font_size),
            style.max_subtitle_lines, width, style.font_regular, style.subtitle_font_size)

    sections = len(outline.sections)
    summary = (f"{sections} section{'' if sections == 1 else 's'} · "
               f"{outline.item_count} item{'' if outline.item_count == 1 else 's'}")

    height = (len(title_lines) * style.title_line_height
              + len(subtitle_lines) * style.subtitle_line_height
              + 2 * style.section_spacing + style.line_height)
    # Cover block sits a third of the way down the page
    top = style.content_top - style.usable_height / 3
    return Element(kind="cover", x=style.content_left, y=top, width=width, height=height,
                   data={"title_lines": title_lines, "subtitle_lines": subtitle_lines,
                         "summary": summary})


def _place(blocks: List[Block], page_indices: List[int], style: LayoutStyle) -> List[Element]:
    elements = []
    cursor = style.content_top
    for i in page_indices:
        block = blocks[i]
        elements.append(Element(kind=block.kind, x=style.content_left, y=cursor,
                                width=style.content_width, height=block.height,
                                data=dict(block.data)))
        cursor -= block.height
    return elements


def _footer_element(page_number: int, total: int, footer_text: str, style: LayoutStyle) -> Element:
    return Element(kind="footer", x=style.content_left,
                   y=style.margin_bottom + style.footer_height,
                   width=style.content_width, height=style.footer_height,
                   data={"page_number": page_number, "total_pages": total, "text": footer_text})


def layout_outline(outline: Outline, style: LayoutStyle = DEFAULT_STYLE) -> DocumentLayout:
    """Lay out a normalized outline: cover, optional contents, then sections."""
    register_fonts(style)

    content_blocks = measure_blocks(outline, style)
    content_pages = paginate([b.height for b in content_blocks], style.usable_height,
                             [b.keep_with_next for b in content_blocks])

    toc_blocks: List[Block] = []
    toc_pages: List[List[int]] = []
    if style.include_toc and outline.sections:
        toc_blocks = _toc_blocks(outline, style)
        toc_pages = paginate([b.height for b in toc_blocks], style.usable_height,
                             [b.keep_with_next for b in toc_blocks])

    first_content_page = 2 + len(toc_pages)
    total = 1 + len(toc_pages) + len(content_pages)

    section_pages: Dict[int, int] = {}
    for offset, indices in enumerate(content_pages):
        for i in indices:
            if content_blocks[i].kind == "section_header":
                section_pages[content_blocks[i].data["section_index"]] = first_content_page + offset

    pages = [PageLayout(number=1, elements=[_cover_element(outline, style)])]

    page_runs: List[Tuple[List[Block], List[int]]] = (
        [(toc_blocks, indices) for indices in toc_pages]
        + [(content_blocks, indices) for indices in content_pages])
    for number, (blocks, indices) in enumerate(page_runs, start=2):
        elements = _place(blocks, indices, style)
        for element in elements:
            if element.kind == "toc_entry":
                element.data["page_number"] = section_pages[element.data["section_index"]]
        elements.append(_footer_element(number, total, outline.footer, style))
        pages.append(PageLayout(number=number, elements=elements))

    return DocumentLayout(
        style=style,
        pages=pages,
        title=outline.title,
        section_pages=[section_pages[i] for i in range(len(outline.sections))],
    )
