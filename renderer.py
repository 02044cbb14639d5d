"""
Cheat Sheet PDF Renderer
Draws a computed DocumentLayout onto a reportlab canvas and returns the bytes.
Matches the visual style: colored header bars, compact text, tinted callouts.
"""

import io
import logging

from reportlab.lib.colors import HexColor
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from errors import RenderError
from fonts import register_fonts, text_width
from layout import DEFAULT_STYLE, SUB_BULLET, DocumentLayout, LayoutStyle
from models import RenderedDocument

logger = logging.getLogger(__name__)

# Section header colors by section type
SECTION_COLORS = {
    "quick_reference": "#0d7377",  # Teal
    "step_by_step": "#1a5276",     # Blue
    "comparison": "#6c3483",       # Purple
    "tips": "#7d6608",             # Gold/olive
    "key_takeaways": "#117a65",    # Green
    "glossary": "#5d6d7e",         # Slate
    "custom": "#424949",           # Charcoal
}

# Accent (border) and fill per callout kind
CALLOUT_COLORS = {
    "tip": ("#1e8449", "#eafaf1"),
    "warning": ("#c0392b", "#fdedec"),
}

TEXT_COLOR = "#1c1c1c"
MUTED_COLOR = "#6b6b6b"
RULE_COLOR = "#d0d0d0"


class CheatSheetRenderer:
    def __init__(self, style: LayoutStyle = DEFAULT_STYLE):
        self.style = style
        self.c = None  # canvas

    def _get_color(self, section_type: str) -> str:
        return SECTION_COLORS.get(section_type, SECTION_COLORS["custom"])

    def _baseline(self, line_top: float, line_height: float, font_size: float) -> float:
        """Baseline that vertically centers a line of text in its line box."""
        return line_top - (line_height + font_size * 0.7) / 2

    def _draw_lines(self, lines, x: float, top: float, font_name: str,
                    font_size: float, line_height: float) -> float:
        """Draw pre-wrapped lines downward from top. Returns the new top."""
        self.c.setFont(font_name, font_size)
        for line in lines:
            self.c.drawString(x, self._baseline(top, line_height, font_size), line)
            top -= line_height
        return top

    def _draw_cover(self, element):
        c, s = self.c, self.style
        data = element.data

        # Accent band across the top of the page
        c.setFillColor(HexColor(SECTION_COLORS["quick_reference"]))
        c.rect(0, s.page_height - 12 * mm, s.page_width, 12 * mm, fill=True, stroke=False)

        c.setFillColor(HexColor(TEXT_COLOR))
        top = self._draw_lines(data["title_lines"], element.x, element.y, s.font_bold,
                               s.title_font_size, s.title_line_height)
        top -= s.section_spacing

        if data["subtitle_lines"]:
            c.setFillColor(HexColor(MUTED_COLOR))
            top = self._draw_lines(data["subtitle_lines"], element.x, top, s.font_regular,
                                   s.subtitle_font_size, s.subtitle_line_height)

        c.setStrokeColor(HexColor(SECTION_COLORS["quick_reference"]))
        c.setLineWidth(1.5)
        c.line(element.x, top - s.section_spacing / 2, element.x + 40 * mm, top - s.section_spacing / 2)
        top -= s.section_spacing

        c.setFillColor(HexColor(MUTED_COLOR))
        self._draw_lines([data["summary"]], element.x, top, s.font_regular,
                         s.body_font_size, s.line_height)

    def _draw_toc_title(self, element):
        s = self.style
        self.c.setFillColor(HexColor(TEXT_COLOR))
        self._draw_lines([element.data["text"]], element.x, element.y, s.font_bold,
                         s.title_font_size * 0.75, s.title_line_height)

    def _draw_toc_entry(self, element):
        c, s = self.c, self.style
        baseline = self._baseline(element.y, element.height, s.toc_font_size)
        text = element.data["text"]
        page = str(element.data["page_number"])

        c.setFillColor(HexColor(TEXT_COLOR))
        c.setFont(s.font_regular, s.toc_font_size)
        c.drawString(element.x, baseline, text)
        c.drawRightString(element.x + element.width, baseline, page)

        # Dotted leader between title and page number
        start = element.x + text_width(text, s.font_regular, s.toc_font_size) + 2 * mm
        end = element.x + element.width - text_width(page, s.font_regular, s.toc_font_size) - 2 * mm
        if end > start:
            c.setStrokeColor(HexColor(RULE_COLOR))
            c.setLineWidth(0.6)
            c.setDash(1, 2)
            c.line(start, baseline, end, baseline)
            c.setDash()

    def _draw_section_header(self, element):
        c, s = self.c, self.style
        data = element.data
        color = self._get_color(data["section_type"])

        bar_top = element.y - s.section_spacing
        bar_height = data["bar_height"]

        # Header background
        c.setFillColor(HexColor(color))
        c.rect(element.x, bar_top - bar_height, element.width, bar_height, fill=True, stroke=False)

        # Header text
        c.setFillColor(HexColor("#FFFFFF"))
        self._draw_lines(data["lines"], element.x + s.header_padding, bar_top - s.header_padding,
                         s.font_bold, s.heading_font_size, s.heading_line_height)

        # Type badge, right-aligned on the first line
        c.setFont(s.font_bold, s.badge_font_size)
        baseline = self._baseline(bar_top - s.header_padding, s.heading_line_height, s.badge_font_size)
        c.drawRightString(element.x + element.width - s.header_padding, baseline, data["label"])

    def _draw_item_body(self, data, x: float, top: float):
        """Main text then sub-items, shared by bullets and callouts."""
        s = self.style
        c = self.c
        c.setFillColor(HexColor(TEXT_COLOR))
        top = self._draw_lines(data["text_lines"], x, top, s.font_regular,
                               s.body_font_size, s.line_height)

        for lines in data["sub_lines"]:
            c.setFillColor(HexColor(MUTED_COLOR))
            c.setFont(s.font_regular, s.sub_font_size)
            c.drawString(x + 1 * mm, self._baseline(top, s.sub_line_height, s.sub_font_size), SUB_BULLET)
            top = self._draw_lines(lines, x + s.sub_indent, top, s.font_regular,
                                   s.sub_font_size, s.sub_line_height)

    def _draw_item(self, element):
        s = self.style
        data = element.data
        self.c.setFillColor(HexColor(TEXT_COLOR))
        self.c.setFont(s.font_regular, s.body_font_size)
        self.c.drawString(element.x, self._baseline(element.y, s.line_height, s.body_font_size),
                          data["marker"])
        self._draw_item_body(data, element.x + data["text_x_offset"], element.y)

    def _draw_callout(self, element):
        c, s = self.c, self.style
        data = element.data
        accent, fill = CALLOUT_COLORS[data["callout"]]
        box_height = data["box_height"]

        # Tinted box with accent border and a thicker left rule
        c.setFillColor(HexColor(fill))
        c.setStrokeColor(HexColor(accent))
        c.setLineWidth(0.6)
        c.rect(element.x, element.y - box_height, element.width, box_height, fill=True, stroke=True)
        c.setLineWidth(2.5)
        c.line(element.x, element.y, element.x, element.y - box_height)

        top = element.y - s.callout_padding
        c.setFillColor(HexColor(accent))
        top = self._draw_lines([data["label"]], element.x + s.callout_padding, top, s.font_bold,
                               s.label_font_size, s.label_line_height)
        self._draw_item_body(data, element.x + data["text_x_offset"], top)

    def _draw_footer(self, element):
        c, s = self.c, self.style
        data = element.data

        c.setStrokeColor(HexColor(RULE_COLOR))
        c.setLineWidth(0.5)
        c.line(element.x, element.y - 2 * mm, element.x + element.width, element.y - 2 * mm)

        baseline = element.y - element.height + 2 * mm
        c.setFillColor(HexColor(MUTED_COLOR))
        c.setFont(s.font_regular, s.footer_font_size)
        if data["text"]:
            c.drawString(element.x, baseline, data["text"])
        c.drawRightString(element.x + element.width, baseline,
                          f"Page {data['page_number']} of {data['total_pages']}")

    def _draw_element(self, element):
        draw = {
            "cover": self._draw_cover,
            "toc_title": self._draw_toc_title,
            "toc_entry": self._draw_toc_entry,
            "section_header": self._draw_section_header,
            "item": self._draw_item,
            "callout": self._draw_callout,
            "footer": self._draw_footer,
        }.get(element.kind)
        if draw is None:
            raise RenderError(f"Unknown element kind: {element.kind}")
        draw(element)

    def render(self, document: DocumentLayout) -> RenderedDocument:
        """Draw every page in order and return the finished PDF."""
        register_fonts(self.style)

        buffer = io.BytesIO()
        # invariant=1 drops timestamps/random ids so identical input gives identical bytes
        self.c = canvas.Canvas(buffer, pagesize=(self.style.page_width, self.style.page_height),
                               invariant=1)
        try:
            self.c.setTitle(document.title)
            for page in document.pages:
                for element in page.elements:
                    self._draw_element(element)
                self.c.showPage()
            self.c.save()
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(f"PDF serialization failed: {e}") from e
        finally:
            self.c = None

        pdf_bytes = buffer.getvalue()
        if not pdf_bytes.startswith(b"%PDF-"):
            raise RenderError("PDF backend produced no valid document")

        result = RenderedDocument(pdf_bytes=pdf_bytes, page_count=document.page_count)
        logger.info("Rendered '%s': %d pages, %d bytes", document.title, result.page_count, result.byte_size)
        return result
