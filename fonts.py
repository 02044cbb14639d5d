"""
Font resources and text measurement shared by the layout engine and the
PDF renderer.
"""

import logging
from typing import List, Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from errors import RenderError

logger = logging.getLogger(__name__)

# TrueType faces registered with reportlab in this process, by name
_registered: dict[str, str] = {}


def register_font(name: str, path: Optional[str]) -> None:
    """Register a TrueType face once. Built-in faces (path=None) need nothing."""
    if path is None:
        return
    if _registered.get(name) == path:
        return
    try:
        pdfmetrics.registerFont(TTFont(name, path))
    except Exception as e:
        raise RenderError(f"Could not load font '{name}' from {path}: {e}") from e
    _registered[name] = path
    logger.debug("Registered font %s from %s", name, path)


def register_fonts(style) -> None:
    """Make the regular and bold faces of a LayoutStyle available."""
    register_font(style.font_regular, style.regular_font_path)
    register_font(style.font_bold, style.bold_font_path)


def text_width(text: str, font_name: str, font_size: float) -> float:
    return pdfmetrics.stringWidth(text, font_name, font_size)


def _split_long_word(word: str, max_width: float, font_name: str, font_size: float) -> List[str]:
    """Break a word wider than max_width into character chunks that fit."""
    chunks = []
    current = ''
    for ch in word:
        if current and text_width(current + ch, font_name, font_size) > max_width:
            chunks.append(current)
            current = ch
        else:
            current += ch
    if current:
        chunks.append(current)
    return chunks


def wrap_text(text: str, max_width: float, font_name: str, font_size: float) -> List[str]:
    """Simple word wrapping. Every returned line fits within max_width."""
    lines = []
    current_line = []

    for word in text.split():
        if text_width(word, font_name, font_size) > max_width:
            pieces = _split_long_word(word, max_width, font_name, font_size)
        else:
            pieces = [word]

        for piece in pieces:
            test_line = ' '.join(current_line + [piece])
            if text_width(test_line, font_name, font_size) <= max_width:
                current_line.append(piece)
            else:
                if current_line:
                    lines.append(' '.join(current_line))
                current_line = [piece]

    if current_line:
        lines.append(' '.join(current_line))

    return lines if lines else ['']


def clamp_lines(lines: List[str], max_lines: int, max_width: float,
                font_name: str, font_size: float, ellipsis: str = "...") -> List[str]:
    """Keep at most max_lines, marking the cut with an ellipsis on the last line."""
    if len(lines) <= max_lines:
        return lines
    kept = lines[:max_lines]
    last = kept[-1]
    while last and text_width(last + ellipsis, font_name, font_size) > max_width:
        last = last[:-1]
    kept[-1] = last.rstrip() + ellipsis
    return kept
