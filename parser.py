"""
Parser for AI-generated cheat sheet outlines.
Turns the model's JSON answer into Outline / Section / Item objects.
"""

import json
import logging
import re

from errors import ValidationError
from models import Item, Outline, Section, SectionType

logger = logging.getLogger(__name__)

UNTITLED_SECTION = "Untitled Section"

# Opening fence with optional language tag, e.g. ```json
_FENCE_OPEN = re.compile(r'^```[A-Za-z0-9_-]*\s*\n?')
_FENCE_CLOSE = re.compile(r'\n?```\s*$')


def clean_json_response(content: str) -> str:
    """Strip markdown code fences the model sometimes wraps its JSON in."""
    cleaned = content.strip()
    if cleaned.startswith('```'):
        cleaned = _FENCE_OPEN.sub('', cleaned, count=1)
        cleaned = _FENCE_CLOSE.sub('', cleaned, count=1)
    return cleaned.strip()


def _parse_sub_items(raw) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Ignoring non-list subItems: %r", raw)
        return []
    return [str(sub).strip() for sub in raw if sub is not None and str(sub).strip()]


def _parse_item(raw) -> Item | None:
    if isinstance(raw, str):
        return Item(text=raw.strip())
    if not isinstance(raw, dict):
        logger.warning("Skipping malformed item: %r", raw)
        return None

    return Item(
        text=str(raw.get('text') or '').strip(),
        sub_items=_parse_sub_items(raw.get('subItems', raw.get('sub_items'))),
        is_tip=raw.get('isTip', raw.get('is_tip')) is True,
        is_warning=raw.get('isWarning', raw.get('is_warning')) is True,
    )


def _parse_section(raw, index: int) -> Section | None:
    if not isinstance(raw, dict):
        logger.warning("Skipping malformed section #%d: %r", index, raw)
        return None

    title = str(raw.get('heading') or raw.get('title') or '').strip()
    if not title:
        logger.warning("Section #%d has no title, using '%s'", index, UNTITLED_SECTION)
        title = UNTITLED_SECTION

    raw_type = raw.get('type')
    section_type = SectionType.coerce(raw_type)
    if raw_type is not None and section_type.value != str(raw_type).strip().lower():
        logger.warning("Section '%s' has unknown type %r, treating as custom", title, raw_type)

    raw_items = raw.get('items') or []
    if not isinstance(raw_items, list):
        logger.warning("Section '%s' items is not a list, ignoring", title)
        raw_items = []

    items = [item for item in (_parse_item(i) for i in raw_items) if item is not None]
    return Section(type=section_type, title=title, items=items)


def parse_sections(data) -> list[Section]:
    """
    Validate a decoded outline object into Section objects.

    Expected shape:
    {"sections": [{"heading": "...", "type": "quick_reference",
                   "items": [{"text": "...", "subItems": ["..."],
                              "isTip": false, "isWarning": false}]}]}

    Field-level problems fall back to safe defaults (untitled section,
    custom type, no sub-items). Only a missing sections list is fatal.

    Raises:
        ValidationError: data is not an object or has no sections list
    """
    if not isinstance(data, dict):
        raise ValidationError("Invalid outline: expected a JSON object")
    sections = data.get('sections')
    if not isinstance(sections, list):
        raise ValidationError("Invalid outline: missing sections array")

    parsed = [_parse_section(raw, i) for i, raw in enumerate(sections)]
    return [section for section in parsed if section is not None]


def parse_ai_output(raw_output: str) -> list[Section]:
    """
    Parse the raw AI answer into Section objects.

    Args:
        raw_output: JSON text from the model, optionally inside ``` fences

    Returns:
        List of Section objects in the order the model produced them
    """
    if raw_output is not None and not isinstance(raw_output, str):
        raise ValidationError(f"AI output must be a string, got {type(raw_output).__name__}")
    cleaned = clean_json_response(raw_output or '')
    if not cleaned:
        raise ValidationError("Empty AI output")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ValidationError(f"AI output is not valid JSON: {e.msg} (line {e.lineno})") from e
    return parse_sections(data)


def outline_from_dict(data, title: str = "", subtitle: str = "", footer: str = "") -> Outline:
    """Build an Outline from a JSON-shaped mapping.

    Title, subtitle and footer in the mapping win over the keyword defaults.
    """
    sections = parse_sections(data)
    return Outline(
        title=str(data.get('title') or title or "Cheat Sheet"),
        subtitle=str(data.get('subtitle') or subtitle or ''),
        footer=str(data.get('footer') or footer or ''),
        sections=sections,
    )
