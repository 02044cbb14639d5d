"""
Cheat sheet limits enforcer.

LLM output is not trusted to respect the size limits given in the prompt, so
every outline goes through here before layout. Trimming is lossy but
deterministic and keeps the highest-value content:

1. keep the highest-priority sections
2. keep the first N items of each section (authorial order is preserved)
3. truncate long text and drop extra sub-items
4. enforce a global item budget by shrinking, then dropping, the
   lowest-priority section
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from models import Item, Outline, Section

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutlineLimits:
    # None means unbounded
    max_sections: Optional[int] = 4
    max_items_per_section: int = 6
    max_sub_items: int = 3
    max_item_chars: int = 100
    max_sub_item_chars: int = 80
    max_total_items: Optional[int] = 30
    # Size the lowest-priority section is cut down to before it gets dropped
    trim_to_items: int = 3
    ellipsis: str = "..."
    # When False, sections keep their input order
    rank_by_priority: bool = True


DEFAULT_LIMITS = OutlineLimits()

# Multi-module reference guides: every section kept, in module order
REFERENCE_LIMITS = OutlineLimits(max_sections=None, max_total_items=None, rank_by_priority=False)


def truncate_text(text: str, max_chars: int, ellipsis: str = "...") -> str:
    """Cut text to max_chars, ending with the ellipsis marker when cut.

    >>> truncate_text("x" * 101, 100)[-4:]
    'x...'
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars - len(ellipsis)] + ellipsis


def _trim_item(item: Item, limits: OutlineLimits) -> Item:
    return Item(
        text=truncate_text(item.text, limits.max_item_chars, limits.ellipsis),
        sub_items=[
            truncate_text(sub, limits.max_sub_item_chars, limits.ellipsis)
            for sub in item.sub_items[:limits.max_sub_items]
        ],
        is_tip=item.is_tip,
        is_warning=item.is_warning,
    )


def _total_items(sections: Sequence[Section]) -> int:
    return sum(len(s.items) for s in sections)


def enforce_cheat_sheet_limits(sections: Sequence[Section],
                               limits: OutlineLimits = DEFAULT_LIMITS) -> List[Section]:
    """Return a new list of sections that satisfies every limit.

    Total over its input: an empty list gives an empty list, and the input
    sections are never mutated.
    """
    if not sections:
        return []

    # sorted() is stable, so equal priorities keep their input order
    if limits.rank_by_priority:
        ranked = sorted(sections, key=lambda s: s.priority, reverse=True)
    else:
        ranked = list(sections)
    kept = ranked[:limits.max_sections]
    if len(ranked) > len(kept):
        logger.debug("Dropped %d low-priority sections: %s",
                     len(ranked) - len(kept),
                     [s.type.value for s in ranked[len(kept):]])

    result = [
        Section(
            type=section.type,
            title=section.title,
            items=[_trim_item(item, limits)
                   for item in section.items[:limits.max_items_per_section]],
        )
        for section in kept
    ]

    total = _total_items(result)
    while (limits.max_total_items is not None and total > limits.max_total_items
           and len(result) > 1):
        last = result[-1]
        if len(last.items) > limits.trim_to_items:
            logger.debug("Over budget (%d items): trimming '%s' to %d items",
                         total, last.title, limits.trim_to_items)
            result[-1] = replace(last, items=last.items[:limits.trim_to_items])
        else:
            logger.debug("Over budget (%d items): removing section '%s'",
                         total, last.title)
            result.pop()
        total = _total_items(result)

    items_in = _total_items(sections)
    if len(result) < len(sections) or total < items_in:
        logger.info("Trimmed outline: sections %d -> %d, items %d -> %d",
                    len(sections), len(result), items_in, total)
    return result


def normalize_outline(outline: Outline, limits: OutlineLimits = DEFAULT_LIMITS) -> Outline:
    """Return a copy of the outline with its sections trimmed to the limits."""
    return replace(outline, sections=enforce_cheat_sheet_limits(outline.sections, limits))
