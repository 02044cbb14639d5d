"""
Prompt template for generating cheat sheet outlines from course material.
The model is asked for strict JSON so the answer can go straight through
parser.parse_ai_output().
"""

import html
import re
from typing import Iterable, Optional

from limits import DEFAULT_LIMITS

SYSTEM_PROMPT = """You are a cheat sheet distiller. You will receive course or lecture material and turn it into a compact reference sheet someone keeps open while they work.

THE MID-TASK TEST: if an item helps the reader RIGHT NOW (a setting, a value, a workflow step, a range), KEEP IT. If it needs "understanding" or "context", CUT IT.

HARD CONSTRAINTS (violating these = failure):
- MAXIMUM {max_sections} sections
- MAXIMUM {max_items} items per section
- MAXIMUM {max_sub_items} subItems per item
- Each item.text MUST be under {max_item_chars} characters
- Each subItem MUST be under {max_sub_item_chars} characters
- Total items across all sections: 20-25 (target 22)
- ZERO filler, intros, or conceptual items

PRIORITIZATION (in order):
1. Specific values: numbers, units, percentages, ratios
2. Workflows: exact order of operations
3. Quick comparisons: "X vs Y: use X when..."
4. Critical warnings: mistakes that ruin the result
5. Non-obvious pro tips
6. EVERYTHING ELSE: CUT IT

SECTION TYPES (use these only):
- "quick_reference": settings, values, ranges (PREFERRED, 50%+ of sections)
- "step_by_step": ordered workflows
- "comparison": A vs B decisions with clear guidance
- "tips": ONLY genuinely non-obvious techniques (max 1 section)
- "key_takeaways": only if every item contains a specific value
- "glossary": avoid unless terms are the point of the material

FORMATTING:
- item.text: one fact, one setting, or one step.
- subItems: supporting specifics only
- isTip: true ONLY for non-obvious techniques
- isWarning: true ONLY for things that cause real damage

Respond ONLY with valid JSON, no markdown, no commentary:
{{
  "sections": [
    {{
      "heading": "Section Title",
      "type": "quick_reference|step_by_step|comparison|tips|key_takeaways|glossary|custom",
      "items": [
        {{
          "text": "Concise item under {max_item_chars} chars",
          "subItems": ["Detail under {max_sub_item_chars} chars"],
          "isTip": false,
          "isWarning": false
        }}
      ]
    }}
  ]
}}""".format(
    max_sections=DEFAULT_LIMITS.max_sections,
    max_items=DEFAULT_LIMITS.max_items_per_section,
    max_sub_items=DEFAULT_LIMITS.max_sub_items,
    max_item_chars=DEFAULT_LIMITS.max_item_chars,
    max_sub_item_chars=DEFAULT_LIMITS.max_sub_item_chars,
)

USER_PROMPT_TEMPLATE = """Course: "{title}"
{module_line}
Distill into a 1-2 page cheat sheet:

{content}
{topics_block}
MAXIMUM {max_sections} sections, ~22 items total. Every item must pass the mid-task test."""

CHAPTER_CHAR_LIMIT = 3000
TRUNCATION_MARKER = "... [truncated]"

_TAG = re.compile(r'<[^>]*>')
_WHITESPACE = re.compile(r'\s+')


def strip_html_tags(text: str) -> str:
    """Reduce rich-text chapter HTML to a single line of plain text."""
    text = _TAG.sub(' ', text or '')
    text = html.unescape(text).replace('\xa0', ' ')
    return _WHITESPACE.sub(' ', text).strip()


def build_chapter_content(chapters: Iterable[dict], max_chars: int = CHAPTER_CHAR_LIMIT) -> str:
    """
    Format chapters as markdown-ish blocks for the user prompt.

    Args:
        chapters: dicts with 'title', optional 'description' (HTML),
                  'lessonTitle' and 'position'
        max_chars: per-chapter plain text budget

    Returns:
        "### Title (Lesson)\\ntext" blocks joined by blank lines, in position order
    """
    ordered = sorted(chapters, key=lambda ch: ch.get('position') or 0)
    blocks = []
    for ch in ordered:
        plain = strip_html_tags(ch.get('description') or '')
        body = plain[:max_chars]
        if len(plain) > max_chars:
            body += TRUNCATION_MARKER
        lesson = f" ({ch['lessonTitle']})" if ch.get('lessonTitle') else ''
        blocks.append(f"### {ch.get('title', 'Untitled')}{lesson}\n{body}")
    return "\n\n".join(blocks)


def group_chapters_by_module(chapters: Iterable[dict]) -> dict[str, list[dict]]:
    """Group chapters by 'moduleTitle', keeping first-seen module order."""
    groups: dict[str, list[dict]] = {}
    for ch in chapters:
        groups.setdefault(ch.get('moduleTitle') or "General", []).append(ch)
    return groups


def build_prompt(title: str, content: str, module: Optional[str] = None,
                 chapter_count: Optional[int] = None,
                 topics: Optional[list[str]] = None) -> tuple[str, str]:
    """
    Build the system and user prompts for outline generation.

    Args:
        title: Course or document title shown to the model
        content: Source material (plain text or build_chapter_content() output)
        module: Optional module name when generating one sheet per module
        chapter_count: Number of chapters in the content, for the module line
        topics: Optional list of topics the sheet must focus on

    Returns:
        Tuple of (system_prompt, user_prompt)
    """
    module_line = ''
    if module:
        module_line = f'Module: "{module}"'
        if chapter_count:
            module_line += f" ({chapter_count} chapters)"
        module_line += "\n"

    topics_block = ''
    if topics:
        topics_block = "\nFOCUS TOPICS:\n" + "\n".join(f"- {t}" for t in topics) + "\n"

    user_prompt = USER_PROMPT_TEMPLATE.format(
        title=title,
        module_line=module_line,
        content=content,
        topics_block=topics_block,
        max_sections=DEFAULT_LIMITS.max_sections,
    )
    return SYSTEM_PROMPT, user_prompt
