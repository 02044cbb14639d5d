"""
Main entry point for the Cheat Sheet Generator.

Workflow:
1. Get an outline (JSON) from an AI model, or from a file
2. Parse it into sections
3. Trim it to the cheat sheet limits
4. Lay it out and render to PDF

Usage:
    python main.py --outline outline.json --title "Mixing Basics" --output cheatsheet.pdf
    python main.py --chapters chapters.json --title "Mixing 101" -o sheets/mixing.pdf
    python main.py --chapters chapters.json --reference --title "Mixing 101" -o guide.pdf

Or use generate_pdf() / generate_from_ai_output() programmatically.
"""

import argparse
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from config import DEFAULT_MODEL, PAGE_SIZES, configure_logging, load_settings
from errors import GenerationError, ValidationError
from layout import LayoutStyle, layout_outline
from limits import DEFAULT_LIMITS, REFERENCE_LIMITS, OutlineLimits, normalize_outline
from models import Outline, RenderedDocument
from parser import parse_ai_output
from prompt_template import build_chapter_content, build_prompt, group_chapters_by_module
from renderer import CheatSheetRenderer

logger = logging.getLogger(__name__)

# Modules with less source text than this are skipped in a pack
MIN_MODULE_CONTENT_CHARS = 50


def generate_pdf(outline: Outline, style: Optional[LayoutStyle] = None,
                 limits: OutlineLimits = DEFAULT_LIMITS) -> RenderedDocument:
    """Normalize, lay out and render one outline."""
    style = style or LayoutStyle()
    normalized = normalize_outline(outline, limits)
    document = layout_outline(normalized, style)
    return CheatSheetRenderer(style).render(document)


def generate_from_ai_output(ai_output: str, title: str, subtitle: str = "", footer: str = "",
                            output_path: Optional[str] = None,
                            style: Optional[LayoutStyle] = None) -> RenderedDocument:
    """
    Generate a PDF from already-obtained AI output.

    Args:
        ai_output: Raw AI answer containing the JSON outline
        title: Cover page title
        subtitle: Cover page subtitle
        footer: Text shown in the running footer
        output_path: Where to save the PDF, if anywhere

    Returns:
        The rendered document
    """
    sections = parse_ai_output(ai_output)
    outline = Outline(title=title, subtitle=subtitle, footer=footer, sections=sections)

    logger.info("Parsed %d sections, %d items", len(sections), outline.item_count)
    for section in sections:
        logger.debug("  [%s] %s (%d items)", section.type.value, section.title[:50], len(section.items))

    rendered = generate_pdf(outline, style)

    if output_path:
        Path(output_path).write_bytes(rendered.pdf_bytes)
        print(f"✓ PDF saved: {output_path} ({rendered.page_count} pages, {rendered.byte_size} bytes)")

    return rendered


def request_outline(
    content: str,
    title: str,
    api_key: str,
    module: Optional[str] = None,
    chapter_count: Optional[int] = None,
    model: str = DEFAULT_MODEL
) -> str:
    """Ask Claude for a JSON outline of the content. Returns the raw answer text."""
    try:
        import anthropic
    except ImportError:
        raise ImportError("Install anthropic: pip install anthropic")

    system_prompt, user_prompt = build_prompt(title, content, module=module,
                                              chapter_count=chapter_count)

    client = anthropic.Anthropic(api_key=api_key)

    logger.info("Calling Claude model=%s module=%r promptLen=%d", model, module, len(user_prompt))
    response = client.messages.create(
        model=model,
        max_tokens=4000,
        temperature=0.3,
        system=system_prompt,
        messages=[{"role": "user", "content": user_prompt}]
    )

    ai_output = response.content[0].text
    logger.info("Received %d characters from AI", len(ai_output))
    return ai_output


def generate_with_api(
    content: str,
    title: str,
    api_key: str,
    subtitle: str = "",
    footer: str = "",
    output_path: Optional[str] = None,
    model: str = DEFAULT_MODEL
) -> RenderedDocument:
    """
    Full pipeline: source content → AI → PDF
    """
    ai_output = request_outline(content, title, api_key, model=model)
    return generate_from_ai_output(ai_output, title, subtitle, footer, output_path)


@dataclass
class PackSheet:
    module_title: str
    document: RenderedDocument


@dataclass
class PackResult:
    total_modules: int
    sheets: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    @property
    def completed_modules(self) -> int:
        return len(self.sheets)


def generate_pack(
    course_title: str,
    modules: Iterable[Tuple[str, str]],
    outline_source: Callable[[str, str], str],
    footer: str = "",
    style: Optional[LayoutStyle] = None,
) -> PackResult:
    """
    Generate one cheat sheet per module, one module at a time.

    A failing module never stops the pack: its error is logged and recorded
    in the result's warnings.

    Args:
        course_title: Shown in every sheet's subtitle
        modules: (module_name, content) pairs, in order
        outline_source: callable(module_name, content) returning raw AI output

    Returns:
        PackResult with the finished sheets and any warnings
    """
    modules = list(modules)
    result = PackResult(total_modules=len(modules))

    for module_name, content in modules:
        if len(content.strip()) < MIN_MODULE_CONTENT_CHARS:
            result.warnings.append(f'Skipped module "{module_name}": no meaningful content')
            continue
        try:
            ai_output = outline_source(module_name, content)
            document = generate_from_ai_output(
                ai_output,
                title=module_name,
                subtitle=f"{course_title}: Module Cheat Sheet",
                footer=footer,
                style=style,
            )
        except Exception as e:
            logger.error('Module "%s" failed: %s', module_name, e)
            result.warnings.append(f'Module "{module_name}" failed: {e}')
            continue

        result.sheets.append(PackSheet(module_title=module_name, document=document))
        logger.info('Module "%s" done (%d/%d)', module_name, result.completed_modules,
                    result.total_modules)

    return result


@dataclass
class ReferenceGuide:
    outline: Outline
    document: RenderedDocument
    warnings: list = field(default_factory=list)


def generate_reference_guide(
    course_title: str,
    modules: Iterable[Tuple[str, str]],
    outline_source: Callable[[str, str], str],
    chapter_count: Optional[int] = None,
    footer: str = "",
    style: Optional[LayoutStyle] = None,
    limits: OutlineLimits = REFERENCE_LIMITS,
) -> ReferenceGuide:
    """
    Generate one combined reference PDF covering every module.

    Sections from each module are appended in module order. The cheat sheet
    section cap does not apply here, only the per-item limits.

    Args:
        course_title: Used for the cover title
        modules: (module_name, content) pairs, in order
        outline_source: callable(module_name, content) returning raw AI output
        chapter_count: Total chapters, shown in the cover subtitle

    Raises:
        GenerationError: no module produced any sections
    """
    modules = list(modules)
    sections = []
    warnings = []

    for module_name, content in modules:
        if len(content.strip()) < MIN_MODULE_CONTENT_CHARS:
            warnings.append(f'Skipped module "{module_name}": no meaningful content')
            continue
        try:
            module_sections = parse_ai_output(outline_source(module_name, content))
        except Exception as e:
            logger.error('Module "%s" failed: %s', module_name, e)
            warnings.append(f'Module "{module_name}" failed: {e}')
            continue
        sections.extend(module_sections)
        logger.info('Module "%s" added %d sections', module_name, len(module_sections))

    if not sections:
        detail = f": {warnings[0]}" if warnings else ""
        raise GenerationError(f"Failed to generate content for any module{detail}", warnings)

    module_text = f"{len(modules)} module{'' if len(modules) == 1 else 's'}"
    if chapter_count is not None:
        module_text = f"{chapter_count} chapters across {module_text}"
    outline = Outline(
        title=f"{course_title}: Reference Guide",
        subtitle=f"Complete reference covering {module_text}",
        footer=footer,
        sections=sections,
    )
    document = generate_pdf(outline, style, limits)
    return ReferenceGuide(outline=outline, document=document, warnings=warnings)


class ClaudeOutlineSource:
    """Outline source that asks Claude about one module at a time."""

    def __init__(self, course_title: str, api_key: str, chapter_counts: Optional[dict] = None,
                 model: str = DEFAULT_MODEL):
        self.course_title = course_title
        self.api_key = api_key
        self.chapter_counts = chapter_counts or {}
        self.model = model

    def __call__(self, module_name: str, content: str) -> str:
        return request_outline(content, self.course_title, self.api_key, module=module_name,
                               chapter_count=self.chapter_counts.get(module_name),
                               model=self.model)


def modules_from_chapters(chapters: Iterable[dict]) -> List[Tuple[str, List[dict]]]:
    """Group course chapters into (module_name, chapters) pairs, in first-seen order."""
    chapters = list(chapters)
    if not chapters:
        raise ValidationError("Course has no chapters")
    groups = group_chapters_by_module(chapters)
    logger.info("Grouped %d chapters into %d modules: %s",
                len(chapters), len(groups), ", ".join(groups))
    return list(groups.items())


def _claude_modules(course_title: str, chapters, api_key: str, model: str):
    groups = modules_from_chapters(chapters)
    modules = [(name, build_chapter_content(group)) for name, group in groups]
    source = ClaudeOutlineSource(course_title, api_key,
                                 chapter_counts={name: len(group) for name, group in groups},
                                 model=model)
    return modules, source


def generate_pack_from_chapters(course_title: str, chapters: Iterable[dict], api_key: str,
                                footer: str = "", style: Optional[LayoutStyle] = None,
                                model: str = DEFAULT_MODEL) -> PackResult:
    """Full pack pipeline: chapters → modules → Claude → one PDF per module"""
    modules, source = _claude_modules(course_title, chapters, api_key, model)
    return generate_pack(course_title, modules, source, footer=footer, style=style)


def generate_reference_guide_from_chapters(course_title: str, chapters: Iterable[dict],
                                           api_key: str, footer: str = "",
                                           style: Optional[LayoutStyle] = None,
                                           model: str = DEFAULT_MODEL) -> ReferenceGuide:
    """Full reference pipeline: chapters → modules → Claude → one combined PDF"""
    chapters = list(chapters)
    modules, source = _claude_modules(course_title, chapters, api_key, model)
    return generate_reference_guide(course_title, modules, source,
                                    chapter_count=len(chapters), footer=footer, style=style)


def pack_output_paths(output: str, count: int) -> List[Path]:
    """cheatsheet.pdf → cheatsheet-01.pdf, cheatsheet-02.pdf, ..."""
    path = Path(output)
    return [path.with_name(f"{path.stem}-{i:02d}{path.suffix or '.pdf'}")
            for i in range(1, count + 1)]


def _load_chapters(path: str) -> list:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("chapters")
    if not isinstance(data, list):
        raise ValidationError(f"{path}: expected a list of chapters")
    return data


def main(argv=None):
    settings = load_settings()

    parser = argparse.ArgumentParser(description="Generate cheat sheet PDF from an AI outline")
    parser.add_argument("--outline", type=str, help="File containing the AI outline (JSON)")
    parser.add_argument("--chapters", type=str,
                        help="JSON file of course chapters; one cheat sheet per module via Claude")
    parser.add_argument("--reference", action="store_true",
                        help="With --chapters, build one combined reference guide instead")
    parser.add_argument("--api-key", type=str, default=settings.anthropic_api_key,
                        help="Anthropic API key (default: $ANTHROPIC_API_KEY)")
    parser.add_argument("--model", type=str, default=settings.model)
    parser.add_argument("--title", type=str, default="Cheat Sheet", help="Cover page title")
    parser.add_argument("--subtitle", type=str, default="", help="Cover page subtitle")
    parser.add_argument("--footer", type=str, default=settings.footer, help="Running footer text")
    parser.add_argument("--output", "-o", type=str, default="cheatsheet.pdf", help="Output PDF path")
    parser.add_argument("--page-size", choices=PAGE_SIZES, default=settings.page_size)
    parser.add_argument("--no-toc", action="store_true", help="Skip the table of contents page")
    parser.add_argument("--log-level", type=str, default=settings.log_level)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    style = LayoutStyle.for_page_size(args.page_size, include_toc=not args.no_toc)

    if args.chapters:
        if not args.api_key:
            parser.error("--chapters needs --api-key or ANTHROPIC_API_KEY")
        chapters = _load_chapters(args.chapters)

        if args.reference:
            guide = generate_reference_guide_from_chapters(
                args.title, chapters, args.api_key, footer=args.footer, style=style,
                model=args.model)
            Path(args.output).write_bytes(guide.document.pdf_bytes)
            print(f"✓ PDF saved: {args.output} ({guide.document.page_count} pages)")
            warnings = guide.warnings
        else:
            result = generate_pack_from_chapters(
                args.title, chapters, args.api_key, footer=args.footer, style=style,
                model=args.model)
            paths = pack_output_paths(args.output, result.completed_modules)
            for sheet, path in zip(result.sheets, paths):
                path.write_bytes(sheet.document.pdf_bytes)
                print(f"✓ PDF saved: {path} ({sheet.module_title})")
            print(f"{result.completed_modules}/{result.total_modules} modules done")
            warnings = result.warnings

        for warning in warnings:
            print(f"WARNING: {warning}")
    elif args.outline:
        ai_text = Path(args.outline).read_text(encoding="utf-8")
        generate_from_ai_output(ai_text, args.title, args.subtitle, args.footer,
                                args.output, style=style)
    else:
        # Demo mode with sample data
        print("No input provided. Running demo...")
        demo(style)


DEMO_OUTPUT = """```json
{
  "sections": [
    {
      "heading": "Vocal Chain Settings",
      "type": "quick_reference",
      "items": [
        {"text": "HPF vocals at 80-100 Hz before compression", "subItems": ["Male: 80 Hz", "Female: 100-120 Hz"]},
        {"text": "Compressor ratio 3:1 to 4:1, attack 10-30 ms", "subItems": ["8:1 and up only for limiting"]},
        {"text": "De-esser around 5-8 kHz, 3-6 dB of reduction"},
        {"text": "Presence boost +2 dB at 3-5 kHz with a wide bell"},
        {"text": "Plate reverb: 1.2-1.8 s decay, 20-40 ms pre-delay", "subItems": ["HPF the return at 200 Hz"]},
        {"text": "Boosting above 12 kHz before de-essing makes sibilance harsh", "isWarning": true}
      ]
    },
    {
      "heading": "Mix Bus Workflow",
      "type": "step_by_step",
      "items": [
        {"text": "Gain stage every track to peak around -18 dBFS"},
        {"text": "Balance faders with all plugins bypassed"},
        {"text": "Glue compressor: 2:1, slow attack, auto release, 1-2 dB GR"},
        {"text": "Reference against two commercial tracks at matched loudness", "isTip": true},
        {"text": "Limit last: ceiling -1 dBTP for streaming"}
      ]
    },
    {
      "heading": "Parallel vs Serial Compression",
      "type": "comparison",
      "items": [
        {"text": "Parallel: keeps transients, adds density", "subItems": ["Blend 20-40% wet"]},
        {"text": "Serial: two gentle stages sound more transparent than one hard one"}
      ]
    },
    {
      "heading": "Pro Tips",
      "type": "tips",
      "items": [
        {"text": "Automate vocal level before compressing it", "isTip": true},
        {"text": "Mono-check the low end below 120 Hz"}
      ]
    }
  ]
}
```"""


def demo(style: Optional[LayoutStyle] = None):
    """Run demo with sample AI output."""
    generate_from_ai_output(DEMO_OUTPUT, "Mixing Essentials",
                            "Vocal and mix bus quick reference",
                            footer="Cheat Sheet Generator",
                            output_path="demo_cheatsheet.pdf", style=style)
    print("\n✓ Demo complete! Check demo_cheatsheet.pdf")


if __name__ == "__main__":
    main()
