import pytest

from models import Item, Outline, Section, SectionType


def make_section(section_type, count, title=None, text="Item {i}", **item_kwargs):
    section_type = SectionType.coerce(section_type)
    return Section(
        type=section_type,
        title=title or section_type.value.replace("_", " ").title(),
        items=[Item(text=text.format(i=i), **item_kwargs) for i in range(count)],
    )


@pytest.fixture
def sample_outline():
    return Outline(
        title="Mixing Essentials",
        subtitle="Vocal and mix bus quick reference",
        footer="Cheat Sheet Generator",
        sections=[
            Section(SectionType.QUICK_REFERENCE, "Key Concepts",
                    [Item(text=f"Concept {i}", sub_items=["detail a", "detail b"]) for i in range(7)]),
            Section(SectionType.STEP_BY_STEP, "Workflow", [
                Item(text="Gain stage to -18 dBFS"),
                Item(text="Reference against a commercial track", is_tip=True),
                Item(text="Balance faders"),
                Item(text="Never limit before EQ", is_warning=True),
            ]),
            Section(SectionType.TIPS, "Pro Tips", [Item(text=f"Tip {i}") for i in range(3)]),
        ],
    )


@pytest.fixture
def worst_case_outline():
    """Every limit maxed out with the widest glyph Helvetica has."""
    wide_item = Item(text="W" * 100, sub_items=["W" * 80] * 3, is_warning=True)
    return Outline(
        title="W" * 400,
        subtitle="W" * 300,
        footer="W" * 60,
        sections=[
            Section(section_type, "W " * 200, [wide_item] * 6)
            for section_type in (SectionType.QUICK_REFERENCE, SectionType.STEP_BY_STEP,
                                 SectionType.COMPARISON, SectionType.TIPS)
        ],
    )
