"""
Data model for cheat sheet outlines.

An outline is a list of typed sections, each holding bullet items with
optional sub-items. The section type decides both how much the section is
worth when the outline has to be trimmed and how it is drawn.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class SectionType(str, Enum):
    QUICK_REFERENCE = "quick_reference"
    STEP_BY_STEP = "step_by_step"
    COMPARISON = "comparison"
    TIPS = "tips"
    KEY_TAKEAWAYS = "key_takeaways"
    GLOSSARY = "glossary"
    CUSTOM = "custom"

    @classmethod
    def coerce(cls, value) -> "SectionType":
        """Map a raw type string onto the enum, falling back to CUSTOM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.CUSTOM

    @property
    def priority(self) -> int:
        return SECTION_PRIORITY[self]


# Higher keeps longer when trimming
SECTION_PRIORITY = {
    SectionType.QUICK_REFERENCE: 4,
    SectionType.STEP_BY_STEP: 3,
    SectionType.COMPARISON: 2,
    SectionType.TIPS: 1,
    SectionType.KEY_TAKEAWAYS: 0,
    SectionType.GLOSSARY: -1,
    SectionType.CUSTOM: 0,
}


@dataclass
class Item:
    text: str
    sub_items: List[str] = field(default_factory=list)
    is_tip: bool = False
    is_warning: bool = False

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "subItems": list(self.sub_items),
            "isTip": self.is_tip,
            "isWarning": self.is_warning,
        }


@dataclass
class Section:
    type: SectionType
    title: str
    items: List[Item] = field(default_factory=list)

    @property
    def priority(self) -> int:
        return self.type.priority

    @property
    def numbered(self) -> bool:
        """Step-by-step sections render numbered items instead of bullets."""
        return self.type is SectionType.STEP_BY_STEP

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "title": self.title,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class Outline:
    title: str
    sections: List[Section] = field(default_factory=list)
    subtitle: str = ""
    footer: str = ""

    @property
    def item_count(self) -> int:
        return sum(len(section.items) for section in self.sections)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "subtitle": self.subtitle,
            "footer": self.footer,
            "sections": [section.to_dict() for section in self.sections],
        }


@dataclass(frozen=True)
class RenderedDocument:
    """Final PDF artifact handed back to the caller."""
    pdf_bytes: bytes
    page_count: int

    mimetype = "application/pdf"

    @property
    def byte_size(self) -> int:
        return len(self.pdf_bytes)

    def metadata(self) -> dict:
        return {"pageCount": self.page_count, "byteSize": self.byte_size}
