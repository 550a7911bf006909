"""Shared types and dataclasses for PageShaper."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pageshaper.addressing.address import StructuralAddress


class InteractionMode(str, Enum):
    INSPECT = "inspect"
    SELECT = "select"
    RESTRUCTURE = "restructure"
    STYLE = "style"


@dataclass
class ElementDescriptor:
    """Read-only snapshot of one document element. Recomputed on every query."""

    address: StructuralAddress
    tag: str
    role: str
    text: str = ""
    class_name: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    styles: dict[str, str] = field(default_factory=dict)

    @property
    def is_hidden(self) -> bool:
        return self.styles.get("display") == "none"

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": str(self.address),
            "tag": self.tag,
            "role": self.role,
            "text": self.text,
            "class_name": self.class_name,
            "attributes": dict(self.attributes),
            "styles": dict(self.styles),
        }


@dataclass
class Heading:
    level: int  # 1-6
    text: str


@dataclass
class SectionExcerpt:
    address: StructuralAddress
    text: str


@dataclass
class NavigationLink:
    address: StructuralAddress
    text: str


@dataclass
class PageStructure:
    headings: list[Heading] = field(default_factory=list)
    sections: list[SectionExcerpt] = field(default_factory=list)
    navigation: list[NavigationLink] = field(default_factory=list)


@dataclass
class PageAnalysis:
    """Derived summary of the current document. Never cached across mutations."""

    url: str
    title: str
    element_count: int = 0
    image_count: int = 0
    link_count: int = 0
    form_count: int = 0
    word_count: int = 0
    estimated_reading_time: int = 0  # minutes
    structure: PageStructure = field(default_factory=PageStructure)

    @property
    def main_sections(self) -> list[str]:
        return [s.text for s in self.structure.sections]

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "element_count": self.element_count,
            "image_count": self.image_count,
            "link_count": self.link_count,
            "form_count": self.form_count,
            "word_count": self.word_count,
            "estimated_reading_time": self.estimated_reading_time,
            "main_sections": self.main_sections,
            "structure": {
                "headings": [{"level": h.level, "text": h.text} for h in self.structure.headings],
                "sections": [
                    {"address": str(s.address), "text": s.text} for s in self.structure.sections
                ],
                "navigation": [
                    {"address": str(n.address), "text": n.text}
                    for n in self.structure.navigation
                ],
            },
        }
