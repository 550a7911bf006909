"""Document inspector: page analysis and element catalogs."""

from __future__ import annotations

import math

from pageshaper.addressing.address import StructuralAddress
from pageshaper.core.config import EngineConfig
from pageshaper.core.types import (
    ElementDescriptor,
    Heading,
    NavigationLink,
    PageAnalysis,
    PageStructure,
    SectionExcerpt,
)
from pageshaper.runtime.base import DocumentRuntime
from pageshaper.runtime.requests import (
    DescribeElements,
    DescribeStructural,
    PageSnapshot,
    ResolveAddress,
)

# Collected in this order until the structural limit is reached
STRUCTURAL_TAGS: tuple[str, ...] = (
    "header", "nav", "main", "section", "article", "aside", "footer",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "div", "span", "a", "button", "img",
)

# Implicit ARIA roles for elements without an explicit role attribute
_IMPLICIT_ROLES: dict[str, str] = {
    "a": "link", "button": "button", "select": "combobox", "textarea": "textbox",
    "h1": "heading", "h2": "heading", "h3": "heading",
    "h4": "heading", "h5": "heading", "h6": "heading",
    "nav": "navigation", "main": "main", "header": "banner",
    "footer": "contentinfo", "aside": "complementary",
    "section": "region", "article": "article", "form": "form",
    "table": "table", "ul": "list", "ol": "list", "li": "listitem",
    "dialog": "dialog", "details": "group", "img": "img", "input": "textbox",
}


def reading_time(word_count: int, words_per_minute: int = 200) -> int:
    """Minutes to read ``word_count`` words, rounded up; 0 words -> 0."""
    if word_count <= 0:
        return 0
    return math.ceil(word_count / words_per_minute)


class DocumentInspector:
    """
    Reads the live document through a DocumentRuntime.

    All limits are hard truncations: a huge document yields a partial
    catalog, never an error.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()

    async def analyze(self, runtime: DocumentRuntime) -> PageAnalysis:
        cfg = self._config
        raw = await runtime.query(
            PageSnapshot(excerpt_length=cfg.excerpt_length, navigation_limit=cfg.navigation_limit)
        ) or {}

        headings = [
            Heading(level=int(h["level"]), text=h.get("text", ""))
            for h in raw.get("headings", [])
        ]
        sections = [
            SectionExcerpt(
                address=StructuralAddress.from_dict(s["address"]),
                text=s.get("text", "")[: cfg.excerpt_length],
            )
            for s in raw.get("sections", [])
            if s.get("text")
        ]
        navigation = [
            NavigationLink(
                address=StructuralAddress.from_dict(n["address"]),
                text=n.get("text", "").strip(),
            )
            for n in raw.get("navigation", [])[: cfg.navigation_limit]
        ]

        word_count = int(raw.get("wordCount", 0))
        return PageAnalysis(
            url=raw.get("url", ""),
            title=raw.get("title", ""),
            element_count=int(raw.get("elementCount", 0)),
            image_count=int(raw.get("imageCount", 0)),
            link_count=int(raw.get("linkCount", 0)),
            form_count=int(raw.get("formCount", 0)),
            word_count=word_count,
            estimated_reading_time=reading_time(word_count, cfg.words_per_minute),
            structure=PageStructure(headings=headings, sections=sections, navigation=navigation),
        )

    async def list_elements(
        self, runtime: DocumentRuntime, selector: str, *, limit: int | None = None
    ) -> list[ElementDescriptor]:
        raw = await runtime.query(
            DescribeElements(
                selector=selector,
                text_limit=self._config.element_text_limit,
                limit=limit,
            )
        ) or []
        if limit is not None:
            raw = raw[:limit]
        return [self._convert(r, self._config.element_text_limit) for r in raw]

    async def list_structural(self, runtime: DocumentRuntime) -> list[ElementDescriptor]:
        cfg = self._config
        raw = await runtime.query(
            DescribeStructural(
                tags=STRUCTURAL_TAGS,
                limit=cfg.structural_limit,
                text_limit=cfg.structural_text_limit,
            )
        ) or []
        return [self._convert(r, cfg.structural_text_limit) for r in raw[: cfg.structural_limit]]

    async def resolve(
        self, runtime: DocumentRuntime, address: StructuralAddress
    ) -> ElementDescriptor | None:
        """Descriptor of the addressed node, or None when the path no longer exists."""
        raw = await runtime.query(
            ResolveAddress(address=address, text_limit=self._config.element_text_limit)
        )
        if not raw:
            return None
        return self._convert(raw, self._config.element_text_limit)

    @staticmethod
    def _convert(raw: dict, text_limit: int) -> ElementDescriptor:
        tag = raw.get("tag", "")
        attributes = {str(k): str(v) for k, v in (raw.get("attributes") or {}).items()}
        role = attributes.get("role") or _IMPLICIT_ROLES.get(tag, tag)
        return ElementDescriptor(
            address=StructuralAddress.from_dict(raw["address"]),
            tag=tag,
            role=role,
            text=(raw.get("text") or "").strip()[:text_limit],
            class_name=attributes.get("class", ""),
            attributes=attributes,
            styles=dict(raw.get("styles") or {}),
        )
