"""Closed set of requests a DocumentRuntime must answer.

Queries read the live document, mutations change it. Every request carries
its arguments as plain data (``to_args()``); runtimes map the request *type*
to fixed code, so no request text is ever spliced into executable source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pageshaper.addressing.address import StructuralAddress
from pageshaper.core.types import InteractionMode
from pageshaper.engine.rules import TransformationRule


@dataclass(frozen=True)
class Query:
    def to_args(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class Mutation:
    def to_args(self) -> dict[str, Any]:
        return {}


# ----------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class DocumentIdentity(Query):
    """-> ``{"url": str, "title": str}``"""


@dataclass(frozen=True)
class PageSnapshot(Query):
    """Raw material for a PageAnalysis.

    -> ``{"url", "title", "wordCount", "elementCount", "imageCount",
    "linkCount", "formCount", "headings": [{"level", "text"}],
    "sections": [{"address", "text"}], "navigation": [{"address", "text"}]}``
    """

    excerpt_length: int
    navigation_limit: int

    def to_args(self) -> dict[str, Any]:
        return {"excerptLength": self.excerpt_length, "navigationLimit": self.navigation_limit}


@dataclass(frozen=True)
class DescribeElements(Query):
    """-> list of raw descriptors for ``querySelectorAll(selector)``."""

    selector: str
    text_limit: int
    limit: int | None = None
    include_box: bool = False

    def to_args(self) -> dict[str, Any]:
        return {
            "selector": self.selector,
            "textLimit": self.text_limit,
            "limit": self.limit,
            "includeBox": self.include_box,
        }


@dataclass(frozen=True)
class DescribeStructural(Query):
    """-> raw descriptors collected tag by tag in ``tags`` order, at most ``limit``."""

    tags: tuple[str, ...]
    limit: int
    text_limit: int

    def to_args(self) -> dict[str, Any]:
        return {"tags": list(self.tags), "limit": self.limit, "textLimit": self.text_limit}


@dataclass(frozen=True)
class ResolveAddress(Query):
    """-> raw descriptor of the addressed node, or None."""

    address: StructuralAddress
    text_limit: int

    def to_args(self) -> dict[str, Any]:
        return {"address": self.address.to_dict(), "textLimit": self.text_limit}


@dataclass(frozen=True)
class AdvisorMetrics(Query):
    """Raw numbers for the heuristic advisor.

    -> ``{"navLinkCount", "headingCount", "imagesMissingAlt",
    "textSamples": [{"fontSize", "padding", "margin", "textLength"}]}``
    with one sample per element whose trimmed text is longer than
    ``min_text_length``.
    """

    min_text_length: int

    def to_args(self) -> dict[str, Any]:
        return {"minTextLength": self.min_text_length}


@dataclass(frozen=True)
class MarkedAddresses(Query):
    """-> addresses (wire form) of nodes carrying the selection marker."""


# ----------------------------------------------------------------------
# Mutations
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class InstallMode(Mutation):
    """Tear down the previous mode's listeners and overlays, install ``mode``'s."""

    mode: InteractionMode
    selection_color: str

    def to_args(self) -> dict[str, Any]:
        return {"mode": self.mode.value, "selectionColor": self.selection_color}


@dataclass(frozen=True)
class SetMarker(Mutation):
    """Mark or unmark one node as selected. -> bool (node resolved)."""

    address: StructuralAddress
    selected: bool
    selection_color: str

    def to_args(self) -> dict[str, Any]:
        return {
            "address": self.address.to_dict(),
            "selected": self.selected,
            "selectionColor": self.selection_color,
        }


@dataclass(frozen=True)
class ClearMarkers(Mutation):
    """Strip every selection marker. -> number of nodes unmarked."""


@dataclass(frozen=True)
class ApplyRule(Mutation):
    """Apply one rule to every node its target resolves to. -> applied count."""

    rule: TransformationRule

    def to_args(self) -> dict[str, Any]:
        return {"rule": self.rule.to_args(), "target": self.rule.target.to_args()}


@dataclass(frozen=True)
class StyleCondition:
    """Computed-style predicate for RestyleMatching; unset fields always pass."""

    min_text_length: int | None = None
    font_size_below: float | None = None
    line_height_ratio_below: float | None = None
    spacing_above: float | None = None  # padding OR margin above, px

    def to_args(self) -> dict[str, Any]:
        return {
            "minTextLength": self.min_text_length,
            "fontSizeBelow": self.font_size_below,
            "lineHeightRatioBelow": self.line_height_ratio_below,
            "spacingAbove": self.spacing_above,
        }


@dataclass(frozen=True)
class RestyleMatching(Mutation):
    """Merge ``styles`` onto every match passing ``condition``. -> count."""

    selector: str
    styles: tuple[tuple[str, str], ...]
    condition: StyleCondition | None = None

    def to_args(self) -> dict[str, Any]:
        return {
            "selector": self.selector,
            "styles": dict(self.styles),
            "condition": self.condition.to_args() if self.condition else None,
        }


@dataclass(frozen=True)
class HighlightAddresses(Mutation):
    """Outline each resolvable address. -> number highlighted."""

    addresses: tuple[StructuralAddress, ...]
    color: str

    def to_args(self) -> dict[str, Any]:
        return {"addresses": [a.to_dict() for a in self.addresses], "color": self.color}


@dataclass(frozen=True)
class Reload(Mutation):
    """Reload the document, discarding every in-page change."""

