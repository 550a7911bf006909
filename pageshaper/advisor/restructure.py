"""One-shot heuristic restructures (simplify, clean, focus, readability, mobile)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from pageshaper.runtime.base import DocumentRuntime
from pageshaper.runtime.requests import RestyleMatching, StyleCondition

log = logging.getLogger(__name__)


class RestructureKind(str, Enum):
    SIMPLIFY = "simplify"
    CLEAN = "clean"
    FOCUS = "focus"
    READABILITY = "readability"
    MOBILE = "mobile"


@dataclass(frozen=True)
class RestyleStep:
    selector: str
    styles: dict[str, str]
    condition: StyleCondition | None = None

    def to_request(self) -> RestyleMatching:
        return RestyleMatching(
            selector=self.selector,
            styles=tuple(self.styles.items()),
            condition=self.condition,
        )


@dataclass
class RestructureResult:
    kind: RestructureKind
    changed: int = 0
    step_counts: list[int] = field(default_factory=list)


_HIDE = {"display": "none"}

# A bare "ad" substring would also match "header" and "shadow".
_CLUTTER = (
    'aside, .sidebar, .advertisement, .ad, [class*="advert"], [class*="ad-"], ads, sidebar'
)

PLANS: dict[RestructureKind, tuple[RestyleStep, ...]] = {
    RestructureKind.SIMPLIFY: (
        RestyleStep(_CLUTTER, _HIDE),
    ),
    RestructureKind.CLEAN: (
        RestyleStep(".decorative, .ornament, .decoration, marquee, blink", _HIDE),
        RestyleStep(
            "body *",
            {"padding": "20px", "margin": "20px"},
            StyleCondition(spacing_above=100),
        ),
    ),
    RestructureKind.FOCUS: (
        RestyleStep(
            "main, article, .content, .post",
            {"border": "2px solid #2563eb", "borderRadius": "8px", "padding": "20px"},
        ),
        RestyleStep("footer, .footer, aside, .sidebar, .comments", {"opacity": "0.5"}),
    ),
    RestructureKind.READABILITY: (
        RestyleStep("p, li", {"lineHeight": "1.6"}, StyleCondition(line_height_ratio_below=1.5)),
        RestyleStep(
            "body *",
            {"fontSize": "16px"},
            StyleCondition(font_size_below=14, min_text_length=50),
        ),
    ),
    RestructureKind.MOBILE: (
        RestyleStep("body *", {"maxWidth": "100%", "boxSizing": "border-box"}),
        RestyleStep("img, video, iframe", {"maxWidth": "100%", "height": "auto"}),
    ),
}


class SmartRestructurer:
    """
    Runs a fixed plan of restyle steps against the document.

    Each step is one RestyleMatching mutation; the reported count is the sum
    of nodes each step changed, so a node touched by two steps counts twice.
    Results are not recorded as transformation rules.
    """

    def __init__(self, plans: dict[RestructureKind, tuple[RestyleStep, ...]] | None = None) -> None:
        self._plans = plans or PLANS

    def plan(self, kind: RestructureKind | str) -> tuple[RestyleStep, ...]:
        return self._plans[RestructureKind(kind)]

    async def run(self, kind: RestructureKind | str, runtime: DocumentRuntime) -> RestructureResult:
        kind = RestructureKind(kind)
        result = RestructureResult(kind=kind)
        for step in self.plan(kind):
            count = int(await runtime.mutate(step.to_request()) or 0)
            result.step_counts.append(count)
            result.changed += count
        log.info("Applied %d changes for %s mode", result.changed, kind.value)
        return result
