"""Rule-of-thumb layout and accessibility suggestions."""

from __future__ import annotations

import re

from pageshaper.core.config import EngineConfig
from pageshaper.runtime.base import DocumentRuntime
from pageshaper.runtime.requests import AdvisorMetrics

NAV_LINK_THRESHOLD = 10

SMALL_FONT_PX = 12
SMALL_TEXT_MIN_LENGTH = 50
SMALL_TEXT_THRESHOLD = 5

CRAMPED_SPACING_PX = 8
CRAMPED_TEXT_MIN_LENGTH = 100
CRAMPED_THRESHOLD = 10

_PX_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def parse_px(value: str | None) -> float | None:
    """
    Leading length of a computed CSS value, in px.

    Shorthands such as ``"8px 4px"`` yield their first component. Returns
    None for values with no leading number (``"auto"``, ``""``).
    """
    if not value:
        return None
    match = _PX_RE.match(value)
    return float(match.group(1)) if match else None


def _below(value: str | None, limit: float) -> bool:
    px = parse_px(value)
    return px is not None and px < limit


class HeuristicAdvisor:
    """Turns raw document metrics into short plain-text suggestions."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()

    async def suggest(self, runtime: DocumentRuntime) -> list[str]:
        metrics = await runtime.query(AdvisorMetrics(min_text_length=SMALL_TEXT_MIN_LENGTH)) or {}
        return self.evaluate(metrics)[: self._config.max_suggestions]

    def evaluate(self, metrics: dict) -> list[str]:
        suggestions: list[str] = []
        samples = metrics.get("textSamples", [])

        nav_links = int(metrics.get("navLinkCount", 0))
        if nav_links > NAV_LINK_THRESHOLD:
            suggestions.append(
                f"Navigation has {nav_links} links. Consider grouping them into categories."
            )

        small_text = sum(
            1
            for s in samples
            if s.get("textLength", 0) > SMALL_TEXT_MIN_LENGTH
            and _below(s.get("fontSize"), SMALL_FONT_PX)
        )
        if small_text > SMALL_TEXT_THRESHOLD:
            suggestions.append(
                "Multiple elements use small text. Consider increasing the font size "
                "for better readability."
            )

        if int(metrics.get("headingCount", 0)) == 0:
            suggestions.append(
                "Page lacks heading structure. Add H1, H2 and H3 headings for better accessibility."
            )

        cramped = sum(
            1
            for s in samples
            if s.get("textLength", 0) > CRAMPED_TEXT_MIN_LENGTH
            and _below(s.get("padding"), CRAMPED_SPACING_PX)
            and _below(s.get("margin"), CRAMPED_SPACING_PX)
        )
        if cramped > CRAMPED_THRESHOLD:
            suggestions.append(
                "Many elements lack padding or margin. Add whitespace for a clearer visual hierarchy."
            )

        missing_alt = int(metrics.get("imagesMissingAlt", 0))
        if missing_alt > 0:
            suggestions.append(
                f"{missing_alt} images missing alt text. Add it for accessibility."
            )

        return suggestions
