"""LLM-backed planner: suggestions, restructuring plans and rule proposals."""

from __future__ import annotations

import inspect
import json
import logging
import re
from typing import Any, Awaitable, Callable, Sequence

from pageshaper.advisor.token_budget import TokenBudget
from pageshaper.core.errors import InvalidRuleError
from pageshaper.core.types import ElementDescriptor, PageAnalysis
from pageshaper.engine.rules import TransformationRule, rule_from_dict

log = logging.getLogger(__name__)

# Receives {"system": ..., "prompt": ...} and returns the model's text
LLMCaller = Callable[[dict[str, str]], "str | Awaitable[str]"]

_BULLET_RE = re.compile(r"^\s*(?:[-*•])\s*(.+?)\s*$")
_FENCE_RE = re.compile(r"```(?:json)?|```", re.I)

SUGGESTIONS_SYSTEM = (
    "You are an expert web designer and UX specialist.\n"
    "You MUST provide specific, actionable suggestions for improving web pages.\n"
    "Your response should be in English and use bullet points.\n"
    "Focus on readability, accessibility, and user experience."
)

PLAN_SYSTEM = (
    "You are an expert at web page restructuring and optimization.\n"
    "You MUST provide a detailed, step-by-step restructuring plan.\n"
    "Your response should be in English and use numbered steps.\n"
    "Focus on improving readability, removing clutter, and enhancing user experience."
)

RULES_SYSTEM = (
    "You are a web page customization planner.\n"
    "Answer with a JSON array of transformation rules and no other text.\n"
    'Each rule is {"kind": ..., "target": {"address": ...} or {"selector": ...}, ...payload}.\n'
    "Kinds and payloads:\n"
    "- hide, remove: no payload\n"
    '- highlight: optional "color", "background"\n'
    '- style: "styles" object of CSS property -> value\n'
    '- replace: "html" string\n'
    '- move: "destination" CSS selector, "position" one of before, after, replace, append, prepend\n'
    "Prefer the element addresses listed in the request. Only include rules you are confident about."
)


def parse_bullets(text: str) -> list[str]:
    """Lines of ``text`` that start with a bullet marker, marker stripped."""
    bullets = []
    for line in text.splitlines():
        match = _BULLET_RE.match(line)
        if match:
            bullets.append(match.group(1))
    return bullets


def extract_json(text: str) -> Any:
    """First JSON array or object in ``text``, ignoring code fences."""
    text = _FENCE_RE.sub("", text)
    decoder = json.JSONDecoder()
    for idx, ch in enumerate(text):
        if ch not in "[{":
            continue
        try:
            obj, _ = decoder.raw_decode(text[idx:])
            return obj
        except json.JSONDecodeError:
            continue
    raise ValueError("no JSON found in planner response")


def _analysis_summary(analysis: PageAnalysis) -> str:
    headings = ", ".join(f"H{h.level}: {h.text}" for h in analysis.structure.headings[:10])
    return (
        f"Page Title: {analysis.title}\n"
        f"URL: {analysis.url}\n\n"
        "Statistics:\n"
        f"- Total elements: {analysis.element_count}\n"
        f"- Images: {analysis.image_count}\n"
        f"- Links: {analysis.link_count}\n"
        f"- Forms: {analysis.form_count}\n"
        f"- Reading time: {analysis.estimated_reading_time} minutes\n"
        f"- Sections: {len(analysis.structure.sections)}\n\n"
        f"Headings: {headings}"
    )


def _element_lines(elements: Sequence[ElementDescriptor]) -> str:
    lines = []
    for el in elements:
        text = el.text[:80].replace("\n", " ")
        cls = f" .{el.class_name}" if el.class_name else ""
        hidden = " hidden" if el.is_hidden else ""
        lines.append(f"{el.address} <{el.tag}{cls}>{hidden} role={el.role} {text!r}")
    return "\n".join(lines)


class PlannerAdvisor:
    """
    Wraps an injected LLM caller.

    The caller may be a plain function or a coroutine function. Prompts are
    truncated to the token budget before sending; caller failures propagate.
    """

    def __init__(self, llm_caller: LLMCaller, token_budget: TokenBudget | None = None) -> None:
        self._llm_caller = llm_caller
        self._budget = token_budget or TokenBudget()

    async def _ask(self, system: str, prompt: str) -> str:
        prompt, truncated = self._budget.truncate(prompt)
        if truncated:
            log.debug("Planner prompt truncated to %d tokens", self._budget.max_tokens)
        response = self._llm_caller({"system": system, "prompt": prompt})
        if inspect.isawaitable(response):
            response = await response
        return str(response or "")

    async def suggest(self, analysis: PageAnalysis) -> list[str]:
        prompt = (
            "Analyze this web page and provide restructuring suggestions:\n\n"
            f"{_analysis_summary(analysis)}\n\n"
            "Provide 5-7 specific suggestions for improving this page."
        )
        return parse_bullets(await self._ask(SUGGESTIONS_SYSTEM, prompt))

    async def restructuring_plan(self, analysis: PageAnalysis) -> str:
        prompt = (
            "Create a restructuring plan for this page:\n\n"
            f"Title: {analysis.title}\n"
            f"URL: {analysis.url}\n\n"
            "Analysis:\n"
            f"- Element count: {analysis.element_count}\n"
            f"- Main sections: {len(analysis.main_sections)}\n"
            f"- Images: {analysis.image_count}\n"
            f"- Links: {analysis.link_count}\n\n"
            "Provide a step-by-step plan to optimize this page."
        )
        return (await self._ask(PLAN_SYSTEM, prompt)).strip()

    async def plan_transformations(
        self, request: str, elements: Sequence[ElementDescriptor] = ()
    ) -> list[TransformationRule]:
        """Ask for rules fulfilling ``request``; entries that fail validation are dropped."""
        prompt = f"Request: {request}\n\nElements (address <tag> [hidden] role text):\n{_element_lines(elements)}"
        response = await self._ask(RULES_SYSTEM, prompt)
        try:
            data = extract_json(response)
        except ValueError:
            log.warning("Planner returned no JSON rules: %.200s", response)
            return []

        if isinstance(data, dict):
            data = data.get("rules", [])
        if not isinstance(data, list):
            log.warning("Planner rules must be a list, got %s", type(data).__name__)
            return []

        rules: list[TransformationRule] = []
        for entry in data:
            try:
                rules.append(rule_from_dict(entry))
            except InvalidRuleError as exc:
                log.warning("Skipping invalid planner rule %r: %s", entry, exc)
        return rules
