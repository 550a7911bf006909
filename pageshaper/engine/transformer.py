"""Transformation engine: applies rules and keeps the session's transformation log."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from pageshaper.engine.rules import OperationKind, TransformationRule
from pageshaper.runtime.base import DocumentRuntime
from pageshaper.runtime.requests import ApplyRule
from pageshaper.templates.types import PageTemplate

log = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    rule_id: str
    kind: OperationKind
    applied_count: int
    latency_ms: float = 0.0

    @property
    def applied(self) -> bool:
        return self.applied_count > 0


@dataclass
class ReplayResult:
    template_id: str
    rule_results: list[ApplyResult] = field(default_factory=list)
    total_latency_ms: float = 0.0

    @property
    def total_applied(self) -> int:
        return sum(r.applied_count for r in self.rule_results)

    @property
    def skipped(self) -> int:
        """Rules whose target no longer resolved."""
        return sum(1 for r in self.rule_results if not r.applied)


class TransformationEngine:
    """
    Applies TransformationRules to a document and records what took effect.

    The log is append-only: a rule that changed at least one node is appended
    unmodified; a rule whose target resolved to nothing is a no-op and is not
    recorded. Document-side failures propagate without retry.
    """

    def __init__(self) -> None:
        self._log: list[TransformationRule] = []

    @property
    def transformations(self) -> list[TransformationRule]:
        return list(self._log)

    async def apply(self, rule: TransformationRule, runtime: DocumentRuntime) -> ApplyResult:
        start = time.monotonic()
        applied_count = int(await runtime.mutate(ApplyRule(rule)) or 0)
        latency = (time.monotonic() - start) * 1000

        if applied_count > 0:
            self._log.append(rule)
        log.debug(
            "%s rule %s on %s -> %d node(s)", rule.kind.value, rule.id, rule.target, applied_count
        )
        return ApplyResult(
            rule_id=rule.id,
            kind=rule.kind,
            applied_count=applied_count,
            latency_ms=latency,
        )

    async def apply_template(
        self, template: PageTemplate, runtime: DocumentRuntime
    ) -> ReplayResult:
        """Replay every rule in recorded order; unresolved rules are skipped, not fatal."""
        total_start = time.monotonic()
        results: list[ApplyResult] = []
        for rule in template.rules:
            results.append(await self.apply(rule, runtime))

        replay = ReplayResult(
            template_id=template.id,
            rule_results=results,
            total_latency_ms=(time.monotonic() - total_start) * 1000,
        )
        if replay.skipped:
            log.info(
                "Template %r applied partially: %d of %d rule(s) matched nothing",
                template.name,
                replay.skipped,
                len(results),
            )
        return replay

    def clear(self) -> None:
        self._log = []
