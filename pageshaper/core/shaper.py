"""PageShaper: session orchestrator for live page customization."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pageshaper.addressing.address import StructuralAddress
from pageshaper.advisor.heuristics import HeuristicAdvisor
from pageshaper.advisor.planner import LLMCaller, PlannerAdvisor
from pageshaper.advisor.restructure import RestructureKind, RestructureResult, SmartRestructurer
from pageshaper.advisor.token_budget import TokenBudget
from pageshaper.core.config import EngineConfig
from pageshaper.core.errors import PageShaperError, TemplateNotFoundError, UnboundSessionError
from pageshaper.core.types import ElementDescriptor, InteractionMode, PageAnalysis
from pageshaper.engine.rules import OperationKind, Target, TransformationRule, build_rule
from pageshaper.engine.transformer import ApplyResult, ReplayResult, TransformationEngine
from pageshaper.inspector.inspector import DocumentInspector
from pageshaper.runtime.base import DocumentRuntime
from pageshaper.runtime.requests import DocumentIdentity, HighlightAddresses, Reload
from pageshaper.selection.controller import SelectionController
from pageshaper.templates.preferences import PreferenceStore, SessionPreferences
from pageshaper.templates.storage import JsonFileStorage, KeyValueStorage
from pageshaper.templates.store import TemplateStore
from pageshaper.templates.types import PageTemplate

log = logging.getLogger(__name__)


class PageShaper:
    """
    One customization session over one live document.

    Usage:
        shaper = PageShaper()
        await shaper.attach(PlaywrightRuntime(page))
        await shaper.set_mode("select")
        # ... user clicks elements ...
        await shaper.apply_to_selection("hide")
        template = await shaper.create_template("Reader view")
        # later, on a fresh load of the page
        await shaper.apply_template(template.id)
    """

    def __init__(
        self,
        runtime: DocumentRuntime | None = None,
        *,
        config: EngineConfig | None = None,
        storage: KeyValueStorage | None = None,
        llm_caller: LLMCaller | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._runtime = runtime
        self._storage = storage if storage is not None else JsonFileStorage(self.config.storage_dir)

        self._inspector = DocumentInspector(self.config)
        self._selection = SelectionController(self.config)
        self._engine = TransformationEngine()
        self._templates = TemplateStore(self._storage)
        self._preferences = PreferenceStore(self._storage)
        self._advisor = HeuristicAdvisor(self.config)
        self._restructurer = SmartRestructurer()
        self._planner = (
            PlannerAdvisor(llm_caller, TokenBudget(self.config.prompt_token_budget))
            if llm_caller is not None
            else None
        )

    # ------------------------------------------------------------------
    # Session binding
    # ------------------------------------------------------------------

    @property
    def is_bound(self) -> bool:
        return self._runtime is not None

    def _require_runtime(self) -> DocumentRuntime:
        if self._runtime is None:
            raise UnboundSessionError("No document attached; call attach() first")
        return self._runtime

    async def attach(self, runtime: DocumentRuntime) -> None:
        """Bind a document. Selection and transformation log start empty."""
        self._runtime = runtime
        await runtime.bind_selection(self._selection.handle_toggle)
        self._selection.reset()
        self._engine.clear()
        await self._selection.set_mode(self._selection.mode, runtime)
        log.info("Attached document runtime %s", type(runtime).__name__)

    def detach(self) -> None:
        self._runtime = None
        self._selection.reset()

    async def reset(self) -> None:
        """Reload the document and start over in the current mode."""
        runtime = self._require_runtime()
        await runtime.mutate(Reload())
        self._selection.reset()
        self._engine.clear()
        await self._selection.set_mode(self._selection.mode, runtime)
        log.info("Session reset")

    # ------------------------------------------------------------------
    # Mode & selection
    # ------------------------------------------------------------------

    @property
    def mode(self) -> InteractionMode:
        return self._selection.mode

    async def set_mode(self, mode: InteractionMode | str) -> None:
        await self._selection.set_mode(mode, self._require_runtime())

    def get_selected(self) -> list[StructuralAddress]:
        return self._selection.get_selected()

    async def clear_selection(self) -> None:
        await self._selection.clear(self._require_runtime())

    async def toggle_selection(self, address: StructuralAddress | str) -> bool:
        return await self._selection.toggle(_address(address), self._require_runtime())

    async def select(self, address: StructuralAddress | str) -> bool:
        return await self._selection.select(_address(address), self._require_runtime())

    async def deselect(self, address: StructuralAddress | str) -> bool:
        return await self._selection.deselect(_address(address), self._require_runtime())

    async def refresh_selection(self) -> list[StructuralAddress]:
        return await self._selection.refresh(self._require_runtime())

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    async def analyze(self) -> PageAnalysis:
        return await self._inspector.analyze(self._require_runtime())

    async def list_elements(self, selector: str, *, limit: int | None = None) -> list[ElementDescriptor]:
        return await self._inspector.list_elements(self._require_runtime(), selector, limit=limit)

    async def list_structural(self) -> list[ElementDescriptor]:
        return await self._inspector.list_structural(self._require_runtime())

    async def resolve(self, address: StructuralAddress | str) -> ElementDescriptor | None:
        return await self._inspector.resolve(self._require_runtime(), _address(address))

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    async def apply(self, rule: TransformationRule) -> ApplyResult:
        return await self._engine.apply(rule, self._require_runtime())

    async def apply_to_selection(self, kind: OperationKind | str, **payload: Any) -> ApplyResult | None:
        """
        Apply one rule to the whole selection. Returns None when nothing is selected.

        The target joins each selected address as a structural CSS selector,
        so every node is resolved before any of them is mutated; removing or
        moving one sibling cannot redirect the address of the next. The same
        rule replays identically on a fresh load of the document.
        """
        runtime = self._require_runtime()
        selected = self._selection.get_selected()
        if not selected:
            return None
        selector = ", ".join(address.to_css() for address in selected)
        rule = build_rule(kind, Target.css(selector), **payload)
        return await self._engine.apply(rule, runtime)

    @property
    def transformations(self) -> list[TransformationRule]:
        return self._engine.transformations

    async def highlight(
        self, addresses: Iterable[StructuralAddress | str], color: str | None = None
    ) -> int:
        """Outline addresses without recording a rule. Returns how many resolved."""
        request = HighlightAddresses(
            addresses=tuple(_address(a) for a in addresses),
            color=color or self.config.highlight_color,
        )
        return int(await self._require_runtime().mutate(request) or 0)

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    async def create_template(
        self,
        name: str,
        url_pattern: str | None = None,
        *,
        original_url: str | None = None,
        title: str | None = None,
        save: bool = True,
    ) -> PageTemplate:
        """Snapshot the transformation log; url and title default to the document's."""
        if original_url is None or title is None:
            identity = await self._require_runtime().query(DocumentIdentity()) or {}
            if original_url is None:
                original_url = identity.get("url", "")
            if title is None:
                title = identity.get("title", "")
        template = self._templates.create(
            name,
            url_pattern or original_url,
            original_url,
            title,
            self._engine.transformations,
        )
        if save:
            self._templates.save(template)
        return template

    def save_template(self, template: PageTemplate) -> PageTemplate:
        return self._templates.save(template)

    def list_templates(self) -> list[PageTemplate]:
        return self._templates.list()

    def get_template(self, template_id: str) -> PageTemplate | None:
        return self._templates.get(template_id)

    def delete_template(self, template_id: str) -> bool:
        return self._templates.delete(template_id)

    def set_default_template(self, template_id: str) -> PageTemplate:
        template = self._templates.set_default(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    async def templates_for_url(self, url: str | None = None) -> list[PageTemplate]:
        if url is None:
            identity = await self._require_runtime().query(DocumentIdentity()) or {}
            url = identity.get("url", "")
        return self._templates.find_for_url(url)

    async def apply_template(self, template: PageTemplate | str) -> ReplayResult:
        if isinstance(template, str):
            found = self._templates.get(template)
            if found is None:
                raise TemplateNotFoundError(template)
            template = found
        return await self._engine.apply_template(template, self._require_runtime())

    # ------------------------------------------------------------------
    # Advice
    # ------------------------------------------------------------------

    async def suggest(self) -> list[str]:
        return await self._advisor.suggest(self._require_runtime())

    async def smart_restructure(self, kind: RestructureKind | str) -> RestructureResult:
        return await self._restructurer.run(kind, self._require_runtime())

    def _require_planner(self) -> PlannerAdvisor:
        if self._planner is None:
            raise PageShaperError("No llm_caller configured for planner requests")
        return self._planner

    async def planner_suggestions(self) -> list[str]:
        planner = self._require_planner()
        return await planner.suggest(await self.analyze())

    async def restructuring_plan(self) -> str:
        planner = self._require_planner()
        return await planner.restructuring_plan(await self.analyze())

    async def plan_transformations(self, request: str) -> list[TransformationRule]:
        """Ask the planner for rules; they are returned, not applied."""
        planner = self._require_planner()
        return await planner.plan_transformations(request, await self.list_structural())

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    def save_preferences(self) -> SessionPreferences:
        prefs = SessionPreferences(mode=self.mode, selection=self.get_selected())
        self._preferences.save(prefs)
        return prefs

    async def restore_preferences(self) -> SessionPreferences:
        """Reinstall the saved mode and re-mark whichever saved addresses still resolve."""
        runtime = self._require_runtime()
        prefs = self._preferences.load()
        await self._selection.set_mode(prefs.mode, runtime)
        for address in prefs.selection:
            await self._selection.select(address, runtime)
        return prefs


def _address(address: StructuralAddress | str) -> StructuralAddress:
    if isinstance(address, str):
        return StructuralAddress.parse(address)
    return address
