"""PlaywrightRuntime: DocumentRuntime backed by a live Playwright page."""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import ElementHandle, Page

from pageshaper.addressing.address import StructuralAddress
from pageshaper.runtime import scripts
from pageshaper.runtime.base import DocumentRuntime, SelectionHandler
from pageshaper.runtime.requests import (
    AdvisorMetrics,
    ApplyRule,
    ClearMarkers,
    DescribeElements,
    DescribeStructural,
    DocumentIdentity,
    HighlightAddresses,
    InstallMode,
    MarkedAddresses,
    Mutation,
    PageSnapshot,
    Query,
    Reload,
    ResolveAddress,
    RestyleMatching,
    SetMarker,
)

log = logging.getLogger(__name__)

QUERY_SCRIPTS: dict[type[Query], str] = {
    DocumentIdentity: scripts.DOCUMENT_IDENTITY_JS,
    PageSnapshot: scripts.PAGE_SNAPSHOT_JS,
    DescribeElements: scripts.DESCRIBE_ELEMENTS_JS,
    DescribeStructural: scripts.DESCRIBE_STRUCTURAL_JS,
    ResolveAddress: scripts.RESOLVE_ADDRESS_JS,
    AdvisorMetrics: scripts.ADVISOR_METRICS_JS,
    MarkedAddresses: scripts.MARKED_ADDRESSES_JS,
}

MUTATION_SCRIPTS: dict[type[Mutation], str] = {
    InstallMode: scripts.INSTALL_MODE_JS,
    SetMarker: scripts.SET_MARKER_JS,
    ClearMarkers: scripts.CLEAR_MARKERS_JS,
    ApplyRule: scripts.APPLY_RULE_JS,
    RestyleMatching: scripts.RESTYLE_MATCHING_JS,
    HighlightAddresses: scripts.HIGHLIGHT_ADDRESSES_JS,
}


class PlaywrightRuntime(DocumentRuntime):
    """
    Answers PageShaper requests against a Playwright ``Page``.

    Usage:
        runtime = PlaywrightRuntime(page)
        shaper = PageShaper()
        await shaper.attach(runtime)
    """

    def __init__(self, page: Page) -> None:
        self._page = page
        self._selection_handler: SelectionHandler | None = None
        self._binding_installed = False

    @property
    def page(self) -> Page:
        return self._page

    async def query(self, request: Query) -> Any:
        script = QUERY_SCRIPTS.get(type(request))
        if script is None:
            raise TypeError(f"Unsupported query {type(request).__name__}")
        log.debug("query %s", type(request).__name__)
        return await self._page.evaluate(script, request.to_args())

    async def mutate(self, request: Mutation) -> Any:
        if isinstance(request, Reload):
            log.debug("reloading %s", self._page.url)
            await self._page.reload()
            return None
        script = MUTATION_SCRIPTS.get(type(request))
        if script is None:
            raise TypeError(f"Unsupported mutation {type(request).__name__}")
        log.debug("mutate %s", type(request).__name__)
        return await self._page.evaluate(script, request.to_args())

    async def bind_selection(self, handler: SelectionHandler) -> None:
        """Expose the in-page selection callback once; later calls swap the handler."""
        self._selection_handler = handler
        if self._binding_installed:
            return
        await self._page.expose_binding(scripts.SELECTION_BINDING, self._on_selection)
        self._binding_installed = True

    async def address_of(self, handle: ElementHandle) -> StructuralAddress:
        """Structural address of an element the caller already holds a handle to."""
        raw = await handle.evaluate(scripts.ADDRESS_OF_JS)
        return StructuralAddress.from_dict(raw)

    def _on_selection(self, source: Any, address: dict, selected: bool) -> None:
        if self._selection_handler is None:
            return
        self._selection_handler(StructuralAddress.from_dict(address), bool(selected))
