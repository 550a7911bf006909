"""Interaction mode and selection state."""

from __future__ import annotations

import logging

from pageshaper.addressing.address import StructuralAddress
from pageshaper.core.config import EngineConfig
from pageshaper.core.types import InteractionMode
from pageshaper.runtime.base import DocumentRuntime
from pageshaper.runtime.requests import (
    ClearMarkers,
    InstallMode,
    MarkedAddresses,
    SetMarker,
)

log = logging.getLogger(__name__)


class SelectionController:
    """
    Tracks the current InteractionMode and the ordered set of selected nodes.

    Switching modes never fails and never touches the selection. Toggles
    arriving from the document (clicks in select/style mode) go through
    handle_toggle(); planners use toggle/select/deselect directly.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()
        self._mode = InteractionMode.INSPECT
        self._selected: list[StructuralAddress] = []

    @property
    def mode(self) -> InteractionMode:
        return self._mode

    async def set_mode(self, mode: InteractionMode | str, runtime: DocumentRuntime) -> None:
        mode = InteractionMode(mode)
        await runtime.mutate(
            InstallMode(mode=mode, selection_color=self._config.selection_color)
        )
        if mode is not self._mode:
            log.debug("Mode %s -> %s", self._mode.value, mode.value)
        self._mode = mode

    def handle_toggle(self, address: StructuralAddress, selected: bool) -> None:
        """Record a toggle the document has already applied."""
        if selected:
            if address not in self._selected:
                self._selected.append(address)
        elif address in self._selected:
            self._selected.remove(address)

    async def toggle(self, address: StructuralAddress, runtime: DocumentRuntime) -> bool:
        return await self._mark(address, address not in self._selected, runtime)

    async def select(self, address: StructuralAddress, runtime: DocumentRuntime) -> bool:
        return await self._mark(address, True, runtime)

    async def deselect(self, address: StructuralAddress, runtime: DocumentRuntime) -> bool:
        return await self._mark(address, False, runtime)

    async def _mark(
        self, address: StructuralAddress, selected: bool, runtime: DocumentRuntime
    ) -> bool:
        found = bool(
            await runtime.mutate(
                SetMarker(
                    address=address,
                    selected=selected,
                    selection_color=self._config.selection_color,
                )
            )
        )
        if found:
            self.handle_toggle(address, selected)
        else:
            log.debug("Address %s did not resolve; selection unchanged", address)
        return found

    async def clear(self, runtime: DocumentRuntime) -> int:
        """Strip every marker in the document and empty the selection."""
        cleared = int(await runtime.mutate(ClearMarkers()) or 0)
        self._selected = []
        return cleared

    async def refresh(self, runtime: DocumentRuntime) -> list[StructuralAddress]:
        """Rebuild the selection from the markers currently in the document."""
        raw = await runtime.query(MarkedAddresses()) or []
        refreshed: list[StructuralAddress] = []
        for item in raw:
            address = StructuralAddress.from_dict(item)
            if address not in refreshed:
                refreshed.append(address)
        self._selected = refreshed
        return self.get_selected()

    def get_selected(self) -> list[StructuralAddress]:
        return list(self._selected)

    def reset(self) -> None:
        """Forget the selection without touching the document."""
        self._selected = []
