"""Abstract document runtime, the only way PageShaper touches a document."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from pageshaper.addressing.address import StructuralAddress
from pageshaper.runtime.requests import Mutation, Query

SelectionHandler = Callable[[StructuralAddress, bool], None]


class DocumentRuntime(ABC):
    """
    Host document collaborator.

    Each call is one awaited round trip. Failures raised by the host (script
    errors, closed pages) propagate to the caller unchanged.
    """

    @abstractmethod
    async def query(self, request: Query) -> Any: ...

    @abstractmethod
    async def mutate(self, request: Mutation) -> Any: ...

    async def bind_selection(self, handler: SelectionHandler) -> None:
        """Route in-page selection toggles to ``handler(address, selected)``."""
        return None
