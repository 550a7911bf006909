"""Persisted interaction preferences (last mode and selection)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pageshaper.addressing.address import StructuralAddress
from pageshaper.core.types import InteractionMode
from pageshaper.templates.storage import KeyValueStorage

log = logging.getLogger(__name__)

PREFERENCES_KEY = "customization_preferences"


@dataclass
class SessionPreferences:
    mode: InteractionMode = InteractionMode.INSPECT
    selection: list[StructuralAddress] = field(default_factory=list)


class PreferenceStore:
    """Reads and writes SessionPreferences; corrupt data falls back to defaults."""

    def __init__(self, storage: KeyValueStorage, *, key: str = PREFERENCES_KEY) -> None:
        self._storage = storage
        self._key = key

    def load(self) -> SessionPreferences:
        try:
            raw = self._storage.get(self._key)
        except ValueError as exc:
            log.warning("Stored preferences are corrupt, using defaults: %s", exc)
            return SessionPreferences()
        if raw is None:
            return SessionPreferences()
        try:
            return SessionPreferences(
                mode=InteractionMode(raw.get("mode", InteractionMode.INSPECT.value)),
                selection=[StructuralAddress.parse(a) for a in raw.get("selection", [])],
            )
        except (AttributeError, TypeError, ValueError) as exc:
            log.warning("Stored preferences are malformed, using defaults: %s", exc)
            return SessionPreferences()

    def save(self, prefs: SessionPreferences) -> None:
        self._storage.set(
            self._key,
            {"mode": prefs.mode.value, "selection": [str(a) for a in prefs.selection]},
        )
