"""TemplateStore: persisted collection of page templates."""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable

from pageshaper.core.errors import TemplateError
from pageshaper.engine.rules import TransformationRule
from pageshaper.templates.storage import KeyValueStorage
from pageshaper.templates.types import PageTemplate, new_template_id, utc_now

log = logging.getLogger(__name__)

TEMPLATES_KEY = "page_templates"


class TemplateStore:
    """
    Creates, lists and deletes templates held under one storage key.

    The whole collection is read and rewritten on every change. A stored
    template's rules never change; saving under an existing name adds a new
    template with a fresh id.
    """

    def __init__(self, storage: KeyValueStorage, *, key: str = TEMPLATES_KEY) -> None:
        self._storage = storage
        self._key = key

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load(self) -> list[PageTemplate]:
        try:
            raw = self._storage.get(self._key)
        except ValueError as exc:
            log.warning("Stored templates under %r are corrupt, starting empty: %s", self._key, exc)
            return []
        if raw is None:
            return []
        if not isinstance(raw, list):
            log.warning(
                "Stored templates under %r are not a list (%s), starting empty",
                self._key,
                type(raw).__name__,
            )
            return []

        templates: list[PageTemplate] = []
        for entry in raw:
            try:
                templates.append(PageTemplate.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                log.warning("Skipping malformed stored template: %s", exc)
        return templates

    def _write(self, templates: Iterable[PageTemplate]) -> None:
        self._storage.set(self._key, [t.to_dict() for t in templates])

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        url_pattern: str,
        original_url: str,
        title: str,
        rules: Iterable[TransformationRule],
    ) -> PageTemplate:
        """Build a template from a copy of ``rules``. Does not persist it."""
        if not name or not name.strip():
            raise TemplateError("Template name must not be empty")
        now = utc_now()
        return PageTemplate(
            id=new_template_id(),
            name=name.strip(),
            url_pattern=url_pattern or original_url,
            original_url=original_url,
            title=title,
            rules=tuple(rules),
            created_at=now,
            updated_at=now,
            is_default=False,
        )

    def save(self, template: PageTemplate) -> PageTemplate:
        """Append ``template`` to the stored collection."""
        templates = self._load()
        if any(t.id == template.id for t in templates):
            raise TemplateError(f"Template {template.id!r} is already stored")
        templates.append(template)
        self._write(templates)
        log.info("Saved template %r (%s, %d rules)", template.name, template.id, len(template.rules))
        return template

    def list(self) -> list[PageTemplate]:
        return self._load()

    def get(self, template_id: str) -> PageTemplate | None:
        for template in self._load():
            if template.id == template_id:
                return template
        return None

    def delete(self, template_id: str) -> bool:
        """Delete a template. Returns True if it existed."""
        templates = self._load()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            return False
        self._write(remaining)
        log.info("Deleted template %s", template_id)
        return True

    def find_for_url(self, url: str) -> list[PageTemplate]:
        """Templates whose url pattern matches ``url``, defaults first."""
        matching = [t for t in self._load() if t.matches(url)]
        return sorted(matching, key=lambda t: not t.is_default)

    def set_default(self, template_id: str) -> PageTemplate | None:
        """
        Make a template the default for its url pattern.

        Other templates with the same pattern lose the flag. Returns the
        updated template, or None if the id is unknown.
        """
        templates = self._load()
        target = next((t for t in templates if t.id == template_id), None)
        if target is None:
            return None

        now = utc_now()
        updated: list[PageTemplate] = []
        result = target
        for t in templates:
            if t.id == template_id:
                result = dataclasses.replace(t, is_default=True, updated_at=now)
                updated.append(result)
            elif t.url_pattern == target.url_pattern and t.is_default:
                updated.append(dataclasses.replace(t, is_default=False, updated_at=now))
            else:
                updated.append(t)
        self._write(updated)
        return result

    def replace_all(self, templates: Iterable[PageTemplate]) -> None:
        """Overwrite the whole stored collection."""
        self._write(list(templates))
