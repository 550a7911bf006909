"""Page template type definitions."""

from __future__ import annotations

import datetime
import fnmatch
import uuid
from dataclasses import dataclass, field
from typing import Any

from pageshaper.engine.rules import TransformationRule, rule_from_dict


def utc_now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def new_template_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class PageTemplate:
    """A named, replayable snapshot of a transformation log."""

    id: str
    name: str
    url_pattern: str  # shell-style wildcards, e.g. "https://example.com/*"
    original_url: str
    title: str
    rules: tuple[TransformationRule, ...] = ()
    created_at: str = ""
    updated_at: str = ""
    is_default: bool = False

    def matches(self, url: str) -> bool:
        return fnmatch.fnmatchcase(url, self.url_pattern)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url_pattern": self.url_pattern,
            "original_url": self.original_url,
            "title": self.title,
            "rules": [r.to_dict() for r in self.rules],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "is_default": self.is_default,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "PageTemplate":
        """Raises KeyError/TypeError/ValueError (incl. InvalidRuleError) on malformed input."""
        return cls(
            id=d["id"],
            name=d["name"],
            url_pattern=d.get("url_pattern", ""),
            original_url=d.get("original_url", ""),
            title=d.get("title", ""),
            rules=tuple(rule_from_dict(r) for r in d.get("rules", [])),
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
            is_default=bool(d.get("is_default", False)),
        )
