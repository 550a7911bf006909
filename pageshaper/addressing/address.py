"""Structural addresses: deterministic paths to elements in a live document.

An address is an optional identifier anchor followed by ``(tag, ordinal)``
steps. Ordinals are 1-based among *all* element children of the parent, so
``div[3]`` means "the third child element, which must be a div".

Addresses only depend on document shape. They are not stable across
mutations that reorder siblings or remove ancestors: resolution then fails
(or, if the shape happens to line up, lands on a different node). Anchor on
an identifier where one exists when a reference has to survive mutation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable

from pageshaper.core.errors import AddressError

_ANCHOR_RE = re.compile(r"""//\*\[@id=(?:"([^"]*)"|'([^']*)')\]""")
_STEP_RE = re.compile(r"/([^/\[\]\s]+)\[(\d+)\]")


@dataclass(frozen=True)
class AddressStep:
    tag: str
    ordinal: int  # 1-based among all element children

    def __str__(self) -> str:
        return f"{self.tag}[{self.ordinal}]"


@dataclass(frozen=True)
class StructuralAddress:
    """Identifier anchor and/or a path of steps; see module docstring."""

    anchor: str | None = None
    steps: tuple[AddressStep, ...] = ()

    def __post_init__(self) -> None:
        if self.anchor is None and not self.steps:
            raise AddressError("An address needs an anchor or at least one step")
        if self.anchor is not None:
            if not self.anchor:
                raise AddressError("Anchor identifier must not be empty")
            if '"' in self.anchor and "'" in self.anchor:
                raise AddressError(f"Anchor {self.anchor!r} mixes both quote characters")
        for step in self.steps:
            if not step.tag or step.ordinal < 1:
                raise AddressError(f"Invalid address step {step!r}")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_id(cls, identifier: str) -> "StructuralAddress":
        return cls(anchor=identifier)

    @classmethod
    def from_steps(
        cls, steps: Iterable[tuple[str, int]], anchor: str | None = None
    ) -> "StructuralAddress":
        return cls(
            anchor=anchor,
            steps=tuple(AddressStep(tag.lower(), int(ordinal)) for tag, ordinal in steps),
        )

    @classmethod
    def parse(cls, text: str) -> "StructuralAddress":
        """Parse the textual form produced by ``str()``."""
        text = text.strip()
        anchor: str | None = None
        rest = text

        m = _ANCHOR_RE.match(text)
        if m:
            anchor = m.group(1) if m.group(1) is not None else m.group(2)
            rest = text[m.end():]
        elif not text.startswith("/"):
            raise AddressError(f"Not a structural address: {text!r}")

        steps: list[AddressStep] = []
        pos = 0
        while pos < len(rest):
            step = _STEP_RE.match(rest, pos)
            if step is None:
                raise AddressError(f"Malformed address step in {text!r} at offset {pos}")
            steps.append(AddressStep(step.group(1).lower(), int(step.group(2))))
            pos = step.end()
        return cls(anchor=anchor, steps=tuple(steps))

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "StructuralAddress":
        return cls.from_steps(d.get("steps") or [], anchor=d.get("anchor"))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        prefix = ""
        if self.anchor is not None:
            quote = "'" if '"' in self.anchor else '"'
            prefix = f"//*[@id={quote}{self.anchor}{quote}]"
        return prefix + "".join(f"/{step}" for step in self.steps)

    def to_dict(self) -> dict[str, Any]:
        return {
            "anchor": self.anchor,
            "steps": [[step.tag, step.ordinal] for step in self.steps],
        }

    def to_css(self) -> str:
        """Equivalent CSS selector (child combinators with ``:nth-child``)."""
        parts: list[str] = []
        steps = list(self.steps)
        if self.anchor is not None:
            escaped = self.anchor.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'[id="{escaped}"]')
        else:
            first = steps.pop(0)
            if first.tag != "html" or first.ordinal != 1:
                raise AddressError(f"Address {self} does not start at the document root")
            parts.append(":root")
        parts.extend(f"{step.tag}:nth-child({step.ordinal})" for step in steps)
        return " > ".join(parts)
