"""Transformation rules: one frozen dataclass per operation kind."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from pageshaper.addressing.address import StructuralAddress
from pageshaper.core.errors import AddressError, InvalidRuleError


class OperationKind(str, Enum):
    HIDE = "hide"
    REMOVE = "remove"
    HIGHLIGHT = "highlight"
    STYLE = "style"
    REPLACE = "replace"
    MOVE = "move"


class InsertPosition(str, Enum):
    BEFORE = "before"
    AFTER = "after"
    REPLACE = "replace"
    APPEND = "append"
    PREPEND = "prepend"


def _new_rule_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Target:
    """What a rule applies to: a CSS selector or a structural address, never both."""

    selector: str | None = None
    address: StructuralAddress | None = None

    def __post_init__(self) -> None:
        if (self.selector is None) == (self.address is None):
            raise InvalidRuleError("A target needs exactly one of selector or address")
        if self.selector is not None and not self.selector.strip():
            raise InvalidRuleError("Target selector must not be empty")

    @classmethod
    def css(cls, selector: str) -> "Target":
        return cls(selector=selector)

    @classmethod
    def at(cls, address: StructuralAddress | str) -> "Target":
        if isinstance(address, str):
            address = StructuralAddress.parse(address)
        return cls(address=address)

    def __str__(self) -> str:
        return self.selector if self.selector is not None else str(self.address)

    def to_dict(self) -> dict[str, Any]:
        if self.address is not None:
            return {"address": str(self.address)}
        return {"selector": self.selector}

    def to_args(self) -> dict[str, Any]:
        """Wire form for the document runtime."""
        if self.address is not None:
            return {"selector": None, "address": self.address.to_dict()}
        return {"selector": self.selector, "address": None}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Target":
        if d.get("address"):
            try:
                return cls.at(str(d["address"]))
            except AddressError as exc:
                raise InvalidRuleError(str(exc)) from exc
        if d.get("selector"):
            return cls.css(str(d["selector"]))
        raise InvalidRuleError(f"Target needs a selector or an address: {dict(d)!r}")


@dataclass(frozen=True, kw_only=True)
class TransformationRule:
    """Base rule. Use one of the kind-specific subclasses."""

    kind: ClassVar[OperationKind]

    target: Target
    id: str = field(default_factory=_new_rule_id)

    def __post_init__(self) -> None:
        if not isinstance(self.target, Target):
            raise InvalidRuleError(f"Rule target must be a Target, got {type(self.target).__name__}")
        if not self.id:
            raise InvalidRuleError("Rule id must not be empty")

    def payload(self) -> dict[str, Any]:
        """Kind-specific fields."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "kind": self.kind.value, "target": self.target.to_dict(), **self.payload()}

    def to_args(self) -> dict[str, Any]:
        return {"id": self.id, "kind": self.kind.value, **self.payload()}


@dataclass(frozen=True, kw_only=True)
class HideRule(TransformationRule):
    kind: ClassVar[OperationKind] = OperationKind.HIDE


@dataclass(frozen=True, kw_only=True)
class RemoveRule(TransformationRule):
    kind: ClassVar[OperationKind] = OperationKind.REMOVE


@dataclass(frozen=True, kw_only=True)
class HighlightRule(TransformationRule):
    kind: ClassVar[OperationKind] = OperationKind.HIGHLIGHT

    color: str = "#f59e0b"
    background: str = "rgba(245, 158, 11, 0.1)"

    def payload(self) -> dict[str, Any]:
        return {"color": self.color, "background": self.background}


@dataclass(frozen=True, kw_only=True)
class StyleRule(TransformationRule):
    kind: ClassVar[OperationKind] = OperationKind.STYLE

    styles: Mapping[str, str]

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.styles, Mapping):
            raise InvalidRuleError("Style rule needs a mapping of style properties")
        if not self.styles:
            raise InvalidRuleError("Style rule needs at least one style property")
        # private copy; values coerced to str, never validated
        object.__setattr__(
            self, "styles", {str(key): str(value) for key, value in self.styles.items()}
        )

    def payload(self) -> dict[str, Any]:
        return {"styles": dict(self.styles)}


@dataclass(frozen=True, kw_only=True)
class ReplaceRule(TransformationRule):
    kind: ClassVar[OperationKind] = OperationKind.REPLACE

    html: str

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.html, str):
            raise InvalidRuleError("Replace rule needs an HTML string")

    def payload(self) -> dict[str, Any]:
        return {"html": self.html}


@dataclass(frozen=True, kw_only=True)
class MoveRule(TransformationRule):
    kind: ClassVar[OperationKind] = OperationKind.MOVE

    destination: str
    position: InsertPosition = InsertPosition.APPEND

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.destination, str) or not self.destination.strip():
            raise InvalidRuleError("Move rule needs a destination selector")
        try:
            position = InsertPosition(self.position)
        except ValueError as exc:
            raise InvalidRuleError(f"Unknown insert position {self.position!r}") from exc
        object.__setattr__(self, "position", position)

    def payload(self) -> dict[str, Any]:
        return {"destination": self.destination, "position": self.position.value}


_RULE_CLASSES: dict[OperationKind, type[TransformationRule]] = {
    OperationKind.HIDE: HideRule,
    OperationKind.REMOVE: RemoveRule,
    OperationKind.HIGHLIGHT: HighlightRule,
    OperationKind.STYLE: StyleRule,
    OperationKind.REPLACE: ReplaceRule,
    OperationKind.MOVE: MoveRule,
}


def build_rule(
    kind: OperationKind | str,
    target: Target,
    *,
    rule_id: str | None = None,
    **payload: Any,
) -> TransformationRule:
    """Construct the rule class for ``kind``; unknown payload fields are rejected."""
    try:
        kind = OperationKind(kind)
    except ValueError as exc:
        raise InvalidRuleError(f"Unknown operation kind {kind!r}") from exc
    rule_cls = _RULE_CLASSES[kind]
    kwargs: dict[str, Any] = {"target": target, **payload}
    if rule_id is not None:
        kwargs["id"] = rule_id
    try:
        return rule_cls(**kwargs)
    except TypeError as exc:
        raise InvalidRuleError(f"Invalid fields for a {kind.value} rule: {exc}") from exc


def rule_from_dict(d: Mapping[str, Any]) -> TransformationRule:
    """Inverse of ``TransformationRule.to_dict()``."""
    if not isinstance(d, Mapping):
        raise InvalidRuleError(f"Rule must be a mapping, got {type(d).__name__}")
    target_raw = d.get("target")
    if not isinstance(target_raw, Mapping):
        raise InvalidRuleError(f"Rule is missing its target: {dict(d)!r}")
    payload = {k: v for k, v in d.items() if k not in ("id", "kind", "target")}
    return build_rule(
        d.get("kind", ""),
        Target.from_dict(target_raw),
        rule_id=d.get("id") or None,
        **payload,
    )
