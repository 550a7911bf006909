"""
In-memory DocumentRuntime for unit tests.

FakeRuntime answers every request type over a tiny element tree, following
the semantics of the in-page scripts closely enough to test the Python side
without a browser. Supported CSS: type, universal, #id, .class, attribute
presence and the =, ~=, *= and ^= operators, :root, :nth-child(n),
descendant and child combinators, and comma-separated groups.
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable

from pageshaper.addressing.address import StructuralAddress
from pageshaper.core.types import InteractionMode
from pageshaper.runtime.base import DocumentRuntime, SelectionHandler
from pageshaper.runtime.scripts import MARKER_ATTRIBUTE
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

MARKER = MARKER_ATTRIBUTE
SAVED_OUTLINE = "data-pageshaper-outline"
OVERLAY_ID = "pageshaper-overlay"

_DEFAULT_COMPUTED = {
    "display": "block",
    "color": "rgb(0, 0, 0)",
    "fontSize": "16px",
    "padding": "0px",
    "margin": "0px",
    "lineHeight": "normal",
    "width": "100px",
    "height": "20px",
}


def _camel(name: str) -> str:
    head, *rest = name.split("-")
    return head + "".join(part.title() for part in rest)


def _px(value: str | None) -> float:
    """JS parseFloat: leading number or NaN."""
    m = re.match(r"\s*(-?\d+(?:\.\d+)?)", value or "")
    return float(m.group(1)) if m else math.nan


# ---------------------------------------------------------------------------
# Element tree
# ---------------------------------------------------------------------------

class Node:
    def __init__(self, tag: str, *children: "Node", text: str = "", computed=None, **attrs: str):
        self.tag = tag.lower()
        self.attrs: dict[str, str] = {
            k.rstrip("_").replace("_", "-"): str(v) for k, v in attrs.items()
        }
        self.text = text
        self.computed: dict[str, str] = dict(computed or {})
        self.style: dict[str, str] = {}
        self.children: list[Node] = []
        self.parent: Node | None = None
        for child in children:
            self.append(child)

    def __repr__(self) -> str:
        return f"<{self.tag} {self.attrs}>"

    # -- tree editing

    def detach(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def append(self, child: "Node") -> None:
        child.detach()
        child.parent = self
        self.children.append(child)

    def prepend(self, child: "Node") -> None:
        child.detach()
        child.parent = self
        self.children.insert(0, child)

    def before(self, other: "Node") -> None:
        other.detach()
        idx = self.parent.children.index(self)
        self.parent.children.insert(idx, other)
        other.parent = self.parent

    def after(self, other: "Node") -> None:
        other.detach()
        idx = self.parent.children.index(self)
        self.parent.children.insert(idx + 1, other)
        other.parent = self.parent

    def replace_with(self, other: "Node") -> None:
        other.detach()
        parent = self.parent
        idx = parent.children.index(self)
        parent.children[idx] = other
        other.parent = parent
        self.parent = None

    # -- reading

    def iter(self):
        yield self
        for child in self.children:
            yield from child.iter()

    def contains(self, other: "Node") -> bool:
        node: Node | None = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    @property
    def text_content(self) -> str:
        return self.text + "".join(c.text_content for c in self.children)

    def inner_text(self) -> str:
        if self.computed_style("display") == "none":
            return ""
        parts = [self.text] + [c.inner_text() for c in self.children]
        return " ".join(p for p in parts if p)

    def computed_style(self, name: str) -> str:
        return self.style.get(name) or self.computed.get(name) or _DEFAULT_COMPUTED.get(name, "")

    def apply_styles(self, styles: dict[str, str]) -> None:
        for key, value in styles.items():
            self.style[_camel(key)] = value

    def is_engine_node(self) -> bool:
        node: Node | None = self
        while node is not None:
            if node.attrs.get("id") == OVERLAY_ID:
                return True
            node = node.parent
        return False


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------

_TAG_RE = re.compile(r"^(\*|[a-zA-Z][\w-]*)")
_PART_RE = re.compile(
    r"""\#(?P<id>[\w-]+)"""
    r"""|\.(?P<cls>[\w-]+)"""
    r"""|\[(?P<attr>[\w-]+)(?:(?P<op>[~*^]?=)(?P<q>["']?)(?P<val>.*?)(?P=q))?\]"""
    r"""|:(?P<pseudo>root|nth-child)(?:\((?P<nth>\d+)\))?"""
)


def _parse_compound(text: str):
    tag = None
    m = _TAG_RE.match(text)
    pos = 0
    if m:
        tag = m.group(1).lower()
        pos = m.end()
    parts = []
    while pos < len(text):
        p = _PART_RE.match(text, pos)
        if p is None:
            raise ValueError(f"Unsupported selector {text!r}")
        parts.append(p)
        pos = p.end()
    return tag, parts


def _match_compound(node: Node, compound) -> bool:
    tag, parts = compound
    if tag not in (None, "*") and node.tag != tag:
        return False
    for p in parts:
        if p.group("id") is not None:
            if node.attrs.get("id") != p.group("id"):
                return False
        elif p.group("cls") is not None:
            if p.group("cls") not in node.attrs.get("class", "").split():
                return False
        elif p.group("pseudo") == "root":
            if node.parent is not None:
                return False
        elif p.group("pseudo") == "nth-child":
            if node.parent is None or node.parent.children.index(node) + 1 != int(p.group("nth")):
                return False
        else:
            name, op, val = p.group("attr"), p.group("op"), p.group("val")
            if name not in node.attrs:
                return False
            actual = node.attrs[name]
            if op == "=" and actual != val:
                return False
            if op == "~=" and val not in actual.split():
                return False
            if op == "*=" and val not in actual:
                return False
            if op == "^=" and not actual.startswith(val):
                return False
    return True


def _matches(node: Node, chain) -> bool:
    combinator, compound = chain[-1]
    if not _match_compound(node, compound):
        return False
    if len(chain) == 1:
        return True
    if combinator == ">":
        return node.parent is not None and _matches(node.parent, chain[:-1])
    ancestor = node.parent
    while ancestor is not None:
        if _matches(ancestor, chain[:-1]):
            return True
        ancestor = ancestor.parent
    return False


def _parse_group(group: str):
    """Compounds paired with the combinator that links each to the one before it."""
    chain = []
    combinator = " "
    for token in group.replace(">", " > ").split():
        if token == ">":
            combinator = ">"
            continue
        chain.append((combinator, _parse_compound(token)))
        combinator = " "
    return chain


def parse_selector(selector: str):
    return [_parse_group(group) for group in selector.split(",") if group.strip()]


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------

class FakeRuntime(DocumentRuntime):
    """
    DocumentRuntime over a Node tree built by ``factory``.

    ``requests`` records every query and mutation in issuing order. Reload
    rebuilds the tree from the factory and drops the installed mode, as a
    real navigation would.
    """

    def __init__(
        self,
        factory: Callable[[], Node],
        *,
        url: str = "https://example.com/articles/1",
        title: str = "Sample Page",
    ) -> None:
        self._factory = factory
        self.root = factory()
        self.url = url
        self.title = title
        self.requests: list[Query | Mutation] = []
        self.installed_mode: str | None = None
        self.reloads = 0
        self.errors: dict[type, Exception] = {}
        self._handler: SelectionHandler | None = None
        self._overlay: Node | None = None

    # -- DOM helpers

    @property
    def body(self) -> Node:
        return next(c for c in self.root.children if c.tag == "body")

    def select(self, selector: str) -> list[Node]:
        groups = parse_selector(selector)
        return [n for n in self.root.iter() if any(_matches(n, g) for g in groups)]

    def select_one(self, selector: str) -> Node | None:
        found = self.select(selector)
        return found[0] if found else None

    def get_by_id(self, identifier: str) -> Node | None:
        return next((n for n in self.root.iter() if n.attrs.get("id") == identifier), None)

    def _has_stable_id(self, node: Node) -> bool:
        identifier = node.attrs.get("id")
        if not identifier or ('"' in identifier and "'" in identifier):
            return False
        return self.get_by_id(identifier) is node

    def address_of(self, node: Node) -> dict[str, Any]:
        steps: list[list[Any]] = []
        current: Node | None = node
        while current is not None:
            if self._has_stable_id(current):
                return {"anchor": current.attrs["id"], "steps": steps}
            parent = current.parent
            ordinal = parent.children.index(current) + 1 if parent else 1
            steps.insert(0, [current.tag, ordinal])
            current = parent
        return {"anchor": None, "steps": steps}

    def address(self, node: Node) -> StructuralAddress:
        return StructuralAddress.from_dict(self.address_of(node))

    def resolve(self, address: dict[str, Any]) -> Node | None:
        node: Node | None = None
        if address.get("anchor") is not None:
            node = self.get_by_id(address["anchor"])
            if node is None:
                return None
        for tag, ordinal in address.get("steps", []):
            kids = [self.root] if node is None else node.children
            if ordinal - 1 >= len(kids) or kids[ordinal - 1].tag != tag:
                return None
            node = kids[ordinal - 1]
        return node

    def describe(self, node: Node, text_limit: int, include_box: bool) -> dict[str, Any]:
        styles = {k: node.computed_style(k) for k in ("display", "color", "fontSize", "padding", "margin")}
        if include_box:
            styles["width"] = node.computed_style("width")
            styles["height"] = node.computed_style("height")
        return {
            "address": self.address_of(node),
            "tag": node.tag,
            "text": node.text_content.strip()[:text_limit],
            "attributes": {k: v for k, v in node.attrs.items() if k not in (MARKER, SAVED_OUTLINE)},
            "styles": styles,
        }

    def set_marker(self, node: Node, selected: bool, color: str) -> None:
        if selected:
            if MARKER not in node.attrs:
                node.attrs[SAVED_OUTLINE] = node.style.get("outline", "")
            node.attrs[MARKER] = "true"
            node.style["outline"] = "2px solid " + color
        elif MARKER in node.attrs:
            saved = node.attrs.pop(SAVED_OUTLINE, "")
            node.attrs.pop(MARKER)
            if saved:
                node.style["outline"] = saved
            else:
                node.style.pop("outline", None)

    # -- simulated user input

    def click(self, node: Node) -> bool | None:
        """Click ``node``; returns the new selected state, or None when no listener is installed."""
        if self.installed_mode not in (InteractionMode.SELECT.value, InteractionMode.STYLE.value):
            return None
        if node.is_engine_node():
            return None
        selected = MARKER not in node.attrs
        self.set_marker(node, selected, "#2563eb")
        if self._handler is not None:
            self._handler(self.address(node), selected)
        return selected

    # -- DocumentRuntime

    async def bind_selection(self, handler: SelectionHandler) -> None:
        self._handler = handler

    async def query(self, request: Query) -> Any:
        self.requests.append(request)
        if type(request) in self.errors:
            raise self.errors[type(request)]
        args = request.to_args()

        if isinstance(request, DocumentIdentity):
            return {"url": self.url, "title": self.title}
        if isinstance(request, PageSnapshot):
            return self._snapshot(args)
        if isinstance(request, DescribeElements):
            nodes = self.select(args["selector"])
            if args["limit"] is not None:
                nodes = nodes[: args["limit"]]
            return [self.describe(n, args["textLimit"], args["includeBox"]) for n in nodes]
        if isinstance(request, DescribeStructural):
            result = []
            for tag in args["tags"]:
                for node in self.select(tag):
                    if len(result) >= args["limit"]:
                        return result
                    if node.is_engine_node():
                        continue
                    result.append(self.describe(node, args["textLimit"], True))
            return result
        if isinstance(request, ResolveAddress):
            node = self.resolve(args["address"])
            return self.describe(node, args["textLimit"], False) if node else None
        if isinstance(request, AdvisorMetrics):
            return self._metrics(args)
        if isinstance(request, MarkedAddresses):
            return [self.address_of(n) for n in self.select(f"[{MARKER}]")]
        raise TypeError(f"Unsupported query {type(request).__name__}")

    async def mutate(self, request: Mutation) -> Any:
        self.requests.append(request)
        if type(request) in self.errors:
            raise self.errors[type(request)]
        args = request.to_args()

        if isinstance(request, Reload):
            self.root = self._factory()
            self.installed_mode = None
            self._overlay = None
            self.reloads += 1
            return None
        if isinstance(request, InstallMode):
            return self._install_mode(args)
        if isinstance(request, SetMarker):
            node = self.resolve(args["address"])
            if node is None:
                return False
            self.set_marker(node, args["selected"], args["selectionColor"])
            return True
        if isinstance(request, ClearMarkers):
            marked = self.select(f"[{MARKER}]")
            for node in marked:
                self.set_marker(node, False, "")
            return len(marked)
        if isinstance(request, ApplyRule):
            return self._apply_rule(args["rule"], args["target"])
        if isinstance(request, RestyleMatching):
            return self._restyle(args)
        if isinstance(request, HighlightAddresses):
            count = 0
            for address in args["addresses"]:
                node = self.resolve(address)
                if node is None:
                    continue
                node.style["outline"] = "3px solid " + args["color"]
                node.style["backgroundColor"] = "rgba(37, 99, 235, 0.1)"
                count += 1
            return count
        raise TypeError(f"Unsupported mutation {type(request).__name__}")

    # -- request bodies

    def _snapshot(self, args: dict[str, Any]) -> dict[str, Any]:
        words = [w for w in self.body.inner_text().split() if w]
        headings = [
            {"level": int(h.tag[1]), "text": h.text_content.strip()}
            for h in self.select("h1, h2, h3, h4, h5, h6")
        ]
        sections = []
        for node in self.select("main, section, article"):
            text = node.text_content.strip()[: args["excerptLength"]]
            if text:
                sections.append({"address": self.address_of(node), "text": text})
        navigation = [
            {"address": self.address_of(a), "text": a.text_content.strip()}
            for a in self.select('nav a, [role="navigation"] a')[: args["navigationLimit"]]
        ]
        return {
            "url": self.url,
            "title": self.title,
            "wordCount": len(words),
            "elementCount": len([n for n in self.select("*") if not n.is_engine_node()]),
            "imageCount": len(self.select("img")),
            "linkCount": len(self.select("a")),
            "formCount": len(self.select("form")),
            "headings": headings,
            "sections": sections,
            "navigation": navigation,
        }

    def _metrics(self, args: dict[str, Any]) -> dict[str, Any]:
        samples = []
        for node in self.select("body *"):
            if node.tag in ("script", "style", "noscript", "template") or node.is_engine_node():
                continue
            length = len(node.text_content.strip())
            if length <= args["minTextLength"]:
                continue
            samples.append(
                {
                    "fontSize": node.computed_style("fontSize"),
                    "padding": node.computed_style("padding"),
                    "margin": node.computed_style("margin"),
                    "textLength": length,
                }
            )
        return {
            "navLinkCount": len(self.select('nav a, [role="navigation"] a')),
            "headingCount": len(self.select("h1, h2, h3")),
            "imagesMissingAlt": sum(1 for img in self.select("img") if not img.attrs.get("alt")),
            "textSamples": samples,
        }

    def _install_mode(self, args: dict[str, Any]) -> int:
        if self._overlay is not None:
            self._overlay.detach()
            self._overlay = None
        self.installed_mode = args["mode"]
        if args["mode"] == InteractionMode.INSPECT.value:
            self._overlay = Node("div", Node("div"), Node("div"), id=OVERLAY_ID)
            self.body.append(self._overlay)
            return 2
        if args["mode"] in (InteractionMode.SELECT.value, InteractionMode.STYLE.value):
            return 1
        return 0

    def _apply_rule(self, rule: dict[str, Any], target: dict[str, Any]) -> int:
        if target["address"] is not None:
            node = self.resolve(target["address"])
            targets = [node] if node else []
        else:
            targets = self.select(target["selector"])

        destination = None
        if rule["kind"] == "move":
            destination = self.select_one(rule["destination"])
            if destination is None:
                return 0

        cursor = None
        applied = 0
        for el in targets:
            kind = rule["kind"]
            if kind == "hide":
                el.style["display"] = "none"
            elif kind == "remove":
                el.detach()
            elif kind == "highlight":
                el.style["outline"] = "3px solid " + rule["color"]
                el.style["backgroundColor"] = rule["background"]
            elif kind == "style":
                el.apply_styles(rule["styles"])
            elif kind == "replace":
                el.children = []
                el.text = rule["html"]
            elif kind == "move":
                if el.contains(destination):
                    continue
                position = rule["position"]
                if cursor is not None:
                    cursor.after(el)
                elif position == "before":
                    destination.before(el)
                elif position == "after":
                    destination.after(el)
                elif position == "replace":
                    destination.replace_with(el)
                elif position == "prepend":
                    destination.prepend(el)
                else:
                    destination.append(el)
                if position not in ("before", "append"):
                    cursor = el
            else:
                raise ValueError(f"Unsupported operation: {kind}")
            applied += 1
        return applied

    def _restyle(self, args: dict[str, Any]) -> int:
        cond = args["condition"]
        changed = 0
        for node in self.select(args["selector"]):
            if node.is_engine_node() or not self._condition_holds(node, cond):
                continue
            node.apply_styles(args["styles"])
            changed += 1
        return changed

    @staticmethod
    def _condition_holds(node: Node, cond: dict[str, Any] | None) -> bool:
        if not cond:
            return True
        font_size = _px(node.computed_style("fontSize"))
        if cond["minTextLength"] is not None and len(node.text_content.strip()) <= cond["minTextLength"]:
            return False
        if cond["fontSizeBelow"] is not None and not font_size < cond["fontSizeBelow"]:
            return False
        if cond["lineHeightRatioBelow"] is not None:
            raw = node.computed_style("lineHeight")
            if raw == "normal":
                line_height = 1.2 * font_size
            elif raw.endswith("px"):
                line_height = _px(raw)
            else:
                line_height = _px(raw) * font_size
            if not line_height / font_size < cond["lineHeightRatioBelow"]:
                return False
        if cond["spacingAbove"] is not None:
            limit = cond["spacingAbove"]
            if not (_px(node.computed_style("padding")) > limit or _px(node.computed_style("margin")) > limit):
                return False
        return True


# ---------------------------------------------------------------------------
# Sample document
# ---------------------------------------------------------------------------

def sample_page() -> Node:
    """
    A small article page::

        html > head
             > body > header > nav > a, a, a
                    > main#content > h1, section.intro, article.post, section (empty)
                    > aside.sidebar > p
                    > div.ad-banner > img (no alt)
                    > img (alt)
                    > form > button
                    > footer.footer > p
    """
    return Node(
        "html",
        Node("head"),
        Node(
            "body",
            Node(
                "header",
                Node(
                    "nav",
                    Node("a", text="Home", href="/"),
                    Node("a", text="Docs", href="/docs"),
                    Node("a", text="Blog", href="/blog"),
                ),
            ),
            Node(
                "main",
                Node("h1", text="Welcome to the sample page"),
                Node(
                    "section",
                    Node("h2", text="Introduction"),
                    Node("p", text="This page exists to exercise the customization engine."),
                    class_="intro",
                ),
                Node(
                    "article",
                    Node("h2", text="First post"),
                    Node("p", text="Short paragraph one."),
                    Node("p", text="Short paragraph two."),
                    class_="post",
                ),
                Node("section"),
                id="content",
            ),
            Node("aside", Node("p", text="Related links"), class_="sidebar"),
            Node("div", Node("img", src="/ad.png"), class_="ad-banner"),
            Node("img", src="/hero.png", alt="Hero"),
            Node("form", Node("button", text="Send", type="submit")),
            Node("footer", Node("p", text="Copyright"), class_="footer"),
        ),
    )


def page_runtime(**kwargs: Any) -> FakeRuntime:
    return FakeRuntime(sample_page, **kwargs)
