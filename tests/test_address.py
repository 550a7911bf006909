"""Unit tests for StructuralAddress (pure, no browser)."""

from __future__ import annotations

import pytest

from pageshaper.addressing.address import AddressStep, StructuralAddress
from pageshaper.core.errors import AddressError, PageShaperError


class TestConstruction:
    def test_from_steps_lowercases_tags(self):
        addr = StructuralAddress.from_steps([("HTML", 1), ("Body", 2)])
        assert addr.steps == (AddressStep("html", 1), AddressStep("body", 2))

    def test_from_id(self):
        addr = StructuralAddress.from_id("content")
        assert addr.anchor == "content"
        assert addr.steps == ()

    def test_empty_address_rejected(self):
        with pytest.raises(AddressError):
            StructuralAddress()

    def test_empty_anchor_rejected(self):
        with pytest.raises(AddressError):
            StructuralAddress(anchor="")

    def test_anchor_with_both_quotes_rejected(self):
        with pytest.raises(AddressError):
            StructuralAddress.from_id("""a"b'c""")

    def test_zero_ordinal_rejected(self):
        with pytest.raises(AddressError):
            StructuralAddress.from_steps([("div", 0)])

    def test_address_error_is_value_error(self):
        with pytest.raises(ValueError):
            StructuralAddress()
        assert issubclass(AddressError, PageShaperError)


class TestTextForm:
    def test_root_path(self):
        addr = StructuralAddress.from_steps([("html", 1), ("body", 2), ("div", 3)])
        assert str(addr) == "/html[1]/body[2]/div[3]"

    def test_anchored_path(self):
        addr = StructuralAddress.from_steps([("div", 2)], anchor="main")
        assert str(addr) == '//*[@id="main"]/div[2]'

    def test_anchor_with_double_quote_uses_single_quotes(self):
        addr = StructuralAddress.from_id('say "hi"')
        assert str(addr) == """//*[@id='say "hi"']"""

    def test_parse_inverts_str(self):
        for text in (
            "/html[1]/body[2]/main[1]/p[12]",
            '//*[@id="content"]',
            '//*[@id="content"]/section[2]/h2[1]',
            """//*[@id='say "hi"']/span[1]""",
        ):
            assert str(StructuralAddress.parse(text)) == text

    def test_parse_strips_whitespace(self):
        assert StructuralAddress.parse("  /html[1]  ") == StructuralAddress.from_steps([("html", 1)])

    def test_parse_rejects_garbage(self):
        for text in ("", "div", "/div", "/div[x]", '//*[@id="a"]garbage'):
            with pytest.raises(AddressError):
                StructuralAddress.parse(text)

    def test_dict_form(self):
        addr = StructuralAddress.from_steps([("div", 2)], anchor="main")
        assert addr.to_dict() == {"anchor": "main", "steps": [["div", 2]]}
        assert StructuralAddress.from_dict(addr.to_dict()) == addr


class TestValueSemantics:
    def test_addresses_are_hashable_values(self):
        a = StructuralAddress.parse("/html[1]/body[2]")
        b = StructuralAddress.from_steps([("html", 1), ("body", 2)])
        assert a == b
        assert len({a, b}) == 1


class TestRendering:
    def test_css_for_root_path(self):
        addr = StructuralAddress.parse("/html[1]/body[2]/div[3]")
        assert addr.to_css() == ":root > body:nth-child(2) > div:nth-child(3)"

    def test_css_for_anchor(self):
        addr = StructuralAddress.parse('//*[@id="main"]/ul[1]/li[4]')
        assert addr.to_css() == '[id="main"] > ul:nth-child(1) > li:nth-child(4)'

    def test_css_escapes_anchor(self):
        addr = StructuralAddress.from_id('a"b')
        assert addr.to_css() == '[id="a\\"b"]'

    def test_css_rejects_path_not_starting_at_root(self):
        addr = StructuralAddress.from_steps([("body", 1)])
        with pytest.raises(AddressError):
            addr.to_css()
