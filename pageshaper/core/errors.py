"""Exception hierarchy for PageShaper."""

from __future__ import annotations


class PageShaperError(Exception):
    """Base class for every error raised by PageShaper itself."""


class UnboundSessionError(PageShaperError, RuntimeError):
    """A document operation was invoked before a runtime was attached."""


class AddressError(PageShaperError, ValueError):
    """A structural address could not be built or parsed."""


class InvalidRuleError(PageShaperError, ValueError):
    """A transformation rule is missing a field its kind requires."""


class TemplateError(PageShaperError, ValueError):
    """A template could not be created from the given arguments."""


class TemplateNotFoundError(PageShaperError, LookupError):
    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template {template_id!r} not found")
        self.template_id = template_id
