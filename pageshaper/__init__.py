from pageshaper.core.shaper import PageShaper
from pageshaper.core.config import EngineConfig, load_config
from pageshaper.core.errors import (
    AddressError,
    InvalidRuleError,
    PageShaperError,
    TemplateError,
    TemplateNotFoundError,
    UnboundSessionError,
)
from pageshaper.core.types import (
    ElementDescriptor,
    Heading,
    InteractionMode,
    NavigationLink,
    PageAnalysis,
    PageStructure,
    SectionExcerpt,
)
from pageshaper.addressing.address import AddressStep, StructuralAddress
from pageshaper.engine.rules import (
    HideRule,
    HighlightRule,
    InsertPosition,
    MoveRule,
    OperationKind,
    RemoveRule,
    ReplaceRule,
    StyleRule,
    Target,
    TransformationRule,
    build_rule,
    rule_from_dict,
)
from pageshaper.engine.transformer import ApplyResult, ReplayResult
from pageshaper.advisor.restructure import RestructureKind, RestructureResult
from pageshaper.runtime.base import DocumentRuntime
from pageshaper.runtime.page_runtime import PlaywrightRuntime
from pageshaper.templates.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from pageshaper.templates.types import PageTemplate

__all__ = [
    "PageShaper",
    "EngineConfig",
    "load_config",
    # Errors
    "AddressError",
    "InvalidRuleError",
    "PageShaperError",
    "TemplateError",
    "TemplateNotFoundError",
    "UnboundSessionError",
    # Document model
    "AddressStep",
    "ElementDescriptor",
    "Heading",
    "InteractionMode",
    "NavigationLink",
    "PageAnalysis",
    "PageStructure",
    "SectionExcerpt",
    "StructuralAddress",
    # Rules
    "ApplyResult",
    "HideRule",
    "HighlightRule",
    "InsertPosition",
    "MoveRule",
    "OperationKind",
    "RemoveRule",
    "ReplaceRule",
    "ReplayResult",
    "StyleRule",
    "Target",
    "TransformationRule",
    "build_rule",
    "rule_from_dict",
    # Restructure
    "RestructureKind",
    "RestructureResult",
    # Runtime & storage
    "DocumentRuntime",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "PageTemplate",
    "PlaywrightRuntime",
]
