from pageshaper.runtime.base import DocumentRuntime, SelectionHandler
from pageshaper.runtime.page_runtime import PlaywrightRuntime
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
    StyleCondition,
)

__all__ = [
    "AdvisorMetrics",
    "ApplyRule",
    "ClearMarkers",
    "DescribeElements",
    "DescribeStructural",
    "DocumentIdentity",
    "DocumentRuntime",
    "HighlightAddresses",
    "InstallMode",
    "MarkedAddresses",
    "Mutation",
    "PageSnapshot",
    "PlaywrightRuntime",
    "Query",
    "Reload",
    "ResolveAddress",
    "RestyleMatching",
    "SelectionHandler",
    "SetMarker",
    "StyleCondition",
]
