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

__all__ = [
    "HideRule",
    "HighlightRule",
    "InsertPosition",
    "MoveRule",
    "OperationKind",
    "RemoveRule",
    "ReplaceRule",
    "StyleRule",
    "Target",
    "TransformationRule",
    "build_rule",
    "rule_from_dict",
]
