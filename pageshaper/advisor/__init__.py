from pageshaper.advisor.heuristics import HeuristicAdvisor, parse_px
from pageshaper.advisor.planner import PlannerAdvisor, parse_bullets
from pageshaper.advisor.restructure import (
    RestructureKind,
    RestructureResult,
    RestyleStep,
    SmartRestructurer,
)
from pageshaper.advisor.token_budget import TokenBudget

__all__ = [
    "HeuristicAdvisor",
    "PlannerAdvisor",
    "RestructureKind",
    "RestructureResult",
    "RestyleStep",
    "SmartRestructurer",
    "TokenBudget",
    "parse_bullets",
    "parse_px",
]
