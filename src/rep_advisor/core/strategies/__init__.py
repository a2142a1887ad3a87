"""
Progression strategies for rep-advisor.

Each strategy predicts the next capacity test and builds a 6-day plan
behind the common Strategy contract.
"""

from .banister import BanisterStrategy
from .base import Strategy, StrategyInfo, beginner_plan
from .dup import DUPStrategy
from .linear import LinearStrategy
from .registry import STRATEGY_NAMES, STRATEGY_REGISTRY, build_registry, get_strategy
from .regression import RegressionStrategy
from .rir import RIRStrategy

__all__ = [
    "Strategy",
    "StrategyInfo",
    "beginner_plan",
    "LinearStrategy",
    "BanisterStrategy",
    "DUPStrategy",
    "RIRStrategy",
    "RegressionStrategy",
    "STRATEGY_NAMES",
    "STRATEGY_REGISTRY",
    "build_registry",
    "get_strategy",
]
