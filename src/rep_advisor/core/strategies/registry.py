"""
Strategy registry.

All progression strategies are registered here in a fixed declaration
order. The order is the tie-break order of model selection, so it must not
change between calls. Use get_strategy() to look a strategy up by name.
"""

from ..config import BanisterParams
from .banister import BanisterStrategy
from .base import Strategy
from .dup import DUPStrategy
from .linear import LinearStrategy
from .regression import RegressionStrategy
from .rir import RIRStrategy

STRATEGY_NAMES: tuple[str, ...] = ("linear", "banister", "dup", "rir", "regression")


def build_registry(banister_params: BanisterParams | None = None) -> tuple[Strategy, ...]:
    """
    Instantiate every strategy in declaration order.

    Args:
        banister_params: Fitness-fatigue parameters (defaults from config.py)

    Returns:
        Immutable tuple of strategies
    """
    return (
        LinearStrategy(),
        BanisterStrategy(banister_params or BanisterParams()),
        DUPStrategy(),
        RIRStrategy(),
        RegressionStrategy(),
    )


STRATEGY_REGISTRY: tuple[Strategy, ...] = build_registry()


def get_strategy(name: str, registry: tuple[Strategy, ...] = STRATEGY_REGISTRY) -> Strategy:
    """
    Return the strategy registered under name.

    Raises:
        ValueError: If name is not registered
    """
    for strategy in registry:
        if strategy.name == name:
            return strategy
    valid = ", ".join(s.name for s in registry)
    raise ValueError(f"Unknown algorithm '{name}'. Valid names: {valid}")
