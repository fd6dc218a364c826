"""
Selection of the best opportunity under a chosen objective.
"""

from typing import Callable, Dict, Iterable, List, Optional

from .constants import OptimizationStrategy
from .types import ArbitrageOpportunity


def balanced_score(opportunity: ArbitrageOpportunity) -> float:
    """Net profit penalized by the square of the hop count."""
    return opportunity.net_profit / (opportunity.hop_count() ** 2)


# Higher score wins for every strategy
_SCORERS: Dict[OptimizationStrategy, Callable[[ArbitrageOpportunity], float]] = {
    OptimizationStrategy.MAX_PROFIT: lambda opp: opp.net_profit,
    OptimizationStrategy.MAX_PROFIT_PERCENT: lambda opp: opp.profit_percentage,
    OptimizationStrategy.MIN_RISK: lambda opp: -opp.hop_count(),
    OptimizationStrategy.BALANCED_RISK_RETURN: balanced_score,
}


def select_best(
    opportunities: Iterable[ArbitrageOpportunity],
    strategy: OptimizationStrategy = OptimizationStrategy.MAX_PROFIT,
) -> Optional[ArbitrageOpportunity]:
    """
    Best profitable opportunity under ``strategy``.

    Only opportunities with positive net profit are considered; on equal
    scores the first one encountered wins.

    Returns:
        The selected opportunity, or None if none is profitable
    """
    profitable = [opp for opp in opportunities if opp.is_profitable()]
    if not profitable:
        return None
    return max(profitable, key=_SCORERS[strategy])


def rank(
    opportunities: Iterable[ArbitrageOpportunity],
    strategy: OptimizationStrategy = OptimizationStrategy.MAX_PROFIT,
) -> List[ArbitrageOpportunity]:
    """Profitable opportunities ordered best-first under ``strategy``."""
    profitable = [opp for opp in opportunities if opp.is_profitable()]
    return sorted(profitable, key=_SCORERS[strategy], reverse=True)
