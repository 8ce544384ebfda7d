"""
Minimum-bid calculator.

All amounts are whole money units. Percentages are applied with exact
integer ceilings, so ``min_bid(100) == 105`` never drifts through float
rounding.
"""

from typing import List

MIN_INCREMENT_PERCENT = 5
SUGGESTION_PERCENTS = (10, 20)


def _ceil_percent(amount: int, percent: int) -> int:
    return -(-amount * percent // 100)


def min_bid(current_bid: int) -> int:
    """
    Lowest legal next bid.

    Args:
        current_bid: Highest bid currently known

    Returns:
        ``current_bid + ceil(current_bid * 5%)``
    """
    if current_bid < 0:
        raise ValueError(f"current_bid must be non-negative, got {current_bid}")
    return current_bid + _ceil_percent(current_bid, MIN_INCREMENT_PERCENT)


def bid_increment(current_bid: int) -> int:
    """Amount the next bid must add over the current one."""
    return min_bid(current_bid) - current_bid


def suggested_bids(current_bid: int) -> List[int]:
    """
    Quick-select amounts, lowest first.

    Each step is ``min + ceil(pct)`` of ``current_bid``, bumped to one
    above the previous step where small bids would round to a tie.

    Args:
        current_bid: Highest bid currently known

    Returns:
        ``[min, min + ceil(10%), min + ceil(20%)]`` of ``current_bid``,
        strictly increasing
    """
    floor = min_bid(current_bid)
    suggestions = [floor]
    for percent in SUGGESTION_PERCENTS:
        step = floor + _ceil_percent(current_bid, percent)
        suggestions.append(max(step, suggestions[-1] + 1))
    return suggestions
