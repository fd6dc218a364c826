"""
Unit tests for cycle_arbitrage/ranker.py
"""

import pytest

from cycle_arbitrage.constants import OptimizationStrategy, SEARCH_METHOD_MULTI_PATH
from cycle_arbitrage.path_evaluator import build_opportunity
from cycle_arbitrage.ranker import balanced_score, rank, select_best
from cycle_arbitrage.types import ArbitragePath, Token

WMNT = Token("0x78c1b0c915c4faa5fffa6cabf0219da63d7f4cb8", "WMNT")
MOE = Token("0x4515a45337f461a11ff0fe8abf3c606ae5dc00c9", "MOE")
JOE = Token("0x371c7ec6d8039ff7933a2aa28eb827ffe1f52f07", "JOE")
USDC = Token("0x09bc4e0d864854c6afb6eb9a9cdf58ac190d0df9", "USDC")

THREE_HOP = ArbitragePath([WMNT, MOE, JOE, WMNT], ["a", "b", "c"])
FOUR_HOP = ArbitragePath([WMNT, MOE, JOE, USDC, WMNT], ["a", "b", "d", "e"])


def opportunity(net_profit, path=THREE_HOP, optimal_input=100.0):
    return build_opportunity(optimal_input, net_profit, 0.0, SEARCH_METHOD_MULTI_PATH, path)


def test_max_profit_picks_largest_net_profit():
    small = opportunity(4.0)
    large = opportunity(8.0, FOUR_HOP)
    assert select_best([small, large]) is large
    assert select_best([large, small], OptimizationStrategy.MAX_PROFIT) is large


def test_none_when_nothing_profitable():
    losers = [opportunity(-1.0), opportunity(0.0)]
    for strategy in OptimizationStrategy:
        assert select_best(losers, strategy) is None
    assert select_best([]) is None


def test_unprofitable_candidates_are_ignored():
    loser = opportunity(-5.0)
    winner = opportunity(1.0, FOUR_HOP)
    # MIN_RISK would prefer the 3-hop loser if it were considered
    assert select_best([loser, winner], OptimizationStrategy.MIN_RISK) is winner


def test_max_profit_percent():
    big_but_expensive = opportunity(10.0, optimal_input=1000.0)  # 1%
    small_but_efficient = opportunity(5.0, optimal_input=50.0)  # 10%
    best = select_best(
        [big_but_expensive, small_but_efficient], OptimizationStrategy.MAX_PROFIT_PERCENT
    )
    assert best is small_but_efficient


def test_min_risk_prefers_fewest_hops():
    four = opportunity(9.0, FOUR_HOP)
    three = opportunity(1.0, THREE_HOP)
    assert select_best([four, three], OptimizationStrategy.MIN_RISK) is three


def test_balanced_favors_three_hop_over_slightly_better_four_hop():
    three = opportunity(4.0, THREE_HOP)  # 4 / 9 = 0.444
    four = opportunity(6.0, FOUR_HOP)  # 6 / 16 = 0.375
    assert balanced_score(three) == pytest.approx(4.0 / 9.0)
    assert balanced_score(four) == pytest.approx(6.0 / 16.0)
    assert select_best([four, three], OptimizationStrategy.BALANCED_RISK_RETURN) is three


def test_balanced_score_for_legacy_triangle_uses_three_hops():
    legacy = build_opportunity(100.0, 9.0, 0.0, "ternary_search")
    assert balanced_score(legacy) == pytest.approx(1.0)


def test_ties_keep_first_encountered():
    first = opportunity(5.0)
    second = opportunity(5.0)
    assert select_best([first, second]) is first
    assert select_best([second, first]) is second


def test_rank_orders_best_first_and_drops_losers():
    a = opportunity(2.0)
    b = opportunity(7.0)
    c = opportunity(-1.0)
    d = opportunity(5.0)
    assert rank([a, b, c, d]) == [b, d, a]


def test_rank_with_strategy():
    three = opportunity(4.0, THREE_HOP)
    four = opportunity(6.0, FOUR_HOP)
    ranked = rank([four, three], OptimizationStrategy.BALANCED_RISK_RETURN)
    assert ranked == [three, four]
