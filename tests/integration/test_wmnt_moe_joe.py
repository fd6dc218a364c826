"""
End-to-end detection on the WMNT / MOE / JOE pools.

Pools are seeded the way the monitor does before its first poll and run
through graph construction, cycle search, evaluation and selection.
"""

import pytest

from cycle_arbitrage.analyzer import MultiPathAnalyzer
from cycle_arbitrage.config import AnalysisConfig, ExecutionCostModel
from cycle_arbitrage.constants import OptimizationStrategy
from cycle_arbitrage.path_evaluator import find_triangular_opportunity
from cycle_arbitrage.ranker import rank, select_best
from cycle_arbitrage.types import Token
from dex.types import PoolSpec

WMNT = Token("0x78c1b0c915c4faa5fffa6cabf0219da63d7f4cb8", "WMNT")
MOE = Token("0x4515a45337f461a11ff0fe8abf3c606ae5dc00c9", "MOE")
JOE = Token("0x371c7ec6d8039ff7933a2aa28eb827ffe1f52f07", "JOE")
USDC = Token("0x09bc4e0d864854c6afb6eb9a9cdf58ac190d0df9", "USDC")

WM = "0x763868612858358f62b05691db82ad35a9b3e110"
MJ = "0xb670d2b452d0ecc468cccfd532482d45dddde2a1"
JW = "0xefc38c1b0d60725b824ebee8d431abfbf12bc953"
JU = "0x00000000000000000000000000000000000000a1"
UW = "0x00000000000000000000000000000000000000a2"


def seeds(*pools):
    return [pool.seed_snapshot() for pool in pools]


@pytest.fixture
def triangle_pools():
    # MOE is cheap against JOE in the MOE-JOE pool only
    return [
        PoolSpec("MOE-WMNT", WM, MOE, WMNT, 1000.0, 1000.0),
        PoolSpec("JOE-MOE", MJ, JOE, MOE, 1200.0, 1000.0),
        PoolSpec("JOE-WMNT", JW, JOE, WMNT, 1000.0, 1000.0),
    ]


def test_profitable_triangle_is_found(triangle_pools):
    analyzer = MultiPathAnalyzer(WMNT)
    analyzer.load_pools(seeds(*triangle_pools))

    result = analyzer.find_all_opportunities()
    best = select_best(result.opportunities)

    assert result.candidate_count == 1
    assert best is not None
    assert best.description() == "WMNT → MOE → JOE → WMNT"
    assert best.path.pools == (WM, MJ, JW)
    assert best.path_type() == "3-hop"
    assert best.optimal_input > 0
    assert best.final_output == pytest.approx(best.optimal_input + best.gross_profit)
    assert best.net_profit == pytest.approx(best.gross_profit - 700000 * 0.02 * 1e-9)


def test_graph_search_agrees_with_fixed_triangle(triangle_pools):
    config = AnalysisConfig()
    analyzer = MultiPathAnalyzer(WMNT, config)
    analyzer.load_pools(seeds(*triangle_pools))
    graph_best = select_best(analyzer.find_all_opportunities().opportunities)

    legacy = find_triangular_opportunity(
        seeds(*triangle_pools), (WMNT, MOE, JOE), config
    )

    assert legacy.search_method == "ternary_search"
    assert legacy.optimal_input == pytest.approx(graph_best.optimal_input)
    assert legacy.net_profit == pytest.approx(graph_best.net_profit)


def test_reverse_triangle_is_not_profitable(triangle_pools):
    legacy = find_triangular_opportunity(
        [seeds(pool)[0] for pool in reversed(triangle_pools)],
        (WMNT, JOE, MOE),
        AnalysisConfig(),
    )
    assert legacy is not None
    assert not legacy.is_profitable()


def test_gas_cost_can_erase_profit(triangle_pools):
    expensive = AnalysisConfig(cost_model=ExecutionCostModel(gas_price_gwei=1e12))
    analyzer = MultiPathAnalyzer(WMNT, expensive)
    analyzer.load_pools(seeds(*triangle_pools))

    result = analyzer.find_all_opportunities()
    assert result.candidate_count == 1
    assert result.profitable_count() == 0
    assert select_best(result.opportunities) is None
    assert result.best_attempt().gross_profit > 0


def test_reference_scenario_finds_closed_cycle():
    pools = [
        PoolSpec("WMNT-MOE", WM, WMNT, MOE, 1000.0, 900.0),
        PoolSpec("MOE-JOE", MJ, MOE, JOE, 1000.0, 1100.0),
        PoolSpec("JOE-WMNT", JW, JOE, WMNT, 1000.0, 1200.0),
    ]
    analyzer = MultiPathAnalyzer(WMNT, AnalysisConfig(fee=0.003, max_hops=4))
    analyzer.load_pools(seeds(*pools))

    result = analyzer.find_all_opportunities()

    assert result.candidate_count >= 1
    assert result.opportunities
    for opportunity in result.opportunities:
        tokens = opportunity.path.tokens
        assert tokens[0] == WMNT
        assert tokens[-1] == WMNT
        assert len(tokens) <= 5
        assert 0 <= opportunity.optimal_input <= 999

    best = select_best(result.opportunities)
    assert best is not None
    assert best.description() == "WMNT → MOE → JOE → WMNT"


@pytest.fixture
def square_pools():
    # Only the four-hop loop WMNT -> MOE -> JOE -> USDC -> WMNT is mispriced
    return [
        PoolSpec("WMNT-MOE", WM, WMNT, MOE, 1000.0, 1000.0),
        PoolSpec("MOE-JOE", MJ, MOE, JOE, 1000.0, 1000.0),
        PoolSpec("JOE-USDC", JU, JOE, USDC, 1000.0, 1300.0),
        PoolSpec("USDC-WMNT", UW, USDC, WMNT, 1000.0, 1000.0),
    ]


def test_four_hop_cycle(square_pools):
    analyzer = MultiPathAnalyzer(WMNT)
    analyzer.load_pools(seeds(*square_pools))

    result = analyzer.find_all_opportunities()
    best = select_best(result.opportunities, OptimizationStrategy.BALANCED_RISK_RETURN)

    assert best.description() == "WMNT → MOE → JOE → USDC → WMNT"
    assert best.path_type() == "4-hop"
    assert best.execution_cost == pytest.approx(900000 * 0.02 * 1e-9)
    assert rank(result.opportunities) == [best]


def test_max_hops_filters_long_cycles(square_pools):
    analyzer = MultiPathAnalyzer(WMNT, AnalysisConfig(max_hops=3))
    analyzer.load_pools(seeds(*square_pools))

    result = analyzer.find_all_opportunities()
    assert result.candidate_count == 0
    assert result.opportunities == []
