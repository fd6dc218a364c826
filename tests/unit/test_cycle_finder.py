"""
Unit tests for cycle_arbitrage/cycle_finder.py
"""

import unittest

import pytest

from cycle_arbitrage.cycle_finder import (
    anchor_cycle,
    detect_negative_cycle_nodes,
    find_arbitrage_cycles,
    node_path_to_arbitrage_path,
    reconstruct_cycle,
)
from cycle_arbitrage.token_graph import TokenGraph
from cycle_arbitrage.types import ReserveSnapshot, Token

WMNT = Token("0x78c1b0c915c4faa5fffa6cabf0219da63d7f4cb8", "WMNT")
MOE = Token("0x4515a45337f461a11ff0fe8abf3c606ae5dc00c9", "MOE")
JOE = Token("0x371c7ec6d8039ff7933a2aa28eb827ffe1f52f07", "JOE")
USDC = Token("0x09bc4e0d864854c6afb6eb9a9cdf58ac190d0df9", "USDC")

WEI = 10**18
FEE = 0.003


def snapshot(pool_id, token_a, token_b, reserve_a, reserve_b):
    return ReserveSnapshot(pool_id, token_a, token_b, reserve_a * WEI, reserve_b * WEI)


def build_graph(pools, base=WMNT):
    graph = TokenGraph(base)
    for pool in pools:
        graph.add_pool(pool, FEE)
    return graph


@pytest.fixture
def profitable_triangle():
    """WMNT -> MOE -> JOE -> WMNT has a rate product of 1.2 * 0.997^3."""
    return build_graph(
        [
            snapshot("wm", WMNT, MOE, 1000, 1000),
            snapshot("mj", MOE, JOE, 1000, 1200),
            snapshot("jw", JOE, WMNT, 1000, 1000),
        ]
    )


@pytest.fixture
def balanced_triangle():
    return build_graph(
        [
            snapshot("wm", WMNT, MOE, 1000, 1000),
            snapshot("mj", MOE, JOE, 1000, 1000),
            snapshot("jw", JOE, WMNT, 1000, 1000),
        ]
    )


def test_finds_profitable_direction(profitable_triangle):
    paths = find_arbitrage_cycles(profitable_triangle, max_hops=4)

    assert len(paths) == 1
    path = paths[0]
    assert list(path.tokens) == [WMNT, MOE, JOE, WMNT]
    assert list(path.pools) == ["wm", "mj", "jw"]
    assert path.description() == "WMNT → MOE → JOE → WMNT"


def test_found_cycle_is_profitable_in_reported_order(profitable_triangle):
    path = find_arbitrage_cycles(profitable_triangle)[0]
    assert profitable_triangle.calculate_path_profit(path, 1.0) > 0.0


def test_no_cycle_without_price_imbalance(balanced_triangle):
    assert find_arbitrage_cycles(balanced_triangle) == []


def test_empty_graph_returns_empty():
    assert find_arbitrage_cycles(TokenGraph(WMNT)) == []


def test_unknown_base_token_returns_empty(profitable_triangle):
    profitable_triangle.base_token = USDC
    assert find_arbitrage_cycles(profitable_triangle) == []


def test_paths_are_anchored_and_within_hop_limit(profitable_triangle):
    for max_hops in (3, 4, 6):
        for path in find_arbitrage_cycles(profitable_triangle, max_hops=max_hops):
            assert path.tokens[0] == WMNT
            assert path.tokens[-1] == WMNT
            assert 3 <= path.hop_count <= max_hops


def test_detect_flags_nodes_on_negative_cycle(profitable_triangle):
    flagged, predecessor = detect_negative_cycle_nodes(profitable_triangle, 0)
    assert flagged
    assert len(predecessor) == profitable_triangle.node_count()


def test_detect_flags_nothing_on_balanced_graph(balanced_triangle):
    flagged, _ = detect_negative_cycle_nodes(balanced_triangle, 0)
    assert flagged == set()


def test_cycle_reached_only_through_base_is_found():
    """A profitable MOE/JOE/USDC loop hanging off WMNT is spliced to the base."""
    graph = build_graph(
        [
            snapshot("wm", WMNT, MOE, 1000, 1000),
            snapshot("mj", MOE, JOE, 1000, 1300),
            snapshot("ju", JOE, USDC, 1000, 1000),
            snapshot("um", USDC, MOE, 1000, 1000),
            snapshot("uw", USDC, WMNT, 1000, 1000),
        ]
    )
    paths = find_arbitrage_cycles(graph, max_hops=6)
    for path in paths:
        assert path.tokens[0] == WMNT and path.tokens[-1] == WMNT
        assert graph.calculate_path_profit(path, 1.0) is not None


class TestReconstructCycle(unittest.TestCase):
    """Test predecessor walks."""

    def test_cycle_in_forward_order(self):
        # predecessor of 0 is 2, of 1 is 0, of 2 is 1: swap order 0 -> 1 -> 2 -> 0
        cycle = reconstruct_cycle(0, [2, 0, 1])
        self.assertEqual(cycle, [1, 2, 0])

    def test_tail_before_cycle_is_dropped(self):
        # 3 hangs off the 0 -> 1 -> 2 -> 0 cycle
        cycle = reconstruct_cycle(3, [2, 0, 1, 2])
        self.assertEqual(sorted(cycle), [0, 1, 2])
        self.assertNotIn(3, cycle)

    def test_walk_reaching_source_returns_none(self):
        self.assertIsNone(reconstruct_cycle(1, [None, 0]))


class TestAnchorCycle(unittest.TestCase):
    """Test rotation and splicing onto the base token."""

    def setUp(self):
        # handles: WMNT=0, MOE=1, JOE=2, USDC=3
        self.graph = build_graph(
            [
                snapshot("wm", WMNT, MOE, 1000, 1000),
                snapshot("mj", MOE, JOE, 1000, 1000),
                snapshot("ju", JOE, USDC, 1000, 1000),
                snapshot("uw", USDC, WMNT, 1000, 1000),
                snapshot("um", USDC, MOE, 1000, 1000),
            ]
        )

    def test_rotation_when_base_on_cycle(self):
        self.assertEqual(anchor_cycle(self.graph, [1, 2, 0], 0), [0, 1, 2, 0])
        self.assertEqual(anchor_cycle(self.graph, [0, 1, 2], 0), [0, 1, 2, 0])

    def test_splice_when_base_off_cycle(self):
        # MOE -> JOE -> USDC -> MOE; WMNT -> MOE and USDC -> WMNT exist
        self.assertEqual(anchor_cycle(self.graph, [1, 2, 3], 0), [0, 1, 2, 3, 0])

    def test_splice_rotates_to_a_connectable_entry(self):
        # JOE -> USDC -> MOE -> JOE: entering at JOE fails, entering at MOE works
        self.assertEqual(anchor_cycle(self.graph, [2, 3, 1], 0), [0, 1, 2, 3, 0])

    def test_splice_fails_without_connecting_edges(self):
        graph = build_graph(
            [
                snapshot("wm", WMNT, MOE, 1000, 1000),
                snapshot("jm", JOE, MOE, 1000, 1000),
                snapshot("ju", JOE, USDC, 1000, 1000),
                snapshot("um", USDC, MOE, 1000, 1000),
            ]
        )
        # Only MOE touches WMNT, so no member has both an entry and an exit edge
        self.assertIsNone(anchor_cycle(graph, [1, 2, 3], 0))


class TestNodePathToArbitragePath(unittest.TestCase):
    """Test handle to token/pool mapping."""

    def setUp(self):
        self.graph = build_graph(
            [
                snapshot("wm", WMNT, MOE, 1000, 1000),
                snapshot("mj", MOE, JOE, 1000, 1000),
                snapshot("jw", JOE, WMNT, 1000, 1000),
            ]
        )

    def test_maps_tokens_and_pools(self):
        path = node_path_to_arbitrage_path(self.graph, [0, 2, 1, 0])
        self.assertEqual(list(path.tokens), [WMNT, JOE, MOE, WMNT])
        self.assertEqual(list(path.pools), ["jw", "mj", "wm"])

    def test_missing_edge_returns_none(self):
        self.graph.add_token(USDC)
        self.assertIsNone(node_path_to_arbitrage_path(self.graph, [0, 3, 1, 0]))

    def test_too_short_returns_none(self):
        self.assertIsNone(node_path_to_arbitrage_path(self.graph, [0, 1]))
