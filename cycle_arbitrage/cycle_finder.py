"""
Negative-cycle search over the token graph.

Runs a queue-based label-correcting shortest-path search (SPFA) from the base
token. A node enqueued more times than there are nodes sits on, or downstream
of, a negative-weight cycle; walking its predecessors recovers the cycle,
which is then anchored at the base token and turned into an ArbitragePath.
"""

import math
from collections import deque
from typing import Dict, List, Optional, Set, Tuple

from .constants import DEFAULT_MAX_HOPS
from .token_graph import TokenGraph
from .types import ArbitragePath
from .utils import get_logger

logger = get_logger(__name__)


def detect_negative_cycle_nodes(
    token_graph: TokenGraph, source: int
) -> Tuple[Set[int], List[Optional[int]]]:
    """
    SPFA from ``source`` flagging nodes reachable from a negative cycle.

    Args:
        token_graph: Graph to search
        source: Node handle the distances are measured from

    Returns:
        (flagged node handles, predecessor per node handle)
    """
    node_count = token_graph.node_count()
    adjacency = token_graph.graph.adj

    dist = [math.inf] * node_count
    predecessor: List[Optional[int]] = [None] * node_count
    in_queue = [False] * node_count
    queue_count = [0] * node_count

    dist[source] = 0.0
    queue = deque([source])
    in_queue[source] = True
    queue_count[source] = 1

    flagged: Set[int] = set()

    while queue:
        current = queue.popleft()
        in_queue[current] = False

        # Counter past node_count means a negative cycle keeps lowering it
        if queue_count[current] > node_count:
            flagged.add(current)
            continue

        for neighbor, edge in adjacency[current].items():
            candidate = dist[current] + edge["weight"]
            if candidate < dist[neighbor]:
                dist[neighbor] = candidate
                predecessor[neighbor] = current

                if not in_queue[neighbor]:
                    queue.append(neighbor)
                    in_queue[neighbor] = True
                    queue_count[neighbor] += 1
                    if queue_count[neighbor] > node_count:
                        flagged.add(neighbor)

    return flagged, predecessor


def reconstruct_cycle(
    start: int, predecessor: List[Optional[int]]
) -> Optional[List[int]]:
    """
    Follow predecessors from ``start`` until a node repeats.

    Returns:
        The cycle as an open node list in swap order (first node not
        repeated at the end), or None if the walk reaches the source first
    """
    walk: List[int] = []
    position: Dict[int, int] = {}
    current: Optional[int] = start

    # A walk longer than the node count must have repeated a node
    while current is not None and len(walk) <= len(predecessor):
        if current in position:
            # The walk runs backwards; reverse to get swap order
            return list(reversed(walk[position[current]:]))
        position[current] = len(walk)
        walk.append(current)
        current = predecessor[current]

    return None


def anchor_cycle(
    token_graph: TokenGraph, cycle: List[int], base: int
) -> Optional[List[int]]:
    """
    Turn an open cycle into a closed walk starting and ending at ``base``.

    If ``base`` is on the cycle the cycle is rotated to start there.
    Otherwise the base token is spliced in front of a member X when both
    base -> X and (node before X on the cycle) -> base edges exist. Longer
    reconnections through other tokens are not attempted.
    """
    if base in cycle:
        index = cycle.index(base)
        rotated = cycle[index:] + cycle[:index]
        return rotated + [base]

    for index, entry in enumerate(cycle):
        rotated = cycle[index:] + cycle[:index]
        exit_node = rotated[-1]
        if (
            token_graph.edge_between(base, entry) is not None
            and token_graph.edge_between(exit_node, base) is not None
        ):
            return [base] + rotated + [base]

    return None


def node_path_to_arbitrage_path(
    token_graph: TokenGraph, node_path: List[int]
) -> Optional[ArbitragePath]:
    """Map node handles to tokens and resolve the pool of every hop."""
    if len(node_path) < 3:
        return None

    pools = []
    for source, target in zip(node_path, node_path[1:]):
        pool = token_graph.edge_between(source, target)
        if pool is None:
            return None
        pools.append(pool.pool_id)

    tokens = [token_graph.token_for(node) for node in node_path]
    return ArbitragePath(tokens=tokens, pools=pools)


def find_arbitrage_cycles(
    token_graph: TokenGraph, max_hops: int = DEFAULT_MAX_HOPS
) -> List[ArbitragePath]:
    """
    Find negative cycles anchored at the graph's base token.

    Args:
        token_graph: Graph with up-to-date weights
        max_hops: Longest route to keep (a route of N hops has N + 1 tokens)

    Returns:
        Distinct arbitrage paths starting and ending at the base token, with
        between 3 and ``max_hops`` hops. Empty when the base token is unknown.
    """
    base = token_graph.handle_for(token_graph.base_token)
    if base is None or token_graph.node_count() == 0:
        return []

    flagged, predecessor = detect_negative_cycle_nodes(token_graph, base)
    if not flagged:
        return []

    paths: List[ArbitragePath] = []
    seen: Set[Tuple[int, ...]] = set()

    for node in sorted(flagged):
        cycle = reconstruct_cycle(node, predecessor)
        if cycle is None:
            continue

        node_path = anchor_cycle(token_graph, cycle, base)
        if node_path is None:
            logger.debug(
                f"Cycle through {len(cycle)} tokens cannot reach the base token"
            )
            continue

        if not 4 <= len(node_path) <= max_hops + 1:
            continue
        if node_path[0] != base or node_path[-1] != base:
            continue

        key = tuple(node_path)
        if key in seen:
            continue
        seen.add(key)

        arbitrage_path = node_path_to_arbitrage_path(token_graph, node_path)
        if arbitrage_path is None:
            logger.debug(f"Dropping cycle with an unresolved hop: {node_path}")
            continue
        paths.append(arbitrage_path)

    logger.debug(
        f"Cycle search: {len(flagged)} flagged nodes, {len(paths)} anchored paths"
    )
    return paths
