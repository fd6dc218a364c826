"""
Directed token graph over constant-product pools.

Tokens are NetworkX nodes addressed by small integer handles assigned in
insertion order; every pool contributes one edge per swap direction with the
pool's negative-log weight stored as the ``weight`` attribute and the shared
``PoolEdge`` as the ``pool`` attribute.
"""

from typing import Dict, List, Optional, Tuple

import networkx as nx

from .pool_edge import PoolEdge
from .types import ArbitragePath, ReserveSnapshot, Token
from .utils import get_logger

logger = get_logger(__name__)


class TokenGraph:
    """
    Token/pool graph anchored at a base token.

    Assumes at most one pool per ordered token pair: adding a second pool for
    the same pair replaces the first. Nodes are never removed, so empty pools
    stay in the graph as infinite-weight edges.
    """

    def __init__(self, base_token: Token):
        self.base_token = base_token
        self.graph = nx.DiGraph()
        self._token_to_node: Dict[Token, int] = {}
        self._node_to_token: List[Token] = []

    def add_token(self, token: Token) -> int:
        """Return the node handle for ``token``, creating it on first sight."""
        node = self._token_to_node.get(token)
        if node is not None:
            return node

        node = len(self._node_to_token)
        self.graph.add_node(node, token=token)
        self._token_to_node[token] = node
        self._node_to_token.append(token)
        return node

    def add_pool(self, snapshot: ReserveSnapshot, fee: float) -> PoolEdge:
        """
        Insert a pool as two directed edges (a->b and b->a).

        Args:
            snapshot: Pool tokens and raw reserves
            fee: Swap fee as a fraction (e.g., 0.003)

        Returns:
            The PoolEdge backing both directed edges
        """
        node_a = self.add_token(snapshot.token_a)
        node_b = self.add_token(snapshot.token_b)
        reserve_a, reserve_b = snapshot.reserves_in_units()

        pool = PoolEdge(
            snapshot.pool_id,
            snapshot.token_a,
            snapshot.token_b,
            reserve_a,
            reserve_b,
            fee,
        )
        self.graph.add_edge(node_a, node_b, weight=pool.weight_a_to_b, pool=pool)
        self.graph.add_edge(node_b, node_a, weight=pool.weight_b_to_a, pool=pool)
        return pool

    def update_pool(self, snapshot: ReserveSnapshot) -> None:
        """
        Apply fresh reserves to both directed edges of a known pool.

        Silently ignored when either token has never been seen, or when the
        edge for this pair belongs to a different pool.
        """
        node_a = self._token_to_node.get(snapshot.token_a)
        node_b = self._token_to_node.get(snapshot.token_b)
        if node_a is None or node_b is None:
            return

        reserve_a, reserve_b = snapshot.reserves_in_units()

        for source, target in ((node_a, node_b), (node_b, node_a)):
            edge = self.graph.get_edge_data(source, target)
            if edge is None:
                continue
            pool: PoolEdge = edge["pool"]
            if pool.pool_id != snapshot.pool_id:
                continue
            # Pool orientation may differ from the snapshot's token order
            if pool.token_a == snapshot.token_a:
                pool.update_reserves(reserve_a, reserve_b)
            else:
                pool.update_reserves(reserve_b, reserve_a)
            edge["weight"] = pool.weight_from(self._node_to_token[source])

    def handle_for(self, token: Token) -> Optional[int]:
        return self._token_to_node.get(token)

    def token_for(self, node: int) -> Token:
        return self._node_to_token[node]

    def edge_between(self, source: int, target: int) -> Optional[PoolEdge]:
        """PoolEdge behind the directed edge ``source -> target``, if any."""
        edge = self.graph.get_edge_data(source, target)
        if edge is None:
            return None
        return edge["pool"]

    def get_pool_info(self, token_a: Token, token_b: Token) -> Optional[PoolEdge]:
        """Read-only lookup of the pool used to swap ``token_a`` into ``token_b``."""
        node_a = self._token_to_node.get(token_a)
        node_b = self._token_to_node.get(token_b)
        if node_a is None or node_b is None:
            return None
        return self.edge_between(node_a, node_b)

    def calculate_path_profit(
        self, path: ArbitragePath, input_amount: float
    ) -> Optional[float]:
        """
        Replay the swaps of ``path`` and return output minus input.

        A closing swap back to the base token is added when the path does not
        already end there. Returns None if any hop has no edge or no output.
        """
        current_amount = input_amount
        hops = [(token_in, token_out) for token_in, token_out, _ in path.hops()]

        last_token = path.tokens[-1]
        if last_token != self.base_token:
            hops.append((last_token, self.base_token))

        for token_in, token_out in hops:
            pool = self.get_pool_info(token_in, token_out)
            if pool is None:
                return None
            output = pool.calculate_output(current_amount, token_in)
            if output is None:
                return None
            current_amount = output

        return current_amount - input_amount

    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def tokens(self) -> List[Token]:
        return list(self._node_to_token)

    def stats(self) -> Tuple[int, int]:
        """(node count, directed edge count)."""
        return self.node_count(), self.edge_count()
