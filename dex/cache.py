"""
Last-seen reserves per pool, used to skip analysis when nothing moved.
"""

from typing import Dict, Optional

from cycle_arbitrage.types import ReserveSnapshot


class ReservesCache:
    """
    Pool reserves keyed by pool id plus the last block they were read at.
    """

    def __init__(self):
        self._data: Dict[str, ReserveSnapshot] = {}
        self.last_block = 0

    def get(self, pool_id: str) -> Optional[ReserveSnapshot]:
        return self._data.get(pool_id)

    def update(self, pool_id: str, snapshot: ReserveSnapshot) -> None:
        self.last_block = snapshot.block_number
        self._data[pool_id] = snapshot

    def update_all(self, reserves: Dict[str, ReserveSnapshot]) -> None:
        """Replace the cached map with one poll's reserves."""
        self._data = dict(reserves)
        if reserves:
            self.last_block = max(s.block_number for s in reserves.values())

    def has_changed(self, block_number: int) -> bool:
        """True when ``block_number`` is newer than the last cached block."""
        return block_number > self.last_block

    def reserves_changed(self, new_reserves: Dict[str, ReserveSnapshot]) -> bool:
        """
        True if any pool was added, dropped, or has different raw reserves.
        """
        if len(self._data) != len(new_reserves):
            return True

        for pool_id, snapshot in new_reserves.items():
            cached = self._data.get(pool_id)
            if cached is None:
                return True
            if (
                cached.reserve_a != snapshot.reserve_a
                or cached.reserve_b != snapshot.reserve_b
            ):
                return True
        return False

    def update_block_number(self, block_number: int) -> None:
        """Record a new block whose reserves matched the cache."""
        self.last_block = block_number

    def clear(self) -> None:
        self._data.clear()
        self.last_block = 0

    def get_all(self) -> Dict[str, ReserveSnapshot]:
        return dict(self._data)

    def __len__(self) -> int:
        return len(self._data)
