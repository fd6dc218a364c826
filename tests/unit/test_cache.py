"""
Unit tests for dex/cache.py
"""

import unittest

from cycle_arbitrage.types import ReserveSnapshot, Token
from dex.cache import ReservesCache

WMNT = Token("0x78c1b0c915c4faa5fffa6cabf0219da63d7f4cb8", "WMNT")
MOE = Token("0x4515a45337f461a11ff0fe8abf3c606ae5dc00c9", "MOE")


def snapshot(pool_id, reserve_a, reserve_b, block=100):
    return ReserveSnapshot(pool_id, WMNT, MOE, reserve_a, reserve_b, block)


class TestReservesCache(unittest.TestCase):
    def setUp(self):
        self.cache = ReservesCache()

    def test_empty(self):
        self.assertEqual(len(self.cache), 0)
        self.assertEqual(self.cache.last_block, 0)
        self.assertIsNone(self.cache.get("p1"))
        self.assertTrue(self.cache.has_changed(1))

    def test_update_tracks_block(self):
        self.cache.update("p1", snapshot("p1", 10, 20, block=105))
        self.assertEqual(self.cache.last_block, 105)
        self.assertEqual(self.cache.get("p1").reserve_b, 20)
        self.assertFalse(self.cache.has_changed(105))
        self.assertFalse(self.cache.has_changed(104))
        self.assertTrue(self.cache.has_changed(106))

    def test_reserves_changed(self):
        self.cache.update_all({"p1": snapshot("p1", 10, 20), "p2": snapshot("p2", 1, 2)})

        same = {"p1": snapshot("p1", 10, 20, 101), "p2": snapshot("p2", 1, 2, 101)}
        self.assertFalse(self.cache.reserves_changed(same))

        moved = {"p1": snapshot("p1", 11, 20), "p2": snapshot("p2", 1, 2)}
        self.assertTrue(self.cache.reserves_changed(moved))

        dropped = {"p1": snapshot("p1", 10, 20)}
        self.assertTrue(self.cache.reserves_changed(dropped))

        swapped = {"p1": snapshot("p1", 10, 20), "p3": snapshot("p3", 1, 2)}
        self.assertTrue(self.cache.reserves_changed(swapped))

    def test_update_all_forgets_dropped_pools(self):
        self.cache.update_all({"p1": snapshot("p1", 10, 20), "p2": snapshot("p2", 1, 2)})
        self.cache.update_all({"p1": snapshot("p1", 10, 20, block=101)})

        self.assertEqual(len(self.cache), 1)
        self.assertIsNone(self.cache.get("p2"))
        self.assertEqual(self.cache.last_block, 101)
        self.assertFalse(
            self.cache.reserves_changed({"p1": snapshot("p1", 10, 20, block=102)})
        )

    def test_update_block_number(self):
        self.cache.update("p1", snapshot("p1", 10, 20, block=100))
        self.cache.update_block_number(110)
        self.assertEqual(self.cache.last_block, 110)
        self.assertEqual(len(self.cache), 1)

    def test_get_all_returns_copy(self):
        self.cache.update("p1", snapshot("p1", 10, 20))
        data = self.cache.get_all()
        data.clear()
        self.assertEqual(len(self.cache), 1)

    def test_clear(self):
        self.cache.update("p1", snapshot("p1", 10, 20))
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)
        self.assertEqual(self.cache.last_block, 0)


if __name__ == "__main__":
    unittest.main()
