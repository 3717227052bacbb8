import random
import unittest

from helpers import NOW

from settlement.logic import GameLogic
from settlement.catalog import Catalog
from settlement.names import CivilizationRoster, NameAllocator


class TestNameAllocator(unittest.TestCase):

    def test_pool_then_fallback(self):
        names = NameAllocator(pools={"villager": ["Ada", "Bram"]}, rng=random.Random(1))
        first = names.allocate("villager", 3)
        self.assertEqual(sorted(first[:2]), ["Ada", "Bram"])
        self.assertEqual(first[2], "A New Villager #1")
        self.assertEqual(names.one("villager"), "A New Villager #2")

    def test_unknown_kind_uses_fallback(self):
        names = NameAllocator(pools={}, rng=random.Random(1))
        self.assertEqual(names.allocate("soldier", 2), ["A New Soldier #1", "A New Soldier #2"])

    def test_reset_starts_over(self):
        names = NameAllocator(pools={"building": ["Oakhold"]}, rng=random.Random(1))
        names.allocate("building", 2)
        names.reset()
        self.assertEqual(names.allocate("building", 2), ["Oakhold", "A New Building #1"])

    def test_default_pools_do_not_repeat(self):
        names = NameAllocator(rng=random.Random(5))
        drawn = names.allocate("villager", 10)
        self.assertEqual(len(drawn), len(set(drawn)))


class TestCivilizationRoster(unittest.TestCase):

    def test_rotation_wraps_around(self):
        roster = CivilizationRoster([{"name": "A", "lore": "", "bonus": ""},
                                     {"name": "B", "lore": "", "bonus": ""}])
        self.assertEqual([roster.next().name for _ in range(3)], ["A", "B", "A"])
        roster.reset()
        self.assertEqual(roster.next().name, "A")

    def test_new_game_takes_next_civilization(self):
        roster = CivilizationRoster([{"name": "The Only Clan", "lore": "Alone.", "bonus": ""}])
        state = GameLogic(Catalog.default(), roster=roster).new_game(NOW)
        self.assertEqual(state.civilization.name, "The Only Clan")


if __name__ == '__main__':
    unittest.main()
