import unittest

import helpers  # noqa: F401

from settlement.ledger import ResourceLedger


class TestResourceLedger(unittest.TestCase):

    def setUp(self):
        self.resources = {"food": 100, "wood": 0, "gold": 30, "stone": 0}

    def test_can_afford_with_multiplier(self):
        self.assertTrue(ResourceLedger.can_afford(self.resources, {"food": 50}, 2))
        self.assertFalse(ResourceLedger.can_afford(self.resources, {"food": 50}, 3))

    def test_can_afford_empty_cost(self):
        self.assertTrue(ResourceLedger.can_afford(self.resources, {}))
        self.assertTrue(ResourceLedger.can_afford(self.resources, None))

    def test_unlimited_always_affords(self):
        self.assertTrue(ResourceLedger.can_afford(self.resources, {"stone": 10_000}, unlimited=True))

    def test_missing_lists_short_kinds_in_cost_order(self):
        missing = ResourceLedger.missing(self.resources, {"wood": 10, "food": 50, "gold": 40})
        self.assertEqual(missing, ["wood", "gold"])

    def test_missing_counts_unknown_kind_as_zero(self):
        self.assertEqual(ResourceLedger.missing(self.resources, {"mana": 1}), ["mana"])

    def test_shortfall(self):
        shortfall = ResourceLedger.shortfall(self.resources, {"food": 500, "gold": 200})
        self.assertEqual(shortfall, {"food": 400, "gold": 170})

    def test_cost_delta_is_negative(self):
        self.assertEqual(ResourceLedger.cost_delta({"food": 60, "gold": 20}, 3), {"food": -180, "gold": -60})

    def test_refund_floors_and_drops_zero(self):
        self.assertEqual(ResourceLedger.refund_delta({"wood": 51, "stone": 1}), {"wood": 25})
        self.assertEqual(ResourceLedger.refund_delta({"wood": 50}), {"wood": 25})

    def test_merge_nets_out_same_kind(self):
        merged = ResourceLedger.merge({"gold": -40}, {"gold": 10, "wood": 100}, None)
        self.assertEqual(merged, {"gold": -30, "wood": 100})

    def test_apply_delta_returns_new_map_floored_at_zero(self):
        updated = ResourceLedger.apply_delta(self.resources, {"food": -150, "wood": 25, "iron": 3})
        self.assertEqual(updated, {"food": 0, "wood": 25, "gold": 30, "stone": 0, "iron": 3})
        self.assertEqual(self.resources["food"], 100)


if __name__ == '__main__':
    unittest.main()
