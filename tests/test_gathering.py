import unittest

from helpers import NOW, make_node, make_task

from settlement.gathering import civilization_multiplier, gather_tick
from settlement.models import ActiveBuffs, Civilization, ResourceBoost


class TestGathering(unittest.TestCase):

    def setUp(self):
        self.civilization = Civilization(name="The Sunstone Clan", lore="", bonus="Stone gathering is 20% faster.")

    def test_civilization_bonus_only_for_named_resource(self):
        self.assertAlmostEqual(civilization_multiplier(self.civilization, "stone"), 1.2)
        self.assertEqual(civilization_multiplier(self.civilization, "food"), 1.0)
        self.assertEqual(civilization_multiplier(None, "stone"), 1.0)

    def test_yield_scales_with_workers_and_time(self):
        nodes = [make_node("n1", "stone")]
        tasks = [make_task("g1", "gather", villager_ids=["v0", "v1"], resource_node_id="n1")]
        outcome = gather_tick(tasks, nodes, 1000, ActiveBuffs(), self.civilization, NOW)
        self.assertAlmostEqual(outcome.yields["stone"], 6 * 1.2 * 2)
        self.assertAlmostEqual(outcome.nodes[0].amount, 1000 - 14.4)
        self.assertEqual(nodes[0].amount, 1000.0)
        self.assertEqual(outcome.finished_task_ids, [])

    def test_boosts_and_research_bonus(self):
        buffs = ActiveBuffs(resource_boosts=[ResourceBoost("food", 1.5, NOW + 1)], gather_bonuses={"*": 0.15})
        tasks = [make_task("g1", "gather", villager_ids=["v0"], resource_node_id="n1")]
        outcome = gather_tick(tasks, [make_node("n1", "food")], 1000, buffs, None, NOW)
        self.assertAlmostEqual(outcome.yields["food"], 10 * 1.5 * 1.15)

    def test_expired_boost_is_ignored(self):
        buffs = ActiveBuffs(resource_boosts=[ResourceBoost("food", 1.5, NOW)])
        tasks = [make_task("g1", "gather", villager_ids=["v0"], resource_node_id="n1")]
        outcome = gather_tick(tasks, [make_node("n1", "food")], 1000, buffs, None, NOW)
        self.assertAlmostEqual(outcome.yields["food"], 10)

    def test_depleted_node_ends_task(self):
        tasks = [make_task("g1", "gather", villager_ids=["v0"], resource_node_id="n1")]
        outcome = gather_tick(tasks, [make_node("n1", "food", amount=4.0)], 1000, ActiveBuffs(), None, NOW)
        self.assertEqual(outcome.yields["food"], 4.0)
        self.assertEqual(outcome.nodes, [])
        self.assertEqual([n.id for n in outcome.depleted], ["n1"])
        self.assertEqual(outcome.finished_task_ids, ["g1"])

    def test_missing_node_or_workers_ends_task(self):
        tasks = [
            make_task("g1", "gather", villager_ids=[], resource_node_id="n1"),
            make_task("g2", "gather", villager_ids=["v0"], resource_node_id="gone"),
        ]
        outcome = gather_tick(tasks, [make_node("n1")], 1000, ActiveBuffs(), None, NOW)
        self.assertEqual(sorted(outcome.finished_task_ids), ["g1", "g2"])
        self.assertEqual(outcome.yields, {})
        self.assertEqual(len(outcome.nodes), 1)


if __name__ == '__main__':
    unittest.main()
