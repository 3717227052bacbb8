import unittest

from helpers import NOW, make_item, make_state, make_task

from settlement.catalog import Catalog
from settlement.handlers import ActionContext, handle_action
from settlement.items import is_item_usable, item_usability, use_item
from settlement.logic import GameLogic
from settlement.models import ActionRequest, ActiveBuffs, TimedReduction


class TestItemUsability(unittest.TestCase):

    def test_construction_items_need_a_construction(self):
        scroll = make_item("scroll_of_haste")
        self.assertEqual(item_usability(scroll, [], ActiveBuffs()), (False, "No active construction project."))
        tasks = [make_task("b1", "build", building_kind="houses")]
        self.assertTrue(is_item_usable(scroll, tasks, ActiveBuffs()))

    def test_whisper_needs_any_task(self):
        whisper = make_item("whisper_of_the_creator")
        self.assertFalse(is_item_usable(whisper, [], ActiveBuffs()))
        self.assertTrue(is_item_usable(whisper, [make_task("r1", "research", research_id="loom")], ActiveBuffs()))

    def test_buff_items_are_exclusive_with_themselves(self):
        charm = make_item("builders_charm")
        buffs = ActiveBuffs(build_time_reduction=TimedReduction(0.1, 1))
        self.assertFalse(is_item_usable(charm, [], buffs))
        self.assertTrue(is_item_usable(make_item("drillmasters_whistle"), [], buffs))

    def test_always_usable(self):
        for definition_id in ("hearty_meal", "golden_harvest", "heart_of_the_mountain", "banner_of_command"):
            self.assertTrue(is_item_usable(make_item(definition_id), [], ActiveBuffs()), definition_id)

    def test_unknown_item_is_never_usable(self):
        item = make_item("hearty_meal")
        item.id = "mystery_box-1"
        self.assertFalse(is_item_usable(item, [], ActiveBuffs()))


class TestUseItem(unittest.TestCase):

    def test_active_buff_rejects_second_charm(self):
        state = make_state(inventory=[make_item("builders_charm")],
                           active_buffs=ActiveBuffs(build_time_reduction=TimedReduction(0.1, 1)))
        context = ActionContext(state, Catalog.default(), NOW)
        result = handle_action(context, ActionRequest("USE_ITEM", {"item_id": state.inventory[0].id}))
        self.assertEqual(result.error, "A building charm is already active.")
        self.assertIsNone(result.new_inventory)

    def test_item_not_in_inventory(self):
        self.assertEqual(use_item(make_state(), "hearty_meal-0-0", NOW).error, "Item not found in your inventory.")

    def test_hearty_meal(self):
        state = make_state(inventory=[make_item("hearty_meal")])
        result = use_item(state, state.inventory[0].id, NOW)
        self.assertEqual(result.resource_deltas, {"food": 75})
        self.assertEqual(result.new_inventory, [])
        self.assertEqual(len(state.inventory), 1)

    def test_haste_shortens_latest_construction(self):
        early = make_task("b1", "build", duration=30_000, building_kind="houses")
        late = make_task("b2", "build", duration=60_000, building_kind="barracks")
        state = make_state(inventory=[make_item("scroll_of_haste")], active_tasks=[early, late])
        result = use_item(state, state.inventory[0].id, NOW, Catalog.default().building_name)
        self.assertEqual([t.id for t in result.updated_tasks], ["b2"])
        self.assertEqual(result.updated_tasks[0].duration, 45_000)
        self.assertEqual(late.duration, 60_000)
        self.assertEqual(result.log[0], "Used Scroll of Haste on the Barracks.")

    def test_golden_harvest_adds_timed_boost(self):
        state = make_state(inventory=[make_item("golden_harvest")])
        result = use_item(state, state.inventory[0].id, NOW)
        boost = result.updated_buffs.resource_boosts[0]
        self.assertEqual((boost.resource, boost.multiplier, boost.end_time), ("food", 1.5, NOW + 60_000))
        self.assertEqual(state.active_buffs.resource_boosts, [])

    def test_banner_stacks_permanently(self):
        state = make_state(inventory=[make_item("banner_of_command")])
        state.active_buffs.permanent_train_time_reduction = 0.1
        result = use_item(state, state.inventory[0].id, NOW)
        self.assertAlmostEqual(result.updated_buffs.permanent_train_time_reduction, 0.15)

    def test_whisper_completes_every_task(self):
        state = make_state(inventory=[make_item("whisper_of_the_creator")])
        logic = GameLogic(Catalog.default(), state)
        logic.dispatch(ActionRequest("TRAIN_VILLAGER", {"count": 2}), NOW)
        logic.dispatch(ActionRequest("START_RESEARCH", {"research_id": "loom"}), NOW)

        result = logic.dispatch(ActionRequest("USE_ITEM", {"item_id": state.inventory[0].id}), NOW + 1)
        self.assertIsNone(result.error)
        self.assertEqual(logic.state.active_tasks, [])
        self.assertEqual(len(logic.state.units.villagers), 5)
        self.assertIn("loom", logic.state.completed_research)
        self.assertEqual(logic.state.inventory, [])

    def test_shard_completes_construction(self):
        state = make_state(inventory=[make_item("shard_of_the_ancients")])
        logic = GameLogic(Catalog.default(), state)
        logic.dispatch(ActionRequest("BUILD", {"building_kind": "houses", "villager_id": "v0",
                                               "position": {"x": 1, "y": 1}}), NOW)
        logic.dispatch(ActionRequest("USE_ITEM", {"item_id": state.inventory[0].id}), NOW + 1)
        self.assertEqual(len(logic.state.buildings["houses"]), 1)
        self.assertIsNone(logic.state.units.find_villager("v0").current_task)


if __name__ == '__main__':
    unittest.main()
