import unittest

from helpers import NOW, building, make_state, make_task

from settlement.catalog import Catalog
from settlement.names import NameAllocator
from settlement.resolution import resolve_task


class TestResolveTask(unittest.TestCase):

    def setUp(self):
        self.catalog = Catalog.default()
        self.names = NameAllocator(pools={"villager": ["Ada"], "soldier": ["Bors"], "building": ["Oakhold"]})
        self.state = make_state()

    def resolve(self, task):
        return resolve_task(task, self.state, self.catalog, self.names, NOW)

    def test_build_creates_instance_and_frees_builder(self):
        self.state.units.villagers[0].current_task = "t-build"
        task = make_task("t-build", "build", building_kind="houses", villager_ids=["v0"], position={"x": 1, "y": 2})
        result = self.resolve(task)
        house = result.new_buildings["houses"][0]
        self.assertEqual((house.id, house.name, house.hp), ("t-build", "Oakhold", 550))
        self.assertEqual((house.position.x, house.position.y), (1, 2))
        self.assertIsNone(result.updated_units.find_villager("v0").current_task)
        self.assertEqual(self.state.units.villagers[0].current_task, "t-build")

    def test_train_villager(self):
        result = self.resolve(make_task("t1", "train_villager", count=2, building_id="tc"))
        names = [v.name for v in result.updated_units.villagers[3:]]
        self.assertEqual(names, ["Ada", "A New Villager #1"])
        self.assertEqual(result.log[0], "2 new villager(s) have joined your settlement.")

    def test_train_military(self):
        result = self.resolve(make_task("t1", "train_military", unit_kind="swordsman", count=1, building_id="b1"))
        unit = result.updated_units.military[0]
        self.assertEqual((unit.name, unit.unit_kind), ("Bors", "swordsman"))
        self.assertEqual(result.log, ("1 Swordsman(s) have been trained.", "swordsman"))

    def test_research_effects(self):
        result = self.resolve(make_task("r1", "research", research_id="forged_tools"))
        self.assertEqual(result.completed_research, ["forged_tools"])
        self.assertAlmostEqual(result.updated_buffs.gather_bonuses["*"], 0.15)

        result = self.resolve(make_task("r2", "research", research_id="conscription"))
        self.assertAlmostEqual(result.updated_buffs.permanent_train_time_reduction, 0.1)

    def test_advance_age(self):
        self.assertEqual(self.resolve(make_task("a1", "advance_age")).current_age, "Feudal Age")
        self.state.current_age = "Imperial Age"
        self.assertEqual(self.resolve(make_task("a2", "advance_age")).current_age, "Age of Legends")

    def test_advance_age_uses_recorded_target(self):
        self.state.current_age = "Imperial Age"
        task = make_task("a3", "advance_age", target_age="Castle Age")
        self.assertEqual(self.resolve(task).current_age, "Castle Age")

    def test_upgrade_keeps_identity(self):
        self.state.buildings["watchTower"] = [building("w1", "Highmoor", 6, 6, 1500)]
        task = make_task("u1", "upgrade_building", original_building_id="w1", original_building_kind="watchTower",
                         target_building_kind="guardTower")
        result = self.resolve(task)
        self.assertEqual(result.new_buildings["watchTower"], [])
        tower = result.new_buildings["guardTower"][0]
        self.assertEqual((tower.id, tower.name, tower.hp), ("w1", "Highmoor", 2400))

    def test_gather_frees_gatherers(self):
        self.state.units.villagers[1].current_task = "g1"
        result = self.resolve(make_task("g1", "gather", villager_ids=["v1"], resource_node_id="n1"))
        self.assertIsNone(result.updated_units.find_villager("v1").current_task)


if __name__ == '__main__':
    unittest.main()
