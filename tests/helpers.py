import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from settlement.catalog import Catalog
from settlement.models import (
    BuildingInstance, GameState, InventoryItem, Position, ResourceNode, Task, Units, Villager,
)

NOW = 1_700_000_000_000


class SequenceRandom:
    """Random source that replays fixed values, repeating the last one."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


def building(building_id, name="Oakhold", x=0, y=0, hp=500):
    return BuildingInstance(id=building_id, name=name, position=Position(x, y), hp=hp)


def make_state(resources=None, villagers=3, **overrides):
    """A young settlement: a Town Center, some idle villagers and nothing else."""
    state = GameState(
        resources=dict(resources if resources is not None else {"food": 1000, "wood": 1000, "gold": 1000, "stone": 1000}),
        units=Units(villagers=[Villager(id=f"v{i}", name=f"Villager {i}") for i in range(villagers)]),
        buildings={"townCenter": [building("tc", "Heartstone", 12, 9, 2400)]},
        current_age="Nomadic Age",
    )
    for key, value in overrides.items():
        setattr(state, key, value)
    return state


def make_item(definition_id, suffix="1", catalog=None):
    definition = (catalog or Catalog.default()).item(definition_id)
    return InventoryItem(
        id=f"{definition_id}-{NOW}-{suffix}",
        definition_id=definition_id,
        name=definition.name,
        description=definition.description,
        rarity=definition.rarity,
    )


def make_task(task_id, kind, start=NOW, duration=10_000, **payload):
    return Task(id=task_id, kind=kind, start_time=start, duration=duration, payload=payload)


def make_node(node_id, kind="food", x=3, y=3, amount=1000.0):
    return ResourceNode(id=node_id, kind=kind, position=Position(x, y), amount=amount)
