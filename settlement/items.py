"""Inventory item usability and item effects."""

import copy
from typing import List, Optional, Tuple

from .models import (
    ActionResult, ActiveBuffs, GameState, InventoryItem, ResourceBoost, Task, TimedReduction,
)
from .tasks import BUILD

# Items that shave time off the construction finishing last, in ms
HASTE_ITEMS = {
    "scroll_of_haste": 15_000,
    "blueprint_of_the_master": 60_000,
}
CONSTRUCTION_ITEMS = ("scroll_of_haste", "blueprint_of_the_master", "shard_of_the_ancients")
ALWAYS_USABLE = ("hearty_meal", "golden_harvest", "heart_of_the_mountain", "banner_of_command")

HEARTY_MEAL_FOOD = 75
BUILDERS_CHARM = TimedReduction(percentage=0.1, uses=1)
DRILLMASTERS_WHISTLE = TimedReduction(percentage=0.25, uses=5)
BANNER_TRAIN_REDUCTION = 0.05
RESOURCE_BOOSTS = {
    "golden_harvest": [("food", 1.5, 60_000)],
    "heart_of_the_mountain": [("gold", 2.0, 120_000), ("stone", 2.0, 120_000)],
}


def item_prefix(item: InventoryItem) -> str:
    """The definition id encoded at the front of an instance id."""
    return item.id.split("-")[0]


def item_usability(item: InventoryItem, active_tasks: List[Task], buffs: ActiveBuffs) -> Tuple[bool, str]:
    """Decide whether an item can be used right now, with a reason for the UI."""
    prefix = item_prefix(item)
    if prefix in CONSTRUCTION_ITEMS:
        if any(t.kind == BUILD for t in active_tasks):
            return True, f"Use {item.name}"
        return False, "No active construction project."
    if prefix == "whisper_of_the_creator":
        if active_tasks:
            return True, f"Use {item.name}"
        return False, "No active tasks to complete."
    if prefix == "builders_charm":
        if buffs.build_time_reduction is None:
            return True, f"Use {item.name}"
        return False, "A building charm is already active."
    if prefix == "drillmasters_whistle":
        if buffs.train_time_reduction is None:
            return True, f"Use {item.name}"
        return False, "A training buff is already active."
    if prefix in ALWAYS_USABLE:
        return True, f"Use {item.name}"
    return False, "This item cannot be used."


def is_item_usable(item: InventoryItem, active_tasks: List[Task], buffs: ActiveBuffs) -> bool:
    return item_usability(item, active_tasks, buffs)[0]


def latest_construction(tasks: List[Task]) -> Optional[Task]:
    """The construction task that will finish last."""
    constructions = [t for t in tasks if t.kind == BUILD]
    if not constructions:
        return None
    return max(constructions, key=lambda t: t.due_at)


def use_item(state: GameState, item_id: str, now: int, building_name=None) -> ActionResult:
    """Apply an inventory item's effect and consume it.

    `building_name` maps a building kind to a display name for log lines.
    """
    item = next((i for i in state.inventory if i.id == item_id), None)
    if item is None:
        return ActionResult.rejected("Item not found in your inventory.")

    usable, reason = item_usability(item, state.active_tasks, state.active_buffs)
    if not usable:
        return ActionResult.rejected(reason)

    prefix = item_prefix(item)
    remaining = [i for i in state.inventory if i.id != item_id]
    result = ActionResult(new_inventory=remaining)
    name_of = building_name or (lambda kind: kind)

    if prefix in HASTE_ITEMS:
        task = latest_construction(state.active_tasks)
        shortened = copy.deepcopy(task)
        shortened.duration = max(0, task.duration - HASTE_ITEMS[prefix])
        result.updated_tasks = [shortened]
        message = f"Used {item.name} on the {name_of(task.payload.get('building_kind'))}."
    elif prefix == "shard_of_the_ancients":
        task = latest_construction(state.active_tasks)
        result.completed_task_ids = [task.id]
        message = f"Used {item.name} to instantly complete the {name_of(task.payload.get('building_kind'))}."
    elif prefix == "whisper_of_the_creator":
        result.completed_task_ids = [t.id for t in state.active_tasks]
        message = "A divine whisper echoes, and all work is instantly finished."
    elif prefix == "hearty_meal":
        result.resource_deltas = {"food": HEARTY_MEAL_FOOD}
        message = f"Used {item.name} to gain {HEARTY_MEAL_FOOD} food."
    else:
        buffs = copy.deepcopy(state.active_buffs)
        if prefix == "builders_charm":
            buffs.build_time_reduction = copy.copy(BUILDERS_CHARM)
            message = f"Used {item.name}. Next building is 10% faster."
        elif prefix == "drillmasters_whistle":
            buffs.train_time_reduction = copy.copy(DRILLMASTERS_WHISTLE)
            message = f"Used {item.name}. Next 5 units train 25% faster."
        elif prefix == "banner_of_command":
            buffs.permanent_train_time_reduction += BANNER_TRAIN_REDUCTION
            message = f"Used {item.name}. Military units train 5% faster, permanently."
        else:
            for resource, multiplier, duration in RESOURCE_BOOSTS[prefix]:
                buffs.resource_boosts.append(ResourceBoost(resource, multiplier, now + duration))
            boosted = " and ".join(r for r, _, _ in RESOURCE_BOOSTS[prefix])
            message = f"Used {item.name}. {boosted.capitalize()} gathering boosted."
        result.updated_buffs = buffs

    result.log = (message, "item")
    result.activity_status = message
    return result
