"""Applies the effect of a finished task, exactly once."""

import copy
import logging

from .catalog import Catalog
from .config import FINAL_AGE_NAME
from .models import ActionResult, BuildingInstance, GameState, MilitaryUnit, Position, Task, Villager
from .names import NameAllocator
from .tasks import (
    ADVANCE_AGE, BUILD, GATHER, RESEARCH, TRAIN_MILITARY, TRAIN_VILLAGER, UPGRADE_BUILDING,
)

logger = logging.getLogger(__name__)


def _free_villagers(state: GameState, task: Task):
    """Copy of the units with every villager working on `task` set idle."""
    units = copy.deepcopy(state.units)
    for villager in units.villagers:
        if villager.current_task == task.id:
            villager.current_task = None
    return units


def resolve_task(task: Task, state: GameState, catalog: Catalog, names: NameAllocator, now: int) -> ActionResult:
    """Turn a finished task into the bundle the host applies.

    The scheduler has already removed the task; calling this twice for the
    same task is the caller's mistake.
    """
    resolver = RESOLVERS.get(task.kind)
    if resolver is None:
        logger.warning(f"No resolver for task kind {task.kind}, dropping {task.id}")
        return ActionResult()
    result = resolver(task, state, catalog, names, now)
    logger.info(f"Resolved {task.kind} task {task.id}")
    return result


def _resolve_build(task, state, catalog, names, now):
    kind = task.payload["building_kind"]
    config = catalog.building(kind)
    name = names.one("building")
    instance = BuildingInstance(
        id=task.id,
        name=name,
        position=Position(**task.payload["position"]),
        hp=config.hp if config else 0,
    )
    buildings = {k: list(v) for k, v in state.buildings.items()}
    buildings.setdefault(kind, []).append(instance)
    display = config.name if config else kind
    builders = len(task.payload.get("villager_ids", []))
    return ActionResult(
        new_buildings=buildings,
        updated_units=_free_villagers(state, task),
        log=(f"{builders} builder(s) have constructed {name}, a new {display}.", kind),
        activity_status=f"Construction of {name} is complete.",
    )


def _resolve_train_villager(task, state, catalog, names, now):
    count = task.payload.get("count", 0)
    units = copy.deepcopy(state.units)
    for index, name in enumerate(names.allocate("villager", count)):
        units.villagers.append(Villager(id=f"{task.id}-{index}", name=name))
    return ActionResult(
        updated_units=units,
        log=(f"{count} new villager(s) have joined your settlement.", "villager"),
        activity_status=f"{count} new villager(s) are ready to work.",
    )


def _resolve_train_military(task, state, catalog, names, now):
    unit_kind = task.payload["unit_kind"]
    count = task.payload.get("count", 0)
    config = catalog.unit(unit_kind)
    display = config.name if config else unit_kind
    units = copy.deepcopy(state.units)
    for index, name in enumerate(names.allocate("soldier", count)):
        units.military.append(MilitaryUnit(id=f"{task.id}-{index}", name=name, unit_kind=unit_kind))
    return ActionResult(
        updated_units=units,
        log=(f"{count} {display}(s) have been trained.", unit_kind),
        activity_status=f"{count} new {display}(s) are ready for battle.",
    )


def _resolve_research(task, state, catalog, names, now):
    research_id = task.payload["research_id"]
    config = catalog.research_item(research_id)
    display = config.name if config else research_id

    buffs = copy.deepcopy(state.active_buffs)
    for effect in (config.effects if config else []):
        if effect.get("kind") == "train_time_reduction":
            buffs.permanent_train_time_reduction += effect.get("value", 0.0)
        elif effect.get("kind") == "gather_bonus":
            resource = effect.get("resource", "*")
            buffs.gather_bonuses[resource] = buffs.gather_bonuses.get(resource, 0.0) + effect.get("value", 0.0)
        else:
            logger.warning(f"Unknown research effect {effect!r} on {research_id}")

    completed = list(state.completed_research)
    if research_id not in completed:
        completed.append(research_id)
    return ActionResult(
        completed_research=completed,
        updated_buffs=buffs,
        log=(f"Research complete: {display}.", "research"),
        activity_status=f"Your scholars have mastered {display}.",
    )


def _resolve_advance_age(task, state, catalog, names, now):
    age_name = task.payload.get("target_age")
    if not age_name:
        next_age = catalog.next_age(state.current_age)
        age_name = next_age.name if next_age else FINAL_AGE_NAME
    return ActionResult(
        current_age=age_name,
        log=(f"You have advanced to the {age_name}!", "age"),
        activity_status=f"Welcome to the {age_name}!",
    )


def _resolve_upgrade(task, state, catalog, names, now):
    original_id = task.payload["original_building_id"]
    target_kind = task.payload["target_building_kind"]
    found = state.find_building(original_id)
    if found is None:
        logger.warning(f"Upgrade target {original_id} no longer exists")
        return ActionResult()
    kind, instance = found
    target = catalog.building(target_kind)
    display = target.name if target else target_kind

    buildings = {k: list(v) for k, v in state.buildings.items()}
    buildings[kind] = [b for b in buildings[kind] if b.id != original_id]
    buildings.setdefault(target_kind, []).append(BuildingInstance(
        id=instance.id,
        name=instance.name,
        position=instance.position,
        hp=target.hp if target else instance.hp,
    ))
    return ActionResult(
        new_buildings=buildings,
        log=(f"{instance.name} has been upgraded to a {display}.", target_kind),
        activity_status=f"{instance.name} is now a {display}.",
    )


def _resolve_gather(task, state, catalog, names, now):
    return ActionResult(updated_units=_free_villagers(state, task))


RESOLVERS = {
    BUILD: _resolve_build,
    TRAIN_VILLAGER: _resolve_train_villager,
    TRAIN_MILITARY: _resolve_train_military,
    RESEARCH: _resolve_research,
    ADVANCE_AGE: _resolve_advance_age,
    UPGRADE_BUILDING: _resolve_upgrade,
    GATHER: _resolve_gather,
}
