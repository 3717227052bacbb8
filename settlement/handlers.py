"""Action validation and handlers.

Every handler takes an `ActionContext` and the request payload and returns
an `ActionResult`: either a rejection or a bundle of deltas, tasks and
replacement collections for the host to apply. Handlers never mutate the
state they are given.

Checks run in a fixed order, cheapest and most specific first:

1. the target exists
2. no conflicting task is running for it
3. prerequisite buildings and research are present
4. there is population headroom
5. the cost is affordable
6. uniqueness and other domain rules
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .catalog import Catalog
from .config import (
    AGE_ADVANCE_COST, AGE_ADVANCE_SECONDS, GATHER_DURATION_MS, MAP_HEIGHT, MAP_WIDTH,
    TOWN_CENTER, VILLAGER_COST, VILLAGER_TRAIN_SECONDS,
)
from .events import EventResolver
from .items import use_item
from .ledger import ResourceLedger
from .models import (
    ActionRequest, ActionResult, GameEventChoice, GameState, Population, Position, Task, Units,
)
from .tasks import (
    ADVANCE_AGE, BUILD, GATHER, RESEARCH, TRAIN_MILITARY, TRAIN_VILLAGER, UPGRADE_BUILDING,
    TaskScheduler, make_task_id,
)

logger = logging.getLogger(__name__)

DEMOLISH = "DEMOLISH"
TRAIN_UNIT_ACTION = "TRAIN_UNIT"
TRAIN_VILLAGER_ACTION = "TRAIN_VILLAGER"
UPGRADE_BUILDING_ACTION = "UPGRADE_BUILDING"
START_RESEARCH = "START_RESEARCH"
ADVANCE_AGE_ACTION = "ADVANCE_AGE"
PROCESS_CHOICE = "PROCESS_CHOICE"
GATHER_ACTION = "GATHER"
MOVE = "MOVE"
BUILD_ACTION = "BUILD"
USE_ITEM = "USE_ITEM"
RECALL = "RECALL"


@dataclass
class ActionContext:
    """Read-only view of the host state handed to every handler."""
    state: GameState
    catalog: Catalog
    now: int
    events: Optional[EventResolver] = None
    scheduler: TaskScheduler = field(init=False)

    def __post_init__(self):
        # A copy of the task list, so handlers cannot touch the host's
        self.scheduler = TaskScheduler(list(self.state.active_tasks))

    @property
    def unlimited(self) -> bool:
        return self.state.unlimited_resources

    def population(self, exclude_building_id: Optional[str] = None) -> Population:
        """Current units, housing capacity and units still in training."""
        pending = 0
        for task in self.state.active_tasks:
            if task.kind == TRAIN_VILLAGER:
                pending += task.payload.get("count", 0)
            elif task.kind == TRAIN_MILITARY:
                unit = self.catalog.unit(task.payload.get("unit_kind"))
                pending += task.payload.get("count", 0) * (unit.population_cost if unit else 1)
        return Population(
            current=self.state.units.population,
            capacity=self.catalog.population_capacity(self.state.buildings, exclude_building_id),
            pending=pending,
        )

    def can_afford(self, cost, multiplier: int = 1) -> bool:
        return ResourceLedger.can_afford(self.state.resources, cost, multiplier, self.unlimited)

    def cost_delta(self, cost, multiplier: int = 1) -> Dict[str, int]:
        return {} if self.unlimited else ResourceLedger.cost_delta(cost, multiplier)


Handler = Callable[[ActionContext, Dict[str, Any]], ActionResult]
HANDLERS: Dict[str, Handler] = {}


def handles(action_type: str):
    """Register a handler for an action type."""
    def register(func: Handler) -> Handler:
        HANDLERS[action_type] = func
        return func
    return register


def handle_action(context: ActionContext, request: ActionRequest) -> ActionResult:
    """Dispatch a request to its handler."""
    handler = HANDLERS.get(request.type)
    if handler is None:
        logger.info(f"Rejected unknown action type {request.type!r}")
        return ActionResult.rejected(f"Unknown action: {request.type}.")

    result = handler(context, request.payload or {})
    if result.error:
        logger.info(f"Rejected {request.type}: {result.error}")
    else:
        logger.debug(f"Accepted {request.type}: deltas={result.resource_deltas}")
    return result


def _need_more(missing: List[str]) -> str:
    return f"Need more {' and '.join(missing)}."


def _assign_villagers(units: Units, villager_ids: List[str], task_id: Optional[str]) -> Units:
    """Copy of `units` with the given villagers bound to `task_id`."""
    updated = copy.deepcopy(units)
    for villager in updated.villagers:
        if villager.id in villager_ids:
            villager.current_task = task_id
    return updated


@handles(DEMOLISH)
def demolish_building(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    building_id = payload.get("building_id")
    found = ctx.state.find_building(building_id) if building_id else None
    if not found or (payload.get("building_kind") and payload["building_kind"] != found[0]):
        return ActionResult.rejected("Building not found.")
    kind, instance = found
    config = ctx.catalog.building(kind)
    if config is None:
        return ActionResult.rejected("Building not found.")

    if ctx.scheduler.owner_of(building_id):
        return ActionResult.rejected("Cannot demolish a building with an active task (e.g., training or upgrading).")

    if config.population_capacity > 0:
        population = ctx.population(exclude_building_id=building_id)
        if population.committed > population.capacity:
            return ActionResult.rejected("Cannot demolish this building, your people would be homeless.")

    if kind == TOWN_CENTER:
        return ActionResult.rejected("The Town Center is the heart of your civilization and cannot be demolished.")

    refund = ResourceLedger.refund_delta(config.cost)
    new_buildings = {k: list(v) for k, v in ctx.state.buildings.items()}
    new_buildings[kind] = [b for b in new_buildings[kind] if b.id != building_id]

    salvage = ", ".join(f"{amount} {res}" for res, amount in refund.items())
    return ActionResult(
        resource_deltas=refund,
        new_buildings=new_buildings,
        log=(f"{instance.name} ({config.name}) was demolished.", kind),
        activity_status=f"Salvaged {salvage}." if salvage else f"{instance.name} was demolished.",
    )


@handles(TRAIN_UNIT_ACTION)
def train_unit(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    unit_kind = payload.get("unit_kind")
    count = int(payload.get("count", 0))
    unit = ctx.catalog.unit(unit_kind)
    if unit is None or not unit.is_active or count <= 0:
        return ActionResult.rejected("Invalid training request.")
    trainers = ctx.state.buildings.get(unit.required_building) or []
    if not trainers:
        return ActionResult.rejected(f"No {ctx.catalog.building_name(unit.required_building)} to train units.")
    trainer = trainers[0]

    if ctx.scheduler.owner_of(trainer.id) or any(
        t.kind == TRAIN_MILITARY and t.payload.get("unit_kind") == unit_kind for t in ctx.state.active_tasks
    ):
        return ActionResult.rejected(f"{trainer.name} is already training units.")

    missing_buildings = [b for b in unit.required_building_ids if not ctx.state.buildings.get(b)]
    if missing_buildings:
        names = ", ".join(ctx.catalog.building_name(b) for b in missing_buildings)
        return ActionResult.rejected(f"Training this unit requires: {names}.")
    missing_research = [r for r in unit.required_research_ids if r not in ctx.state.completed_research]
    if missing_research:
        names = ", ".join(ctx.catalog.research_name(r) for r in missing_research)
        return ActionResult.rejected(f"Training this unit requires research: {names}.")

    population_cost = unit.population_cost * count
    population = ctx.population()
    if population.committed + population_cost > population.capacity:
        return ActionResult.rejected(f"Need space for {population_cost} more population.")

    if not ctx.can_afford(unit.cost, count):
        return ActionResult.rejected(_need_more(ResourceLedger.missing(ctx.state.resources, unit.cost, count)))

    base_ms = unit.train_time * 1000
    buffs = ctx.state.active_buffs
    permanent = buffs.permanent_train_time_reduction or 0.0
    updated_buffs = None
    # temporary and permanent reductions add up; each buffed unit spends one use
    if buffs.train_time_reduction:
        boost = buffs.train_time_reduction
        applicable = min(count, boost.uses)
        train_ms = (base_ms * applicable * max(0.0, 1 - (permanent + boost.percentage))
                    + base_ms * (count - applicable) * max(0.0, 1 - permanent))
        updated_buffs = copy.deepcopy(buffs)
        if boost.uses - applicable > 0:
            updated_buffs.train_time_reduction.uses = boost.uses - applicable
        else:
            updated_buffs.train_time_reduction = None
    else:
        train_ms = base_ms * count * max(0.0, 1 - permanent)

    task = Task(
        id=make_task_id(ctx.now, TRAIN_MILITARY, unit_kind),
        kind=TRAIN_MILITARY,
        start_time=ctx.now,
        duration=int(round(train_ms)),
        payload={"unit_kind": unit_kind, "count": count, "building_id": trainer.id},
    )
    return ActionResult(
        resource_deltas=ctx.cost_delta(unit.cost, count),
        new_tasks=[task],
        updated_buffs=updated_buffs,
        log=(f"Began training {count} new {unit.name}(s).", unit_kind),
        activity_status=f"Training {count} {unit.name}(s)...",
    )


@handles(TRAIN_VILLAGER_ACTION)
def train_villager(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    count = int(payload.get("count", 0))
    if count <= 0:
        return ActionResult.rejected("Invalid training request.")
    town_centers = ctx.state.buildings.get(TOWN_CENTER) or []
    if not town_centers:
        return ActionResult.rejected("No Town Center to train villagers.")
    town_center = town_centers[0]

    if ctx.scheduler.by_kind(TRAIN_VILLAGER) or ctx.scheduler.owner_of(town_center.id):
        return ActionResult.rejected("Already training villagers.")

    population = ctx.population()
    if population.committed + count > population.capacity:
        return ActionResult.rejected(f"Need space for {count} more population.")

    if not ctx.can_afford(VILLAGER_COST, count):
        return ActionResult.rejected(_need_more(ResourceLedger.missing(ctx.state.resources, VILLAGER_COST, count)))

    task = Task(
        id=make_task_id(ctx.now, TRAIN_VILLAGER, town_center.id),
        kind=TRAIN_VILLAGER,
        start_time=ctx.now,
        duration=VILLAGER_TRAIN_SECONDS * 1000 * count,
        payload={"count": count, "building_id": town_center.id},
    )
    return ActionResult(
        resource_deltas=ctx.cost_delta(VILLAGER_COST, count),
        new_tasks=[task],
        log=(f"Began training {count} new villager(s).", "villager"),
        activity_status=f"Training {count} new villager(s)...",
    )


def _reserved_count(ctx: ActionContext, kind: str) -> int:
    """Buildings of a kind that exist or are on their way."""
    incoming = sum(
        1 for t in ctx.state.active_tasks
        if (t.kind == BUILD and t.payload.get("building_kind") == kind)
        or (t.kind == UPGRADE_BUILDING and t.payload.get("target_building_kind") == kind)
    )
    return ctx.state.building_count(kind) + incoming


@handles(UPGRADE_BUILDING_ACTION)
def upgrade_building(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    building_id = payload.get("building_id")
    found = ctx.state.find_building(building_id) if building_id else None
    if not found:
        return ActionResult.rejected("Original building not found.")
    kind, instance = found
    config = ctx.catalog.building(kind)
    target_kind = payload.get("target_kind")
    path = config.upgrade_path(target_kind) if config else None
    target = ctx.catalog.building(target_kind) if path else None
    if target is None:
        return ActionResult.rejected(f"{instance.name} cannot be upgraded to that.")

    if ctx.scheduler.owner_of(building_id):
        return ActionResult.rejected(f"{instance.name} is busy with another task.")

    if path.research_required and path.research_required not in ctx.state.completed_research:
        return ActionResult.rejected(
            f"Upgrading requires research: {ctx.catalog.research_name(path.research_required)}."
        )

    if not ctx.can_afford(path.cost):
        shortfall = ResourceLedger.shortfall(ctx.state.resources, path.cost)
        return ActionResult.rejected(_need_more([f"{amount} {res}" for res, amount in shortfall.items()]))

    if target.limit > 0 and _reserved_count(ctx, target_kind) >= target.limit:
        return ActionResult.rejected(f"You have reached the build limit for {target.name} ({target.limit}).")

    task = Task(
        id=make_task_id(ctx.now, UPGRADE_BUILDING, building_id),
        kind=UPGRADE_BUILDING,
        start_time=ctx.now,
        duration=path.time * 1000,
        payload={
            "original_building_id": building_id,
            "original_building_kind": kind,
            "target_building_kind": target_kind,
        },
    )
    return ActionResult(
        resource_deltas=ctx.cost_delta(path.cost),
        new_tasks=[task],
        log=(f"Upgrading {instance.name} to a {target.name}...", target_kind),
        activity_status=f"Upgrading {instance.name}...",
    )


@handles(START_RESEARCH)
def start_research(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    research_id = payload.get("research_id")
    research = ctx.catalog.research_item(research_id)
    if research is None or not research.is_active:
        return ActionResult.rejected("Research not found.")

    if any(t.kind == RESEARCH and t.payload.get("research_id") == research_id for t in ctx.state.active_tasks):
        return ActionResult.rejected("Research already in progress.")

    missing = [r for r in research.prerequisites if r not in ctx.state.completed_research]
    if missing:
        names = ", ".join(ctx.catalog.research_name(r) for r in missing)
        return ActionResult.rejected(f"Researching this requires: {names}.")
    if research.required_building_id and not ctx.state.buildings.get(research.required_building_id):
        return ActionResult.rejected(
            f"Researching this requires: {ctx.catalog.building_name(research.required_building_id)}."
        )

    if not ctx.can_afford(research.cost):
        return ActionResult.rejected(_need_more(ResourceLedger.missing(ctx.state.resources, research.cost)))

    if research_id in ctx.state.completed_research:
        return ActionResult.rejected(f"{research.name} has already been researched.")

    task = Task(
        id=make_task_id(ctx.now, RESEARCH, research_id),
        kind=RESEARCH,
        start_time=ctx.now,
        duration=research.research_time * 1000,
        payload={"research_id": research_id},
    )
    return ActionResult(
        resource_deltas=ctx.cost_delta(research.cost),
        new_tasks=[task],
        log=(f"Began research for {research.name}.", "research"),
        activity_status=f"Researching {research.name}...",
    )


@handles(ADVANCE_AGE_ACTION)
def advance_age(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    next_age = ctx.catalog.next_age(ctx.state.current_age)
    if next_age is None:
        return ActionResult.rejected("You have reached the final available age.")

    if ctx.scheduler.by_kind(ADVANCE_AGE):
        return ActionResult.rejected("Advancement already in progress.")

    if not ctx.can_afford(AGE_ADVANCE_COST):
        shortfall = ResourceLedger.shortfall(ctx.state.resources, AGE_ADVANCE_COST)
        needed = " and ".join(f"{amount} {res.capitalize()}" for res, amount in shortfall.items())
        return ActionResult.rejected(f"To advance, you need {needed}.")

    task = Task(
        id=make_task_id(ctx.now, ADVANCE_AGE, next_age.id),
        kind=ADVANCE_AGE,
        start_time=ctx.now,
        duration=AGE_ADVANCE_SECONDS * 1000,
        payload={"target_age": next_age.name},
    )
    return ActionResult(
        resource_deltas=ctx.cost_delta(AGE_ADVANCE_COST),
        new_tasks=[task],
        log=("Advancing to the next age...", "age"),
        activity_status="Your people begin the long journey to a new age.",
    )


@handles(PROCESS_CHOICE)
def process_choice(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    choice = payload.get("choice")
    if not isinstance(choice, GameEventChoice):
        return ActionResult.rejected("No event choice given.")
    events = ctx.events or EventResolver(ctx.catalog)
    population = ctx.population()
    return events.process_choice(
        choice, ctx.state.resources, ctx.state.inventory, ctx.state.units,
        now=ctx.now, unlimited=ctx.unlimited, housing=max(0, population.capacity - population.committed),
    )


@handles(GATHER_ACTION)
def gather_resource(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    node_id = payload.get("resource_node_id")
    villager_ids = list(dict.fromkeys(payload.get("villager_ids") or []))
    node = next((n for n in ctx.state.resource_nodes if n.id == node_id), None)
    if node is None:
        return ActionResult.rejected("Resource node not found.")
    if not villager_ids:
        return ActionResult.rejected("No villagers selected.")
    villagers = [ctx.state.units.find_villager(v) for v in villager_ids]
    if any(v is None for v in villagers):
        return ActionResult.rejected("Villager not found.")

    existing = ctx.scheduler.gather_task_for(node_id)
    for villager in villagers:
        if villager.current_task and (existing is None or villager.current_task != existing.id):
            return ActionResult.rejected(f"{villager.name} is already busy.")

    result = ActionResult(
        log=(f"{len(villager_ids)} villager(s) assigned to gather {node.kind}.", node.kind),
        activity_status=f"{len(villager_ids)} villager(s) are now gathering {node.kind}.",
    )
    if existing:
        merged = copy.deepcopy(existing)
        merged.payload["villager_ids"] = list(dict.fromkeys(existing.payload.get("villager_ids", []) + villager_ids))
        result.updated_tasks = [merged]
        task_id = existing.id
    else:
        task = Task(
            id=make_task_id(ctx.now, GATHER, node_id),
            kind=GATHER,
            start_time=ctx.now,
            duration=GATHER_DURATION_MS,
            payload={"villager_ids": villager_ids, "resource_node_id": node_id},
        )
        result.new_tasks = [task]
        task_id = task.id
    result.updated_units = _assign_villagers(ctx.state.units, villager_ids, task_id)
    return result


@handles(RECALL)
def recall_gatherers(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    node_id = payload.get("resource_node_id")
    task = ctx.scheduler.gather_task_for(node_id) if node_id else None
    if task is None:
        return ActionResult.rejected("No villagers are gathering there.")
    node = next((n for n in ctx.state.resource_nodes if n.id == node_id), None)
    kind = node.kind if node else "resources"
    villager_ids = task.payload.get("villager_ids", [])
    return ActionResult(
        cancelled_task_ids=[task.id],
        updated_units=_assign_villagers(ctx.state.units, villager_ids, None),
        log=(f"All villagers recalled from gathering {kind}.", "villager"),
        activity_status=f"{len(villager_ids)} villager(s) are now idle.",
    )


@handles(MOVE)
def move_units(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    unit_ids = payload.get("unit_ids") or []
    if not unit_ids:
        return ActionResult.rejected("No units selected.")
    known = {u.id for u in ctx.state.units.villagers} | {u.id for u in ctx.state.units.military}
    if any(unit_id not in known for unit_id in unit_ids):
        return ActionResult.rejected("Unit not found.")
    return ActionResult(activity_status=f"{len(unit_ids)} unit(s) are on the move.")


def _occupied_cells(state: GameState) -> set:
    cells = {b.position.key() for instances in state.buildings.values() for b in instances}
    cells |= {n.position.key() for n in state.resource_nodes}
    for task in state.active_tasks:
        position = task.payload.get("position") if task.kind == BUILD else None
        if position:
            cells.add((position["x"], position["y"]))
    return cells


@handles(BUILD_ACTION)
def construct_building(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    kind = payload.get("building_kind")
    config = ctx.catalog.building(kind)
    if config is None or not config.is_active or config.is_upgrade_only:
        return ActionResult.rejected("Unknown building.")
    builder = ctx.state.units.find_villager(payload.get("villager_id"))
    if builder is None:
        return ActionResult.rejected("Villager not found.")
    position = payload.get("position")
    if isinstance(position, dict):
        position = Position(**position)
    if position is None or not (0 <= position.x < MAP_WIDTH and 0 <= position.y < MAP_HEIGHT):
        return ActionResult.rejected("That location is outside the map.")

    if builder.current_task:
        return ActionResult.rejected("This villager is already busy.")
    if position.key() in _occupied_cells(ctx.state):
        return ActionResult.rejected("That location is occupied.")

    if not ctx.catalog.is_unlocked(config, ctx.state.current_age):
        return ActionResult.rejected(f"{config.name} is not available until the {config.unlocked_in_age}.")
    if config.required_building_id and not ctx.state.buildings.get(config.required_building_id):
        return ActionResult.rejected(
            f"Building this requires: {ctx.catalog.building_name(config.required_building_id)}."
        )

    if not ctx.can_afford(config.cost):
        return ActionResult.rejected(_need_more(ResourceLedger.missing(ctx.state.resources, config.cost)))

    if config.limit > 0 and _reserved_count(ctx, kind) >= config.limit:
        return ActionResult.rejected(f"You have reached the build limit for {config.name} ({config.limit}).")

    build_ms = config.build_time * 1000
    updated_buffs = None
    charm = ctx.state.active_buffs.build_time_reduction
    if charm:
        build_ms *= (1 - charm.percentage)
        updated_buffs = copy.deepcopy(ctx.state.active_buffs)
        if charm.uses - 1 > 0:
            updated_buffs.build_time_reduction.uses = charm.uses - 1
        else:
            updated_buffs.build_time_reduction = None

    task = Task(
        id=make_task_id(ctx.now, BUILD, f"{kind}-{position.x}-{position.y}"),
        kind=BUILD,
        start_time=ctx.now,
        duration=int(round(build_ms)),
        payload={
            "building_kind": kind,
            "villager_ids": [builder.id],
            "position": {"x": position.x, "y": position.y},
        },
    )
    return ActionResult(
        resource_deltas=ctx.cost_delta(config.cost),
        new_tasks=[task],
        updated_units=_assign_villagers(ctx.state.units, [builder.id], task.id),
        updated_buffs=updated_buffs,
        log=(f"{builder.name} began construction of a new {config.name}.", kind),
        activity_status=f"{builder.name} has started constructing a {config.name}.",
    )


@handles(USE_ITEM)
def use_inventory_item(ctx: ActionContext, payload: Dict[str, Any]) -> ActionResult:
    return use_item(ctx.state, payload.get("item_id"), ctx.now, ctx.catalog.building_name)
