"""Session logic: owns one settlement's state tree and applies results to it."""

import logging
import math
import random
from typing import List, Optional, Tuple

from .catalog import Catalog
from .config import (
    EVENT_INTERVAL_RANGE, MAP_HEIGHT, MAP_WIDTH, NODE_AMOUNT_RANGE, NODE_COUNT_RANGE,
    STARTING_RESOURCES, STARTING_VILLAGERS, TOWN_CENTER, UNLIMITED_RESOURCE_AMOUNT,
)
from .events import EventResolver
from .gathering import gather_tick
from .handlers import PROCESS_CHOICE, ActionContext, handle_action
from .journal import add_log_entry
from .ledger import ResourceLedger
from .models import (
    ActionRequest, ActionResult, BuildingInstance, GameState, Population, Position, ResourceNode,
    Task, Units, Villager,
)
from .names import CivilizationRoster, NameAllocator
from .resolution import resolve_task
from .tasks import TaskScheduler, progress

logger = logging.getLogger(__name__)

RESOURCE_KINDS = ("food", "wood", "gold", "stone")


class GameLogic:
    """Handles all game logic operations for one settlement.

    Commands go through `dispatch`, one at a time. The host calls `tick`
    on its own cadence to resolve due tasks, gather resources and raise
    random events.
    """

    def __init__(self, catalog: Catalog, state: Optional[GameState] = None, rng=None,
                 names: Optional[NameAllocator] = None, roster: Optional[CivilizationRoster] = None):
        self.catalog = catalog
        self.state = state or GameState()
        self.rng = rng or random.Random()
        self.names = names or NameAllocator()
        self.roster = roster or CivilizationRoster()
        self.events = EventResolver(catalog, self.rng, self.names)
        self.activity_status = ""

    @property
    def scheduler(self) -> TaskScheduler:
        return TaskScheduler(self.state.active_tasks)

    def _roll(self, low: int, high: int) -> int:
        return math.floor(self.rng.random() * (high - low + 1)) + low

    def _next_event_time(self, now: int) -> int:
        return now + self._roll(*EVENT_INTERVAL_RANGE) * 1000

    def new_game(self, now: int, unlimited: bool = False) -> GameState:
        """Found a new settlement and make it the current state."""
        self.names.reset()
        civilization = self.roster.next()
        ages = self.catalog.active_ages()

        town_center_config = self.catalog.building(TOWN_CENTER)
        town_center = BuildingInstance(
            id=f"{now}-{TOWN_CENTER}",
            name=self.names.one("building"),
            position=Position(MAP_WIDTH // 2, MAP_HEIGHT // 2),
            hp=town_center_config.hp if town_center_config else 0,
        )
        villagers = [
            Villager(id=f"{now}-villager-{index}", name=name)
            for index, name in enumerate(self.names.allocate("villager", STARTING_VILLAGERS))
        ]

        self.state = GameState(
            civilization=civilization,
            resources=dict(STARTING_RESOURCES),
            units=Units(villagers=villagers),
            buildings={TOWN_CENTER: [town_center]},
            current_age=ages[0].name if ages else "",
            resource_nodes=self.generate_resource_nodes({town_center.position.key()}),
            next_event_at=self._next_event_time(now),
            last_tick=now,
        )
        self.set_unlimited(unlimited)
        self.add_log(f"The {civilization.name} have founded a new settlement.", "system", now)
        logger.info(f"Founded a {civilization.name} settlement with {len(self.state.resource_nodes)} resource nodes")
        return self.state

    def generate_resource_nodes(self, occupied: set) -> List[ResourceNode]:
        """Scatter resource nodes over free map cells."""
        taken = set(occupied)
        nodes = []
        for index in range(self._roll(*NODE_COUNT_RANGE)):
            # Bounded retries so a crowded map cannot spin forever
            for _ in range(20):
                position = Position(self._roll(0, MAP_WIDTH - 1), self._roll(0, MAP_HEIGHT - 1))
                if position.key() not in taken:
                    break
            else:
                continue
            taken.add(position.key())
            kind = RESOURCE_KINDS[min(len(RESOURCE_KINDS) - 1, math.floor(self.rng.random() * len(RESOURCE_KINDS)))]
            nodes.append(ResourceNode(
                id=f"node-{index}-{position.x}-{position.y}",
                kind=kind,
                position=position,
                amount=float(self._roll(*NODE_AMOUNT_RANGE)),
            ))
        return nodes

    def add_log(self, message: str, icon: str, now: int = 0):
        self.state.game_log = add_log_entry(self.state.game_log, message, icon, now)

    def population(self) -> Population:
        return ActionContext(self.state, self.catalog, 0).population()

    def task_progress(self, now: int) -> List[Tuple[Task, float]]:
        return [(task, progress(task, now)) for task in self.state.active_tasks]

    def set_unlimited(self, enabled: bool):
        """Toggle unlimited resources; enabling fills every resource kind."""
        self.state.unlimited_resources = enabled
        if enabled:
            kinds = set(RESOURCE_KINDS) | set(self.state.resources)
            self.state.resources = {kind: UNLIMITED_RESOURCE_AMOUNT for kind in kinds}

    def dispatch(self, request: ActionRequest, now: int) -> ActionResult:
        """Validate and run one action, applying its result on success."""
        context = ActionContext(self.state, self.catalog, now, self.events)
        result = handle_action(context, request)
        if result.success:
            self.apply(result, now)
        return result

    def apply(self, result: ActionResult, now: int):
        """Apply an accepted bundle to the state tree."""
        state = self.state
        scheduler = self.scheduler

        if result.resource_deltas:
            state.resources = ResourceLedger.apply_delta(state.resources, result.resource_deltas)
        if result.new_tasks:
            scheduler.schedule_all(result.new_tasks)
        for task in result.updated_tasks or []:
            scheduler.replace(task)
        for task_id in result.cancelled_task_ids or []:
            scheduler.cancel(task_id)

        if result.updated_units is not None:
            state.units = result.updated_units
        if result.new_buildings is not None:
            state.buildings = result.new_buildings
        if result.new_inventory is not None:
            state.inventory = result.new_inventory
        if result.updated_buffs is not None:
            state.active_buffs = result.updated_buffs
        if result.completed_research is not None:
            state.completed_research = result.completed_research
        if result.current_age is not None:
            state.current_age = result.current_age

        if result.log:
            self.add_log(result.log[0], result.log[1], now)
        if result.activity_status:
            self.activity_status = result.activity_status

        for task_id in result.completed_task_ids or []:
            self._finish(task_id, now)

    def _finish(self, task_id: str, now: int) -> Optional[ActionResult]:
        """Resolve a task once; a task that is already gone is skipped."""
        task = self.scheduler.resolve(task_id)
        if task is None:
            return None
        result = resolve_task(task, self.state, self.catalog, self.names, now)
        self.apply(result, now)
        return result

    def tick(self, now: int) -> List[ActionResult]:
        """Advance the settlement to `now`."""
        state = self.state
        elapsed = now - state.last_tick if state.last_tick is not None else 0
        state.last_tick = now

        boosts = [b for b in state.active_buffs.resource_boosts if b.end_time > now]
        if len(boosts) != len(state.active_buffs.resource_boosts):
            state.active_buffs.resource_boosts = boosts
            self.add_log("A resource gathering bonus has expired.", "system", now)

        resolved = []
        for task in self.scheduler.due_tasks(now):
            result = self._finish(task.id, now)
            if result is not None:
                resolved.append(result)

        self._gather(max(0, elapsed), now, resolved)

        if state.current_event is None and state.next_event_at is not None and now >= state.next_event_at:
            state.current_event = self.events.pick_event()
            state.next_event_at = None
            if state.current_event:
                self.add_log(state.current_event.message, "event", now)
                logger.info("A new event awaits a decision")
        return resolved

    def _gather(self, elapsed: int, now: int, resolved: List[ActionResult]):
        state = self.state
        outcome = gather_tick(
            state.active_tasks, state.resource_nodes, elapsed, state.active_buffs, state.civilization, now,
        )

        credited = {}
        for kind, amount in outcome.yields.items():
            total = state.gather_carry.get(kind, 0.0) + amount
            whole = math.floor(total)
            state.gather_carry[kind] = total - whole
            if whole:
                credited[kind] = whole
        if credited and not state.unlimited_resources:
            state.resources = ResourceLedger.apply_delta(state.resources, credited)
        state.resource_nodes = outcome.nodes

        for node in outcome.depleted:
            self.add_log(f"A {node.kind} source has been fully depleted.", node.kind, now)
            self.activity_status = f"A {node.kind} source has been fully depleted."
        for task_id in outcome.finished_task_ids:
            result = self._finish(task_id, now)
            if result is not None:
                resolved.append(result)

    def choose(self, index: int, now: int) -> ActionResult:
        """Answer the pending event with one of its choices."""
        event = self.state.current_event
        if event is None:
            return ActionResult.rejected("There is no event awaiting a decision.")
        if not 0 <= index < len(event.choices):
            return ActionResult.rejected("Invalid choice.")

        result = self.dispatch(ActionRequest(PROCESS_CHOICE, {"choice": event.choices[index]}), now)
        if result.success:
            self.state.current_event = None
            self.state.next_event_at = self._next_event_time(now)
        return result
