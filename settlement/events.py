"""Event resolution: turns a chosen event option into deltas, items and a log line."""

import logging
import math
import random
import uuid
from typing import List, Optional, Union, Tuple

from .catalog import Catalog
from .ledger import ResourceLedger
from .models import (
    ActionResult, GameEvent, GameEventChoice, InventoryItem, Resources, Units, Villager,
)
from .names import NameAllocator

logger = logging.getLogger(__name__)

NO_EFFECT_LOG = "Your decision had no immediate effect."


class EventResolver:
    """Resolves event choices against a random source.

    The random source is any object with a `random()` method returning a
    float in [0, 1). Draws happen in a fixed order: the success roll
    first (only when the choice has a success chance), then one draw per
    ranged resource reward, in reward order.
    """

    def __init__(self, catalog: Catalog, rng=None, names: Optional[NameAllocator] = None):
        self.catalog = catalog
        self.rng = rng or random.Random()
        self.names = names or NameAllocator()

    def pick_event(self) -> Optional[GameEvent]:
        """Pick a random event from the catalog."""
        if not self.catalog.events:
            return None
        index = math.floor(self.rng.random() * len(self.catalog.events))
        return self.catalog.events[min(index, len(self.catalog.events) - 1)]

    def roll_amount(self, amount: Union[int, Tuple[int, int]]) -> int:
        """Resolve a fixed amount or an inclusive [min, max] range."""
        if isinstance(amount, (list, tuple)):
            low, high = amount
            return math.floor(self.rng.random() * (high - low + 1)) + low
        return int(amount)

    def process_choice(self, choice: GameEventChoice, resources: Resources,
                       inventory: List[InventoryItem], units: Optional[Units] = None,
                       now: int = 0, unlimited: bool = False, housing: Optional[int] = None) -> ActionResult:
        """Resolve one event choice. Inputs are never mutated.

        `housing` is the free population headroom; villagers rewarded beyond
        it are turned away. None means no limit.
        """
        if choice.cost and not unlimited:
            missing = ResourceLedger.missing(resources, choice.cost)
            if missing:
                return ActionResult.rejected(f"You lack the required resources: {', '.join(missing)}.")

        is_success = choice.success_chance is None or self.rng.random() < choice.success_chance
        effects = choice.success_effects if is_success else choice.failure_effects

        deltas = {} if unlimited else ResourceLedger.cost_delta(choice.cost)

        if effects is None:
            return ActionResult(
                resource_deltas=deltas,
                log=(f'Decision: "{choice.text}". {NO_EFFECT_LOG}', "event"),
                activity_status=NO_EFFECT_LOG,
            )

        if not is_success and effects.cost:
            deltas = ResourceLedger.merge(deltas, ResourceLedger.cost_delta(effects.cost))

        new_items: List[InventoryItem] = []
        new_villagers: List[Villager] = []
        for reward in effects.rewards:
            if reward.kind == "resource" and reward.resource:
                amount = self.roll_amount(reward.amount)
                if amount != 0:
                    deltas[reward.resource] = deltas.get(reward.resource, 0) + amount
            elif reward.kind == "item":
                definition = self.catalog.item(reward.item_id)
                if definition is None:
                    logger.warning(f"Event reward references unknown item {reward.item_id}")
                    continue
                for _ in range(reward.count):
                    new_items.append(InventoryItem(
                        id=f"{definition.id}-{now}-{uuid.uuid4().hex[:8]}",
                        definition_id=definition.id,
                        name=definition.name,
                        description=definition.description,
                        rarity=definition.rarity,
                    ))
            elif reward.kind == "unit" and units is not None:
                count = reward.count
                if housing is not None:
                    count = max(0, min(count, housing - len(new_villagers)))
                    if count < reward.count:
                        logger.info(f"No housing for {reward.count - count} rewarded villager(s)")
                for name in self.names.allocate("villager", count):
                    new_villagers.append(Villager(id=f"{now}-villager-{len(new_villagers)}-{name}", name=name))

        outcome = "success" if is_success else "failure"
        logger.info(f'Event choice "{choice.text}" resolved as {outcome}: {deltas}')

        result = ActionResult(
            resource_deltas={k: v for k, v in deltas.items() if v != 0},
            log=(f'Decision: "{choice.text}". {effects.log}', "event"),
            activity_status=effects.log,
        )
        if new_items:
            result.new_inventory = list(inventory) + new_items
        if new_villagers:
            result.updated_units = Units(
                villagers=list(units.villagers) + new_villagers,
                military=list(units.military),
            )
        return result
