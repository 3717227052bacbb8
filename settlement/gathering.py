"""Per-tick resource gathering from resource nodes."""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import DEFAULT_GATHER_RATE, GATHER_RATES
from .models import ActiveBuffs, Civilization, ResourceNode, Task
from .tasks import GATHER

BONUS_PATTERN = re.compile(r"(\d+)%")


@dataclass
class GatherOutcome:
    yields: Dict[str, float] = field(default_factory=dict)
    nodes: List[ResourceNode] = field(default_factory=list)
    finished_task_ids: List[str] = field(default_factory=list)
    depleted: List[ResourceNode] = field(default_factory=list)


def civilization_multiplier(civilization: Optional[Civilization], resource: str) -> float:
    """Parse "N%" out of a civilization bonus that mentions the resource."""
    if civilization is None or resource.lower() not in civilization.bonus.lower():
        return 1.0
    match = BONUS_PATTERN.search(civilization.bonus)
    return 1 + int(match.group(1)) / 100 if match else 1.0


def boost_multiplier(buffs: ActiveBuffs, resource: str, now: int) -> float:
    boost = next((b for b in buffs.resource_boosts if b.resource == resource and b.end_time > now), None)
    return boost.multiplier if boost else 1.0


def gather_rate(resource: str, buffs: ActiveBuffs, civilization: Optional[Civilization], now: int) -> float:
    """Units per second one villager gathers of `resource`."""
    research_bonus = 1 + buffs.gather_bonuses.get("*", 0.0) + buffs.gather_bonuses.get(resource, 0.0)
    return (
        GATHER_RATES.get(resource, DEFAULT_GATHER_RATE)
        * civilization_multiplier(civilization, resource)
        * boost_multiplier(buffs, resource, now)
        * research_bonus
    )


def gather_tick(tasks: List[Task], nodes: List[ResourceNode], elapsed_ms: int, buffs: ActiveBuffs,
                civilization: Optional[Civilization], now: int) -> GatherOutcome:
    """Advance every gather task by `elapsed_ms`.

    A node never yields more than it holds. Gather tasks whose node is gone,
    depleted or unworked are reported as finished. Inputs are not mutated.
    """
    outcome = GatherOutcome()
    by_node = {t.payload.get("resource_node_id"): t for t in tasks if t.kind == GATHER}
    seen = set()

    for node in nodes:
        task = by_node.get(node.id)
        workers = len(task.payload.get("villager_ids", [])) if task else 0
        if task is None or workers == 0:
            if task:
                outcome.finished_task_ids.append(task.id)
            outcome.nodes.append(node)
            seen.add(node.id)
            continue

        seen.add(node.id)
        wanted = gather_rate(node.kind, buffs, civilization, now) / 1000 * max(0, elapsed_ms) * workers
        taken = min(node.amount, wanted)
        if taken > 0:
            outcome.yields[node.kind] = outcome.yields.get(node.kind, 0.0) + taken
        remaining = node.amount - taken
        if remaining <= 0:
            outcome.depleted.append(node)
            outcome.finished_task_ids.append(task.id)
        else:
            outcome.nodes.append(ResourceNode(node.id, node.kind, node.position, remaining))

    for node_id, task in by_node.items():
        if node_id not in seen:
            outcome.finished_task_ids.append(task.id)
    return outcome
