"""Data models for the settlement game."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Tuple, Union

Resources = Dict[str, int]
ResourceDeltas = Dict[str, int]


@dataclass
class Position:
    """A cell on the settlement map."""
    x: int
    y: int

    def key(self) -> Tuple[int, int]:
        return (self.x, self.y)


@dataclass
class Task:
    """A scheduled, time-boxed game effect waiting to be resolved."""
    id: str
    kind: str  # gather, build, train_villager, train_military, research, advance_age, upgrade_building
    start_time: int
    duration: int
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def due_at(self) -> int:
        return self.start_time + self.duration

    def owner_building_id(self) -> Optional[str]:
        """The building instance this task occupies, if any."""
        return self.payload.get("building_id") or self.payload.get("original_building_id")


@dataclass
class BuildingInstance:
    """A constructed building on the map."""
    id: str
    name: str
    position: Position
    hp: int


Buildings = Dict[str, List[BuildingInstance]]


@dataclass
class ResourceNode:
    """A gatherable resource deposit."""
    id: str
    kind: str
    position: Position
    amount: float


@dataclass
class Villager:
    id: str
    name: str
    current_task: Optional[str] = None  # None while idle


@dataclass
class MilitaryUnit:
    id: str
    name: str
    unit_kind: str
    title: str = ""


@dataclass
class Units:
    villagers: List[Villager] = field(default_factory=list)
    military: List[MilitaryUnit] = field(default_factory=list)

    @property
    def population(self) -> int:
        return len(self.villagers) + len(self.military)

    def find_villager(self, villager_id: str) -> Optional[Villager]:
        return next((v for v in self.villagers if v.id == villager_id), None)


@dataclass
class Population:
    """Population accounting for the settlement."""
    current: int
    capacity: int
    pending: int = 0

    @property
    def committed(self) -> int:
        return self.current + self.pending


@dataclass
class InventoryItem:
    """An item instance held in the inventory."""
    id: str
    definition_id: str
    name: str
    description: str
    rarity: str  # Common, Epic, Legendary or Spiritual


@dataclass
class TimedReduction:
    percentage: float
    uses: int


@dataclass
class ResourceBoost:
    resource: str
    multiplier: float
    end_time: int


@dataclass
class ActiveBuffs:
    """Modifier flags currently in effect."""
    build_time_reduction: Optional[TimedReduction] = None
    train_time_reduction: Optional[TimedReduction] = None
    resource_boosts: List[ResourceBoost] = field(default_factory=list)
    permanent_train_time_reduction: float = 0.0
    gather_bonuses: Dict[str, float] = field(default_factory=dict)


@dataclass
class Reward:
    """A single reward granted by an event effect."""
    kind: str  # 'resource', 'item' or 'unit'
    resource: Optional[str] = None
    amount: Union[int, Tuple[int, int]] = 0
    item_id: Optional[str] = None
    count: int = 1


@dataclass
class EventEffects:
    rewards: List[Reward] = field(default_factory=list)
    log: str = ""
    cost: Optional[Dict[str, int]] = None


@dataclass
class GameEventChoice:
    text: str
    success_effects: Optional[EventEffects] = None
    failure_effects: Optional[EventEffects] = None
    cost: Optional[Dict[str, int]] = None
    success_chance: Optional[float] = None  # None means the choice always succeeds


@dataclass
class GameEvent:
    message: str
    choices: List[GameEventChoice] = field(default_factory=list)


@dataclass
class Civilization:
    name: str
    lore: str
    bonus: str
    unique_unit: str = ""
    banner_url: str = ""


@dataclass
class LogEntry:
    id: str
    message: str
    icon: str


@dataclass
class ActionRequest:
    """An action the host wants the core to process."""
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ActionResult:
    """Result of processing an action or resolving a task.

    `error` is exclusive with every other field. The collection fields
    (units, buildings, inventory, buffs, research) are full
    replacements for the host state when present.
    """
    error: Optional[str] = None
    resource_deltas: Optional[ResourceDeltas] = None
    new_tasks: Optional[List[Task]] = None
    updated_tasks: Optional[List[Task]] = None
    cancelled_task_ids: Optional[List[str]] = None
    completed_task_ids: Optional[List[str]] = None
    log: Optional[Tuple[str, str]] = None  # (message, icon)
    activity_status: Optional[str] = None
    new_inventory: Optional[List[InventoryItem]] = None
    updated_units: Optional[Units] = None
    new_buildings: Optional[Buildings] = None
    updated_buffs: Optional[ActiveBuffs] = None
    completed_research: Optional[List[str]] = None
    current_age: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def rejected(cls, message: str) -> "ActionResult":
        return cls(error=message)


@dataclass
class GameState:
    """The full host state tree for one saved game."""
    civilization: Optional[Civilization] = None
    resources: Resources = field(default_factory=dict)
    units: Units = field(default_factory=Units)
    buildings: Buildings = field(default_factory=dict)
    current_age: str = ""
    game_log: List[LogEntry] = field(default_factory=list)
    active_tasks: List[Task] = field(default_factory=list)
    resource_nodes: List[ResourceNode] = field(default_factory=list)
    inventory: List[InventoryItem] = field(default_factory=list)
    active_buffs: ActiveBuffs = field(default_factory=ActiveBuffs)
    completed_research: List[str] = field(default_factory=list)
    unlimited_resources: bool = False
    gather_carry: Dict[str, float] = field(default_factory=dict)
    current_event: Optional[GameEvent] = None
    next_event_at: Optional[int] = None
    last_tick: Optional[int] = None

    def find_building(self, building_id: str) -> Optional[Tuple[str, BuildingInstance]]:
        """Locate a building instance and the kind bucket that owns it."""
        for kind, instances in self.buildings.items():
            for instance in instances:
                if instance.id == building_id:
                    return kind, instance
        return None

    def building_count(self, kind: str) -> int:
        return len(self.buildings.get(kind, []))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-safe plain data."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        """Rebuild a state from `to_dict` output."""
        civ = data.get("civilization")
        units = data.get("units") or {}
        buffs = data.get("active_buffs") or {}
        event = data.get("current_event")

        return cls(
            civilization=Civilization(**civ) if civ else None,
            resources={k: int(v) for k, v in (data.get("resources") or {}).items()},
            units=Units(
                villagers=[Villager(**v) for v in units.get("villagers", [])],
                military=[MilitaryUnit(**m) for m in units.get("military", [])],
            ),
            buildings={
                kind: [_building_from_dict(b) for b in instances]
                for kind, instances in (data.get("buildings") or {}).items()
            },
            current_age=data.get("current_age", ""),
            game_log=[LogEntry(**entry) for entry in data.get("game_log", [])],
            active_tasks=[Task(**task) for task in data.get("active_tasks", [])],
            resource_nodes=[
                ResourceNode(
                    id=node["id"],
                    kind=node["kind"],
                    position=Position(**node["position"]),
                    amount=node["amount"],
                )
                for node in data.get("resource_nodes", [])
            ],
            inventory=[InventoryItem(**item) for item in data.get("inventory", [])],
            active_buffs=_buffs_from_dict(buffs),
            completed_research=list(data.get("completed_research", [])),
            unlimited_resources=bool(data.get("unlimited_resources", False)),
            gather_carry=dict(data.get("gather_carry") or {}),
            current_event=event_from_dict(event) if event else None,
            next_event_at=data.get("next_event_at"),
            last_tick=data.get("last_tick"),
        )


def _building_from_dict(data: Dict[str, Any]) -> BuildingInstance:
    return BuildingInstance(
        id=data["id"],
        name=data["name"],
        position=Position(**data["position"]),
        hp=data["hp"],
    )


def _buffs_from_dict(data: Dict[str, Any]) -> ActiveBuffs:
    build = data.get("build_time_reduction")
    train = data.get("train_time_reduction")
    return ActiveBuffs(
        build_time_reduction=TimedReduction(**build) if build else None,
        train_time_reduction=TimedReduction(**train) if train else None,
        resource_boosts=[ResourceBoost(**b) for b in data.get("resource_boosts", [])],
        permanent_train_time_reduction=data.get("permanent_train_time_reduction", 0.0),
        gather_bonuses=dict(data.get("gather_bonuses") or {}),
    )


def reward_from_dict(data: Dict[str, Any]) -> Reward:
    amount = data.get("amount", 0)
    if isinstance(amount, (list, tuple)):
        amount = (int(amount[0]), int(amount[1]))
    return Reward(
        kind=data["kind"],
        resource=data.get("resource"),
        amount=amount,
        item_id=data.get("item_id"),
        count=data.get("count", 1),
    )


def effects_from_dict(data: Optional[Dict[str, Any]]) -> Optional[EventEffects]:
    if not data:
        return None
    return EventEffects(
        rewards=[reward_from_dict(r) for r in data.get("rewards", [])],
        log=data.get("log", ""),
        cost=data.get("cost"),
    )


def event_from_dict(data: Dict[str, Any]) -> GameEvent:
    return GameEvent(
        message=data["message"],
        choices=[
            GameEventChoice(
                text=choice["text"],
                success_effects=effects_from_dict(choice.get("success_effects")),
                failure_effects=effects_from_dict(choice.get("failure_effects")),
                cost=choice.get("cost"),
                success_chance=choice.get("success_chance"),
            )
            for choice in data.get("choices", [])
        ],
    )
