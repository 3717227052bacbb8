"""Read-only catalog of building, unit, research, age and item definitions."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Optional

from .models import GameEvent, event_from_dict


@dataclass
class UpgradePath:
    target: str  # building kind this one upgrades into
    cost: Dict[str, int]
    time: int  # seconds
    research_required: Optional[str] = None


@dataclass
class BuildingConfig:
    id: str
    name: str
    description: str
    cost: Dict[str, int]
    build_time: int  # seconds
    hp: int
    unlocked_in_age: str
    is_unique: bool = False
    build_limit: int = 0  # 0 means unlimited
    population_capacity: int = 0
    can_train_units: bool = False
    is_upgrade_only: bool = False
    required_building_id: Optional[str] = None
    upgrades_to: List[UpgradePath] = field(default_factory=list)
    is_active: bool = True
    order: int = 0

    @property
    def limit(self) -> int:
        """Effective build limit; unique buildings are capped at one."""
        return 1 if self.is_unique else self.build_limit

    def upgrade_path(self, target: str) -> Optional[UpgradePath]:
        return next((p for p in self.upgrades_to if p.target == target), None)


@dataclass
class UnitConfig:
    id: str
    name: str
    description: str
    cost: Dict[str, int]
    train_time: int  # seconds
    hp: int
    required_building: str
    population_cost: int = 1
    required_building_ids: List[str] = field(default_factory=list)
    required_research_ids: List[str] = field(default_factory=list)
    is_active: bool = True
    order: int = 0


@dataclass
class ResearchConfig:
    id: str
    name: str
    description: str
    cost: Dict[str, int]
    research_time: int  # seconds
    tree_id: str = ""
    prerequisites: List[str] = field(default_factory=list)
    required_building_id: Optional[str] = None
    effects: List[Dict[str, Any]] = field(default_factory=list)
    is_active: bool = True
    order: int = 0


@dataclass
class AgeConfig:
    id: str
    name: str
    description: str
    is_active: bool = True
    order: int = 0


@dataclass
class ItemDefinition:
    id: str
    name: str
    description: str
    rarity: str
    order: int = 0


CATALOG_KINDS = ("age", "building", "unit", "research", "item")


class Catalog:
    """Indices over the static game definitions."""

    def __init__(self, ages: Iterable[AgeConfig] = (), buildings: Iterable[BuildingConfig] = (),
                 units: Iterable[UnitConfig] = (), research: Iterable[ResearchConfig] = (),
                 items: Iterable[ItemDefinition] = (), events: Iterable[GameEvent] = ()):
        self.ages = sorted(ages, key=lambda a: a.order)
        self.buildings = {b.id: b for b in sorted(buildings, key=lambda b: b.order)}
        self.units = {u.id: u for u in sorted(units, key=lambda u: u.order)}
        self.research = {r.id: r for r in sorted(research, key=lambda r: r.order)}
        self.items = {i.id: i for i in items}
        self.events = list(events)

    @classmethod
    def default(cls) -> "Catalog":
        """The catalog shipped with the game."""
        from . import content
        return cls.from_entries(content.default_entries(), content.PREDEFINED_EVENTS)

    @classmethod
    def from_entries(cls, entries: Dict[str, List[Dict[str, Any]]],
                     events: Iterable[Dict[str, Any]] = ()) -> "Catalog":
        """Build a catalog from plain dict rows keyed by catalog kind."""
        return cls(
            ages=[AgeConfig(**row) for row in entries.get("age", [])],
            buildings=[_building_from_row(row) for row in entries.get("building", [])],
            units=[UnitConfig(**row) for row in entries.get("unit", [])],
            research=[ResearchConfig(**row) for row in entries.get("research", [])],
            items=[ItemDefinition(**row) for row in entries.get("item", [])],
            events=[event_from_dict(e) for e in events],
        )

    def to_entries(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "age": [asdict(a) for a in self.ages],
            "building": [asdict(b) for b in self.buildings.values()],
            "unit": [asdict(u) for u in self.units.values()],
            "research": [asdict(r) for r in self.research.values()],
            "item": [asdict(i) for i in self.items.values()],
        }

    def building(self, building_id: str) -> Optional[BuildingConfig]:
        return self.buildings.get(building_id)

    def unit(self, unit_id: str) -> Optional[UnitConfig]:
        return self.units.get(unit_id)

    def research_item(self, research_id: str) -> Optional[ResearchConfig]:
        return self.research.get(research_id)

    def item(self, item_id: str) -> Optional[ItemDefinition]:
        return self.items.get(item_id)

    def building_name(self, building_id: str) -> str:
        config = self.buildings.get(building_id)
        return config.name if config else building_id

    def research_name(self, research_id: str) -> str:
        config = self.research.get(research_id)
        return config.name if config else research_id

    def active_ages(self) -> List[AgeConfig]:
        return [age for age in self.ages if age.is_active]

    def age_index(self, age_name: str) -> int:
        """Position of an age among the active ages, or -1."""
        for index, age in enumerate(self.active_ages()):
            if age.name == age_name:
                return index
        return -1

    def next_age(self, age_name: str) -> Optional[AgeConfig]:
        """The active age following `age_name`, or None at the end."""
        ages = self.active_ages()
        index = self.age_index(age_name)
        if index == -1 or index + 1 >= len(ages):
            return None
        return ages[index + 1]

    def is_unlocked(self, building: BuildingConfig, age_name: str) -> bool:
        unlock_index = self.age_index(building.unlocked_in_age)
        return unlock_index != -1 and unlock_index <= self.age_index(age_name)

    def population_capacity(self, buildings: Dict[str, list], exclude_id: Optional[str] = None) -> int:
        """Total housing provided by `buildings`, optionally ignoring one instance."""
        capacity = 0
        for kind, instances in buildings.items():
            config = self.buildings.get(kind)
            if not config or not config.population_capacity:
                continue
            count = sum(1 for b in instances if b.id != exclude_id)
            capacity += config.population_capacity * count
        return capacity


def _building_from_row(row: Dict[str, Any]) -> BuildingConfig:
    data = dict(row)
    data["upgrades_to"] = [UpgradePath(**path) for path in data.get("upgrades_to", [])]
    return BuildingConfig(**data)
