"""Display names for villagers, soldiers and buildings, and civilization rotation."""

import random
from typing import Dict, List, Optional, Sequence

from .models import Civilization


class NameAllocator:
    """Hands out cosmetic names from shuffled pools.

    Each pool is shuffled once when the allocator is built. Once a pool
    runs dry the allocator falls back to numbered names. Logic never
    depends on the names it returns.
    """

    def __init__(self, pools: Optional[Dict[str, Sequence[str]]] = None, rng=None):
        if pools is None:
            from .content import NAME_POOLS
            pools = NAME_POOLS
        self.rng = rng or random.Random()
        self._source = {kind: list(names) for kind, names in pools.items()}
        self.reset()

    def reset(self):
        """Reshuffle every pool and start handing out names from the top."""
        self.pools: Dict[str, List[str]] = {}
        for kind, names in self._source.items():
            shuffled = list(names)
            self.rng.shuffle(shuffled)
            self.pools[kind] = shuffled
        self.indices = {kind: 0 for kind in self.pools}
        self.fallback_counts = {kind: 0 for kind in self.pools}

    def allocate(self, kind: str, count: int = 1) -> List[str]:
        """Get `count` names of the given kind."""
        pool = self.pools.setdefault(kind, [])
        self.indices.setdefault(kind, 0)
        self.fallback_counts.setdefault(kind, 0)

        names = []
        for _ in range(count):
            index = self.indices[kind]
            if index < len(pool):
                names.append(pool[index])
                self.indices[kind] += 1
            else:
                self.fallback_counts[kind] += 1
                names.append(f"A New {kind.capitalize()} #{self.fallback_counts[kind]}")
        return names

    def one(self, kind: str) -> str:
        return self.allocate(kind, 1)[0]


class CivilizationRoster:
    """Rotates through the predefined civilizations for new games."""

    def __init__(self, civilizations: Optional[Sequence[dict]] = None):
        if civilizations is None:
            from .content import CIVILIZATIONS
            civilizations = CIVILIZATIONS
        self.civilizations = list(civilizations)
        self.index = 0

    def next(self) -> Civilization:
        data = self.civilizations[self.index % len(self.civilizations)]
        self.index += 1
        return Civilization(**data)

    def reset(self):
        self.index = 0
