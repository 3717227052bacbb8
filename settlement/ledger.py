"""Resource ledger: affordability checks and delta arithmetic."""

import math
from typing import Dict, List, Mapping, Optional

from .config import DEMOLITION_REFUND_RATE
from .models import ResourceDeltas, Resources


class ResourceLedger:
    """Answers affordability questions and applies resource deltas.

    The ledger never re-validates a delta. Callers check `can_afford`
    first; `apply_delta` only accumulates and floors at zero.
    """

    @staticmethod
    def can_afford(resources: Mapping[str, int], cost: Optional[Mapping[str, int]],
                   multiplier: int = 1, unlimited: bool = False) -> bool:
        """Check that every resource in `cost` is covered `multiplier` times."""
        if unlimited or not cost:
            return True
        return not ResourceLedger.missing(resources, cost, multiplier)

    @staticmethod
    def missing(resources: Mapping[str, int], cost: Optional[Mapping[str, int]],
                multiplier: int = 1) -> List[str]:
        """Resource kinds that fall short of the cost, in cost order."""
        if not cost:
            return []
        return [
            kind for kind, amount in cost.items()
            if resources.get(kind, 0) < (amount or 0) * multiplier
        ]

    @staticmethod
    def shortfall(resources: Mapping[str, int], cost: Mapping[str, int]) -> Dict[str, int]:
        """How much more of each short resource is needed."""
        return {
            kind: (amount or 0) - resources.get(kind, 0)
            for kind, amount in cost.items()
            if resources.get(kind, 0) < (amount or 0)
        }

    @staticmethod
    def cost_delta(cost: Optional[Mapping[str, int]], multiplier: int = 1) -> ResourceDeltas:
        """Negative delta that pays for `cost` times `multiplier`."""
        if not cost:
            return {}
        return {kind: -(amount or 0) * multiplier for kind, amount in cost.items() if amount}

    @staticmethod
    def refund_delta(cost: Optional[Mapping[str, int]],
                     rate: float = DEMOLITION_REFUND_RATE) -> ResourceDeltas:
        """Positive delta returning floor(cost * rate) of each resource."""
        refund = {}
        for kind, amount in (cost or {}).items():
            value = math.floor((amount or 0) * rate)
            if value > 0:
                refund[kind] = value
        return refund

    @staticmethod
    def merge(*deltas: Optional[Mapping[str, int]]) -> ResourceDeltas:
        """Sum several deltas so amounts for the same kind net out."""
        merged: ResourceDeltas = {}
        for delta in deltas:
            for kind, amount in (delta or {}).items():
                merged[kind] = merged.get(kind, 0) + amount
        return merged

    @staticmethod
    def apply_delta(resources: Mapping[str, int], delta: Optional[Mapping[str, int]]) -> Resources:
        """Return a new resource map with `delta` added, floored at zero."""
        updated = dict(resources)
        for kind, amount in (delta or {}).items():
            updated[kind] = max(0, updated.get(kind, 0) + int(amount))
        return updated
