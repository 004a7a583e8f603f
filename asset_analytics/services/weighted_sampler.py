# asset_analytics/services/weighted_sampler.py
"""
WeightedSampler: categorical draws over an ordered cumulative-probability table.

All randomness in the engine flows through one sampler per request. Passing a
seeded random.Random makes every dashboard response reproducible; leaving
RANDOM_SEED unset keeps the "simulated live data" behaviour.
"""

import random
from typing import Optional, Sequence, Tuple, TypeVar

from asset_analytics.config import settings

T = TypeVar("T")

SEVERITIES = ("low", "medium", "high", "critical")

# (label, probability) tables: listed order is the cumulative order
SEVERITY_WEIGHTS = (("low", 0.5), ("medium", 0.3), ("high", 0.15), ("critical", 0.05))
ASSET_SEVERITY_WEIGHTS = (("low", 0.6), ("medium", 0.25), ("high", 0.12), ("critical", 0.03))
VIOLATION_STATUS_WEIGHTS = (
    ("active", 0.05), ("investigating", 0.1), ("resolved", 0.8), ("false_positive", 0.05),
)
ALERT_STATUS_WEIGHTS = (
    ("new", 0.1), ("acknowledged", 0.3), ("investigating", 0.15), ("resolved", 0.45),
)
RISK_BUCKET_WEIGHTS = ((25, 0.4), (50, 0.35), (75, 0.2), (100, 0.05))
COMPLIANCE_LEVEL_WEIGHTS = (("High", 0.15), ("Medium", 0.425), ("Low", 0.425))


class WeightedSampler:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def sample(self, weights: Sequence[Tuple[T, float]]) -> T:
        """
        Return the first label whose cumulative weight exceeds one uniform draw.
        Falls back to the last label when the weights sum below the draw.
        """
        if not weights:
            raise ValueError("weights must not be empty")
        draw = self.rng.random()
        cumulative = 0.0
        for label, probability in weights:
            cumulative += probability
            if draw < cumulative:
                return label
        return weights[-1][0]

    def choice(self, items: Sequence[T]) -> T:
        return items[self.rng.randrange(len(items))]

    def chance(self, probability: float) -> bool:
        return self.rng.random() < probability

    def randint(self, low: int, high: int) -> int:
        """Inclusive on both ends."""
        return self.rng.randint(low, high)

    def uniform(self, low: float, high: float) -> float:
        return self.rng.uniform(low, high)

    def jitter(self, spread: float) -> float:
        """Uniform value in [-spread/2, spread/2)."""
        return (self.rng.random() - 0.5) * spread

    def subset(self, items: Sequence[T], count: int) -> list[T]:
        return self.rng.sample(list(items), min(count, len(items)))


def get_sampler() -> WeightedSampler:
    """FastAPI dependency: a fresh sampler per request, seeded from settings."""
    if settings.RANDOM_SEED is None:
        return WeightedSampler()
    return WeightedSampler(random.Random(settings.RANDOM_SEED))
