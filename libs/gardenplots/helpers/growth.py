"""Growth calculation — pure functions deriving a plant's level from elapsed time.

Growth is pull-based: nothing ticks in the background. Every read recomputes
the level from the planting timestamp and the current wall-clock time.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta

from gardenplots.models.catalogue import SeedCatalog, SeedDefinition
from gardenplots.models.garden import Plant


@dataclass(frozen=True)
class GrowthChange:
    """A plant whose stored level moved forward during a refresh."""

    plant_id: str
    previous_level: int
    new_level: int


def current_level(planted_at: datetime, now: datetime, seed: SeedDefinition) -> int:
    """Discrete growth level in [0, seed.harvest_level] after `now - planted_at`."""
    elapsed = max(0.0, (now - planted_at).total_seconds())
    level = math.floor(elapsed / seed.level_duration_seconds)
    return min(max(level, 0), seed.harvest_level)


def effective_level(plant: Plant, seed: SeedDefinition, now: datetime) -> int:
    """The derived level, never lower than what is already stored."""
    return max(plant.grow_level, current_level(plant.planted_at, now, seed))


def is_ready_for_harvest(plant: Plant, seed: SeedDefinition, now: datetime) -> bool:
    """A plant is harvestable once it reaches its seed's harvest level."""
    if plant.was_harvested:
        return False
    return effective_level(plant, seed, now) >= seed.harvest_level


def time_remaining_to_next_level(
    plant: Plant, seed: SeedDefinition, now: datetime
) -> timedelta | None:
    """Time until the next level, or None once the harvest level is reached."""
    level = effective_level(plant, seed, now)
    if level >= seed.harvest_level:
        return None
    next_at = plant.planted_at + timedelta(
        seconds=(level + 1) * seed.level_duration_seconds
    )
    return max(next_at - now, timedelta(0))


def refresh_growth(
    plants: Mapping[str, Plant], catalog: SeedCatalog, now: datetime
) -> list[GrowthChange]:
    """Bring every unharvested plant's stored level up to date, in place.

    Returns the plants whose level increased. Harvested plants and plants
    referencing an unknown seed are left untouched.
    """
    changes: list[GrowthChange] = []
    for plant_id, plant in plants.items():
        if plant.was_harvested:
            continue
        seed = catalog.definition(plant.seed_id)
        if seed is None:
            continue
        new_level = current_level(plant.planted_at, now, seed)
        if new_level > plant.grow_level:
            changes.append(GrowthChange(plant_id, plant.grow_level, new_level))
            plant.grow_level = new_level
    return changes
