"""Plot rules — pure functions over a visitor's garden state.

Each function takes the loaded VisitorGardenState, validates the request,
and applies its changes only when every check passes.

Square lifecycle: empty -> occupied (growing) -> ready -> empty (harvested).
Harvest is the only way out of a square; plants never wither.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from gardenplots import (
    SQUARE_COUNT,
    OwnedPlot,
    Plant,
    PlotOwnership,
    SeedCatalog,
    SeedDefinition,
    VisitorGardenState,
    effective_level,
)

from services.garden.ledger import harvest_reward, is_seed_unlocked
from services.garden.results import ClaimResult, HarvestResult, PlantResult, Rejection

logger = logging.getLogger(__name__)


class SquareStatus(StrEnum):
    EMPTY = "empty"
    GROWING = "growing"
    READY = "ready"


@dataclass(frozen=True)
class SquareView:
    """Display status of one plot square."""

    index: int
    status: SquareStatus
    plant_id: str | None = None
    seed_id: int | None = None
    grow_level: int = 0


def claim_plot(
    state: VisitorGardenState,
    plot_asset_id: str,
    claimant_id: str,
    ownership: PlotOwnership | None,
    now: datetime,
) -> ClaimResult:
    """Give the visitor a fresh, empty plot.

    `ownership` is the shared marker already recorded for the plot asset,
    if any. A visitor owns at most one plot, and a plot belongs to at most
    one visitor.
    """
    result = ClaimResult()

    if state.owned_plot is not None:
        result.reject(
            Rejection.ALREADY_OWNS_PLOT,
            "You already own a plot. Each player can only claim one plot.",
        )
        return result

    if ownership is not None and ownership.owner_id != claimant_id:
        owner = ownership.owner_name or "another player"
        result.reject(Rejection.PLOT_OWNED_BY_OTHER, f"This plot is already owned by {owner}.")
        return result

    state.owned_plot = OwnedPlot(plot_asset_id=plot_asset_id, claimed_at=now)
    result.plot = state.owned_plot
    return result


def plant_seed(
    state: VisitorGardenState,
    square_index: int,
    seed: SeedDefinition,
    plant_id: str,
    now: datetime,
) -> PlantResult:
    """Plant `seed` into an empty square of the visitor's plot.

    Paid seeds must have been purchased first. Planting never charges coins:
    a purchase unlocks the seed for every later planting.
    """
    result = PlantResult(plant_id=plant_id)
    plot = state.owned_plot

    if plot is None:
        result.reject(Rejection.NO_PLOT, "You need to claim a plot before planting.")
        return result

    if not 0 <= square_index < SQUARE_COUNT:
        result.reject(
            Rejection.INVALID_SQUARE,
            f"Square {square_index} does not exist. Choose a square from 0 to {SQUARE_COUNT - 1}.",
        )
        return result

    if not plot.is_empty(square_index):
        result.reject(Rejection.SQUARE_OCCUPIED, f"Square {square_index} already has a plant.")
        return result

    if not is_seed_unlocked(state, seed):
        result.reject(
            Rejection.SEED_LOCKED,
            f"The {seed.name} seed is locked. Purchase it for {seed.cost} coins first.",
        )
        return result

    if plant_id in state.plants:
        raise ValueError(f"Plant id '{plant_id}' is already in use")

    plant = Plant(planted_at=now, seed_id=seed.id, grow_level=0, square_index=square_index)
    state.plants[plant_id] = plant
    plot.squares[square_index] = plant_id
    result.plant = plant
    result.plot_asset_id = plot.plot_asset_id
    return result


def harvest_plant(
    state: VisitorGardenState,
    plant_id: str,
    catalog: SeedCatalog,
    now: datetime,
) -> HarvestResult:
    """Harvest a fully grown plant: pay its reward and free its square.

    The plant record stays in `plants` with `was_harvested` set, so a
    repeated harvest is reported as such rather than as not found.
    """
    result = HarvestResult()
    plant = state.plants.get(plant_id)

    if plant is None:
        result.reject(Rejection.NOT_FOUND, f"Plant with ID {plant_id} not found in your garden.")
        return result

    if plant.was_harvested:
        result.reject(Rejection.ALREADY_HARVESTED, "This plant has already been harvested.")
        return result

    seed = catalog.definition(plant.seed_id)
    if seed is None:
        result.reject(Rejection.UNKNOWN_SEED, f"Invalid seedId in plant data: {plant.seed_id}")
        return result

    level = effective_level(plant, seed, now)
    if level < seed.harvest_level:
        result.reject(
            Rejection.NOT_READY,
            "This plant is not ready for harvest yet. "
            f"Current growth level: {level}/{seed.harvest_level}",
        )
        return result

    plant.grow_level = level
    plant.was_harvested = True
    plot = state.owned_plot
    if plot is not None and plot.squares[plant.square_index] == plant_id:
        plot.squares[plant.square_index] = None
    else:
        logger.warning("Harvested plant %s was not on its recorded square", plant_id)

    result.plant = plant
    result.reward = harvest_reward(state, seed)
    result.coins_available = state.coins_available
    result.total_coins_earned = state.total_coins_earned
    return result


def clear_all(state: VisitorGardenState) -> list[str]:
    """Drop every plant record and free every square. Economy is untouched.

    Returns the ids of plants that were still in the world (unharvested).
    """
    still_planted = list(state.active_plants())
    state.plants = {}
    if state.owned_plot is not None:
        state.owned_plot.squares = [None] * SQUARE_COUNT
    return still_planted


def describe_squares(
    state: VisitorGardenState, catalog: SeedCatalog, now: datetime
) -> list[SquareView]:
    """Per-square status of the visitor's plot; empty list without a plot."""
    plot = state.owned_plot
    if plot is None:
        return []

    views: list[SquareView] = []
    for index, plant_id in enumerate(plot.squares):
        plant = state.plants.get(plant_id) if plant_id is not None else None
        if plant is None:
            views.append(SquareView(index=index, status=SquareStatus.EMPTY))
            continue
        seed = catalog.definition(plant.seed_id)
        level = effective_level(plant, seed, now) if seed is not None else plant.grow_level
        ready = seed is not None and level >= seed.harvest_level
        views.append(
            SquareView(
                index=index,
                status=SquareStatus.READY if ready else SquareStatus.GROWING,
                plant_id=plant_id,
                seed_id=plant.seed_id,
                grow_level=level,
            )
        )
    return views
