"""Persisted garden models — the per-visitor aggregate and per-plot ownership marker.

Field names are snake_case in Python and camelCase on the wire.
Always serialize with `model_dump(by_alias=True, mode="json")` for storage.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

GRID_SIZE = 4
SQUARE_COUNT = GRID_SIZE * GRID_SIZE
STARTING_COINS = 10

# Keys a stored visitor document must carry to be considered a garden state
VISITOR_DATA_KEYS = frozenset(
    {"coinsAvailable", "totalCoinsEarned", "ownedPlot", "seedsPurchased", "plants"}
)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)


class Plant(_WireModel):
    """A planted seed occupying one plot square."""

    planted_at: datetime = Field(alias="dateDropped")
    seed_id: int = Field(alias="seedId", gt=0)
    grow_level: int = Field(default=0, alias="growLevel", ge=0)
    square_index: int = Field(alias="squareIndex", ge=0, lt=SQUARE_COUNT)
    was_harvested: bool = Field(default=False, alias="wasHarvested")


class OwnedPlot(_WireModel):
    """A visitor's claimed plot and its grid of squares."""

    plot_asset_id: str = Field(alias="plotAssetId")
    claimed_at: datetime = Field(alias="claimedDate")
    # square index -> plant id, or None when empty
    squares: list[str | None] = Field(
        default_factory=lambda: [None] * SQUARE_COUNT, alias="plotSquares"
    )

    @field_validator("squares", mode="before")
    @classmethod
    def _squares_from_mapping(cls, value: Any) -> Any:
        """Accept the `{index: plantId}` mapping form older documents use."""
        if isinstance(value, dict):
            squares: list[str | None] = [None] * SQUARE_COUNT
            for index, plant_id in value.items():
                squares[int(index)] = plant_id
            return squares
        return value

    @field_validator("squares")
    @classmethod
    def _squares_fill_grid(cls, value: list[str | None]) -> list[str | None]:
        if len(value) != SQUARE_COUNT:
            raise ValueError(f"plot must have exactly {SQUARE_COUNT} squares")
        return value

    def is_empty(self, square_index: int) -> bool:
        return self.squares[square_index] is None


class SeedPurchase(_WireModel):
    """Record of a paid seed being unlocked."""

    id: int
    purchased_at: datetime = Field(alias="datePurchased")


class VisitorGardenState(_WireModel):
    """Everything persisted for one visitor: economy, plot and plants."""

    coins_available: int = Field(default=STARTING_COINS, alias="coinsAvailable", ge=0)
    total_coins_earned: int = Field(default=0, alias="totalCoinsEarned", ge=0)
    owned_plot: OwnedPlot | None = Field(default=None, alias="ownedPlot")
    seeds_purchased: dict[int, SeedPurchase] = Field(
        default_factory=dict, alias="seedsPurchased"
    )
    plants: dict[str, Plant] = Field(default_factory=dict)  # asset id -> Plant

    def active_plants(self) -> dict[str, Plant]:
        """Plants that have not been harvested yet."""
        return {pid: p for pid, p in self.plants.items() if not p.was_harvested}

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class PlotOwnership(_WireModel):
    """Ownership marker stored against a plot asset, shared by all visitors."""

    owner_id: str = Field(alias="ownerId")
    owner_name: str = Field(default="", alias="ownerName")
    claimed_at: datetime = Field(alias="claimedDate")
