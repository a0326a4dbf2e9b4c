"""Seed catalogue — plantable seed types and their economic/growth parameters."""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field


class SeedDefinition(BaseModel):
    """A plantable seed type. Immutable once constructed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(gt=0)
    name: str
    icon_ref: str = Field(default="", alias="icon")
    cost: int = Field(ge=0)  # 0 = free, always unlocked
    reward: int = Field(gt=0)
    growth_time_seconds: float = Field(gt=0, alias="growthTime")
    harvest_level: int = Field(gt=0, default=10, alias="harvestLevel")
    image_by_level: Mapping[int, str] = Field(
        default_factory=dict, alias="imageVariations"
    )

    @property
    def is_free(self) -> bool:
        return self.cost == 0

    @property
    def level_duration_seconds(self) -> float:
        """Seconds needed to advance one growth level."""
        return self.growth_time_seconds / self.harvest_level


class SeedCatalog:
    """Read-only table of seed definitions, ordered by insertion.

    Built once at startup; there are no setters.
    """

    def __init__(self, seeds: Iterable[SeedDefinition]) -> None:
        table: dict[int, SeedDefinition] = {}
        for seed in seeds:
            if seed.id in table:
                raise ValueError(f"Duplicate seed id: {seed.id}")
            table[seed.id] = seed
        self._seeds = MappingProxyType(table)

    def __contains__(self, seed_id: object) -> bool:
        return seed_id in self._seeds

    def __len__(self) -> int:
        return len(self._seeds)

    def definition(self, seed_id: int) -> SeedDefinition | None:
        """Look up a seed by id, or None if unknown."""
        return self._seeds.get(seed_id)

    def all(self) -> tuple[SeedDefinition, ...]:
        """All seeds in catalogue order."""
        return tuple(self._seeds.values())

    def image_for_level(self, seed_id: int, level: int) -> str:
        """Return the image for the highest defined level <= `level`.

        Falls back to the seed icon when the seed defines no level images,
        and to the lowest defined image when `level` is below all of them.

        Raises:
            KeyError: If the seed id is unknown.
        """
        seed = self._seeds.get(seed_id)
        if seed is None:
            raise KeyError(f"Unknown seed id: {seed_id}")
        if not seed.image_by_level:
            return seed.icon_ref
        defined = sorted(seed.image_by_level)
        candidates = [lvl for lvl in defined if lvl <= level]
        chosen = candidates[-1] if candidates else defined[0]
        return seed.image_by_level[chosen]


# --- Default catalogue ---

_ASSET_BASE = "https://topia-dev-test.s3.us-east-1.amazonaws.com/bounty"


def _images(name: str, stages: dict[int, int]) -> dict[int, str]:
    """level -> stage image, e.g. {0: 0, 3: 1} -> {0: potato-0.png, 3: potato-1.png}."""
    return {level: f"{_ASSET_BASE}/{name}-{stage}.png" for level, stage in stages.items()}


DEFAULT_SEEDS: tuple[SeedDefinition, ...] = (
    SeedDefinition(
        id=1,
        name="Potato",
        icon_ref=f"{_ASSET_BASE}/potato-icon.png",
        cost=0,
        reward=2,
        growth_time_seconds=60 * 4,
        harvest_level=3,
        image_by_level=_images("potato", {0: 0, 1: 1, 2: 2, 3: 3}),
    ),
    SeedDefinition(
        id=2,
        name="Wheat",
        icon_ref=f"{_ASSET_BASE}/wheat-icon.png",
        cost=0,
        reward=3,
        growth_time_seconds=60 * 8,
        harvest_level=5,
        image_by_level=_images("wheat", {0: 0, 1: 1, 3: 2, 5: 3}),
    ),
    SeedDefinition(
        id=3,
        name="Tomato",
        icon_ref=f"{_ASSET_BASE}/tomato-icon.png",
        cost=5,
        reward=8,
        growth_time_seconds=60 * 12,
        harvest_level=7,
        image_by_level=_images("tomato", {0: 0, 1: 1, 4: 2, 7: 3}),
    ),
    SeedDefinition(
        id=4,
        name="Pumpkin",
        icon_ref=f"{_ASSET_BASE}/pumpkin-icon.png",
        cost=10,
        reward=25,
        growth_time_seconds=60 * 16,
        harvest_level=10,
        image_by_level=_images("pumpkin", {0: 0, 2: 1, 4: 2, 7: 3, 10: 4}),
    ),
)

SEED_CATALOG = SeedCatalog(DEFAULT_SEEDS)
