"""GardenService — the garden use-cases.

Every mutating use-case runs the same straight line:
load -> rule -> save -> presentation side effects.
Rule rejections return before anything is saved. Side effects run after
the save and are best effort: their failures are logged and swallowed.
"""

import asyncio
import logging
import uuid
import weakref
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

from gardenplots import (
    SEED_CATALOG,
    ConcurrentUpdateError,
    LabelPlot,
    Particle,
    PlotOwnership,
    RemoveAssets,
    SeedCatalog,
    SeedDefinition,
    SpawnPlant,
    Toast,
    UpdatePlantImage,
    VisitorGardenState,
    effective_level,
    is_ready_for_harvest,
    refresh_growth,
    square_offset,
    time_remaining_to_next_level,
)

from services.garden import ledger, rules
from services.garden.credentials import Credentials
from services.garden.gateway import PresentationGateway
from services.garden.results import Rejection, UseCaseResult
from services.garden.store import GardenStateStore, LoadedState

logger = logging.getLogger(__name__)

HOME_INSTRUCTIONS = """\
# Welcome to the Garden Game!

Plant seeds, watch them grow and harvest them to earn coins.

## How to Play
1. **Claim a Plot**: find an empty plot and claim it to start your garden.
2. **Purchase Seeds**: free seeds are always available; spend coins to unlock the rest.
3. **Plant Seeds**: pick a seed and an empty square on your plot.
4. **Watch Plants Grow**: plants keep growing while you are away.
5. **Harvest Plants**: harvest fully grown plants to earn coins.
6. **Unlock More Seeds**: use your earnings to unlock rarer seeds.

Happy gardening!
"""


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_asset_id() -> str:
    return uuid.uuid4().hex


class GardenService:
    """Implements claim/purchase/plant/harvest and the read use-cases.

    Mutations for one visitor are serialised in-process; the store's
    revision check covers requests handled by other processes.
    """

    def __init__(
        self,
        store: GardenStateStore,
        gateway: PresentationGateway,
        catalog: SeedCatalog = SEED_CATALOG,
        *,
        public_url: str = "",
        clock: Callable[[], datetime] = utc_now,
        asset_ids: Callable[[], str] = new_asset_id,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._catalog = catalog
        self._public_url = public_url
        self._clock = clock
        self._asset_ids = asset_ids
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    @property
    def catalog(self) -> SeedCatalog:
        return self._catalog

    def _lock_for(self, visitor_ref: str) -> asyncio.Lock:
        lock = self._locks.get(visitor_ref)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[visitor_ref] = lock
        return lock

    async def _side_effect(self, description: str, effect: Awaitable[None]) -> None:
        """Await a presentation call; log and swallow any failure."""
        try:
            await effect
        except Exception:
            logger.exception("Side effect failed: %s", description)

    async def _save_growth(self, creds: Credentials, loaded: LoadedState) -> None:
        """Persist levels advanced while reading. Losing the race is not an error:
        levels are recomputed from the planting time on every read.
        """
        try:
            await self._store.save(creds.visitor_ref, loaded.state, loaded.revision, "plantsGrown")
        except ConcurrentUpdateError:
            logger.warning("Skipped growth save for %s: document changed meanwhile", creds.visitor_ref)

    # --- Payload builders ---

    def _available_seeds(self, state: VisitorGardenState) -> list[dict[str, Any]]:
        return [
            {
                "id": seed.id,
                "name": seed.name,
                "icon": seed.icon_ref,
                "cost": seed.cost,
                "reward": seed.reward,
                "growthTime": seed.growth_time_seconds,
                "harvestLevel": seed.harvest_level,
                "isLocked": not ledger.is_seed_unlocked(state, seed),
            }
            for seed in self._catalog.all()
        ]

    def _square_payload(self, state: VisitorGardenState, now: datetime) -> list[dict[str, Any]]:
        return [
            {
                "index": view.index,
                "status": str(view.status),
                "plantId": view.plant_id,
                "seedId": view.seed_id,
                "growLevel": view.grow_level,
            }
            for view in rules.describe_squares(state, self._catalog, now)
        ]

    def _seed_or_reject(self, seed_id: int) -> SeedDefinition | UseCaseResult:
        seed = self._catalog.definition(seed_id)
        if seed is None:
            return UseCaseResult.reject(Rejection.UNKNOWN_SEED, f"Invalid seedId: {seed_id}")
        return seed

    # --- Use-cases ---

    async def get_state(self, creds: Credentials, *, is_admin: bool = False) -> UseCaseResult:
        """Full game state. Brings stored growth levels up to date as it reads."""
        async with self._lock_for(creds.visitor_ref):
            loaded = await self._store.load(creds.visitor_ref)
            now = self._clock()
            changes = refresh_growth(loaded.state.plants, self._catalog, now)
            if changes:
                await self._save_growth(creds, loaded)

        state = loaded.state
        return UseCaseResult.success(
            visitorData=state.to_wire(),
            availableSeeds=self._available_seeds(state),
            squares=self._square_payload(state, now),
            isAdmin=is_admin,
        )

    async def claim_plot(self, creds: Credentials) -> UseCaseResult:
        """Claim the plot asset in `creds.asset_id` for the calling visitor."""
        if not creds.asset_id:
            return UseCaseResult.reject(Rejection.NOT_FOUND, "Missing assetId for the plot to claim.")

        async with self._lock_for(creds.visitor_ref):
            loaded = await self._store.load(creds.visitor_ref)
            now = self._clock()
            ownership = await self._store.plot_owner(creds.plot_ref)

            result = rules.claim_plot(loaded.state, creds.asset_id, creds.profile_id, ownership, now)
            if not result.ok:
                logger.warning("Claim of %s by %s rejected: %s", creds.asset_id, creds.profile_id, result.errors)
                return UseCaseResult.rejected(result)

            if ownership is None:
                marker = PlotOwnership(
                    owner_id=creds.profile_id, owner_name=creds.display_name, claimed_at=now
                )
                winner = await self._store.mark_plot_owner(creds.plot_ref, marker)
                if winner.owner_id != creds.profile_id:
                    owner = winner.owner_name or "another player"
                    return UseCaseResult.reject(
                        Rejection.PLOT_OWNED_BY_OTHER, f"This plot is already owned by {owner}."
                    )

            await self._store.save(creds.visitor_ref, loaded.state, loaded.revision, "plotClaimed")

        logger.info("Plot %s claimed by %s", creds.asset_id, creds.profile_id)
        owner_name = creds.display_name or "Gardener"
        link = (
            f"{self._public_url}/plot?ownerName={quote(owner_name)}"
            f"&ownerProfileId={quote(creds.profile_id)}"
        )
        await self._side_effect(
            "label plot",
            self._gateway.label_plot(
                creds.url_slug,
                LabelPlot(plot_asset_id=creds.asset_id, text=f"{owner_name}'s Plot", link=link),
            ),
        )
        claimed_at = result.plot.claimed_at if result.plot is not None else now
        return UseCaseResult.success(
            data={"plotAssetId": creds.asset_id, "claimedDate": claimed_at.isoformat()}
        )

    async def purchase_seed(self, creds: Credentials, seed_id: int) -> UseCaseResult:
        """Unlock a paid seed for the visitor."""
        seed = self._seed_or_reject(seed_id)
        if isinstance(seed, UseCaseResult):
            return seed

        async with self._lock_for(creds.visitor_ref):
            loaded = await self._store.load(creds.visitor_ref)
            result = ledger.purchase(loaded.state, seed, self._clock())
            if not result.ok:
                logger.warning("Purchase of %s by %s rejected: %s", seed.name, creds.profile_id, result.errors)
                return UseCaseResult.rejected(result)
            await self._store.save(creds.visitor_ref, loaded.state, loaded.revision, "seedsPurchased")

        logger.info("%s bought %s for %d coins", creds.profile_id, seed.name, seed.cost)
        await self._side_effect(
            "purchase toast",
            self._gateway.toast(
                creds.url_slug,
                Toast(
                    visitor_id=creds.visitor_id,
                    title="Seed Purchased!",
                    text=f"You purchased the {seed.name} seed for {seed.cost} coins!",
                ),
            ),
        )
        return UseCaseResult.success(
            data={"seedId": seed.id, "coinsAvailable": result.coins_available}
        )

    async def plant_seed(self, creds: Credentials, seed_id: int, square_index: int) -> UseCaseResult:
        """Plant a seed on one square of the visitor's plot."""
        seed = self._seed_or_reject(seed_id)
        if isinstance(seed, UseCaseResult):
            return seed

        plant_id = self._asset_ids()
        async with self._lock_for(creds.visitor_ref):
            loaded = await self._store.load(creds.visitor_ref)
            result = rules.plant_seed(loaded.state, square_index, seed, plant_id, self._clock())
            if not result.ok:
                logger.warning("Planting by %s rejected: %s", creds.profile_id, result.errors)
                return UseCaseResult.rejected(result)
            await self._store.save(creds.visitor_ref, loaded.state, loaded.revision, "seedsPlanted")

        offset_x, offset_y = square_offset(square_index)
        await self._side_effect(
            "spawn plant",
            self._gateway.spawn_plant(
                creds.url_slug,
                SpawnPlant(
                    asset_id=plant_id,
                    plot_asset_id=result.plot_asset_id,
                    visitor_id=creds.visitor_id,
                    seed_id=seed.id,
                    square_index=square_index,
                    image_url=self._catalog.image_for_level(seed.id, 0),
                    offset_x=offset_x,
                    offset_y=offset_y,
                ),
            ),
        )
        await self._side_effect(
            "plant particle",
            self._gateway.particle(
                creds.url_slug, Particle(name="Sparkle", duration=3, asset_id=plant_id)
            ),
        )
        await self._side_effect(
            "plant toast",
            self._gateway.toast(
                creds.url_slug,
                Toast(
                    visitor_id=creds.visitor_id,
                    title="Seed Planted!",
                    text=f"You planted a {seed.name} seed. Come back later to see it grow!",
                ),
            ),
        )
        return UseCaseResult.success(
            data={"droppedAssetId": plant_id, "seedId": seed.id, "squareIndex": square_index}
        )

    async def harvest_plant(self, creds: Credentials, plant_id: str) -> UseCaseResult:
        """Harvest a ripe plant for its coin reward and clear it from the world."""
        async with self._lock_for(creds.visitor_ref):
            loaded = await self._store.load(creds.visitor_ref)
            result = rules.harvest_plant(loaded.state, plant_id, self._catalog, self._clock())
            if not result.ok:
                logger.warning("Harvest of %s by %s rejected: %s", plant_id, creds.profile_id, result.errors)
                return UseCaseResult.rejected(result)
            await self._store.save(creds.visitor_ref, loaded.state, loaded.revision, "plantsHarvested")

        logger.info("%s harvested %s for %d coins", creds.profile_id, plant_id, result.reward)
        seed_name = "plant"
        if result.plant is not None:
            seed = self._catalog.definition(result.plant.seed_id)
            seed_name = seed.name if seed is not None else seed_name
        await self._side_effect(
            "harvest particle",
            self._gateway.particle(
                creds.url_slug, Particle(name="Sparkle", duration=5, asset_id=plant_id)
            ),
        )
        await self._side_effect(
            "remove harvested plant",
            self._gateway.remove_assets(
                creds.url_slug, RemoveAssets(asset_ids=[plant_id], reason="harvested")
            ),
        )
        await self._side_effect(
            "harvest toast",
            self._gateway.toast(
                creds.url_slug,
                Toast(
                    visitor_id=creds.visitor_id,
                    title="Plant Harvested!",
                    text=f"You harvested your {seed_name} and earned {result.reward} coins!",
                ),
            ),
        )
        return UseCaseResult.success(
            data={
                "coinsEarned": result.reward,
                "totalCoins": result.total_coins_earned,
                "coinsAvailable": result.coins_available,
            }
        )

    async def update_growth_levels(self, creds: Credentials) -> UseCaseResult:
        """Recompute every plant's level; persist and restyle only what changed."""
        async with self._lock_for(creds.visitor_ref):
            loaded = await self._store.load(creds.visitor_ref)
            changes = refresh_growth(loaded.state.plants, self._catalog, self._clock())
            if changes:
                await self._store.save(
                    creds.visitor_ref, loaded.state, loaded.revision, "plantsGrown"
                )

        for change in changes:
            plant = loaded.state.plants[change.plant_id]
            await self._side_effect(
                f"update image of {change.plant_id}",
                self._gateway.update_plant_image(
                    creds.url_slug,
                    UpdatePlantImage(
                        asset_id=change.plant_id,
                        grow_level=change.new_level,
                        image_url=self._catalog.image_for_level(plant.seed_id, change.new_level),
                    ),
                ),
            )
        return UseCaseResult.success(
            updatedPlants=[
                {"id": c.plant_id, "previousLevel": c.previous_level, "newLevel": c.new_level}
                for c in changes
            ]
        )

    async def remove_all_plants(self, creds: Credentials, *, is_admin: bool) -> UseCaseResult:
        """Admin/testing only: wipe every plant from the visitor's garden."""
        if not is_admin:
            return UseCaseResult.reject(Rejection.NOT_ADMIN, "Only admins can remove all plants.")

        async with self._lock_for(creds.visitor_ref):
            loaded = await self._store.load(creds.visitor_ref)
            removed_count = len(loaded.state.plants)
            if removed_count == 0:
                return UseCaseResult.success(removedCount=0, message="No plants to remove")
            in_world = rules.clear_all(loaded.state)
            await self._store.save(creds.visitor_ref, loaded.state, loaded.revision, "gardenCleared")

        logger.info("Cleared %d plants for %s", removed_count, creds.profile_id)
        if in_world:
            await self._side_effect(
                "remove all plants",
                self._gateway.remove_assets(
                    creds.url_slug, RemoveAssets(asset_ids=in_world, reason="garden cleared")
                ),
            )
        await self._side_effect(
            "clear toast",
            self._gateway.toast(
                creds.url_slug,
                Toast(
                    visitor_id=creds.visitor_id,
                    title="Garden Cleared",
                    text=f"All {removed_count} plants have been removed.",
                ),
            ),
        )
        return UseCaseResult.success(
            removedCount=removed_count, message=f"Successfully removed {removed_count} plants"
        )

    async def plant_details(self, creds: Credentials, plant_id: str) -> UseCaseResult:
        """One plant with its seed, current image and harvest readiness."""
        async with self._lock_for(creds.visitor_ref):
            loaded = await self._store.load(creds.visitor_ref)
            plant = loaded.state.plants.get(plant_id)
            if plant is None:
                return UseCaseResult.reject(Rejection.NOT_FOUND, "Plant not found")
            seed = self._catalog.definition(plant.seed_id)
            if seed is None:
                return UseCaseResult.reject(Rejection.UNKNOWN_SEED, "Seed not found for this plant")

            now = self._clock()
            was_ready = plant.grow_level >= seed.harvest_level
            changes = refresh_growth({plant_id: plant}, self._catalog, now)
            if changes:
                await self._save_growth(creds, loaded)

        ready = is_ready_for_harvest(plant, seed, now)
        if ready and not was_ready:
            await self._side_effect(
                "ready particle",
                self._gateway.particle(
                    creds.url_slug, Particle(name="confetti", duration=5, asset_id=plant_id)
                ),
            )
        remaining = time_remaining_to_next_level(plant, seed, now)
        level = effective_level(plant, seed, now)
        return UseCaseResult.success(
            data={
                "plant": plant.model_dump(by_alias=True, mode="json"),
                "seed": seed.model_dump(by_alias=True, mode="json"),
                "imageUrl": self._catalog.image_for_level(seed.id, level),
                "canHarvest": ready,
                "secondsToNextLevel": remaining.total_seconds() if remaining is not None else None,
            }
        )

    async def plot_details(self, creds: Credentials) -> UseCaseResult:
        """Who owns the plot asset in `creds.asset_id`; full detail for its owner."""
        ownership = await self._store.plot_owner(creds.plot_ref) if creds.asset_id else None
        if ownership is None:
            return UseCaseResult.success(
                data={"hasOwner": False, "ownerId": None, "ownerName": None, "isCurrentUserOwner": False}
            )

        if ownership.owner_id != creds.profile_id:
            return UseCaseResult.success(
                data={
                    "hasOwner": True,
                    "ownerId": ownership.owner_id,
                    "ownerName": ownership.owner_name or "Another Gardener",
                    "isCurrentUserOwner": False,
                }
            )

        loaded = await self._store.load(creds.visitor_ref)
        state = loaded.state
        owned_seeds = [
            seed.model_dump(by_alias=True, mode="json")
            for seed in self._catalog.all()
            if ledger.is_seed_unlocked(state, seed)
        ]
        return UseCaseResult.success(
            data={
                "hasOwner": True,
                "ownerId": ownership.owner_id,
                "ownerName": creds.display_name or ownership.owner_name,
                "isCurrentUserOwner": True,
                "ownedSeeds": owned_seeds,
                "coinsAvailable": state.coins_available,
                "squares": self._square_payload(state, self._clock()),
            }
        )

    async def seed_menu(self, creds: Credentials) -> UseCaseResult:
        """The seed shop: every seed, what the visitor owns, and their balance."""
        loaded = await self._store.load(creds.visitor_ref)
        state = loaded.state
        return UseCaseResult.success(
            data={
                "availableSeeds": self._available_seeds(state),
                "purchasedSeeds": state.to_wire()["seedsPurchased"],
                "coinsAvailable": state.coins_available,
            }
        )

    async def home_instructions(self) -> UseCaseResult:
        return UseCaseResult.success(data={"instructions": HOME_INSTRUCTIONS})
