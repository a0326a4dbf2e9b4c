from gardenplots.models.catalogue import (
    DEFAULT_SEEDS,
    SEED_CATALOG,
    SeedCatalog,
    SeedDefinition,
)
from gardenplots.models.envelope import Envelope
from gardenplots.models.garden import (
    GRID_SIZE,
    SQUARE_COUNT,
    STARTING_COINS,
    OwnedPlot,
    Plant,
    PlotOwnership,
    SeedPurchase,
    VisitorGardenState,
)
from gardenplots.models.messages import (
    PAYLOAD_REGISTRY,
    LabelPlot,
    MessageType,
    Particle,
    RemoveAssets,
    SpawnPlant,
    Toast,
    UpdatePlantImage,
)
from gardenplots.models.requests import HarvestPlantRequest, PlantSeedRequest, PurchaseSeedRequest
from gardenplots.models.topics import Topics, to_nats_subject

__all__ = [
    "DEFAULT_SEEDS",
    "Envelope",
    "GRID_SIZE",
    "HarvestPlantRequest",
    "LabelPlot",
    "MessageType",
    "OwnedPlot",
    "PAYLOAD_REGISTRY",
    "Particle",
    "Plant",
    "PlantSeedRequest",
    "PlotOwnership",
    "PurchaseSeedRequest",
    "RemoveAssets",
    "SEED_CATALOG",
    "SQUARE_COUNT",
    "STARTING_COINS",
    "SeedCatalog",
    "SeedDefinition",
    "SeedPurchase",
    "SpawnPlant",
    "Toast",
    "Topics",
    "UpdatePlantImage",
    "VisitorGardenState",
    "to_nats_subject",
]
