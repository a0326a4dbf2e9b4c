"""Garden Plots — shared models, growth rules and NATS clients."""

from gardenplots.client import (
    ConcurrentUpdateError,
    GardenBusClient,
    GardenKeyValueClient,
    StoredValue,
)
from gardenplots.helpers import (
    GrowthChange,
    create_message,
    current_level,
    effective_level,
    is_ready_for_harvest,
    refresh_growth,
    square_offset,
    time_remaining_to_next_level,
    topic_for_event,
    validate_message,
)
from gardenplots.models import (
    DEFAULT_SEEDS,
    GRID_SIZE,
    PAYLOAD_REGISTRY,
    SEED_CATALOG,
    SQUARE_COUNT,
    STARTING_COINS,
    Envelope,
    HarvestPlantRequest,
    LabelPlot,
    MessageType,
    OwnedPlot,
    Particle,
    Plant,
    PlantSeedRequest,
    PlotOwnership,
    PurchaseSeedRequest,
    RemoveAssets,
    SeedCatalog,
    SeedDefinition,
    SeedPurchase,
    SpawnPlant,
    Toast,
    Topics,
    UpdatePlantImage,
    VisitorGardenState,
    to_nats_subject,
)

__all__ = [
    # Clients
    "ConcurrentUpdateError",
    "GardenBusClient",
    "GardenKeyValueClient",
    "StoredValue",
    # Catalogue and garden models
    "DEFAULT_SEEDS",
    "GRID_SIZE",
    "OwnedPlot",
    "Plant",
    "PlotOwnership",
    "SEED_CATALOG",
    "SQUARE_COUNT",
    "STARTING_COINS",
    "SeedCatalog",
    "SeedDefinition",
    "SeedPurchase",
    "VisitorGardenState",
    # Presentation events
    "Envelope",
    "LabelPlot",
    "MessageType",
    "PAYLOAD_REGISTRY",
    "Particle",
    "RemoveAssets",
    "SpawnPlant",
    "Toast",
    "Topics",
    "UpdatePlantImage",
    "to_nats_subject",
    # HTTP requests
    "HarvestPlantRequest",
    "PlantSeedRequest",
    "PurchaseSeedRequest",
    # Helpers
    "GrowthChange",
    "create_message",
    "current_level",
    "effective_level",
    "is_ready_for_harvest",
    "refresh_growth",
    "square_offset",
    "time_remaining_to_next_level",
    "topic_for_event",
    "validate_message",
]
