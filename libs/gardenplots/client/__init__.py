from gardenplots.client.kv_client import ConcurrentUpdateError, GardenKeyValueClient, StoredValue
from gardenplots.client.nats_client import GardenBusClient

__all__ = [
    "ConcurrentUpdateError",
    "GardenBusClient",
    "GardenKeyValueClient",
    "StoredValue",
]
