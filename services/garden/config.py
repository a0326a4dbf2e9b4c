"""Service settings, read once from the environment."""

import os
from dataclasses import dataclass, field

DEFAULT_NATS_URL = "nats://localhost:4222"


def _split_ids(raw: str) -> frozenset[str]:
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class GardenSettings:
    """Runtime configuration for the garden server.

    Environment variables:
        NATS_URL, GARDEN_STORE (`nats` | `memory`), GARDEN_KV_BUCKET,
        GARDEN_HOST, GARDEN_PORT, GARDEN_PUBLIC_URL,
        GARDEN_ADMIN_PROFILE_IDS (comma separated), GARDEN_APP_VERSION.
    """

    nats_url: str = DEFAULT_NATS_URL
    store: str = "nats"
    kv_bucket: str = "garden"
    host: str = "0.0.0.0"
    port: int = 3000
    public_url: str = "http://localhost:3000"
    admin_profile_ids: frozenset[str] = field(default_factory=frozenset)
    app_version: str = "0.1.0"

    @classmethod
    def from_env(cls) -> "GardenSettings":
        store = os.environ.get("GARDEN_STORE", "nats").lower()
        if store not in ("nats", "memory"):
            raise ValueError(f"GARDEN_STORE must be 'nats' or 'memory', got {store!r}")
        return cls(
            nats_url=os.environ.get("NATS_URL", DEFAULT_NATS_URL),
            store=store,
            kv_bucket=os.environ.get("GARDEN_KV_BUCKET", "garden"),
            host=os.environ.get("GARDEN_HOST", "0.0.0.0"),
            port=int(os.environ.get("GARDEN_PORT", "3000")),
            public_url=os.environ.get("GARDEN_PUBLIC_URL", "http://localhost:3000").rstrip("/"),
            admin_profile_ids=_split_ids(os.environ.get("GARDEN_ADMIN_PROFILE_IDS", "")),
            app_version=os.environ.get("GARDEN_APP_VERSION", "0.1.0"),
        )

    def is_admin(self, profile_id: str) -> bool:
        return profile_id in self.admin_profile_ids
