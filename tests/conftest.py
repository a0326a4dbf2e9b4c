"""Shared test fixtures."""

import os
from datetime import UTC, datetime, timedelta

import httpx
import pytest
from gardenplots import (
    GardenBusClient,
    GardenKeyValueClient,
    MessageType,
    SeedCatalog,
    SeedDefinition,
)
from pydantic import BaseModel

from services.garden.api import create_app
from services.garden.config import GardenSettings
from services.garden.credentials import Credentials
from services.garden.gateway import PresentationGateway
from services.garden.service import GardenService
from services.garden.store import GardenStateStore, MemoryDocumentStore

START = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

CARROT = SeedDefinition(
    id=1,
    name="Carrot",
    icon_ref="carrot-icon.png",
    cost=0,
    reward=2,
    growth_time_seconds=60,
    harvest_level=10,
    image_by_level={0: "carrot-0.png", 5: "carrot-5.png", 10: "carrot-10.png"},
)
PUMPKIN = SeedDefinition(
    id=4,
    name="Pumpkin",
    icon_ref="pumpkin-icon.png",
    cost=10,
    reward=25,
    growth_time_seconds=300,
    harvest_level=10,
)

ADMIN_PROFILE = "admin-profile"


class FakeClock:
    """Settable wall clock."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingGateway(PresentationGateway):
    """Keeps every emitted event; can be told to fail."""

    def __init__(self) -> None:
        self.events: list[tuple[str, MessageType, BaseModel]] = []
        self.fail = False

    async def emit(self, url_slug: str, msg_type: MessageType, payload: BaseModel) -> None:
        if self.fail:
            raise ConnectionError("world platform unavailable")
        self.events.append((url_slug, msg_type, payload))

    def of_type(self, msg_type: MessageType) -> list[BaseModel]:
        return [payload for _, t, payload in self.events if t == msg_type]


class SequentialIds:
    def __init__(self) -> None:
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"plant-{self.count}"


def make_credentials(profile_id: str = "profile-1", asset_id: str = "plot-a", **overrides) -> Credentials:
    fields = {
        "visitor_id": f"visitor-{profile_id}",
        "url_slug": "garden-town",
        "profile_id": profile_id,
        "display_name": f"Gardener {profile_id}",
        "asset_id": asset_id,
    }
    fields.update(overrides)
    return Credentials(**fields)


@pytest.fixture
def nats_url() -> str:
    return os.environ.get("NATS_URL", "nats://localhost:4222")


@pytest.fixture
async def bus_client(nats_url: str) -> GardenBusClient:
    """Provide a connected GardenBusClient, cleaned up after use."""
    client = GardenBusClient(nats_url)
    await client.connect()
    yield client  # type: ignore[misc]
    await client.close()


@pytest.fixture
async def kv_client(nats_url: str) -> GardenKeyValueClient:
    """A KV client bound to a throwaway test bucket."""
    client = GardenKeyValueClient(nats_url, bucket="garden-test")
    await client.connect()
    yield client  # type: ignore[misc]
    await client.close()


@pytest.fixture
def catalog() -> SeedCatalog:
    return SeedCatalog([CARROT, PUMPKIN])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def documents() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def store(documents: MemoryDocumentStore) -> GardenStateStore:
    return GardenStateStore(documents)


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def service(
    store: GardenStateStore,
    gateway: RecordingGateway,
    catalog: SeedCatalog,
    clock: FakeClock,
) -> GardenService:
    return GardenService(
        store,
        gateway,
        catalog,
        public_url="https://garden.example",
        clock=clock,
        asset_ids=SequentialIds(),
    )


@pytest.fixture
def settings() -> GardenSettings:
    return GardenSettings(store="memory", admin_profile_ids=frozenset({ADMIN_PROFILE}))


@pytest.fixture
async def http_client(service: GardenService, settings: GardenSettings) -> httpx.AsyncClient:
    """An httpx client talking to the app in-process."""
    app = create_app(service, settings)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://garden.test") as client:
        yield client  # type: ignore[misc]
