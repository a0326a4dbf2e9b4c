"""Entry point: python -m services.garden"""

import asyncio
import logging

import uvicorn
from gardenplots import GardenBusClient, GardenKeyValueClient

from services.garden.api import create_app
from services.garden.config import GardenSettings
from services.garden.gateway import (
    BusPresentationGateway,
    LoggingPresentationGateway,
    PresentationGateway,
)
from services.garden.service import GardenService
from services.garden.store import DocumentStore, GardenStateStore, MemoryDocumentStore


async def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    logger = logging.getLogger(__name__)
    settings = GardenSettings.from_env()

    kv: GardenKeyValueClient | None = None
    bus: GardenBusClient | None = None
    documents: DocumentStore
    gateway: PresentationGateway

    if settings.store == "nats":
        kv = GardenKeyValueClient(settings.nats_url, bucket=settings.kv_bucket)
        await kv.connect()
        bus = GardenBusClient(settings.nats_url)
        await bus.connect()
        documents = kv
        gateway = BusPresentationGateway(bus)
    else:
        logger.warning("Running with in-memory storage; garden data is lost on exit")
        documents = MemoryDocumentStore()
        gateway = LoggingPresentationGateway()

    service = GardenService(
        GardenStateStore(documents),
        gateway,
        public_url=settings.public_url,
    )
    app = create_app(service, settings)
    server = uvicorn.Server(uvicorn.Config(app, host=settings.host, port=settings.port))

    logger.info("Garden server listening on %s:%d. Press Ctrl+C to stop.", settings.host, settings.port)
    try:
        await server.serve()
    finally:
        if bus is not None:
            await bus.close()
        if kv is not None:
            await kv.close()


if __name__ == "__main__":
    asyncio.run(main())
