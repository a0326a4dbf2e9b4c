"""Presentation gateway — the garden's only way of changing what the world shows.

The world platform itself sits behind this port. GardenService calls it only
after state has been saved; failures here never undo economic changes.
"""

import logging
from abc import ABC, abstractmethod

from gardenplots import (
    GardenBusClient,
    LabelPlot,
    MessageType,
    Particle,
    RemoveAssets,
    SpawnPlant,
    Toast,
    UpdatePlantImage,
    create_message,
)
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class PresentationGateway(ABC):
    """Base class for presentation back ends.

    Subclasses implement emit(); the typed helpers build on it.
    """

    @abstractmethod
    async def emit(self, url_slug: str, msg_type: MessageType, payload: BaseModel) -> None:
        """Deliver one presentation event for the world `url_slug`."""

    async def spawn_plant(self, url_slug: str, event: SpawnPlant) -> None:
        await self.emit(url_slug, MessageType.SPAWN_PLANT, event)

    async def update_plant_image(self, url_slug: str, event: UpdatePlantImage) -> None:
        await self.emit(url_slug, MessageType.UPDATE_PLANT_IMAGE, event)

    async def remove_assets(self, url_slug: str, event: RemoveAssets) -> None:
        await self.emit(url_slug, MessageType.REMOVE_ASSETS, event)

    async def label_plot(self, url_slug: str, event: LabelPlot) -> None:
        await self.emit(url_slug, MessageType.LABEL_PLOT, event)

    async def particle(self, url_slug: str, event: Particle) -> None:
        await self.emit(url_slug, MessageType.PARTICLE, event)

    async def toast(self, url_slug: str, event: Toast) -> None:
        await self.emit(url_slug, MessageType.TOAST, event)


class BusPresentationGateway(PresentationGateway):
    """Publishes presentation events on NATS for the world bridge to apply."""

    SOURCE = "garden"

    def __init__(self, bus: GardenBusClient) -> None:
        self._bus = bus

    async def emit(self, url_slug: str, msg_type: MessageType, payload: BaseModel) -> None:
        msg = create_message(
            source=self.SOURCE,
            url_slug=url_slug,
            msg_type=msg_type,
            payload=payload,
        )
        await self._bus.publish(msg)


class LoggingPresentationGateway(PresentationGateway):
    """Writes presentation events to the log. Used when running without NATS."""

    async def emit(self, url_slug: str, msg_type: MessageType, payload: BaseModel) -> None:
        logger.info("[%s] %s %s", url_slug, msg_type, payload.model_dump_json())
