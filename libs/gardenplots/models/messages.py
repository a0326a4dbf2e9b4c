"""Presentation event types and payload models for the world bridge."""

from enum import StrEnum

from pydantic import BaseModel, Field


class MessageType(StrEnum):
    """All presentation events the garden server emits."""

    SPAWN_PLANT = "spawn_plant"
    UPDATE_PLANT_IMAGE = "update_plant_image"
    REMOVE_ASSETS = "remove_assets"
    LABEL_PLOT = "label_plot"
    PARTICLE = "particle"
    TOAST = "toast"


class SpawnPlant(BaseModel):
    """Drop a plant asset onto a square of a claimed plot."""

    asset_id: str
    plot_asset_id: str
    visitor_id: str
    seed_id: int = Field(gt=0)
    square_index: int = Field(ge=0)
    image_url: str
    offset_x: float  # relative to the plot asset's centre
    offset_y: float


class UpdatePlantImage(BaseModel):
    """Swap a plant asset's image after it reached a new growth level."""

    asset_id: str
    grow_level: int = Field(ge=0)
    image_url: str


class RemoveAssets(BaseModel):
    """Delete one or more dropped assets from the world."""

    asset_ids: list[str] = Field(min_length=1)
    reason: str = ""


class LabelPlot(BaseModel):
    """Mark a plot asset as owned: caption text and clickable link."""

    plot_asset_id: str
    text: str
    link: str


class Particle(BaseModel):
    """Play a particle effect at an asset's position."""

    name: str
    duration: float = Field(gt=0)
    asset_id: str


class Toast(BaseModel):
    """Show a toast notification to a visitor."""

    visitor_id: str
    title: str
    text: str


# Registry mapping event types to their payload models
PAYLOAD_REGISTRY: dict[MessageType, type[BaseModel]] = {
    MessageType.SPAWN_PLANT: SpawnPlant,
    MessageType.UPDATE_PLANT_IMAGE: UpdatePlantImage,
    MessageType.REMOVE_ASSETS: RemoveAssets,
    MessageType.LABEL_PLOT: LabelPlot,
    MessageType.PARTICLE: Particle,
    MessageType.TOAST: Toast,
}
