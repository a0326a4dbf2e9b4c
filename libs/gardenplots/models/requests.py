"""Request bodies accepted by the garden HTTP API (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict, Field


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PurchaseSeedRequest(_RequestModel):
    seed_id: int = Field(alias="seedId")


class PlantSeedRequest(_RequestModel):
    seed_id: int = Field(alias="seedId")
    # Range is checked by the plot rules so out-of-grid squares get a rule message
    square_index: int = Field(alias="squareIndex")


class HarvestPlantRequest(_RequestModel):
    plant_id: str = Field(alias="droppedAssetId", min_length=1)
