"""Envelope model — the wire format for presentation events on the bus."""

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gardenplots.models.messages import MessageType


class Envelope(BaseModel):
    """One presentation event for the world bridge.

    `source` is `"from"` on the wire; dump with `by_alias=True`.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    source: str = Field(alias="from")
    topic: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    url_slug: str
    type: MessageType
    payload: dict[str, Any] = Field(default_factory=dict)
