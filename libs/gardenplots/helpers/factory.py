"""Build presentation events ready for the bus."""

from typing import Any

from pydantic import BaseModel

from gardenplots.helpers.topic_map import topic_for_event
from gardenplots.models.envelope import Envelope
from gardenplots.models.messages import MessageType


def create_message(
    *,
    source: str,
    url_slug: str,
    msg_type: MessageType,
    payload: BaseModel | dict[str, Any],
) -> Envelope:
    """Wrap a payload in an Envelope addressed to its world topic.

    The topic follows from the event type (see `topic_for_event`), so callers
    never pick one. Model payloads are dumped in JSON mode with their wire
    aliases.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(by_alias=True, mode="json")
    return Envelope(
        source=source,
        topic=topic_for_event(url_slug, msg_type),
        url_slug=url_slug,
        type=msg_type,
        payload=payload,
    )
