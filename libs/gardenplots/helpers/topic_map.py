"""Map presentation event types to their world topics."""

from gardenplots.models.messages import MessageType
from gardenplots.models.topics import Topics

_ASSET_EVENTS = frozenset(
    {
        MessageType.SPAWN_PLANT,
        MessageType.UPDATE_PLANT_IMAGE,
        MessageType.REMOVE_ASSETS,
        MessageType.LABEL_PLOT,
    }
)


def topic_for_event(url_slug: str, msg_type: MessageType) -> str:
    """Return the topic path an event of `msg_type` is published on.

    Raises:
        ValueError: If the event type has no topic.
    """
    if msg_type in _ASSET_EVENTS:
        return Topics.assets(url_slug)
    if msg_type == MessageType.PARTICLE:
        return Topics.effects(url_slug)
    if msg_type == MessageType.TOAST:
        return Topics.toasts(url_slug)
    raise ValueError(f"No topic for event type {msg_type!r}")
