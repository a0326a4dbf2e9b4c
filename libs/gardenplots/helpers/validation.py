"""Checks run on an Envelope before it is published."""

from pydantic import ValidationError

from gardenplots.helpers.topic_map import topic_for_event
from gardenplots.models.envelope import Envelope
from gardenplots.models.messages import PAYLOAD_REGISTRY


def validate_message(envelope: Envelope) -> list[str]:
    """Return every problem found with `envelope`; empty means publishable."""
    errors: list[str] = []

    if not envelope.source.strip():
        errors.append("'from' must not be empty")
    if not envelope.url_slug.strip():
        errors.append("'url_slug' must not be empty")
    elif envelope.topic != topic_for_event(envelope.url_slug, envelope.type):
        errors.append(
            f"{envelope.type} events for '{envelope.url_slug}' belong on "
            f"{topic_for_event(envelope.url_slug, envelope.type)}, not {envelope.topic}"
        )

    try:
        PAYLOAD_REGISTRY[envelope.type].model_validate(envelope.payload)
    except ValidationError as e:
        errors.extend(
            f"payload.{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
    return errors
