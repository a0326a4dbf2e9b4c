"""Topic paths and NATS subject conversion.

Topics use `/` separators (e.g., `/world/garden-town/assets`),
while NATS uses `.` separators (e.g., `world.garden-town.assets`).
This module handles the conversion transparently.
"""


class Topics:
    """Topic paths for presentation events, scoped per world."""

    # Wildcard covering every world, for bridge subscriptions
    ALL_WORLDS = "/world/>"

    @classmethod
    def assets(cls, url_slug: str) -> str:
        """Spawn/update/remove/label events for dropped assets."""
        return f"/world/{url_slug}/assets"

    @classmethod
    def effects(cls, url_slug: str) -> str:
        """Particle effects."""
        return f"/world/{url_slug}/effects"

    @classmethod
    def toasts(cls, url_slug: str) -> str:
        """Visitor toast notifications."""
        return f"/world/{url_slug}/toasts"


def to_nats_subject(topic: str) -> str:
    """Convert a topic path to a NATS subject.

    `/world/garden-town/assets` → `world.garden-town.assets`
    """
    return topic.lstrip("/").replace("/", ".")
