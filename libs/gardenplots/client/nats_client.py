"""GardenBusClient — publishes presentation events to the world bridge over NATS.

Events are persisted in a JetStream stream so a bridge that restarts can
catch up. The garden server only publishes; `subscribe` exists for the
bridge side and for tests.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import nats
from nats.aio.client import Client as NATSClient
from nats.aio.msg import Msg
from nats.js.client import JetStreamContext
from nats.js.errors import NotFoundError
from pydantic import ValidationError

from gardenplots.helpers.validation import validate_message
from gardenplots.models.envelope import Envelope
from gardenplots.models.topics import to_nats_subject

logger = logging.getLogger(__name__)

STREAM_NAME = "GARDEN_EVENTS"
STREAM_SUBJECTS = ["world.>"]

EventHandler = Callable[[Envelope], Awaitable[None]]


class GardenBusClient:
    """Async NATS client for garden presentation events.

    Usage:
        bus = GardenBusClient("nats://localhost:4222")
        await bus.connect()
        await bus.publish(envelope)  # subject taken from envelope.topic
        await bus.close()
    """

    def __init__(self, url: str = "nats://localhost:4222") -> None:
        self._url = url
        self._nc: NATSClient | None = None
        self._js: JetStreamContext | None = None
        self._subscriptions: list[Any] = []

    @property
    def is_connected(self) -> bool:
        return self._nc is not None and self._nc.is_connected

    async def connect(self) -> None:
        """Connect and make sure the event stream exists."""
        self._nc = await nats.connect(
            self._url,
            disconnected_cb=self._on_disconnect,
            reconnected_cb=self._on_reconnect,
            error_cb=self._on_error,
            max_reconnect_attempts=10,
            reconnect_time_wait=2,
        )
        self._js = self._nc.jetstream()
        try:
            await self._js.stream_info(STREAM_NAME)
        except NotFoundError:
            await self._js.add_stream(name=STREAM_NAME, subjects=STREAM_SUBJECTS)
            logger.info("Created JetStream stream '%s'", STREAM_NAME)

    async def publish(self, envelope: Envelope) -> int:
        """Publish an envelope on the subject for its topic.

        Returns the stream sequence number of the stored event.

        Raises:
            RuntimeError: If not connected.
            ValueError: If the envelope fails validation.
        """
        if self._js is None:
            raise RuntimeError("Not connected. Call connect() first.")

        errors = validate_message(envelope)
        if errors:
            raise ValueError(f"Refusing to publish invalid envelope: {'; '.join(errors)}")

        subject = to_nats_subject(envelope.topic)
        ack = await self._js.publish(subject, envelope.model_dump_json(by_alias=True).encode())
        logger.debug("Published %s to %s (seq %d)", envelope.type, subject, ack.seq)
        return ack.seq

    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Receive new events on `topic` (wildcards allowed, e.g. Topics.ALL_WORLDS).

        Undecodable messages are logged and dropped; handler errors are
        logged and do not stop the subscription.
        """
        if self._nc is None:
            raise RuntimeError("Not connected. Call connect() first.")
        subject = to_nats_subject(topic)

        async def _on_message(msg: Msg) -> None:
            try:
                envelope = Envelope.model_validate_json(msg.data)
            except ValidationError:
                logger.warning("Dropping undecodable event on %s", msg.subject)
                return
            try:
                await handler(envelope)
            except Exception:
                logger.exception("Event handler failed for %s", msg.subject)

        self._subscriptions.append(await self._nc.subscribe(subject, cb=_on_message))
        logger.info("Subscribed to %s", subject)

    async def close(self) -> None:
        """Drop subscriptions and disconnect, flushing pending publishes."""
        self._subscriptions.clear()
        if self._nc is not None:
            await self._nc.drain()
            self._nc = None
            self._js = None
        logger.info("Disconnected from NATS")

    async def _on_disconnect(self) -> None:
        logger.warning("Disconnected from NATS at %s", self._url)

    async def _on_reconnect(self) -> None:
        logger.info("Reconnected to NATS at %s", self._url)

    async def _on_error(self, e: Exception) -> None:
        logger.error("NATS error: %s", e)
