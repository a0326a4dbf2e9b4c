"""GardenKeyValueClient — JSON documents in a NATS JetStream key/value bucket.

Every write is compare-and-swap on the entry revision, so two writers that
read the same revision cannot both succeed.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import nats
from nats.aio.client import Client as NATSClient
from nats.js.errors import BucketNotFoundError, KeyNotFoundError, KeyWrongLastSequenceError
from nats.js.kv import KeyValue

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "garden"


class ConcurrentUpdateError(RuntimeError):
    """The stored revision moved since it was read. Safe to retry."""


@dataclass(frozen=True)
class StoredValue:
    """A decoded document and the revision it was read at.

    `data` is None when the stored bytes are not valid JSON.
    """

    data: Any
    revision: int


def _encode(data: Any) -> bytes:
    return json.dumps(data, separators=(",", ":")).encode()


class GardenKeyValueClient:
    """Async JSON document store on top of a JetStream KV bucket."""

    def __init__(self, url: str = "nats://localhost:4222", bucket: str = DEFAULT_BUCKET) -> None:
        self._url = url
        self._bucket = bucket
        self._nc: NATSClient | None = None
        self._kv: KeyValue | None = None

    @property
    def is_connected(self) -> bool:
        return self._nc is not None and self._nc.is_connected

    async def connect(self) -> None:
        """Connect to NATS and bind (or create) the bucket."""
        self._nc = await nats.connect(self._url, max_reconnect_attempts=10, reconnect_time_wait=2)
        js = self._nc.jetstream()
        try:
            self._kv = await js.key_value(self._bucket)
            logger.info("KV bucket '%s' already exists", self._bucket)
        except BucketNotFoundError:
            self._kv = await js.create_key_value(bucket=self._bucket, history=5)
            logger.info("Created KV bucket '%s'", self._bucket)

    def _bucket_or_raise(self) -> KeyValue:
        if self._kv is None:
            raise RuntimeError("Not connected. Call connect() first.")
        return self._kv

    async def get(self, key: str) -> StoredValue | None:
        """Read a document, or None if the key does not exist."""
        kv = self._bucket_or_raise()
        try:
            entry = await kv.get(key)
        except KeyNotFoundError:
            return None
        if entry.value is None:
            return None
        try:
            data = json.loads(entry.value)
        except ValueError:
            logger.warning("Undecodable document at '%s' (revision %s)", key, entry.revision)
            data = None
        return StoredValue(data=data, revision=entry.revision or 0)

    async def create(self, key: str, data: Any) -> int:
        """Write a new key. Returns the new revision.

        Raises:
            ConcurrentUpdateError: If the key already exists.
        """
        kv = self._bucket_or_raise()
        try:
            return await kv.create(key, _encode(data))
        except KeyWrongLastSequenceError as e:
            raise ConcurrentUpdateError(f"Key '{key}' already exists") from e

    async def update(self, key: str, data: Any, revision: int) -> int:
        """Overwrite a key only if it is still at `revision`. Returns the new revision.

        Raises:
            ConcurrentUpdateError: If another writer got there first.
        """
        kv = self._bucket_or_raise()
        try:
            return await kv.update(key, _encode(data), last=revision)
        except KeyWrongLastSequenceError as e:
            raise ConcurrentUpdateError(
                f"Key '{key}' changed since revision {revision}"
            ) from e

    async def close(self) -> None:
        if self._nc is not None:
            await self._nc.drain()
            self._nc = None
            self._kv = None
        logger.info("KV client disconnected")
