"""Garden state store — load/default/save of visitor documents over a KV backend.

The backend is last-write-wins unless writes carry the revision they were
based on. Every save here does, so a request that lost a race fails with
ConcurrentUpdateError instead of silently discarding the other write.
"""

import logging
import string
from dataclasses import dataclass
from typing import Any, Protocol

from gardenplots import (
    ConcurrentUpdateError,
    PlotOwnership,
    StoredValue,
    VisitorGardenState,
)
from gardenplots.models.garden import VISITOR_DATA_KEYS
from pydantic import ValidationError

logger = logging.getLogger(__name__)

_KEY_SAFE = frozenset(string.ascii_letters + string.digits + "-")


class DocumentStore(Protocol):
    """JSON documents with revision-checked writes (see GardenKeyValueClient)."""

    async def get(self, key: str) -> StoredValue | None: ...

    async def create(self, key: str, data: Any) -> int: ...

    async def update(self, key: str, data: Any, revision: int) -> int: ...


class MemoryDocumentStore:
    """In-process DocumentStore with the same revision semantics as the KV bucket."""

    def __init__(self) -> None:
        self._documents: dict[str, StoredValue] = {}
        self._last_revision = 0

    def _next_revision(self) -> int:
        self._last_revision += 1
        return self._last_revision

    async def get(self, key: str) -> StoredValue | None:
        return self._documents.get(key)

    async def create(self, key: str, data: Any) -> int:
        if key in self._documents:
            raise ConcurrentUpdateError(f"Key '{key}' already exists")
        revision = self._next_revision()
        self._documents[key] = StoredValue(data=data, revision=revision)
        return revision

    async def update(self, key: str, data: Any, revision: int) -> int:
        current = self._documents.get(key)
        if current is None or current.revision != revision:
            raise ConcurrentUpdateError(f"Key '{key}' changed since revision {revision}")
        new_revision = self._next_revision()
        self._documents[key] = StoredValue(data=data, revision=new_revision)
        return new_revision

    def keys(self) -> list[str]:
        return list(self._documents)


def _key_token(value: str) -> str:
    """Escape one key segment: letters, digits and `-` pass, anything else
    becomes `_XX` per UTF-8 byte. Distinct values give distinct tokens.
    """
    if not value:
        return "_"
    return "".join(
        ch if ch in _KEY_SAFE else "".join(f"_{byte:02X}" for byte in ch.encode())
        for ch in value
    )


def key_ref(*parts: str) -> str:
    """Join escaped segments with `.`, the KV key separator."""
    return ".".join(_key_token(part) for part in parts)


def visitor_key(visitor_ref: str) -> str:
    return f"visitors.{visitor_ref}"


def plot_key(plot_ref: str) -> str:
    return f"plots.{plot_ref}"


@dataclass
class LoadedState:
    """A visitor's state plus the revision it must be saved against."""

    state: VisitorGardenState
    revision: int


def _merge_with_defaults(data: Any) -> tuple[VisitorGardenState, bool]:
    """Overlay a stored document on the default state.

    Missing or null top-level fields take their default; a field that fails
    validation is replaced by its default while every other field is kept.
    Returns the state and whether anything had to be filled in or replaced.
    """
    defaults = VisitorGardenState().to_wire()
    if not isinstance(data, dict):
        return VisitorGardenState(), True

    merged = dict(data)
    repaired = False
    for key in VISITOR_DATA_KEYS:
        if key not in merged or (merged[key] is None and defaults[key] is not None):
            merged[key] = defaults[key]
            repaired = True

    state: VisitorGardenState | None = None
    for _ in range(len(VISITOR_DATA_KEYS) + 1):
        try:
            state = VisitorGardenState.model_validate(merged)
            break
        except ValidationError as e:
            invalid = {str(err["loc"][0]) for err in e.errors() if err["loc"]} & VISITOR_DATA_KEYS
            if not invalid:
                break
            logger.warning("Replacing invalid stored fields with defaults: %s", sorted(invalid))
            for key in invalid:
                merged[key] = defaults[key]
            repaired = True

    if state is None:
        return VisitorGardenState(), True

    if repaired and state.owned_plot is not None:
        # Squares must only point at plants that survived the repair
        active = state.active_plants()
        state.owned_plot.squares = [
            plant_id if plant_id in active else None for plant_id in state.owned_plot.squares
        ]
    return state, repaired


class GardenStateStore:
    """Loads and saves VisitorGardenState documents and plot ownership markers."""

    def __init__(self, documents: DocumentStore) -> None:
        self._documents = documents

    async def load(self, visitor_ref: str) -> LoadedState:
        """Load a visitor's state.

        A missing document is created from the default; an incomplete one is
        merged with the default and written back before returning.
        """
        key = visitor_key(visitor_ref)
        stored = await self._documents.get(key)

        if stored is not None:
            state, repaired = _merge_with_defaults(stored.data)
            if not repaired:
                return LoadedState(state=state, revision=stored.revision)
            logger.warning("Filled in incomplete garden data for visitor %s", visitor_ref)
            try:
                revision = await self._documents.update(key, state.to_wire(), stored.revision)
            except ConcurrentUpdateError:
                return await self.load(visitor_ref)
            return LoadedState(state=state, revision=revision)

        default = VisitorGardenState()
        try:
            revision = await self._documents.create(key, default.to_wire())
        except ConcurrentUpdateError:
            # Another request initialised the visitor first; use theirs.
            return await self.load(visitor_ref)
        logger.info("Initialised garden data for visitor %s", visitor_ref)
        return LoadedState(state=default, revision=revision)

    async def save(
        self,
        visitor_ref: str,
        state: VisitorGardenState,
        revision: int,
        change_tag: str,
    ) -> int:
        """Persist the whole aggregate if it is still at `revision`.

        `change_tag` labels the write for audit logs only.

        Raises:
            ConcurrentUpdateError: If the stored state moved on since loading.
        """
        new_revision = await self._documents.update(
            visitor_key(visitor_ref), state.to_wire(), revision
        )
        logger.info(
            "Saved garden data for %s [%s] (revision %d -> %d)",
            visitor_ref,
            change_tag,
            revision,
            new_revision,
        )
        return new_revision

    async def plot_owner(self, plot_ref: str) -> PlotOwnership | None:
        """The ownership marker for a plot asset, if it has been claimed."""
        stored = await self._documents.get(plot_key(plot_ref))
        if stored is None or not isinstance(stored.data, dict):
            return None
        try:
            return PlotOwnership.model_validate(stored.data)
        except ValidationError:
            logger.warning("Ignoring malformed ownership marker for plot %s", plot_ref)
            return None

    async def mark_plot_owner(self, plot_ref: str, ownership: PlotOwnership) -> PlotOwnership:
        """Record ownership of an unclaimed plot asset.

        Returns the marker that ends up stored: `ownership` when this call
        created it, otherwise whichever claim won the race.
        """
        try:
            await self._documents.create(
                plot_key(plot_ref), ownership.model_dump(by_alias=True, mode="json")
            )
            return ownership
        except ConcurrentUpdateError:
            existing = await self.plot_owner(plot_ref)
            if existing is None:
                raise
            return existing
