"""
Source registry: the three collaborator collections and their fetch state.

Each store (tasks, shootings, meetings) is fetched independently and may
resolve in any order. The registry only records what arrived:

- pending: not fetched yet, or re-fetch in flight after invalidate()
- ready:   rows available
- failed:  the fetcher raised; treated as an empty, resolved source

Every state change bumps that source's revision, so (revisions, now)
identifies an aggregation input exactly. A pending source with no rows is
an empty collection to the aggregator, never an error.
"""

import asyncio
import json
import logging
import threading
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import Path
from typing import Any

from .models import ActivityKind

logger = logging.getLogger(__name__)

SOURCE_KEYS: dict[ActivityKind, str] = {
    ActivityKind.TASK: "tasks",
    ActivityKind.SHOOTING: "shootings",
    ActivityKind.MEETING: "meetings",
}

SourceFetcher = Callable[[], Awaitable[list[dict[str, Any]]]]


class SourceState(StrEnum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceCollection:
    """One collaborator's rows plus fetch bookkeeping."""

    kind: ActivityKind
    rows: tuple[dict[str, Any], ...] | None = None
    state: SourceState = SourceState.PENDING
    revision: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "state": self.state.value,
            "revision": self.revision,
            "rows": 0 if self.rows is None else len(self.rows),
            "error": self.error,
        }


@dataclass(frozen=True)
class SourceSnapshot:
    """Immutable view of all three sources at one moment."""

    collections: Mapping[ActivityKind, SourceCollection] = field(default_factory=dict)

    def rows(self, kind: ActivityKind) -> tuple[dict[str, Any], ...] | None:
        collection = self.collections.get(kind)
        return collection.rows if collection else None

    @property
    def loading(self) -> bool:
        """True while any source is still unresolved."""
        return any(
            self.collections.get(kind, SourceCollection(kind)).state == SourceState.PENDING
            for kind in ActivityKind
        )

    @property
    def revision(self) -> tuple[int, ...]:
        return tuple(
            self.collections.get(kind, SourceCollection(kind)).revision for kind in ActivityKind
        )


class ActivitySources:
    """Thread-safe holder of the three source collections."""

    def __init__(self):
        self._lock = threading.RLock()
        self._collections: dict[ActivityKind, SourceCollection] = {
            kind: SourceCollection(kind) for kind in ActivityKind
        }
        # Bumped on invalidate(); a fetch started under an older generation
        # is discarded when it lands.
        self._generations: dict[ActivityKind, int] = {kind: 0 for kind in ActivityKind}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ActivitySources":
        """Registry with every source resolved from {"tasks": [...], ...}."""
        sources = cls()
        for kind, key in SOURCE_KEYS.items():
            sources.resolve(kind, data.get(key) or [])
        return sources

    def _update(self, kind: ActivityKind, **changes: Any) -> SourceCollection:
        with self._lock:
            current = self._collections[kind]
            updated = replace(current, revision=current.revision + 1, **changes)
            self._collections[kind] = updated
            return updated

    def resolve(self, kind: ActivityKind | str, rows: list[dict[str, Any]]) -> SourceCollection:
        """Record a successful fetch."""
        kind = ActivityKind(kind)
        if not isinstance(rows, (list, tuple)):
            raise TypeError(f"{kind} rows must be a list, got {type(rows).__name__}")
        return self._update(kind, rows=tuple(rows), state=SourceState.READY, error=None)

    def fail(self, kind: ActivityKind | str, error: BaseException | str) -> SourceCollection:
        """Record a failed fetch; the source becomes resolved and empty."""
        kind = ActivityKind(kind)
        return self._update(kind, rows=(), state=SourceState.FAILED, error=str(error))

    def invalidate(self, kind: ActivityKind | str) -> SourceCollection:
        """Mark a source for re-fetch. Stale rows stay visible until replaced."""
        kind = ActivityKind(kind)
        with self._lock:
            self._generations[kind] += 1
            return self._update(kind, state=SourceState.PENDING)

    def collection(self, kind: ActivityKind | str) -> SourceCollection:
        with self._lock:
            return self._collections[ActivityKind(kind)]

    def snapshot(self) -> SourceSnapshot:
        with self._lock:
            return SourceSnapshot(collections=dict(self._collections))

    @property
    def is_loading(self) -> bool:
        return self.snapshot().loading

    @property
    def revision(self) -> tuple[int, ...]:
        return self.snapshot().revision

    async def _fetch_one(self, kind: ActivityKind, fetcher: SourceFetcher) -> None:
        with self._lock:
            generation = self._generations[kind]

        try:
            rows = await fetcher()
            if not isinstance(rows, (list, tuple)):
                raise TypeError(f"fetcher returned {type(rows).__name__}, expected a list")
        except Exception as e:
            with self._lock:
                if self._generations[kind] != generation:
                    return
                logger.warning(
                    f"Fetch failed for {kind} source: {e}",
                    exc_info=True,
                    extra={"kind": kind.value},
                )
                self.fail(kind, e)
            return

        with self._lock:
            if self._generations[kind] != generation:
                logger.debug(f"Discarding superseded {kind} fetch", extra={"kind": kind.value})
                return
            self.resolve(kind, list(rows))
        logger.debug(f"Fetched {len(rows)} {kind} rows", extra={"kind": kind.value, "rows": len(rows)})

    async def refresh(self, fetchers: Mapping[ActivityKind | str, SourceFetcher]) -> SourceSnapshot:
        """
        Re-fetch the given sources concurrently.

        Each fetcher result is applied to its own source as soon as it
        lands. A fetcher that raises marks only its source as failed.

        Returns:
            SourceSnapshot after all fetchers have finished

        Raises:
            ValueError if any key is not a source kind; no source is touched.
        """
        by_kind = {ActivityKind(kind): fetcher for kind, fetcher in fetchers.items()}
        for kind in by_kind:
            self.invalidate(kind)
        await asyncio.gather(*(self._fetch_one(kind, fetcher) for kind, fetcher in by_kind.items()))
        return self.snapshot()


def load_sources_file(path: str | Path) -> dict[str, list[dict[str, Any]]]:
    """
    Load collaborator rows from a JSON document.

    Expected shape:
        {"tasks": [...], "shootings": [...], "meetings": [...]}

    Missing keys are empty sources.

    Raises:
        FileNotFoundError if the file doesn't exist.
        ValueError if the document is not valid JSON or has the wrong shape.
    """
    source_path = Path(path)
    try:
        payload = json.loads(source_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{source_path}: invalid JSON ({e})") from e

    if not isinstance(payload, dict):
        raise ValueError(f"{source_path}: expected an object with tasks/shootings/meetings")

    data: dict[str, list[dict[str, Any]]] = {}
    for key in SOURCE_KEYS.values():
        rows = payload.get(key, [])
        if not isinstance(rows, list):
            raise ValueError(f"{source_path}: '{key}' must be a list")
        data[key] = rows
    return data
