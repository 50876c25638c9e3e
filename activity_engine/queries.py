"""Read-only query surface over the unified activity snapshot."""

import logging
from datetime import datetime, tzinfo
from typing import Any

from .aggregator import ActivityAggregator, ActivitySnapshot
from .cache import CacheStats, SnapshotCache, snapshot_key
from .config import EngineSettings, get_settings
from .models import Activity, ActivityKind
from .sources import ActivitySources, SourceCollection
from .timeutil import localize

logger = logging.getLogger(__name__)

USER_SCOPES = ("visible", "assigned", "created")


class ActivityQueryService:
    """
    Serves activity views for a set of sources.

    Every call takes an explicit `now`; omitting it means "evaluation time"
    in the engine timezone. Snapshots are memoized per (source revisions,
    now), never across a different instant.
    """

    def __init__(
        self,
        sources: ActivitySources | None = None,
        tz: tzinfo | None = None,
        cache_size: int | None = None,
        settings: EngineSettings | None = None,
    ):
        settings = settings or get_settings()
        self.sources = sources or ActivitySources()
        self.tz = tz or settings.tzinfo
        self.aggregator = ActivityAggregator(self.tz)
        self.cache: SnapshotCache[ActivitySnapshot] = SnapshotCache(
            cache_size or settings.snapshot_cache_size
        )

    def evaluation_time(self, now: datetime | None = None) -> datetime:
        """Resolve the instant to evaluate at (aware, in the engine zone if naive)."""
        if now is None:
            return datetime.now(self.tz)
        return localize(now, self.tz)

    def snapshot(self, now: datetime | None = None) -> ActivitySnapshot:
        """Full snapshot at `now`, memoized on source revision."""
        now = self.evaluation_time(now)
        sources = self.sources.snapshot()
        key = snapshot_key(sources.revision, now)
        return self.cache.get_or_compute(key, lambda: self.aggregator.generate(sources, now))

    # ==== Views ====

    def activities(self, now: datetime | None = None, kind: ActivityKind | str | None = None) -> list[Activity]:
        """Full ordered sequence: tasks, then shootings, then meetings."""
        snapshot = self.snapshot(now)
        if kind is None:
            return list(snapshot.activities)
        return snapshot.by_kind(kind)

    def visible_to_user(self, user_id: str, now: datetime | None = None) -> list[Activity]:
        return self.snapshot(now).visible_to_user(user_id)

    def assigned_to_user(self, user_id: str, now: datetime | None = None) -> list[Activity]:
        return self.snapshot(now).assigned_to_user(user_id)

    def created_by_user(self, user_id: str, now: datetime | None = None) -> list[Activity]:
        return self.snapshot(now).created_by_user(user_id)

    def for_user(self, user_id: str, scope: str = "visible", now: datetime | None = None) -> list[Activity]:
        """Dispatch to one of the per-user views by scope name."""
        match scope:
            case "visible":
                return self.visible_to_user(user_id, now)
            case "assigned":
                return self.assigned_to_user(user_id, now)
            case "created":
                return self.created_by_user(user_id, now)
        raise ValueError(f"Unknown user scope '{scope}'. Known scopes: {list(USER_SCOPES)}")

    def overdue_by_project(self, now: datetime | None = None) -> dict[str, list[Activity]]:
        return {
            project_id: list(activities)
            for project_id, activities in self.snapshot(now).overdue_by_project.items()
        }

    def summary(self, now: datetime | None = None) -> dict[str, Any]:
        snapshot = self.snapshot(now)
        return {
            **snapshot.counts(),
            "computed_at": snapshot.computed_at.isoformat(),
            "loading": snapshot.loading,
        }

    # ==== Status ====

    @property
    def is_loading(self) -> bool:
        """True while any of the three sources is unresolved."""
        return self.sources.is_loading

    def source_status(self) -> list[SourceCollection]:
        return [self.sources.collection(kind) for kind in ActivityKind]

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()
