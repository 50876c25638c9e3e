"""
Aggregator Module - Produces one unified activity snapshot.

Pipeline per raw row:
    wrap_record -> flatten -> resolve_assignees -> derive_status -> Activity

Rows are concatenated in fixed source order (all tasks, then shootings,
then meetings), each source keeping its own fetch order. An unresolved
source (None) contributes nothing. The snapshot also carries the derived
index views consumers read:

- visible_to_user(u): u is an assignee or the owner
- created_by_user(u): u is the owner
- assigned_to_user(u): u is an assignee
- overdue_by_project: project_id -> overdue activities, in sequence order
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from types import MappingProxyType
from typing import Any

from .assignees import resolve_assignees
from .flatten import flatten
from .models import Activity, ActivityKind, RecordError, SourceRecord, wrap_record
from .observability.context import EvaluationContext
from .sources import SourceSnapshot
from .status_engine import derive_status
from .timeutil import localize

logger = logging.getLogger(__name__)

SOURCE_ORDER = (ActivityKind.TASK, ActivityKind.SHOOTING, ActivityKind.MEETING)


def build_activity(record: SourceRecord, now: datetime, tz: tzinfo | None = None) -> Activity:
    """Flatten, resolve and derive one record into an Activity."""
    projection = flatten(record)
    derived = derive_status(record, projection, now, tz)
    return Activity(
        id=record.activity_id,
        kind=record.kind,
        title=projection.title,
        status=derived.status,
        scheduled_at=projection.scheduled_at,
        project_id=projection.project_id,
        project_title=projection.project_title,
        client_name=projection.client_name,
        assignees=resolve_assignees(record),
        owner=projection.owner,
        priority=projection.priority,
        description=projection.description,
        created_at=projection.created_at,
        is_overdue=derived.is_overdue,
        source=record.raw,
    )


def group_overdue_by_project(activities: Iterable[Activity]) -> dict[str, list[Activity]]:
    """Overdue activities with a project, grouped by project in encounter order."""
    grouped: dict[str, list[Activity]] = {}
    for activity in activities:
        if activity.is_overdue and activity.project_id is not None:
            grouped.setdefault(activity.project_id, []).append(activity)
    return grouped


@dataclass(frozen=True)
class ActivitySnapshot:
    """Immutable result of one aggregation pass at `computed_at`."""

    activities: tuple[Activity, ...]
    computed_at: datetime
    loading: bool = False
    revision: tuple[int, ...] = ()
    skipped: int = 0
    overdue_by_project: Mapping[str, tuple[Activity, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def visible_to_user(self, user_id: str) -> list[Activity]:
        return [a for a in self.activities if a.involves(user_id)]

    def created_by_user(self, user_id: str) -> list[Activity]:
        return [a for a in self.activities if a.owner == user_id]

    def assigned_to_user(self, user_id: str) -> list[Activity]:
        return [a for a in self.activities if user_id in a.assignees]

    def by_kind(self, kind: ActivityKind | str) -> list[Activity]:
        kind = ActivityKind(kind)
        return [a for a in self.activities if a.kind == kind]

    def overdue(self) -> list[Activity]:
        return [a for a in self.activities if a.is_overdue]

    def counts(self) -> dict[str, Any]:
        """Summary counts for dashboards."""
        by_kind = {kind.value: 0 for kind in SOURCE_ORDER}
        for activity in self.activities:
            by_kind[activity.kind.value] += 1
        return {
            "total": len(self.activities),
            "by_kind": by_kind,
            "overdue": sum(1 for a in self.activities if a.is_overdue),
            "overdue_projects": len(self.overdue_by_project),
        }


class ActivityAggregator:
    """Aggregates task, shooting and meeting rows into an ActivitySnapshot."""

    def __init__(self, tz: tzinfo = UTC):
        self.tz = tz

    def _records(self, kind: ActivityKind, rows: Iterable[dict] | None) -> tuple[list[SourceRecord], int]:
        records: list[SourceRecord] = []
        skipped = 0
        for index, raw in enumerate(rows or ()):
            try:
                records.append(wrap_record(kind, raw))
            except RecordError as e:
                skipped += 1
                logger.warning(
                    f"Skipping {kind} row {index}: {e}",
                    extra={"kind": kind.value, "row_index": index},
                )
        return records, skipped

    def build(
        self,
        tasks: Iterable[dict] | None,
        shootings: Iterable[dict] | None,
        meetings: Iterable[dict] | None,
        now: datetime,
        loading: bool = False,
        revision: tuple[int, ...] = (),
    ) -> ActivitySnapshot:
        """
        Build a snapshot from already-fetched rows.

        Args:
            tasks, shootings, meetings: Raw rows in fetch order; None if the
                source has not resolved yet
            now: Evaluation instant (naive values are read in self.tz)
            loading: Composite loading flag to carry on the snapshot
            revision: Source revisions the rows came from

        Returns:
            ActivitySnapshot
        """
        now = localize(now, self.tz)
        activities: list[Activity] = []
        skipped = 0

        with EvaluationContext(now):
            for kind, rows in zip(SOURCE_ORDER, (tasks, shootings, meetings), strict=True):
                records, dropped = self._records(kind, rows)
                skipped += dropped
                activities.extend(build_activity(record, now, self.tz) for record in records)

        overdue = group_overdue_by_project(activities)
        logger.debug(
            f"Aggregated {len(activities)} activities ({skipped} skipped)",
            extra={"total": len(activities), "skipped": skipped},
        )
        return ActivitySnapshot(
            activities=tuple(activities),
            computed_at=now,
            loading=loading,
            revision=revision,
            skipped=skipped,
            overdue_by_project=MappingProxyType({k: tuple(v) for k, v in overdue.items()}),
        )

    def generate(self, sources: SourceSnapshot, now: datetime) -> ActivitySnapshot:
        """Build from a SourceSnapshot (see sources.py)."""
        return self.build(
            sources.rows(ActivityKind.TASK),
            sources.rows(ActivityKind.SHOOTING),
            sources.rows(ActivityKind.MEETING),
            now,
            loading=sources.loading,
            revision=sources.revision,
        )
