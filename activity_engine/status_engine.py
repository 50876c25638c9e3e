"""
Activity Engine - Status Engine

Derives the effective status of a record at an explicit instant `now`.

Per kind this is a two-state override, recomputed on every call:

    task      raw status; overdue when the deadline has passed and the
              status is not completed/done
    shooting  raw status, or "completed" once the scheduled slot has passed
              (unless cancelled/rejected)
    meeting   raw status, or "no_update" once the meeting date has passed
              without being completed/cancelled

No history is kept: a later manual change of the raw status is reflected
on the next evaluation. Only tasks are ever overdue.

Unparsable date/time values never abort a pass; the record keeps its raw
status and is not overdue.
"""

import logging
from datetime import UTC, datetime, tzinfo

from .models import DerivedStatus, MeetingRecord, Projection, ShootingRecord, SourceRecord, TaskRecord
from .timeutil import combine_date_time, localize, parse_instant

logger = logging.getLogger(__name__)

TASK_CLOSED_STATUSES = frozenset({"completed", "done"})
SHOOTING_CLOSED_STATUSES = frozenset({"cancelled", "rejected"})
MEETING_CLOSED_STATUSES = frozenset({"completed", "cancelled"})

SHOOTING_AUTO_STATUS = "completed"
MEETING_STALE_STATUS = "no_update"


def is_task_overdue(status: str | None, deadline: datetime | None, now: datetime) -> bool:
    """Deadline set, not closed, and strictly in the past."""
    return deadline is not None and status not in TASK_CLOSED_STATUSES and deadline < now


def _derive_task(projection: Projection, now: datetime, tz: tzinfo) -> DerivedStatus:
    status = projection.status
    deadline = parse_instant(projection.scheduled_at, tz) if projection.scheduled_at else None
    return DerivedStatus(status=status, is_overdue=is_task_overdue(status, deadline, now))


def _derive_shooting(record: ShootingRecord, projection: Projection, now: datetime, tz: tzinfo) -> DerivedStatus:
    status = projection.status
    if not projection.scheduled_at:
        return DerivedStatus(status=status)

    slot = combine_date_time(projection.scheduled_at, record.raw.get("scheduled_time"), tz)
    if slot < now and status not in SHOOTING_CLOSED_STATUSES:
        return DerivedStatus(status=SHOOTING_AUTO_STATUS)
    return DerivedStatus(status=status)


def _derive_meeting(projection: Projection, now: datetime, tz: tzinfo) -> DerivedStatus:
    status = projection.status
    if not projection.scheduled_at:
        return DerivedStatus(status=status)

    meeting_at = parse_instant(projection.scheduled_at, tz)
    if meeting_at < now and status not in MEETING_CLOSED_STATUSES:
        return DerivedStatus(status=MEETING_STALE_STATUS)
    return DerivedStatus(status=status)


def derive_status(
    record: SourceRecord,
    projection: Projection,
    now: datetime,
    tz: tzinfo | None = None,
) -> DerivedStatus:
    """
    Compute {status, is_overdue} for one record at `now`.

    Args:
        record: The source record (selects the per-kind rule)
        projection: Its flattened fields
        now: Evaluation instant. A naive `now` is read in `tz`.
        tz: Zone for naive source values. Defaults to now's zone, else UTC.

    Returns:
        DerivedStatus; falls back to the raw status on malformed dates.
    """
    if not isinstance(record, (TaskRecord, ShootingRecord, MeetingRecord)):
        raise TypeError(f"Unsupported record type: {type(record).__name__}")

    tz = tz or now.tzinfo or UTC
    now = localize(now, tz)

    try:
        match record:
            case TaskRecord():
                return _derive_task(projection, now, tz)
            case ShootingRecord():
                return _derive_shooting(record, projection, now, tz)
            case MeetingRecord():
                return _derive_meeting(projection, now, tz)
    except (ValueError, TypeError) as e:
        logger.warning(
            f"Unparsable schedule on {record.activity_id}, keeping raw status: {e}",
            extra={"activity_id": record.activity_id, "kind": record.kind.value},
        )
        return DerivedStatus(status=projection.status)
