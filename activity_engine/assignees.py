"""
Assignee resolution: every person reference on a record, as one ordered set.

Order per kind (first occurrence wins, nulls skipped):
- task:     assigned_to, task_assignees[].user_id
- shooting: requested_by, director, runner, shooting_crew[].user_id
- meeting:  created_by, meeting_participants[].user_id
"""

from collections.abc import Iterable
from typing import Any

from .models import MeetingRecord, ShootingRecord, SourceRecord, TaskRecord


def ordered_unique(values: Iterable[Any]) -> tuple[str, ...]:
    """Stable dedup of user ids, dropping None and empty strings."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value is None or value == "":
            continue
        user_id = str(value)
        if user_id not in seen:
            seen.add(user_id)
            result.append(user_id)
    return tuple(result)


def _join_user_ids(rows: Any) -> list[Any]:
    """user_id column of a many-to-many join; tolerates a missing join."""
    if not isinstance(rows, list):
        return []
    return [row.get("user_id") for row in rows if isinstance(row, dict)]


def resolve_assignees(record: SourceRecord) -> tuple[str, ...]:
    """Resolve the normalized assignee set for one source record."""
    raw = record.raw
    match record:
        case TaskRecord():
            refs = [raw.get("assigned_to"), *_join_user_ids(raw.get("task_assignees"))]
        case ShootingRecord():
            crew = raw.get("shooting_crew")
            if crew is None:
                crew = raw.get("crew")
            refs = [
                raw.get("requested_by"),
                raw.get("director"),
                raw.get("runner"),
                *_join_user_ids(crew),
            ]
        case MeetingRecord():
            refs = [raw.get("created_by"), *_join_user_ids(raw.get("meeting_participants"))]
        case _:
            raise TypeError(f"Unsupported record type: {type(record).__name__}")
    return ordered_unique(refs)
