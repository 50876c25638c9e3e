"""
Relation flattener: raw source row -> Projection.

Each store exposes the same concepts under different column names and
joins. Joins may be missing, null, or (depending on how the backend
resolved the relation) a single-element list; all of these flatten to None.
"""

from typing import Any

from .models import MeetingRecord, Projection, ShootingRecord, SourceRecord, TaskRecord

SHOOTING_TITLE_PREFIX = "[Shooting] "
MEETING_TITLE_PREFIX = "[Meeting] "

SHOOTING_PRIORITY = "high"
MEETING_PRIORITY = "medium"


def _join(value: Any) -> dict | None:
    """Normalize an embedded relation to a dict or None."""
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, dict) else None


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _status(raw: dict) -> str | None:
    """Raw status as-is; only a missing value becomes None."""
    status = raw.get("status")
    return None if status is None else str(status)


def _project_fields(raw: dict) -> tuple[str | None, str | None]:
    """(project_title, client_name) via the projects -> clients join."""
    project = _join(raw.get("projects"))
    if project is None:
        return None, None
    client = _join(project.get("clients"))
    client_name = _text(client.get("name")) if client else None
    return _text(project.get("title")), client_name


def _client_name(raw: dict, via_project: str | None) -> str | None:
    """Direct clients join wins; fall back to the project's client."""
    client = _join(raw.get("clients"))
    if client is not None and client.get("name"):
        return _text(client["name"])
    return via_project


def _project_id(raw: dict) -> str | None:
    project_id = raw.get("project_id")
    if project_id is None:
        project_id = (_join(raw.get("projects")) or {}).get("id")
    return _text(project_id)


def flatten(record: SourceRecord) -> Projection:
    """Project a source record onto the kind-independent Activity fields."""
    raw = record.raw
    project_title, project_client = _project_fields(raw)
    title = str(raw.get("title") or "")

    match record:
        case TaskRecord():
            return Projection(
                title=title,
                status=_status(raw),
                scheduled_at=_text(raw.get("deadline")),
                project_id=_project_id(raw),
                project_title=project_title,
                client_name=project_client,
                owner=_text(raw.get("created_by")),
                priority=_text(raw.get("priority")),
                description=_text(raw.get("description")),
                created_at=_text(raw.get("created_at")),
            )
        case ShootingRecord():
            return Projection(
                title=SHOOTING_TITLE_PREFIX + title,
                status=_status(raw),
                scheduled_at=_text(raw.get("scheduled_date")),
                project_id=_project_id(raw),
                project_title=project_title,
                client_name=_client_name(raw, project_client),
                owner=_text(raw.get("requested_by")),
                priority=SHOOTING_PRIORITY,
                description=_text(raw.get("notes")),
                created_at=_text(raw.get("created_at")),
            )
        case MeetingRecord():
            return Projection(
                title=MEETING_TITLE_PREFIX + title,
                status=_status(raw),
                scheduled_at=_text(raw.get("meeting_date")),
                project_id=_project_id(raw),
                project_title=project_title,
                client_name=_client_name(raw, project_client),
                owner=_text(raw.get("created_by")),
                priority=MEETING_PRIORITY,
                description=_text(raw.get("notes")),
                created_at=_text(raw.get("created_at")),
            )
        case _:
            raise TypeError(f"Unsupported record type: {type(record).__name__}")
