"""
Activity Engine - Models

Source records (one per collaborator store) and the unified Activity they
are flattened into.

Source records form a closed tagged union:

    SourceRecord = TaskRecord | ShootingRecord | MeetingRecord

Each wraps one raw row exactly as the collaborator returned it. Nothing in
this module interprets time; see status_engine.
"""

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any, ClassVar


class RecordError(ValueError):
    """Raised when a raw row cannot be turned into an Activity."""

    pass


# =============================================================================
# ENUMS
# =============================================================================


class ActivityKind(StrEnum):
    """Source kind of an Activity. Also the order sources are concatenated in."""

    TASK = "task"
    SHOOTING = "shooting"
    MEETING = "meeting"


# =============================================================================
# SOURCE RECORDS
# =============================================================================


@dataclass(frozen=True)
class _SourceRecord:
    raw: dict[str, Any]

    kind: ClassVar[ActivityKind]

    def __post_init__(self):
        if not isinstance(self.raw, dict):
            raise RecordError(f"{self.kind} row must be a mapping, got {type(self.raw).__name__}")
        raw_id = self.raw.get("id")
        if raw_id is None or raw_id == "":
            raise RecordError(f"{self.kind} row has no id")

    @property
    def raw_id(self) -> str:
        return str(self.raw["id"])

    @property
    def activity_id(self) -> str:
        """Globally unique Activity id: raw id for tasks, '<kind>-<id>' otherwise."""
        return f"{self.kind}-{self.raw_id}"


@dataclass(frozen=True)
class TaskRecord(_SourceRecord):
    """Row from the task store: scalar assigned_to plus task_assignees join."""

    kind: ClassVar[ActivityKind] = ActivityKind.TASK

    @property
    def activity_id(self) -> str:
        return self.raw_id


@dataclass(frozen=True)
class ShootingRecord(_SourceRecord):
    """Row from the shooting schedule store: named-role FKs plus crew join."""

    kind: ClassVar[ActivityKind] = ActivityKind.SHOOTING


@dataclass(frozen=True)
class MeetingRecord(_SourceRecord):
    """Row from the meeting store: creator plus participants join."""

    kind: ClassVar[ActivityKind] = ActivityKind.MEETING


SourceRecord = TaskRecord | ShootingRecord | MeetingRecord

RECORD_TYPES: dict[ActivityKind, type[_SourceRecord]] = {
    ActivityKind.TASK: TaskRecord,
    ActivityKind.SHOOTING: ShootingRecord,
    ActivityKind.MEETING: MeetingRecord,
}


def wrap_record(kind: ActivityKind | str, raw: dict[str, Any]) -> SourceRecord:
    """Wrap a raw row in the record type for its kind."""
    return RECORD_TYPES[ActivityKind(kind)](raw)


# =============================================================================
# DERIVED SHAPES
# =============================================================================


@dataclass(frozen=True)
class Projection:
    """Kind-independent fields pulled out of a raw row by the flattener."""

    title: str
    status: str | None
    scheduled_at: str | None
    project_id: str | None
    project_title: str | None
    client_name: str | None
    owner: str | None
    priority: str | None
    description: str | None
    created_at: str | None


@dataclass(frozen=True)
class DerivedStatus:
    """Effective status of a record at one instant."""

    status: str | None
    is_overdue: bool = False


@dataclass(frozen=True)
class Activity:
    """
    Unified, ephemeral view of one task, shooting or meeting.

    Rebuilt on every read; never persisted. `source` is the untouched raw row
    for downstream actions; it takes no part in equality or hashing.
    """

    id: str
    kind: ActivityKind
    title: str
    status: str | None
    scheduled_at: str | None
    project_id: str | None
    project_title: str | None
    client_name: str | None
    assignees: tuple[str, ...]
    owner: str | None
    priority: str | None
    description: str | None
    created_at: str | None
    is_overdue: bool
    source: dict[str, Any] = field(hash=False, compare=False, repr=False)

    def involves(self, user_id: str) -> bool:
        """True if the user is an assignee or the owner."""
        return user_id in self.assignees or user_id == self.owner

    def to_dict(self, include_source: bool = True) -> dict:
        data = asdict(self)
        data["kind"] = self.kind.value
        data["assignees"] = list(self.assignees)
        if not include_source:
            data.pop("source")
        return data
