# Activity Engine - Core Library
"""
Unified activity aggregation and derived-status engine.

Exports for the API, the CLI and other consumers.
"""

from .aggregator import ActivityAggregator, ActivitySnapshot, build_activity
from .assignees import resolve_assignees
from .flatten import flatten
from .models import (
    Activity,
    ActivityKind,
    DerivedStatus,
    MeetingRecord,
    Projection,
    RecordError,
    ShootingRecord,
    SourceRecord,
    TaskRecord,
    wrap_record,
)
from .queries import ActivityQueryService
from .sources import ActivitySources, SourceSnapshot, SourceState, load_sources_file
from .status_engine import derive_status

__all__ = [
    "Activity",
    "ActivityKind",
    "DerivedStatus",
    "Projection",
    "RecordError",
    "SourceRecord",
    "TaskRecord",
    "ShootingRecord",
    "MeetingRecord",
    "wrap_record",
    "flatten",
    "resolve_assignees",
    "derive_status",
    "build_activity",
    "ActivityAggregator",
    "ActivitySnapshot",
    "ActivitySources",
    "SourceSnapshot",
    "SourceState",
    "load_sources_file",
    "ActivityQueryService",
]
