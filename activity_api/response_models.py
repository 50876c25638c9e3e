"""
Pydantic response models for the activity API.

These give FastAPI the type information it needs to generate accurate
OpenAPI schemas.

Usage:
    from activity_api.response_models import ActivityListResponse

    @router.get("/activities", response_model=ActivityListResponse)
    def list_activities(): ...
"""

from typing import Any

from pydantic import BaseModel, Field

from activity_engine.models import Activity


class ActivityModel(BaseModel):
    """One unified activity."""

    id: str = Field(description="Raw id for tasks, '<kind>-<id>' for shootings/meetings")
    kind: str = Field(description="task | shooting | meeting")
    title: str
    status: str | None = Field(default=None, description="Raw or derived status")
    scheduled_at: str | None = Field(default=None, description="Deadline / scheduled date / meeting date")
    project_id: str | None = None
    project_title: str | None = None
    client_name: str | None = None
    assignees: list[str] = Field(default_factory=list, description="Ordered, deduplicated user ids")
    owner: str | None = Field(default=None, description="Creating / requesting user id")
    priority: str | None = None
    description: str | None = None
    created_at: str | None = None
    is_overdue: bool = False
    source: dict[str, Any] | None = Field(default=None, description="Original raw row, when requested")

    @classmethod
    def from_activity(cls, activity: Activity, include_source: bool = False) -> "ActivityModel":
        return cls(**activity.to_dict(include_source=include_source))


# ==== List Envelope ====
# Shape: {items, total, computed_at, loading}


class ActivityListResponse(BaseModel):
    """Activity list endpoint response."""

    items: list[ActivityModel] = Field(default_factory=list, description="Activities in source order")
    total: int = Field(description="Total count")
    computed_at: str = Field(description="ISO instant the statuses were derived at")
    loading: bool = Field(default=False, description="True while any source is unresolved")


class OverdueByProjectResponse(BaseModel):
    """Overdue activities grouped by project."""

    projects: dict[str, list[ActivityModel]] = Field(default_factory=dict)
    total: int = Field(description="Number of overdue activities with a project")
    computed_at: str
    loading: bool = False


class SummaryResponse(BaseModel):
    """Counts for dashboard banners."""

    total: int
    by_kind: dict[str, int]
    overdue: int
    overdue_projects: int
    computed_at: str
    loading: bool = False


# ==== Health Check ====


class SourceStatusModel(BaseModel):
    kind: str
    state: str = Field(description="pending | ready | failed")
    revision: int
    rows: int
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check result."""

    status: str = Field(description="healthy | loading | degraded")
    timestamp: str = Field(description="ISO timestamp")
    loading: bool
    sources: list[SourceStatusModel]
    cache: dict[str, Any] = Field(default_factory=dict)
