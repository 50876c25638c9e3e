"""
Activity API Router - read-only views over the unified activity snapshot.

Endpoints:
- GET /activities - full sequence (tasks, shootings, meetings), optional kind filter
- GET /activities/overdue-by-project - overdue activities grouped by project
- GET /activities/summary - counts by kind and overdue
- GET /activities/by-id/{activity_id} - one activity, with its raw source row
  (its own segment, so raw ids such as "summary" never clash with the views above)
- GET /users/{user_id}/activities - per-user view (visible | assigned | created)
- GET /health - source fetch states and cache stats

Every endpoint accepts `now` (ISO-8601). Without it statuses are derived at
request time in the engine timezone.
"""

import logging
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from activity_engine.config import get_settings
from activity_engine.models import ActivityKind
from activity_engine.queries import ActivityQueryService
from activity_engine.sources import ActivitySources, SourceState, load_sources_file

from .response_models import (
    ActivityListResponse,
    ActivityModel,
    HealthResponse,
    OverdueByProjectResponse,
    SourceStatusModel,
    SummaryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["activities"])

NOW_QUERY = Query(None, description="Evaluation instant (ISO-8601); defaults to request time")

# Global service instance
_service: ActivityQueryService | None = None


def get_activity_service() -> ActivityQueryService:
    """Get or create the global query service."""
    global _service
    if _service is None:
        settings = get_settings()
        sources = ActivitySources()
        if settings.sources_file:
            sources = ActivitySources.from_mapping(load_sources_file(settings.sources_file))
            logger.info(f"Loaded activity sources from {settings.sources_file}")
        _service = ActivityQueryService(sources, settings=settings)
    return _service


def set_activity_service(service: ActivityQueryService | None) -> None:
    """Replace (or with None, reset) the global query service."""
    global _service
    _service = service


@router.get("/activities", response_model=ActivityListResponse)
def list_activities(
    now: datetime | None = NOW_QUERY,
    kind: ActivityKind | None = Query(None, description="Only this kind"),
    include_source: bool = Query(False, description="Embed the raw source row"),
    service: ActivityQueryService = Depends(get_activity_service),
):
    """Full ordered activity sequence."""
    snapshot = service.snapshot(now)
    activities = snapshot.by_kind(kind) if kind else list(snapshot.activities)
    return ActivityListResponse(
        items=[ActivityModel.from_activity(a, include_source) for a in activities],
        total=len(activities),
        computed_at=snapshot.computed_at.isoformat(),
        loading=snapshot.loading,
    )


@router.get("/activities/overdue-by-project", response_model=OverdueByProjectResponse)
def overdue_by_project(
    now: datetime | None = NOW_QUERY,
    service: ActivityQueryService = Depends(get_activity_service),
):
    """Overdue activities keyed by project, in sequence order."""
    snapshot = service.snapshot(now)
    projects = {
        project_id: [ActivityModel.from_activity(a) for a in activities]
        for project_id, activities in snapshot.overdue_by_project.items()
    }
    return OverdueByProjectResponse(
        projects=projects,
        total=sum(len(items) for items in projects.values()),
        computed_at=snapshot.computed_at.isoformat(),
        loading=snapshot.loading,
    )


@router.get("/activities/summary", response_model=SummaryResponse)
def activity_summary(
    now: datetime | None = NOW_QUERY,
    service: ActivityQueryService = Depends(get_activity_service),
):
    return SummaryResponse(**service.summary(now))


@router.get("/activities/by-id/{activity_id}", response_model=ActivityModel)
def get_activity(
    activity_id: str,
    now: datetime | None = NOW_QUERY,
    service: ActivityQueryService = Depends(get_activity_service),
):
    """One activity including its raw source row."""
    for activity in service.snapshot(now).activities:
        if activity.id == activity_id:
            return ActivityModel.from_activity(activity, include_source=True)
    raise HTTPException(status_code=404, detail=f"Activity {activity_id} not found")


@router.get("/users/{user_id}/activities", response_model=ActivityListResponse)
def user_activities(
    user_id: str,
    scope: Literal["visible", "assigned", "created"] = Query(
        "visible", description="visible = assignee or owner"
    ),
    now: datetime | None = NOW_QUERY,
    service: ActivityQueryService = Depends(get_activity_service),
):
    """Activities a user is involved in."""
    snapshot = service.snapshot(now)
    activities = service.for_user(user_id, scope, snapshot.computed_at)
    return ActivityListResponse(
        items=[ActivityModel.from_activity(a) for a in activities],
        total=len(activities),
        computed_at=snapshot.computed_at.isoformat(),
        loading=snapshot.loading,
    )


@router.get("/health", response_model=HealthResponse)
def health(service: ActivityQueryService = Depends(get_activity_service)):
    """Source fetch states and snapshot cache statistics."""
    collections = service.source_status()
    if any(c.state == SourceState.FAILED for c in collections):
        status = "degraded"
    elif service.is_loading:
        status = "loading"
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(UTC).isoformat(),
        loading=service.is_loading,
        sources=[SourceStatusModel(**c.to_dict()) for c in collections],
        cache=service.cache_stats().to_dict(),
    )
