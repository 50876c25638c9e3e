"""
Property-based tests for activity invariants using Hypothesis.

These tests stress the aggregation pipeline with random rows and instants.
"""

from datetime import UTC, date, datetime, timedelta

from hypothesis import given, settings
from hypothesis import strategies as st

from activity_engine.aggregator import ActivityAggregator
from activity_engine.assignees import resolve_assignees
from activity_engine.models import ActivityKind, ShootingRecord
from activity_engine.status_engine import TASK_CLOSED_STATUSES
from tests.fixtures import make_meeting, make_shooting, make_task

user_ids = st.one_of(st.none(), st.sampled_from(["u1", "u2", "u3", "u4", ""]))
statuses = st.one_of(
    st.none(),
    st.sampled_from(["pending", "in_progress", "completed", "done", "approved", "cancelled", "rejected"]),
)
days = st.dates(min_value=date(2023, 1, 1), max_value=date(2025, 12, 31))
instants = st.datetimes(
    min_value=datetime(2023, 1, 1), max_value=datetime(2025, 12, 31), timezones=st.just(UTC)
)


@st.composite
def task_rows(draw):
    deadline = draw(st.one_of(st.none(), days))
    return make_task(
        draw(st.uuids()).hex,
        status=draw(statuses),
        deadline=deadline.isoformat() if deadline else None,
        project_id=draw(st.sampled_from(["p1", "p2", None])),
        projects=None,
        assigned_to=draw(user_ids),
        task_assignees=[{"user_id": u} for u in draw(st.lists(user_ids, max_size=4))],
    )


@st.composite
def shooting_rows(draw):
    return make_shooting(
        draw(st.uuids()).hex,
        status=draw(statuses),
        scheduled_date=draw(days).isoformat(),
        scheduled_time=draw(st.sampled_from([None, "", "08:00:00", "18:30"])),
        requested_by=draw(user_ids),
        director=draw(user_ids),
        runner=draw(user_ids),
        shooting_crew=[{"user_id": u} for u in draw(st.lists(user_ids, max_size=4))],
    )


@st.composite
def meeting_rows(draw):
    return make_meeting(
        draw(st.uuids()).hex,
        status=draw(statuses),
        meeting_date=draw(days).isoformat(),
        created_by=draw(user_ids),
    )


# ============================================================================
# Assignee Set
# ============================================================================


@given(shooting_rows())
def test_shooting_assignees_ordered_and_unique(row):
    """Roles come first in fixed order; crew follows; no duplicates or blanks."""
    assignees = resolve_assignees(ShootingRecord(row))
    assert len(assignees) == len(set(assignees))
    assert all(assignees)

    expected = []
    for ref in [row["requested_by"], row["director"], row["runner"]] + [
        c["user_id"] for c in row["shooting_crew"]
    ]:
        if ref and ref not in expected:
            expected.append(ref)
    assert list(assignees) == expected


# ============================================================================
# Overdue Rule
# ============================================================================


@given(st.lists(task_rows(), max_size=8), instants)
def test_task_overdue_matches_rule(rows, now):
    """A task is overdue iff it has a deadline, is open, and the deadline has passed."""
    snapshot = ActivityAggregator().build(rows, [], [], now)
    for row, activity in zip(rows, snapshot.activities, strict=True):
        deadline = row["deadline"]
        expected = (
            deadline is not None
            and row["status"] not in TASK_CLOSED_STATUSES
            and datetime.fromisoformat(deadline).replace(tzinfo=UTC) < now
        )
        assert activity.is_overdue == expected
        assert activity.status == row["status"]


@given(st.lists(shooting_rows(), max_size=5), st.lists(meeting_rows(), max_size=5), instants)
def test_only_tasks_are_overdue(shootings, meetings, now):
    snapshot = ActivityAggregator().build([], shootings, meetings, now)
    assert not any(a.is_overdue for a in snapshot.activities)
    assert dict(snapshot.overdue_by_project) == {}


@given(st.lists(task_rows(), max_size=10), instants)
def test_overdue_index_matches_sequence(rows, now):
    """Every overdue task with a project is indexed under it, in sequence order."""
    snapshot = ActivityAggregator().build(rows, [], [], now)
    flattened = [a for group in snapshot.overdue_by_project.values() for a in group]
    expected = [a for a in snapshot.activities if a.is_overdue and a.project_id is not None]
    assert sorted(a.id for a in flattened) == sorted(a.id for a in expected)
    for project_id, group in snapshot.overdue_by_project.items():
        assert [a.id for a in group] == [a.id for a in expected if a.project_id == project_id]


# ============================================================================
# Sequence and Determinism
# ============================================================================


@settings(max_examples=50)
@given(
    st.lists(task_rows(), max_size=4),
    st.lists(shooting_rows(), max_size=4),
    st.lists(meeting_rows(), max_size=4),
    instants,
)
def test_sequence_order_and_idempotence(tasks, shootings, meetings, now):
    """Kinds are concatenated in fixed order and rebuilding gives an equal snapshot."""
    aggregator = ActivityAggregator()
    first = aggregator.build(tasks, shootings, meetings, now)
    second = aggregator.build(tasks, shootings, meetings, now)
    assert first == second

    kinds = [a.kind for a in first.activities]
    assert kinds == (
        [ActivityKind.TASK] * len(tasks)
        + [ActivityKind.SHOOTING] * len(shootings)
        + [ActivityKind.MEETING] * len(meetings)
    )


@given(shooting_rows(), instants, st.integers(min_value=1, max_value=400))
def test_shooting_completion_is_monotonic(row, now, days_later):
    """Once a shooting reads as auto-completed, it stays so at every later instant."""
    aggregator = ActivityAggregator()
    earlier = aggregator.build([], [row], [], now).activities[0]
    later = aggregator.build([], [row], [], now + timedelta(days=days_later)).activities[0]
    if earlier.status == "completed":
        assert later.status == "completed"
