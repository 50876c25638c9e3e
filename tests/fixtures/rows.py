"""
Raw collaborator rows with pinned values.

Every factory returns a fresh dict; keyword overrides replace top-level
columns (pass None to null out a join).
"""

from datetime import UTC, datetime

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def make_task(task_id="t1", **overrides):
    row = {
        "id": task_id,
        "title": f"Task {task_id}",
        "status": "pending",
        "deadline": "2024-07-01",
        "project_id": "p1",
        "created_by": "u-owner",
        "assigned_to": "u1",
        "priority": "low",
        "description": "Cut the teaser",
        "created_at": "2024-05-01T09:00:00+00:00",
        "projects": {"id": "p1", "title": "Spring Campaign", "clients": {"name": "Acme"}},
        "task_assignees": [{"user_id": "u2"}],
    }
    row.update(overrides)
    return row


def make_shooting(shooting_id="s1", **overrides):
    row = {
        "id": shooting_id,
        "title": "Product shoot",
        "status": "approved",
        "scheduled_date": "2024-07-10",
        "scheduled_time": "10:00:00",
        "notes": "Bring the macro lens",
        "project_id": "p1",
        "requested_by": "u-req",
        "director": "u-dir",
        "runner": "u-run",
        "shooting_crew": [{"user_id": "u-crew1"}, {"user_id": "u-crew2"}],
        "projects": {"id": "p1", "title": "Spring Campaign", "clients": {"name": "Acme"}},
    }
    row.update(overrides)
    return row


def make_meeting(meeting_id="m1", **overrides):
    row = {
        "id": meeting_id,
        "title": "Kickoff",
        "status": "scheduled",
        "meeting_date": "2024-07-05",
        "notes": "Agenda in the doc",
        "project_id": "p2",
        "created_by": "u-host",
        "meeting_participants": [{"user_id": "u1"}, {"user_id": "u3"}],
        "clients": {"name": "Globex"},
        "projects": {"id": "p2", "title": "Rebrand"},
    }
    row.update(overrides)
    return row


def sources_payload():
    """One row of each kind plus an overdue task assigned to u9."""
    return {
        "tasks": [
            make_task("t1"),
            make_task("t2", deadline="2024-01-01", assigned_to="u9", task_assignees=[]),
        ],
        "shootings": [make_shooting("s1")],
        "meetings": [make_meeting("m1")],
    }
