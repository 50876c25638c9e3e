"""
Tests for the relation flattener.

Tests cover:
- Per-kind field mapping
- Fixed priorities and title prefixes for shootings/meetings
- Null-safety for missing, null and list-shaped joins
"""

from activity_engine.flatten import (
    MEETING_PRIORITY,
    SHOOTING_PRIORITY,
    flatten,
)
from activity_engine.models import MeetingRecord, ShootingRecord, TaskRecord
from tests.fixtures import make_meeting, make_shooting, make_task


class TestTaskProjection:
    def test_maps_task_columns(self, task_row):
        p = flatten(TaskRecord(task_row))
        assert p.title == "Task t1"
        assert p.status == "pending"
        assert p.scheduled_at == "2024-07-01"
        assert p.owner == "u-owner"
        assert p.priority == "low"
        assert p.description == "Cut the teaser"
        assert p.created_at == "2024-05-01T09:00:00+00:00"

    def test_project_and_client_joins(self, task_row):
        p = flatten(TaskRecord(task_row))
        assert p.project_id == "p1"
        assert p.project_title == "Spring Campaign"
        assert p.client_name == "Acme"

    def test_missing_project_join_is_none(self):
        p = flatten(TaskRecord(make_task(projects=None, project_id=None)))
        assert p.project_id is None
        assert p.project_title is None
        assert p.client_name is None

    def test_project_without_client(self):
        p = flatten(TaskRecord(make_task(projects={"id": "p1", "title": "Solo", "clients": None})))
        assert p.project_title == "Solo"
        assert p.client_name is None

    def test_list_shaped_join(self):
        """Joins returned as one-element lists flatten like objects."""
        row = make_task(projects=[{"id": "p1", "title": "Listy", "clients": [{"name": "Initech"}]}])
        p = flatten(TaskRecord(row))
        assert p.project_title == "Listy"
        assert p.client_name == "Initech"

    def test_empty_list_join(self):
        p = flatten(TaskRecord(make_task(projects=[])))
        assert p.project_title is None

    def test_project_id_falls_back_to_join(self):
        p = flatten(TaskRecord(make_task(project_id=None)))
        assert p.project_id == "p1"

    def test_empty_status_passes_through(self):
        """Status is the raw value, even an empty string."""
        assert flatten(TaskRecord(make_task(status=""))).status == ""
        assert flatten(ShootingRecord(make_shooting(status=""))).status == ""
        assert flatten(MeetingRecord(make_meeting(status=""))).status == ""

    def test_minimal_row(self):
        p = flatten(TaskRecord({"id": "bare"}))
        assert p.title == ""
        assert p.status is None
        assert p.scheduled_at is None
        assert p.owner is None


class TestShootingProjection:
    def test_maps_shooting_columns(self, shooting_row):
        p = flatten(ShootingRecord(shooting_row))
        assert p.title == "[Shooting] Product shoot"
        assert p.scheduled_at == "2024-07-10"
        assert p.owner == "u-req"
        assert p.priority == SHOOTING_PRIORITY == "high"
        assert p.description == "Bring the macro lens"

    def test_direct_client_join_wins(self):
        p = flatten(ShootingRecord(make_shooting(clients={"name": "Direct Co"})))
        assert p.client_name == "Direct Co"

    def test_client_falls_back_to_project(self, shooting_row):
        p = flatten(ShootingRecord(shooting_row))
        assert p.client_name == "Acme"


class TestMeetingProjection:
    def test_maps_meeting_columns(self, meeting_row):
        p = flatten(MeetingRecord(meeting_row))
        assert p.title == "[Meeting] Kickoff"
        assert p.scheduled_at == "2024-07-05"
        assert p.owner == "u-host"
        assert p.priority == MEETING_PRIORITY == "medium"
        assert p.description == "Agenda in the doc"
        assert p.project_title == "Rebrand"
        assert p.client_name == "Globex"

    def test_no_joins(self):
        p = flatten(MeetingRecord(make_meeting(clients=None, projects=None, project_id=None)))
        assert p.client_name is None
        assert p.project_id is None
