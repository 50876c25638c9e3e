#!/usr/bin/env python3
"""
Activity Engine CLI

Read-only views over a JSON dump of the three collaborator stores.

Usage:
    activity-engine --sources rows.json list [--kind task]
    activity-engine --sources rows.json user <user_id> [--scope visible|assigned|created]
    activity-engine --sources rows.json overdue
    activity-engine --sources rows.json summary

Global options:
    --now ISO       Evaluate at this instant instead of the current time
    --json          Emit JSON instead of a table
    --sources FILE  Defaults to ACTIVITY_SOURCES_FILE
"""

import argparse
import json
import logging
import sys
from datetime import datetime

from .config import LOG_LEVELS, get_settings
from .models import Activity, ActivityKind
from .observability import RequestContext, configure_logging
from .queries import USER_SCOPES, ActivityQueryService
from .sources import ActivitySources, load_sources_file

logger = logging.getLogger(__name__)

TABLE_COLUMNS = ("id", "kind", "status", "scheduled_at", "overdue", "title")


def print_table(headers: tuple, rows: list, widths: list | None = None):
    """Print a simple table."""
    if not widths:
        widths = [
            min(48, max(len(str(row[i])) for row in [headers] + rows))
            for i in range(len(headers))
        ]

    header_str = " │ ".join(str(h).ljust(w) for h, w in zip(headers, widths))
    print(header_str)
    print("─" * len(header_str))

    for row in rows:
        print(" │ ".join(str(c)[:w].ljust(w) for c, w in zip(row, widths)))


def _row(activity: Activity) -> tuple:
    return (
        activity.id,
        activity.kind.value,
        activity.status or "-",
        activity.scheduled_at or "-",
        "yes" if activity.is_overdue else "",
        activity.title,
    )


def _emit_activities(activities: list[Activity], as_json: bool) -> None:
    if as_json:
        print(json.dumps([a.to_dict(include_source=False) for a in activities], indent=2))
        return
    if not activities:
        print("No activities.")
        return
    print_table(TABLE_COLUMNS, [_row(a) for a in activities])


def cmd_list(service: ActivityQueryService, args) -> int:
    _emit_activities(service.activities(args.now, kind=args.kind), args.json)
    return 0


def cmd_user(service: ActivityQueryService, args) -> int:
    _emit_activities(service.for_user(args.user_id, args.scope, args.now), args.json)
    return 0


def cmd_overdue(service: ActivityQueryService, args) -> int:
    grouped = service.overdue_by_project(args.now)
    if args.json:
        payload = {
            project_id: [a.to_dict(include_source=False) for a in activities]
            for project_id, activities in grouped.items()
        }
        print(json.dumps(payload, indent=2))
        return 0

    if not grouped:
        print("Nothing overdue.")
        return 0
    for project_id, activities in grouped.items():
        title = activities[0].project_title or project_id
        print(f"\n{title} ({len(activities)} overdue)")
        print_table(TABLE_COLUMNS, [_row(a) for a in activities])
    return 0


def cmd_summary(service: ActivityQueryService, args) -> int:
    summary = service.summary(args.now)
    if args.json:
        print(json.dumps(summary, indent=2))
        return 0

    print(f"Computed at: {summary['computed_at']}")
    print(f"  Total: {summary['total']}")
    for kind, count in summary["by_kind"].items():
        print(f"  {kind.capitalize()}s: {count}")
    print(f"  Overdue: {summary['overdue']} across {summary['overdue_projects']} project(s)")
    return 0


def _parse_now(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid ISO-8601 instant: {value}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="activity-engine", description="Unified activity views")
    parser.add_argument("--sources", help="JSON file with tasks/shootings/meetings rows")
    parser.add_argument("--now", type=_parse_now, help="Evaluation instant (ISO-8601)")
    parser.add_argument("--json", action="store_true", help="Emit JSON")
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, help="Override ACTIVITY_LOG_LEVEL"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("list", help="All activities in source order")
    p.add_argument("--kind", choices=[k.value for k in ActivityKind], help="Only one kind")

    p = subparsers.add_parser("user", help="Activities for one user")
    p.add_argument("user_id", help="User ID")
    p.add_argument("--scope", choices=USER_SCOPES, default="visible")

    subparsers.add_parser("overdue", help="Overdue activities grouped by project")
    subparsers.add_parser("summary", help="Counts by kind and overdue")

    return parser


COMMANDS = {
    "list": cmd_list,
    "user": cmd_user,
    "overdue": cmd_overdue,
    "summary": cmd_summary,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, settings.log_json)

    sources_file = args.sources or settings.sources_file
    if not sources_file:
        parser.error("--sources is required (or set ACTIVITY_SOURCES_FILE)")

    try:
        data = load_sources_file(sources_file)
    except (OSError, ValueError) as e:
        logger.error(f"Could not load sources: {e}")
        return 1

    service = ActivityQueryService(ActivitySources.from_mapping(data), settings=settings)
    with RequestContext():
        return COMMANDS[args.command](service, args)


if __name__ == "__main__":
    sys.exit(main())
