"""Command line front end for the course tracker API."""
import argparse
import logging
import os
import sys
from pathlib import Path

from tracker_client.api import ApiError, STATUSES, TrackerClient
from tracker_client.cache import SnapshotCache
from tracker_client.views import FILTERS, render_assignments, render_courses

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"
DEFAULT_CACHE = Path.home() / ".cache" / "course-tracker" / "snapshots.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="course-tracker", description="Track courses and assignments")
    parser.add_argument("--base-url", default=os.getenv("TRACKER_API_URL", DEFAULT_BASE_URL))
    parser.add_argument("--cache", default=os.getenv("TRACKER_CACHE", str(DEFAULT_CACHE)))
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("courses", help="list courses")

    for name in ("add-course", "edit-course"):
        p = sub.add_parser(name, help=f"{name.split('-')[0]} a course")
        if name == "edit-course":
            p.add_argument("course_id")
        p.add_argument("course_name")
        p.add_argument("start_date", help="YYYY-MM-DD")
        p.add_argument("end_date", help="YYYY-MM-DD")
        p.add_argument("--professor")

    p = sub.add_parser("delete-course", help="delete a course and its assignments")
    p.add_argument("course_id")

    p = sub.add_parser("assignments", help="list assignments, optionally for one course")
    p.add_argument("course_id", nargs="?")
    p.add_argument("--status", choices=FILTERS, default="all")

    p = sub.add_parser("add-assignment", help="add an assignment to a course")
    p.add_argument("course_id")
    p.add_argument("title")
    p.add_argument("due_date", help="YYYY-MM-DD")
    p.add_argument("--status", choices=STATUSES, default="pending")

    p = sub.add_parser("toggle", help="switch an assignment between pending and completed")
    p.add_argument("assignment_id")

    p = sub.add_parser("delete-assignment", help="delete an assignment")
    p.add_argument("assignment_id")
    return parser


def _print_stale(stale: bool) -> None:
    if stale:
        print("(server unreachable: showing cached data, it may be stale)")


def run(args: argparse.Namespace, client: TrackerClient) -> int:
    if args.command == "courses":
        snapshot = client.list_courses()
        _print_stale(snapshot.stale)
        print(render_courses(snapshot.data))

    elif args.command in ("add-course", "edit-course"):
        fields = {
            "course_name": args.course_name,
            "professor": args.professor,
            "start_date": args.start_date,
            "end_date": args.end_date,
        }
        if args.command == "add-course":
            course = client.create_course(fields)
            print(f"Course added: {course['id']}")
        else:
            client.update_course(args.course_id, fields)
            print("Course updated")

    elif args.command == "delete-course":
        print(client.delete_course(args.course_id))

    elif args.command == "assignments":
        if args.course_id:
            snapshot = client.list_course_assignments(args.course_id)
        else:
            snapshot = client.list_assignments()
        _print_stale(snapshot.stale)
        print(render_assignments(snapshot.data, status_filter=args.status))

    elif args.command == "add-assignment":
        assignment = client.create_assignment({
            "course_id": args.course_id,
            "title": args.title,
            "due_date": args.due_date,
            "status": args.status,
        })
        print(f"Assignment added: {assignment['id']}")

    elif args.command == "toggle":
        snapshot = client.list_assignments()
        if snapshot.stale:
            print("Server unreachable: cannot toggle from cached data, the status may be out of date",
                  file=sys.stderr)
            return 1
        current = next((a for a in snapshot.data if a["id"] == args.assignment_id), None)
        if current is None:
            print(f"Assignment {args.assignment_id} not found", file=sys.stderr)
            return 1
        updated = client.toggle_assignment_status(current)
        print(f"Assignment status updated: {updated['status']}")

    elif args.command == "delete-assignment":
        print(client.delete_assignment(args.assignment_id))

    return 0


def main(argv=None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(message)s")
    args = build_parser().parse_args(argv)
    client = TrackerClient(args.base_url, SnapshotCache(args.cache))
    try:
        return run(args, client)
    except ApiError as e:
        print(f"Error: {e}", file=sys.stderr)
        for err in e.errors:
            print(f"  {err.get('field')}: {err.get('message')}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
