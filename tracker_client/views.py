from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

DUE_SOON = timedelta(hours=24)
FILTERS = ("all", "pending", "completed")


def _due_date(assignment: dict) -> date:
    return date.fromisoformat(str(assignment["due_date"])[:10])


def is_due_soon(assignment: dict, now: datetime) -> bool:
    """Pending and due (midnight UTC of the due day) less than 24 hours from now."""
    if assignment.get("status") == "completed":
        return False
    due = datetime.combine(_due_date(assignment), time.min, tzinfo=timezone.utc)
    return due - now < DUE_SOON


def render_courses(courses: Iterable[dict]) -> str:
    lines = []
    for course in courses:
        professor = course.get("professor") or "-"
        lines.append(
            f"{course['id']}  {course['course_name']}  ({professor})  "
            f"{str(course['start_date'])[:10]} -> {str(course['end_date'])[:10]}"
        )
    return "\n".join(lines) if lines else "No courses yet."


def render_assignments(assignments: Iterable[dict], now: Optional[datetime] = None,
                       status_filter: str = "all") -> str:
    if status_filter not in FILTERS:
        raise ValueError(f"status_filter must be one of {FILTERS}")
    now = now or datetime.now(timezone.utc)

    selected = [a for a in assignments if status_filter == "all" or a.get("status") == status_filter]
    selected.sort(key=_due_date)

    lines = []
    for a in selected:
        course = f"  [{a['course_name']}]" if a.get("course_name") else ""
        line = f"{a['id']}  {_due_date(a).isoformat()}  {a['status']:<9}  {a['title']}{course}"
        if is_due_soon(a, now):
            line += "  ! Due within 24 hours!"
        lines.append(line)
    return "\n".join(lines) if lines else "No assignments."
