"""
Validation layer.

Raw JSON mappings are parsed into the payload models, every failing field is
collected into a single ValidationError, and the cross-field rules the models
cannot express on their own are applied here.
"""
from __future__ import annotations
from datetime import date
from typing import Any, Iterable, Mapping

import pydantic

from app.core.exceptions import ValidationError
from app.schemas.payloads import AssignmentFields, AssignmentPatch, CourseFields

_MISSING_TYPES = {"missing"}


def _field_name(loc: Iterable[Any]) -> str:
    name = ".".join(str(part) for part in loc)
    return name or "body"


def _from_pydantic(exc: pydantic.ValidationError) -> ValidationError:
    errors = []
    for err in exc.errors():
        field = _field_name(err.get("loc", ()))
        if err.get("type") in _MISSING_TYPES:
            message = f"{field} is required"
        else:
            message = err.get("msg", "Invalid value")
        errors.append({"field": field, "message": message})
    return ValidationError(errors)


def _ensure_mapping(fields: Any) -> Mapping[str, Any]:
    if not isinstance(fields, Mapping):
        raise ValidationError.single("body", "Expected a JSON object")
    return fields


def validate_course(fields: Any) -> CourseFields:
    try:
        course = CourseFields.model_validate(_ensure_mapping(fields))
    except pydantic.ValidationError as exc:
        raise _from_pydantic(exc) from exc
    if course.end_date <= course.start_date:
        raise ValidationError.single("end_date", "End date must be after start date")
    return course


def validate_assignment(fields: Any) -> AssignmentFields:
    try:
        return AssignmentFields.model_validate(_ensure_mapping(fields))
    except pydantic.ValidationError as exc:
        raise _from_pydantic(exc) from exc


def validate_assignment_patch(fields: Any) -> dict[str, Any]:
    try:
        patch = AssignmentPatch.model_validate(_ensure_mapping(fields))
    except pydantic.ValidationError as exc:
        raise _from_pydantic(exc) from exc
    changes = patch.model_dump(exclude_unset=True)
    nulls = [name for name, value in changes.items() if value is None]
    if nulls:
        raise ValidationError([{"field": name, "message": f"{name} may not be null"} for name in nulls])
    return changes


def check_due_date_in_course(due_date: date, course: Mapping[str, Any]) -> None:
    if not course["start_date"] <= due_date <= course["end_date"]:
        raise ValidationError.single(
            "due_date",
            f"Due date must be within course duration "
            f"({course['start_date'].isoformat()} to {course['end_date'].isoformat()})",
        )


def stranded_assignments(assignments: Iterable[Mapping[str, Any]], start_date: date, end_date: date) -> list[dict]:
    """Assignments whose due date would fall outside a new course window."""
    return [
        dict(a) for a in assignments
        if not start_date <= a["due_date"] <= end_date
    ]
