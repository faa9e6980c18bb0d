from datetime import date

import pytest

from app.core.exceptions import ValidationError
from app.services.validation import (
    check_due_date_in_course,
    stranded_assignments,
    validate_assignment,
    validate_assignment_patch,
    validate_course,
)

COURSE = {"course_name": "CS101", "start_date": "2024-01-01", "end_date": "2024-05-01"}


def test_course_fields_are_parsed_and_trimmed():
    course = validate_course(dict(COURSE, course_name="  CS101 ", professor="   "))
    assert course.course_name == "CS101"
    assert course.professor is None
    assert course.start_date == date(2024, 1, 1)
    assert course.end_date == date(2024, 5, 1)


@pytest.mark.parametrize("end", ["2024-01-01", "2023-12-31"])
def test_end_date_must_be_after_start_date(end):
    with pytest.raises(ValidationError) as exc:
        validate_course(dict(COURSE, end_date=end))
    assert exc.value.fields == ["end_date"]


def test_every_missing_course_field_is_reported():
    with pytest.raises(ValidationError) as exc:
        validate_course({"professor": "Ada"})
    assert set(exc.value.fields) == {"course_name", "start_date", "end_date"}
    assert "course_name is required" in str(exc.value)


def test_blank_course_name_and_bad_date_are_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_course(dict(COURSE, course_name="  ", start_date="not-a-date"))
    assert set(exc.value.fields) == {"course_name", "start_date"}


def test_non_object_body_is_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_course(["CS101"])
    assert exc.value.fields == ["body"]


def test_assignment_defaults_to_pending():
    assignment = validate_assignment({"course_id": "c1", "title": "HW1", "due_date": "2024-02-01"})
    assert assignment.status == "pending"


def test_assignment_status_must_be_known():
    with pytest.raises(ValidationError) as exc:
        validate_assignment({"course_id": "c1", "title": "HW1", "due_date": "2024-02-01", "status": "late"})
    assert exc.value.fields == ["status"]


def test_patch_keeps_only_sent_fields():
    assert validate_assignment_patch({"status": "completed", "_id": "x"}) == {"status": "completed"}


def test_patch_rejects_nulls():
    with pytest.raises(ValidationError) as exc:
        validate_assignment_patch({"title": None})
    assert exc.value.fields == ["title"]


def test_due_date_window_is_inclusive():
    course = {"start_date": date(2024, 1, 1), "end_date": date(2024, 5, 1)}
    check_due_date_in_course(date(2024, 1, 1), course)
    check_due_date_in_course(date(2024, 5, 1), course)
    with pytest.raises(ValidationError) as exc:
        check_due_date_in_course(date(2024, 6, 1), course)
    assert exc.value.fields == ["due_date"]
    assert "within course duration" in exc.value.errors[0]["message"]


def test_stranded_assignments():
    rows = [
        {"id": "a", "due_date": date(2024, 1, 15)},
        {"id": "b", "due_date": date(2024, 4, 20)},
    ]
    stranded = stranded_assignments(rows, date(2024, 2, 1), date(2024, 5, 1))
    assert [a["id"] for a in stranded] == ["a"]


@pytest.mark.parametrize("start", [0, "1704067200", 20240101.0])
def test_course_dates_must_be_iso_text(start):
    with pytest.raises(ValidationError) as exc:
        validate_course(dict(COURSE, start_date=start))
    assert exc.value.fields == ["start_date"]


@pytest.mark.parametrize("due", [86400, "1706745600"])
def test_due_dates_must_be_iso_text(due):
    with pytest.raises(ValidationError) as exc:
        validate_assignment({"course_id": "c1", "title": "HW1", "due_date": due})
    assert exc.value.fields == ["due_date"]

    with pytest.raises(ValidationError) as exc:
        validate_assignment_patch({"due_date": due})
    assert exc.value.fields == ["due_date"]
