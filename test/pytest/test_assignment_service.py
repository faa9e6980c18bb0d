import pytest
from datetime import date

from app.core.exceptions import NotFoundError, ValidationError
from app.services.assignment_service import AssignmentService
from app.services.course_service import CourseService
from fakes import FakeTrackerRepo


async def make_course(repo, **overrides):
    fields = {"course_name": "CS101", "start_date": "2024-01-01", "end_date": "2024-05-01"}
    fields.update(overrides)
    return await CourseService.create_course(fields, repo)


def without_updated_at(record):
    return {k: v for k, v in record.items() if k != "updated_at"}


@pytest.mark.asyncio
async def test_due_date_inside_course_is_accepted():
    repo = FakeTrackerRepo()
    course = await make_course(repo)

    hw = await AssignmentService.create_assignment(
        {"course_id": course["id"], "title": "HW1", "due_date": "2024-02-01"}, repo
    )

    assert hw["status"] == "pending"
    assert hw["due_date"] == date(2024, 2, 1)


@pytest.mark.asyncio
async def test_due_date_after_course_end_is_rejected():
    repo = FakeTrackerRepo()
    course = await make_course(repo)

    with pytest.raises(ValidationError) as exc:
        await AssignmentService.create_assignment(
            {"course_id": course["id"], "title": "HW1", "due_date": "2024-06-01"}, repo
        )

    assert exc.value.fields == ["due_date"]
    assert repo.assignments == {}


@pytest.mark.asyncio
async def test_unknown_course_is_not_found_and_nothing_persisted():
    repo = FakeTrackerRepo()

    with pytest.raises(NotFoundError) as exc:
        await AssignmentService.create_assignment(
            {"course_id": "nope", "title": "HW1", "due_date": "2024-02-01"}, repo
        )

    assert exc.value.resource == "course"
    assert repo.assignments == {}


@pytest.mark.asyncio
async def test_list_by_missing_course_is_not_found():
    with pytest.raises(NotFoundError):
        await AssignmentService.list_by_course("nope", FakeTrackerRepo())


@pytest.mark.asyncio
async def test_list_assignments_joins_course_name_and_sorts_by_due_date():
    repo = FakeTrackerRepo()
    course = await make_course(repo)
    for title, due in [("HW2", "2024-03-01"), ("HW1", "2024-02-01")]:
        await AssignmentService.create_assignment({"course_id": course["id"], "title": title, "due_date": due}, repo)

    rows = await AssignmentService.list_assignments(repo)

    assert [r["title"] for r in rows] == ["HW1", "HW2"]
    assert {r["course_name"] for r in rows} == {"CS101"}


@pytest.mark.asyncio
async def test_status_toggle_round_trip_changes_nothing_else():
    repo = FakeTrackerRepo()
    course = await make_course(repo)
    hw = await AssignmentService.create_assignment(
        {"course_id": course["id"], "title": "HW1", "due_date": "2024-02-01"}, repo
    )

    done = await AssignmentService.update_assignment(hw["id"], {"status": "completed"}, repo)
    back = await AssignmentService.update_assignment(hw["id"], {"status": "pending"}, repo)

    assert done["status"] == "completed"
    assert back["updated_at"] >= hw["updated_at"]
    assert without_updated_at(back) == without_updated_at(hw)


@pytest.mark.asyncio
async def test_moving_due_date_out_of_course_is_rejected():
    repo = FakeTrackerRepo()
    course = await make_course(repo)
    hw = await AssignmentService.create_assignment(
        {"course_id": course["id"], "title": "HW1", "due_date": "2024-02-01"}, repo
    )

    with pytest.raises(ValidationError):
        await AssignmentService.update_assignment(hw["id"], {"due_date": "2023-12-31"}, repo)

    assert repo.assignments[hw["id"]]["due_date"] == date(2024, 2, 1)


@pytest.mark.asyncio
async def test_moving_to_another_course_checks_its_window():
    repo = FakeTrackerRepo()
    first = await make_course(repo)
    second = await make_course(repo, course_name="MA101", start_date="2024-03-01", end_date="2024-08-01")
    hw = await AssignmentService.create_assignment(
        {"course_id": first["id"], "title": "HW1", "due_date": "2024-02-01"}, repo
    )

    with pytest.raises(ValidationError):
        await AssignmentService.update_assignment(hw["id"], {"course_id": second["id"]}, repo)

    moved = await AssignmentService.update_assignment(
        hw["id"], {"course_id": second["id"], "due_date": "2024-04-01"}, repo
    )
    assert moved["course_id"] == second["id"]


@pytest.mark.asyncio
async def test_update_missing_assignment_is_not_found():
    with pytest.raises(NotFoundError) as exc:
        await AssignmentService.update_assignment("nope", {"status": "completed"}, FakeTrackerRepo())
    assert exc.value.resource == "assignment"


@pytest.mark.asyncio
async def test_delete_assignment_is_idempotent():
    repo = FakeTrackerRepo()
    course = await make_course(repo)
    hw = await AssignmentService.create_assignment(
        {"course_id": course["id"], "title": "HW1", "due_date": "2024-02-01"}, repo
    )

    assert await AssignmentService.delete_assignment(hw["id"], repo) is True
    assert await AssignmentService.delete_assignment(hw["id"], repo) is False
