# app/services/assignment_service.py
import logging
from typing import Any, Sequence

from app.core.exceptions import NotFoundError
from app.database.tracker_repository import TrackerRepository
from app.services.validation import (
    check_due_date_in_course,
    validate_assignment,
    validate_assignment_patch,
)

logger = logging.getLogger(__name__)


async def _load_course(course_id: str, repo: TrackerRepository) -> dict:
    course = await repo.get_course(course_id)
    if course is None:
        raise NotFoundError("course", course_id)
    return course


class AssignmentService:
    @staticmethod
    async def list_assignments(repo: TrackerRepository) -> Sequence[dict]:
        return await repo.list_assignments()

    @staticmethod
    async def list_by_course(course_id: str, repo: TrackerRepository) -> Sequence[dict]:
        await _load_course(course_id, repo)
        return await repo.list_assignments_by_course(course_id)

    @staticmethod
    async def create_assignment(fields: Any, repo: TrackerRepository) -> dict:
        assignment = validate_assignment(fields)
        course = await _load_course(assignment.course_id, repo)
        check_due_date_in_course(assignment.due_date, course)
        created = await repo.insert_assignment(assignment.model_dump())
        logger.info("Assignment created",
                    extra={"assignment_id": created["id"], "course_id": created["course_id"]})
        return created

    @staticmethod
    async def update_assignment(assignment_id: str, fields: Any, repo: TrackerRepository) -> dict:
        changes = validate_assignment_patch(fields)
        current = await repo.get_assignment(assignment_id)
        if current is None:
            raise NotFoundError("assignment", assignment_id)

        if "course_id" in changes or "due_date" in changes:
            course = await _load_course(changes.get("course_id", current["course_id"]), repo)
            check_due_date_in_course(changes.get("due_date", current["due_date"]), course)

        if not changes:
            return current
        updated = await repo.update_assignment(assignment_id, changes)
        if updated is None:
            raise NotFoundError("assignment", assignment_id)
        return updated

    @staticmethod
    async def delete_assignment(assignment_id: str, repo: TrackerRepository) -> bool:
        deleted = await repo.delete_assignment(assignment_id)
        if not deleted:
            logger.info("Assignment already absent", extra={"assignment_id": assignment_id})
        return deleted
