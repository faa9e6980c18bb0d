# app/services/course_service.py
import logging
from typing import Any, Sequence

from app.core.exceptions import NotFoundError, ValidationError
from app.database.tracker_repository import TrackerRepository
from app.services.validation import stranded_assignments, validate_course

logger = logging.getLogger(__name__)


class CourseService:
    @staticmethod
    async def list_courses(repo: TrackerRepository) -> Sequence[dict]:
        return await repo.list_courses()

    @staticmethod
    async def create_course(fields: Any, repo: TrackerRepository) -> dict:
        course = validate_course(fields)
        created = await repo.insert_course(course.model_dump())
        logger.info("Course created", extra={"course_id": created["id"]})
        return created

    @staticmethod
    async def update_course(course_id: str, fields: Any, repo: TrackerRepository) -> dict:
        course = validate_course(fields)
        if await repo.get_course(course_id) is None:
            raise NotFoundError("course", course_id)

        # existing assignments must stay inside the new window
        stranded = stranded_assignments(
            await repo.list_assignments_by_course(course_id), course.start_date, course.end_date
        )
        if stranded:
            raise ValidationError([
                {
                    "field": "start_date" if a["due_date"] < course.start_date else "end_date",
                    "message": f"Assignment '{a['title']}' is due {a['due_date'].isoformat()}, "
                               f"outside the new course duration",
                }
                for a in stranded
            ])

        updated = await repo.replace_course(course_id, course.model_dump())
        if updated is None:
            raise NotFoundError("course", course_id)
        return updated

    @staticmethod
    async def delete_course(course_id: str, repo: TrackerRepository) -> int:
        removed = await repo.delete_course_cascade(course_id)
        if removed is None:
            raise NotFoundError("course", course_id)
        logger.info("Course deleted", extra={"course_id": course_id, "assignments_removed": removed})
        return removed
