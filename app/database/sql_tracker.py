from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional
from uuid import uuid4
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, AsyncSession
from sqlalchemy import select, insert, update, delete

from app.core.exceptions import StoreError
from app.database.tracker_repository import TrackerRepository
from app.database.tables import metadata, courses, assignments

logger = logging.getLogger("tracker.repository")

COURSE_FIELDS = ("course_name", "professor", "start_date", "end_date")
ASSIGNMENT_FIELDS = ("course_id", "title", "due_date", "status")


def _now() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Store failure while trying to %s", action)
        raise StoreError(f"Could not {action}") from exc


class SqlTrackerRepository(TrackerRepository):
    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)

    async def ensure_schema(self) -> None:
        logger.info("Ensuring schema for tracker tables")
        with _store_errors("create the schema"):
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        logger.info("Schema ready")

    # -----------------------------
    # Courses
    # -----------------------------
    async def list_courses(self) -> list[dict]:
        stmt = select(courses).order_by(courses.c.course_name, courses.c.id)
        with _store_errors("list courses"):
            async with self.session_factory() as session:
                rows = (await session.execute(stmt)).mappings().all()
        return [dict(r) for r in rows]

    async def get_course(self, course_id: str) -> Optional[dict]:
        stmt = select(courses).where(courses.c.id == course_id)
        with _store_errors("load course"):
            async with self.session_factory() as session:
                row = (await session.execute(stmt)).mappings().first()
        return dict(row) if row is not None else None

    async def insert_course(self, fields: dict[str, Any]) -> dict:
        now = _now()
        values = {k: fields.get(k) for k in COURSE_FIELDS}
        values.update(id=str(uuid4()), created_at=now, updated_at=now)
        with _store_errors("create course"):
            async with self.session_factory() as session:
                await session.execute(insert(courses).values(**values))
                await session.commit()
        logger.debug("Course created", extra={"course_id": values["id"]})
        return values

    async def replace_course(self, course_id: str, fields: dict[str, Any]) -> Optional[dict]:
        values = {k: fields.get(k) for k in COURSE_FIELDS}
        values["updated_at"] = _now()
        with _store_errors("update course"):
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(courses).where(courses.c.id == course_id).values(**values)
                    )
                    if result.rowcount == 0:
                        return None
                    row = (await session.execute(
                        select(courses).where(courses.c.id == course_id)
                    )).mappings().one()
        logger.debug("Course replaced", extra={"course_id": course_id})
        return dict(row)

    async def delete_course_cascade(self, course_id: str) -> Optional[int]:
        with _store_errors("delete course"):
            async with self.session_factory() as session:
                async with session.begin():
                    found = (await session.execute(
                        select(courses.c.id).where(courses.c.id == course_id)
                    )).first()
                    if found is None:
                        return None
                    removed = await self._delete_course_assignments(session, course_id)
                    await self._delete_course_row(session, course_id)
        logger.info("Course deleted with its assignments",
                    extra={"course_id": course_id, "assignments_removed": removed})
        return removed

    async def _delete_course_assignments(self, session: AsyncSession, course_id: str) -> int:
        result = await session.execute(delete(assignments).where(assignments.c.course_id == course_id))
        return result.rowcount or 0

    async def _delete_course_row(self, session: AsyncSession, course_id: str) -> None:
        await session.execute(delete(courses).where(courses.c.id == course_id))

    # -----------------------------
    # Assignments
    # -----------------------------
    async def list_assignments(self) -> list[dict]:
        stmt = (
            select(assignments, courses.c.course_name)
            .select_from(assignments.join(courses, assignments.c.course_id == courses.c.id))
            .order_by(assignments.c.due_date, assignments.c.id)
        )
        with _store_errors("list assignments"):
            async with self.session_factory() as session:
                rows = (await session.execute(stmt)).mappings().all()
        return [dict(r) for r in rows]

    async def list_assignments_by_course(self, course_id: str) -> list[dict]:
        stmt = (
            select(assignments)
            .where(assignments.c.course_id == course_id)
            .order_by(assignments.c.due_date, assignments.c.id)
        )
        with _store_errors("list course assignments"):
            async with self.session_factory() as session:
                rows = (await session.execute(stmt)).mappings().all()
        return [dict(r) for r in rows]

    async def get_assignment(self, assignment_id: str) -> Optional[dict]:
        stmt = select(assignments).where(assignments.c.id == assignment_id)
        with _store_errors("load assignment"):
            async with self.session_factory() as session:
                row = (await session.execute(stmt)).mappings().first()
        return dict(row) if row is not None else None

    async def insert_assignment(self, fields: dict[str, Any]) -> dict:
        now = _now()
        values = {k: fields.get(k) for k in ASSIGNMENT_FIELDS}
        values["status"] = values["status"] or "pending"
        values.update(id=str(uuid4()), created_at=now, updated_at=now)
        with _store_errors("create assignment"):
            async with self.session_factory() as session:
                await session.execute(insert(assignments).values(**values))
                await session.commit()
        logger.debug("Assignment created",
                     extra={"assignment_id": values["id"], "course_id": values["course_id"]})
        return values

    async def update_assignment(self, assignment_id: str, fields: dict[str, Any]) -> Optional[dict]:
        values = {k: v for k, v in fields.items() if k in ASSIGNMENT_FIELDS}
        values["updated_at"] = _now()
        with _store_errors("update assignment"):
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(assignments).where(assignments.c.id == assignment_id).values(**values)
                    )
                    if result.rowcount == 0:
                        return None
                    row = (await session.execute(
                        select(assignments).where(assignments.c.id == assignment_id)
                    )).mappings().one()
        logger.debug("Assignment updated",
                     extra={"assignment_id": assignment_id, "fields": sorted(values)})
        return dict(row)

    async def delete_assignment(self, assignment_id: str) -> bool:
        with _store_errors("delete assignment"):
            async with self.session_factory() as session:
                result = await session.execute(delete(assignments).where(assignments.c.id == assignment_id))
                await session.commit()
        deleted = bool(result.rowcount)
        logger.debug("Assignment delete", extra={"assignment_id": assignment_id, "deleted": deleted})
        return deleted
