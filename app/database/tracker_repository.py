from __future__ import annotations
from typing import Any, Optional
from abc import ABC, abstractmethod

class TrackerRepository(ABC):

    @abstractmethod
    async def ensure_schema(self) -> None:
        raise NotImplementedError

    # Courses
    @abstractmethod
    async def list_courses(self) -> list[dict]:
        """Returns every course ordered by course_name."""
        raise NotImplementedError

    @abstractmethod
    async def get_course(self, course_id: str) -> Optional[dict]:
        raise NotImplementedError

    @abstractmethod
    async def insert_course(self, fields: dict[str, Any]) -> dict:
        raise NotImplementedError

    @abstractmethod
    async def replace_course(self, course_id: str, fields: dict[str, Any]) -> Optional[dict]:
        """Returns None when the course does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def delete_course_cascade(self, course_id: str) -> Optional[int]:
        """
        Deletes the course and all its assignments in one atomic unit.
        Returns the number of assignments removed, None when the course does not exist.
        """
        raise NotImplementedError

    # Assignments
    @abstractmethod
    async def list_assignments(self) -> list[dict]:
        """Returns every assignment with its course_name, ordered by due_date."""
        raise NotImplementedError

    @abstractmethod
    async def list_assignments_by_course(self, course_id: str) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    async def get_assignment(self, assignment_id: str) -> Optional[dict]:
        raise NotImplementedError

    @abstractmethod
    async def insert_assignment(self, fields: dict[str, Any]) -> dict:
        raise NotImplementedError

    @abstractmethod
    async def update_assignment(self, assignment_id: str, fields: dict[str, Any]) -> Optional[dict]:
        """Partial update. Returns None when the assignment does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def delete_assignment(self, assignment_id: str) -> bool:
        """Returns False when there was nothing to delete."""
        raise NotImplementedError
