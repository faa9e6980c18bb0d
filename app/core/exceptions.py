from __future__ import annotations
from typing import Optional


class TrackerError(Exception):
    """Base class for the errors the services raise to the routers."""


class ValidationError(TrackerError):
    """One or more fields are missing, malformed or out of range."""

    def __init__(self, errors: list[dict[str, str]]):
        self.errors = errors
        super().__init__("; ".join(f"{e['field']}: {e['message']}" for e in errors))

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])

    @property
    def fields(self) -> list[str]:
        return [e["field"] for e in self.errors]


class NotFoundError(TrackerError):
    def __init__(self, resource: str, resource_id: Optional[str]):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found")


class StoreError(TrackerError):
    """Connectivity or internal failure of the data store. Never retried."""
