"""
HTTP client for the course tracker API.

List fetches go through the snapshot cache: a successful response replaces the
cached copy, while an unreachable server or a 5xx answer falls back to the last
cached copy, flagged as stale. Nothing is retried automatically.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from tracker_client.cache import SnapshotCache

logger = logging.getLogger(__name__)

STATUSES = ("pending", "completed")


class ApiError(Exception):
    def __init__(self, status_code: Optional[int], message: str, errors: Optional[list] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(message if status_code is None else f"{status_code}: {message}")


@dataclass
class Snapshot:
    data: Any
    stale: bool = False


def _error_from(response: requests.Response) -> ApiError:
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, dict):
        return ApiError(response.status_code, detail.get("message", response.reason), detail.get("errors"))
    return ApiError(response.status_code, detail or response.reason or "Request failed")


class TrackerClient:
    def __init__(self, base_url: str, cache: SnapshotCache,
                 session: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.cache = cache
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise ApiError(None, f"Could not reach {url}: {e}") from e
        if not response.ok:
            raise _error_from(response)
        return response

    def _fetch(self, path: str, cache_key: str) -> Snapshot:
        try:
            data = self._request("GET", path).json()
        except ApiError as e:
            if e.status_code is not None and e.status_code < 500:
                raise
            cached = self.cache.get(cache_key)
            if cached is None:
                raise
            logger.warning("Fetching %s failed (%s); using cached data, it may be stale", path, e)
            return Snapshot(cached, stale=True)
        self.cache.put(cache_key, data)
        return Snapshot(data)

    # ---- courses ----
    def list_courses(self) -> Snapshot:
        return self._fetch("/courses", "courses")

    def create_course(self, fields: dict) -> dict:
        return self._request("POST", "/courses", json=fields).json()

    def update_course(self, course_id: str, fields: dict) -> dict:
        return self._request("PUT", f"/courses/{course_id}", json=fields).json()

    def delete_course(self, course_id: str) -> str:
        return self._request("DELETE", f"/courses/{course_id}").json()["message"]

    # ---- assignments ----
    def list_assignments(self) -> Snapshot:
        return self._fetch("/assignments", "assignments")

    def list_course_assignments(self, course_id: str) -> Snapshot:
        return self._fetch(f"/assignments/course/{course_id}", f"assignments-{course_id}")

    def create_assignment(self, fields: dict) -> dict:
        return self._request("POST", "/assignments", json=fields).json()

    def set_assignment_status(self, assignment_id: str, status: str) -> dict:
        if status not in STATUSES:
            raise ValueError(f"status must be one of {STATUSES}")
        return self._request("PUT", f"/assignments/{assignment_id}", json={"status": status}).json()

    def toggle_assignment_status(self, assignment: dict) -> dict:
        new_status = "completed" if assignment.get("status") == "pending" else "pending"
        return self.set_assignment_status(assignment["id"], new_status)

    def delete_assignment(self, assignment_id: str) -> str:
        return self._request("DELETE", f"/assignments/{assignment_id}").json()["message"]
