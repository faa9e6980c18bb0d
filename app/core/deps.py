from fastapi import Request
from app.database.tracker_repository import TrackerRepository

def get_repository(request: Request) -> TrackerRepository:
    repo = getattr(request.app.state, "tracker_repo", None)
    if repo is None:
        raise RuntimeError("Tracker repository not initialized")
    return repo
