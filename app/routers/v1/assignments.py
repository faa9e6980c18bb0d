# app/routers/v1/assignments.py
from typing import Annotated, Any
from fastapi import APIRouter, Body, Depends, HTTPException, status
from app.core.deps import get_repository
from app.core.exceptions import NotFoundError, StoreError, ValidationError
from app.database.tracker_repository import TrackerRepository
from app.routers.v1.courses import validation_failed
from app.schemas.data import Assignment, AssignmentWithCourse, Message
from app.services.assignment_service import AssignmentService

router = APIRouter()
TrackerRepoDep = Annotated[TrackerRepository, Depends(get_repository)]
FieldsBody = Annotated[Any, Body()]


def invalid_course() -> HTTPException:
    # a dangling course_id in the body is a client-fixable field error
    return validation_failed(ValidationError.single("course_id", "Invalid course ID"))


@router.get("/assignments", response_model=list[AssignmentWithCourse])
async def list_assignments(repo: TrackerRepoDep):
    try:
        return await AssignmentService.list_assignments(repo)
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error fetching assignments")

@router.get("/assignments/course/{course_id}", response_model=list[Assignment])
async def list_course_assignments(course_id: str, repo: TrackerRepoDep):
    try:
        return await AssignmentService.list_by_course(course_id, repo)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Error fetching course assignments")

@router.post("/assignments", response_model=Assignment, status_code=status.HTTP_201_CREATED)
async def create_assignment(fields: FieldsBody, repo: TrackerRepoDep):
    try:
        return await AssignmentService.create_assignment(fields, repo)
    except ValidationError as e:
        raise validation_failed(e)
    except NotFoundError:
        raise invalid_course()
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error creating assignment")

@router.put("/assignments/{assignment_id}", response_model=Assignment)
async def update_assignment(assignment_id: str, fields: FieldsBody, repo: TrackerRepoDep):
    try:
        return await AssignmentService.update_assignment(assignment_id, fields, repo)
    except ValidationError as e:
        raise validation_failed(e)
    except NotFoundError as e:
        if e.resource == "course":
            raise invalid_course()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error updating assignment")

@router.delete("/assignments/{assignment_id}", response_model=Message)
async def delete_assignment(assignment_id: str, repo: TrackerRepoDep):
    try:
        await AssignmentService.delete_assignment(assignment_id, repo)
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error deleting assignment")
    return {"message": "Assignment deleted"}
