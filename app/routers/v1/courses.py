# app/routers/v1/courses.py
from typing import Annotated, Any
from fastapi import APIRouter, Body, Depends, HTTPException, status
from app.core.deps import get_repository
from app.core.exceptions import NotFoundError, StoreError, ValidationError
from app.database.tracker_repository import TrackerRepository
from app.schemas.data import Course, Message
from app.services.course_service import CourseService

router = APIRouter()
TrackerRepoDep = Annotated[TrackerRepository, Depends(get_repository)]
FieldsBody = Annotated[Any, Body()]


def validation_failed(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": "Validation error", "errors": e.errors},
    )


@router.get("/courses", response_model=list[Course])
async def list_courses(repo: TrackerRepoDep):
    try:
        return await CourseService.list_courses(repo)
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error fetching courses")

@router.post("/courses", response_model=Course, status_code=status.HTTP_201_CREATED)
async def create_course(fields: FieldsBody, repo: TrackerRepoDep):
    try:
        return await CourseService.create_course(fields, repo)
    except ValidationError as e:
        raise validation_failed(e)
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error creating course")

@router.put("/courses/{course_id}", response_model=Course)
async def update_course(course_id: str, fields: FieldsBody, repo: TrackerRepoDep):
    try:
        return await CourseService.update_course(course_id, fields, repo)
    except ValidationError as e:
        raise validation_failed(e)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error updating course")

@router.delete("/courses/{course_id}", response_model=Message)
async def delete_course(course_id: str, repo: TrackerRepoDep):
    try:
        await CourseService.delete_course(course_id, repo)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error deleting course")
    return {"message": "Course and related assignments deleted successfully"}
