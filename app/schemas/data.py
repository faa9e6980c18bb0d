from __future__ import annotations
from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel

class Course(BaseModel):
    id: str
    course_name: str
    professor: Optional[str] = None
    start_date: date
    end_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class Assignment(BaseModel):
    id: str
    course_id: str
    title: str
    due_date: date
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class AssignmentWithCourse(Assignment):
    course_name: Optional[str] = None

class Message(BaseModel):
    message: str
