from __future__ import annotations
import re
from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---- Request payloads ----
ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def iso_date_text(value):
    """Dates travel as ISO-8601 text; numbers and epoch strings are refused."""
    if value is None:
        return value
    if not isinstance(value, str) or not ISO_DATE.match(value.strip()):
        raise ValueError("Dates must be ISO-8601 strings (YYYY-MM-DD)")
    return value.strip()


class AssignmentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class CourseFields(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    course_name: str = Field(..., min_length=1)
    professor: Optional[str] = None
    start_date: date
    end_date: date

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def dates_are_iso_text(cls, value):
        return iso_date_text(value)

    @field_validator("professor")
    @classmethod
    def blank_professor_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class AssignmentFields(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, use_enum_values=True)

    course_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    due_date: date
    status: AssignmentStatus = Field(AssignmentStatus.PENDING, validate_default=True)

    @field_validator("due_date", mode="before")
    @classmethod
    def due_date_is_iso_text(cls, value):
        return iso_date_text(value)


class AssignmentPatch(BaseModel):
    """Partial update: only the fields actually sent are applied."""
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, use_enum_values=True)

    course_id: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    due_date: Optional[date] = None
    status: Optional[AssignmentStatus] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def due_date_is_iso_text(cls, value):
        return iso_date_text(value)
