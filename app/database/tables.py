from sqlalchemy import (
    MetaData, Table, Column, String, Date, DateTime, ForeignKey, Index
)

metadata = MetaData()

courses = Table(
    "courses",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("course_name", String(200), nullable=False, index=True),
    Column("professor", String(200), nullable=True),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

# no ondelete: the repository removes dependents explicitly inside the cascade transaction
assignments = Table(
    "assignments",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("course_id", String(36), ForeignKey("courses.id"), nullable=False),
    Column("title", String(200), nullable=False),
    Column("due_date", Date, nullable=False),
    Column("status", String(32), nullable=False, default="pending"),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_assignments_course_due", "course_id", "due_date"),
)
