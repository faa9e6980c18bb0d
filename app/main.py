# app/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.routers.v1 import health
from app.routers.v1 import courses
from app.routers.v1 import assignments

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from app.database.sql_tracker import SqlTrackerRepository
from app.services.reminder_service import ReminderPublisher, ReminderService

logger = logging.getLogger("tracker")


async def malformed_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]) or "body", "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"message": "Validation error", "errors": errors}},
    )


def create_app(engine: Optional[AsyncEngine] = None) -> FastAPI:
    logging.basicConfig(level=settings.log_level)
    if engine is None:
        engine = create_async_engine(settings.database_url, echo=settings.database_echo, pool_pre_ping=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        tracker_repository = SqlTrackerRepository(engine)

        await tracker_repository.ensure_schema()

        app.state.tracker_repo = tracker_repository

        reminders = None
        if settings.rabbitmq_url:
            publisher = ReminderPublisher(
                settings.rabbitmq_url,
                exchange_name=settings.reminder_exchange,
                routing_key=settings.reminder_routing_key,
            )
            reminders = ReminderService(
                tracker_repository, publisher, interval_seconds=settings.reminder_interval_seconds
            )
            await reminders.start()
        else:
            logger.info("RABBITMQ_URL not set: due-soon reminders disabled")
        app.state.reminders = reminders

        try:
            yield
        finally:
            try:
                if reminders is not None:
                    await reminders.stop()
            finally:
                await engine.dispose()

    app = FastAPI(
        title="Course Tracker",
        description="Courses and their assignments",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins, allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, malformed_request)

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(courses.router, prefix="/api/v1", tags=["courses"])
    app.include_router(assignments.router, prefix="/api/v1", tags=["assignments"])
    return app


app = create_app()
