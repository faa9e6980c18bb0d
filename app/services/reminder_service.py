# app/services/reminder_service.py
import asyncio
import contextlib
from datetime import date, datetime, time, timedelta, timezone
import json
import logging
from typing import Iterable, Optional
import aio_pika
from aio_pika import DeliveryMode, ExchangeType, Message
from aio_pika.abc import AbstractChannel, AbstractExchange, AbstractRobustConnection

from app.database.tracker_repository import TrackerRepository

logger = logging.getLogger(__name__)

DUE_SOON_WINDOW = timedelta(hours=24)


def due_instant(due_date: date) -> datetime:
    """Due dates are calendar days; the assignment is due at midnight UTC."""
    return datetime.combine(due_date, time.min, tzinfo=timezone.utc)


def select_due_soon(
    assignments: Iterable[dict],
    now: datetime,
    window: timedelta = DUE_SOON_WINDOW,
) -> list[dict]:
    """Pending assignments that are not overdue yet and fall due within `window`."""
    selected = []
    for assignment in assignments:
        if assignment.get("status") != "pending":
            continue
        remaining = due_instant(assignment["due_date"]) - now
        if timedelta(0) < remaining <= window:
            selected.append(assignment)
    return selected


def reminder_payload(assignment: dict) -> dict:
    return {
        "assignmentId": assignment["id"],
        "courseId": assignment["course_id"],
        "courseName": assignment.get("course_name"),
        "title": assignment["title"],
        "dueDate": assignment["due_date"].isoformat(),
        "message": f"{assignment['title']} is due within 24 hours!",
    }


class ReminderPublisher:
    """
    Publishes "assignment due soon" messages on a DIRECT exchange.
    A single routing key is used; consumers bind their own queues to it.
    """

    def __init__(
        self,
        rabbitmq_url: str,
        *,
        exchange_name: str = "tracker.reminders",
        routing_key: str = "assignments.due_soon",
        heartbeat: int = 30,
        durable: bool = True,
    ) -> None:
        self.rabbitmq_url = rabbitmq_url
        self.exchange_name = exchange_name
        self.routing_key = routing_key
        self.heartbeat = heartbeat
        self.durable = durable

        self._conn: Optional[AbstractRobustConnection] = None
        self._channel: Optional[AbstractChannel] = None
        self._exchange: Optional[AbstractExchange] = None

        # serializes connect/close against concurrent publish
        self._lock = asyncio.Lock()

    # -----------------------------
    # Lifecycle
    # -----------------------------
    async def connect(self, max_retries: int = 5, delay: int = 3) -> None:
        """Opens the connection and declares the exchange, with retry/backoff."""
        attempt = 0
        while True:
            try:
                logger.debug("RabbitMQ connection attempt #%s", attempt + 1)
                self._conn = await aio_pika.connect_robust(
                    self.rabbitmq_url,
                    heartbeat=self.heartbeat,
                )
                self._channel = await self._conn.channel(publisher_confirms=True)
                self._exchange = await self._channel.declare_exchange(
                    self.exchange_name, ExchangeType.DIRECT, durable=self.durable
                )
                logger.info("RabbitMQ connection established.")
                return
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                attempt += 1
                logger.warning("RabbitMQ connection failed: %s", exc)
                if attempt >= max_retries:
                    logger.error("Could not connect to RabbitMQ after %s attempts.", max_retries)
                    raise
                await asyncio.sleep(delay)

    async def _ensure_ready(self) -> None:
        async with self._lock:
            if not self._conn or self._conn.is_closed:
                logger.debug("Connection not active: reconnecting.")
                await self.connect()

            if not self._channel or self._channel.is_closed:
                logger.debug("Channel not active: reopening.")
                assert self._conn is not None
                self._channel = await self._conn.channel(publisher_confirms=True)
                self._exchange = None

            if not self._exchange:
                assert self._channel is not None
                self._exchange = await self._channel.declare_exchange(
                    self.exchange_name, ExchangeType.DIRECT, durable=self.durable
                )

    async def close(self) -> None:
        async with self._lock:
            try:
                if self._channel and not self._channel.is_closed:
                    logger.debug("Closing RabbitMQ channel.")
                    await self._channel.close()
            finally:
                if self._conn and not self._conn.is_closed:
                    logger.debug("Closing RabbitMQ connection.")
                    await self._conn.close()

            self._conn = None
            self._channel = None
            self._exchange = None

    def is_ready(self) -> bool:
        return bool(
            self._conn
            and not self._conn.is_closed
            and self._channel
            and not self._channel.is_closed
            and self._exchange
        )

    async def publish(self, payload: dict) -> None:
        await self._ensure_ready()
        assert self._exchange is not None
        message = Message(
            body=json.dumps(payload).encode("utf-8"),
            content_type="application/json",
            delivery_mode=DeliveryMode.PERSISTENT,
        )
        await self._exchange.publish(message, routing_key=self.routing_key)


class ReminderService:
    """
    Periodic sweep: every `interval_seconds` lists the assignments, selects the
    ones due soon and publishes one reminder per (assignment, due date).
    """

    def __init__(
        self,
        repo: TrackerRepository,
        publisher: ReminderPublisher,
        *,
        interval_seconds: float = 900,
        window: timedelta = DUE_SOON_WINDOW,
    ) -> None:
        self.repo = repo
        self.publisher = publisher
        self.interval_seconds = interval_seconds
        self.window = window
        self._notified: set[tuple[str, date]] = set()
        self._task: Optional[asyncio.Task] = None

    async def run_once(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        due_soon = select_due_soon(await self.repo.list_assignments(), now, self.window)

        published = 0
        current = set()
        for assignment in due_soon:
            key = (assignment["id"], assignment["due_date"])
            current.add(key)
            if key in self._notified:
                continue
            await self.publisher.publish(reminder_payload(assignment))
            self._notified.add(key)
            published += 1
            logger.info("Reminder published",
                        extra={"assignmentId": assignment["id"], "dueDate": assignment["due_date"].isoformat()})

        # forget reminders that left the window (completed, deleted, rescheduled, past due)
        self._notified &= current
        return published

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Reminder sweep failed")
            await asyncio.sleep(self.interval_seconds)

    async def start(self) -> None:
        await self.publisher.connect()
        self._task = asyncio.create_task(self._loop())
        logger.info("ReminderService started (interval=%ss).", self.interval_seconds)

    async def stop(self) -> None:
        try:
            if self._task is not None:
                self._task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._task
        finally:
            self._task = None
            await self.publisher.close()
        logger.info("ReminderService stopped.")

    def is_ready(self) -> bool:
        """Sweep task alive and publisher connected."""
        return bool(
            self._task is not None
            and not self._task.done()
            and self.publisher.is_ready()
        )
