"""Student message activity over time, and analytics event recording."""

import uuid
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from socratic_tutor.models.classroom import AnalyticsEvent
from socratic_tutor.models.conversation import Conversation, Message, utc_now_naive


def usage_window(days: int, now: datetime | None = None) -> tuple[datetime, datetime, timedelta]:
    """Return (start, end, step): the last 24 hours by hour, otherwise ``days`` by day."""
    end = now or utc_now_naive()
    if days == 1:
        return end - timedelta(hours=24), end, timedelta(hours=1)
    return end - timedelta(days=days), end, timedelta(days=1)


def _bucket_key(value: datetime, hourly: bool) -> datetime:
    if hourly:
        return value.replace(minute=0, second=0, microsecond=0)
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def bucket_counts(
    timestamps: Iterable[datetime], days: int, now: datetime | None = None
) -> list[dict]:
    """Count timestamps per bucket, zero-filling every bucket in the window."""
    start, end, step = usage_window(days, now)
    hourly = step == timedelta(hours=1)
    grouped = Counter(_bucket_key(ts, hourly) for ts in timestamps)

    points: list[dict] = []
    current = start
    while current <= end:
        key = _bucket_key(current, hourly)
        points.append({"date": key.isoformat() + "Z", "count": grouped.get(key, 0)})
        current += step
    return points


async def student_message_times(
    db: AsyncSession,
    user_ids: list[uuid.UUID],
    start: datetime,
    end: datetime,
) -> list[datetime]:
    if not user_ids:
        return []
    result = await db.execute(
        select(Message.created_at)
        .join(Conversation, Conversation.id == Message.conversation_id)
        .where(
            Conversation.user_id.in_(user_ids),
            Message.role == "user",
            Message.created_at >= start,
            Message.created_at <= end,
        )
    )
    return [ts for ts in result.scalars().all() if ts is not None]


async def get_usage_series(
    db: AsyncSession,
    user_ids: list[uuid.UUID],
    days: int,
    now: datetime | None = None,
) -> list[dict]:
    """Bucketed student-message counts for ``user_ids`` over the last ``days``."""
    start, end, _ = usage_window(days, now)
    timestamps = await student_message_times(db, user_ids, start, end)
    return bucket_counts(timestamps, days, end)


async def record_event(
    db: AsyncSession,
    user_id: uuid.UUID | None,
    event_type: str,
    event_data: dict | None = None,
) -> AnalyticsEvent:
    event = AnalyticsEvent(
        user_id=user_id,
        event_type=event_type,
        event_data=event_data or {},
    )
    db.add(event)
    await db.flush()
    return event
