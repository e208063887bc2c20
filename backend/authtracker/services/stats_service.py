from datetime import datetime, time as dt_time, timedelta, timezone
from typing import Optional

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from authtracker.models.record import AuthRecord
from authtracker.models.user import User
from authtracker.time_utils import local_now, to_local

logger = structlog.get_logger(__name__)

STATUS_KEYS = {
    "Pending": "pending",
    "Approved": "approved",
    "Denied": "denied",
    "Not Required": "not_required",
    "Follow Up": "follow_up",
    "Cancelled": "cancelled",
    "Not Covered": "not_covered",
}


def _window_start_utc(current: datetime) -> datetime:
    """Earliest instant any bucket can reach: start of the year or of the ISO week, whichever is first."""
    week_start = (current - timedelta(days=current.weekday())).date()
    year_start = current.date().replace(month=1, day=1)
    # Localize the naive midnight so the offset in force on that date applies.
    start = datetime.combine(min(week_start, year_start), dt_time.min).astimezone()
    return start.astimezone(timezone.utc).replace(tzinfo=None)


class StatsService:
    """Aggregates over active records, computed fresh on every call."""

    async def record_stats(self, db: AsyncSession, now: Optional[datetime] = None) -> dict:
        today = local_now(now).date().isoformat()

        result = await db.execute(
            select(AuthRecord.status, func.count(AuthRecord.id))
            .where(AuthRecord.is_deleted.is_(False))
            .group_by(AuthRecord.status)
        )
        counts = {key: 0 for key in STATUS_KEYS.values()}
        for status, count in result.all():
            key = STATUS_KEYS.get(status)
            if key is None:
                logger.warning("record_stats_unknown_status", status=status, count=count)
                continue
            counts[key] += count

        submitted_today = await db.scalar(
            select(func.count(AuthRecord.id)).where(
                AuthRecord.is_deleted.is_(False),
                AuthRecord.status.in_(list(STATUS_KEYS)),
                func.substr(AuthRecord.request_initiated, 1, 10) == today,
            )
        ) or 0

        return {"total": sum(counts.values()), **counts, "submitted_today": submitted_today}

    async def employee_stats(self, db: AsyncSession, now: Optional[datetime] = None) -> list[dict]:
        current = local_now(now)
        current_week = current.isocalendar()[:2]

        users = (
            await db.execute(select(User.id, User.username, User.role).order_by(User.role, User.username))
        ).all()
        buckets = {
            user_id: {"id": user_id, "username": username, "role": role,
                      "today": 0, "this_week": 0, "this_month": 0, "ytd": 0}
            for user_id, username, role in users
        }

        rows = await db.execute(
            select(AuthRecord.user_id, AuthRecord.created_at).where(
                AuthRecord.is_deleted.is_(False),
                AuthRecord.user_id.is_not(None),
                AuthRecord.created_at >= _window_start_utc(current),
            )
        )
        for user_id, created_at in rows.all():
            bucket = buckets.get(user_id)
            if bucket is None or created_at is None:
                continue
            created = to_local(created_at)
            if created.date() == current.date():
                bucket["today"] += 1
            # (ISO year, ISO week) so late-December days in week 1 don't alias.
            if created.isocalendar()[:2] == current_week:
                bucket["this_week"] += 1
            if (created.year, created.month) == (current.year, current.month):
                bucket["this_month"] += 1
            if created.year == current.year:
                bucket["ytd"] += 1

        return list(buckets.values())


stats_service = StatsService()
