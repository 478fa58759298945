"""
PostgreSQL-backed repositories.

Each method opens its own connection (or transaction for writes) from the
shared engine, so one repository instance can serve concurrent operations.
"""

from typing import Any

from .calls import ScheduledCall
from .database import get_connection, get_transaction
from .enums import CallStatus, MeetingType, ReminderTiming, UserRole
from .errors import NotFound
from .notifications.events import Notification, Recipient
from .queries import (
    create_notification,
    create_report_card,
    get_admin_users,
    get_call,
    get_notification_preferences,
    get_user,
    get_users,
    upsert_call,
)
from .report_cards import ReportCard


def call_from_row(row: dict[str, Any]) -> ScheduledCall:
    return ScheduledCall(
        id=row["call_id"],
        teacher_id=row["teacher_id"],
        date=row["date"],
        start_time=row["start_time"],
        end_time=row["end_time"],
        timezone=row["timezone"],
        join_link=row["join_link"],
        status=CallStatus(row["status"]),
        lesson_id=row.get("lesson_id"),
        batch_id=row.get("batch_id"),
        course_id=row.get("course_id"),
        student_ids=tuple(row.get("student_ids") or ()),
        type=MeetingType(row["type"]),
        call_duration=row["call_duration"],
        class_type=row.get("class_type"),
        class_sub_type=row.get("class_sub_type"),
        scheduled_by=row.get("scheduled_by"),
        previous_date=row.get("previous_date"),
        previous_start_time=row.get("previous_start_time"),
        previous_end_time=row.get("previous_end_time"),
        cancellation_reason=row.get("cancellation_reason"),
        notification_sent=tuple(
            ReminderTiming(value) for value in row.get("notification_sent") or ()
        ),
    )


def call_to_row(call: ScheduledCall) -> dict[str, Any]:
    return {
        "call_id": call.id,
        "teacher_id": call.teacher_id,
        "lesson_id": call.lesson_id,
        "batch_id": call.batch_id,
        "course_id": call.course_id,
        "student_ids": list(call.student_ids),
        "date": call.date,
        "start_time": call.start_time,
        "end_time": call.end_time,
        "timezone": call.timezone,
        "status": call.status,
        "type": call.type,
        "join_link": call.join_link,
        "call_duration": call.call_duration,
        "class_type": call.class_type,
        "class_sub_type": call.class_sub_type,
        "scheduled_by": call.scheduled_by,
        "previous_date": call.previous_date,
        "previous_start_time": call.previous_start_time,
        "previous_end_time": call.previous_end_time,
        "cancellation_reason": call.cancellation_reason,
        "notification_sent": [timing.value for timing in call.notification_sent],
    }


def recipient_from_row(row: dict[str, Any]) -> Recipient:
    return Recipient(
        user_id=row["user_id"],
        email=row.get("email"),
        role=UserRole(row["role"]),
        name=row.get("name") or "",
        timezone=row.get("timezone"),
    )


class SqlCallRepository:
    async def get_by_id(self, call_id: str) -> ScheduledCall:
        async with get_connection() as conn:
            row = await get_call(conn, call_id)
        if row is None:
            raise NotFound("Call", call_id)
        return call_from_row(row)

    async def save(self, call: ScheduledCall) -> None:
        async with get_transaction() as conn:
            await upsert_call(conn, call_to_row(call))


class SqlUserDirectory:
    """User lookups and stored notification preferences."""

    async def get_user(self, user_id: str) -> Recipient:
        async with get_connection() as conn:
            row = await get_user(conn, user_id)
        if row is None:
            raise NotFound("User", user_id)
        return recipient_from_row(row)

    async def get_users(self, user_ids: list[str]) -> list[Recipient]:
        async with get_connection() as conn:
            rows = await get_users(conn, user_ids)
        return [recipient_from_row(row) for row in rows]

    async def get_admins(self) -> list[Recipient]:
        async with get_connection() as conn:
            rows = await get_admin_users(conn)
        return [recipient_from_row(row) for row in rows]

    async def get_preferences(self, user_id: str) -> dict | None:
        async with get_connection() as conn:
            return await get_notification_preferences(conn, user_id)


class SqlNotificationRepository:
    async def create(self, notification: Notification) -> Notification:
        async with get_transaction() as conn:
            row = await create_notification(
                conn,
                user_id=notification.user_id,
                message=notification.message,
                link=notification.link,
            )
        return Notification(
            id=str(row["notification_id"]),
            user_id=row["user_id"],
            message=row["message"],
            link=row["link"],
            read=row["read"],
            created_at=row["created_at"],
        )


class SqlReportCardRepository:
    async def create(self, report_card: ReportCard) -> None:
        async with get_transaction() as conn:
            await create_report_card(conn, report_card)
