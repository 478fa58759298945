"""Enum definitions shared by the engine and the database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class CallStatus(str, enum.Enum):
    scheduled = "Scheduled"
    rescheduled = "Rescheduled"
    cancelled = "Cancelled"
    completed = "Completed"


class CallTransition(str, enum.Enum):
    schedule = "schedule"
    reschedule = "reschedule"
    cancel = "cancel"
    complete = "complete"


class MeetingType(str, enum.Enum):
    zoom = "zoom"
    external = "external"


class UserRole(str, enum.Enum):
    student = "student"
    teacher = "teacher"
    admin = "admin"
    super_admin = "super_admin"


class NotificationMethod(str, enum.Enum):
    email = "email"
    push = "push"


class ReminderTiming(str, enum.Enum):
    one_day = "1day"
    one_hour = "1hour"
    thirty_minutes = "30min"
    ten_minutes = "10min"


class EventKind(str, enum.Enum):
    """Notification event kinds; values are message keys in messages.yaml."""

    call_scheduled = "call_scheduled"
    call_rescheduled = "call_rescheduled"
    call_cancelled = "call_cancelled"
    report_card_submitted = "report_card_submitted"
    pre_call_reminder = "pre_call_reminder"


class DeliveryChannel(str, enum.Enum):
    email = "email"
    in_app = "in_app"  # persisted Notification record
    socket = "socket"  # live push to connected clients


# =====================================================
# SQLAlchemy Enum Types
# These reference existing PostgreSQL types (create_type=False)
# =====================================================


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


call_status_enum = SQLEnum(
    CallStatus,
    name="call_status",
    create_type=False,
    native_enum=True,
    values_callable=_enum_values,
)
meeting_type_enum = SQLEnum(
    MeetingType,
    name="meeting_type",
    create_type=False,
    native_enum=True,
    values_callable=_enum_values,
)
user_role_enum = SQLEnum(
    UserRole,
    name="user_role",
    create_type=False,
    native_enum=True,
    values_callable=_enum_values,
)
