"""SQLAlchemy Core table definitions for the scheduling schema."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP

from .enums import call_status_enum, meeting_type_enum, user_role_enum

# Naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. USERS
# =====================================================
users = Table(
    "users",
    metadata,
    Column("user_id", Text, primary_key=True),
    Column("name", Text),
    Column("email", Text),
    Column("role", user_role_enum, nullable=False),
    Column("timezone", Text),
    # Notification preferences; NULL notifications_enabled = never set
    Column("notifications_enabled", Boolean),
    Column("notification_methods", JSONB),  # ["email", "push"]
    Column("notification_timings", JSONB),  # ["1day", "1hour", "30min", "10min"]
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_users_role", "role"),
)


# =====================================================
# 2. SCHEDULED_CALLS
# =====================================================
scheduled_calls = Table(
    "scheduled_calls",
    metadata,
    Column("call_id", Text, primary_key=True),
    Column("teacher_id", Text, ForeignKey("users.user_id"), nullable=False),
    Column("lesson_id", Text),
    Column("batch_id", Text),
    Column("course_id", Text),
    Column("student_ids", JSONB, nullable=False, server_default="[]"),
    Column("date", Date, nullable=False),
    Column("start_time", Text, nullable=False),  # local wall-clock, e.g. "9:00 am"
    Column("end_time", Text, nullable=False),
    Column("timezone", Text, nullable=False),  # IANA name
    Column("status", call_status_enum, nullable=False),
    Column("type", meeting_type_enum, nullable=False),
    Column("join_link", Text, nullable=False),
    Column("call_duration", Integer, nullable=False),
    Column("class_type", Text),
    Column("class_sub_type", Text),
    Column("scheduled_by", Text),
    Column("previous_date", Date),
    Column("previous_start_time", Text),
    Column("previous_end_time", Text),
    Column("cancellation_reason", Text),
    Column("notification_sent", JSONB, nullable=False, server_default="[]"),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    CheckConstraint(
        "(previous_date IS NULL) = (previous_start_time IS NULL) "
        "AND (previous_date IS NULL) = (previous_end_time IS NULL)",
        name="previous_slot_complete",
    ),
    Index("idx_scheduled_calls_teacher_id", "teacher_id"),
    Index("idx_scheduled_calls_date", "date"),
)


# =====================================================
# 3. NOTIFICATIONS (in-app)
# =====================================================
notifications = Table(
    "notifications",
    metadata,
    Column("notification_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "user_id",
        Text,
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("message", Text, nullable=False),
    Column("link", Text, nullable=False),
    Column("read", Boolean, nullable=False, server_default="false"),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_notifications_user_id", "user_id"),
)


# =====================================================
# 4. REPORT_CARDS
# =====================================================
report_cards = Table(
    "report_cards",
    metadata,
    Column("report_card_id", Text, primary_key=True),
    Column("student_id", Text, ForeignKey("users.user_id"), nullable=False),
    Column("teacher_id", Text, ForeignKey("users.user_id"), nullable=False),
    Column("rating", Integer, nullable=False),
    Column("comments", Text),
    Column("date", TIMESTAMP(timezone=True), nullable=False),
    CheckConstraint("rating BETWEEN 1 AND 5", name="rating_range"),
    Index("idx_report_cards_student_id", "student_id"),
)
