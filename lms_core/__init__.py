"""
Call scheduling and notification fan-out engine.

Tracks scheduled class sessions through schedule/reschedule/cancel/complete,
decides when a call can be joined, and notifies teachers, students and
admins of changes by email and in-app push.
"""

# Errors
from .errors import LmsCoreError, ValidationError, InvalidTransition, NotFound, DeliveryFailure

# Enums
from .enums import (
    CallStatus, CallTransition, MeetingType, UserRole,
    NotificationMethod, ReminderTiming, EventKind, DeliveryChannel,
)

# Time windows
from .timezone import (
    is_joinable, is_ongoing, get_call_window, normalize_date, parse_call_time,
    format_time_range, time_until_start,
)

# Calls and the state machine
from .calls import (
    ScheduledCall, TimeSlot, NewCall, CallDelta, ALLOWED_TRANSITIONS,
    schedule, reschedule, cancel, complete, validate_time_slot,
)

# Preferences
from .preferences import (
    NotificationPreference, DEFAULT_NOTIFICATION_PREFERENCE, PreferenceResolver,
)

# Report cards
from .report_cards import ReportCard

# Batch schedules
from .batches import BatchSchedule, expand_batch

# Reminders
from .reminders import due_reminder_timings

# Notifications
from .notifications import (
    NotificationDispatcher, NotificationEvent, Recipient, Notification, DispatchReport,
)

# Facade
from .scheduling import SchedulingService, CallAudience

__all__ = [
    # Errors
    "LmsCoreError", "ValidationError", "InvalidTransition", "NotFound", "DeliveryFailure",
    # Enums
    "CallStatus", "CallTransition", "MeetingType", "UserRole",
    "NotificationMethod", "ReminderTiming", "EventKind", "DeliveryChannel",
    # Time windows
    "is_joinable", "is_ongoing", "get_call_window", "normalize_date", "parse_call_time",
    "format_time_range", "time_until_start",
    # Calls
    "ScheduledCall", "TimeSlot", "NewCall", "CallDelta", "ALLOWED_TRANSITIONS",
    "schedule", "reschedule", "cancel", "complete", "validate_time_slot",
    # Preferences
    "NotificationPreference", "DEFAULT_NOTIFICATION_PREFERENCE", "PreferenceResolver",
    # Report cards
    "ReportCard",
    # Batch schedules
    "BatchSchedule", "expand_batch",
    # Reminders
    "due_reminder_timings",
    # Notifications
    "NotificationDispatcher", "NotificationEvent", "Recipient", "Notification", "DispatchReport",
    # Facade
    "SchedulingService", "CallAudience",
]
