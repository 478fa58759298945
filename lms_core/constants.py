"""Shared constants for time parsing and reminder windows."""

from datetime import timedelta

from .enums import ReminderTiming

# Call time formats, tried in order; the first one that parses wins.
# Left: the format as users and the frontend write it. Right: strptime pattern.
TIME_FORMATS = [
    ("h:mm a", "%I:%M %p"),
    ("H:mm", "%H:%M"),
    ("HH:mm", "%H:%M"),
    ("h:mm A", "%I:%M %p"),
    ("HH:mm:ss", "%H:%M:%S"),
    ("h:mm:ss a", "%I:%M:%S %p"),
]

CANONICAL_DATE_FORMAT = "%Y-%m-%d"

# Fallback date formats for records that were not stored as YYYY-MM-DD
FALLBACK_DATE_FORMATS = [
    "%m/%d/%Y",
    "%d %B %Y",
    "%B %d, %Y",
]

# Join links become actionable this long before the call starts
JOIN_LEAD_TIME = timedelta(minutes=10)

DEFAULT_CALL_DURATION_MINUTES = 40

# Minutes-before-start windows in which a lead-time reminder is due
REMINDER_WINDOWS = {
    ReminderTiming.one_day: (1438, 1442),
    ReminderTiming.one_hour: (58, 62),
    ReminderTiming.thirty_minutes: (28, 32),
    ReminderTiming.ten_minutes: (7, 13),
}

REMINDER_LABELS = {
    ReminderTiming.one_day: "1 day",
    ReminderTiming.one_hour: "1 hour",
    ReminderTiming.thirty_minutes: "30 minutes",
    ReminderTiming.ten_minutes: "10 minutes",
}
