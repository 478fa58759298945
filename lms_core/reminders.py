"""
Lead-time reminder windows.

An external timer calls SchedulingService.send_pre_call_reminders periodically;
this module decides which reminder timings are due for a call at a given
moment. A timing is due while the minutes left before the start fall inside
its window and it has not been sent for the current slot yet.
"""

from datetime import datetime

from .calls import TERMINAL_STATUSES, ScheduledCall
from .constants import REMINDER_WINDOWS
from .enums import ReminderTiming
from .timezone import resolve_now, get_call_window


def minutes_until_start(call: ScheduledCall, now: datetime | None = None) -> int | None:
    """Whole minutes until the call starts (negative once started), None if unparseable."""
    window = get_call_window(call.date, call.start_time, call.end_time, call.timezone)
    if window is None:
        return None
    seconds = (window[0] - resolve_now(now)).total_seconds()
    return int(seconds / 60)


def due_reminder_timings(
    call: ScheduledCall,
    now: datetime | None = None,
) -> list[ReminderTiming]:
    """
    Reminder timings whose window contains the current time.

    Cancelled and completed calls get no reminders, and timings already in
    call.notification_sent are left out.
    """
    if call.status in TERMINAL_STATUSES:
        return []

    minutes = minutes_until_start(call, now)
    if minutes is None:
        return []

    return [
        timing
        for timing, (low, high) in REMINDER_WINDOWS.items()
        if low <= minutes <= high and timing not in call.notification_sent
    ]
