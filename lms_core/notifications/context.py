"""
Context building for notification templates.

Pure functions turning calls, deltas and report cards into the template
variables used by messages.yaml. Per-recipient values (name, link, local
time) are added by the dispatcher.
"""

from datetime import date

import pytz

from lms_core.calls import CallDelta, ScheduledCall, TimeSlot
from lms_core.constants import REMINDER_LABELS
from lms_core.enums import ReminderTiming
from lms_core.report_cards import ReportCard
from lms_core.timezone import format_time_range, get_call_window


def format_call_date(day: date) -> str:
    """Format a call date like "Wednesday, January 10, 2024"."""
    return day.strftime("%A, %B %d, %Y").replace(" 0", " ")


def _slot_time_range(slot: TimeSlot) -> str:
    formatted = format_time_range(slot.date, slot.start_time, slot.end_time, slot.timezone)
    return formatted or f"{slot.start_time} - {slot.end_time}"


def build_call_context(call: ScheduledCall) -> dict:
    """
    Build notification context for a call's current slot.

    Returns:
        Context dict with the fields every call template uses
    """
    class_title = call.class_type or "Class"
    if call.class_sub_type:
        class_title = f"{class_title} ({call.class_sub_type})"

    call_date = format_call_date(call.date)
    window = get_call_window(call.date, call.start_time, call.end_time, call.timezone)

    return {
        "call_id": call.id,
        "class_title": class_title,
        "date": call_date,
        "start_time": call.start_time,
        "end_time": call.end_time,
        "time_range": _slot_time_range(call.slot),
        "timezone": call.timezone,
        "join_link": call.join_link,
        "meeting_type": call.type.value,
        "call_duration": f"{call.call_duration} minutes",
        # ISO timestamp for per-user timezone formatting
        "call_start_utc": window[0].astimezone(pytz.UTC).isoformat() if window else None,
        # Fallback when the recipient has no timezone
        "call_time_local": f"{call_date}, {call.start_time} ({call.timezone})",
    }


def build_reschedule_context(call: ScheduledCall, delta: CallDelta) -> dict:
    """Call context plus the previous schedule the reschedule replaced."""
    context = build_call_context(call)
    previous = delta.previous
    if previous is None:
        context.update(previous_date="N/A", previous_time_range="N/A")
    else:
        context.update(
            previous_date=format_call_date(previous.date),
            previous_time_range=_slot_time_range(previous),
        )
    return context


def build_cancel_context(call: ScheduledCall) -> dict:
    context = build_call_context(call)
    context["reason"] = call.cancellation_reason or "No reason given"
    return context


def build_reminder_context(call: ScheduledCall, timing: ReminderTiming) -> dict:
    context = build_call_context(call)
    context["time_until"] = REMINDER_LABELS[timing]
    return context


def build_report_card_context(
    report_card: ReportCard,
    teacher_name: str,
    student_name: str,
) -> dict:
    return {
        "report_card_id": report_card.id,
        "student_name": student_name,
        "teacher_name": teacher_name,
        "rating": report_card.rating,
        "comments": report_card.comments or "No comments",
    }
