"""
Scheduled call records and the call state machine.

Status lives in an immutable ScheduledCall; the only way to change it is
through the transition functions below, which return a new record together
with a CallDelta describing what changed. Transitions have no notification
side effects; callers decide what to send from the delta.

    Scheduled   -> Rescheduled | Cancelled | Completed
    Rescheduled -> Rescheduled | Cancelled | Completed
    Cancelled, Completed: terminal
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date

from .constants import DEFAULT_CALL_DURATION_MINUTES
from .enums import CallStatus, CallTransition, MeetingType, ReminderTiming
from .errors import InvalidTransition, ValidationError
from .timezone import get_call_window, normalize_date, resolve_timezone

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[CallStatus, frozenset[CallStatus]] = {
    CallStatus.scheduled: frozenset(
        {CallStatus.rescheduled, CallStatus.cancelled, CallStatus.completed}
    ),
    CallStatus.rescheduled: frozenset(
        {CallStatus.rescheduled, CallStatus.cancelled, CallStatus.completed}
    ),
    CallStatus.cancelled: frozenset(),
    CallStatus.completed: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


@dataclass(frozen=True)
class TimeSlot:
    """A call's calendar day and local wall-clock times."""

    date: date
    start_time: str
    end_time: str
    timezone: str


@dataclass(frozen=True)
class ScheduledCall:
    """One scheduled class session. Never deleted, only transitioned."""

    id: str
    teacher_id: str
    date: date
    start_time: str
    end_time: str
    timezone: str
    join_link: str
    status: CallStatus = CallStatus.scheduled
    lesson_id: str | None = None
    batch_id: str | None = None
    course_id: str | None = None
    student_ids: tuple[str, ...] = ()
    type: MeetingType = MeetingType.zoom
    call_duration: int = DEFAULT_CALL_DURATION_MINUTES
    class_type: str | None = None
    class_sub_type: str | None = None
    scheduled_by: str | None = None
    previous_date: date | None = None
    previous_start_time: str | None = None
    previous_end_time: str | None = None
    cancellation_reason: str | None = None
    notification_sent: tuple[ReminderTiming, ...] = ()

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot(self.date, self.start_time, self.end_time, self.timezone)

    @property
    def previous_slot(self) -> TimeSlot | None:
        if self.previous_date is None:
            return None
        return TimeSlot(
            self.previous_date,
            self.previous_start_time,
            self.previous_end_time,
            self.timezone,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass
class NewCall:
    """Input for creating a call, as handed over by the route layer."""

    teacher_id: str
    date: object  # date or any string normalize_date accepts
    start_time: str
    end_time: str
    join_link: str
    timezone: str | None = None
    lesson_id: str | None = None
    batch_id: str | None = None
    course_id: str | None = None
    student_ids: list[str] = field(default_factory=list)
    type: MeetingType = MeetingType.zoom
    call_duration: int | None = None
    class_type: str | None = None
    class_sub_type: str | None = None
    scheduled_by: str | None = None


@dataclass(frozen=True)
class CallDelta:
    """What a transition changed; input to the notification fan-out."""

    call_id: str
    transition: CallTransition
    previous_status: CallStatus | None
    status: CallStatus
    current: TimeSlot
    previous: TimeSlot | None = None
    reason: str | None = None

    @property
    def notify(self) -> bool:
        """Completion is silent; every other transition is announced."""
        return self.transition != CallTransition.complete


# =============================================================================
# Input validation
# =============================================================================


def validate_time_slot(call_date, start_time, end_time, tz_name) -> TimeSlot:
    """
    Validate and normalize a proposed call slot.

    Raises:
        ValidationError: unparseable date/time, unknown timezone, or an end
            time that is not after the start time on the same day
    """
    day = normalize_date(call_date)
    if day is None:
        raise ValidationError(f"Invalid date: {call_date!r}", field="date")

    tz = resolve_timezone(tz_name)
    if tz is None:
        raise ValidationError(f"Unknown timezone: {tz_name!r}", field="timezone")

    for name, value in (("start_time", start_time), ("end_time", end_time)):
        if not isinstance(value, str):
            raise ValidationError(f"{name} must be a time string, got {value!r}", field=name)

    window = get_call_window(day, start_time, end_time, tz.zone)
    if window is None:
        raise ValidationError(
            f"Invalid time format: start={start_time!r}, end={end_time!r}",
            field="start_time",
        )
    start, end = window
    if end.date() != start.date() or end <= start:
        raise ValidationError(
            f"End time {end_time} must be after start time {start_time}",
            field="end_time",
        )

    return TimeSlot(day, start_time.strip(), end_time.strip(), tz.zone)


def _duration_minutes(slot: TimeSlot) -> int:
    start, end = get_call_window(slot.date, slot.start_time, slot.end_time, slot.timezone)
    return int((end - start).total_seconds() // 60)


# =============================================================================
# Transitions
# =============================================================================


def _guard(call: ScheduledCall, target: CallStatus, transition: CallTransition) -> None:
    if target not in ALLOWED_TRANSITIONS[call.status]:
        logger.warning(
            f"Rejected {transition.value} for call {call.id}: status is {call.status.value}"
        )
        raise InvalidTransition(call.id, call.status.value, transition.value)


def schedule(call_id: str, new_call: NewCall) -> tuple[ScheduledCall, CallDelta]:
    """
    Create a call in the Scheduled state.

    Raises:
        ValidationError: missing teacher id or join link, or a bad time slot
    """
    if not new_call.teacher_id:
        raise ValidationError("Teacher id is required", field="teacher_id")
    if not new_call.join_link:
        raise ValidationError("Join link is required", field="join_link")

    slot = validate_time_slot(
        new_call.date, new_call.start_time, new_call.end_time, new_call.timezone
    )
    call = ScheduledCall(
        id=call_id,
        teacher_id=new_call.teacher_id,
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        timezone=slot.timezone,
        join_link=new_call.join_link,
        status=CallStatus.scheduled,
        lesson_id=new_call.lesson_id,
        batch_id=new_call.batch_id,
        course_id=new_call.course_id,
        student_ids=tuple(dict.fromkeys(new_call.student_ids)),
        type=new_call.type,
        call_duration=new_call.call_duration or _duration_minutes(slot),
        class_type=new_call.class_type,
        class_sub_type=new_call.class_sub_type,
        scheduled_by=new_call.scheduled_by,
    )
    delta = CallDelta(
        call_id=call.id,
        transition=CallTransition.schedule,
        previous_status=None,
        status=call.status,
        current=call.slot,
    )
    return call, delta


def reschedule(
    call: ScheduledCall,
    new_date,
    new_start: str,
    new_end: str,
) -> tuple[ScheduledCall, CallDelta]:
    """
    Move a call to a new slot, keeping the slot it had just before.

    The current slot is copied into previous_* (replacing any older snapshot),
    so rescheduling twice leaves the second slot in the snapshot.

    Raises:
        InvalidTransition: the call is Cancelled or Completed
        ValidationError: the new slot is invalid
    """
    _guard(call, CallStatus.rescheduled, CallTransition.reschedule)
    slot = validate_time_slot(new_date, new_start, new_end, call.timezone)

    updated = replace(
        call,
        status=CallStatus.rescheduled,
        previous_date=call.date,
        previous_start_time=call.start_time,
        previous_end_time=call.end_time,
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        call_duration=_duration_minutes(slot),
        notification_sent=(),
    )
    delta = CallDelta(
        call_id=call.id,
        transition=CallTransition.reschedule,
        previous_status=call.status,
        status=updated.status,
        current=updated.slot,
        previous=call.slot,
    )
    return updated, delta


def cancel(call: ScheduledCall, reason: str | None = None) -> tuple[ScheduledCall, CallDelta]:
    """
    Cancel a call. The previous_* snapshot is left as it is.

    Raises:
        InvalidTransition: the call is Cancelled or Completed
    """
    _guard(call, CallStatus.cancelled, CallTransition.cancel)
    updated = replace(call, status=CallStatus.cancelled, cancellation_reason=reason)
    delta = CallDelta(
        call_id=call.id,
        transition=CallTransition.cancel,
        previous_status=call.status,
        status=updated.status,
        current=updated.slot,
        previous=call.previous_slot,
        reason=reason,
    )
    return updated, delta


def complete(call: ScheduledCall) -> tuple[ScheduledCall, CallDelta]:
    """
    Mark a call as completed. Nothing is announced for completion.

    Raises:
        InvalidTransition: the call is Cancelled or Completed
    """
    _guard(call, CallStatus.completed, CallTransition.complete)
    updated = replace(call, status=CallStatus.completed)
    delta = CallDelta(
        call_id=call.id,
        transition=CallTransition.complete,
        previous_status=call.status,
        status=updated.status,
        current=updated.slot,
    )
    return updated, delta


def record_reminder_sent(call: ScheduledCall, timing: ReminderTiming) -> ScheduledCall:
    """Remember that a lead-time reminder went out; status is untouched."""
    if timing in call.notification_sent:
        return call
    return replace(call, notification_sent=call.notification_sent + (timing,))
