"""
Batch schedules - turning a weekly recurrence into one call per lesson.

A batch is committed with a start date, the weekdays it meets on and a daily
start time. Lessons are laid onto the matching days in order, starting with
the start date itself when it falls on one of them.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from .calls import NewCall
from .enums import MeetingType
from .errors import ValidationError
from .timezone import normalize_date, parse_call_time

# How far ahead lessons may be laid out
SCHEDULE_HORIZON_DAYS = 365

WEEKDAYS = {name.lower(): index for index, name in enumerate(calendar.day_name)}


@dataclass
class BatchSchedule:
    """Input for committing a batch schedule."""

    teacher_id: str
    batch_id: str
    start_date: object  # date or any string normalize_date accepts
    days: list[str]
    start_time: str
    call_duration: int
    join_link: str
    lesson_ids: list[str]
    timezone: str | None = None
    course_id: str | None = None
    student_ids: list[str] = field(default_factory=list)
    type: MeetingType = MeetingType.zoom
    class_type: str | None = None
    repeat: bool = True
    scheduled_by: str | None = None


def parse_weekdays(days: list[str]) -> set[int]:
    """Weekday names ("Monday", "tuesday") to date.weekday() numbers."""
    if not days:
        raise ValidationError("At least one weekday is required", field="days")

    weekdays = set()
    for day in days:
        index = WEEKDAYS.get(str(day).strip().lower())
        if index is None:
            raise ValidationError(f"Invalid weekday: {day!r}", field="days")
        weekdays.add(index)
    return weekdays


def generate_schedule_dates(
    start_date: date,
    weekdays: set[int],
    count: int,
    horizon_days: int = SCHEDULE_HORIZON_DAYS,
) -> list[date]:
    """Up to `count` dates from start_date on, within the horizon, falling on the given weekdays."""
    dates = []
    last_day = start_date + timedelta(days=horizon_days)
    day = start_date
    while day <= last_day and len(dates) < count:
        if day.weekday() in weekdays:
            dates.append(day)
        day += timedelta(days=1)
    return dates


def expand_batch(batch: BatchSchedule) -> list[NewCall]:
    """
    One NewCall per lesson, dated by the batch's weekly recurrence.

    Without repeat every lesson would share the start date, so only a single
    lesson is accepted then.

    Raises:
        ValidationError: no lessons, a bad date/time/weekday/duration, or not
            enough matching days within the horizon
    """
    if not batch.lesson_ids:
        raise ValidationError("No lessons to schedule", field="lesson_ids")
    if not batch.call_duration or batch.call_duration < 1:
        raise ValidationError(
            f"Call duration must be a positive number of minutes, got {batch.call_duration!r}",
            field="call_duration",
        )

    start_date = normalize_date(batch.start_date)
    if start_date is None:
        raise ValidationError(f"Invalid start date: {batch.start_date!r}", field="start_date")

    start = parse_call_time(batch.start_time) if isinstance(batch.start_time, str) else None
    if start is None:
        raise ValidationError(f"Invalid start time: {batch.start_time!r}", field="start_time")
    end = (datetime.combine(start_date, start) + timedelta(minutes=batch.call_duration)).time()

    if batch.repeat:
        dates = generate_schedule_dates(
            start_date, parse_weekdays(batch.days), len(batch.lesson_ids)
        )
    else:
        dates = [start_date]

    if len(dates) < len(batch.lesson_ids):
        raise ValidationError(
            f"Not enough valid days to schedule all lessons: "
            f"{len(batch.lesson_ids)} lessons, {len(dates)} dates",
            field="days",
        )

    return [
        NewCall(
            teacher_id=batch.teacher_id,
            date=day,
            start_time=start.strftime("%H:%M"),
            end_time=end.strftime("%H:%M"),
            join_link=batch.join_link,
            timezone=batch.timezone,
            lesson_id=lesson_id,
            batch_id=batch.batch_id,
            course_id=batch.course_id,
            student_ids=list(batch.student_ids),
            type=batch.type,
            call_duration=batch.call_duration,
            class_type=batch.class_type,
            scheduled_by=batch.scheduled_by or batch.teacher_id,
        )
        for day, lesson_id in zip(dates, batch.lesson_ids)
    ]
