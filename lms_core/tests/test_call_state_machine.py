"""Tests for the call state machine."""

from datetime import date, time

import pytest

from lms_core.calls import (
    NewCall,
    TimeSlot,
    cancel,
    complete,
    record_reminder_sent,
    reschedule,
    schedule,
    validate_time_slot,
)
from lms_core.enums import CallStatus, CallTransition, ReminderTiming
from lms_core.errors import InvalidTransition, ValidationError


def new_call(**overrides) -> NewCall:
    values = dict(
        teacher_id="t1",
        date="2024-01-10",
        start_time="9:00 am",
        end_time="9:40 am",
        join_link="https://zoom.us/j/123",
        timezone="Asia/Kolkata",
        student_ids=["s1", "s2"],
    )
    values.update(overrides)
    return NewCall(**values)


def scheduled_call(**overrides):
    call, _delta = schedule("call-1", new_call(**overrides))
    return call


class TestSchedule:
    def test_creates_scheduled_call_without_snapshot(self):
        call, delta = schedule("call-1", new_call())

        assert call.status == CallStatus.scheduled
        assert call.date == date(2024, 1, 10)
        assert call.previous_slot is None
        assert call.previous_date is None
        assert call.previous_start_time is None
        assert call.previous_end_time is None
        assert delta.transition == CallTransition.schedule
        assert delta.previous_status is None
        assert delta.current == TimeSlot(date(2024, 1, 10), "9:00 am", "9:40 am", "Asia/Kolkata")
        assert delta.notify is True

    def test_derives_duration_from_times(self):
        call = scheduled_call(end_time="10:15 am")
        assert call.call_duration == 75

    def test_keeps_given_duration(self):
        call = scheduled_call(call_duration=30)
        assert call.call_duration == 30

    def test_removes_duplicate_students(self):
        call = scheduled_call(student_ids=["s1", "s2", "s1"])
        assert call.student_ids == ("s1", "s2")

    def test_normalizes_non_canonical_date(self):
        call = scheduled_call(date="2024-01-10T00:00:00.000Z")
        assert call.date == date(2024, 1, 10)

    def test_uses_default_timezone_when_missing(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_TIMEZONE", "Asia/Kolkata")
        call = scheduled_call(timezone=None)
        assert call.timezone == "Asia/Kolkata"

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"teacher_id": ""}, "teacher_id"),
            ({"join_link": ""}, "join_link"),
            ({"date": "someday"}, "date"),
            ({"timezone": "Mars/Base"}, "timezone"),
            ({"start_time": "nine"}, "start_time"),
            ({"end_time": "8:00 am"}, "end_time"),
            ({"end_time": "9:00 am"}, "end_time"),
        ],
    )
    def test_rejects_invalid_input(self, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            schedule("call-1", new_call(**overrides))
        assert exc_info.value.field == field


class TestValidateTimeSlot:
    def test_strips_times(self):
        slot = validate_time_slot("2024-01-10", " 9:00 am ", "10:00 am", "UTC")
        assert slot == TimeSlot(date(2024, 1, 10), "9:00 am", "10:00 am", "UTC")

    def test_rejects_span_across_midnight(self):
        with pytest.raises(ValidationError):
            validate_time_slot("2024-01-10", "11:00 pm", "1:00 am", "UTC")

    def test_rejects_time_objects(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_time_slot("2024-01-10", time(9, 0), "10:00 am", "UTC")
        assert exc_info.value.field == "start_time"


class TestReschedule:
    def test_snapshots_current_slot(self):
        call = scheduled_call()
        updated, delta = reschedule(call, "2024-01-12", "10:00 am", "11:00 am")

        assert updated.status == CallStatus.rescheduled
        assert updated.date == date(2024, 1, 12)
        assert updated.start_time == "10:00 am"
        assert updated.end_time == "11:00 am"
        assert updated.call_duration == 60
        assert updated.previous_slot == TimeSlot(date(2024, 1, 10), "9:00 am", "9:40 am", "Asia/Kolkata")
        assert delta.previous == call.slot
        assert delta.current == updated.slot
        assert delta.previous_status == CallStatus.scheduled

    def test_double_reschedule_keeps_second_slot_in_snapshot(self):
        call = scheduled_call()
        first, _ = reschedule(call, "2024-01-12", "10:00 am", "11:00 am")
        second, delta = reschedule(first, "2024-01-15", "2:00 pm", "3:00 pm")

        assert second.previous_date == date(2024, 1, 12)
        assert second.previous_start_time == "10:00 am"
        assert second.previous_end_time == "11:00 am"
        assert delta.previous_status == CallStatus.rescheduled

    def test_clears_sent_reminders_for_new_slot(self):
        call = record_reminder_sent(scheduled_call(), ReminderTiming.one_day)
        updated, _ = reschedule(call, "2024-01-12", "10:00 am", "11:00 am")
        assert updated.notification_sent == ()

    def test_invalid_slot_leaves_call_unchanged(self):
        call = scheduled_call()
        with pytest.raises(ValidationError):
            reschedule(call, "2024-01-12", "11:00 am", "10:00 am")
        assert call.status == CallStatus.scheduled
        assert call.previous_slot is None

    @pytest.mark.parametrize("terminal", [cancel, complete])
    def test_terminal_call_cannot_be_rescheduled(self, terminal):
        call, _ = terminal(scheduled_call())

        with pytest.raises(InvalidTransition) as exc_info:
            reschedule(call, "2024-01-12", "10:00 am", "11:00 am")

        assert exc_info.value.current_status == call.status.value
        assert exc_info.value.transition == "reschedule"
        assert call.date == date(2024, 1, 10)
        assert call.previous_slot is None

    def test_transition_checked_before_slot(self):
        """A terminal call reports InvalidTransition even for a bad slot."""
        call, _ = cancel(scheduled_call())
        with pytest.raises(InvalidTransition):
            reschedule(call, "someday", "x", "y")


class TestCancel:
    def test_cancel_keeps_snapshot_and_reason(self):
        rescheduled, _ = reschedule(scheduled_call(), "2024-01-12", "10:00 am", "11:00 am")
        cancelled, delta = cancel(rescheduled, reason="Teacher unwell")

        assert cancelled.status == CallStatus.cancelled
        assert cancelled.cancellation_reason == "Teacher unwell"
        assert cancelled.previous_slot == rescheduled.previous_slot
        assert cancelled.slot == rescheduled.slot
        assert delta.reason == "Teacher unwell"
        assert delta.notify is True

    def test_cannot_cancel_twice(self):
        cancelled, _ = cancel(scheduled_call())
        with pytest.raises(InvalidTransition) as exc_info:
            cancel(cancelled)
        assert str(exc_info.value) == "Call call-1 cannot cancel, current status: Cancelled"

    def test_cannot_cancel_completed_call(self):
        completed, _ = complete(scheduled_call())
        with pytest.raises(InvalidTransition):
            cancel(completed)
        assert completed.status == CallStatus.completed


class TestComplete:
    def test_complete_is_silent(self):
        completed, delta = complete(scheduled_call())
        assert completed.status == CallStatus.completed
        assert completed.is_terminal
        assert delta.notify is False

    def test_rescheduled_call_can_complete(self):
        rescheduled, _ = reschedule(scheduled_call(), "2024-01-12", "10:00 am", "11:00 am")
        completed, _ = complete(rescheduled)
        assert completed.status == CallStatus.completed


class TestRecordReminderSent:
    def test_records_once(self):
        call = record_reminder_sent(scheduled_call(), ReminderTiming.ten_minutes)
        again = record_reminder_sent(call, ReminderTiming.ten_minutes)
        assert again.notification_sent == (ReminderTiming.ten_minutes,)
        assert again.status == CallStatus.scheduled
