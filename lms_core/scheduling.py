"""
Scheduling service - the entry point for call lifecycle and report card events.

Each operation re-reads the call from the repository, applies a transition,
persists the new record and then fans the change out to the call's audience.
Validation, transition and persistence errors propagate to the caller.
Notification problems never do: they are logged, reported to Sentry and
reflected only in the returned DispatchReport.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable

import sentry_sdk

from . import calls as transitions
from .batches import BatchSchedule, expand_batch
from .calls import CallDelta, NewCall, ScheduledCall, TERMINAL_STATUSES
from .enums import EventKind, ReminderTiming
from .notifications.context import (
    build_call_context,
    build_cancel_context,
    build_reminder_context,
    build_report_card_context,
    build_reschedule_context,
)
from .notifications.dispatcher import NotificationDispatcher
from .notifications.events import DispatchReport, NotificationEvent, Recipient
from .reminders import due_reminder_timings
from .report_cards import ReportCard, build_report_card, validate_report_card_input
from .repositories import CallRepository, ReportCardRepository, UserDirectory
from .timezone import is_joinable, is_ongoing

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class CallAudience:
    """Who hears about a call event."""

    teacher: Recipient | None
    students: list[Recipient] = field(default_factory=list)
    admins: list[Recipient] = field(default_factory=list)
    actor: Recipient | None = None

    def recipients(self) -> list[Recipient]:
        """Everyone in the audience, each user once."""
        seen = set()
        result = []
        for recipient in [*self.students, self.teacher, *self.admins, self.actor]:
            if recipient is None or recipient.user_id in seen:
                continue
            seen.add(recipient.user_id)
            result.append(recipient)
        return result


class SchedulingService:
    def __init__(
        self,
        calls: CallRepository,
        users: UserDirectory,
        report_cards: ReportCardRepository,
        dispatcher: NotificationDispatcher,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.calls = calls
        self.users = users
        self.report_cards = report_cards
        self.dispatcher = dispatcher
        self.id_factory = id_factory

    # =========================================================================
    # Call lifecycle
    # =========================================================================

    async def schedule_call(self, new_call: NewCall) -> ScheduledCall:
        """
        Create a call and notify its teacher, its students and whoever scheduled it.

        Raises:
            ValidationError: bad input; nothing is persisted
        """
        call, _delta = transitions.schedule(self.id_factory(), new_call)
        await self.calls.save(call)
        logger.info(f"Scheduled call {call.id} on {call.date} {call.start_time} ({call.timezone})")

        await self._announce_scheduled(call)
        return call

    async def schedule_batch(self, batch: BatchSchedule) -> list[ScheduledCall]:
        """
        Commit a batch schedule: one call per lesson on the recurring weekdays.

        Every call is validated before any is saved, so a bad slot leaves the
        store untouched. Each saved call is announced once.

        Raises:
            ValidationError: bad recurrence or slot; nothing is persisted
        """
        new_calls = expand_batch(batch)
        created = [transitions.schedule(self.id_factory(), new_call)[0] for new_call in new_calls]

        for call in created:
            await self.calls.save(call)
        logger.info(
            f"Scheduled {len(created)} calls for batch {batch.batch_id} "
            f"from {created[0].date} to {created[-1].date}"
        )

        for call in created:
            await self._announce_scheduled(call)
        return created

    async def _announce_scheduled(self, call: ScheduledCall) -> DispatchReport | None:
        return await self._announce(
            f"scheduled call {call.id}",
            lambda audience: self.on_scheduled(call, audience),
            call,
            actor_id=call.scheduled_by,
        )

    async def reschedule_call(
        self,
        call_id: str,
        new_date,
        new_start: str,
        new_end: str,
        actor_id: str | None = None,
        include_admins: bool = False,
    ) -> ScheduledCall:
        """
        Move a call to a new slot and notify its audience of the old and new times.

        Args:
            actor_id: User performing the change; notified too if not already in the audience
            include_admins: Also notify every admin and super admin

        Raises:
            NotFound: Unknown call id
            InvalidTransition: The call is cancelled or completed
            ValidationError: The new slot is invalid
        """
        call = await self.calls.get_by_id(call_id)
        updated, delta = transitions.reschedule(call, new_date, new_start, new_end)
        await self.calls.save(updated)
        logger.info(
            f"Rescheduled call {call_id} from {call.date} {call.start_time} "
            f"to {updated.date} {updated.start_time}"
        )

        await self._announce(
            f"rescheduled call {call_id}",
            lambda audience: self.on_rescheduled(updated, delta, audience),
            updated,
            actor_id=actor_id,
            include_admins=include_admins,
        )
        return updated

    async def cancel_call(
        self,
        call_id: str,
        reason: str | None = None,
        actor_id: str | None = None,
        include_admins: bool = False,
    ) -> ScheduledCall:
        """
        Cancel a call and notify its audience.

        Raises:
            NotFound: Unknown call id
            InvalidTransition: The call is already cancelled or completed
        """
        call = await self.calls.get_by_id(call_id)
        updated, _delta = transitions.cancel(call, reason)
        await self.calls.save(updated)
        logger.info(f"Cancelled call {call_id}" + (f": {reason}" if reason else ""))

        await self._announce(
            f"cancelled call {call_id}",
            lambda audience: self.on_cancelled(updated, audience),
            updated,
            actor_id=actor_id,
            include_admins=include_admins,
        )
        return updated

    async def complete_call(self, call_id: str) -> ScheduledCall:
        """Mark a call as completed. Nobody is notified."""
        call = await self.calls.get_by_id(call_id)
        updated, _delta = transitions.complete(call)
        await self.calls.save(updated)
        logger.info(f"Completed call {call_id}")
        return updated

    def is_call_joinable_now(self, call: ScheduledCall, now: datetime | None = None) -> bool:
        """True from 10 minutes before the start until the end. Never for cancelled/completed calls."""
        if call.status in TERMINAL_STATUSES:
            return False
        return is_joinable(call.date, call.start_time, call.end_time, call.timezone, now)

    def is_call_ongoing_now(self, call: ScheduledCall, now: datetime | None = None) -> bool:
        if call.status in TERMINAL_STATUSES:
            return False
        return is_ongoing(call.date, call.start_time, call.end_time, call.timezone, now)

    async def send_pre_call_reminders(
        self,
        call_id: str,
        now: datetime | None = None,
    ) -> list[ReminderTiming]:
        """
        Send whichever lead-time reminders are due for a call.

        Meant to be called periodically by an external timer. Each due timing
        goes only to recipients who selected it, and is recorded on the call
        so it is not sent again for the same slot.

        The call is read again after sending and only notification_sent is
        changed on that fresh copy. If the call was cancelled, completed or
        moved in the meantime nothing is recorded.

        Returns:
            The timings that were due and sent
        """
        call = await self.calls.get_by_id(call_id)
        due = due_reminder_timings(call, now)
        if not due:
            return []

        for timing in due:
            await self._announce(
                f"{timing.value} reminder for call {call_id}",
                lambda audience, timing=timing: self._dispatch_reminder(call, timing, audience),
                call,
            )

        current = await self.calls.get_by_id(call_id)
        if current.is_terminal or current.slot != call.slot:
            logger.info(
                f"Call {call_id} changed to {current.status.value} while reminders were sent; "
                f"not recording {[timing.value for timing in due]}"
            )
            return due

        for timing in due:
            current = transitions.record_reminder_sent(current, timing)
        await self.calls.save(current)
        return due

    # =========================================================================
    # Fan-out
    # =========================================================================

    async def on_scheduled(self, call: ScheduledCall, audience: CallAudience) -> DispatchReport:
        event = NotificationEvent(
            kind=EventKind.call_scheduled,
            context=build_call_context(call),
            reference_id=call.id,
        )
        return await self.dispatcher.dispatch(event, audience.recipients())

    async def on_rescheduled(
        self,
        call: ScheduledCall,
        delta: CallDelta,
        audience: CallAudience,
    ) -> DispatchReport:
        event = NotificationEvent(
            kind=EventKind.call_rescheduled,
            context=build_reschedule_context(call, delta),
            reference_id=call.id,
        )
        return await self.dispatcher.dispatch(event, audience.recipients())

    async def on_cancelled(self, call: ScheduledCall, audience: CallAudience) -> DispatchReport:
        event = NotificationEvent(
            kind=EventKind.call_cancelled,
            context=build_cancel_context(call),
            reference_id=call.id,
        )
        return await self.dispatcher.dispatch(event, audience.recipients())

    async def _dispatch_reminder(
        self,
        call: ScheduledCall,
        timing: ReminderTiming,
        audience: CallAudience,
    ) -> DispatchReport:
        event = NotificationEvent(
            kind=EventKind.pre_call_reminder,
            context=build_reminder_context(call, timing),
            reference_id=call.id,
            timing=timing,
        )
        return await self.dispatcher.dispatch(event, audience.recipients())

    async def resolve_audience(
        self,
        call: ScheduledCall,
        actor_id: str | None = None,
        include_admins: bool = False,
    ) -> CallAudience:
        """Look up the teacher, students and optional admins/actor of a call."""
        teachers = await self.users.get_users([call.teacher_id])
        if not teachers:
            logger.warning(f"Teacher {call.teacher_id} for call {call.id} not found")

        students = await self.users.get_users(list(call.student_ids))
        missing = len(call.student_ids) - len(students)
        if missing:
            logger.warning(f"{missing} students of call {call.id} not found")

        admins = await self.users.get_admins() if include_admins else []

        actor = None
        if actor_id:
            actors = await self.users.get_users([actor_id])
            actor = actors[0] if actors else None

        return CallAudience(
            teacher=teachers[0] if teachers else None,
            students=students,
            admins=admins,
            actor=actor,
        )

    async def _announce(
        self,
        description: str,
        send: Callable[[CallAudience], Awaitable[DispatchReport]],
        call: ScheduledCall,
        actor_id: str | None = None,
        include_admins: bool = False,
    ) -> DispatchReport | None:
        """Resolve the audience and dispatch; notification errors stop here."""
        try:
            audience = await self.resolve_audience(call, actor_id, include_admins)
            return await send(audience)
        except Exception as e:
            logger.error(f"Failed to send notifications for {description}: {e}")
            sentry_sdk.capture_exception(e)
            return None

    # =========================================================================
    # Report cards
    # =========================================================================

    async def submit_report_card(
        self,
        student_id: str,
        teacher_id: str,
        rating: int,
        comments: str | None = None,
    ) -> ReportCard:
        """
        Save a teacher's report card for a student and notify the admins.

        Raises:
            ValidationError: Missing ids or a rating outside [1, 5]; nothing is saved or sent
            NotFound: Unknown student or teacher
        """
        validate_report_card_input(student_id, teacher_id, rating)
        teacher = await self.users.get_user(teacher_id)
        student = await self.users.get_user(student_id)

        report_card = build_report_card(self.id_factory(), student_id, teacher_id, rating, comments)
        await self.on_report_card_submitted(report_card, teacher, student)
        return report_card

    async def on_report_card_submitted(
        self,
        report_card: ReportCard,
        submitting_teacher: Recipient,
        student: Recipient,
    ) -> DispatchReport | None:
        """
        Persist a report card and notify every admin and super admin.

        Raises:
            ValidationError: The rating is outside [1, 5]
        """
        validate_report_card_input(report_card.student_id, report_card.teacher_id, report_card.rating)
        await self.report_cards.create(report_card)
        logger.info(
            f"Report card {report_card.id} submitted by teacher {report_card.teacher_id} "
            f"for student {report_card.student_id}"
        )

        try:
            admins = CallAudience(teacher=None, admins=await self.users.get_admins())
            event = NotificationEvent(
                kind=EventKind.report_card_submitted,
                context=build_report_card_context(
                    report_card,
                    teacher_name=submitting_teacher.name or "A teacher",
                    student_name=student.name or "a student",
                ),
                reference_id=report_card.id,
            )
            return await self.dispatcher.dispatch(event, admins.recipients())
        except Exception as e:
            logger.error(f"Failed to send notifications for report card {report_card.id}: {e}")
            sentry_sdk.capture_exception(e)
            return None
