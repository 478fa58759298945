"""
Notification dispatcher - fans events out to recipients based on their preferences.

Each recipient is handled in its own task, and each channel for a recipient
independently, so one failure never stops another delivery. Failures are
logged and collected into the DispatchReport; dispatch() itself does not
raise for them. There is no de-duplication here: callers pass each recipient
once per event.
"""

import asyncio
import logging
from datetime import datetime

import sentry_sdk

from lms_core.enums import DeliveryChannel, EventKind, NotificationMethod
from lms_core.notifications.events import (
    ChannelResult,
    DispatchReport,
    Notification,
    NotificationEvent,
    Recipient,
    RecipientReport,
)
from lms_core.notifications.templates import EMAIL_KEYS, IN_APP_KEY, get_message, has_template
from lms_core.notifications.urls import build_notification_link
from lms_core.preferences import NotificationPreference, PreferenceResolver
from lms_core.repositories import EmailAdapter, NotificationRepository, PushAdapter
from lms_core.timezone import format_datetime_in_timezone

logger = logging.getLogger(__name__)


def supported_methods(kind: EventKind) -> set[NotificationMethod]:
    """Channels an event kind can be delivered on, from its templates."""
    methods = set()
    if all(has_template(kind.value, key) for key in EMAIL_KEYS):
        methods.add(NotificationMethod.email)
    if has_template(kind.value, IN_APP_KEY):
        methods.add(NotificationMethod.push)
    return methods


def build_recipient_context(event: NotificationEvent, recipient: Recipient) -> dict:
    """Event context plus the values that differ per recipient."""
    full_context = {
        "name": recipient.name or "there",
        "email": recipient.email or "",
        "role": recipient.role.value,
        "link": build_notification_link(event.kind, recipient.role),
        **event.context,
    }

    # Format the call start in the recipient's timezone if available
    call_start_utc = event.context.get("call_start_utc")
    if recipient.timezone and call_start_utc:
        try:
            start = datetime.fromisoformat(call_start_utc)
            full_context["call_time_local"] = format_datetime_in_timezone(
                start, recipient.timezone
            )
        except (ValueError, TypeError):
            pass  # Keep the call-timezone fallback

    return full_context


class NotificationDispatcher:
    """Delivers notification events over email and in-app push."""

    def __init__(
        self,
        preferences: PreferenceResolver,
        notifications: NotificationRepository,
        email: EmailAdapter | None = None,
        push: PushAdapter | None = None,
    ):
        self.preferences = preferences
        self.notifications = notifications
        self.email = email
        self.push = push

    async def dispatch(
        self, event: NotificationEvent, recipients: list[Recipient]
    ) -> DispatchReport:
        """
        Send an event to every recipient on their enabled channels.

        Args:
            event: What happened, with shared template context
            recipients: Each user exactly once

        Returns:
            DispatchReport with one RecipientReport per recipient, in order
        """
        results = await asyncio.gather(
            *(self._deliver_to_recipient(event, recipient) for recipient in recipients),
            return_exceptions=True,
        )

        report = DispatchReport(kind=event.kind)
        for recipient, result in zip(recipients, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Unexpected error notifying user {recipient.user_id} of {event.kind.value}: {result}"
                )
                sentry_sdk.capture_exception(result)
                result = RecipientReport(user_id=recipient.user_id, error=str(result))
            report.recipients.append(result)

        failed = len(report.failures) + len(report.errors)
        logger.info(
            f"Dispatched {event.kind.value} to {len(recipients)} recipients ({failed} failures)"
        )
        return report

    async def _deliver_to_recipient(
        self, event: NotificationEvent, recipient: Recipient
    ) -> RecipientReport:
        report = RecipientReport(user_id=recipient.user_id)

        try:
            preference = await self.preferences.resolve(recipient.user_id)
        except Exception as e:
            logger.error(f"Failed to resolve preferences for user {recipient.user_id}: {e}")
            sentry_sdk.capture_exception(e)
            report.error = f"preferences: {e}"
            return report

        skip_reason = self._skip_reason(event, preference)
        if skip_reason:
            logger.info(
                f"Skipping {event.kind.value} for user {recipient.user_id}: {skip_reason}"
            )
            report.skipped = True
            report.skip_reason = skip_reason
            return report

        methods = [m for m in preference.methods if m in supported_methods(event.kind)]
        if not methods:
            return report

        context = build_recipient_context(event, recipient)
        deliveries = []
        for method in methods:
            if method == NotificationMethod.email:
                deliveries.append(self._deliver_email(event, recipient, context))
            elif method == NotificationMethod.push:
                deliveries.append(self._deliver_push(event, recipient, context))

        for results in await asyncio.gather(*deliveries):
            report.channels.extend(results)
        return report

    @staticmethod
    def _skip_reason(event: NotificationEvent, preference: NotificationPreference) -> str | None:
        if not preference.enabled:
            return "notifications disabled"
        if event.timing is not None and event.timing not in preference.timings:
            return f"{event.timing.value} reminders not selected"
        return None

    async def _deliver_email(
        self, event: NotificationEvent, recipient: Recipient, context: dict
    ) -> list[ChannelResult]:
        if self.email is None:
            return [ChannelResult(DeliveryChannel.email, False, "email channel not configured")]
        if not recipient.email:
            return [ChannelResult(DeliveryChannel.email, False, "recipient has no email")]

        try:
            await self.email.send(event.kind, context)
        except Exception as e:
            logger.error(
                f"Failed to send {event.kind.value} email to {recipient.role.value} "
                f"{recipient.user_id} ({recipient.email}): {e}"
            )
            sentry_sdk.capture_exception(e)
            return [ChannelResult(DeliveryChannel.email, False, str(e))]

        logger.info(f"Sent {event.kind.value} email to user {recipient.user_id}")
        return [ChannelResult(DeliveryChannel.email, True)]

    async def _deliver_push(
        self, event: NotificationEvent, recipient: Recipient, context: dict
    ) -> list[ChannelResult]:
        """Persist the in-app record, then push it live. Each step reports separately."""
        try:
            message = get_message(event.kind.value, IN_APP_KEY, context)
        except KeyError as e:
            logger.error(f"Missing template variable {e} for {event.kind.value} in-app message")
            return [ChannelResult(DeliveryChannel.in_app, False, f"missing variable {e}")]

        link = context["link"]
        results = []

        try:
            await self.notifications.create(
                Notification(user_id=recipient.user_id, message=message, link=link)
            )
            results.append(ChannelResult(DeliveryChannel.in_app, True))
        except Exception as e:
            logger.error(f"Failed to save notification for user {recipient.user_id}: {e}")
            sentry_sdk.capture_exception(e)
            results.append(ChannelResult(DeliveryChannel.in_app, False, str(e)))

        if self.push is None:
            results.append(ChannelResult(DeliveryChannel.socket, False, "push channel not configured"))
            return results

        try:
            await self.push.emit_to_user(recipient.user_id, {"message": message, "link": link})
            results.append(ChannelResult(DeliveryChannel.socket, True))
        except Exception as e:
            # Live push is best-effort; the saved record shows up on next load
            logger.warning(f"Failed to push notification to user {recipient.user_id}: {e}")
            results.append(ChannelResult(DeliveryChannel.socket, False, str(e)))

        return results
