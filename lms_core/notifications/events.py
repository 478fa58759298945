"""Notification event, recipient and delivery report types."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from lms_core.enums import DeliveryChannel, EventKind, ReminderTiming, UserRole


@dataclass(frozen=True)
class Recipient:
    """A user a notification event is delivered to."""

    user_id: str
    email: str | None
    role: UserRole
    name: str = ""
    timezone: str | None = None


@dataclass(frozen=True)
class NotificationEvent:
    """
    A state change to fan out.

    context holds the template variables shared by every recipient; the
    dispatcher adds per-recipient values (name, local time, link).
    """

    kind: EventKind
    context: dict
    reference_id: str | None = None
    timing: ReminderTiming | None = None  # only for pre_call_reminder


@dataclass
class Notification:
    """In-app notification record. Only read-state changes after creation."""

    user_id: str
    message: str
    link: str
    id: str | None = None
    read: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ChannelResult:
    channel: DeliveryChannel
    success: bool
    error: str | None = None


@dataclass
class RecipientReport:
    user_id: str
    channels: list[ChannelResult] = field(default_factory=list)
    skipped: bool = False
    skip_reason: str | None = None
    error: str | None = None  # set when the recipient could not be processed at all

    @property
    def succeeded(self) -> bool:
        return self.error is None and all(c.success for c in self.channels)

    def channel(self, channel: DeliveryChannel) -> ChannelResult | None:
        for result in self.channels:
            if result.channel == channel:
                return result
        return None


@dataclass
class DispatchReport:
    """Per-recipient, per-channel outcome of one dispatch call."""

    kind: EventKind
    recipients: list[RecipientReport] = field(default_factory=list)

    def for_user(self, user_id: str) -> RecipientReport | None:
        for report in self.recipients:
            if report.user_id == user_id:
                return report
        return None

    @property
    def failures(self) -> list[tuple[str, ChannelResult]]:
        return [
            (report.user_id, result)
            for report in self.recipients
            for result in report.channels
            if not result.success
        ]

    @property
    def errors(self) -> list[RecipientReport]:
        return [report for report in self.recipients if report.error is not None]

    @property
    def all_succeeded(self) -> bool:
        return all(report.succeeded for report in self.recipients)
