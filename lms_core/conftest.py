"""Pytest fixtures for the scheduling engine: in-memory repositories and fake channels."""

import itertools

import pytest

from lms_core.enums import UserRole
from lms_core.errors import DeliveryFailure, NotFound
from lms_core.notifications.dispatcher import NotificationDispatcher
from lms_core.notifications.events import Notification, Recipient
from lms_core.preferences import PreferenceResolver
from lms_core.scheduling import SchedulingService


class InMemoryCallRepository:
    def __init__(self):
        self.calls = {}
        self.saves = []

    async def get_by_id(self, call_id):
        if call_id not in self.calls:
            raise NotFound("Call", call_id)
        return self.calls[call_id]

    async def save(self, call):
        self.calls[call.id] = call
        self.saves.append(call)


class InMemoryUserDirectory:
    """Users plus their stored preferences (None = never set)."""

    def __init__(self, users=(), preferences=None):
        self.users = {user.user_id: user for user in users}
        self.preferences = dict(preferences or {})
        self.fail_preferences_for = set()

    async def get_user(self, user_id):
        if user_id not in self.users:
            raise NotFound("User", user_id)
        return self.users[user_id]

    async def get_users(self, user_ids):
        return [self.users[user_id] for user_id in user_ids if user_id in self.users]

    async def get_admins(self):
        return [
            user
            for user in self.users.values()
            if user.role in (UserRole.admin, UserRole.super_admin)
        ]

    async def get_preferences(self, user_id):
        if user_id in self.fail_preferences_for:
            raise RuntimeError("preference store unavailable")
        return self.preferences.get(user_id)


class InMemoryNotificationRepository:
    def __init__(self):
        self.created = []
        self.fail_for = set()

    async def create(self, notification: Notification) -> Notification:
        if notification.user_id in self.fail_for:
            raise RuntimeError("database unavailable")
        notification.id = str(len(self.created) + 1)
        self.created.append(notification)
        return notification

    def for_user(self, user_id):
        return [n for n in self.created if n.user_id == user_id]


class InMemoryReportCardRepository:
    def __init__(self):
        self.created = []
        self.error = None

    async def create(self, report_card):
        if self.error:
            raise self.error
        self.created.append(report_card)


class FakeEmailAdapter:
    """Records (kind, template_data) per send; raises for addresses in fail_for."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    async def send(self, kind, template_data):
        if template_data["email"] in self.fail_for:
            raise DeliveryFailure(f"rejected {template_data['email']}")
        self.sent.append((kind, template_data))

    def sent_to(self, email):
        return [data for _kind, data in self.sent if data["email"] == email]


class FakePushAdapter:
    def __init__(self):
        self.emitted = []
        self.fail = False

    async def emit_to_user(self, user_id, payload):
        if self.fail:
            raise DeliveryFailure("socket server down")
        self.emitted.append((user_id, payload))


TEACHER = Recipient("t1", "teacher@example.com", UserRole.teacher, name="Tara", timezone="Asia/Kolkata")
STUDENT_1 = Recipient("s1", "sam@example.com", UserRole.student, name="Sam", timezone="America/New_York")
STUDENT_2 = Recipient("s2", "sia@example.com", UserRole.student, name="Sia")
ADMIN = Recipient("a1", "admin@example.com", UserRole.admin, name="Ada")
SUPER_ADMIN = Recipient("a2", "root@example.com", UserRole.super_admin, name="Rui")


@pytest.fixture
def users():
    return InMemoryUserDirectory([TEACHER, STUDENT_1, STUDENT_2, ADMIN, SUPER_ADMIN])


@pytest.fixture
def call_repo():
    return InMemoryCallRepository()


@pytest.fixture
def notification_repo():
    return InMemoryNotificationRepository()


@pytest.fixture
def report_card_repo():
    return InMemoryReportCardRepository()


@pytest.fixture
def email():
    return FakeEmailAdapter()


@pytest.fixture
def push():
    return FakePushAdapter()


@pytest.fixture
def dispatcher(users, notification_repo, email, push):
    return NotificationDispatcher(
        preferences=PreferenceResolver(users),
        notifications=notification_repo,
        email=email,
        push=push,
    )


@pytest.fixture
def service(call_repo, users, report_card_repo, dispatcher):
    counter = itertools.count(1)
    return SchedulingService(
        calls=call_repo,
        users=users,
        report_cards=report_card_repo,
        dispatcher=dispatcher,
        id_factory=lambda: f"id-{next(counter)}",
    )
