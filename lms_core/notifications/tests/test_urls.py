"""Tests for URL builder utilities."""

from unittest.mock import patch

from lms_core.enums import EventKind, UserRole
from lms_core.notifications.urls import (
    build_admin_students_url,
    build_notification_link,
    build_schedule_url,
)


class TestBuildUrls:
    def test_builds_schedule_url_per_role(self):
        with patch("lms_core.notifications.urls.get_base_url", return_value="https://lms.example.com"):
            assert build_schedule_url(UserRole.student) == "https://lms.example.com/student/schedule"
            assert build_schedule_url(UserRole.teacher) == "https://lms.example.com/teacher/schedule"
            assert build_schedule_url(UserRole.super_admin) == "https://lms.example.com/superadmin/schedule"

    def test_builds_admin_students_url(self):
        with patch("lms_core.notifications.urls.get_base_url", return_value="https://lms.example.com"):
            assert build_admin_students_url() == "https://lms.example.com/admin/students"

    def test_notification_link_by_event(self):
        with patch("lms_core.notifications.urls.get_base_url", return_value="https://lms.example.com"):
            assert (
                build_notification_link(EventKind.call_rescheduled, UserRole.teacher)
                == "https://lms.example.com/teacher/schedule"
            )
            assert (
                build_notification_link(EventKind.report_card_submitted, UserRole.super_admin)
                == "https://lms.example.com/admin/students"
            )

    def test_default_base_url(self, monkeypatch):
        monkeypatch.delenv("BASE_URL", raising=False)
        assert build_schedule_url(UserRole.admin) == "http://localhost:3000/admin/schedule"
