"""URL builder utilities for notification links."""

from lms_core.config import get_base_url
from lms_core.enums import EventKind, UserRole

# Portal path segment per role (matches the frontend's route groups)
ROLE_PORTAL_PATHS = {
    UserRole.student: "student",
    UserRole.teacher: "teacher",
    UserRole.admin: "admin",
    UserRole.super_admin: "superadmin",
}


def build_schedule_url(role: UserRole) -> str:
    """Build URL to a role's schedule page."""
    return f"{get_base_url()}/{ROLE_PORTAL_PATHS[role]}/schedule"


def build_admin_students_url() -> str:
    """Build URL to the admin student list, where report cards are reviewed."""
    return f"{get_base_url()}/admin/students"


def build_notification_link(kind: EventKind, role: UserRole) -> str:
    """Link attached to an in-app notification for a recipient of this role."""
    if kind == EventKind.report_card_submitted:
        return build_admin_students_url()
    return build_schedule_url(role)
