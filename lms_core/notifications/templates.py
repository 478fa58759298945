"""
Notification message templates.

messages.yaml maps each EventKind value to its channel texts. An event is
deliverable by email when it has both EMAIL_KEYS, and in-app when it has
IN_APP_KEY. Texts use str.format placeholders filled from the event context.
"""

from functools import lru_cache
from pathlib import Path

import yaml

TEMPLATES_PATH = Path(__file__).parent / "messages.yaml"

EMAIL_KEYS = ("email_subject", "email_body")
IN_APP_KEY = "in_app"


@lru_cache(maxsize=1)
def load_templates() -> dict[str, dict[str, str]]:
    """Parse messages.yaml once per process."""
    with open(TEMPLATES_PATH) as f:
        return yaml.safe_load(f) or {}


def has_template(kind: str, key: str) -> bool:
    return key in load_templates().get(kind, {})


def render_message(template: str, context: dict) -> str:
    """
    Fill a template's {placeholders} from context.

    Raises:
        KeyError: A placeholder has no value in context
    """
    return template.format(**context).strip()


def get_message(kind: str, key: str, context: dict) -> str:
    """Render one channel text (e.g. "email_subject", "in_app") for an event kind."""
    return render_message(load_templates()[kind][key], context)
