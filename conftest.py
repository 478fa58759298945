"""Root pytest configuration."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Run each test against the built-in defaults unless it sets its own."""
    for name in ("BASE_URL", "DEFAULT_TIMEZONE", "EMAIL_SEND_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
