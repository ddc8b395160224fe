"""
Shared fixtures: settings, a temporary store, and a fake completion service.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from src.server.app import create_app
from src.storage import RelayStore
from src.utils.config import Settings


# Setup logging for tests
logging.basicConfig(level=logging.INFO)


PHONE_NUMBER = "+15550000000"
API_SECRET = "test-api-secret-0123456789abcdef"


class FakeSuggester:
    """
    Stands in for ObjectionSuggester.

    Replies "Suggestion for: <message>". A message listed in `gates` waits
    for its asyncio.Event first; messages in `fail_on` raise.
    """

    def __init__(self, gates: dict = None, fail_on: set = None):
        self.model = "fake-model"
        self.gates = gates or {}
        self.fail_on = fail_on or set()
        self.calls: list[str] = []

    async def suggest(self, message: str) -> str:
        self.calls.append(message)
        gate = self.gates.get(message)
        if gate is not None:
            await gate.wait()
        if message in self.fail_on:
            raise RuntimeError("completion service unavailable")
        return f"Suggestion for: {message}"


@pytest.fixture
def settings(tmp_path):
    """Fully populated settings (no .env lookup)."""
    return Settings(
        _env_file=None,
        database_path=str(tmp_path / "relay.db"),
        twilio_account_sid="ACtest00000000000000000000000000",
        twilio_auth_token="test-auth-token",
        twilio_api_key="SKtest00000000000000000000000000",
        twilio_api_secret=API_SECRET,
        twilio_app_sid="APtest00000000000000000000000000",
        twilio_phone_number=PHONE_NUMBER,
        openai_api_key="sk-test",
    )


@pytest.fixture
def store(settings):
    return RelayStore(settings.database_path)


@pytest.fixture
def suggester():
    return FakeSuggester()


@pytest.fixture
def client(settings, store, suggester):
    app = create_app(settings=settings, store=store, suggester=suggester)
    with TestClient(app) as test_client:
        yield test_client
