import httpx
import pytest

from aer.config import Settings

TOKEN = "aer_user_123"
API_BASE = "https://aer.test"


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def notify(self, title, body=""):
        self.events.append((title, body))


@pytest.fixture
def settings():
    return Settings(auth_token=TOKEN, api_base_url=API_BASE)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def recorded():
    """Requests seen by the mock transport."""
    return []


@pytest.fixture
def make_client(recorded):
    """Build an AsyncClient whose responses come from a handler."""

    def factory(handler):
        def record(request):
            recorded.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(record))

    return factory
