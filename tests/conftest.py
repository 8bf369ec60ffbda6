import httpx
import pytest

from app import create_app
from config import Settings
from reply_mailbox import InMemoryMailbox
from relay import WebhookRelay

WEBHOOK_URL = "https://hooks.example.test/webhook/chat"


class FakeWebhook:
    """Scripted webhook: each call pops the next outcome (status code or exception)."""

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [200])
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, json={"ok": outcome < 400})

    @property
    def calls(self):
        return len(self.requests)


class RecordingSleep:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)

    @property
    def total(self):
        return sum(self.delays)


@pytest.fixture
def settings():
    return Settings(webhook_url=WEBHOOK_URL)


@pytest.fixture
def webhook():
    return FakeWebhook()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def make_relay(sleep):
    def _make(settings, webhook):
        client = httpx.Client(transport=httpx.MockTransport(webhook), follow_redirects=True)
        return WebhookRelay(settings, client=client, sleep=sleep)
    return _make


@pytest.fixture
def relay(settings, webhook, make_relay):
    return make_relay(settings, webhook)


@pytest.fixture
def mailbox():
    return InMemoryMailbox()


@pytest.fixture
def app(settings, mailbox, relay):
    app = create_app(settings=settings, mailbox=mailbox, relay=relay)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
