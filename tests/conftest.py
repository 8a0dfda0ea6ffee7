# tests/conftest.py
import json
import uuid
import httpx
import pytest

from app.config import Settings
from app.models.forms import FieldSpec, FormConfig
from app.models.submissions import Submission
from app.services.submission_service import PersistenceError
from app.services.webhook_service import WebhookClient

WEBHOOK_URL = "https://webhook.example.com/api"


class FakeSubmissionStore:
    """In-memory Submission Record Store"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.created = []

    def create(self, user_id, submission):
        if self.fail:
            raise PersistenceError("Failed to create submission: database offline")
        record = Submission(
            id=str(uuid.uuid4()),
            user_id=user_id,
            status="success",
            **submission.model_dump()
        )
        self.created.append(record)
        return record


class RecordingTransport:
    """Scripted webhook endpoint: each call consumes the next step"""

    def __init__(self, *steps):
        self.steps = list(steps)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        step = self.steps[min(len(self.requests), len(self.steps)) - 1]
        if isinstance(step, Exception):
            raise step
        if callable(step):
            return step(request)
        # A fresh response per call; the same step may be replayed
        return httpx.Response(step.status_code, headers=step.headers, content=step.content)

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def settings():
    """Fresh settings per test, never read from the environment file"""
    return Settings(
        _env_file=None,
        supabase_url="https://supabase.test",
        supabase_service_role_key="service-key",
        supabase_anon_key="anon-key",
        copy_feedback_seconds=0.05,
    )


@pytest.fixture
def sleeps():
    """Delays requested by the webhook client instead of sleeping"""
    return []


@pytest.fixture
def make_client(sleeps):
    def factory(*steps, **kwargs):
        transport = RecordingTransport(*steps)

        async def fake_sleep(delay):
            sleeps.append(delay)

        client = WebhookClient(
            transport=httpx.MockTransport(transport),
            sleep=fake_sleep,
            **kwargs
        )
        return client, transport

    return factory


@pytest.fixture
def idea_config():
    """One required text field named idea"""
    return FormConfig(
        fields=[FieldSpec(name="idea", label="Idea", type="text", validation={"required": True})],
        webhook_url=WEBHOOK_URL,
        result_title="Idea Analysis",
        tool_id="tool-1",
        tool_name="Idea Analyzer",
    )


@pytest.fixture
def submission_store():
    return FakeSubmissionStore()


@pytest.fixture
def failing_store():
    return FakeSubmissionStore(fail=True)


@pytest.fixture
def user():
    return {"user_id": "user-1", "email": "user@example.com", "raw_token": "token"}
