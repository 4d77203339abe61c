import pytest
from fastapi.testclient import TestClient

from auth.session_issuer import SessionIssuer, build_password_context
from enrichment.task_enricher import TaskEnricher
from llm.llm_client import LLMClient
from services.task_service import TaskService
from storage.account_store import InMemoryAccountStore
from storage.task_store import InMemoryTaskStore

TEST_SECRET = "test-secret"

# prompt keyword -> which enrichment call it is
CALL_KINDS = {
    "task classifier": "category",
    "task priority": "priority",
    "how many hours": "estimate",
    "step-by-step procedure": "procedure",
}


class FakeProvider:
    """Answers per call kind. A reply may be text, None, an exception or a callable."""

    def __init__(self, **replies):
        self.replies = replies
        self.calls = []

    def generate(self, *, prompt: str, max_tokens: int, temperature: float, disable_reasoning: bool = False) -> str:
        kind = next((k for key, k in CALL_KINDS.items() if key in prompt), "unknown")
        self.calls.append(
            {
                "kind": kind,
                "prompt": prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "disable_reasoning": disable_reasoning,
            }
        )
        reply = self.replies.get(kind)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply()
        return reply

    def kinds(self) -> list:
        return [c["kind"] for c in self.calls]


@pytest.fixture
def fake_provider_factory():
    def _make(**replies):
        return FakeProvider(**replies)
    return _make


@pytest.fixture
def pwd_context():
    # minimum bcrypt cost keeps the suite fast
    return build_password_context(rounds=4)


@pytest.fixture
def account_store():
    return InMemoryAccountStore()


@pytest.fixture
def task_store():
    return InMemoryTaskStore()


@pytest.fixture
def issuer(account_store, pwd_context):
    return SessionIssuer(account_store, secret=TEST_SECRET, pwd_context=pwd_context)


@pytest.fixture
def service_factory(task_store):
    def _make(provider=None, timeout_s: float = 5.0):
        llm = LLMClient(provider=provider, timeout_s=timeout_s)
        return TaskService(task_store, TaskEnricher(llm))
    return _make


@pytest.fixture
def client_factory(issuer, service_factory):
    """TestClient whose dependencies use fresh in-memory stores and the given provider."""
    from api import dependencies
    from api.main import app

    def _make(provider=None):
        service = service_factory(provider)
        app.dependency_overrides[dependencies.get_session_issuer] = lambda: issuer
        app.dependency_overrides[dependencies.get_task_service] = lambda: service
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


def signup_headers(client: TestClient, email: str = "ann@example.com", password: str = "pw-ann") -> dict:
    r = client.post("/api/auth/signup", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}
