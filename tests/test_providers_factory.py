import pytest

from practice_coach.providers.factory import get_chat_client
from practice_coach.providers.groq import GroqChatClient
from practice_coach.providers.mock import MockChatClient
from practice_coach.providers.openrouter import OpenRouterChatClient


@pytest.mark.parametrize("prov_env, expect_type", [
    ("mock", MockChatClient),
    ("test", MockChatClient),
    ("unknown", MockChatClient),
])
def test_get_chat_client_basic(prov_env, expect_type, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("AI_PROVIDER_CHAT", prov_env)
    # Ensure no accidental provider keys interfere
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    cli = get_chat_client()
    assert isinstance(cli, expect_type)


def test_openrouter_missing_key_falls_back_to_mock(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("AI_PROVIDER_CHAT", "openrouter")
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)

    assert isinstance(get_chat_client(), MockChatClient)


def test_openrouter_with_key(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "dummy")

    cli = get_chat_client("router", model="unit-test-model")
    assert isinstance(cli, OpenRouterChatClient)
    assert cli.model == "unit-test-model"


def test_groq_with_key(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GROQ_API_KEY", "dummy")
    monkeypatch.delenv("AI_CHAT_MODEL", raising=False)

    cli = get_chat_client("groq")
    assert isinstance(cli, GroqChatClient)
    assert cli.model == "llama3-70b-8192"


def test_provider_falls_back_to_ai_provider(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("AI_PROVIDER_CHAT", raising=False)
    monkeypatch.setenv("AI_PROVIDER", "groq")
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    assert isinstance(get_chat_client(), MockChatClient)


@pytest.mark.asyncio
async def test_mock_client_replies_deterministically():
    cli = MockChatClient()
    history = [{"sender": "ai", "text": "Welcome."}, {"sender": "user", "text": "Hello."}]
    out = await cli.generate("My goal is a new vision", "neutral", None, history)
    assert out in {"What's your timeline and key milestones?", "What obstacles do you anticipate and how will you handle them?"}


@pytest.mark.asyncio
async def test_mock_client_answers_first_message_after_greeting():
    cli = MockChatClient()
    greeting = [{"sender": "ai", "text": "Let's begin."}]
    out = await cli.generate("I worked in retail for years", "neutral", None, greeting)
    assert out in {
        "Can you quantify the impact you made in that role?",
        "What were your key responsibilities and how did you measure success?",
    }
