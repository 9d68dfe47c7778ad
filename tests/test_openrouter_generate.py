import types

import pytest

import practice_coach.providers.openrouter as openrouter_mod
from practice_coach.feedback.scenarios import SCENARIOS
from practice_coach.providers.groq import GroqChatClient
from practice_coach.providers.openrouter import OpenRouterChatClient


def _fake_httpx(calls, status_code=200, body=None):
    class FakeResp:
        def __init__(self):
            self.status_code = status_code
            self.text = "boom"

        def json(self):
            return body

    class FakeAsyncClient:
        def __init__(self, *args, **kwargs):
            calls.append({"client_kwargs": kwargs})

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def post(self, url, headers=None, json=None):
            calls.append({"url": url, "headers": headers, "json": json})
            return FakeResp()

    return types.SimpleNamespace(AsyncClient=FakeAsyncClient)


def _completion(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


@pytest.mark.asyncio
async def test_generate_posts_chat_completion(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "dummy")
    calls = []
    monkeypatch.setattr(openrouter_mod, "httpx", _fake_httpx(calls, body=_completion("  Tell me more.  ")))

    cli = OpenRouterChatClient(model="unit-test-model")
    history = [{"sender": "ai", "text": "Welcome."}, {"sender": "user", "text": "Hi."}]
    out = await cli.generate("I led a team.", "tough", SCENARIOS["jobInterview"], history, request_id="rid-1")

    assert out == "Tell me more."
    post = calls[-1]
    assert post["url"] == "https://openrouter.ai/api/v1/chat/completions"
    assert post["headers"]["X-Request-Id"] == "rid-1"
    assert post["headers"]["Authorization"] == "Bearer dummy"
    payload = post["json"]
    assert payload["model"] == "unit-test-model"
    assert payload["stream"] is False
    assert [m["role"] for m in payload["messages"]] == ["system", "assistant", "user", "user"]
    assert payload["messages"][-1]["content"] == "I led a team."
    assert "Job Interview" in payload["messages"][0]["content"]


@pytest.mark.asyncio
async def test_generate_raises_on_error_status(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "dummy")
    monkeypatch.setattr(openrouter_mod, "httpx", _fake_httpx([], status_code=500, body={}))

    cli = OpenRouterChatClient(model="unit-test-model")
    with pytest.raises(RuntimeError):
        await cli.generate("hi", "neutral", None, [])


@pytest.mark.asyncio
async def test_generate_raises_on_bad_shape(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "dummy")
    monkeypatch.setattr(openrouter_mod, "httpx", _fake_httpx([], body={"choices": []}))

    cli = OpenRouterChatClient(model="unit-test-model")
    with pytest.raises(RuntimeError):
        await cli.generate("hi", "neutral", None, [])


@pytest.mark.asyncio
async def test_groq_uses_its_endpoint(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GROQ_API_KEY", "dummy")
    calls = []
    monkeypatch.setattr(openrouter_mod, "httpx", _fake_httpx(calls, body=_completion("Okay.")))

    cli = GroqChatClient()
    out = await cli.generate("hi", "friendly", None, [])

    assert out == "Okay."
    assert calls[-1]["url"] == "https://api.groq.com/openai/v1/chat/completions"
    assert "X-Request-Id" not in calls[-1]["headers"]


def test_missing_key_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    with pytest.raises(RuntimeError):
        OpenRouterChatClient()
