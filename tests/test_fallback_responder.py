import json
import random

import pytest

from practice_coach.feedback.scenarios import SCENARIOS
from practice_coach.providers.fallback import FallbackContext, FallbackResponder

TOUGH_EXPERIENCE = {
    "That's what everyone says. Give me specific numbers and measurable outcomes.",
    "Experience means nothing without results. What did you actually achieve?",
}
PRIOR = [{"sender": "ai", "text": "Welcome."}, {"sender": "user", "text": "Hi."}]


@pytest.fixture
def responder():
    return FallbackResponder.from_file(rng=random.Random(7))


def test_opening_before_user_has_spoken(responder):
    out = responder.respond("I have lots of experience", "tough", SCENARIOS["jobInterview"], [])
    assert out.startswith("Let's cut to the chase.")


def test_opening_ignores_ai_turns(responder):
    out = responder.respond("anything", "neutral", None, [{"sender": "ai", "text": "Hello"}])
    assert out == "Let's begin. Please share your thoughts on this topic and provide some context."


def test_opening_default_for_scenario_without_entry(responder):
    out = responder.respond("", "friendly", SCENARIOS["dating"], PRIOR)
    assert out == "Hello! This is going to be a great conversation. Tell me what's been on your mind lately!"


def test_keyword_rule(responder):
    out = responder.respond("I have a lot of experience in sales", "tough", None, PRIOR)
    assert out in TOUGH_EXPERIENCE


def test_first_matching_rule_wins(responder):
    ctx = FallbackContext("my team experience matters", "neutral", None, PRIOR)
    assert responder.match(ctx).name == "experience"
    ctx = FallbackContext("I work well with my team", "neutral", None, PRIOR)
    assert responder.match(ctx).name == "team"


def test_default_rule(responder):
    ctx = FallbackContext("The weather is nice", "neutral", None, PRIOR)
    assert responder.match(ctx).name == "general"


def test_unknown_personality_uses_neutral(responder):
    out = responder.respond("The weather is nice", "chatty", None, PRIOR)
    assert out in {"Can you elaborate with concrete examples?", "What factors led you to that conclusion?"}


def test_selection_is_deterministic_with_seeded_rng():
    a = FallbackResponder.from_file(rng=random.Random(42))
    b = FallbackResponder.from_file(rng=random.Random(42))
    texts = ["my goal is growth", "because I care", "my weakness is focus", "hello there"]
    assert [a.respond(t, "skeptical", None, PRIOR) for t in texts] == [
        b.respond(t, "skeptical", None, PRIOR) for t in texts
    ]


def test_custom_table_from_file(tmp_path):
    table = {
        "defaultPersonality": "neutral",
        "opening": {"neutral": {"default": "Hi!"}},
        "rules": [{"name": "pets", "keywords": ["dog"], "responses": {"neutral": ["Tell me about your dog."]}}],
        "default": {"name": "general", "responses": {"neutral": ["Go on."]}},
    }
    path = tmp_path / "fallback.json"
    path.write_text(json.dumps(table), encoding="utf-8")
    r = FallbackResponder.from_file(path)
    assert r.respond("", "neutral", None, []) == "Hi!"
    assert r.respond("My DOG is great", "neutral", None, PRIOR) == "Tell me about your dog."
    assert r.respond("ok", "tough", None, PRIOR) == "Go on."


def test_path_from_environment(tmp_path, monkeypatch: pytest.MonkeyPatch):
    table = {"opening": {"neutral": {"default": "Env table"}}, "rules": [], "default": {"responses": {}}}
    path = tmp_path / "env.json"
    path.write_text(json.dumps(table), encoding="utf-8")
    monkeypatch.setenv("FALLBACK_RESPONSES_PATH", str(path))
    assert FallbackResponder.from_file().respond("", "neutral", None, []) == "Env table"
