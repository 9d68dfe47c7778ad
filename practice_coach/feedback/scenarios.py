"""Scenario catalogue and scenario-specific overlay rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Scenario:
    key: str
    title: str
    description: str
    questions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "description": self.description,
            "questions": list(self.questions),
        }


SCENARIOS: Dict[str, Scenario] = {
    s.key: s
    for s in (
        Scenario(
            "jobInterview",
            "Job Interview",
            "Practice answering tough interview questions",
            (
                "Tell me about yourself",
                "Why do you want this job?",
                "What's your biggest weakness?",
                "Where do you see yourself in 5 years?",
                "Why should we hire you?",
            ),
        ),
        Scenario(
            "networking",
            "Networking Event",
            "Practice small talk and professional networking",
            (
                "So what do you do for work?",
                "What brings you to this event?",
                "Are you working on any interesting projects?",
            ),
        ),
        Scenario(
            "conflict",
            "Difficult Conversation",
            "Practice addressing conflicts with colleagues",
            (
                "I noticed you missed the deadline again",
                "We need to discuss your performance",
                "I disagree with your approach on this project",
            ),
        ),
        Scenario(
            "dating",
            "First Date",
            "Practice casual dating conversation",
            ("So, what do you do for fun?", "Tell me about your ideal weekend"),
        ),
        Scenario(
            "customerService",
            "Difficult Customer",
            "Handle complaints professionally",
            ("This product is completely broken!", "I want to speak to your manager!"),
        ),
        Scenario(
            "familyConflict",
            "Family Discussion",
            "Navigate sensitive family topics",
            ("We need to talk about your life choices", "Why don't you visit more often?"),
        ),
        Scenario(
            "publicSpeaking",
            "Presentation Q&A",
            "Handle questions after a presentation",
            ("What evidence supports your claim?", "Have you considered the downsides?"),
        ),
        Scenario(
            "socialAnxiety",
            "Social Gathering",
            "Practice casual social interactions",
            ("I don't think we've met before", "What are your weekend plans?"),
        ),
    )
}

PERSONALITIES: Dict[str, Dict[str, str]] = {
    "tough": {"name": "Tough Interviewer", "description": "Critical and demanding, hard to impress"},
    "friendly": {"name": "Friendly Colleague", "description": "Warm and supportive, easy to talk to"},
    "neutral": {"name": "Professional", "description": "Formal and business-focused"},
    "skeptical": {"name": "Skeptical Questioner", "description": "Challenges everything you say"},
    "supportive": {"name": "Supportive Mentor", "description": "Encouraging and helpful"},
    "intimidating": {"name": "Intimidating Authority", "description": "Serious and imposing"},
    "chatty": {"name": "Overly Talkative", "description": "Talks too much, interrupts"},
    "empathetic": {"name": "Empathetic Listener", "description": "Understanding and emotionally aware"},
}

ScenarioLike = Union[Scenario, str, Dict[str, Any], None]


def normalize_key(key: Any) -> str:
    """'job-interview', 'job_interview' and 'jobInterview' all map to 'jobinterview'."""
    return re.sub(r"[^a-z0-9]", "", ("" if key is None else str(key)).lower())


_BY_NORMALIZED = {normalize_key(k): s for k, s in SCENARIOS.items()}


def get_scenario(key: Any) -> Optional[Scenario]:
    return _BY_NORMALIZED.get(normalize_key(key))


def scenario_key(scenario: ScenarioLike) -> str:
    if scenario is None:
        return ""
    if isinstance(scenario, Scenario):
        return scenario.key
    if isinstance(scenario, dict):
        return str(scenario.get("key") or scenario.get("id") or "")
    return str(scenario)


def resolve_scenario(scenario: ScenarioLike) -> Optional[Scenario]:
    if isinstance(scenario, Scenario):
        return scenario
    if isinstance(scenario, dict):
        known = get_scenario(scenario_key(scenario))
        title = scenario.get("title")
        description = scenario.get("description")
        if known is None and not (title or description):
            return None
        return Scenario(
            key=scenario_key(scenario) or (known.key if known else ""),
            title=str(title or (known.title if known else "")),
            description=str(description or (known.description if known else "")),
            questions=known.questions if known else (),
        )
    return get_scenario(scenario)


STRENGTH = "strength"
SUGGESTION = "suggestion"


@dataclass(frozen=True)
class ScenarioRule:
    """One overlay rule.

    Fires when ``pattern`` is found (or absent, with ``present=False``), or,
    when ``shorter_than`` is set, when the text has fewer characters than that.
    """

    kind: str
    message: str
    pattern: Optional["re.Pattern[str]"] = None
    present: bool = True
    shorter_than: Optional[int] = None

    def matches(self, text: str) -> bool:
        if self.shorter_than is not None:
            return len(text) < self.shorter_than
        if self.pattern is None:
            return False
        found = bool(self.pattern.search(text))
        return found if self.present else not found


def _re(p: str) -> "re.Pattern[str]":
    return re.compile(p, re.IGNORECASE)


SCENARIO_RULES: Dict[str, Tuple[ScenarioRule, ...]] = {
    "jobinterview": (
        ScenarioRule(
            STRENGTH,
            "Good use of professional keywords and action words",
            _re(
                r"\b(team|collaboration|leadership|results|achievement|achieved|implemented"
                r"|developed|managed|led|improved|increased)\b"
            ),
        ),
        ScenarioRule(
            SUGGESTION,
            "Try to highlight your relevant experience and achievements",
            _re(r"\b(experience|skill|achievement|result)\b"),
            present=False,
        ),
        ScenarioRule(SUGGESTION, "Interview answers should be more detailed", shorter_than=50),
    ),
    "networking": (
        ScenarioRule(
            STRENGTH,
            "Good reciprocal conversation skills",
            _re(r"\b(what about you|how about|tell me about)\b"),
        ),
        ScenarioRule(
            SUGGESTION,
            "Try asking questions to keep the conversation flowing",
            re.compile(r"\?"),
            present=False,
        ),
    ),
    "conflict": (
        ScenarioRule(
            STRENGTH,
            "Shows willingness to understand and resolve issues",
            _re(r"\b(understand|perspective|solution|resolve)\b"),
        ),
        ScenarioRule(
            SUGGESTION,
            "Avoid accusatory language - use 'I' statements instead",
            _re(r"\b(you always|you never|your fault)\b"),
        ),
    ),
    "customerservice": (
        ScenarioRule(
            STRENGTH,
            "Professional customer service language",
            _re(r"\b(understand|apologize|help|solve|resolution)\b"),
        ),
        ScenarioRule(
            SUGGESTION,
            "Show empathy and willingness to help",
            _re(r"\b(understand|help|apologize)\b"),
            present=False,
        ),
    ),
    "publicspeaking": (
        ScenarioRule(
            STRENGTH,
            "Good use of evidence and data",
            _re(r"\b(research shows|studies indicate|data suggests)\b"),
        ),
        ScenarioRule(
            SUGGESTION,
            "Provide more substantial responses with supporting details",
            shorter_than=30,
        ),
    ),
}


@dataclass
class ScenarioFeedback:
    strengths: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


def scenario_feedback(text: str, scenario: ScenarioLike) -> ScenarioFeedback:
    """Extra strengths/suggestions for the scenario. Unknown scenarios add nothing."""
    out = ScenarioFeedback()
    for rule in SCENARIO_RULES.get(normalize_key(scenario_key(scenario)), ()):
        if not rule.matches(text or ""):
            continue
        if rule.kind == STRENGTH:
            out.strengths.append(rule.message)
        else:
            out.suggestions.append(rule.message)
    return out
