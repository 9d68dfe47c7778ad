"""Blended user-facing score and the post-turn summary built around it."""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Optional

from .analyzer import TurnAnalysis
from .metrics import round_half_up
from .scenarios import ScenarioLike, normalize_key, scenario_key

LIVE_WEIGHT = 0.6
TURN_WEIGHT = 0.4


def _clamp_score(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        x = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(x):
        return default
    return max(0.0, min(100.0, x))


def blend(live_confidence: Any, turn_overall_score: Any = None) -> int:
    """round(0.6 * live confidence + 0.4 * turn overall score), clamped to [0, 100].

    A missing or malformed overall score is replaced by the live confidence;
    a missing live confidence counts as 0.
    """
    conf = _clamp_score(live_confidence, 0.0)
    overall = _clamp_score(turn_overall_score, conf)
    return max(0, min(100, round_half_up(LIVE_WEIGHT * conf + TURN_WEIGHT * overall)))


def score_band(score: int) -> str:
    if score >= 90:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 50:
        return "fair"
    return "needs-improvement"


def encouragement(score: int) -> str:
    if score >= 80:
        return "Excellent! You're communicating with confidence and clarity."
    if score >= 60:
        return "Good job! You're on the right track with some room for improvement."
    if score >= 40:
        return "You're making progress! Focus on the suggestions to improve further."
    return "Keep practicing! Every conversation is a chance to improve."


_SIGNPOST_RE = re.compile(
    r"\b(first|second|also|because|therefore|however|finally|in conclusion|to summarize)\b", re.IGNORECASE
)
_EXAMPLE_RE = re.compile(
    r"\b(for example|for instance|such as|when i|i once|one time|specifically)\b", re.IGNORECASE
)
_CONFIDENT_PHRASING_RE = re.compile(
    r"\b(i will|i can|i have|i am|definitely|certainly|confident|sure)\b", re.IGNORECASE
)

SCENARIO_TIPS: Dict[str, str] = {
    "jobinterview": "Use the STAR format (Situation, Task, Action, Result) for interview answers.",
    "networking": "Mirror & volley: share a point, then ask a related question back.",
    "conflict": "Use 'I' statements and propose one clear next step to resolve.",
    "publicspeaking": "Lead with a headline sentence, then give one supporting fact.",
}


def enrich_suggestions(analysis: TurnAnalysis, text: str, scenario: ScenarioLike = None) -> List[str]:
    """Analysis suggestions followed by concrete tips, deduplicated in order."""
    raw = text or ""
    m = analysis.metrics
    tips = list(analysis.suggestions)

    if m.word_count < 20:
        tips.append("Add more detail - aim for 3-5 sentences with one concrete example.")
    if m.word_count > 120:
        tips.append("Be more concise - summarize your main point in 1-2 sentences.")
    if not _SIGNPOST_RE.search(raw):
        tips.append("Use signposts (e.g., 'first...', 'because...', 'for example...') to improve structure.")
    if not _EXAMPLE_RE.search(raw):
        tips.append("Support a claim with a quick example or number (impact, timeline, metric).")
    if m.questions_asked == 0:
        tips.append("Ask at least one question to keep the conversation two-way.")
    if m.filler_word_count > 1:
        tips.append("Pause briefly instead of saying fillers like 'um/uh/like'.")
    if m.average_words_per_sentence > 24:
        tips.append("Split long sentences - one idea per sentence improves clarity.")
    if not _CONFIDENT_PHRASING_RE.search(raw):
        tips.append("Use confident phrasing (e.g., 'I can...', 'I'm confident that...').")

    tip = SCENARIO_TIPS.get(normalize_key(scenario_key(scenario)))
    if tip:
        tips.append(tip)

    return list(dict.fromkeys(tips))


def turn_summary(
    analysis: TurnAnalysis,
    live_confidence: Optional[int],
    text: str,
    scenario: ScenarioLike = None,
) -> Dict[str, Any]:
    score = blend(live_confidence, analysis.overall_score)
    return {
        "analysis": analysis.to_dict(),
        "liveConfidence": live_confidence,
        "blendedScore": score,
        "scoreBand": score_band(score),
        "encouragement": encouragement(score),
        "tips": enrich_suggestions(analysis, text, scenario),
    }
