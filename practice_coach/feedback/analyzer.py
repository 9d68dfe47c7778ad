from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from . import heuristics
from .metrics import ExtendedMetrics, extract_extended, round_half_up
from .scenarios import ScenarioLike, scenario_feedback, scenario_key

CONCISE_MAX_WORDS = 100
ELABORATE_MIN_WORDS = 10
# Word-count window that earns the length bonus
BONUS_MIN_WORDS = 20
BONUS_MAX_WORDS = 80


@dataclass
class TurnAnalysis:
    confidence: int
    word_count: int
    metrics: ExtendedMetrics
    suggestions: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    overall_score: int = 0
    scenario: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confidence": self.confidence,
            "wordCount": self.word_count,
            "metrics": self.metrics.to_dict(),
            "suggestions": list(self.suggestions),
            "strengths": list(self.strengths),
            "overallScore": self.overall_score,
            "scenario": self.scenario or None,
        }


def analyze(text: str, scenario: ScenarioLike = None) -> TurnAnalysis:
    """Score one submitted utterance.

    Generic strengths/suggestions come first; scenario-specific ones are
    appended after them. Shares no state with the live tracker.
    """
    text = text or ""
    metrics = extract_extended(text)
    result = TurnAnalysis(
        confidence=heuristics.calculate_confidence(text),
        word_count=metrics.word_count,
        metrics=metrics,
        scenario=scenario_key(scenario),
    )

    if heuristics.has_filler_problem(text):
        result.suggestions.append("Try to reduce filler words like 'um', 'uh', 'like'")
    else:
        result.strengths.append("Clear speech with minimal filler words")

    if heuristics.is_assertive(text):
        result.strengths.append("Confident and assertive tone")
    else:
        result.suggestions.append("Try to sound more confident - avoid phrases like 'I think maybe'")

    if metrics.word_count < ELABORATE_MIN_WORDS:
        result.suggestions.append("Try to elaborate more on your answers")
    elif metrics.word_count > CONCISE_MAX_WORDS:
        result.suggestions.append("Try to be more concise in your responses")
    else:
        result.strengths.append("Good response length")

    if heuristics.is_specific(text):
        result.strengths.append("Good use of specific examples and details")
    else:
        result.suggestions.append("Try to include specific examples or details")

    if heuristics.is_positive(text):
        result.strengths.append("Positive and enthusiastic tone")

    if heuristics.is_clear(text):
        result.strengths.append("Clear and well-structured response")
    else:
        result.suggestions.append("Try to organize your thoughts more clearly")

    overlay = scenario_feedback(text, scenario)
    result.suggestions.extend(overlay.suggestions)
    result.strengths.extend(overlay.strengths)

    result.overall_score = overall_score(result)
    return result


def overall_score(analysis: TurnAnalysis) -> int:
    score = analysis.confidence * 0.4
    score += len(analysis.strengths) * 10
    score -= len(analysis.suggestions) * 5
    if BONUS_MIN_WORDS <= analysis.metrics.word_count <= BONUS_MAX_WORDS:
        score += 10
    if analysis.metrics.filler_word_count == 0:
        score += 10
    return max(0, min(100, round_half_up(score)))
