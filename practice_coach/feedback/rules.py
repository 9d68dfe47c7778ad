"""Rule tables driving the live feedback tracker.

Two named instances share one evaluation engine:

- ``PANEL_RULES`` feeds the live panel while the user types (seed 65, cap 5).
- ``ENGINE_RULES`` accumulates across submitted messages (seed 85, cap 6).

Their thresholds differ on purpose and are kept separate.

The generic fallback improvements are added only when the accumulated
improvement set is still empty after merging, so an update that finds no new
improvement keeps earlier ones instead of appending the generic tags.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from .metrics import Metrics

# Seeds for the two tracker instances
PANEL_SEED_CONFIDENCE = 65
ENGINE_SEED_CONFIDENCE = 85

MAX_CONFIDENCE_STEP = 5


def _re(p: str) -> "re.Pattern[str]":
    return re.compile(p, re.IGNORECASE)


PERSONAL_EXPERIENCE_RE = _re(r"\b(when i|i remember|last time|recently|yesterday|during)\b")
ACTION_VERB_RE = _re(r"\b(achieved|implemented|developed|managed|led|improved|increased)\b")
ORGANIZATION_RE = _re(r"\b(first|second|third|finally|in conclusion|to summarize)\b")


@dataclass(frozen=True)
class RuleTable:
    name: str
    seed_confidence: int
    cap: int

    # Length tiers
    detailed_min_words: int
    good_length_min_words: int
    short_below_words: int
    # Fillers
    clear_speech_above_words: int
    heavy_filler_above: int
    light_filler_above: int
    # Confidence markers
    confidence_re: "re.Pattern[str]"
    uncertainty_re: "re.Pattern[str]"
    uncertainty_above: int
    # Examples
    example_phrases: Tuple[str, ...]
    no_example_above_words: int

    # Tags
    detailed_tag: str
    good_length_tag: str
    expand_tag: str
    clear_speech_tag: str
    reduce_fillers_tag: str
    minimize_fillers_tag: str
    structured_tag: str
    long_sentences_tag: str
    questions_tag: str
    confidence_tag: str
    uncertainty_tag: str
    examples_tag: str
    no_examples_tag: str
    personal_tag: str = "Using personal experiences effectively"
    action_words_tag: str = "Using professional action words"
    organization_tag: str = "Well-organized response structure"
    fallback_improvements: Tuple[str, ...] = ("Practice speaking with more variety",)

    # Confidence delta points
    clear_speech_bonus: int = 3
    clear_speech_bonus_above_words: int = 5
    length_bonus: int = 2
    length_bonus_min_words: int = 10
    confidence_bonus: int = 4
    question_bonus: int = 2
    example_bonus: int = 0
    heavy_filler_penalty: int = -5
    light_filler_penalty: int = 0
    short_penalty: int = -3
    uncertainty_penalty: int = -3
    max_step: int = MAX_CONFIDENCE_STEP


PANEL_RULES = RuleTable(
    name="panel",
    seed_confidence=PANEL_SEED_CONFIDENCE,
    cap=5,
    detailed_min_words=15,
    good_length_min_words=8,
    short_below_words=5,
    clear_speech_above_words=5,
    heavy_filler_above=2,
    light_filler_above=0,
    confidence_re=_re(r"\b(confident|sure|certain|believe|strong)\b"),
    uncertainty_re=_re(r"\b(maybe|perhaps|might|not sure|i think)\b"),
    uncertainty_above=1,
    example_phrases=("for example", "such as"),
    no_example_above_words=15,
    detailed_tag="Providing detailed responses",
    good_length_tag="Good response length",
    expand_tag="Expand answers with more detail",
    clear_speech_tag="Clear speech without filler words",
    reduce_fillers_tag="Reduce filler words (um, uh, like)",
    minimize_fillers_tag="Try to minimize filler words",
    structured_tag="Well-structured sentences",
    long_sentences_tag="Break down complex sentences",
    questions_tag="Asking engaging questions",
    confidence_tag="Expressing confidence",
    uncertainty_tag="Show more confidence in responses",
    examples_tag="Supporting points with examples",
    no_examples_tag="Include specific examples",
    fallback_improvements=("Practice speaking with more variety", "Consider adding personal anecdotes"),
)

ENGINE_RULES = RuleTable(
    name="engine",
    seed_confidence=ENGINE_SEED_CONFIDENCE,
    cap=6,
    detailed_min_words=20,
    good_length_min_words=10,
    short_below_words=5,
    clear_speech_above_words=10,
    heavy_filler_above=3,
    light_filler_above=1,
    confidence_re=_re(r"\b(confident|sure|certain|believe|strong|definitely|absolutely|clearly)\b"),
    uncertainty_re=_re(r"\b(maybe|perhaps|might|not sure|i think|i guess|probably)\b"),
    uncertainty_above=2,
    example_phrases=("for example", "such as", "for instance"),
    no_example_above_words=25,
    detailed_tag="Providing comprehensive responses",
    good_length_tag="Good response length",
    expand_tag="Expand on your answers with more detail",
    clear_speech_tag="Clear speech without filler words",
    reduce_fillers_tag="Reduce filler words (um, uh, like, you know)",
    minimize_fillers_tag="Try to minimize filler words",
    structured_tag="Well-structured sentence length",
    long_sentences_tag="Break down complex sentences for clarity",
    questions_tag="Asking engaging questions",
    confidence_tag="Expressing confidence in responses",
    uncertainty_tag="Show more confidence in your responses",
    examples_tag="Supporting points with examples",
    no_examples_tag="Include specific examples to support your points",
    length_bonus_min_words=15,
    example_bonus=3,
    heavy_filler_penalty=-8,
    light_filler_penalty=-3,
    short_penalty=-5,
    uncertainty_penalty=-4,
)


@dataclass(frozen=True)
class RuleOutcome:
    strengths: Tuple[str, ...]
    improvements: Tuple[str, ...]
    # Unbounded; the tracker clamps it to +/- max_step
    delta: int


def evaluate(rules: RuleTable, text: str, m: Metrics) -> RuleOutcome:
    lowered = (text or "").lower()
    strengths: List[str] = []
    improvements: List[str] = []

    if m.word_count >= rules.detailed_min_words:
        strengths.append(rules.detailed_tag)
    elif m.word_count >= rules.good_length_min_words:
        strengths.append(rules.good_length_tag)
    elif 0 < m.word_count < rules.short_below_words:
        improvements.append(rules.expand_tag)

    if m.filler_count == 0 and m.word_count > rules.clear_speech_above_words:
        strengths.append(rules.clear_speech_tag)
    elif m.filler_count > rules.heavy_filler_above:
        improvements.append(rules.reduce_fillers_tag)
    elif m.filler_count > rules.light_filler_above:
        improvements.append(rules.minimize_fillers_tag)

    if 8 < m.avg_words_per_sentence < 20:
        strengths.append(rules.structured_tag)
    elif m.avg_words_per_sentence > 25:
        improvements.append(rules.long_sentences_tag)

    if m.question_count > 0:
        strengths.append(rules.questions_tag)

    confident = bool(rules.confidence_re.search(lowered))
    if confident:
        strengths.append(rules.confidence_tag)

    uncertain = len(rules.uncertainty_re.findall(lowered)) > rules.uncertainty_above
    if uncertain:
        improvements.append(rules.uncertainty_tag)

    if any(p in lowered for p in rules.example_phrases):
        strengths.append(rules.examples_tag)
    elif m.word_count > rules.no_example_above_words:
        improvements.append(rules.no_examples_tag)

    if PERSONAL_EXPERIENCE_RE.search(lowered):
        strengths.append(rules.personal_tag)
    if ACTION_VERB_RE.search(lowered):
        strengths.append(rules.action_words_tag)
    if ORGANIZATION_RE.search(lowered):
        strengths.append(rules.organization_tag)

    delta = 0
    if m.filler_count == 0 and m.word_count > rules.clear_speech_bonus_above_words:
        delta += rules.clear_speech_bonus
    if m.word_count >= rules.length_bonus_min_words:
        delta += rules.length_bonus
    if confident:
        delta += rules.confidence_bonus
    if m.question_count > 0:
        delta += rules.question_bonus
    if "for example" in lowered:
        delta += rules.example_bonus

    if m.filler_count > rules.heavy_filler_above:
        delta += rules.heavy_filler_penalty
    elif m.filler_count > rules.light_filler_above:
        delta += rules.light_filler_penalty
    if m.word_count < rules.short_below_words:
        delta += rules.short_penalty
    if uncertain:
        delta += rules.uncertainty_penalty

    return RuleOutcome(tuple(strengths), tuple(improvements), delta)


def bounded(delta: int, max_step: int = MAX_CONFIDENCE_STEP) -> int:
    return max(-max_step, min(max_step, delta))


def merge_tags(existing: Tuple[str, ...], new: Tuple[str, ...], cap: int) -> Tuple[str, ...]:
    """Dedupe keeping first occurrence, then keep the oldest ``cap`` entries."""
    merged = list(dict.fromkeys(existing + new))
    return tuple(merged[:cap])


def with_fallback(rules: RuleTable, merged: Tuple[str, ...]) -> Tuple[str, ...]:
    if merged:
        return merged
    return merge_tags(merged, rules.fallback_improvements, rules.cap)
