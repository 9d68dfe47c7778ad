"""Stateless regular-expression heuristics over a finalized utterance."""

from __future__ import annotations

import re

from .metrics import STRICT_FILLER_RE, count_matches, sentences, words

# calculate_confidence markers
CERTAINTY_RE = re.compile(r"\b(definitely|certainly|confident|sure|absolutely|clearly)\b", re.IGNORECASE)
HEDGING_RE = re.compile(r"\b(maybe|perhaps|might|possibly|I think|I guess)\b", re.IGNORECASE)
CONFIDENCE_FILLER_RE = re.compile(r"\b(um|uh|like|you know|sort of|kind of)\b", re.IGNORECASE)
FIRST_PERSON_ASSERTIVE_RE = re.compile(r"\b(I will|I can|I have|I am|I know)\b", re.IGNORECASE)
APOLOGY_RE = re.compile(r"\b(sorry|apologize)\b", re.IGNORECASE)
UNCERTAINTY_RE = re.compile(r"\b(I don't know|not sure|uncertain|no idea)\b", re.IGNORECASE)

# Tone and content markers
ASSERTIVE_RE = re.compile(
    r"\b(I will|I can|I have|I am|definitely|certainly|I believe|I know)\b", re.IGNORECASE
)
TENTATIVE_RE = re.compile(r"\b(maybe|perhaps|I think|possibly|might|I guess|probably)\b", re.IGNORECASE)
SPECIFIC_RE = re.compile(
    r"\b(\d+|when I|for example|specifically|in particular|at \w+|during|last \w+)\b", re.IGNORECASE
)
EXAMPLE_RE = re.compile(r"\b(for instance|such as|like when|one time)\b", re.IGNORECASE)
POSITIVE_RE = re.compile(
    r"\b(great|excellent|wonderful|love|enjoy|excited|passionate|amazing|fantastic|good|happy)\b",
    re.IGNORECASE,
)
NEGATIVE_RE = re.compile(
    r"\b(hate|terrible|awful|boring|difficult|problem|issue|struggle|hard|bad)\b", re.IGNORECASE
)
TRANSITION_RE = re.compile(
    r"\b(first|second|also|however|therefore|because|since|although)\b", re.IGNORECASE
)

BASE_CONFIDENCE = 50
FILLER_RATIO_LIMIT = 0.05


def calculate_confidence(text: str) -> int:
    """Point-based confidence estimate, clamped to [0, 100]."""
    text = text or ""
    score = BASE_CONFIDENCE

    if CERTAINTY_RE.search(text):
        score += 20
    if not HEDGING_RE.search(text):
        score += 15
    if not CONFIDENCE_FILLER_RE.search(text):
        score += 10
    if FIRST_PERSON_ASSERTIVE_RE.search(text):
        score += 10

    if APOLOGY_RE.search(text):
        score -= 10
    if UNCERTAINTY_RE.search(text):
        score -= 15
    if text.count("?") > 2:
        score -= 10
    if len(words(text)) < 5:
        score -= 10

    return max(0, min(100, score))


def has_filler_problem(text: str) -> bool:
    """More than 5% of the words are fillers."""
    n = len(words(text))
    if n == 0:
        return False
    return count_matches(STRICT_FILLER_RE, text) / n > FILLER_RATIO_LIMIT


def is_assertive(text: str) -> bool:
    text = text or ""
    return bool(ASSERTIVE_RE.search(text)) and not TENTATIVE_RE.search(text)


def is_specific(text: str) -> bool:
    text = text or ""
    return bool(SPECIFIC_RE.search(text) or EXAMPLE_RE.search(text))


def sentiment_balance(text: str) -> int:
    """Positive minus negative sentiment word occurrences."""
    return count_matches(POSITIVE_RE, text) - count_matches(NEGATIVE_RE, text)


def is_positive(text: str) -> bool:
    return sentiment_balance(text) > 0


def is_clear(text: str) -> bool:
    s = sentences(text)
    if not s:
        return False
    avg = len(words(text)) / len(s)
    return 5 <= avg <= 25 and bool(TRANSITION_RE.search(text or ""))
