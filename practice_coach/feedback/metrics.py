from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List

# Live-typing filler vocabulary
FILLER_RE = re.compile(r"\b(um|uh|like|you know|basically|actually|well|so|right)\b", re.IGNORECASE)
# Submit-time filler vocabulary (adds hedges such as "sort of", drops discourse markers)
STRICT_FILLER_RE = re.compile(
    r"\b(um|uh|like|you know|sort of|kind of|actually|basically|literally)\b", re.IGNORECASE
)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


@dataclass(frozen=True)
class Metrics:
    word_count: int = 0
    sentence_count: int = 0
    filler_count: int = 0
    question_count: int = 0
    avg_words_per_sentence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wordCount": self.word_count,
            "sentenceCount": self.sentence_count,
            "fillerCount": self.filler_count,
            "questionCount": self.question_count,
            "avgWordsPerSentence": self.avg_words_per_sentence,
        }


@dataclass(frozen=True)
class ExtendedMetrics:
    """Submit-time metrics, counted with the stricter filler vocabulary."""

    word_count: int = 0
    sentence_count: int = 0
    average_words_per_sentence: int = 0
    filler_word_count: int = 0
    questions_asked: int = 0
    exclamation_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wordCount": self.word_count,
            "sentenceCount": self.sentence_count,
            "averageWordsPerSentence": self.average_words_per_sentence,
            "fillerWordCount": self.filler_word_count,
            "questionsAsked": self.questions_asked,
            "exclamationCount": self.exclamation_count,
        }


def words(text: str) -> List[str]:
    return (text or "").split()


def sentences(text: str) -> List[str]:
    return [s for s in _SENTENCE_SPLIT_RE.split(text or "") if s.strip()]


def count_matches(pattern: "re.Pattern[str]", text: str) -> int:
    return len(pattern.findall(text or ""))


def round_half_up(x: float) -> int:
    # int(round()) would round 2.5 to 2
    return int(x + 0.5) if x >= 0 else -int(-x + 0.5)


def extract(text: str) -> Metrics:
    """Structural metrics of a live utterance. Empty input yields all zeros."""
    w = words(text)
    s = sentences(text)
    return Metrics(
        word_count=len(w),
        sentence_count=len(s),
        filler_count=count_matches(FILLER_RE, text),
        question_count=(text or "").count("?"),
        avg_words_per_sentence=(len(w) / len(s)) if s else 0.0,
    )


def extract_extended(text: str) -> ExtendedMetrics:
    w = words(text)
    s = sentences(text)
    return ExtendedMetrics(
        word_count=len(w),
        sentence_count=len(s),
        average_words_per_sentence=round_half_up(len(w) / len(s)) if s else 0,
        filler_word_count=count_matches(STRICT_FILLER_RE, text),
        questions_asked=(text or "").count("?"),
        exclamation_count=(text or "").count("!"),
    )
