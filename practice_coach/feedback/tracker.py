from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..telemetry import FEEDBACK_SUBSCRIBER_ERRORS_TOTAL, FEEDBACK_UPDATES_TOTAL
from .metrics import Metrics, extract
from .rules import PANEL_RULES, RuleTable, bounded, evaluate, merge_tags, with_fallback

logger = logging.getLogger("practice_coach.feedback")


@dataclass(frozen=True)
class LiveFeedbackState:
    confidence: int
    strengths: Tuple[str, ...] = ()
    areas_to_improve: Tuple[str, ...] = ()
    metrics: Metrics = field(default_factory=Metrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confidence": self.confidence,
            "strengths": list(self.strengths),
            "areasToImprove": list(self.areas_to_improve),
            "metrics": self.metrics.to_dict(),
        }


Subscriber = Callable[[LiveFeedbackState], None]
Scheduler = Callable[[Callable[[], None]], None]


def call_soon_or_now(fn: Callable[[], None]) -> None:
    """Defer ``fn`` to the running event loop, or run it inline when there is none."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        fn()
        return
    loop.call_soon(fn)


class LiveFeedbackTracker:
    """Running impression of the speaker, nudged on every input change.

    Confidence moves by at most ``rules.max_step`` per update and always stays
    in [0, 100]. Tags accumulate in insertion order, deduplicated and capped at
    ``rules.cap``; once a list is full, new tags are dropped.

    Subscribers receive an immutable ``LiveFeedbackState`` after every update
    and reset. Delivery goes through ``scheduler`` (deferred to the running
    event loop by default) so callers are never blocked by subscribers. A
    subscriber that raises is logged and skipped.
    """

    def __init__(
        self,
        rules: RuleTable = PANEL_RULES,
        *,
        scheduler: Optional[Scheduler] = None,
        name: Optional[str] = None,
    ):
        self.rules = rules
        self.name = name or rules.name
        self._scheduler: Scheduler = scheduler or call_soon_or_now
        self._subscribers: List[Subscriber] = []
        self._state = self._seed_state()

    @property
    def seed_confidence(self) -> int:
        return self.rules.seed_confidence

    @property
    def confidence(self) -> int:
        return self._state.confidence

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _seed_state(self) -> LiveFeedbackState:
        return LiveFeedbackState(confidence=self.rules.seed_confidence)

    def snapshot(self) -> LiveFeedbackState:
        return self._state

    def update(self, text: str) -> None:
        if not text or not text.strip():
            return
        m = extract(text)
        outcome = evaluate(self.rules, text, m)
        prev = self._state
        strengths = merge_tags(prev.strengths, outcome.strengths, self.rules.cap)
        areas = with_fallback(
            self.rules, merge_tags(prev.areas_to_improve, outcome.improvements, self.rules.cap)
        )
        step = bounded(outcome.delta, self.rules.max_step)
        self._state = LiveFeedbackState(
            confidence=max(0, min(100, prev.confidence + step)),
            strengths=strengths,
            areas_to_improve=areas,
            metrics=m,
        )
        FEEDBACK_UPDATES_TOTAL.labels(tracker=self.name).inc()
        self._notify()

    def reset(self) -> None:
        self._state = self._seed_state()
        self._notify()

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def _notify(self) -> None:
        state = self._state
        self._scheduler(lambda: self._deliver(state))

    def _deliver(self, state: LiveFeedbackState) -> None:
        # Copy so callbacks may subscribe/unsubscribe while we iterate
        for callback in tuple(self._subscribers):
            try:
                callback(state)
            except Exception as e:
                FEEDBACK_SUBSCRIBER_ERRORS_TOTAL.labels(tracker=self.name).inc()
                logger.exception(json.dumps({
                    "event": "feedback_subscriber_error",
                    "tracker": self.name,
                    "callback": getattr(callback, "__qualname__", repr(callback)),
                    "error": str(e),
                }))
