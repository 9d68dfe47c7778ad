from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .feedback.analyzer import analyze
from .feedback.blend import turn_summary
from .feedback.rules import ENGINE_RULES, PANEL_RULES
from .feedback.scenarios import ScenarioLike, resolve_scenario
from .feedback.tracker import LiveFeedbackState, LiveFeedbackTracker, Scheduler
from .providers.base import ChatClient, History, history_text, user_turns, with_user_turn
from .providers.factory import get_chat_client
from .providers.fallback import FallbackResponder
from .telemetry import CHAT_REPLIES_TOTAL, CHAT_REPLY_SECONDS, TURN_ANALYSES_TOTAL, TURN_OVERALL_SCORE

logger = logging.getLogger("practice_coach.session")


def _now_ms() -> int:
    return int(time.time() * 1000)


class ConversationSession:
    """One practice conversation and the feedback state that belongs to it.

    Owns two trackers: ``panel`` is fed on every input change and drives the
    live panel; ``engine`` is fed once per submitted message and backs the
    conversation summary. State only resets through ``reset()``.
    """

    def __init__(
        self,
        scenario: ScenarioLike = None,
        personality: Optional[str] = None,
        *,
        chat_client: Optional[ChatClient] = None,
        responder: Optional[FallbackResponder] = None,
        scheduler: Optional[Scheduler] = None,
        session_id: Optional[str] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.id = session_id or str(uuid.uuid4())
        self.scenario = resolve_scenario(scenario)
        self.personality = (personality or "neutral").strip() or "neutral"
        self.panel = LiveFeedbackTracker(PANEL_RULES, scheduler=scheduler)
        self.engine = LiveFeedbackTracker(ENGINE_RULES, scheduler=scheduler)
        self.chat_client = chat_client or get_chat_client()
        self.responder = responder or FallbackResponder.from_file()
        self._clock = clock or _now_ms
        self.history: List[Dict[str, Any]] = []
        self.messages_count = 0
        self.average_confidence = 0.0
        self.last_summary: Optional[Dict[str, Any]] = None

    @property
    def scenario_key(self) -> str:
        return self.scenario.key if self.scenario is not None else ""

    def greet(self) -> str:
        """Opening line of the counterpart, recorded as the first history entry."""
        opening = self.responder.respond("", self.personality, self.scenario, [])
        self.history.append({"sender": "ai", "text": opening, "timestamp": self._clock()})
        return opening

    def on_input_change(self, text: str) -> LiveFeedbackState:
        self.panel.update(text)
        return self.panel.snapshot()

    def submit(self, text: str) -> Optional[Dict[str, Any]]:
        """Analyze a sent message and build the post-turn summary.

        Blank messages are ignored and return None.
        """
        if not text or not text.strip():
            return None
        analysis = analyze(text, self.scenario)
        self.engine.update(text)
        live = self.panel.confidence

        self.average_confidence = (
            (self.average_confidence * self.messages_count) + live
        ) / (self.messages_count + 1)
        self.messages_count += 1
        self.history.append({"sender": "user", "text": text.strip(), "timestamp": self._clock()})

        summary = turn_summary(analysis, live, text, self.scenario)
        self.last_summary = summary

        TURN_ANALYSES_TOTAL.labels(scenario=self.scenario_key or "none").inc()
        TURN_OVERALL_SCORE.observe(analysis.overall_score)
        logger.info(json.dumps({
            "event": "turn_analyzed",
            "sessionId": self.id,
            "scenario": self.scenario_key or None,
            "wordCount": analysis.word_count,
            "overallScore": analysis.overall_score,
            "blendedScore": summary["blendedScore"],
        }))
        return summary

    async def reply(
        self,
        text: str,
        history: Optional[History] = None,
        request_id: Optional[str] = None,
    ) -> Dict[str, str]:
        """Counterpart reply from the chat client, or the fallback responder on any failure."""
        prior = list(self.history if history is None else history)
        provider = getattr(self.chat_client, "provider_name", "unknown")
        t0 = time.perf_counter()
        try:
            out = await self.chat_client.generate(text, self.personality, self.scenario, prior, request_id=request_id)
            if not out or not out.strip():
                raise RuntimeError("empty reply from chat provider")
            source = "model"
        except Exception as e:
            logger.warning(json.dumps({
                "event": "chat_provider_error",
                "requestId": request_id,
                "sessionId": self.id,
                "provider": provider,
                "error": str(e),
            }))
            out = self.responder.respond(text, self.personality, self.scenario, with_user_turn(prior, text))
            source = "fallback"
            provider = "fallback"
        finally:
            CHAT_REPLY_SECONDS.labels(provider=provider).observe(time.perf_counter() - t0)
        CHAT_REPLIES_TOTAL.labels(source=source).inc()
        self.history.append({"sender": "ai", "text": out, "timestamp": self._clock()})
        return {"text": out, "source": source}

    async def send(self, text: str, request_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Submit a message and fetch the reply; the reply sees history up to the previous turn."""
        prior = list(self.history)
        summary = self.submit(text)
        if summary is None:
            return None
        reply = await self.reply(text.strip(), history=prior, request_id=request_id)
        return {"summary": summary, "reply": reply}

    def reset(self) -> None:
        self.panel.reset()
        self.engine.reset()
        self.history = []
        self.messages_count = 0
        self.average_confidence = 0.0
        self.last_summary = None
        logger.info(json.dumps({"event": "session_reset", "sessionId": self.id}))

    def conversation_stats(self) -> Dict[str, Any]:
        users = user_turns(self.history)
        total_words = sum(len(history_text(m).split()) for m in users)
        avg = total_words / len(users) if users else 0
        duration = self._clock() - int(self.history[0].get("timestamp") or 0) if self.history else 0
        return {
            "totalMessages": len(users),
            "totalWords": total_words,
            "averageWordsPerMessage": int(avg + 0.5),
            "conversationDuration": duration,
        }

    def recommendations(self, feedback: LiveFeedbackState, stats: Dict[str, Any]) -> List[str]:
        recs: List[str] = []
        if feedback.confidence < 70:
            recs.append("Practice expressing your ideas with more confidence and conviction.")
        if stats["averageWordsPerMessage"] < 10:
            recs.append("Provide more detailed responses with specific examples.")
        if feedback.metrics.filler_count > 0:
            recs.append("Reduce filler words by pausing instead of saying 'um' or 'uh'.")
        if len(feedback.areas_to_improve) > len(feedback.strengths):
            recs.append("Balance growth: build your strengths while addressing key gaps.")
        if stats["totalMessages"] < 5:
            recs.append("Aim for longer practice sessions to build flow and comfort.")
        return recs

    def conversation_summary(self) -> Dict[str, Any]:
        stats = self.conversation_stats()
        feedback = self.engine.snapshot()
        return {
            "sessionId": self.id,
            "scenario": self.scenario_key or None,
            "personality": self.personality,
            "stats": stats,
            "feedback": feedback.to_dict(),
            "strengths": list(feedback.strengths),
            "areasToImprove": list(feedback.areas_to_improve),
            "overallScore": feedback.confidence,
            "averageConfidence": round(self.average_confidence, 1),
            "recommendations": self.recommendations(feedback, stats),
        }

    def export(self) -> str:
        data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "conversationHistory": self.history,
            "summary": self.conversation_summary(),
            "finalFeedback": self.engine.snapshot().to_dict(),
        }
        return json.dumps(data, indent=2)
