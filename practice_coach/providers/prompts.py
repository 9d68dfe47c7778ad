from __future__ import annotations

from typing import Dict, List, Optional

from ..feedback.scenarios import Scenario
from .base import History, history_sender, history_text

PERSONALITY_PROMPTS: Dict[str, str] = {
    "tough": (
        "You are a tough, demanding interviewer. Be critical, skeptical, and hard to impress. "
        "Ask challenging follow-up questions. Keep responses under 60 words."
    ),
    "friendly": (
        "You are warm, friendly, and encouraging. Show genuine interest and be supportive. "
        "Ask engaging questions. Keep responses under 60 words."
    ),
    "neutral": (
        "You are professional and business-focused. Be direct, formal, and stick to relevant topics. "
        "Keep responses under 60 words."
    ),
    "skeptical": (
        "You are skeptical and questioning. Challenge what people say and ask for evidence. "
        "Be doubtful but not rude. Keep responses under 60 words."
    ),
    "supportive": (
        "You are a supportive mentor. Provide encouragement and helpful suggestions. "
        "Be understanding and positive. Keep responses under 60 words."
    ),
    "intimidating": (
        "You are stern and authoritative. Expect high standards and don't accept mediocrity. "
        "Be formal and demanding. Keep responses under 60 words."
    ),
    "chatty": (
        "You are talkative and enthusiastic. Ask lots of questions and show great interest. "
        "Be energetic and social. Keep responses under 60 words."
    ),
    "empathetic": (
        "You are understanding and emotionally aware. Show empathy and validate feelings. "
        "Be compassionate and caring. Keep responses under 60 words."
    ),
}

_CLOSING = (
    "Respond naturally and conversationally. "
    "Focus on helping the person practice their communication skills."
)


def build_system_prompt(personality: Optional[str], scenario: Optional[Scenario]) -> str:
    persona = PERSONALITY_PROMPTS.get(personality or "", PERSONALITY_PROMPTS["neutral"])
    parts = [persona]
    if scenario is not None:
        parts.append(f"You are in a {scenario.title} scenario. {scenario.description}")
    parts.append(_CLOSING)
    return " ".join(parts)


def build_messages(
    system_prompt: str,
    utterance: str,
    history: History,
    max_turns: int = 12,
) -> List[Dict[str, str]]:
    """System prompt, the most recent history turns, then the new utterance."""
    messages = [{"role": "system", "content": system_prompt}]
    recent = list(history or [])[-max_turns:] if max_turns > 0 else []
    for msg in recent:
        sender = history_sender(msg)
        if sender == "user":
            messages.append({"role": "user", "content": history_text(msg)})
        elif sender in ("ai", "assistant"):
            messages.append({"role": "assistant", "content": history_text(msg)})
    if utterance and utterance.strip():
        messages.append({"role": "user", "content": utterance})
    return messages
