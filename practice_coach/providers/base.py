from __future__ import annotations

import abc
from typing import Any, Dict, List, Optional, Sequence

from ..feedback.scenarios import Scenario

History = Sequence[Dict[str, Any]]


class ChatClient(abc.ABC):
    """Produces the practice counterpart's next line.

    Implementations raise on any failure; callers substitute the
    deterministic fallback responder.
    """

    provider_name: str = "unknown"

    def __init__(self, model: Optional[str] = None):
        self.model = model

    @abc.abstractmethod
    async def generate(
        self,
        utterance: str,
        personality: str,
        scenario: Optional[Scenario],
        history: History,
        request_id: Optional[str] = None,
    ) -> str:
        ...


def extract_completion_text(obj: Any) -> str:
    """Pull the assistant text out of an OpenAI-compatible completion body."""
    try:
        choices = obj.get("choices") or []
        content = (choices[0].get("message") or {}).get("content")
    except Exception:
        content = None
    if not isinstance(content, str) or not content.strip():
        raise RuntimeError("Invalid response format from chat provider")
    return content.strip()


def history_sender(msg: Dict[str, Any]) -> str:
    return str(msg.get("sender") or msg.get("role") or "")


def history_text(msg: Dict[str, Any]) -> str:
    return str(msg.get("text") or msg.get("content") or "")


def user_turns(history: History) -> List[Dict[str, Any]]:
    return [m for m in (history or []) if history_sender(m) == "user"]


def with_user_turn(history: History, utterance: str) -> List[Dict[str, Any]]:
    """History as the counterpart sees it once ``utterance`` has been said."""
    turns = list(history or [])
    if utterance and utterance.strip():
        turns.append({"sender": "user", "text": utterance})
    return turns
