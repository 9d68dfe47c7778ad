import random
from typing import Optional

from ..feedback.scenarios import Scenario
from .base import ChatClient, History, with_user_turn
from .fallback import FallbackResponder


class MockChatClient(ChatClient):
    provider_name: str = "mock"

    def __init__(self, model: Optional[str] = None, responder: Optional[FallbackResponder] = None):
        super().__init__(model=model or "mock-chat-1")
        # Fixed seed keeps replies reproducible across runs
        self._responder = responder or FallbackResponder.from_file(rng=random.Random(0))

    async def generate(
        self,
        utterance: str,
        personality: str,
        scenario: Optional[Scenario],
        history: History,
        request_id: Optional[str] = None,
    ) -> str:
        return self._responder.respond(utterance, personality, scenario, with_user_turn(history, utterance))
