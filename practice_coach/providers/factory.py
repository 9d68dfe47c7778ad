from typing import Optional

from ..config import env_str
from .base import ChatClient
from .mock import MockChatClient


def get_chat_client(provider: Optional[str] = None, model: Optional[str] = None) -> ChatClient:
    """Return a chat client based on env or explicit overrides.

    Env precedence:
      - AI_PROVIDER_CHAT
      - AI_PROVIDER
      - defaults to 'mock'
    Model from AI_CHAT_MODEL if not given.
    """
    prov = (provider or env_str("AI_PROVIDER_CHAT") or env_str("AI_PROVIDER") or "mock").lower()
    mdl = model or env_str("AI_CHAT_MODEL") or None

    if prov in ("mock", "test"):
        return MockChatClient(model=mdl)

    if prov in ("openrouter", "router"):
        try:
            from .openrouter import OpenRouterChatClient  # type: ignore
            return OpenRouterChatClient(model=mdl)
        except Exception:
            # Fallback to mock if provider keys not available
            return MockChatClient(model=mdl)

    if prov in ("groq",):
        try:
            from .groq import GroqChatClient  # type: ignore
            return GroqChatClient(model=mdl)
        except Exception:
            return MockChatClient(model=mdl)

    # Unknown -> mock
    return MockChatClient(model=mdl)
