import os
from typing import Any, Dict, Optional

import httpx

from .. import config
from ..feedback.scenarios import Scenario
from .base import ChatClient, History, extract_completion_text
from .prompts import build_messages, build_system_prompt


class OpenRouterChatClient(ChatClient):
    provider_name: str = "openrouter"
    url: str = "https://openrouter.ai/api/v1/chat/completions"
    api_key_env: str = "OPENROUTER_API_KEY"
    default_model: str = "openai/gpt-4o-mini"

    def __init__(self, model: Optional[str] = None):
        super().__init__(model=model or os.getenv("AI_CHAT_MODEL") or self.default_model)
        api_key = os.getenv(self.api_key_env, "").strip()
        if not api_key:
            raise RuntimeError(f"{self.api_key_env} is required for {self.provider_name} provider")
        self._api_key = api_key
        try:
            self._timeout = float(os.getenv("AI_HTTP_TIMEOUT_SECONDS") or config.AI_HTTP_TIMEOUT_SECONDS)
        except Exception:
            self._timeout = 30.0
        self._referer = os.getenv("PUBLIC_APP_ORIGIN", "http://localhost:3000").strip() or "http://localhost:3000"
        self._title = os.getenv("OPENROUTER_APP_TITLE", "Practice Coach API").strip() or "Practice Coach API"

    def _headers(self, request_id: Optional[str]) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "User-Agent": "practice-coach-api/0.1.0",
            # Optional metadata for OpenRouter analytics
            "HTTP-Referer": self._referer,
            "X-Title": self._title,
        }
        if request_id:
            headers["X-Request-Id"] = request_id
        return headers

    def _payload(self, utterance: str, personality: str, scenario: Optional[Scenario], history: History) -> Dict[str, Any]:
        system = build_system_prompt(personality, scenario)
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": build_messages(system, utterance, history, max_turns=config.CHAT_HISTORY_TURNS),
            "temperature": config.AI_CHAT_TEMPERATURE,
            "top_p": config.AI_CHAT_TOP_P,
            "stream": False,
        }
        if config.AI_CHAT_MAX_TOKENS > 0:
            payload["max_tokens"] = config.AI_CHAT_MAX_TOKENS
        return payload

    async def generate(
        self,
        utterance: str,
        personality: str,
        scenario: Optional[Scenario],
        history: History,
        request_id: Optional[str] = None,
    ) -> str:
        payload = self._payload(utterance, personality, scenario, history)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(self.url, headers=self._headers(request_id), json=payload)
            if resp.status_code >= 400:
                # Raise to let caller handle fallback
                raise RuntimeError(f"{self.provider_name} error {resp.status_code}: {resp.text!r}")
            return extract_completion_text(resp.json())
