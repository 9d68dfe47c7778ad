from typing import Dict, Optional

from .openrouter import OpenRouterChatClient


class GroqChatClient(OpenRouterChatClient):
    """Groq's OpenAI-compatible endpoint; same request shape as OpenRouter."""

    provider_name: str = "groq"
    url: str = "https://api.groq.com/openai/v1/chat/completions"
    api_key_env: str = "GROQ_API_KEY"
    default_model: str = "llama3-70b-8192"

    def _headers(self, request_id: Optional[str]) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if request_id:
            headers["X-Request-Id"] = request_id
        return headers
