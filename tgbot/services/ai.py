"""AI model services"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

import httpx

from tgbot.config import Settings, settings


WORKERS_AI_BASE = "https://api.cloudflare.com/client/v4/accounts"

SYSTEM_PROMPT_CHAT = (
    "You are a helpful assistant. When thinking through a problem, "
    "wrap your thinking process in <think></think> tags."
)
SYSTEM_PROMPT_CODE = (
    "You are a helpful coding assistant. Only provide code examples without "
    "explanations. Just return the code block directly."
)

_THINK_RE = re.compile(r"<think>([\s\S]*?)</think>")

# Checked in order; "javascript" must come before "java".
_LANGUAGE_HINTS: list[tuple[str, tuple[str, ...]]] = [
    ("python", ("python",)),
    ("javascript", ("javascript", "js")),
    ("java", ("java",)),
    ("cpp", ("c++", "cpp")),
    ("csharp", ("c#", "csharp")),
]


class AIServiceError(RuntimeError):
    """Raised when an AI endpoint fails or returns something unusable."""


def extract_thinking_process(content: str) -> tuple[Optional[str], str]:
    """Split ``<think>...</think>`` out of a model answer."""
    match = _THINK_RE.search(content)
    if match and match.group(1):
        thinking = match.group(1).strip()
        final_response = _THINK_RE.sub("", content, count=1).strip()
        return thinking, final_response
    return None, content


def ai_output_to_string(output: Any) -> str:
    if isinstance(output, str):
        return output
    if isinstance(output, dict) and output.get("response"):
        return str(output["response"])
    return json.dumps(output, ensure_ascii=False, default=str)


def extract_image_url(output: Any) -> Optional[str]:
    """Find an image url in an image model result."""
    if isinstance(output, str):
        return output or None
    if isinstance(output, dict):
        for key in ("data", "url", "image"):
            if output.get(key):
                return str(output[key])
    return None


def guess_code_language(prompt: str) -> str:
    lowered = prompt.lower()
    for language, hints in _LANGUAGE_HINTS:
        if any(hint in lowered for hint in hints):
            return language
    return ""


def as_code_block(code: str, prompt: str) -> str:
    """Wrap model output in a fenced block unless it already has one."""
    if "```" in code:
        return code
    return f"```{guess_code_language(prompt)}\n{code}\n```"


class AIClient:
    """Client for the chat, code and image models."""

    def __init__(
        self,
        config: Settings = settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport

    async def _post(
        self, url: str, payload: dict[str, Any], headers: Optional[dict[str, str]] = None
    ) -> Any:
        async with httpx.AsyncClient(
            timeout=self.config.ai_timeout_seconds, transport=self._transport
        ) as client:
            r = await client.post(url, json=payload, headers=headers or {})
        if r.status_code >= 300:
            raise AIServiceError(f"AI endpoint error: {r.status_code} {r.text[:200]}")
        try:
            return r.json()
        except ValueError as exc:
            raise AIServiceError("AI endpoint returned a non-JSON body") from exc

    async def chat(self, messages: list[dict[str, str]]) -> str:
        """Primary chat model (OpenAI-compatible chat completions)."""
        if not self.config.chat_api_url:
            raise AIServiceError("CHAT_API_URL is not configured")
        data = await self._post(
            self.config.chat_api_url,
            {
                "model": self.config.chat_model,
                "messages": messages,
                "max_tokens": self.config.chat_max_tokens,
            },
            headers={"Authorization": f"Bearer {self.config.chat_api_key}"},
        )
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AIServiceError("Malformed chat completion response") from exc

    async def run_model(self, model: str, payload: dict[str, Any]) -> Any:
        """Run a Workers AI model and return its ``result``."""
        if not (self.config.cf_account_id and self.config.cf_api_token):
            raise AIServiceError("Workers AI is not configured")
        url = f"{WORKERS_AI_BASE}/{self.config.cf_account_id}/ai/run/{model}"
        data = await self._post(
            url, payload, headers={"Authorization": f"Bearer {self.config.cf_api_token}"}
        )
        if isinstance(data, dict) and "result" in data:
            if not data.get("success", True):
                raise AIServiceError(f"Workers AI error: {data.get('errors')}")
            return data["result"]
        return data

    async def fallback_chat(self, messages: list[dict[str, str]]) -> str:
        result = await self.run_model(self.config.fallback_chat_model, {"messages": messages})
        return ai_output_to_string(result)

    async def generate_code(self, prompt: str) -> str:
        result = await self.run_model(
            self.config.code_model,
            {
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT_CODE},
                    {"role": "user", "content": prompt},
                ]
            },
        )
        return ai_output_to_string(result)

    async def generate_image(self, prompt: str) -> str:
        if not self.config.image_api_url:
            raise AIServiceError("IMAGE_API_URL is not configured")
        data = await self._post(
            self.config.image_api_url,
            {"prompt": prompt, "artStyle": "Ultra Realistic", "ratio": "16:9"},
        )
        image_url = data.get("imageUrl") if isinstance(data, dict) else None
        if not image_url:
            raise AIServiceError("No image URL in response")
        return image_url

    async def fallback_image(self, prompt: str) -> Any:
        return await self.run_model(self.config.fallback_image_model, {"prompt": prompt})


_client: Optional[AIClient] = None


def get_ai_client() -> AIClient:
    global _client
    if _client is None:
        _client = AIClient()
    return _client
