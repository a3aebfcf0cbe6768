"""OpenAI chat-completions provider with normalised error messages."""

import logging

import httpx

from socratic_tutor.ai.llm_base import (
    LLMAuthenticationError,
    LLMConfigurationError,
    LLMError,
    LLMMessage,
    LLMModelNotFoundError,
    LLMProvider,
    LLMRateLimitError,
    LLMUsage,
)

logger = logging.getLogger(__name__)

OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIProvider(LLMProvider):
    def __init__(self, api_key: str, model_id: str, api_url: str = OPENAI_API_URL):
        super().__init__()
        self.model_id = model_id
        self.api_key = api_key
        self.api_url = api_url

    async def generate(
        self,
        system_prompt: str,
        messages: list[LLMMessage],
        *,
        max_tokens: int = 200,
        temperature: float = 0.5,
        timeout: float = 15.0,
        json_mode: bool = False,
    ) -> str:
        """Call the Chat Completions API once and return the trimmed reply text."""
        self.last_usage = LLMUsage()
        if not self.api_key:
            raise LLMConfigurationError("Missing OPENAI_API_KEY in server environment")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        api_messages: list[dict] = [{"role": "system", "content": system_prompt}]
        for msg in messages:
            api_messages.append({"role": msg["role"], "content": msg["content"]})

        payload: dict = {
            "model": self.model_id,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "messages": api_messages,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException:
            raise LLMError("OpenAI request timed out. Please try again.")
        except httpx.HTTPError as e:
            raise LLMError(f"OpenAI error: {e}")

        if response.status_code != 200:
            raise self._classify_error(response)

        try:
            body = response.json()
        except ValueError:
            raise LLMError("OpenAI error: invalid JSON response")

        usage = body.get("usage")
        if isinstance(usage, dict):
            self.last_usage = LLMUsage(
                input_tokens=usage.get("prompt_tokens") or 0,
                output_tokens=usage.get("completion_tokens") or 0,
            )

        choices = body.get("choices") or []
        if not choices:
            return ""
        content = (choices[0].get("message") or {}).get("content") or ""
        return content.strip()

    def _classify_error(self, response: httpx.Response) -> LLMError:
        status_code = response.status_code
        detail = _error_detail(response)
        logger.warning("OpenAI API returned %d: %s", status_code, detail)
        if status_code == 401:
            return LLMAuthenticationError(
                "OpenAI authentication failed (401). Check OPENAI_API_KEY."
            )
        if status_code == 429:
            return LLMRateLimitError(
                "OpenAI rate limit hit (429). Please wait and try again."
            )
        if status_code == 404:
            return LLMModelNotFoundError(
                f"OpenAI model not found: {self.model_id}. "
                "Set AI_MODEL or update your access."
            )
        return LLMError(f"OpenAI error: {detail}")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return f"HTTP {response.status_code}"
