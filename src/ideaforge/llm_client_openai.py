"""OpenAI-compatible LLM client.

Talks to any server exposing the ``/chat/completions`` endpoint (OpenAI,
OpenRouter, local gateways) over httpx. There is no retry logic: a failed
call is surfaced to the caller as a GatewayError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import GatewayConfig
from .errors import GatewayError
from .llm_client import ChatMessages, LLMClient

logger = logging.getLogger(__name__)


class OpenAILLMClient(LLMClient):
    """LLM client for OpenAI-compatible chat completion APIs.

    Example usage:
        config = GatewayConfig(api_key="sk-...", model="gpt-5-mini")
        client = OpenAILLMClient(config)
        text = await client.generate_completion([{"role": "user", "content": "Hi"}])
    """

    def __init__(self, config: GatewayConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config)
        self.base_url = config.base_url.rstrip("/")
        self.model = config.model
        self.timeout = config.timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }

    def _build_payload(self, messages: ChatMessages, json_mode: bool, **kwargs: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self.model, "messages": messages}
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        if "temperature" in kwargs:
            payload["temperature"] = kwargs["temperature"]
        return payload

    async def generate_completion(self, messages: ChatMessages, json_mode: bool = False, **kwargs: Any) -> str:
        """Generate a completion.

        Args:
            messages: Chat messages in {"role", "content"} form
            json_mode: Ask the provider for a JSON object response

        Returns:
            The generated text response

        Raises:
            GatewayError: On transport failures, non-2xx responses or a
                response without message content
        """
        payload = self._build_payload(messages, json_mode, **kwargs)
        url = f"{self.base_url}/chat/completions"
        logger.debug("POST %s model=%s messages=%d", url, self.model, len(messages))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=self._headers())
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Model API returned HTTP %s: %s", exc.response.status_code, exc.response.text[:500])
            raise GatewayError(f"Model API returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("Model API request failed: %r", exc)
            raise GatewayError(f"Model API request failed: {exc.__class__.__name__}") from exc
        except ValueError as exc:
            raise GatewayError("Model API returned a non-JSON body") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GatewayError("Model API response has no message content") from exc

        if not content:
            raise GatewayError("No content from model")
        return content
