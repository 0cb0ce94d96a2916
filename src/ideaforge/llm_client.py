"""Abstract LLM client interface for provider-agnostic usage.

This module defines the minimal async interface the gateway expects.
Concrete provider clients implement ``generate_completion``.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, List

ChatMessages = List[Dict[str, str]]


class LLMClient(abc.ABC):
    """Abstract base class for all LLM clients.

    Concrete implementations accept a configuration object in their
    constructor (e.g. a ``GatewayConfig``).
    """

    def __init__(self, config: Any) -> None:
        self._config = config

    @abc.abstractmethod
    async def generate_completion(self, messages: ChatMessages, **kwargs: Any) -> str:
        """Generate a single completion for the provided chat messages.

        Returns the generated text content from the provider.
        """

