"""Gateways between the interview and a language model.

A Gateway answers two questions: what does the interviewer say next, and
what is the text of a generated document. ``LLMGateway`` asks a hosted
model; ``OfflineGateway`` answers from the fixed stage table so the whole
flow works without credentials. Both return the same types.
"""

from __future__ import annotations

import abc
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .config import Config
from .errors import GatewayError
from .interview.conversation_history import Turn, to_llm_format
from .interview.json_extractor import JSONExtractor
from .interview.stage_coordinator import Stage, StageCoordinator
from .llm_client import LLMClient
from .llm_client_openai import OpenAILLMClient
from .models import AnswerValue, FieldKind, GenerationContext, GenerationStep, InterviewTurnResult
from .templates import render_template

logger = logging.getLogger(__name__)

FormData = Mapping[str, AnswerValue]


class Gateway(abc.ABC):
    """Capability the interview and pipeline call into."""

    @abc.abstractmethod
    async def next_turn(self, turns: Sequence[Turn], form_data: Optional[FormData] = None) -> InterviewTurnResult:
        """Return the next interview turn for the given turn log."""

    @abc.abstractmethod
    async def generate_section(
        self,
        turns: Sequence[Turn],
        step: GenerationStep,
        context: Optional[GenerationContext] = None,
    ) -> str:
        """Return the markdown text of one generated document."""


_PLACEHOLDER_DOCUMENTS: Dict[GenerationStep, str] = {
    GenerationStep.PRD: (
        "# Product Requirements Document\n\n"
        "## Executive Summary\nGenerated in offline mode (Step 1/3)...\n\n"
        "## User Stories\n- As a user...\n\n"
        "## Acceptance Criteria\n- Given..."
    ),
    GenerationStep.DESIGN: (
        "# Design Guide\n\n"
        "## Colors\n- Blue: #0000FF\n\n"
        "## Typography\n- Inter, sans-serif\n\n"
        "## Vibe\nClean and friendly.\n\n"
        "(Generated in offline mode Step 2/3)"
    ),
    GenerationStep.TECH: (
        "# Technical Specifications\n\n"
        "## Stack\n- Next.js\n\n"
        "## Data Schema\n- users(id, email)\n\n"
        "## API Endpoints\n- GET /api/health\n\n"
        "## Security Considerations\n- Authenticate every request\n\n"
        "(Generated in offline mode Step 3/3)"
    ),
}


class OfflineGateway(Gateway):
    """Deterministic gateway used when no model credential is configured."""

    def __init__(self, coordinator: Optional[StageCoordinator] = None):
        self.coordinator = coordinator or StageCoordinator()

    async def next_turn(self, turns: Sequence[Turn], form_data: Optional[FormData] = None) -> InterviewTurnResult:
        return self.coordinator.next_turn(turns)

    async def generate_section(
        self,
        turns: Sequence[Turn],
        step: GenerationStep,
        context: Optional[GenerationContext] = None,
    ) -> str:
        return _PLACEHOLDER_DOCUMENTS[GenerationStep(step)]


class LLMGateway(Gateway):
    """Gateway backed by a hosted language model.

    The opening turn is always the canned spark form, so starting an
    interview costs no model call.
    """

    def __init__(self, llm_client: LLMClient, coordinator: Optional[StageCoordinator] = None):
        self.llm_client = llm_client
        self.coordinator = coordinator or StageCoordinator()
        self.extractor = JSONExtractor()

    def _interview_messages(self, turns: Sequence[Turn], form_data: Optional[FormData]) -> List[Dict[str, str]]:
        system_prompt = render_template(
            "interview_system.jinja",
            {"field_types": [f"'{kind.value}'" for kind in FieldKind]},
        )
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(to_llm_format(turns))
        if form_data:
            messages.append({
                "role": "user",
                "content": f"User submitted form data: {json.dumps(dict(form_data))}",
            })
        return messages

    def _generation_messages(
        self,
        turns: Sequence[Turn],
        step: GenerationStep,
        context: GenerationContext,
    ) -> List[Dict[str, str]]:
        instruction = render_template(
            "generation_step.jinja",
            {"step": step.value, "context": {"prd": context.prd or "", "design": context.design or ""}},
        )
        messages = [
            {"role": "system", "content": render_template("generation_system.jinja", {})},
            {"role": "user", "content": instruction},
        ]
        messages.extend(to_llm_format(turns))
        return messages

    async def next_turn(self, turns: Sequence[Turn], form_data: Optional[FormData] = None) -> InterviewTurnResult:
        if not turns:
            return self.coordinator.result_for(Stage.SPARK)

        messages = self._interview_messages(turns, form_data)
        raw = await self.llm_client.generate_completion(messages, json_mode=True)
        result = self.extractor.extract_to_model(raw, InterviewTurnResult)
        logger.debug("Interview turn: complete=%s form=%s", result.complete, result.form is not None)
        return result

    async def generate_section(
        self,
        turns: Sequence[Turn],
        step: GenerationStep,
        context: Optional[GenerationContext] = None,
    ) -> str:
        step = GenerationStep(step)
        messages = self._generation_messages(turns, step, context or GenerationContext())
        content = await self.llm_client.generate_completion(messages)
        if not content or not content.strip():
            raise GatewayError(f"Model returned an empty {step.value} document")
        return content


def build_gateway(config: Config, offline: bool = False, **client_kwargs: Any) -> Gateway:
    """Pick the live gateway when a credential is configured, else offline."""
    if offline or not config.gateway.live:
        logger.info("No model credential configured; using the offline interview")
        return OfflineGateway()

    logger.info("Using model %s at %s", config.gateway.model, config.gateway.base_url)
    return LLMGateway(OpenAILLMClient(config.gateway, **client_kwargs))
