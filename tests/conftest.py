"""Shared fixtures for the IdeaForge test suite."""

import pytest

from ideaforge.errors import GatewayError
from ideaforge.gateway import Gateway, OfflineGateway
from ideaforge.interview.conversation_history import Turn
from ideaforge.llm_client import LLMClient
from ideaforge.models import GenerationStep


class FakeLLMClient(LLMClient):
    """Returns queued responses and records every call."""

    def __init__(self, responses=None):
        super().__init__(config=None)
        self.responses = list(responses or [])
        self.calls = []

    async def generate_completion(self, messages, **kwargs):
        self.calls.append({"messages": messages, "kwargs": kwargs})
        if not self.responses:
            raise GatewayError("no more responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class RecordingGateway(Gateway):
    """Offline interview, recorded generation calls, optional failures."""

    def __init__(self, fail_step=None, fail_next_turn=False):
        self.offline = OfflineGateway()
        self.fail_step = fail_step
        self.fail_next_turn = fail_next_turn
        self.turn_calls = []
        self.section_calls = []

    async def next_turn(self, turns, form_data=None):
        self.turn_calls.append({"turns": tuple(turns), "form_data": form_data})
        if self.fail_next_turn:
            raise GatewayError("unreachable")
        return await self.offline.next_turn(turns, form_data)

    async def generate_section(self, turns, step, context=None):
        self.section_calls.append({"turns": tuple(turns), "step": step, "context": context})
        if step == self.fail_step:
            raise GatewayError(f"{step.value} failed")
        return f"{step.value} document #{len(self.section_calls)}"


@pytest.fixture
def fake_llm():
    return FakeLLMClient


@pytest.fixture
def recording_gateway():
    return RecordingGateway


@pytest.fixture
def offline_gateway():
    return OfflineGateway()


@pytest.fixture
def sample_turns():
    """A finished offline interview: greeting plus three answered forms and completion."""
    return (
        Turn.assistant("What do you want to build today?"),
        Turn.user("idea: pet adoption app"),
        Turn.assistant("That sounds interesting! Let's pin down the basics."),
        Turn.user("target_audience: families\nplatform: Web"),
        Turn.assistant("Got it. Now let's talk about the look and feel."),
        Turn.user("style: Minimalist\ncolors: Blue"),
        Turn.assistant("I have everything I need!"),
    )


@pytest.fixture
def all_steps():
    return list(GenerationStep)
