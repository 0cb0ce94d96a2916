"""Tests for the offline and model-backed gateways."""

import asyncio
import json

import pytest

from ideaforge.config import Config, GatewayConfig
from ideaforge.errors import GatewayError, MalformedOutputError
from ideaforge.gateway import LLMGateway, OfflineGateway, build_gateway
from ideaforge.interview.conversation_history import Turn
from ideaforge.models import GenerationContext, GenerationStep, InterviewTurnResult


def _turns(n):
    return [Turn.assistant(f"q{i}") if i % 2 == 0 else Turn.user(f"a{i}") for i in range(n)]


# --- OfflineGateway ---

class TestOfflineGateway:
    def test_walks_stages_by_turn_count(self, offline_gateway):
        titles = [
            asyncio.run(offline_gateway.next_turn(_turns(n))).form.title
            for n in (0, 1, 3, 5)
        ]
        assert titles == ["The Spark", "The Basics", "Design Vibes", "Under the Hood"]

    def test_completes_after_seven_turns(self, offline_gateway):
        result = asyncio.run(offline_gateway.next_turn(_turns(7), {"users": "1M+"}))
        assert isinstance(result, InterviewTurnResult)
        assert result.complete
        assert result.form is None

    @pytest.mark.parametrize(
        "step, heading",
        [
            (GenerationStep.PRD, "# Product Requirements Document"),
            (GenerationStep.DESIGN, "# Design Guide"),
            (GenerationStep.TECH, "# Technical Specifications"),
        ],
    )
    def test_placeholder_documents(self, offline_gateway, step, heading):
        text = asyncio.run(offline_gateway.generate_section(_turns(7), step, GenerationContext()))
        assert text.startswith(heading)

    def test_accepts_step_value(self, offline_gateway):
        text = asyncio.run(offline_gateway.generate_section([], "tech"))
        assert "Technical Specifications" in text


# --- LLMGateway: interview turns ---

class TestLLMGatewayNextTurn:
    def test_opening_turn_needs_no_model_call(self, fake_llm):
        client = fake_llm()
        result = asyncio.run(LLMGateway(client).next_turn([]))
        assert result.form.fields[0].id == "idea"
        assert client.calls == []

    def test_parses_model_output(self, fake_llm):
        payload = {
            "thought": "ask about audience",
            "message": "Who is it for?",
            "form": {"title": "Audience", "fields": [{"id": "audience", "label": "Audience", "type": "text"}]},
        }
        client = fake_llm([f"Sure, here it is:\n{json.dumps(payload)}\nAnything else?"])
        result = asyncio.run(LLMGateway(client).next_turn(_turns(2), {"idea": "pet adoption app"}))

        assert result.message == "Who is it for?"
        assert result.form.title == "Audience"

    def test_request_carries_turns_and_form_data(self, fake_llm):
        client = fake_llm(['{"message": "ok"}'])
        turns = [Turn.assistant("What do you want to build?"), Turn.user("idea: pet adoption app")]
        asyncio.run(LLMGateway(client).next_turn(turns, {"idea": "pet adoption app"}))

        [call] = client.calls
        messages = call["messages"]
        assert messages[0]["role"] == "system"
        assert "isComplete" in messages[0]["content"]
        assert messages[1:3] == [
            {"role": "assistant", "content": "What do you want to build?"},
            {"role": "user", "content": "idea: pet adoption app"},
        ]
        assert messages[3] == {
            "role": "user",
            "content": 'User submitted form data: {"idea": "pet adoption app"}',
        }
        assert call["kwargs"]["json_mode"] is True

    def test_no_form_data_message_without_payload(self, fake_llm):
        client = fake_llm(['{"message": "ok"}'])
        asyncio.run(LLMGateway(client).next_turn(_turns(2)))
        assert len(client.calls[0]["messages"]) == 3

    def test_complete_with_form_is_repaired(self, fake_llm):
        raw = json.dumps({
            "message": "All done",
            "isComplete": True,
            "form": {"fields": [{"id": "x", "label": "X", "type": "text"}]},
        })
        result = asyncio.run(LLMGateway(fake_llm([raw])).next_turn(_turns(4)))
        assert result.complete
        assert result.form is None

    def test_complete_with_unusable_form_still_completes(self, fake_llm):
        raw = '{"message":"done","isComplete":true,"form":{"fields":[]}}'
        result = asyncio.run(LLMGateway(fake_llm([raw])).next_turn(_turns(6)))
        assert result.complete
        assert result.form is None

    def test_no_braces_is_malformed(self, fake_llm):
        gateway = LLMGateway(fake_llm(["Let me think about that."]))
        with pytest.raises(MalformedOutputError):
            asyncio.run(gateway.next_turn(_turns(2)))

    def test_client_failure_propagates(self, fake_llm):
        gateway = LLMGateway(fake_llm([GatewayError("HTTP 500")]))
        with pytest.raises(GatewayError):
            asyncio.run(gateway.next_turn(_turns(2)))


# --- LLMGateway: document generation ---

class TestLLMGatewayGenerateSection:
    def test_prd_prompt(self, fake_llm):
        client = fake_llm(["# PRD"])
        text = asyncio.run(LLMGateway(client).generate_section(_turns(3), GenerationStep.PRD))

        assert text == "# PRD"
        messages = client.calls[0]["messages"]
        assert messages[0]["role"] == "system"
        assert messages[1]["content"].startswith("Here is the interview transcript.")
        assert "Product Requirements Document" in messages[1]["content"]
        assert len(messages) == 2 + 3
        assert "json_mode" not in client.calls[0]["kwargs"]

    def test_design_prompt_embeds_prd(self, fake_llm):
        client = fake_llm(["# Design"])
        context = GenerationContext(prd="PRD-FROM-THIS-RUN")
        asyncio.run(LLMGateway(client).generate_section(_turns(3), GenerationStep.DESIGN, context))

        instruction = client.calls[0]["messages"][1]["content"]
        assert "Design Guide" in instruction
        assert "PRD-FROM-THIS-RUN" in instruction

    def test_tech_prompt_embeds_prd_and_design(self, fake_llm):
        client = fake_llm(["# Tech"])
        context = GenerationContext(prd="THE-PRD", design="THE-DESIGN")
        asyncio.run(LLMGateway(client).generate_section(_turns(3), GenerationStep.TECH, context))

        instruction = client.calls[0]["messages"][1]["content"]
        assert "PRD: THE-PRD" in instruction
        assert "Design: THE-DESIGN" in instruction

    def test_empty_document_is_an_error(self, fake_llm):
        gateway = LLMGateway(fake_llm(["   "]))
        with pytest.raises(GatewayError):
            asyncio.run(gateway.generate_section(_turns(3), GenerationStep.PRD))


# --- build_gateway ---

class TestBuildGateway:
    def test_offline_without_key(self):
        assert isinstance(build_gateway(Config()), OfflineGateway)

    def test_offline_with_placeholder_key(self):
        config = Config(gateway=GatewayConfig(api_key="mock-key"))
        assert isinstance(build_gateway(config), OfflineGateway)

    def test_live_with_key(self):
        config = Config(gateway=GatewayConfig(api_key="sk-test"))
        gateway = build_gateway(config)
        assert isinstance(gateway, LLMGateway)
        assert gateway.llm_client.model == "gpt-5-mini"

    def test_offline_flag_wins(self):
        config = Config(gateway=GatewayConfig(api_key="sk-test"))
        assert isinstance(build_gateway(config, offline=True), OfflineGateway)
