# tests/test_generation.py
"""Tests for the OpenAI chat generator (no network)."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import openai
import pytest

from shapecast.config import ShapecastConfig
from shapecast.generation import OpenAIChatGenerator, TextGenerator, TransportError

MESSAGES = [{"role": "user", "content": "hi"}]


class _FakeCompletions:
    def __init__(self, content="{}", error=None, delay=0.0, choices=True):
        self.content = content
        self.error = error
        self.delay = delay
        self.choices = choices
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _generator(completions, **kwargs):
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIChatGenerator("test-model", client=client, **kwargs)


class TestOpenAIChatGenerator:

    def test_satisfies_protocol(self):
        assert isinstance(_generator(_FakeCompletions()), TextGenerator)

    def test_single_call_with_model_and_messages(self):
        completions = _FakeCompletions(content='{"a": 1}')
        generator = _generator(completions, temperature=0.3)
        assert asyncio.run(generator.generate(MESSAGES)) == '{"a": 1}'
        assert len(completions.calls) == 1
        call = completions.calls[0]
        assert call["model"] == "test-model"
        assert call["messages"] == MESSAGES
        assert call["temperature"] == 0.3

    def test_none_content_becomes_empty_string(self):
        generator = _generator(_FakeCompletions(content=None))
        assert asyncio.run(generator.generate(MESSAGES)) == ""

    def test_sdk_error_becomes_transport_error(self):
        generator = _generator(_FakeCompletions(error=openai.OpenAIError("boom")))
        with pytest.raises(TransportError):
            asyncio.run(generator.generate(MESSAGES))

    def test_timeout_becomes_transport_error(self):
        generator = _generator(_FakeCompletions(delay=1.0), timeout=0.01)
        with pytest.raises(TransportError, match="timed out"):
            asyncio.run(generator.generate(MESSAGES))

    def test_no_choices_is_transport_error(self):
        generator = _generator(_FakeCompletions(choices=False))
        with pytest.raises(TransportError):
            asyncio.run(generator.generate(MESSAGES))

    def test_missing_api_key_fails_the_attempt(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        generator = OpenAIChatGenerator("test-model")
        with pytest.raises(TransportError):
            asyncio.run(generator.generate(MESSAGES))

    def test_from_config(self):
        cfg = ShapecastConfig(lm="gpt-4o-mini", api_key="sk-test", api_base="http://localhost:1234/v1", lm_temperature=0.2, attempt_timeout=5)
        generator = OpenAIChatGenerator.from_config(cfg)
        assert generator.model == "gpt-4o-mini"
        assert generator.temperature == 0.2
        assert generator.timeout == 5
