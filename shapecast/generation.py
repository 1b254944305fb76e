# shapecast/generation.py
"""Outbound text-generation collaborator.

The orchestrator only needs ``await generator.generate(messages) -> str``.
:class:`OpenAIChatGenerator` implements it against any OpenAI-compatible
chat-completions endpoint; tests substitute scripted fakes.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Protocol, runtime_checkable

import openai
from openai import AsyncOpenAI

from .config import ShapecastConfig
from .utils.logging import get_logger

_logger = get_logger(__name__)

Message = Dict[str, str]


class TransportError(Exception):
    """The generation call failed or timed out."""


@runtime_checkable
class TextGenerator(Protocol):
    async def generate(self, messages: List[Message]) -> str:
        ...


class OpenAIChatGenerator:
    """Chat-completions generator backed by one shared ``AsyncOpenAI`` client.

    The client is safe for concurrent use, so a single instance serves every
    request.  Each :meth:`generate` call is exactly one outbound request,
    bounded by ``timeout`` seconds.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.0,
        timeout: float = 60.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.temperature = max(0.0, temperature)
        self.timeout = timeout
        self._api_key = api_key or None
        self._base_url = base_url or None
        self._client = client

    @classmethod
    def from_config(cls, cfg: ShapecastConfig) -> "OpenAIChatGenerator":
        return cls(
            cfg.lm,
            api_key=cfg.api_key,
            base_url=cfg.api_base,
            temperature=cfg.lm_temperature,
            timeout=cfg.attempt_timeout,
        )

    def _get_client(self) -> AsyncOpenAI:
        # Built on first use so a missing key surfaces as an attempt failure
        if self._client is None:
            # SDK retries are disabled; the orchestrator owns the retry budget
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                max_retries=0,
            )
        return self._client

    async def generate(self, messages: List[Message]) -> str:
        try:
            client = self._get_client()
            completion = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model,
                    temperature=self.temperature,
                    messages=messages,  # type: ignore[arg-type]
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Generation timed out after {self.timeout:.0f}s") from exc
        except openai.OpenAIError as exc:
            raise TransportError(f"Generation call failed: {exc}") from exc

        if not completion.choices:
            raise TransportError("Generation returned no choices")
        content = completion.choices[0].message.content
        _logger.debug(f"Generation returned {len(content or '')} chars from {self.model}")
        return content or ""
