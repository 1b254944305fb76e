# tests/conftest.py
"""Shared fixtures: a scripted text generator that records every attempt."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest


class ScriptedGenerator:
    """Replays ``replies`` in order; the last reply repeats once exhausted.

    A reply that is an exception instance is raised instead of returned.
    """

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.calls: List[List[Dict[str, str]]] = []

    async def generate(self, messages: List[Dict[str, str]]) -> str:
        self.calls.append(messages)
        reply = self.replies[min(len(self.calls), len(self.replies)) - 1]
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def scripted():
    """Factory fixture: ``scripted("reply1", TransportError(), ...)``."""
    return ScriptedGenerator
