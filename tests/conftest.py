"""Shared test fixtures for calc_agent.

Provides a scripted chat model in place of the network and a fresh arithmetic
tool registry.
"""

import os

# No tracing backend in tests
os.environ.setdefault("LANGFUSE_TRACING_ENABLED", "false")

import pytest

from calc_agent import Message, Settings, ToolCall
from calc_agent.tools import default_registry


class ScriptedModel:
    """Chat model that replays a fixed list of assistant replies.

    Records a snapshot of every conversation it was sent, so tests can check
    exactly what the agent submitted on each call.
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [Message.assistant("Mock response")])
        self.calls: list[list[Message]] = []
        self.tool_names: list[list[str]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def invoke(self, conversation, tools):
        self.calls.append(list(conversation))
        self.tool_names.append([tool.name for tool in tools])
        reply = self.replies[min(len(self.calls) - 1, len(self.replies) - 1)]
        if isinstance(reply, Exception):
            raise reply
        return reply


def tool_request(*calls: tuple[str, str, dict]) -> Message:
    """Assistant message asking for the given (id, name, arguments) calls."""
    return Message.assistant(
        tool_calls=tuple(ToolCall(id=i, name=n, arguments=a) for i, n, a in calls)
    )


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def settings():
    """Settings with no backoff so retry tests run instantly."""
    return Settings(api_key="test-key", retry_min_wait=0, retry_max_wait=0)
