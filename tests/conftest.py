"""Shared fixtures: a scripted model client and the calculator output type."""

from typing import (
    Callable,
    List,
    Sequence,
)

import pytest
from pydantic import BaseModel

from agentcore.agent.model_client import ModelClient
from agentcore.core.context import RunContext
from agentcore.core.schema import (
    Message,
    ToolCall,
)


class SumResult(BaseModel):
    """Output shape used across the tests."""

    sum: int


class ScriptedModelClient(ModelClient):
    """Replays canned assistant messages and records every conversation it is sent."""

    def __init__(self, replies: Sequence[Message | Exception]) -> None:
        self.replies = list(replies)
        self.seen: List[List[Message]] = []
        self.contexts: List[RunContext | None] = []

    def call(self, messages: Sequence[Message], context: RunContext | None = None) -> Message:
        self.seen.append([m.model_copy(deep=True) for m in messages])
        self.contexts.append(context)
        if not self.replies:
            raise AssertionError("ScriptedModelClient ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def calls(self) -> int:
        return len(self.seen)


def tool_turn(*calls: tuple[str, str, dict], content: str = "") -> Message:
    """Assistant message requesting ``(id, name, args)`` tool calls."""
    return Message.assistant(
        content=content,
        tool_calls=[ToolCall(id=call_id, name=name, args=args) for call_id, name, args in calls],
    )


def final_turn(content: str) -> Message:
    """Terminal assistant message."""
    return Message.assistant(content=content, end=True)


@pytest.fixture
def scripted() -> Callable[..., ScriptedModelClient]:
    """Factory fixture: ``scripted(reply1, reply2, ...)``."""

    def factory(*replies: Message | Exception) -> ScriptedModelClient:
        return ScriptedModelClient(replies)

    return factory
