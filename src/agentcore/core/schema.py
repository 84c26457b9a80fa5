"""
Schema definitions for model <-> agent <-> tool messages.

These data models serve as the contract between the model client, the orchestration loop, and
individual tools.  We keep them separate from runtime logic so they can be imported anywhere without
side-effects.
"""

from enum import Enum
from typing import (
    Dict,
    List,
)

from pydantic import (
    BaseModel,
    Field,
    JsonValue,
)

JsonObject = Dict[str, JsonValue]
"""Loosely typed argument mapping: string keys, JSON-compatible values."""


class MessageRole(str, Enum):
    """Who authored a message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ToolCall(BaseModel):
    """A call that the model wants the agent to execute."""

    id: str = Field(..., description="Correlates the request with its result")
    name: str = Field(..., description="Registered tool name")
    args: JsonObject = Field(default_factory=dict, description="Keyword arguments for the tool")


class ToolResult(BaseModel):
    """Output of one executed tool call, exposed to the model as JSON."""

    id: str = Field(..., description="Id of the ToolCall this answers")
    name: str
    content: JsonValue = None


class Message(BaseModel):
    """A single entry of the conversation."""

    role: MessageRole
    content: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)
    tool_results: List[ToolResult] = Field(default_factory=list)
    end: bool = Field(False, description="The model considers the task complete")

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(
        cls, content: str = "", tool_calls: List[ToolCall] | None = None, end: bool = False
    ) -> "Message":
        return cls(
            role=MessageRole.ASSISTANT, content=content, tool_calls=tool_calls or [], end=end
        )
