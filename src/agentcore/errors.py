"""
Error hierarchy for agent runs.

Every failure of a run is surfaced as a subclass of :class:`AgentError`.  Each error carries the
conversation transcript as it stood when the run stopped, so callers can inspect it before deciding
whether to retry.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    List,
    Sequence,
)

if TYPE_CHECKING:
    from agentcore.core.schema import Message


class AgentError(RuntimeError):
    """Base class for everything a run can raise."""

    def __init__(self, message: str, messages: Sequence["Message"] | None = None) -> None:
        super().__init__(message)
        self.messages: List["Message"] = list(messages or [])


class ModelCallError(AgentError):
    """Raised when the model client fails to produce the next message."""


class PromptRenderError(AgentError):
    """Raised when the system prompt template cannot be rendered."""


class ToolNotFoundError(AgentError):
    """Raised when the model asks for a tool that is not registered."""

    def __init__(self, tool_name: str, messages: Sequence["Message"] | None = None) -> None:
        super().__init__(f"Tool '{tool_name}' is not registered.", messages)
        self.tool_name = tool_name


class ToolInvocationError(AgentError):
    """Raised when a tool function fails; the original exception is chained."""

    def __init__(
        self, tool_name: str, detail: str, messages: Sequence["Message"] | None = None
    ) -> None:
        super().__init__(f"Tool '{tool_name}' raised an error: {detail}", messages)
        self.tool_name = tool_name


class InvalidResultSchemaError(AgentError):
    """Raised when the final message does not validate against the output schema."""

    def __init__(
        self,
        detail: str,
        messages: Sequence["Message"] | None = None,
        errors: List[Any] | None = None,
    ) -> None:
        super().__init__(f"Invalid result schema: {detail}", messages)
        self.errors = errors or []


class LimitReachedError(AgentError):
    """
    Raised when every tool with a usage limit has been exhausted.

    ``result`` holds the best-effort :class:`~agentcore.agent.result.AgentResult` extracted from the
    last message, or ``None`` if that message did not validate (the
    :class:`InvalidResultSchemaError` is then chained as ``__cause__``).
    """

    def __init__(
        self,
        usage: dict[str, int],
        result: Any = None,
        messages: Sequence["Message"] | None = None,
    ) -> None:
        super().__init__(f"Tool limit reached (usage={usage})", messages)
        self.usage = dict(usage)
        self.result = result


class RunCancelledError(AgentError):
    """Raised when the run context was cancelled or its deadline passed."""
