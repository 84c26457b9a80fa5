"""
Model client interface for agentcore.

This module is the only place that *directly* calls an LLM.  Everything else (agent loop, tools,
result extraction) stays model-agnostic and depends only on :class:`ModelClient`.

We support two back-ends out of the box:

1. **OpenAI** Chat Completions (function calling).
2. **Anthropic** Messages API (tool use).

Additional providers can be added by subclassing :class:`ModelClient` and registering via
:func:`register_model_client`.
"""

import json
import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Sequence,
    Type,
)

import httpx
from pydantic import (
    BaseModel,
    Field,
)

from agentcore.config import (
    Settings,
    settings,
)
from agentcore.core.context import RunContext
from agentcore.core.schema import (
    Message,
    MessageRole,
    ToolCall,
)
from agentcore.tools import Tool

logger = logging.getLogger(__name__)


class LLMConfig(BaseModel):
    """Backend selection and credentials for one agent."""

    backend: str = Field("openai", description="Registered model client name")
    api_key: str | None = None
    model: str = "gpt-4"
    temperature: float = 0.7
    max_tokens: int = 4096
    timeout: float = Field(30.0, description="Request timeout in seconds without a run deadline")

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "LLMConfig":
        """Build the configuration for ``MODEL_BACKEND`` from environment settings."""
        source = source or settings
        backend = source.MODEL_BACKEND.lower()
        # Each backend reads its own <PREFIX>_* settings; unknown backends fall back to OPENAI_*
        prefix = "ANTHROPIC" if backend == "anthropic" else "OPENAI"
        return cls(
            backend=backend,
            api_key=getattr(source, f"{prefix}_API_KEY"),
            model=getattr(source, f"{prefix}_MODEL"),
            temperature=getattr(source, f"{prefix}_TEMPERATURE"),
            max_tokens=getattr(source, f"{prefix}_MAX_TOKENS"),
            timeout=float(getattr(source, f"{prefix}_TIMEOUT_SECONDS")),
        )


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------
class ModelClient(ABC):
    """Turns the ordered conversation into the next assistant message."""

    @abstractmethod
    def call(self, messages: Sequence[Message], context: RunContext | None = None) -> Message:
        """
        Return the next assistant message.

        The returned message must set ``end`` when the model intends to finish and must leave
        ``tool_calls`` empty when no tool invocation is requested.  Errors are raised as-is; the
        agent loop classifies them.
        """


class SDKModelClient(ModelClient):
    """Shared plumbing for back-ends built on a vendor SDK."""

    def __init__(
        self, config: LLMConfig, tools: Mapping[str, Tool] | None = None, client: Any = None
    ) -> None:
        self.config = config
        self.tools = dict(tools or {})
        self.client = client if client is not None else self._create_client()

    @abstractmethod
    def _create_client(self) -> Any:
        """Instantiate the vendor SDK client."""

    def _timeout(self, context: RunContext | None) -> httpx.Timeout:
        remaining = context.remaining() if context is not None else None
        return httpx.Timeout(remaining if remaining is not None else self.config.timeout)


# ---------------------------------------------------------------------------
# Registry helpers
# ---------------------------------------------------------------------------
_MODEL_CLIENT_REGISTRY: dict[str, Type[SDKModelClient]] = {}


def register_model_client(name: str) -> Callable:
    """Decorator to register a model client class under *name*."""

    def wrapper(cls: Type[SDKModelClient]) -> Type[SDKModelClient]:
        _MODEL_CLIENT_REGISTRY[name] = cls
        return cls

    return wrapper


def load_model_client(
    config: LLMConfig | None = None, tools: Mapping[str, Tool] | None = None
) -> SDKModelClient:
    """
    Factory that returns an instantiated model client.

    Fallback order:
    1. *config* arg
    2. ``LLMConfig.from_settings()`` (env / ``.env`` file)
    """

    config = config or LLMConfig.from_settings()
    cls = _MODEL_CLIENT_REGISTRY.get(config.backend.lower())
    if cls is None:
        raise ValueError(f"Model backend '{config.backend}' is not registered.")
    logger.debug("Loading model client '%s' (model=%s)", config.backend, config.model)
    return cls(config, tools)


# ---------------------------------------------------------------------------
# Concrete clients
# ---------------------------------------------------------------------------
@register_model_client("openai")
class OpenAIModelClient(SDKModelClient):
    """OpenAI Chat Completions back-end with function calling."""

    FINISH_REASONS_END = ("stop", "length")

    def _create_client(self) -> Any:
        import openai  # pylint: disable=import-outside-toplevel

        return openai.OpenAI(api_key=self.config.api_key, timeout=self.config.timeout)

    def _tool_params(self) -> List[Dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters_schema,
                },
            }
            for tool in self.tools.values()
        ]

    @staticmethod
    def to_openai_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
        """Convert the conversation, replaying tool calls and their results."""
        out: List[Dict[str, Any]] = []
        for msg in messages:
            if msg.role != MessageRole.ASSISTANT:
                out.append({"role": msg.role.value, "content": msg.content})
                continue

            entry: Dict[str, Any] = {"role": "assistant", "content": msg.content or None}
            if msg.tool_calls:
                entry["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": json.dumps(call.args)},
                    }
                    for call in msg.tool_calls
                ]
            out.append(entry)
            for result in msg.tool_results:
                out.append(
                    {
                        "role": "tool",
                        "tool_call_id": result.id,
                        "content": json.dumps(result.content),
                    }
                )
        return out

    def call(self, messages: Sequence[Message], context: RunContext | None = None) -> Message:
        kwargs: Dict[str, Any] = {
            "model": self.config.model,
            "messages": self.to_openai_messages(messages),
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "timeout": self._timeout(context),
        }
        if self.tools:
            kwargs["tools"] = self._tool_params()

        completion = self.client.chat.completions.create(**kwargs)
        if not completion.choices:
            raise RuntimeError("No response from OpenAI")

        choice = completion.choices[0]
        logger.debug(
            "OpenAI response: finish_reason=%s content=%s", choice.finish_reason, choice.message
        )

        tool_calls: List[ToolCall] = []
        for call in choice.message.tool_calls or []:
            try:
                args = json.loads(call.function.arguments or "{}")
            except json.JSONDecodeError as exc:
                logger.warning("Dropping tool call '%s': bad arguments JSON (%s)", call.id, exc)
                continue
            tool_calls.append(ToolCall(id=call.id, name=call.function.name, args=args))

        return Message.assistant(
            content=choice.message.content or "",
            tool_calls=tool_calls,
            end=choice.finish_reason in self.FINISH_REASONS_END,
        )


@register_model_client("anthropic")
class AnthropicModelClient(SDKModelClient):
    """Anthropic Claude back-end with tool use."""

    def _create_client(self) -> Any:
        import anthropic  # pylint: disable=import-outside-toplevel

        return anthropic.Anthropic(api_key=self.config.api_key, timeout=self.config.timeout)

    def _tool_params(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.parameters_schema,
            }
            for tool in self.tools.values()
        ]

    @staticmethod
    def to_anthropic_messages(messages: Sequence[Message]) -> tuple[str, List[Dict[str, Any]]]:
        """Split out the system prompt and convert the rest to content blocks."""
        system_parts: List[str] = []
        out: List[Dict[str, Any]] = []
        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                system_parts.append(msg.content)
            elif msg.role == MessageRole.USER:
                out.append({"role": "user", "content": msg.content})
            else:
                blocks: List[Dict[str, Any]] = []
                if msg.content:
                    blocks.append({"type": "text", "text": msg.content})
                for call in msg.tool_calls:
                    blocks.append(
                        {"type": "tool_use", "id": call.id, "name": call.name, "input": call.args}
                    )
                if not blocks:
                    continue  # the API rejects empty assistant turns
                out.append({"role": "assistant", "content": blocks})
                if msg.tool_results:
                    out.append(
                        {
                            "role": "user",
                            "content": [
                                {
                                    "type": "tool_result",
                                    "tool_use_id": result.id,
                                    "content": json.dumps(result.content),
                                }
                                for result in msg.tool_results
                            ],
                        }
                    )
        return "\n\n".join(system_parts), out

    def call(self, messages: Sequence[Message], context: RunContext | None = None) -> Message:
        system_prompt, anthropic_messages = self.to_anthropic_messages(messages)
        kwargs: Dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "system": system_prompt,
            "messages": anthropic_messages,
            "temperature": self.config.temperature,
            "timeout": self._timeout(context),
        }
        if self.tools:
            kwargs["tools"] = self._tool_params()

        response = self.client.messages.create(**kwargs)
        logger.debug("Anthropic response: stop_reason=%s", response.stop_reason)

        texts: List[str] = []
        tool_calls: List[ToolCall] = []
        for block in response.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(ToolCall(id=block.id, name=block.name, args=dict(block.input)))

        return Message.assistant(
            content="".join(texts),
            tool_calls=tool_calls,
            end=response.stop_reason != "tool_use",
        )
