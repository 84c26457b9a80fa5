"""Main orchestration loop for agentcore."""

from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    Generic,
    List,
    Mapping,
    TypeVar,
)

from pydantic_core import (
    PydanticSerializationError,
    to_jsonable_python,
)

from agentcore.agent.model_client import (
    LLMConfig,
    ModelClient,
    load_model_client,
)
from agentcore.agent.prompt import (
    PromptTemplate,
    render_system_prompt,
)
from agentcore.agent.result import (
    AgentResult,
    ResultExtractor,
)
from agentcore.agent.tool_executor import execute_tool_calls
from agentcore.core.context import (
    RunContext,
    bind_run_context,
)
from agentcore.core.schema import (
    Message,
    MessageRole,
)
from agentcore.errors import (
    AgentError,
    InvalidResultSchemaError,
    LimitReachedError,
    ModelCallError,
    RunCancelledError,
)
from agentcore.tools import (
    Tool,
    freeze_tools,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_limit_reached(usage: Mapping[str, int], limits: Mapping[str, int]) -> bool:
    """
    True when *every* limited tool has reached its limit.

    Tools without a limit never block, and an empty *limits* mapping never triggers.
    """
    if not limits:
        return False
    return all(usage.get(name, 0) >= limit for name, limit in limits.items())


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------
class Agent(Generic[T]):
    """
    Drives a model through tool calls until it returns a result matching ``output_type``.

    The agent is immutable once built.  All per-run state (messages, usage counters) lives inside
    :meth:`run`, so one agent can serve concurrent runs from several threads.

    Parameters
    ----------
    behavior:
        Free-text task description embedded in every system prompt.
    output_type:
        Anything pydantic can validate: a ``BaseModel`` subclass, a ``TypedDict``, a dataclass...
        Its schema is compiled once here.
    model_client:
        The injected :class:`ModelClient`.
    tools:
        Mapping of tool name to :class:`Tool`.
    limits:
        Mapping of tool name to the maximum number of calls in one run.
    prompt_template:
        Overrides :data:`~agentcore.agent.prompt.DEFAULT_SYSTEM_PROMPT`.
    """

    def __init__(
        self,
        *,
        behavior: str,
        output_type: type[T],
        model_client: ModelClient,
        tools: Mapping[str, Tool] | None = None,
        limits: Mapping[str, int] | None = None,
        prompt_template: PromptTemplate | str | None = None,
        name: str = "agent",
    ) -> None:
        self._name = name
        self._behavior = behavior
        self._tools = freeze_tools(tools)
        self._limits = MappingProxyType(self._check_limits(limits or {}))
        if isinstance(prompt_template, str):
            prompt_template = PromptTemplate(prompt_template)
        self._template = prompt_template or PromptTemplate()
        self._extractor: ResultExtractor[T] = ResultExtractor(output_type)
        self._model_client = model_client

        # Fail at construction rather than on the first run if the template is broken
        self.render_system_prompt(self._zero_usage())

    @classmethod
    def from_config(
        cls,
        config: LLMConfig,
        *,
        behavior: str,
        output_type: type[T],
        tools: Mapping[str, Tool] | None = None,
        limits: Mapping[str, int] | None = None,
        prompt_template: PromptTemplate | str | None = None,
        name: str = "agent",
    ) -> "Agent[T]":
        """Build an agent whose model client is selected and configured by *config*."""
        tools = freeze_tools(tools)
        return cls(
            behavior=behavior,
            output_type=output_type,
            model_client=load_model_client(config, tools),
            tools=tools,
            limits=limits,
            prompt_template=prompt_template,
            name=name,
        )

    def _check_limits(self, limits: Mapping[str, int]) -> Dict[str, int]:
        checked: Dict[str, int] = {}
        for tool_name, limit in limits.items():
            if tool_name not in self._tools:
                raise ValueError(f"Limit set for unregistered tool '{tool_name}'.")
            if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
                raise ValueError(f"Limit for tool '{tool_name}' must be a non-negative int.")
            checked[tool_name] = limit
        return checked

    # ------------------------------------------------------------------ #
    # Read-only configuration
    # ------------------------------------------------------------------ #
    @property
    def name(self) -> str:
        return self._name

    @property
    def behavior(self) -> str:
        return self._behavior

    @property
    def tools(self) -> Mapping[str, Tool]:
        return self._tools

    @property
    def limits(self) -> Mapping[str, int]:
        return self._limits

    @property
    def output_schema(self) -> Dict[str, Any]:
        return self._extractor.json_schema

    # ------------------------------------------------------------------ #
    # Prompt
    # ------------------------------------------------------------------ #
    def _zero_usage(self) -> Dict[str, int]:
        return {tool_name: 0 for tool_name in self._tools}

    def render_system_prompt(self, usage: Mapping[str, int]) -> str:
        """Render the system prompt for the given usage counters."""
        return render_system_prompt(
            self._template,
            behavior=self._behavior,
            tools=self._tools,
            usage=usage,
            limits=self._limits,
            output_schema=self._extractor.json_schema,
        )

    def _initial_messages(self, run_input: Any) -> List[Message]:
        try:
            input_json = json.dumps(to_jsonable_python(run_input))
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise AgentError(f"Failed to serialize input: {exc}") from exc

        return [
            Message.system(self.render_system_prompt(self._zero_usage())),
            Message.user(input_json),
        ]

    # ------------------------------------------------------------------ #
    # Run
    # ------------------------------------------------------------------ #
    def run(self, run_input: Any, *, context: RunContext | None = None) -> AgentResult[T]:
        """
        Run the agent on *run_input* until the model finishes.

        Returns
        -------
        AgentResult
            The decoded output and the full transcript.

        Raises
        ------
        LimitReachedError
            Every limited tool was exhausted; ``result`` holds the partial result if any.
        ModelCallError, ToolNotFoundError, ToolInvocationError, PromptRenderError
            The run was aborted.
        InvalidResultSchemaError
            The final message did not match the output schema.
        RunCancelledError
            *context* was cancelled or its deadline passed.
        """
        context = context or RunContext()
        with bind_run_context(context):
            return self._run(run_input, context)

    def _run(self, run_input: Any, context: RunContext) -> AgentResult[T]:
        usage = self._zero_usage()
        messages = self._initial_messages(run_input)
        logger.info("Agent '%s' run started (tools=%s)", self._name, list(self._tools))

        closing_turn = False
        while True:
            if not closing_turn and is_limit_reached(usage, self._limits):
                logger.warning("Agent '%s' exhausted its tool limits: %s", self._name, usage)
                partial = self._try_extract(messages)
                if partial is not None:
                    raise LimitReachedError(usage, partial, messages)
                closing_turn = True

            message = self._call_model(messages, context)

            if closing_turn:
                return self._finish_closing_turn(messages, message, usage)

            if message.tool_calls:
                logger.info(
                    "Model requested %d tool calls: %s",
                    len(message.tool_calls),
                    [call.name for call in message.tool_calls],
                )
                try:
                    results = execute_tool_calls(self._tools, message.tool_calls, usage, context)
                except AgentError as exc:
                    exc.messages = [*messages, message]
                    raise
                message = message.model_copy(update={"tool_results": results})

            messages.append(message)

            if message.end:
                logger.info("Agent '%s' finished after %d messages", self._name, len(messages))
                return self._extractor.extract(messages)

            try:
                messages[0] = Message.system(self.render_system_prompt(usage))
            except AgentError as exc:
                exc.messages = list(messages)
                raise
            logger.debug("Refreshed system prompt with usage=%s", usage)

    def _call_model(self, messages: List[Message], context: RunContext) -> Message:
        try:
            context.check()
        except RunCancelledError as exc:
            exc.messages = list(messages)
            raise

        try:
            message = self._model_client.call(list(messages), context)
        except RunCancelledError as exc:
            exc.messages = list(messages)
            raise
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Model call failed: %s", exc)
            raise ModelCallError(f"LLM call error occurred: {exc}", messages) from exc

        if not isinstance(message, Message) or message.role != MessageRole.ASSISTANT:
            raise ModelCallError(
                f"Model client returned a non-assistant message: {message!r}", messages
            )
        return message

    def _try_extract(self, messages: List[Message]) -> AgentResult[T] | None:
        if messages[-1].role != MessageRole.ASSISTANT:
            return None
        try:
            return self._extractor.extract(messages)
        except InvalidResultSchemaError:
            return None

    def _finish_closing_turn(
        self, messages: List[Message], message: Message, usage: Dict[str, int]
    ) -> AgentResult[T]:
        """Handle the one turn granted after the limits ran out; tool calls are not executed."""
        if message.tool_calls:
            logger.warning(
                "Ignoring %d tool calls requested after limits were reached",
                len(message.tool_calls),
            )
        messages.append(message)

        try:
            result = self._extractor.extract(messages)
        except InvalidResultSchemaError as exc:
            raise LimitReachedError(usage, None, messages) from exc
        if message.end:
            logger.info("Agent '%s' finished in its closing turn", self._name)
            return result
        raise LimitReachedError(usage, result, messages)
