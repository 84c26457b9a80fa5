"""Dispatches tool calls against an agent's tool registry and keeps usage counters."""

import logging
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Sequence,
)

from pydantic_core import to_jsonable_python

from agentcore.core.context import RunContext
from agentcore.core.schema import (
    ToolCall,
    ToolResult,
)
from agentcore.errors import (
    RunCancelledError,
    ToolInvocationError,
    ToolNotFoundError,
)
from agentcore.tools import (
    InvalidToolArgumentsError,
    Tool,
)

logger = logging.getLogger(__name__)


def execute_tool(tools: Mapping[str, Tool], call: ToolCall) -> ToolResult:
    """
    Look up ``call.name`` in *tools* and invoke it with the call id and arguments.

    Parameters
    ----------
    tools:
        The agent's read-only tool registry.
    call:
        The tool call requested by the model.

    Returns
    -------
    ToolResult
        The tool output converted to JSON-compatible data, correlated by ``call.id``.

    Raises
    ------
    ToolNotFoundError
        If the tool is not registered.
    ToolInvocationError
        If the invocation raises, including :class:`InvalidToolArgumentsError`.
    """

    tool = tools.get(call.name)
    if tool is None:
        raise ToolNotFoundError(call.name)

    try:
        logger.debug("Executing tool '%s' (id=%s) with args=%s", call.name, call.id, call.args)
        output: Any = tool(call.id, call.args)
        content = to_jsonable_python(output)
    except RunCancelledError:
        raise
    except InvalidToolArgumentsError as exc:
        logger.warning("Argument error while executing tool '%s': %s", call.name, exc)
        raise ToolInvocationError(call.name, f"invalid arguments: {exc}") from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error in tool '%s'", call.name)
        raise ToolInvocationError(call.name, str(exc)) from exc

    logger.info("Tool '%s' returned: %s", call.name, content)
    return ToolResult(id=call.id, name=call.name, content=content)


def execute_tool_calls(
    tools: Mapping[str, Tool],
    calls: Sequence[ToolCall],
    usage: Dict[str, int],
    context: RunContext | None = None,
) -> List[ToolResult]:
    """
    Run a batch of tool calls one at a time, in the order requested.

    *usage* is updated only if the whole batch succeeds: each successful call counts exactly once,
    and a failing batch leaves the counters untouched and its earlier results are discarded.
    """

    pending = dict(usage)
    results: List[ToolResult] = []
    for call in calls:
        if context is not None:
            context.check()
        results.append(execute_tool(tools, call))
        pending[call.name] = pending.get(call.name, 0) + 1

    usage.update(pending)
    return results
