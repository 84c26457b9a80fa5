"""
Basic sanity tests for the tool executor.

Run with:
$ pytest -q
"""

from agentcore.agent.tool_executor import (
    execute_tool,
    execute_tool_calls,
)
from agentcore.core.schema import ToolCall
from agentcore.errors import (
    RunCancelledError,
    ToolInvocationError,
    ToolNotFoundError,
)
from agentcore.tools import function_tool


# This is a stub tool for testing purposes.
@function_tool(name="add")
def _add(a: int, b: int) -> int:
    """Return the sum of two integers (used only for tests)."""

    return a + b


@function_tool(name="boom")
def _boom() -> None:
    """Always fails."""

    raise RuntimeError("kaboom")


TOOLS = {"add": _add, "boom": _boom}


def test_execute_tool_success() -> None:
    """Executor should return the correct value when the tool is valid."""

    result = execute_tool(TOOLS, ToolCall(id="c1", name="add", args={"a": 2, "b": 3}))
    assert result.id == "c1"
    assert result.name == "add"
    assert result.content == 5


def test_execute_tool_missing() -> None:
    """Executor should raise *ToolNotFoundError* for an unknown tool."""

    try:
        execute_tool(TOOLS, ToolCall(id="c1", name="not_a_tool"))
    except ToolNotFoundError as exc:
        assert exc.tool_name == "not_a_tool"
        assert "not_a_tool" in str(exc)
    else:  # pragma: no cover
        raise AssertionError("ToolNotFoundError was not raised")


def test_execute_tool_bad_args() -> None:
    """Executor should raise *ToolInvocationError* for wrong arguments."""

    try:
        execute_tool(TOOLS, ToolCall(id="c1", name="add", args={"a": 2}))  # missing 'b'
    except ToolInvocationError as exc:
        assert exc.tool_name == "add"
        assert "invalid arguments" in str(exc)
    else:  # pragma: no cover
        raise AssertionError("ToolInvocationError was not raised")


def test_execute_tool_wraps_exception() -> None:
    """The tool's own exception is chained under *ToolInvocationError*."""

    try:
        execute_tool(TOOLS, ToolCall(id="c1", name="boom"))
    except ToolInvocationError as exc:
        assert isinstance(exc.__cause__, RuntimeError)
        assert "kaboom" in str(exc)
    else:  # pragma: no cover
        raise AssertionError("ToolInvocationError was not raised")


def test_batch_runs_in_order_and_counts_usage() -> None:
    """Each successful call increments its tool's counter exactly once."""

    usage = {"add": 0, "boom": 0}
    calls = [
        ToolCall(id="c1", name="add", args={"a": 1, "b": 1}),
        ToolCall(id="c2", name="add", args={"a": 2, "b": 2}),
    ]
    results = execute_tool_calls(TOOLS, calls, usage)

    assert [r.id for r in results] == ["c1", "c2"]
    assert [r.content for r in results] == [2, 4]
    assert usage == {"add": 2, "boom": 0}


def test_failed_batch_leaves_usage_untouched() -> None:
    """An unknown tool later in the batch discards the earlier results and increments."""

    usage = {"add": 0, "boom": 0}
    calls = [
        ToolCall(id="c1", name="add", args={"a": 1, "b": 1}),
        ToolCall(id="c2", name="missing"),
    ]
    try:
        execute_tool_calls(TOOLS, calls, usage)
    except ToolNotFoundError:
        pass
    else:  # pragma: no cover
        raise AssertionError("ToolNotFoundError was not raised")

    assert usage == {"add": 0, "boom": 0}


def test_cancellation_inside_tool_is_not_wrapped() -> None:
    """A tool that stops the run raises RunCancelledError, not a tool error."""

    @function_tool(name="stop")
    def _stop() -> None:
        raise RunCancelledError("Run was cancelled")

    try:
        execute_tool({"stop": _stop}, ToolCall(id="c1", name="stop"))
    except RunCancelledError:
        pass
    else:  # pragma: no cover
        raise AssertionError("RunCancelledError was not raised")
