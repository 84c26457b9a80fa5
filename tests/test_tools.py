"""Tests for tool definitions and the function_tool decorator."""

import pytest

from agentcore.tools import (
    InvalidToolArgumentsError,
    Tool,
    freeze_tools,
    function_tool,
)
from agentcore.tools.calculator import add_tool


@function_tool()
def greet(name: str, punctuation: str = "!") -> str:
    """Say hello."""
    return f"Hello, {name}{punctuation}"


def test_schema_derived_from_signature() -> None:
    """Required and optional parameters show up in the JSON schema."""

    assert greet.name == "greet"
    assert greet.description == "Say hello."
    assert greet.parameters_schema["required"] == ["name"]
    assert greet.parameters_schema["properties"]["name"]["type"] == "string"
    assert greet.parameters_schema["properties"]["punctuation"]["default"] == "!"


def test_invoke_with_call_id_and_args() -> None:
    """Tools are called with (call_id, args)."""

    assert greet("c1", {"name": "Ada"}) == "Hello, Ada!"


def test_bad_arguments() -> None:
    """Missing or ill-typed arguments raise InvalidToolArgumentsError."""

    with pytest.raises(InvalidToolArgumentsError):
        greet("c1", {})
    with pytest.raises(InvalidToolArgumentsError):
        add_tool("c1", {"num1": "three", "num2": 5})


def test_calculator_add() -> None:
    """The demo tool adds its two numbers."""

    assert add_tool("c1", {"num1": 3, "num2": 5}) == {"sum": 8}
    assert add_tool.parameters_schema["required"] == ["num1", "num2"]


def test_describe_excludes_function() -> None:
    """What the model sees is name, description and parameter schema."""

    assert set(add_tool.describe()) == {"name", "description", "parameters_schema"}
    assert "fn" not in add_tool.model_dump()


def test_freeze_tools_checks_names() -> None:
    """A tool must be registered under its own name."""

    with pytest.raises(ValueError):
        freeze_tools({"plus": add_tool})

    frozen = freeze_tools({"add": add_tool})
    with pytest.raises(TypeError):
        frozen["greet"] = greet  # type: ignore[index]


def test_tool_name_required() -> None:
    """Empty tool names are rejected."""

    with pytest.raises(ValueError):
        Tool(name="", fn=lambda call_id, args: None)
