"""Calculator tool used by the CLI demo agent."""

from typing import Dict

from agentcore.tools import function_tool

ADD_PARAMETERS_SCHEMA = {
    "type": "object",
    "properties": {
        "num1": {"type": "number"},
        "num2": {"type": "number"},
    },
    "required": ["num1", "num2"],
}


@function_tool(name="add", parameters_schema=ADD_PARAMETERS_SCHEMA)
def add_tool(num1: float, num2: float) -> Dict[str, float]:
    """Adds two numbers together."""
    return {"sum": num1 + num2}
