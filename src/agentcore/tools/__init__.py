"""
Tool definitions for agentcore.

A :class:`Tool` bundles a name, a JSON parameter schema advertised to the model, a description,
and an invocation function taking ``(call_id, args)``.  Agents receive their tools as a mapping at
construction time; there is no global registry.

Plain keyword-argument functions can be turned into tools with :func:`function_tool`:

    @function_tool()
    def add(num1: float, num2: float) -> dict:
        return {"sum": num1 + num2}
"""

import inspect
import logging
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    get_type_hints,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    create_model,
)

from agentcore.core.schema import JsonObject

logger = logging.getLogger(__name__)

ToolFunction = Callable[[str, JsonObject], Any]
"""Signature of a tool invocation function: ``fn(call_id, args) -> result``."""


class InvalidToolArgumentsError(ValueError):
    """Raised by a tool function when the arguments it received are unusable."""


class Tool(BaseModel):
    """A named, schema-described capability the model may invoke mid-conversation."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    parameters_schema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    fn: ToolFunction = Field(..., exclude=True)

    def __call__(self, call_id: str, args: JsonObject) -> Any:
        return self.fn(call_id, args)

    def describe(self) -> Dict[str, Any]:
        """Return the JSON-serializable view advertised to the model."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters_schema": self.parameters_schema,
        }


def freeze_tools(tools: Mapping[str, Tool] | None) -> Mapping[str, Tool]:
    """
    Validate a name -> Tool mapping and return a read-only copy.

    Raises
    ------
    ValueError
        If a key does not match the name of the tool registered under it.
    """
    frozen: Dict[str, Tool] = {}
    for name, tool in (tools or {}).items():
        if name != tool.name:
            raise ValueError(f"Tool registered as '{name}' is named '{tool.name}'.")
        logger.debug("Registering tool '%s'", name)
        frozen[name] = tool
    return MappingProxyType(frozen)


def _arguments_model(fn: Callable) -> type[BaseModel]:
    sig = inspect.signature(fn)
    type_hints = get_type_hints(fn)
    fields: Dict[str, Any] = {}
    for param_name, param in sig.parameters.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = type_hints.get(param_name, Any)
        default = ... if param.default is inspect.Parameter.empty else param.default
        fields[param_name] = (annotation, default)
    return create_model(f"{fn.__name__}_arguments", **fields)


def function_tool(
    name: str | None = None,
    description: str | None = None,
    parameters_schema: Dict[str, Any] | None = None,
) -> Callable[[Callable[..., Any]], Tool]:
    """
    Decorator that wraps a keyword-argument function in a :class:`Tool`.

    Parameters
    ----------
    name:
        Tool name; defaults to the function name.
    description:
        Defaults to the function docstring.
    parameters_schema:
        JSON schema advertised to the model; derived from the signature and type hints if omitted.

    Returns
    -------
    Callable
        A decorator returning the :class:`Tool`.  Arguments are validated against the signature
        before the call; a mismatch raises :class:`InvalidToolArgumentsError`.
    """

    def wrapper(func: Callable[..., Any]) -> Tool:
        args_model = _arguments_model(func)
        schema = parameters_schema
        if schema is None:
            schema = args_model.model_json_schema()
            schema.pop("title", None)

        def invoke(call_id: str, args: JsonObject) -> Any:
            try:
                validated = args_model.model_validate(args or {})
            except ValidationError as exc:
                raise InvalidToolArgumentsError(
                    f"Invalid arguments for call '{call_id}': {exc}"
                ) from exc
            return func(**{field: getattr(validated, field) for field in args_model.model_fields})

        return Tool(
            name=name or func.__name__,
            description=description if description is not None else inspect.getdoc(func) or "",
            parameters_schema=schema,
            fn=invoke,
        )

    return wrapper
