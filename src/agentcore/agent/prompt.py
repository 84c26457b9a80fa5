"""
System prompt construction.

The system message is a derived view: it is recomputed from the behavior, the tools, the usage
counters, the limits and the output schema every turn.  :func:`render_system_prompt` is pure, so the
same inputs always produce the same bytes.
"""

import json
import logging
from typing import (
    Any,
    Mapping,
)

from jinja2 import (
    Environment,
    StrictUndefined,
    TemplateSyntaxError,
    UndefinedError,
)

from agentcore.errors import PromptRenderError
from agentcore.tools import Tool

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = """\
You are an agent that should act as specified in escaped content <BEHAVIOR></BEHAVIOR>.
At the end of execution when you will be ready to finish, you should return a JSON object that \
matches the output schema.

TOOLS AVAILABLE TO USE:
{{ tools }}

CURRENT TOOLS USAGE:
{{ tools_usage }}

TOOLS USAGE LIMITS:
{{ calling_limits }}

OUTPUT SCHEMA:
{{ output_schema }}

<BEHAVIOR>
{{ behavior }}
</BEHAVIOR>
"""

_ENV = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)


class PromptTemplate:
    """A Jinja2 template that fails loudly on undefined variables."""

    def __init__(self, source: str = DEFAULT_SYSTEM_PROMPT) -> None:
        self.source = source
        try:
            self._template = _ENV.from_string(source)
        except TemplateSyntaxError as exc:
            raise PromptRenderError(f"Invalid prompt template syntax: {exc}") from exc

    def render(self, variables: Mapping[str, Any]) -> str:
        try:
            return self._template.render(**variables)
        except UndefinedError as exc:
            raise PromptRenderError(f"Missing variable in prompt template: {exc}") from exc
        except Exception as exc:  # pylint: disable=broad-except
            raise PromptRenderError(f"Failed to render prompt template: {exc}") from exc

    def __repr__(self) -> str:
        return f"PromptTemplate({self.source[:40]!r}...)"


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


def render_system_prompt(
    template: PromptTemplate,
    *,
    behavior: str,
    tools: Mapping[str, Tool],
    usage: Mapping[str, int],
    limits: Mapping[str, int],
    output_schema: Mapping[str, Any],
) -> str:
    """
    Render the system prompt from the five inputs that define it.

    Raises
    ------
    PromptRenderError
        If the template references an unknown variable, fails to render, or renders to an empty
        string.
    """
    tool_specs = [tools[name].describe() for name in sorted(tools)]
    prompt = template.render(
        {
            "tools": _dumps(tool_specs),
            "tools_usage": _dumps(dict(usage)),
            "calling_limits": _dumps(dict(limits)),
            "output_schema": _dumps(dict(output_schema)),
            "behavior": behavior,
        }
    )
    if not prompt.strip():
        raise PromptRenderError("System prompt cannot be empty")
    logger.debug("Rendered system prompt (%d chars, usage=%s)", len(prompt), dict(usage))
    return prompt
