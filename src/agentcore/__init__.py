"""agentcore: drive an LLM through tool calls to a schema-validated result."""

from agentcore.agent.agent_loop import Agent
from agentcore.agent.model_client import (
    LLMConfig,
    ModelClient,
    load_model_client,
    register_model_client,
)
from agentcore.agent.prompt import (
    DEFAULT_SYSTEM_PROMPT,
    PromptTemplate,
)
from agentcore.agent.result import AgentResult
from agentcore.core.context import (
    RunContext,
    current_run_context,
)
from agentcore.core.schema import (
    Message,
    MessageRole,
    ToolCall,
    ToolResult,
)
from agentcore.errors import (
    AgentError,
    InvalidResultSchemaError,
    LimitReachedError,
    ModelCallError,
    PromptRenderError,
    RunCancelledError,
    ToolInvocationError,
    ToolNotFoundError,
)
from agentcore.tools import (
    InvalidToolArgumentsError,
    Tool,
    function_tool,
)

__all__ = [
    "Agent",
    "AgentError",
    "AgentResult",
    "DEFAULT_SYSTEM_PROMPT",
    "InvalidResultSchemaError",
    "InvalidToolArgumentsError",
    "LLMConfig",
    "LimitReachedError",
    "Message",
    "MessageRole",
    "ModelCallError",
    "ModelClient",
    "PromptRenderError",
    "PromptTemplate",
    "RunCancelledError",
    "RunContext",
    "Tool",
    "ToolCall",
    "ToolInvocationError",
    "ToolNotFoundError",
    "ToolResult",
    "current_run_context",
    "function_tool",
    "load_model_client",
    "register_model_client",
]
