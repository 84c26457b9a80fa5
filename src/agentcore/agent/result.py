"""Validates the final assistant message and decodes it into the caller's output type."""

import logging
import re
from typing import (
    Any,
    Dict,
    Generic,
    List,
    Sequence,
    TypeVar,
)

from pydantic import (
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
)

from agentcore.core.schema import Message
from agentcore.errors import InvalidResultSchemaError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class AgentResult(BaseModel, Generic[T]):
    """Decoded output of a run together with the full conversation transcript."""

    data: T
    messages: List[Message] = Field(default_factory=list)


def _strip_code_fence(content: str) -> str:
    """LLMs like to wrap JSON in ```json fences; drop a fence that surrounds the whole content."""
    content = content.strip()
    match = _CODE_FENCE.match(content)
    if match:
        return match.group(1)
    return content


class ResultExtractor(Generic[T]):
    """
    Holds the output schema compiled once for an agent.

    The extractor has no per-run state, so the same instance serves every run and can be applied to
    any conversation state (normal termination and limit exhaustion alike).
    """

    def __init__(self, output_type: type[T]) -> None:
        self.output_type = output_type
        self._adapter: TypeAdapter[T] = TypeAdapter(output_type)
        self.json_schema: Dict[str, Any] = self._adapter.json_schema()

    def extract(self, messages: Sequence[Message]) -> AgentResult[T]:
        """
        Validate the content of the last message and decode it.

        Raises
        ------
        InvalidResultSchemaError
            If there are no messages, or the content is not valid JSON for the output schema.  Types
            are checked strictly; unknown keys are ignored unless the output type forbids them.  The
            pydantic ``ValidationError`` is chained and its details stored in ``errors``.
        """
        if not messages:
            raise InvalidResultSchemaError("messages cannot be empty", messages)

        content = _strip_code_fence(messages[-1].content)
        try:
            # No coercion: "8" or true is not an int
            data = self._adapter.validate_json(content, strict=True)
        except ValidationError as exc:
            logger.debug("Final message failed validation: %s", exc)
            raise InvalidResultSchemaError(
                str(exc), messages, errors=exc.errors(include_url=False)
            ) from exc

        return AgentResult(data=data, messages=list(messages))
