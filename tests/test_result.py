"""Tests for the result extractor."""

import pytest
from conftest import SumResult
from pydantic import (
    BaseModel,
    ConfigDict,
)
from typing_extensions import TypedDict

from agentcore.agent.result import ResultExtractor
from agentcore.core.schema import Message
from agentcore.errors import InvalidResultSchemaError


class ClosedSum(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sum: int


def _transcript(content: str) -> list[Message]:
    return [Message.system("sys"), Message.user("{}"), Message.assistant(content, end=True)]


def test_extract_valid_json() -> None:
    """Valid content decodes into the output type and keeps the transcript."""

    result = ResultExtractor(SumResult).extract(_transcript('{"sum": 8}'))

    assert result.data == SumResult(sum=8)
    assert len(result.messages) == 3


def test_extract_strips_code_fence() -> None:
    """A Markdown fence around the JSON is tolerated."""

    result = ResultExtractor(SumResult).extract(_transcript('```json\n{"sum": 3}\n```'))
    assert result.data.sum == 3


def test_structural_mismatch() -> None:
    """Missing fields are an invalid result schema."""

    with pytest.raises(InvalidResultSchemaError) as info:
        ResultExtractor(SumResult).extract(_transcript('{"total": 8}'))

    assert info.value.errors
    assert len(info.value.messages) == 3


def test_type_mismatch() -> None:
    """Type-incompatible JSON is reported with the same error kind."""

    with pytest.raises(InvalidResultSchemaError):
        ResultExtractor(SumResult).extract(_transcript('{"sum": "eight"}'))


def test_string_for_int_is_not_coerced() -> None:
    """A numeric string does not satisfy an integer field."""

    with pytest.raises(InvalidResultSchemaError) as info:
        ResultExtractor(SumResult).extract(_transcript('{"sum": "8"}'))

    assert info.value.errors[0]["loc"] == ("sum",)


def test_bool_for_int_is_not_coerced() -> None:
    """JSON booleans are not integers."""

    with pytest.raises(InvalidResultSchemaError):
        ResultExtractor(SumResult).extract(_transcript('{"sum": true}'))


def test_unknown_keys_follow_the_output_type() -> None:
    """Extra keys are dropped by default and rejected when the model forbids them."""

    lenient = ResultExtractor(SumResult).extract(_transcript('{"sum": 8, "note": "hi"}'))
    assert lenient.data == SumResult(sum=8)

    with pytest.raises(InvalidResultSchemaError):
        ResultExtractor(ClosedSum).extract(_transcript('{"sum": 8, "note": "hi"}'))


def test_not_json() -> None:
    """Plain prose is not a result."""

    with pytest.raises(InvalidResultSchemaError):
        ResultExtractor(SumResult).extract(_transcript("The sum is 8."))


def test_empty_transcript() -> None:
    """There is nothing to extract from no messages."""

    with pytest.raises(InvalidResultSchemaError, match="empty"):
        ResultExtractor(SumResult).extract([])


class Pair(TypedDict):
    left: int
    right: int


def test_schema_compiled_for_typed_dict() -> None:
    """Non-model output shapes work too."""

    extractor = ResultExtractor(Pair)

    assert extractor.json_schema["required"] == ["left", "right"]
    assert extractor.extract(_transcript('{"left": 1, "right": 2}')).data == {"left": 1, "right": 2}
