"""
agentcore entry point.

This file handles startup concerns (arg-parsing, env setup, logging) and runs the calculator demo
agent: the model must use the ``add`` tool once and answer with ``{"sum": <int>}``.
"""

import argparse
import logging
import sys

from pydantic import BaseModel

from agentcore.agent.agent_loop import Agent
from agentcore.agent.model_client import LLMConfig
from agentcore.config import settings
from agentcore.core.context import RunContext
from agentcore.errors import (
    AgentError,
    LimitReachedError,
)
from agentcore.tools.calculator import add_tool

logger = logging.getLogger(__name__)

CALCULATOR_BEHAVIOR = (
    "You are a calculator agent. Use the add tool to calculate the sum of the two provided "
    "numbers. Return the result in the specified JSON format."
)


class AddNumbers(BaseModel):
    """Input of the calculator agent."""

    num1: int
    num2: int


class SumResult(BaseModel):
    """Output of the calculator agent."""

    sum: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_calculator_agent(config: LLMConfig) -> Agent[SumResult]:
    """Calculator agent allowed a single ``add`` call per run."""
    return Agent.from_config(
        config,
        name="calculator",
        behavior=CALCULATOR_BEHAVIOR,
        output_type=SumResult,
        tools={add_tool.name: add_tool},
        limits={add_tool.name: 1},
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the calculator agent and print its JSON result."""
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(description="Run the agentcore calculator demo")
    parser.add_argument("num1", type=int)
    parser.add_argument("num2", type=int)
    parser.add_argument(
        "--backend",
        choices=["openai", "anthropic"],
        type=str.lower,
        default=settings.MODEL_BACKEND,
        help="Model backend (default from env: %(default)s)",
    )
    parser.add_argument("--model", default=None, help="Override the backend's default model")
    parser.add_argument(
        "--timeout", type=float, default=120.0, help="Run deadline in seconds (default: 120)"
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        type=str.lower,
        default=settings.LOG_LEVEL,
        help="Logging level (default from env: %(default)s)",
    )
    args = parser.parse_args(argv)

    _init_logging(args.log_level)

    settings.MODEL_BACKEND = args.backend
    config = LLMConfig.from_settings(settings)
    if args.model:
        config = config.model_copy(update={"model": args.model})
    logger.info("Starting calculator agent [%s/%s]", config.backend, config.model)

    try:
        agent = build_calculator_agent(config)
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("Failed to create the %s model client: %s", config.backend, exc)
        return 1

    try:
        result = agent.run(
            AddNumbers(num1=args.num1, num2=args.num2), context=RunContext(timeout=args.timeout)
        )
    except LimitReachedError as exc:
        if exc.result is None:
            logger.error("Tool limit reached without a usable result: %s", exc)
            return 1
        logger.warning("Tool limit reached, using partial result")
        result = exc.result
    except AgentError as exc:
        logger.error("Agent run failed: %s", exc)
        return 1

    print(result.data.model_dump_json())
    return 0


if __name__ == "__main__":
    sys.exit(main())
