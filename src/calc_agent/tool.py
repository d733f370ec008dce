"""
Tool definitions for the agent.

A Tool is a function the model can ask the agent to run. The ToolRegistry
holds the tools available to one agent, keyed by their unique name.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Type

from pydantic import BaseModel, ValidationError

from .exceptions import (
    DuplicateToolError,
    InvalidArgumentsError,
    ToolExecutionError,
    UnknownToolError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    """
    Represents a tool that the agent can use.

    Attributes:
        name: Unique identifier for the tool
        description: What the tool does (sent to the LLM)
        parameters: Pydantic BaseModel class describing the input parameters
        func: Python function called with a validated `parameters` instance
    """

    name: str
    description: str
    parameters: Type[BaseModel]
    func: Callable[[Any], Any]

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to OpenAI's tool format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters.model_json_schema(),
            },
        }

    async def execute(self, arguments: dict[str, Any]) -> Any:
        """
        Validate the arguments and run the tool.

        Raises:
            InvalidArgumentsError: If the arguments do not match `parameters`
            ToolExecutionError: If the tool function raises
        """
        try:
            params = self.parameters.model_validate(arguments)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc']) or 'arguments'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidArgumentsError(self.name, details) from e

        try:
            result = self.func(params)
            # Support both sync and async tool functions
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise ToolExecutionError(self.name, str(e) or type(e).__name__) from e
        return result


class ToolRegistry:
    """Name-keyed collection of tools, kept in registration order."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(
        self,
        name: str,
        description: str,
        parameters: Type[BaseModel],
        func: Callable[[Any], Any],
    ) -> Tool:
        """
        Add a tool to the registry.

        Raises:
            DuplicateToolError: If a tool with this name is already registered
        """
        if name in self._tools:
            raise DuplicateToolError(name)
        tool = Tool(name=name, description=description, parameters=parameters, func=func)
        self._tools[name] = tool
        logger.debug("Registered tool %s", name)
        return tool

    def lookup(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    async def execute(self, name: str, arguments: dict[str, Any]) -> Any:
        """Resolve a tool by name and run it with the given arguments."""
        return await self.lookup(name).execute(arguments)

    def tools(self) -> list[Tool]:
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
