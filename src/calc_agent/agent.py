"""
Tool-calling agent loop.

The agent alternates between two steps until the model answers in text:
1. Deciding: send the conversation to the model
2. Acting: if the model asked for tools, run them and append their results
"""

import asyncio
import json
import logging
from typing import Any, Literal, Sequence

from langfuse import get_client, observe

from .exceptions import MaxIterationsExceededError, ToolError
from .llm import ChatModel
from .messages import Message, ToolCall
from .tool import ToolRegistry

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant tasked with performing arithmetic on a set of inputs."
)

Route = Literal["action", "end"]


class Agent:
    """
    A simple AI agent that can use tools.

    Every call to `invoke` or `run` starts from a fresh conversation holding
    the system prompt; nothing is remembered between turns.
    """

    def __init__(
        self,
        model: ChatModel,
        registry: ToolRegistry,
        system_prompt: str = SYSTEM_PROMPT,
        max_iterations: int = 10,
    ):
        """
        Initialize the agent.

        Args:
            model: Chat model that decides whether to call tools
            registry: Tools the model may call
            system_prompt: System message placed at the start of every conversation
            max_iterations: Maximum model calls per turn before giving up
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.model = model
        self.registry = registry
        self.system_prompt = system_prompt
        self.max_iterations = max_iterations

    @staticmethod
    def should_continue(message: Message) -> Route:
        """Route to the tools if the model asked for any, otherwise stop."""
        if message.has_tool_calls:
            return "action"
        return "end"

    @observe(as_type="span")
    async def _execute_tool_call(self, tool_call: ToolCall) -> Message:
        """Run one tool call and wrap its outcome in a tool message."""
        get_client().update_current_span(
            name=f"tool:{tool_call.name}",
            input=tool_call.arguments,
        )
        try:
            result = await self.registry.execute(tool_call.name, tool_call.arguments)
        except ToolError as e:
            # Reported back to the model so it can correct itself
            logger.warning("Tool call %s failed: %s", tool_call.name, e)
            outcome: dict[str, Any] = {"error": str(e)}
            get_client().update_current_span(output=outcome, level="ERROR")
        else:
            logger.info("Tool %s(%s) -> %s", tool_call.name, tool_call.arguments, result)
            outcome = {"result": result}
            get_client().update_current_span(output=outcome)
        return Message.tool(tool_call_id=tool_call.id, content=json.dumps(outcome))

    async def _process_tool_calls(self, message: Message) -> list[Message]:
        """Run all tool calls of an assistant message, results in request order."""
        # gather keeps the order of its arguments, whatever order they finish in
        return list(
            await asyncio.gather(
                *[self._execute_tool_call(tool_call) for tool_call in message.tool_calls]
            )
        )

    @observe()
    async def invoke(self, messages: Sequence[Message]) -> list[Message]:
        """
        Run the agent loop over a new conversation.

        Args:
            messages: Messages that follow the system prompt (usually one user message)

        Returns:
            The whole conversation; its last message is the final answer

        Raises:
            MaxIterationsExceededError: If the model keeps calling tools past the cap
            ModelUnavailableError: If the model cannot be reached
            ModelResponseInvalidError: If a model reply cannot be parsed
        """
        get_client().update_current_trace(
            name=f"agent_run:{self.__class__.__name__}",
            input=[message.content for message in messages],
            metadata={"max_iterations": self.max_iterations},
        )
        conversation = [Message.system(self.system_prompt), *messages]
        tools = self.registry.tools()

        for iteration in range(1, self.max_iterations + 1):
            reply = await self.model.invoke(conversation, tools)
            conversation.append(reply)

            if self.should_continue(reply) == "end":
                logger.debug("Final answer after %d model call(s)", iteration)
                get_client().update_current_trace(output=reply.content)
                return conversation

            logger.debug(
                "Iteration %d: model requested %d tool call(s)",
                iteration,
                len(reply.tool_calls),
            )
            conversation.extend(await self._process_tool_calls(reply))

        error = MaxIterationsExceededError(self.max_iterations)
        get_client().update_current_span(level="ERROR", status_message=str(error))
        raise error

    async def run(self, user_input: str) -> str:
        """
        Answer one user message.

        Returns:
            The agent's final text response
        """
        conversation = await self.invoke([Message.user(user_input)])
        return conversation[-1].content or ""
