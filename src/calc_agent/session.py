"""
Interactive read loop around the agent.

Reads one question per line from stdin and prints `Answer: <text>` for each,
until the line `exit` or end of input.
"""

import asyncio
import json
import logging
import sys
from typing import TextIO

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .agent import Agent
from .exceptions import AgentError
from .messages import Message

logger = logging.getLogger(__name__)

EXIT_SENTINEL = "exit"
DEMO_PROMPT = "Hi."


class Session:
    """
    Line-oriented session driver.

    Each input line is an independent turn: the agent starts a fresh
    conversation for it, and errors are reported without ending the session.
    """

    def __init__(
        self,
        agent: Agent,
        console: Console | None = None,
        stdin: TextIO | None = None,
        verbose: bool = False,
    ):
        """
        Args:
            agent: Agent that answers each line
            console: Where answers are printed (stdout by default)
            stdin: Where lines are read from (sys.stdin by default)
            verbose: If True, display tool calls and their arguments/results
        """
        self.agent = agent
        self.console = console or Console()
        self.stdin = stdin or sys.stdin
        self.verbose = verbose

    def _print_line(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def _format_tool_calls(self, conversation: list[Message]) -> Text:
        """Pair each tool call with its result, as the body of a panel."""
        results = {
            message.tool_call_id: json.loads(message.content or "{}")
            for message in conversation
            if message.role == "tool"
        }

        # Built with append, never markup: names and values come from the model
        body = Text()
        calls = [call for message in conversation for call in message.tool_calls]
        for i, call in enumerate(calls, 1):
            if i > 1:
                body.append("\n")
            body.append(f"Tool {i}:", style="yellow")
            body.append(" ")
            body.append(call.name, style="cyan")
            body.append("\n  ")
            body.append("Arguments:", style="dim")
            for key, value in call.arguments.items():
                body.append(f"\n    {key}: {value}")
            result = results.get(call.id)
            if result:
                body.append("\n  ")
                body.append("Result:", style="dim")
                for key, value in result.items():
                    body.append(f"\n    {key}: {value}")
        return body

    async def ask(self, user_input: str) -> str | None:
        """
        Run one turn and print its answer.

        Returns:
            The answer, or None if the turn failed
        """
        try:
            conversation = await self.agent.invoke([Message.user(user_input)])
        except AgentError as e:
            logger.error("Turn failed: %s", e)
            self.console.print(Text(f"Error: {e}", style="red"), soft_wrap=True)
            return None

        if self.verbose and any(message.has_tool_calls for message in conversation):
            self.console.print(
                Panel(
                    self._format_tool_calls(conversation),
                    title="Tool Calls",
                    border_style="yellow",
                    expand=False,
                )
            )

        answer = conversation[-1].content or ""
        self._print_line(f"Answer: {answer}")
        return answer

    async def _read_line(self) -> str | None:
        """Next stripped input line, or None at end of input."""
        # readline blocks, so keep it off the event loop
        line = await asyncio.to_thread(self.stdin.readline)
        if not line:
            return None
        return line.strip()

    async def run(self, demo_prompt: str | None = DEMO_PROMPT) -> None:
        """
        Main read loop.

        Args:
            demo_prompt: Question answered before reading input; None skips it
        """
        if demo_prompt:
            self._print_line(f"Question: {demo_prompt}")
            await self.ask(demo_prompt)

        while True:
            user_input = await self._read_line()
            if user_input is None or user_input == EXIT_SENTINEL:
                break

            # Skip empty input
            if not user_input:
                continue

            await self.ask(user_input)
