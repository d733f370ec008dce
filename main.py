"""
Interactive arithmetic assistant.

Answers a demo greeting, then one question per line until you type `exit`.

Do: uv run main.py --verbose to see tool calls and their results
To skip the demo greeting, do: uv run main.py --demo=False
"""

import asyncio
import logging
import sys

import fire
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from calc_agent import Agent, ModelClient, Session, Settings
from calc_agent.exceptions import ConfigurationError
from calc_agent.session import DEMO_PROMPT
from calc_agent.tools import default_registry


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def main(verbose: bool = False, demo: bool = True):
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        Console(stderr=True).print(Text(f"Configuration error: {e}", style="red"))
        sys.exit(1)

    configure_logging(settings.log_level)

    # Define the agent with the arithmetic tools
    agent = Agent(
        model=ModelClient(settings),
        registry=default_registry(),
        max_iterations=settings.max_iterations,
    )

    session = Session(agent=agent, verbose=verbose)
    try:
        asyncio.run(session.run(demo_prompt=DEMO_PROMPT if demo else None))
    except KeyboardInterrupt:
        # Ctrl-C mid-question or at the prompt ends the session quietly
        session.console.print(Text("\nGoodbye!", style="cyan"))


if __name__ == "__main__":
    fire.Fire(main)
