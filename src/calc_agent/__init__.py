"""
calc_agent - an arithmetic assistant built on a tool-calling agent loop.

The model decides when to call the add, multiply and divide tools; the agent
runs them and feeds the results back until the model answers.
"""

from .agent import Agent
from .config import Settings
from .llm import ChatModel, ModelClient
from .messages import Message, ToolCall
from .session import Session
from .tool import Tool, ToolRegistry

# Make submodules accessible
from . import exceptions
from . import tools

__all__ = [
    "Agent",
    "ChatModel",
    "Message",
    "ModelClient",
    "Session",
    "Settings",
    "Tool",
    "ToolCall",
    "ToolRegistry",
    "exceptions",
    "tools",
]
