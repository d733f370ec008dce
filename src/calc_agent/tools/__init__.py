"""
Built-in tools for calc_agent.

Import from here for convenience:
    from calc_agent.tools import arithmetic, default_registry
"""

from ..tool import ToolRegistry
from . import arithmetic


def default_registry() -> ToolRegistry:
    """A fresh registry holding the add, multiply and divide tools."""
    return arithmetic.register_arithmetic_tools(ToolRegistry())


__all__ = ["arithmetic", "default_registry"]
