"""
Arithmetic tools for the agent.

Each tool takes two numbers `a` and `b`. Division by zero is an error
(ToolExecutionError once it passes through Tool.execute), never inf or nan.
"""

from pydantic import BaseModel, Field

from ..tool import ToolRegistry


class BinaryOperands(BaseModel):
    """Defines the expected arguments for a two-operand arithmetic tool."""

    a: float = Field(description="first number")
    b: float = Field(description="second number")

    # Strict: numeric strings and booleans are rejected, JSON ints still pass
    model_config = {
        "strict": True,
        "json_schema_extra": {
            "examples": [
                {"a": 2, "b": 3},
                {"a": 10, "b": 4},
            ]
        }
    }


def add(params: BinaryOperands) -> float:
    return params.a + params.b


def multiply(params: BinaryOperands) -> float:
    return params.a * params.b


def divide(params: BinaryOperands) -> float:
    if params.b == 0:
        raise ZeroDivisionError("division by zero")
    return params.a / params.b


def register_arithmetic_tools(registry: ToolRegistry) -> ToolRegistry:
    """Register add, multiply and divide on `registry` and return it."""
    registry.register(
        name="add",
        description="Add two numbers together",
        parameters=BinaryOperands,
        func=add,
    )
    registry.register(
        name="multiply",
        description="Multiply two numbers together",
        parameters=BinaryOperands,
        func=multiply,
    )
    registry.register(
        name="divide",
        description="Divide two numbers",
        parameters=BinaryOperands,
        func=divide,
    )
    return registry


__all__ = ["BinaryOperands", "add", "multiply", "divide", "register_arithmetic_tools"]
