"""
Error hierarchy for calc_agent.

Everything raised on purpose by this package inherits from AgentError, so the
session driver can report a failed turn and keep reading input.
"""


class AgentError(Exception):
    """Base exception for all calc_agent errors."""


class ConfigurationError(AgentError):
    """Raised when a required setting is missing or malformed."""


class ToolError(AgentError):
    """Base for failures while resolving or running a tool.

    These are recoverable inside a turn: the agent reports them back to the
    model as a tool message.
    """

    def __init__(self, name: str, detail: str) -> None:
        self.name = name
        self.detail = detail
        super().__init__(detail)


class UnknownToolError(ToolError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"Tool '{name}' not found")


class InvalidArgumentsError(ToolError):
    """Raised when tool arguments do not match the tool's parameter schema."""

    def __init__(self, name: str, detail: str) -> None:
        super().__init__(name, f"Invalid arguments for tool '{name}': {detail}")


class ToolExecutionError(ToolError):
    """Raised when the tool function itself fails."""

    def __init__(self, name: str, detail: str) -> None:
        super().__init__(name, f"Tool '{name}' failed: {detail}")


class DuplicateToolError(ToolError):
    """Raised when registering a tool name twice."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"Tool '{name}' is already registered")


class ModelUnavailableError(AgentError):
    """Raised when the model API cannot be reached (network, auth, rate limit)."""


class ModelResponseInvalidError(AgentError):
    """Raised when a model response cannot be parsed into an assistant message."""


class MaxIterationsExceededError(AgentError):
    """Raised when the agent loop hits its iteration cap without a final answer."""

    def __init__(self, max_iterations: int) -> None:
        self.max_iterations = max_iterations
        super().__init__(
            f"Maximum iterations ({max_iterations}) reached. "
            "The model kept requesting tools without giving a final answer."
        )
