"""
Runtime configuration.

Settings are read once at startup (from the environment and an optional .env
file) and handed to the components that need them.
"""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.0-flash"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """
    Configuration for the model client and the agent loop.

    Attributes:
        api_key: Key for the chat-completions API
        base_url: OpenAI-compatible endpoint (Gemini by default)
        model: Model identifier sent with every request
        max_output_tokens: Upper bound on tokens generated per model call
        request_timeout: Seconds before a single request is abandoned
        max_retries: Attempts per model call for transient failures
        retry_min_wait: Lower bound of the exponential backoff, in seconds
        retry_max_wait: Upper bound of the exponential backoff, in seconds
        max_iterations: Model calls allowed per turn before giving up
        log_level: Level name for the root logger
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1, repr=False)
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    max_output_tokens: int = Field(default=2048, gt=0)
    request_timeout: float = Field(default=60.0, gt=0)
    max_retries: int = Field(default=3, ge=1)
    retry_min_wait: float = Field(default=2.0, ge=0)
    retry_max_wait: float = Field(default=10.0, ge=0)
    max_iterations: int = Field(default=10, ge=1)
    log_level: LogLevel = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            dotenv: Load a .env file from the working directory first

        Raises:
            ConfigurationError: If the API key is missing or a value is malformed
        """
        if dotenv:
            load_dotenv()

        api_key = os.getenv("GOOGLE_GENAI_API_KEY")
        if not api_key:
            raise ConfigurationError(
                "GOOGLE_GENAI_API_KEY is not set. Export it or add it to a .env file."
            )

        env_fields = {
            "base_url": "LLM_BASE_URL",
            "model": "LLM_MODEL",
            "max_output_tokens": "LLM_MAX_OUTPUT_TOKENS",
            "request_timeout": "LLM_TIMEOUT",
            "max_retries": "LLM_MAX_RETRIES",
            "max_iterations": "AGENT_MAX_ITERATIONS",
            "log_level": "LOG_LEVEL",
        }
        values = {
            field: os.environ[var] for field, var in env_fields.items() if os.getenv(var)
        }

        try:
            return cls(api_key=api_key, **values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
