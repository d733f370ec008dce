"""
Model client adapter.

Wraps an OpenAI-compatible chat-completions API (Gemini's by default) and
turns its responses into assistant Messages.
"""

import json
import logging
import uuid
from typing import Any, Protocol, Sequence

import openai
from langfuse import get_client, observe
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion, ChatCompletionMessage
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import Settings
from .exceptions import ModelResponseInvalidError, ModelUnavailableError
from .messages import Message, ToolCall
from .tool import Tool

logger = logging.getLogger(__name__)

# Failures worth another attempt; everything else fails the call immediately
TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class ChatModel(Protocol):
    """What the agent loop needs from a model."""

    async def invoke(self, conversation: Sequence[Message], tools: Sequence[Tool]) -> Message:
        ...


class ModelClient:
    """
    Chat model backed by an OpenAI-compatible endpoint.

    Transient failures are retried with exponential backoff:
    - Up to `settings.max_retries` attempts per call
    - Wait grows from `settings.retry_min_wait` to `settings.retry_max_wait`
    """

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None):
        """
        Args:
            settings: Model, endpoint, credentials and retry configuration
            client: Pre-built API client (a fresh AsyncOpenAI if omitted)
        """
        self.settings = settings
        self.client = client or AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            # Retries are handled here, not by the SDK
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self.settings.model

    @observe(as_type="generation")
    async def invoke(self, conversation: Sequence[Message], tools: Sequence[Tool]) -> Message:
        """
        Send the conversation and tool schemas, return the assistant's reply.

        Raises:
            ModelUnavailableError: If the API cannot be reached after retries
            ModelResponseInvalidError: If the reply cannot be parsed
        """
        messages = [message.to_openai_format() for message in conversation]
        openai_tools = [tool.to_openai_format() for tool in tools]
        get_client().update_current_generation(
            name="llm_call",
            input=messages,
            model=self.model,
            metadata={"tools": [tool.name for tool in tools]},
        )

        response = await self._create(messages, openai_tools)
        message = self._parse(response)

        usage = getattr(response, "usage", None)
        get_client().update_current_generation(
            output=message.to_openai_format(),
            usage_details={
                "input": usage.prompt_tokens,
                "output": usage.completion_tokens,
            }
            if usage
            else None,
        )
        return message

    async def _create(
        self, messages: list[dict[str, Any]], tools: list[dict[str, Any]]
    ) -> ChatCompletion:
        request: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.settings.max_output_tokens,
        }
        if tools:
            request["tools"] = tools

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_retries),
            wait=wait_exponential(
                multiplier=1,
                min=self.settings.retry_min_wait,
                max=self.settings.retry_max_wait,
            ),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    logger.debug("Calling %s with %d messages", self.model, len(messages))
                    response = await self.client.chat.completions.create(**request)
        except openai.APIError as e:
            raise ModelUnavailableError(f"Model API request failed: {e}") from e
        return response

    def _parse(self, response: ChatCompletion) -> Message:
        choices = getattr(response, "choices", None)
        if not choices:
            raise ModelResponseInvalidError("Model response has no choices")
        message: ChatCompletionMessage | None = getattr(choices[0], "message", None)
        if message is None:
            raise ModelResponseInvalidError("Model response has no message")

        tool_calls = tuple(self._parse_tool_call(tc) for tc in (message.tool_calls or []))
        content = message.content
        if content is not None and not isinstance(content, str):
            raise ModelResponseInvalidError(
                f"Expected text content, got {type(content).__name__}"
            )
        return Message.assistant(content=content, tool_calls=tool_calls)

    def _parse_tool_call(self, tool_call: Any) -> ToolCall:
        function = getattr(tool_call, "function", None)
        if function is None or not getattr(function, "name", None):
            raise ModelResponseInvalidError("Tool call without a function name")

        try:
            arguments = json.loads(function.arguments or "{}")
        except json.JSONDecodeError as e:
            raise ModelResponseInvalidError(
                f"Arguments for tool '{function.name}' are not valid JSON: {e}"
            ) from e
        if not isinstance(arguments, dict):
            raise ModelResponseInvalidError(
                f"Arguments for tool '{function.name}' must be a JSON object"
            )

        # Some OpenAI-compatible endpoints leave the id empty
        call_id = getattr(tool_call, "id", None) or f"call_{uuid.uuid4().hex}"
        return ToolCall(id=call_id, name=function.name, arguments=arguments)
