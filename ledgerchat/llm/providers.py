"""Completion endpoint adapters for OpenAI and Anthropic.

Each adapter owns an injected SDK client, serializes the registry's
ToolSpecs into the vendor's tool-declaration format, translates the
neutral message list, and maps SDK exceptions onto ``CompletionError``.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import anthropic
import openai

from ledgerchat.errors import (
    CompletionError,
    CompletionTimeoutError,
    ConfigurationError,
    UpstreamThrottledError,
)
from ledgerchat.llm.completion import (
    Completion,
    Message,
    TextReply,
    ToolCall,
    ToolCallRequest,
)

if TYPE_CHECKING:
    from ledgerchat.config import Settings
    from ledgerchat.tools.registry import ToolSpec

logger = logging.getLogger(__name__)


# -- OpenAI --------------------------------------------------------------------


def openai_tool_schema(spec: ToolSpec) -> dict[str, Any]:
    """Build a Chat Completions function-tool declaration."""
    return {
        "type": "function",
        "function": {
            "name": spec.name,
            "description": spec.description,
            "parameters": spec.parameters,
        },
    }


def _openai_message(message: Message) -> dict[str, Any]:
    if message.role == "tool":
        return {
            "role": "tool",
            "tool_call_id": message.tool_call_id,
            "content": message.content or "",
        }
    if message.role == "assistant" and message.tool_calls:
        return {
            "role": "assistant",
            "content": message.content,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.raw_arguments},
                }
                for call in message.tool_calls
            ],
        }
    return {"role": message.role, "content": message.content or ""}


class OpenAIProvider:
    """Chat Completions adapter."""

    name = "openai"

    def __init__(self, client: openai.AsyncOpenAI, *, model: str, max_tokens: int) -> None:
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenAIProvider:
        if not settings.openai_api_key:
            msg = "OPENAI_API_KEY is not set"
            raise ConfigurationError(msg)
        client = openai.AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.request_timeout,
        )
        return cls(client, model=settings.openai_model, max_tokens=settings.max_tokens)

    async def complete(self, messages: list[Message], tools: list[ToolSpec]) -> Completion:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [_openai_message(m) for m in messages],
        }
        if tools:
            kwargs["tools"] = [openai_tool_schema(t) for t in tools]
            kwargs["tool_choice"] = "auto"

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise ConfigurationError(str(exc)) from exc
        except openai.RateLimitError as exc:
            raise UpstreamThrottledError(str(exc)) from exc
        except openai.APITimeoutError as exc:
            raise CompletionTimeoutError(str(exc)) from exc
        except openai.APIError as exc:
            raise CompletionError(str(exc)) from exc

        if not response.choices:
            msg = "OpenAI response contained no choices"
            raise CompletionError(msg)

        choice = response.choices[0]
        text = choice.message.content or ""

        if choice.finish_reason != "tool_calls" or not choice.message.tool_calls:
            return TextReply(text=text)

        calls = [
            ToolCall(id=tc.id, name=tc.function.name, raw_arguments=tc.function.arguments or "")
            for tc in choice.message.tool_calls
            if tc.type == "function"
        ]
        if not calls:
            return TextReply(text=text)
        return ToolCallRequest(calls=calls, text=text)


# -- Anthropic -----------------------------------------------------------------


def anthropic_tool_schema(spec: ToolSpec) -> dict[str, Any]:
    """Build a Messages API tool declaration."""
    return {
        "name": spec.name,
        "description": spec.description,
        "input_schema": spec.parameters,
    }


def _tool_use_input(call: ToolCall) -> dict[str, Any]:
    try:
        return call.parse_arguments()
    except ValueError:
        # The model's own malformed payload; echo it back as an empty input
        return {}


def _anthropic_messages(messages: list[Message]) -> tuple[str, list[dict[str, Any]]]:
    """Split out the system prompt and fold tool results into user turns."""
    system_parts: list[str] = []
    result: list[dict[str, Any]] = []

    for message in messages:
        if message.role == "system":
            system_parts.append(message.content or "")
        elif message.role == "tool":
            block = {
                "type": "tool_result",
                "tool_use_id": message.tool_call_id,
                "content": message.content or "",
                "is_error": message.is_error,
            }
            # Consecutive results for one assistant turn share a user message
            last = result[-1] if result else None
            if last and last["role"] == "user" and isinstance(last["content"], list):
                last["content"].append(block)
            else:
                result.append({"role": "user", "content": [block]})
        elif message.role == "assistant" and message.tool_calls:
            content: list[dict[str, Any]] = []
            if message.content:
                content.append({"type": "text", "text": message.content})
            for call in message.tool_calls:
                content.append({
                    "type": "tool_use",
                    "id": call.id,
                    "name": call.name,
                    "input": _tool_use_input(call),
                })
            result.append({"role": "assistant", "content": content})
        else:
            result.append({"role": message.role, "content": message.content or ""})

    return "\n\n".join(system_parts), result


class AnthropicProvider:
    """Messages API adapter."""

    name = "anthropic"

    def __init__(self, client: anthropic.AsyncAnthropic, *, model: str, max_tokens: int) -> None:
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> AnthropicProvider:
        if not settings.anthropic_api_key:
            msg = "ANTHROPIC_API_KEY is not set"
            raise ConfigurationError(msg)
        client = anthropic.AsyncAnthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.request_timeout,
        )
        return cls(client, model=settings.anthropic_model, max_tokens=settings.max_tokens)

    async def complete(self, messages: list[Message], tools: list[ToolSpec]) -> Completion:
        system, api_messages = _anthropic_messages(messages)
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": api_messages,
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = [anthropic_tool_schema(t) for t in tools]

        try:
            response = await self._client.messages.create(**kwargs)
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as exc:
            raise ConfigurationError(str(exc)) from exc
        except anthropic.RateLimitError as exc:
            raise UpstreamThrottledError(str(exc)) from exc
        except anthropic.APITimeoutError as exc:
            raise CompletionTimeoutError(str(exc)) from exc
        except anthropic.APIError as exc:
            raise CompletionError(str(exc)) from exc

        text = "".join(b.text for b in response.content if b.type == "text")
        calls = [
            ToolCall(id=b.id, name=b.name, raw_arguments=json.dumps(b.input))
            for b in response.content
            if b.type == "tool_use"
        ]
        if not calls:
            return TextReply(text=text)
        return ToolCallRequest(calls=calls, text=text)


# -- Factory -------------------------------------------------------------------

_PROVIDERS: dict[str, type[OpenAIProvider] | type[AnthropicProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}


def create_provider(settings: Settings) -> OpenAIProvider | AnthropicProvider:
    """Build the provider selected by LLM_PROVIDER.

    Raises ConfigurationError for an unknown provider or a missing API key.
    """
    name = settings.get_provider_name()
    provider_cls = _PROVIDERS.get(name)
    if provider_cls is None:
        msg = f"Unknown LLM_PROVIDER: {settings.llm_provider!r}"
        raise ConfigurationError(msg)

    provider = provider_cls.from_settings(settings)
    logger.info("Completion provider: %s (model %s)", provider.name, provider.model)
    return provider
