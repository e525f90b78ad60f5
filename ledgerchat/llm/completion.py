"""Vendor-neutral message and completion types.

The orchestrator only ever sees these. Each provider translates them to
and from its own wire format.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, Protocol

if TYPE_CHECKING:
    from ledgerchat.tools.base import ToolResult
    from ledgerchat.tools.registry import ToolSpec

Role = Literal["system", "user", "assistant", "tool"]


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model. Arguments are untrusted."""

    id: str
    name: str
    raw_arguments: str

    def parse_arguments(self) -> dict[str, Any]:
        """Decode the argument payload.

        An empty payload means no arguments. Raises ValueError when the
        payload is not valid JSON or not a JSON object.
        """
        if not self.raw_arguments.strip():
            return {}
        parsed = json.loads(self.raw_arguments)
        if not isinstance(parsed, dict):
            msg = "arguments must be a JSON object"
            raise ValueError(msg)
        return parsed


@dataclass
class Message:
    """One entry of the conversation sent to the completion endpoint."""

    role: Role
    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str | None = None
    is_error: bool = False

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str | None, tool_calls: list[ToolCall] | None = None) -> Message:
        return cls(role="assistant", content=content, tool_calls=list(tool_calls or []))

    @classmethod
    def tool_result(cls, call: ToolCall, result: ToolResult) -> Message:
        return cls(
            role="tool",
            content=result.to_content(),
            tool_call_id=call.id,
            is_error=result.is_error,
        )


@dataclass(frozen=True)
class TextReply:
    """The model answered in plain text."""

    text: str


@dataclass(frozen=True)
class ToolCallRequest:
    """The model wants tools run before it answers.

    ``text`` is whatever prose accompanied the calls, possibly empty.
    """

    calls: list[ToolCall]
    text: str = ""


Completion = TextReply | ToolCallRequest


class CompletionProvider(Protocol):
    """A completion endpoint that understands tool declarations."""

    name: str

    async def complete(self, messages: list[Message], tools: list[ToolSpec]) -> Completion:
        """Send the conversation and return the model's next step.

        Raises a ``CompletionError`` subclass on transport, credential,
        throttling or protocol failures.
        """
        ...
